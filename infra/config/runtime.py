"""
Runtime configuration access.

The only secret is the WebPageTest API key, read from WPT_APIKEY.
A .env file in the working directory is loaded first if present.
"""

import os
from dotenv import find_dotenv, load_dotenv

from .schemas import ConfigError

API_KEY_ENV = "WPT_APIKEY"


def get_api_key() -> str:
    """
    Get the WebPageTest API key.

    Raises:
        ConfigError: WPT_APIKEY is not set
    """
    load_dotenv(find_dotenv(usecwd=True))
    key = os.getenv(API_KEY_ENV)
    if not key:
        raise ConfigError(
            f"{API_KEY_ENV} was undefined. Please provide it as an environment variable"
        )
    return key
