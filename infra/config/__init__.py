"""
Configuration management for wpt-gauntlet.

Layered config:
- Command-line flags
- Discovered config file (.wpt-gauntletrc, pyproject.toml, ...)
- Schema defaults

Usage:
    from infra.config import load_run_config, get_api_key

    config = load_run_config({"url": "https://example.org", "runs": 44})
    api_key = get_api_key()
"""

from .schemas import (
    RunConfig,
    ConfigError,
    RESULT_TYPES,
)

from .run_config import (
    find_config_file,
    load_config_file,
    resolve_config,
    load_run_config,
)

from .runtime import get_api_key, API_KEY_ENV


__all__ = [
    # Schemas
    "RunConfig",
    "ConfigError",
    "RESULT_TYPES",
    # Discovery / merging
    "find_config_file",
    "load_config_file",
    "resolve_config",
    "load_run_config",
    # Secrets
    "get_api_key",
    "API_KEY_ENV",
]
