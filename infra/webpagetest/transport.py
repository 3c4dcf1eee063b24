#!/usr/bin/env python3
import logging
import requests
from typing import Dict, Any, Optional

from infra.webpagetest.errors import WebPageTestError

DEFAULT_HOST = "https://www.webpagetest.org"


class WebPageTestTransport:
    def __init__(
        self,
        api_key: str,
        host: str = DEFAULT_HOST,
        logger: Optional[logging.Logger] = None,
        session: Optional[requests.Session] = None
    ):
        self.logger = logger or logging.getLogger(__name__)
        self.api_key = api_key
        self.host = host.rstrip('/')
        self.session = session or requests.Session()

    def get(self, endpoint: str, params: Optional[Dict[str, Any]] = None, timeout: int = 60) -> Dict[str, Any]:
        query = dict(params or {})
        query['k'] = self.api_key
        query['f'] = 'json'

        url = f"{self.host}/{endpoint}"
        self.logger.debug(f"WebPageTest request: {endpoint} test={query.get('test', '-')}")

        headers = {
            "X-WPT-API-KEY": self.api_key,
            "Accept": "application/json",
        }

        response = self.session.get(
            url,
            headers=headers,
            params=query,
            timeout=timeout
        )

        self.logger.debug(f"WebPageTest response: {endpoint} status_code={response.status_code}")

        response.raise_for_status()

        try:
            return response.json()
        except ValueError as e:
            raise WebPageTestError(f"Non-JSON response from {endpoint}: {response.text[:200]}") from e

    def close(self):
        self.session.close()
