# src/ledger_explorer/connection/rest_client.py

import logging
import time
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import requests

from .exceptions import (
    DomainError,
    RateLimitError,
    ServiceUnavailableError,
    TransportError,
)

logger = logging.getLogger(__name__)

DEFAULT_SERVER_URL = "https://bithomp.com"

# Detail flags requested for a full account lookup.
ADDRESS_DETAIL_FLAGS = (
    "username",
    "service",
    "verifiedDomain",
    "parent",
    "nickname",
    "inception",
    "flare",
    "blacklist",
    "payString",
    "ledgerInfo",
    "xamanMeta",
    "bithomp",
)


def format_ledger_timestamp(instant: datetime) -> str:
    """Render an aware datetime the way the address endpoint expects it (ISO-8601, UTC, ms)."""
    utc = instant.astimezone(timezone.utc)
    return utc.strftime("%Y-%m-%dT%H:%M:%S.") + f"{utc.microsecond // 1000:03d}Z"


class ExplorerRESTClient:
    def __init__(
        self,
        server_url: str = DEFAULT_SERVER_URL,
        api_token: Optional[str] = None,
        request_timeout: float = 10.0,
        development: bool = False,
        session_token: Optional[str] = None,
    ):
        self.server_url = server_url.rstrip("/")
        self.request_timeout = request_timeout
        self.development = development

        self.session = requests.Session()
        self.session.headers.update({"User-Agent": "LedgerExplorer/0.1.0"})
        if development and api_token:
            self.session.headers["x-bithomp-token"] = api_token
        if session_token:
            self.set_session_token(session_token)

    @property
    def base_url(self) -> str:
        if self.development:
            return f"{self.server_url}/api/"
        return f"{self.server_url}/api/cors/"

    def set_session_token(self, token: Optional[str]) -> None:
        """Attach (or with a falsy token, remove) the bearer token for signed-in requests."""
        if token:
            cleaned = token.replace('"', "").replace("'", "")
            self.session.headers["Authorization"] = f"Bearer {cleaned}"
        else:
            self.session.headers.pop("Authorization", None)

    def _get_url(self, endpoint: str) -> str:
        return self.base_url + endpoint.lstrip("/")

    def get(
        self,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        bypass_cache: bool = False,
    ) -> Dict[str, Any]:
        """
        Issues a GET request and returns the decoded JSON mapping.

        A cache-bypassing request carries a unique ``timestamp`` parameter so that
        intermediary caches cannot serve a stored response.
        """
        url = self._get_url(endpoint)
        query = dict(params or {})
        headers = {}
        if bypass_cache:
            query["timestamp"] = int(time.time() * 1000)
            headers["Cache-Control"] = "no-cache"

        try:
            response = self.session.get(
                url, params=query, headers=headers, timeout=self.request_timeout
            )
        except requests.exceptions.Timeout as e:
            raise TransportError(f"Request timed out: {e}") from e
        except requests.exceptions.RequestException as e:
            raise TransportError(f"Network Error: {e}") from e

        if response.status_code == 429:
            raise RateLimitError()

        if 500 <= response.status_code < 600:
            raise ServiceUnavailableError(f"Explorer API Service Error: HTTP {response.status_code}")

        try:
            payload = response.json()
        except ValueError as e:
            raise TransportError(f"Malformed response from {endpoint}: {e}") from e

        if isinstance(payload, dict) and isinstance(payload.get("error"), str):
            # The API reports application errors as {"error": "<code>"}, sometimes with HTTP 200.
            raise DomainError(payload["error"], payload.get("message"))

        try:
            response.raise_for_status()
        except requests.exceptions.HTTPError as e:
            raise DomainError(f"http-{response.status_code}", f"HTTP Error: {e}") from e

        if not isinstance(payload, dict):
            raise TransportError(f"Unexpected response shape from {endpoint}")
        return payload

    def get_address(
        self,
        address: str,
        ledger_timestamp: Optional[datetime] = None,
        bypass_cache: bool = False,
    ) -> Dict[str, Any]:
        """
        Retrieves full account detail.
        Endpoint: v2/address/<address>
        """
        params: Dict[str, Any] = {flag: "true" for flag in ADDRESS_DETAIL_FLAGS}
        if ledger_timestamp is not None:
            params["ledgerTimestamp"] = format_ledger_timestamp(ledger_timestamp)
        return self.get(f"v2/address/{address}", params=params, bypass_cache=bypass_cache)

    def get_username(self, address: str) -> Dict[str, Any]:
        return self.get(f"v2/address/{address}", params={"username": "true"})

    def get_server_info(self) -> Dict[str, Any]:
        """Retrieves network information, including the reserve parameters. Endpoint: v2/server"""
        return self.get("v2/server")

    def get_current_rate(self, currency: str) -> Dict[str, Any]:
        return self.get(f"v2/rates/current/{currency}")

    def get_historical_rate(self, currency: str, instant: datetime) -> Dict[str, Any]:
        """
        Retrieves the rate sample nearest to ``instant``.
        Endpoint: v2/rates/history/nearest/<currency>
        """
        date_ms = int(instant.timestamp() * 1000)
        return self.get(f"v2/rates/history/nearest/{currency}", params={"date": date_ms})
