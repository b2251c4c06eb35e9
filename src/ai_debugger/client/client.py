"""
HTTP client for the debugger API.

Every call returns a response dict. Failures are represented as data: a
non-2xx reply keeps its JSON body, and a transport failure becomes
``{"error": <message>}``.
"""

from typing import Optional

import httpx

from ai_debugger.config import default_server_url
from ai_debugger.logging.logger import get_logger

logger = get_logger(__name__)


class DebugClient:
    """Talks to ``/api/debug`` and ``/api/health``."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: float = 120.0,
        http_client: Optional[httpx.Client] = None,
    ):
        """
        Initialize the client.

        Args:
            base_url: Server URL, defaults to ``AI_DEBUGGER_URL`` or localhost:4000
            timeout: Seconds to wait for a reply
            http_client: Preconfigured httpx client, mostly for tests
        """
        self.base_url = (base_url or default_server_url()).rstrip("/")
        self._http = http_client or httpx.Client(timeout=timeout)

    def debug(self, code: str, language: str, error_output: Optional[str] = None) -> dict:
        """Submit code for analysis."""
        payload = {"code": code, "language": language}
        if error_output:
            payload["errorOutput"] = error_output
        return self._request("POST", "/api/debug", json=payload)

    def health(self) -> dict:
        return self._request("GET", "/api/health")

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "DebugClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _request(self, method: str, path: str, **kwargs) -> dict:
        url = f"{self.base_url}{path}"
        try:
            response = self._http.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"Request to {url} failed: {e}")
            return {"error": str(e) or e.__class__.__name__}

        try:
            data = response.json()
        except ValueError:
            data = None

        if not isinstance(data, dict):
            if response.is_success:
                return {"error": f"Unexpected response from {url}"}
            return {"error": f"Request failed with status code {response.status_code}"}

        if not response.is_success:
            logger.warning(f"{method} {url} returned {response.status_code}: {data.get('error')}")
            data.setdefault("error", f"Request failed with status code {response.status_code}")
        return data
