"""Remote Client — bounded-timeout HTTP access for http::* and secret::kv.

Invariants:
    - Every request carries a timeout (no call can hang a render forever)
    - Invalid URLs, unencodable headers, transport failures, non-2xx statuses
      and non-UTF-8 bodies raise RemoteCallError
    - No retries, no caching: each call is a fresh attempt

Design Decisions:
    - Wrapper over raw httpx.Client: isolates error mapping from handlers (ADR: single responsibility)
    - Client injectable: tests pass an httpx.Client on a MockTransport
    - Timeout is a deliberate hardening over unbounded blocking calls
"""

import json
import logging

import httpx

logger = logging.getLogger(__name__)


class RemoteCallError(Exception):
    """A remote call failed; message is safe to show to the document author."""


class RemoteClient:
    """Synchronous HTTP client used while evaluating one document."""

    def __init__(
        self,
        timeout_seconds: float = 30.0,
        client: httpx.Client | None = None,
    ):
        self._client = client or httpx.Client(timeout=timeout_seconds)
        self._owns_client = client is None
        self.timeout_seconds = timeout_seconds

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def request_text(
        self,
        method: str,
        url: str,
        content: str | None = None,
        headers: dict[str, str] | None = None,
    ) -> str:
        """Send a request, return the UTF-8 body of a 2xx response."""
        try:
            response = self._client.request(
                method, url,
                content=content.encode("utf-8") if content is not None else None,
                headers=headers,
                timeout=self.timeout_seconds,
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise RemoteCallError(
                f"HTTP {method} {url} returned {e.response.status_code}",
            ) from e
        except (httpx.HTTPError, httpx.InvalidURL, UnicodeEncodeError) as e:
            logger.warning(f"HTTP {method} {url} failed: {e}")
            raise RemoteCallError(f"HTTP {method} request failed: {e}") from e
        try:
            return response.content.decode("utf-8")
        except UnicodeDecodeError as e:
            raise RemoteCallError(f"response body is not valid UTF-8: {e}") from e

    def get_json(self, url: str, headers: dict[str, str] | None = None) -> object:
        """GET a JSON document."""
        text = self.request_text("GET", url, headers=headers)
        try:
            return json.loads(text)
        except ValueError as e:
            raise RemoteCallError(f"unable to decode json: {e}") from e
