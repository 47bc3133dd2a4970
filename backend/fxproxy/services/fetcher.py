"""Upstream JSON fetcher built on httpx."""

import logging
from typing import Any

import httpx

from fxproxy.errors import DecodeError, TransportError, UpstreamStatusError

logger = logging.getLogger(__name__)


class RemoteFetcher:
    """Fetches a JSON document with a single bounded GET. No retries.

    The underlying httpx.Client is shared by all request threads; it holds
    only connection pool and timeout configuration.
    """

    def __init__(self, timeout: float = 10.0, client: httpx.Client | None = None):
        self._client = client or httpx.Client(timeout=timeout)
        self._timeout = timeout

    def fetch(self, url: str) -> Any:
        """GET ``url`` and return the decoded JSON body.

        Raises TransportError, UpstreamStatusError or DecodeError.
        """
        try:
            resp = self._client.get(url, timeout=self._timeout)
        except httpx.HTTPError as e:
            logger.error(f"Request to {_redact(url)} failed: {e!r}")
            raise TransportError(str(e) or type(e).__name__, url) from e

        if resp.status_code != httpx.codes.OK:
            logger.error(f"Request to {_redact(url)} returned HTTP {resp.status_code}")
            raise UpstreamStatusError(url, resp.status_code)

        try:
            return resp.json()
        except ValueError as e:
            logger.error(f"Response from {_redact(url)} is not valid JSON: {e}")
            raise DecodeError("Failed to parse upstream response", url) from e

    def close(self) -> None:
        self._client.close()


def _redact(url: str) -> str:
    """Strip the query string so the API key never reaches the logs."""
    return url.split("?", 1)[0]
