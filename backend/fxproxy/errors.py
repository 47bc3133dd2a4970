"""Exception hierarchy and centralized FastAPI error handlers."""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class ProxyError(Exception):
    """Base class for all errors raised by the proxy."""


class ConfigError(ProxyError):
    """Required configuration is missing or invalid."""


class FetchError(ProxyError):
    """Upstream fetch failed."""

    def __init__(self, message: str, url: str):
        super().__init__(message)
        self.url = url


class TransportError(FetchError):
    """The request never completed (network, DNS, connection, timeout)."""


class UpstreamStatusError(FetchError):
    """The request completed but upstream answered with something other than 200."""

    def __init__(self, url: str, status_code: int):
        super().__init__(f"Upstream returned HTTP {status_code}", url)
        self.status_code = status_code


class DecodeError(FetchError):
    """Response body was not valid JSON."""


class StoreError(ProxyError):
    """Cache file could not be read, written or stat'd."""


class RefreshError(ProxyError):
    """A cache refresh failed. Carries the resource key only, never upstream detail."""

    def __init__(self, key: str):
        super().__init__(f"Refresh failed for {key}")
        self.key = key


def register_error_handlers(app: FastAPI) -> None:
    """Register the catch-all handler on the FastAPI app."""

    @app.exception_handler(Exception)
    async def handle_unexpected(_request: Request, exc: Exception):
        logger.exception("Unhandled error: %s", exc)
        return JSONResponse({"error": "Internal server error"}, status_code=500)
