"""Response encoder: wraps coordinator results in the JSON envelope."""

from typing import Any

from fastapi.responses import JSONResponse

from fxproxy.api.schemas import DataResponse, ErrorResponse

DEFAULT_ERROR = "Failed to fetch data"

ENVELOPE = "envelope"
RAW = "raw"

_MISSING = object()


def encode(
    data: Any = _MISSING, error: str | None = None, mode: str = ENVELOPE
) -> tuple[int, Any]:
    """Return ``(status_code, body)`` for a success value or an error message.

    ``error`` wins when both are given. In raw mode a success body is the
    bare value; errors are always enveloped.
    """
    if error is not None or data is _MISSING:
        return 500, ErrorResponse(error=error or DEFAULT_ERROR).model_dump()
    if mode == RAW:
        return 200, data
    return 200, DataResponse(data=data).model_dump()


def to_response(
    data: Any = _MISSING, error: str | None = None, mode: str = ENVELOPE
) -> JSONResponse:
    status_code, body = encode(data, error, mode)
    return JSONResponse(body, status_code=status_code)
