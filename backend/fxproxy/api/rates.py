"""Exchange rate API routes.

Handlers are plain ``def`` so Starlette runs each request on its thread
pool; the coordinator blocks on upstream I/O.
"""

from typing import Any

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from fxproxy.api.deps import get_coordinator, get_resources, get_response_mode
from fxproxy.api.envelope import to_response
from fxproxy.api.schemas import DataResponse, ErrorResponse
from fxproxy.errors import RefreshError
from fxproxy.models.resource import CURRENCIES, LATEST, CachedResource
from fxproxy.services.coordinator import CacheCoordinator

router = APIRouter(prefix="/api", tags=["rates"])

_responses: dict[int | str, dict[str, Any]] = {
    200: {"model": DataResponse},
    500: {"model": ErrorResponse},
}


def _serve(coordinator: CacheCoordinator, resource: CachedResource, mode: str) -> JSONResponse:
    try:
        data = coordinator.get(resource)
    except RefreshError:
        return to_response(error=resource.error_message, mode=mode)
    return to_response(data, mode=mode)


@router.get("/latest", responses=_responses)
def get_latest(
    coordinator: CacheCoordinator = Depends(get_coordinator),
    resources: dict[str, CachedResource] = Depends(get_resources),
    mode: str = Depends(get_response_mode),
):
    """Latest exchange rates."""
    return _serve(coordinator, resources[LATEST], mode)


@router.get("/currencies", responses=_responses)
def get_currencies(
    coordinator: CacheCoordinator = Depends(get_coordinator),
    resources: dict[str, CachedResource] = Depends(get_resources),
    mode: str = Depends(get_response_mode),
):
    """Currency code to name mapping."""
    return _serve(coordinator, resources[CURRENCIES], mode)
