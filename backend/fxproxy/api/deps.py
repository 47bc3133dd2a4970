"""FastAPI dependencies for the process-wide cache objects built at startup."""

from fastapi import Request

from fxproxy.models.resource import CachedResource
from fxproxy.services.coordinator import CacheCoordinator


def get_coordinator(request: Request) -> CacheCoordinator:
    return request.app.state.coordinator


def get_resources(request: Request) -> dict[str, CachedResource]:
    return request.app.state.resources


def get_response_mode(request: Request) -> str:
    return request.app.state.response_mode
