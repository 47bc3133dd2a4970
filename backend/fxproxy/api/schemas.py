"""Pydantic schemas for API responses."""

from typing import Any

from pydantic import BaseModel


class DataResponse(BaseModel):
    data: Any


class ErrorResponse(BaseModel):
    error: str


class HealthResponse(BaseModel):
    status: str
    cache_backend: str
    cache_policy: str
