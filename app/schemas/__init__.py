"""Pydantic request/response schemas for the API."""

from app.schemas.health import HealthResponse, ReadinessErrorResponse, ReadinessResponse
from app.schemas.user import UserCreateRequest, UserResponse, UserUpdateRequest

__all__ = [
    "HealthResponse",
    "ReadinessErrorResponse",
    "ReadinessResponse",
    "UserCreateRequest",
    "UserResponse",
    "UserUpdateRequest",
]
