"""Response envelope shared by every endpoint."""

from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Success envelope: {"success": true, "message": ..., "data": ...}."""

    success: bool = True
    message: str = ""
    data: T | None = None


class ErrorDetail(BaseModel):
    code: str
    details: dict = Field(default_factory=dict)


class ErrorResponse(BaseModel):
    """Failure envelope produced by the exception handlers (documented in OpenAPI)."""

    success: bool = False
    message: str
    error: ErrorDetail


def ok(data: Any = None, message: str = "") -> ApiResponse:
    """Wrap a payload in the success envelope."""
    return ApiResponse(data=data, message=message)
