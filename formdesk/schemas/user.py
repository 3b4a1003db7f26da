"""Managed-user API schemas (tenant owner administration)."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class ManagedUserCreateRequest(BaseModel):
    """Request body for POST /admin/users."""

    username: str = Field(..., min_length=1, max_length=128)
    email: EmailStr
    password: str
    password_confirm: str | None = None


class ManagedUserResponse(BaseModel):
    """Managed user response (no password)."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    tenant_id: str
    username: str
    email: str
    assigned_forms: list[str] = Field(default_factory=list)
    is_active: bool = True
    created_at: datetime | None = None
