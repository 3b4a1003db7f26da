"""Auth API schemas."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from formdesk.application.dtos.principal import (
    AuthResult,
    ManagedUserResult,
    PrincipalResult,
    StandaloneUserResult,
    TenantOwnerResult,
)
from formdesk.domain.enums import PrincipalRole


class TenantSignupRequest(BaseModel):
    """Request body for POST /auth/tenant/signup."""

    username: str = Field(..., min_length=1, max_length=128)
    email: EmailStr
    password: str
    password_confirm: str | None = None


class LoginRequest(BaseModel):
    """Email/password login (tenant owner, managed user, standalone user)."""

    email: EmailStr
    password: str = Field(..., min_length=1)


class PublicFormLoginRequest(BaseModel):
    """Login (or enrolment) through a published form's link."""

    model_config = ConfigDict(populate_by_name=True)

    email: EmailStr
    password: str = Field(..., min_length=1)
    public_form_token: str = Field(..., min_length=1, alias="publicFormToken")


class RegisterRequest(BaseModel):
    """Request body for POST /auth/register (standalone users)."""

    name: str = Field(..., min_length=1, max_length=128)
    email: EmailStr
    password: str
    password_confirm: str | None = None


class GoogleLoginRequest(BaseModel):
    """Google Sign-In credential (ID token) from the client."""

    id_token: str = Field(..., min_length=1)


class ForgotPasswordRequest(BaseModel):
    email: EmailStr


class ResetPasswordRequest(BaseModel):
    token: str = Field(..., min_length=1)
    password: str


class PrincipalResponse(BaseModel):
    """Authenticated principal (no credentials)."""

    id: str
    role: PrincipalRole
    email: str
    username: str | None = None
    name: str | None = None
    tenant_id: str | None = None
    assigned_forms: list[str] = Field(default_factory=list)
    picture: str | None = None

    @classmethod
    def from_result(cls, principal: PrincipalResult) -> PrincipalResponse:
        if isinstance(principal, TenantOwnerResult):
            return cls(
                id=principal.id,
                role=principal.role,
                email=principal.email,
                username=principal.username,
            )
        if isinstance(principal, ManagedUserResult):
            return cls(
                id=principal.id,
                role=principal.role,
                email=principal.email,
                username=principal.username,
                tenant_id=principal.tenant_id,
                assigned_forms=list(principal.assigned_forms),
            )
        assert isinstance(principal, StandaloneUserResult)
        return cls(
            id=principal.id,
            role=principal.role,
            email=principal.email,
            name=principal.name,
            picture=principal.picture,
        )


class AuthResponse(BaseModel):
    """JWT token plus the signed-in principal."""

    access_token: str
    token_type: str = "bearer"
    user: PrincipalResponse


def auth_response(result: AuthResult) -> AuthResponse:
    return AuthResponse(
        access_token=result.access_token,
        token_type=result.token_type,
        user=PrincipalResponse.from_result(result.principal),
    )
