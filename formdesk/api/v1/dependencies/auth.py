"""Auth dependencies: token issuer, bearer-token claims and role gates."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from formdesk.application.dtos.principal import PrincipalClaims
from formdesk.application.services.access_policy import check_role, enforce
from formdesk.domain.enums import PrincipalRole
from formdesk.domain.exceptions import AuthenticationException
from formdesk.infrastructure.security.jwt import create_access_token, verify_token

_http_bearer = HTTPBearer(auto_error=False)


class AuthSecurity:
    """Token creation provided via DI (no direct infra imports in services)."""

    def create_access_token(self, data: dict) -> str:
        return create_access_token(data)


def get_auth_security() -> AuthSecurity:
    """Session token issuer (composition root)."""
    return AuthSecurity()


def _to_claims(payload: dict) -> PrincipalClaims:
    try:
        role = PrincipalRole(payload["role"])
        subject = str(payload["sub"])
    except (KeyError, ValueError) as e:
        raise AuthenticationException("Invalid token") from e
    return PrincipalClaims(
        id=subject,
        role=role,
        tenant_id=payload.get("tenant_id"),
        assigned_forms=tuple(payload.get("assigned_forms") or ()),
    )


async def get_current_claims(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_http_bearer)],
) -> PrincipalClaims:
    """Return verified token claims; raise 401 if the token is missing or invalid."""
    if credentials is None:
        raise AuthenticationException("Not authenticated")
    try:
        payload = verify_token(credentials.credentials)
    except ValueError as e:
        raise AuthenticationException("Invalid or expired token") from e
    return _to_claims(payload)


def require_role(role: PrincipalRole):
    """Dependency factory: require a valid token whose role is `role` (403 wrong_role)."""

    async def _require(
        claims: Annotated[PrincipalClaims, Depends(get_current_claims)],
    ) -> PrincipalClaims:
        enforce(check_role(claims.role, role), "endpoint", "access")
        return claims

    return _require


require_tenant_owner = require_role(PrincipalRole.TENANT_OWNER)
require_managed_user = require_role(PrincipalRole.MANAGED_USER)
require_standalone_user = require_role(PrincipalRole.STANDALONE_USER)

CurrentClaims = Annotated[PrincipalClaims, Depends(get_current_claims)]
TenantOwner = Annotated[PrincipalClaims, Depends(require_tenant_owner)]
ManagedUser = Annotated[PrincipalClaims, Depends(require_managed_user)]
StandaloneUser = Annotated[PrincipalClaims, Depends(require_standalone_user)]
