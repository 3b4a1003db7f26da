"""DTOs for principals and session claims (no password hashes)."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import TypeAlias

from formdesk.domain.enums import PrincipalRole


@dataclass(frozen=True)
class TenantOwnerResult:
    """Tenant owner read-model."""

    id: str
    username: str
    email: str
    is_active: bool = True
    created_at: datetime | None = None

    role: PrincipalRole = field(default=PrincipalRole.TENANT_OWNER, init=False)


@dataclass(frozen=True)
class ManagedUserResult:
    """Managed user read-model. has_password is False for accounts created by a public submission."""

    id: str
    tenant_id: str
    username: str
    email: str
    assigned_forms: tuple[str, ...] = ()
    has_password: bool = True
    is_active: bool = True
    created_at: datetime | None = None

    role: PrincipalRole = field(default=PrincipalRole.MANAGED_USER, init=False)


@dataclass(frozen=True)
class StandaloneUserResult:
    """Standalone user read-model (single-user variant)."""

    id: str
    name: str
    email: str
    google_id: str | None = None
    picture: str | None = None
    has_password: bool = True
    is_active: bool = True
    created_at: datetime | None = None

    role: PrincipalRole = field(default=PrincipalRole.STANDALONE_USER, init=False)


PrincipalResult: TypeAlias = TenantOwnerResult | ManagedUserResult | StandaloneUserResult


@dataclass(frozen=True)
class PrincipalClaims:
    """Verified session token claims.

    assigned_forms is the snapshot taken at issuance; it is advisory and never
    used for authorization (the live record is re-read instead).
    """

    id: str
    role: PrincipalRole
    tenant_id: str | None = None
    assigned_forms: tuple[str, ...] = ()


@dataclass(frozen=True)
class AuthResult:
    """Issued session token plus the authenticated principal."""

    access_token: str
    principal: PrincipalResult
    token_type: str = "bearer"


@dataclass(frozen=True)
class ExternalIdentity:
    """Identity asserted by a verified third-party token (e.g. Google)."""

    subject: str
    email: str
    name: str
    picture: str | None = None
