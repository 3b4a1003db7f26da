"""Repository interfaces (ports) for the application layer.

Protocols define contracts that infrastructure implementations must fulfill (DIP).
All types reference application DTOs only; no infrastructure imports.
Listings are returned newest first.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from formdesk.application.dtos.form import FieldDefinition, FormResult
    from formdesk.application.dtos.principal import (
        ManagedUserResult,
        StandaloneUserResult,
        TenantOwnerResult,
    )
    from formdesk.application.dtos.submission import SubmissionResult
    from formdesk.domain.enums import PrincipalRole, SubmissionStatus


class ITenantOwnerRepository(Protocol):
    """Tenant owners; email and username globally unique."""

    async def get_by_id(self, owner_id: str) -> TenantOwnerResult | None:
        """Return tenant owner by ID."""

    async def exists(self, email: str, username: str) -> bool:
        """Return True if email or username is already taken."""

    async def create(self, username: str, email: str, password: str) -> TenantOwnerResult:
        """Create tenant owner with hashed password."""

    async def authenticate(self, email: str, password: str) -> TenantOwnerResult | None:
        """Return the owner if email/password match, else None."""


class IManagedUserRepository(Protocol):
    """Managed users; email and username unique within their tenant."""

    async def get_by_id(self, user_id: str) -> ManagedUserResult | None:
        """Return managed user by ID."""

    async def get_by_id_and_tenant(
        self, user_id: str, tenant_id: str
    ) -> ManagedUserResult | None:
        """Return managed user by ID if it belongs to the tenant."""

    async def get_by_email_in_tenant(
        self, email: str, tenant_id: str
    ) -> ManagedUserResult | None:
        """Return the tenant's managed user with this email."""

    async def exists_in_tenant(self, tenant_id: str, email: str, username: str) -> bool:
        """Return True if email or username is taken within the tenant."""

    async def list_by_tenant(self, tenant_id: str) -> list[ManagedUserResult]:
        """Return the tenant's managed users."""

    async def create(
        self,
        tenant_id: str,
        username: str,
        email: str,
        password: str | None,
        assigned_forms: tuple[str, ...] = (),
    ) -> ManagedUserResult:
        """Create managed user; password None creates a passwordless account."""

    async def authenticate_any_tenant(
        self, email: str, password: str
    ) -> ManagedUserResult | None:
        """Return the first managed user with this email whose password verifies."""

    async def check_password(self, user_id: str, password: str) -> bool:
        """Return True if password matches the stored hash."""

    async def set_password(self, user_id: str, password: str) -> None:
        """Hash and store a new password."""

    async def delete(self, user_id: str, tenant_id: str) -> None:
        """Delete the user and remove it from its tenant's form assignments (atomically)."""


class IStandaloneUserRepository(Protocol):
    """Standalone users; email globally unique."""

    async def get_by_id(self, user_id: str) -> StandaloneUserResult | None:
        """Return standalone user by ID."""

    async def get_by_email(self, email: str) -> StandaloneUserResult | None:
        """Return standalone user by email."""

    async def get_by_google_id(self, google_id: str) -> StandaloneUserResult | None:
        """Return standalone user linked to this Google subject."""

    async def create(
        self,
        name: str,
        email: str,
        password: str | None,
        google_id: str | None = None,
        picture: str | None = None,
    ) -> StandaloneUserResult:
        """Create standalone user; password None for Google-only accounts."""

    async def authenticate(self, email: str, password: str) -> StandaloneUserResult | None:
        """Return the user if email/password match, else None."""

    async def link_google(
        self, user_id: str, google_id: str, picture: str | None
    ) -> StandaloneUserResult | None:
        """Attach a Google subject (and picture) to an existing account."""

    async def set_reset_token(
        self, user_id: str, token_hash: str, expires_at: datetime
    ) -> None:
        """Store a password reset token digest and its expiry."""

    async def consume_reset_token(
        self, token_hash: str, new_password: str, now: datetime
    ) -> bool:
        """Set the password and clear the token if it matches and has not expired."""


class IFormRepository(Protocol):
    """Forms plus the writes that must stay atomic with them."""

    async def create(
        self,
        owner_id: str,
        owner_role: PrincipalRole,
        title: str,
        description: str,
        fields: list[FieldDefinition],
    ) -> FormResult:
        """Create an unpublished form with no assignments."""

    async def get_by_id(self, form_id: str) -> FormResult | None:
        """Return form by ID."""

    async def get_by_public_token(self, public_token: str) -> FormResult | None:
        """Return form by its public token (published or not)."""

    async def list_by_owner(self, owner_id: str) -> list[FormResult]:
        """Return forms owned by the principal."""

    async def list_by_ids(self, form_ids: list[str]) -> list[FormResult]:
        """Return existing forms among the IDs."""

    async def list_published(self) -> list[FormResult]:
        """Return every published form."""

    async def update(self, form_id: str, changes: dict[str, Any]) -> FormResult | None:
        """Apply field changes; returns None if the form does not exist."""

    async def assign_users(
        self, form_id: str, user_ids: list[str], removed_user_ids: list[str] | None = None
    ) -> FormResult | None:
        """Replace assigned_users; union form_id into each user's assigned_forms and pull it from removed users."""

    async def add_assignment(self, form_id: str, user_id: str) -> None:
        """Union user_id into the form and form_id into the user's assignments."""

    async def reserve_submission_slot(self, form_id: str, *, enforce_limit: bool) -> None:
        """Increment submission_count; with enforce_limit, fail when the cap is reached."""

    async def release_submission_slot(self, form_id: str) -> None:
        """Undo a reservation whose submission was not stored."""

    async def delete_with_submissions(self, form_id: str) -> int:
        """Delete the form's submissions then the form; returns submissions deleted."""


class ISubmissionRepository(Protocol):
    """Submissions."""

    async def create(
        self,
        form_id: str,
        submitted_by: str,
        tenant_id: str,
        answers: dict[str, Any],
        status: SubmissionStatus,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> SubmissionResult:
        """Store a new submission."""

    async def get_by_id(self, submission_id: str) -> SubmissionResult | None:
        """Return submission by ID."""

    async def list_by_submitter(self, submitted_by: str) -> list[SubmissionResult]:
        """Return the principal's submissions."""

    async def list_by_form(self, form_id: str) -> list[SubmissionResult]:
        """Return the form's submissions."""

    async def list_by_tenant(self, tenant_id: str) -> list[SubmissionResult]:
        """Return all submissions to the tenant's forms."""

    async def exists_for_submitter(self, form_id: str, submitted_by: str) -> bool:
        """Return True if the principal already submitted to the form."""

    async def update_answers(
        self, submission_id: str, answers: dict[str, Any]
    ) -> SubmissionResult | None:
        """Replace answers wholesale; returns None if missing."""

    async def delete_orphans(self) -> int:
        """Delete submissions whose form no longer exists; returns count."""
