"""Authorization guard: pure access decisions over claims and resource facts.

Every check returns an AccessDecision; nothing here touches storage. Callers
pass *live* facts (e.g. a managed user's assigned forms read from its record,
never the token snapshot) and call enforce() to turn a denial into an
AuthorizationException.
"""

from __future__ import annotations

from collections.abc import Collection
from dataclasses import dataclass

from formdesk.application.dtos.form import FormResult
from formdesk.domain.enums import DenyReason, PrincipalRole
from formdesk.domain.exceptions import AuthorizationException, ResourceNotFoundException


@dataclass(frozen=True)
class AccessDecision:
    """Allow, or deny with a reason."""

    allowed: bool
    reason: DenyReason | None = None

    @classmethod
    def allow(cls) -> AccessDecision:
        return cls(True)

    @classmethod
    def deny(cls, reason: DenyReason) -> AccessDecision:
        return cls(False, reason)


ALLOW = AccessDecision.allow()


def check_role(role: PrincipalRole, *allowed: PrincipalRole) -> AccessDecision:
    """Role gate: only the listed roles pass."""
    return ALLOW if role in allowed else AccessDecision.deny(DenyReason.WRONG_ROLE)


def check_owner(principal_id: str, owner_id: str) -> AccessDecision:
    """Ownership gate: the record's owning reference must be the caller."""
    if principal_id and principal_id == owner_id:
        return ALLOW
    return AccessDecision.deny(DenyReason.FOREIGN_TENANT)


def check_assignment(assigned_forms: Collection[str], form_id: str) -> AccessDecision:
    """Assignment gate over the managed user's live assigned-forms set."""
    return ALLOW if form_id in assigned_forms else AccessDecision.deny(DenyReason.NOT_ASSIGNED)


def check_self(principal_id: str, submitted_by: str) -> AccessDecision:
    """Self gate: only the submitter may read or amend a submission."""
    return ALLOW if principal_id == submitted_by else AccessDecision.deny(DenyReason.NOT_SELF)


def check_public(form: FormResult) -> AccessDecision:
    """Public gate: anonymous access needs a published form with a token."""
    if form.is_published and form.public_token:
        return ALLOW
    return AccessDecision.deny(DenyReason.NOT_PUBLISHED)


def check_standalone_form(form: FormResult) -> AccessDecision:
    """Standalone gate: standalone users share forms by id, never tenant-owned ones."""
    if form.owner_role == PrincipalRole.STANDALONE_USER:
        return ALLOW
    return AccessDecision.deny(DenyReason.FOREIGN_TENANT)


def check_form_access(
    role: PrincipalRole,
    principal_id: str,
    form: FormResult,
    assigned_forms: Collection[str] = (),
) -> AccessDecision:
    """Read/submit access to a form for an authenticated principal."""
    if role == PrincipalRole.TENANT_OWNER:
        return check_owner(principal_id, form.owner_id)
    if role == PrincipalRole.MANAGED_USER:
        if form.owner_role != PrincipalRole.TENANT_OWNER:
            return AccessDecision.deny(DenyReason.FOREIGN_TENANT)
        return check_assignment(assigned_forms, form.id)
    return check_standalone_form(form)


def enforce(decision: AccessDecision, resource: str, action: str) -> None:
    """Raise AuthorizationException (carrying the reason) when denied."""
    if decision.allowed:
        return
    raise AuthorizationException(
        resource=resource,
        action=action,
        reason=decision.reason.value if decision.reason else None,
    )


def enforce_public(decision: AccessDecision, public_token: str) -> None:
    """Public-path variant: a denial looks exactly like a missing form."""
    if not decision.allowed:
        raise ResourceNotFoundException("form", public_token)
