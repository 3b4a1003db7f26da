"""Tests for the authorization guard (pure access decisions)."""

import pytest

from formdesk.application.dtos.form import FormResult
from formdesk.application.services.access_policy import (
    AccessDecision,
    check_form_access,
    check_owner,
    check_public,
    check_role,
    check_self,
    enforce,
    enforce_public,
)
from formdesk.domain.enums import DenyReason, PrincipalRole
from formdesk.domain.exceptions import AuthorizationException, ResourceNotFoundException


def _form(**overrides) -> FormResult:
    values = {
        "id": "f1",
        "owner_id": "owner-1",
        "owner_role": PrincipalRole.TENANT_OWNER,
        "title": "Form",
    }
    values.update(overrides)
    return FormResult(**values)


def test_role_gate() -> None:
    assert check_role(PrincipalRole.TENANT_OWNER, PrincipalRole.TENANT_OWNER).allowed
    denied = check_role(PrincipalRole.MANAGED_USER, PrincipalRole.TENANT_OWNER)
    assert denied == AccessDecision(False, DenyReason.WRONG_ROLE)


def test_owner_gate_denies_foreign_and_empty_ids() -> None:
    assert check_owner("owner-1", "owner-1").allowed
    assert check_owner("owner-2", "owner-1").reason == DenyReason.FOREIGN_TENANT
    assert not check_owner("", "").allowed


def test_self_gate() -> None:
    assert check_self("u1", "u1").allowed
    assert check_self("u2", "u1").reason == DenyReason.NOT_SELF


def test_public_gate_requires_published_with_token() -> None:
    assert check_public(_form(is_published=True, public_token="tok")).allowed
    assert check_public(_form(is_published=False, public_token="tok")).reason == (
        DenyReason.NOT_PUBLISHED
    )
    assert not check_public(_form(is_published=True, public_token=None)).allowed


@pytest.mark.parametrize(
    ("role", "principal_id", "form", "assigned", "reason"),
    [
        (PrincipalRole.TENANT_OWNER, "owner-1", _form(), (), None),
        (PrincipalRole.TENANT_OWNER, "owner-2", _form(), (), DenyReason.FOREIGN_TENANT),
        (PrincipalRole.MANAGED_USER, "u1", _form(), ("f1",), None),
        (PrincipalRole.MANAGED_USER, "u1", _form(), ("f2",), DenyReason.NOT_ASSIGNED),
        (
            PrincipalRole.MANAGED_USER,
            "u1",
            _form(owner_role=PrincipalRole.STANDALONE_USER),
            ("f1",),
            DenyReason.FOREIGN_TENANT,
        ),
        (
            PrincipalRole.STANDALONE_USER,
            "s1",
            _form(owner_role=PrincipalRole.STANDALONE_USER),
            (),
            None,
        ),
        (PrincipalRole.STANDALONE_USER, "s1", _form(), (), DenyReason.FOREIGN_TENANT),
    ],
)
def test_form_access(role, principal_id, form, assigned, reason) -> None:
    decision = check_form_access(role, principal_id, form, assigned)
    assert decision.allowed is (reason is None)
    assert decision.reason == reason


def test_enforce_raises_with_reason() -> None:
    enforce(AccessDecision.allow(), "form", "read")
    with pytest.raises(AuthorizationException) as exc_info:
        enforce(AccessDecision.deny(DenyReason.NOT_ASSIGNED), "form", "submit")
    assert exc_info.value.details == {
        "resource": "form",
        "action": "submit",
        "reason": "not_assigned",
    }


def test_enforce_public_looks_like_missing_form() -> None:
    with pytest.raises(ResourceNotFoundException):
        enforce_public(AccessDecision.deny(DenyReason.NOT_PUBLISHED), "tok")
