"""Tests for domain exceptions (error_code, message, details, envelope)."""

from formdesk.domain.exceptions import (
    AuthenticationException,
    AuthorizationException,
    DocumentVersionConflictException,
    FormdeskException,
    PrincipalAlreadyExistsException,
    ResourceNotFoundException,
    SubmissionLimitExceededException,
    ValidationException,
)


def test_formdesk_exception_default_error_code() -> None:
    """Base FormdeskException uses class name as error_code when not provided."""
    exc = FormdeskException("Something failed")
    assert exc.message == "Something failed"
    assert exc.error_code == "FormdeskException"
    assert exc.details == {}


def test_to_dict_is_failure_envelope() -> None:
    exc = FormdeskException("Oops", error_code="CUSTOM", details={"key": "value"})
    assert exc.to_dict() == {
        "success": False,
        "message": "Oops",
        "error": {"code": "CUSTOM", "details": {"key": "value"}},
    }


def test_validation_exception() -> None:
    """ValidationException sets VALIDATION_ERROR and merges field into details."""
    exc = ValidationException("Bad", field="fields", details={"reasons": ["missing id"]})
    assert exc.error_code == "VALIDATION_ERROR"
    assert exc.details == {"reasons": ["missing id"], "field": "fields"}


def test_authentication_exception() -> None:
    exc = AuthenticationException()
    assert exc.message == "Authentication failed"
    assert exc.error_code == "AUTHENTICATION_ERROR"


def test_authorization_exception_with_reason() -> None:
    exc = AuthorizationException(resource="form", action="update", reason="foreign_tenant")
    assert exc.message == "Permission denied: update on form"
    assert exc.error_code == "PERMISSION_DENIED"
    assert exc.details["reason"] == "foreign_tenant"


def test_resource_not_found_exception() -> None:
    exc = ResourceNotFoundException("form", "f1")
    assert exc.message == "form not found: f1"
    assert exc.details == {"resource_type": "form", "resource_id": "f1"}


def test_conflict_and_limit_codes() -> None:
    assert PrincipalAlreadyExistsException().error_code == "ALREADY_EXISTS"
    limit = SubmissionLimitExceededException("f1", limit=5)
    assert limit.error_code == "LIMIT_EXCEEDED"
    assert limit.details == {"form_id": "f1", "limit": 5}
    conflict = DocumentVersionConflictException("form", "f1")
    assert conflict.error_code == "DOCUMENT_VERSION_CONFLICT"
