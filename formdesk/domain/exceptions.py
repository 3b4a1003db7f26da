"""Domain exceptions for the formdesk application.

Defines domain-level exceptions that represent business rule violations.
These exceptions are independent of infrastructure concerns. Presentation
layer maps them to HTTP responses in exception handlers.
"""

from typing import Any


class FormdeskException(Exception):
    """Base exception for all formdesk application errors.

    All custom exceptions should inherit from this class to allow
    consistent error handling and logging. Presentation layer maps
    these to HTTP responses using message, error_code, and details.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. field, resource_id).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to class name.
            details: Optional dict of extra context.
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Return the failure envelope sent to API clients."""
        return {
            "success": False,
            "message": self.message,
            "error": {"code": self.error_code, "details": self.details},
        }


class ValidationException(FormdeskException):
    """Raised when input validation fails (e.g. invalid format or range)."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with message and optional field name.

        Args:
            message: Description of the validation failure.
            field: Optional field or attribute that failed validation.
            details: Optional extra context merged into details.
        """
        merged: dict[str, Any] = dict(details or {})
        if field:
            merged["field"] = field
        super().__init__(message, "VALIDATION_ERROR", merged)


class AuthenticationException(FormdeskException):
    """Raised when authentication fails (e.g. invalid credentials or token)."""

    def __init__(self, message: str = "Authentication failed") -> None:
        """Initialize with optional message.

        Args:
            message: Description of the authentication failure.
        """
        super().__init__(message, "AUTHENTICATION_ERROR")


class AuthorizationException(FormdeskException):
    """Raised when the principal may not perform the operation on the resource.

    Covers wrong role, foreign tenant, unassigned form and another
    principal's submission; the reason is carried in details.
    """

    def __init__(
        self,
        resource: str | None = None,
        action: str | None = None,
        message: str = "Permission denied",
        reason: str | None = None,
    ) -> None:
        """Initialize with optional resource, action, message and denial reason.

        Args:
            resource: Optional resource type (e.g. 'form', 'submission').
            action: Optional action that was attempted (e.g. 'update', 'read').
            message: Human-readable message; default used when resource/action omitted.
            reason: Optional machine-readable denial reason (see DenyReason).
        """
        if resource and action and message == "Permission denied":
            message = f"Permission denied: {action} on {resource}"
        details: dict[str, Any] = {}
        if resource:
            details["resource"] = resource
        if action:
            details["action"] = action
        if reason:
            details["reason"] = reason
        super().__init__(message, "PERMISSION_DENIED", details)


class ResourceNotFoundException(FormdeskException):
    """Raised when a requested resource is not found."""

    def __init__(self, resource_type: str, resource_id: str) -> None:
        """Initialize with resource type and id.

        Args:
            resource_type: Type of resource (e.g. 'form', 'submission').
            resource_id: The ID that was not found.
        """
        super().__init__(
            f"{resource_type} not found: {resource_id}",
            "RESOURCE_NOT_FOUND",
            {"resource_type": resource_type, "resource_id": resource_id},
        )


class PrincipalAlreadyExistsException(FormdeskException):
    """Raised when registering an identity (email/username) that already exists in its scope."""

    def __init__(self, message: str = "Email or username already registered") -> None:
        super().__init__(message, "ALREADY_EXISTS", {})


class SubmissionLimitExceededException(FormdeskException):
    """Raised when a public form has reached its submission cap or the submitter already submitted."""

    def __init__(
        self,
        form_id: str,
        message: str = "This form has reached its submission limit.",
        limit: int | None = None,
    ) -> None:
        details: dict[str, Any] = {"form_id": form_id}
        if limit is not None:
            details["limit"] = limit
        super().__init__(message, "LIMIT_EXCEEDED", details)


class DocumentVersionConflictException(FormdeskException):
    """Raised when a concurrent request won a conditional update of the same document."""

    def __init__(self, resource_type: str, resource_id: str) -> None:
        super().__init__(
            f"{resource_type} was updated by another request; retry.",
            "DOCUMENT_VERSION_CONFLICT",
            {"resource_type": resource_type, "resource_id": resource_id},
        )
