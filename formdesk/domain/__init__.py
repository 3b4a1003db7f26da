"""Domain layer: enums and exceptions.

No dependencies on infrastructure or presentation. Used by application
and infrastructure layers.
"""

from formdesk.domain.enums import DenyReason, PrincipalRole, SubmissionStatus
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

__all__ = [
    "AuthenticationException",
    "AuthorizationException",
    "DenyReason",
    "DocumentVersionConflictException",
    "FormdeskException",
    "PrincipalAlreadyExistsException",
    "PrincipalRole",
    "ResourceNotFoundException",
    "SubmissionLimitExceededException",
    "SubmissionStatus",
    "ValidationException",
]
