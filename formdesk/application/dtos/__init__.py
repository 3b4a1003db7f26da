"""Application DTOs (frozen dataclasses, no storage dependency)."""

from formdesk.application.dtos.form import (
    FieldDefinition,
    FormPatch,
    FormResult,
    PublicFormSettings,
    PublicFormView,
    PublishResult,
)
from formdesk.application.dtos.principal import (
    AuthResult,
    ExternalIdentity,
    ManagedUserResult,
    PrincipalClaims,
    PrincipalResult,
    StandaloneUserResult,
    TenantOwnerResult,
)
from formdesk.application.dtos.submission import SubmissionResult

__all__ = [
    "AuthResult",
    "ExternalIdentity",
    "FieldDefinition",
    "FormPatch",
    "FormResult",
    "ManagedUserResult",
    "PrincipalClaims",
    "PrincipalResult",
    "PublicFormSettings",
    "PublicFormView",
    "PublishResult",
    "StandaloneUserResult",
    "SubmissionResult",
    "TenantOwnerResult",
]
