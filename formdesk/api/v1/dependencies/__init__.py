"""FastAPI dependencies for the v1 API (auth gates and the composition root)."""

from formdesk.api.v1.dependencies.auth import (
    AuthSecurity,
    CurrentClaims,
    ManagedUser,
    StandaloneUser,
    TenantOwner,
    get_auth_security,
    get_current_claims,
    require_managed_user,
    require_role,
    require_standalone_user,
    require_tenant_owner,
)
from formdesk.api.v1.dependencies.services import (
    AuthServiceDep,
    FormServiceDep,
    SubmissionServiceDep,
    UserServiceDep,
    get_auth_service,
    get_document_client,
    get_form_service,
    get_submission_service,
    get_user_service,
)

__all__ = [
    "AuthSecurity",
    "AuthServiceDep",
    "CurrentClaims",
    "FormServiceDep",
    "ManagedUser",
    "StandaloneUser",
    "SubmissionServiceDep",
    "TenantOwner",
    "UserServiceDep",
    "get_auth_security",
    "get_auth_service",
    "get_current_claims",
    "get_document_client",
    "get_form_service",
    "get_submission_service",
    "get_user_service",
    "require_managed_user",
    "require_role",
    "require_standalone_user",
    "require_tenant_owner",
]
