"""Presentation-layer dependency injection (composition root).

Repositories and services are built per request from the resource handles
the lifespan stored on app.state; routes depend only on these dependencies.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from formdesk.api.v1.dependencies.auth import AuthSecurity, get_auth_security
from formdesk.application.services.auth_service import AuthService
from formdesk.application.services.user_service import UserService
from formdesk.application.use_cases.forms import FormService
from formdesk.application.use_cases.submissions import SubmissionService
from formdesk.core.config import Settings, get_settings
from formdesk.infrastructure.firebase import DocumentClient
from formdesk.infrastructure.firebase.repositories import (
    FirestoreFormRepository,
    FirestoreManagedUserRepository,
    FirestoreStandaloneUserRepository,
    FirestoreSubmissionRepository,
    FirestoreTenantOwnerRepository,
)

SettingsDep = Annotated[Settings, Depends(get_settings)]


def get_document_client(request: Request) -> DocumentClient:
    """Document store client created by the lifespan."""
    return request.app.state.document_client


DocumentClientDep = Annotated[DocumentClient, Depends(get_document_client)]


def get_tenant_owner_repo(
    request: Request, client: DocumentClientDep, settings: SettingsDep
) -> FirestoreTenantOwnerRepository:
    return FirestoreTenantOwnerRepository(
        client, settings.bcrypt_rounds, request.app.state.dummy_password_hash
    )


def get_managed_user_repo(
    request: Request, client: DocumentClientDep, settings: SettingsDep
) -> FirestoreManagedUserRepository:
    return FirestoreManagedUserRepository(
        client, settings.bcrypt_rounds, request.app.state.dummy_password_hash
    )


def get_standalone_user_repo(
    request: Request, client: DocumentClientDep, settings: SettingsDep
) -> FirestoreStandaloneUserRepository:
    return FirestoreStandaloneUserRepository(
        client, settings.bcrypt_rounds, request.app.state.dummy_password_hash
    )


def get_form_repo(client: DocumentClientDep) -> FirestoreFormRepository:
    return FirestoreFormRepository(client)


def get_submission_repo(client: DocumentClientDep) -> FirestoreSubmissionRepository:
    return FirestoreSubmissionRepository(client)


def get_user_service(
    managed_users: Annotated[FirestoreManagedUserRepository, Depends(get_managed_user_repo)],
    forms: Annotated[FirestoreFormRepository, Depends(get_form_repo)],
) -> UserService:
    """Managed-user administration and public-link enrolment."""
    return UserService(managed_users, forms)


def get_auth_service(
    request: Request,
    settings: SettingsDep,
    tenant_owners: Annotated[FirestoreTenantOwnerRepository, Depends(get_tenant_owner_repo)],
    managed_users: Annotated[FirestoreManagedUserRepository, Depends(get_managed_user_repo)],
    standalone_users: Annotated[
        FirestoreStandaloneUserRepository, Depends(get_standalone_user_repo)
    ],
    forms: Annotated[FirestoreFormRepository, Depends(get_form_repo)],
    user_service: Annotated[UserService, Depends(get_user_service)],
    auth_security: Annotated[AuthSecurity, Depends(get_auth_security)],
) -> AuthService:
    """Auth service with mailer and identity verifier from app.state."""
    return AuthService(
        tenant_owners=tenant_owners,
        managed_users=managed_users,
        standalone_users=standalone_users,
        forms=forms,
        user_service=user_service,
        token_issuer=auth_security,
        mailer=request.app.state.mailer,
        identity_verifier=request.app.state.identity_verifier,
        frontend_url=settings.frontend_url,
        password_reset_expire_minutes=settings.password_reset_expire_minutes,
    )


def get_form_service(
    settings: SettingsDep,
    forms: Annotated[FirestoreFormRepository, Depends(get_form_repo)],
    managed_users: Annotated[FirestoreManagedUserRepository, Depends(get_managed_user_repo)],
) -> FormService:
    return FormService(forms, managed_users, settings.frontend_url)


def get_submission_service(
    forms: Annotated[FirestoreFormRepository, Depends(get_form_repo)],
    submissions: Annotated[FirestoreSubmissionRepository, Depends(get_submission_repo)],
    managed_users: Annotated[FirestoreManagedUserRepository, Depends(get_managed_user_repo)],
    user_service: Annotated[UserService, Depends(get_user_service)],
) -> SubmissionService:
    return SubmissionService(forms, submissions, managed_users, user_service)


AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]
UserServiceDep = Annotated[UserService, Depends(get_user_service)]
FormServiceDep = Annotated[FormService, Depends(get_form_service)]
SubmissionServiceDep = Annotated[SubmissionService, Depends(get_submission_service)]
