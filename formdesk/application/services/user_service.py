"""Managed-user administration for tenant owners, and enrolment through public form links."""

from __future__ import annotations

import logging

from formdesk.application.dtos.form import FormResult
from formdesk.application.dtos.principal import ManagedUserResult
from formdesk.application.interfaces.repositories import (
    IFormRepository,
    IManagedUserRepository,
)
from formdesk.application.services.access_policy import check_owner, enforce
from formdesk.application.services.credential_rules import (
    validate_new_identity,
    validate_password,
)
from formdesk.domain.exceptions import (
    AuthenticationException,
    PrincipalAlreadyExistsException,
    ResourceNotFoundException,
)
from formdesk.shared.utils.generators import generate_username_from_email

logger = logging.getLogger(__name__)

_USERNAME_ATTEMPTS = 3


class UserService:
    """Tenant owner's view of its managed users."""

    def __init__(
        self,
        managed_users: IManagedUserRepository,
        forms: IFormRepository,
    ) -> None:
        self._users = managed_users
        self._forms = forms

    async def list_users(self, owner_id: str) -> list[ManagedUserResult]:
        """Return the tenant's managed users, newest first."""
        return await self._users.list_by_tenant(owner_id)

    async def create_user(
        self,
        owner_id: str,
        username: str,
        email: str,
        password: str,
        password_confirm: str | None = None,
    ) -> ManagedUserResult:
        """Create a managed user in the owner's tenant.

        Raises:
            ValidationException: Missing username, bad email, short/mismatched password.
            PrincipalAlreadyExistsException: Email or username taken in this tenant.
        """
        email = validate_new_identity(username, email, password, password_confirm)
        if await self._users.exists_in_tenant(owner_id, email, username):
            raise PrincipalAlreadyExistsException(
                "Email or username already exists in your tenant."
            )
        user = await self._users.create(owner_id, username, email, password)
        logger.info("Managed user %s created in tenant %s", user.id, owner_id)
        return user

    async def delete_user(self, owner_id: str, user_id: str) -> None:
        """Delete a managed user and its form assignments. Its submissions remain."""
        user = await self._users.get_by_id(user_id)
        if user is None:
            raise ResourceNotFoundException("user", user_id)
        enforce(check_owner(owner_id, user.tenant_id), "user", "delete")
        await self._users.delete(user_id, owner_id)
        logger.info("Managed user %s deleted from tenant %s", user_id, owner_id)

    async def enroll_for_form(
        self,
        form: FormResult,
        email: str,
        password: str | None = None,
    ) -> ManagedUserResult:
        """Find or create the form tenant's managed user for email and assign it the form.

        With a password: an existing account must match it, except a
        passwordless account (created by an identified public submission), which
        takes the password. The password rules apply only to a password being
        set. Without a password no credential check is made.

        Raises:
            AuthenticationException: Password does not match the existing account.
            ValidationException: A new password breaks the password rules.
            PrincipalAlreadyExistsException: No free username could be derived.
        """
        tenant_id = form.owner_id
        user = await self._users.get_by_email_in_tenant(email, tenant_id)
        if user is None:
            if password is not None:
                validate_password(password)
            user = await self._create_enrolled(tenant_id, email, password, form.id)
            await self._forms.add_assignment(form.id, user.id)
            return user

        if password is not None:
            if user.has_password:
                if not await self._users.check_password(user.id, password):
                    logger.warning("Public form login rejected for user %s", user.id)
                    raise AuthenticationException("Invalid email or password.")
            else:
                validate_password(password)
                await self._users.set_password(user.id, password)

        if form.id not in user.assigned_forms or user.id not in form.assigned_users:
            await self._forms.add_assignment(form.id, user.id)
        refreshed = await self._users.get_by_id(user.id)
        return refreshed or user

    async def _create_enrolled(
        self, tenant_id: str, email: str, password: str | None, form_id: str
    ) -> ManagedUserResult:
        for _ in range(_USERNAME_ATTEMPTS):
            username = generate_username_from_email(email)
            if not await self._users.exists_in_tenant(tenant_id, "", username):
                break
        else:
            raise PrincipalAlreadyExistsException(
                "Could not allocate a username in this tenant."
            )
        user = await self._users.create(
            tenant_id, username, email, password, assigned_forms=(form_id,)
        )
        logger.info(
            "Managed user %s enrolled in tenant %s through form %s",
            user.id,
            tenant_id,
            form_id,
        )
        return user
