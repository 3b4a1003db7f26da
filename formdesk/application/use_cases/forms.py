"""Form lifecycle: create, update, publish, assign, delete and the listings per role."""

from __future__ import annotations

import logging
from typing import Any

from formdesk.application.dtos.form import (
    FormPatch,
    FormResult,
    PublicFormView,
    PublishResult,
)
from formdesk.application.interfaces.repositories import (
    IFormRepository,
    IManagedUserRepository,
)
from formdesk.application.services.access_policy import (
    check_form_access,
    check_owner,
    check_public,
    enforce,
    enforce_public,
)
from formdesk.application.services.field_normalizer import valid_fields
from formdesk.core.constants import DEFAULT_FORM_TITLE, PUBLIC_FORM_PATH
from formdesk.domain.enums import PrincipalRole
from formdesk.domain.exceptions import (
    AuthenticationException,
    ResourceNotFoundException,
    ValidationException,
)
from formdesk.shared.utils.generators import generate_public_token

logger = logging.getLogger(__name__)


def _title_or_default(title: str | None) -> str:
    return (title or "").strip() or DEFAULT_FORM_TITLE


class FormService:
    """Form lifecycle for tenant owners, managed users, standalone users and the public."""

    def __init__(
        self,
        forms: IFormRepository,
        managed_users: IManagedUserRepository,
        frontend_url: str,
    ) -> None:
        self._forms = forms
        self._users = managed_users
        self._frontend_url = frontend_url.rstrip("/")

    def public_url(self, public_token: str) -> str:
        return f"{self._frontend_url}{PUBLIC_FORM_PATH}/{public_token}"

    async def _get_owned(self, owner_id: str, form_id: str, action: str) -> FormResult:
        form = await self._forms.get_by_id(form_id)
        if form is None:
            raise ResourceNotFoundException("form", form_id)
        enforce(check_owner(owner_id, form.owner_id), "form", action)
        return form

    async def _live_assignments(self, user_id: str) -> tuple[str, ...]:
        user = await self._users.get_by_id(user_id)
        if user is None or not user.is_active:
            raise AuthenticationException("User not found or inactive")
        return user.assigned_forms

    # Owner operations (tenant owners and standalone owners)

    async def create(
        self,
        owner_id: str,
        owner_role: PrincipalRole,
        title: str | None = None,
        description: str | None = None,
        fields: Any = None,
    ) -> FormResult:
        """Create an unpublished form with no assignments.

        Raises:
            ValidationException: Fields supplied but none valid.
        """
        form = await self._forms.create(
            owner_id=owner_id,
            owner_role=owner_role,
            title=_title_or_default(title),
            description=description or "",
            fields=valid_fields(fields),
        )
        logger.info("Form %s created by %s", form.id, owner_id)
        return form

    async def update(self, owner_id: str, form_id: str, patch: FormPatch) -> FormResult:
        """Apply only the attributes present in the patch.

        An explicit "" description clears it; a blank title resets to the placeholder.
        """
        form = await self._get_owned(owner_id, form_id, "update")
        changes: dict[str, Any] = {}
        if patch.title is not None:
            changes["title"] = _title_or_default(patch.title)
        if patch.description is not None:
            changes["description"] = patch.description
        if patch.fields is not None:
            changes["fields"] = [f.to_dict() for f in valid_fields(patch.fields)]
        if patch.public_settings is not None:
            changes["public_settings"] = patch.public_settings.to_dict()
        if not changes:
            return form
        updated = await self._forms.update(form_id, changes)
        if updated is None:
            raise ResourceNotFoundException("form", form_id)
        return updated

    async def delete(self, owner_id: str, form_id: str) -> int:
        """Delete the form and all of its submissions; returns submissions deleted."""
        await self._get_owned(owner_id, form_id, "delete")
        deleted = await self._forms.delete_with_submissions(form_id)
        logger.info("Form %s deleted by %s", form_id, owner_id)
        return deleted

    async def publish(self, owner_id: str, form_id: str) -> PublishResult:
        """Publish the form; the token is issued once and reused by every later publish."""
        form = await self._get_owned(owner_id, form_id, "publish")
        token = form.public_token or generate_public_token()
        if not form.is_published or form.public_token != token:
            updated = await self._forms.update(
                form_id, {"is_published": True, "public_token": token}
            )
            if updated is None:
                raise ResourceNotFoundException("form", form_id)
            form = updated
            logger.info("Form %s published", form_id)
        return PublishResult(form=form, public_url=self.public_url(token))

    async def unpublish(self, owner_id: str, form_id: str) -> FormResult:
        """Withdraw public access; the token is kept so republishing restores the same link."""
        form = await self._get_owned(owner_id, form_id, "unpublish")
        if not form.is_published:
            return form
        updated = await self._forms.update(form_id, {"is_published": False})
        if updated is None:
            raise ResourceNotFoundException("form", form_id)
        logger.info("Form %s unpublished", form_id)
        return updated

    async def assign_users(
        self, owner_id: str, form_id: str, user_ids: list[str]
    ) -> FormResult:
        """Replace the form's assigned users with exactly user_ids.

        Raises:
            ValidationException: Some ids are not managed users of this owner
                (details.user_ids lists them).
        """
        form = await self._get_owned(owner_id, form_id, "assign")
        wanted = list(dict.fromkeys(user_ids))
        offending = [
            user_id
            for user_id in wanted
            if await self._users.get_by_id_and_tenant(user_id, owner_id) is None
        ]
        if offending:
            raise ValidationException(
                "Some users do not belong to your tenant.",
                field="user_ids",
                details={"user_ids": offending},
            )
        removed = [uid for uid in form.assigned_users if uid not in wanted]
        updated = await self._forms.assign_users(form_id, wanted, removed_user_ids=removed)
        if updated is None:
            raise ResourceNotFoundException("form", form_id)
        logger.info("Form %s assigned to %d users", form_id, len(wanted))
        return updated

    async def list_for_tenant(self, owner_id: str) -> list[FormResult]:
        """Return the owner's forms, newest first."""
        return await self._forms.list_by_owner(owner_id)

    async def get_for_owner(self, owner_id: str, form_id: str) -> FormResult:
        return await self._get_owned(owner_id, form_id, "read")

    # Managed users

    async def list_assigned(self, user_id: str) -> list[FormResult]:
        """Return forms in the user's live assignment set, newest first."""
        assigned = await self._live_assignments(user_id)
        return [
            form
            for form in await self._forms.list_by_ids(list(assigned))
            if form.owner_role == PrincipalRole.TENANT_OWNER
        ]

    async def get_assigned(self, user_id: str, form_id: str) -> FormResult:
        form = await self._forms.get_by_id(form_id)
        if form is None:
            raise ResourceNotFoundException("form", form_id)
        assigned = await self._live_assignments(user_id)
        enforce(
            check_form_access(PrincipalRole.MANAGED_USER, user_id, form, assigned),
            "form",
            "read",
        )
        return form

    # Public

    async def list_published(self) -> list[PublicFormView]:
        return [PublicFormView.from_form(f) for f in await self._forms.list_published()]

    async def get_public(self, public_token: str) -> PublicFormView:
        """Return the public view; unpublished and missing forms are both NotFound."""
        form = await self._forms.get_by_public_token(public_token)
        if form is None:
            raise ResourceNotFoundException("form", public_token)
        enforce_public(check_public(form), public_token)
        return PublicFormView.from_form(form)

    # Standalone variant

    async def save_standalone(
        self,
        owner_id: str,
        form_id: str | None,
        title: str | None,
        description: str | None,
        fields: Any,
    ) -> tuple[FormResult, bool]:
        """Create, or update the caller's form when form_id is given.

        Returns:
            (form, created).

        Raises:
            ValidationException: No valid field.
            ResourceNotFoundException: form_id is not one of the caller's forms.
        """
        definitions = valid_fields(fields, require_one=True)
        if not form_id:
            form = await self._forms.create(
                owner_id=owner_id,
                owner_role=PrincipalRole.STANDALONE_USER,
                title=_title_or_default(title),
                description=description or "",
                fields=definitions,
            )
            logger.info("Form %s created by %s", form.id, owner_id)
            return form, True
        existing = await self._forms.get_by_id(form_id)
        if existing is None or existing.owner_id != owner_id:
            raise ResourceNotFoundException("form", form_id)
        updated = await self._forms.update(
            form_id,
            {
                "title": _title_or_default(title),
                "description": description or "",
                "fields": [f.to_dict() for f in definitions],
            },
        )
        if updated is None:
            raise ResourceNotFoundException("form", form_id)
        return updated, False

    async def list_mine(self, owner_id: str) -> list[FormResult]:
        return await self._forms.list_by_owner(owner_id)

    async def get_shared(self, user_id: str, form_id: str) -> FormResult:
        """Return any standalone-owned form by id (share-by-link), never a tenant-owned one."""
        form = await self._forms.get_by_id(form_id)
        if form is None:
            raise ResourceNotFoundException("form", form_id)
        enforce(
            check_form_access(PrincipalRole.STANDALONE_USER, user_id, form),
            "form",
            "read",
        )
        return form

    async def delete_standalone(self, owner_id: str, form_id: str) -> int:
        """Owner-scoped delete; another user's form is reported as missing."""
        form = await self._forms.get_by_id(form_id)
        if form is None or form.owner_id != owner_id:
            raise ResourceNotFoundException("form", form_id)
        return await self.delete(owner_id, form_id)
