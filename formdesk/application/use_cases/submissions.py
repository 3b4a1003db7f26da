"""Submission lifecycle: authenticated and public submit, listings, amend."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any

from formdesk.application.dtos.form import FormResult
from formdesk.application.dtos.principal import PrincipalClaims
from formdesk.application.dtos.submission import SubmissionResult
from formdesk.application.interfaces.repositories import (
    IFormRepository,
    IManagedUserRepository,
    ISubmissionRepository,
)
from formdesk.application.services.access_policy import (
    check_form_access,
    check_owner,
    check_public,
    check_self,
    enforce,
    enforce_public,
)
from formdesk.application.services.user_service import UserService
from formdesk.core.constants import ANONYMOUS_SUBMITTER_PREFIX
from formdesk.domain.enums import PrincipalRole, SubmissionStatus
from formdesk.domain.exceptions import (
    AuthenticationException,
    ResourceNotFoundException,
    SubmissionLimitExceededException,
    ValidationException,
)
from formdesk.shared.utils.generators import generate_cuid

logger = logging.getLogger(__name__)


def _require_answers(answers: Any) -> dict[str, Any]:
    if not isinstance(answers, dict):
        raise ValidationException("Submission data is required", field="answers")
    return answers


class SubmissionService:
    """Create, list and amend submissions under the authorization guard."""

    def __init__(
        self,
        forms: IFormRepository,
        submissions: ISubmissionRepository,
        managed_users: IManagedUserRepository,
        user_service: UserService,
    ) -> None:
        self._forms = forms
        self._submissions = submissions
        self._users = managed_users
        self._user_service = user_service

    async def _store(
        self,
        form: FormResult,
        submitted_by: str,
        answers: dict[str, Any],
        *,
        enforce_limit: bool,
    ) -> SubmissionResult:
        """Reserve a counter slot, then insert."""
        await self._forms.reserve_submission_slot(form.id, enforce_limit=enforce_limit)
        return await self._insert(form, submitted_by, answers)

    async def _insert(
        self,
        form: FormResult,
        submitted_by: str,
        answers: dict[str, Any],
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> SubmissionResult:
        """Insert into an already reserved slot; the slot is given back if the insert fails."""
        try:
            submission = await self._submissions.create(
                form_id=form.id,
                submitted_by=submitted_by,
                tenant_id=form.owner_id,
                answers=answers,
                status=SubmissionStatus.SUBMITTED,
                ip_address=ip_address,
                user_agent=user_agent,
            )
        except Exception:
            await self._forms.release_submission_slot(form.id)
            raise
        logger.info("Submission %s stored for form %s", submission.id, form.id)
        return submission

    async def _attach_titles(
        self, owner_id: str, submissions: list[SubmissionResult]
    ) -> list[SubmissionResult]:
        titles = {f.id: f.title for f in await self._forms.list_by_owner(owner_id)}
        return [replace(s, form_title=titles.get(s.form_id)) for s in submissions]

    async def submit(
        self, principal: PrincipalClaims, form_id: str, answers: Any
    ) -> SubmissionResult:
        """Submit answers as an authenticated principal.

        Raises:
            ValidationException: Missing form id or answers.
            ResourceNotFoundException: Form does not exist.
            AuthorizationException: Not assigned (managed user) or tenant-owned form (standalone user).
        """
        if not form_id or answers is None:
            raise ValidationException("Form ID and data are required")
        answers = _require_answers(answers)
        form = await self._forms.get_by_id(form_id)
        if form is None:
            raise ResourceNotFoundException("form", form_id)
        assigned: tuple[str, ...] = ()
        if principal.role == PrincipalRole.MANAGED_USER:
            user = await self._users.get_by_id(principal.id)
            if user is None or not user.is_active:
                raise AuthenticationException("User not found or inactive")
            assigned = user.assigned_forms
        enforce(
            check_form_access(principal.role, principal.id, form, assigned),
            "form",
            "submit",
        )
        return await self._store(form, principal.id, answers, enforce_limit=False)

    async def submit_public(
        self,
        public_token: str,
        answers: Any,
        email: str | None = None,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> SubmissionResult:
        """Submit to a published form without a session.

        With an email the submitter is the form tenant's managed user for it
        (created passwordless and assigned if absent); without one an
        anonymous submitter id is generated. The cap is checked and a slot
        reserved before any user or assignment is written.

        Raises:
            ResourceNotFoundException: No published form with this token.
            SubmissionLimitExceededException: Cap reached, or this submitter already submitted.
            DocumentVersionConflictException: Lost a race for the last slots; retry.
        """
        form = await self._forms.get_by_public_token(public_token)
        if form is None:
            raise ResourceNotFoundException("form", public_token)
        enforce_public(check_public(form), public_token)
        answers = _require_answers(answers)

        if email:
            existing = await self._users.get_by_email_in_tenant(email, form.owner_id)
            if (
                existing is not None
                and not form.public_settings.allow_multiple_submissions
                and await self._submissions.exists_for_submitter(form.id, existing.id)
            ):
                raise SubmissionLimitExceededException(
                    form.id, message="You have already submitted this form."
                )

        limit = form.public_settings.submission_limit
        if limit is not None and form.submission_count >= limit:
            raise SubmissionLimitExceededException(form.id, limit=limit)
        await self._forms.reserve_submission_slot(form.id, enforce_limit=True)

        if email:
            try:
                user = await self._user_service.enroll_for_form(form, email)
            except Exception:
                await self._forms.release_submission_slot(form.id)
                raise
            submitted_by = user.id
        else:
            submitted_by = f"{ANONYMOUS_SUBMITTER_PREFIX}{generate_cuid()}"

        return await self._insert(
            form,
            submitted_by,
            answers,
            ip_address=ip_address,
            user_agent=user_agent,
        )

    async def list_mine(self, principal: PrincipalClaims) -> list[SubmissionResult]:
        """Return the caller's own submissions, newest first."""
        return await self._submissions.list_by_submitter(principal.id)

    async def get_mine(
        self, principal: PrincipalClaims, submission_id: str
    ) -> SubmissionResult:
        submission = await self._submissions.get_by_id(submission_id)
        if submission is None:
            raise ResourceNotFoundException("submission", submission_id)
        enforce(check_self(principal.id, submission.submitted_by), "submission", "read")
        return submission

    async def list_for_form(self, owner_id: str, form_id: str) -> list[SubmissionResult]:
        """Return the submissions of one of the owner's forms, newest first."""
        form = await self._forms.get_by_id(form_id)
        if form is None:
            raise ResourceNotFoundException("form", form_id)
        enforce(check_owner(owner_id, form.owner_id), "form", "read_submissions")
        submissions = await self._submissions.list_by_form(form_id)
        return [replace(s, form_title=form.title) for s in submissions]

    async def list_for_tenant(self, owner_id: str) -> list[SubmissionResult]:
        """Return every submission to the owner's forms, newest first."""
        submissions = await self._submissions.list_by_tenant(owner_id)
        return await self._attach_titles(owner_id, submissions)

    async def list_for_user(self, owner_id: str, user_id: str) -> list[SubmissionResult]:
        """Return one managed user's submissions to the owner's forms."""
        user = await self._users.get_by_id(user_id)
        if user is None:
            raise ResourceNotFoundException("user", user_id)
        enforce(check_owner(owner_id, user.tenant_id), "user", "read_submissions")
        submissions = [
            s
            for s in await self._submissions.list_by_submitter(user_id)
            if s.tenant_id == owner_id
        ]
        return await self._attach_titles(owner_id, submissions)

    async def amend(
        self, principal: PrincipalClaims, submission_id: str, answers: Any
    ) -> SubmissionResult:
        """Replace the answers of the caller's own submission (no history kept).

        Raises:
            ValidationException: Answers missing.
            ResourceNotFoundException: No such submission owned by the caller.
        """
        answers = _require_answers(answers)
        submission = await self._submissions.get_by_id(submission_id)
        if submission is None or not check_self(principal.id, submission.submitted_by).allowed:
            raise ResourceNotFoundException("submission", submission_id)
        updated = await self._submissions.update_answers(submission_id, answers)
        if updated is None:
            raise ResourceNotFoundException("submission", submission_id)
        return updated
