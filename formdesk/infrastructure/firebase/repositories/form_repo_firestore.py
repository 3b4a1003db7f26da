"""Firestore-backed form repository (implements IFormRepository).

Also owns the writes that must commit together with a form: the assignment
mirror on managed users, the submission counter, and the cascading delete of
a form's submissions.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from formdesk.application.dtos.form import FieldDefinition, FormResult, PublicFormSettings
from formdesk.core.constants import MAX_BATCH_WRITES
from formdesk.domain.enums import PrincipalRole
from formdesk.domain.exceptions import (
    DocumentVersionConflictException,
    ResourceNotFoundException,
    SubmissionLimitExceededException,
)
from formdesk.infrastructure.firebase._rest_client import PreconditionFailedError
from formdesk.infrastructure.firebase.client import DocumentClient
from formdesk.infrastructure.firebase.collections import (
    COLLECTION_FORMS,
    COLLECTION_MANAGED_USERS,
    COLLECTION_SUBMISSIONS,
)
from formdesk.infrastructure.firebase.repositories._common import chunked, newest_first
from formdesk.shared.utils.datetime import utc_now
from formdesk.shared.utils.generators import generate_cuid

logger = logging.getLogger(__name__)


class FirestoreFormRepository:
    """Form repository using Firestore."""

    def __init__(self, client: DocumentClient) -> None:
        self._client = client
        self._coll = client.collection(COLLECTION_FORMS)

    def _to_result(self, doc_id: str, data: dict[str, Any]) -> FormResult:
        return FormResult(
            id=doc_id,
            owner_id=data.get("owner_id", ""),
            owner_role=PrincipalRole(data.get("owner_role", PrincipalRole.TENANT_OWNER.value)),
            title=data.get("title", ""),
            description=data.get("description") or "",
            fields=tuple(FieldDefinition.from_dict(f) for f in data.get("fields") or ()),
            is_published=bool(data.get("is_published", False)),
            public_token=data.get("public_token"),
            public_settings=PublicFormSettings.from_dict(data.get("public_settings")),
            assigned_users=tuple(data.get("assigned_users") or ()),
            submission_count=int(data.get("submission_count") or 0),
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
        )

    def _path(self, form_id: str) -> str:
        return f"{COLLECTION_FORMS}/{form_id}"

    async def create(
        self,
        owner_id: str,
        owner_role: PrincipalRole,
        title: str,
        description: str,
        fields: list[FieldDefinition],
    ) -> FormResult:
        """Create an unpublished form with no assignments and a zero counter."""
        now = utc_now()
        form_id = generate_cuid()
        data: dict[str, Any] = {
            "owner_id": owner_id,
            "owner_role": owner_role.value,
            "title": title,
            "description": description,
            "fields": [f.to_dict() for f in fields],
            "is_published": False,
            "public_token": None,
            "public_settings": PublicFormSettings().to_dict(),
            "assigned_users": [],
            "submission_count": 0,
            "created_at": now,
            "updated_at": now,
        }
        await self._coll.document(form_id).set(data)
        return self._to_result(form_id, data)

    async def get_by_id(self, form_id: str) -> FormResult | None:
        """Return form by ID."""
        doc = await self._coll.document(form_id).get()
        if not doc:
            return None
        return self._to_result(doc.id, doc.to_dict())

    async def get_by_public_token(self, public_token: str) -> FormResult | None:
        """Return form by public token (server-side where query, at most one doc)."""
        q = self._coll.where("public_token", "==", public_token).limit(1)
        async for snapshot in q.stream():
            return self._to_result(snapshot.id, snapshot.to_dict())
        return None

    async def list_by_owner(self, owner_id: str) -> list[FormResult]:
        """Return forms owned by the principal, newest first."""
        results = [
            self._to_result(snapshot.id, snapshot.to_dict())
            async for snapshot in self._coll.where("owner_id", "==", owner_id).stream()
        ]
        return newest_first(results)

    async def list_by_ids(self, form_ids: list[str]) -> list[FormResult]:
        """Return existing forms among form_ids, newest first (missing IDs skipped)."""
        forms = await asyncio.gather(*(self.get_by_id(fid) for fid in dict.fromkeys(form_ids)))
        return newest_first(f for f in forms if f is not None)

    async def list_published(self) -> list[FormResult]:
        """Return every published form, newest first."""
        results = [
            self._to_result(snapshot.id, snapshot.to_dict())
            async for snapshot in self._coll.where("is_published", "==", True).stream()
        ]
        return newest_first(results)

    async def update(self, form_id: str, changes: dict[str, Any]) -> FormResult | None:
        """Apply changes (plus updated_at); None if the form does not exist."""
        payload = dict(changes)
        payload["updated_at"] = utc_now()
        if not await self._coll.document(form_id).update(payload):
            return None
        return await self.get_by_id(form_id)

    async def assign_users(
        self, form_id: str, user_ids: list[str], removed_user_ids: list[str] | None = None
    ) -> FormResult | None:
        """Replace the form's assigned_users and mirror the change on the users.

        form_id is unioned into each assigned user's assigned_forms and removed
        from removed_user_ids.

        The form write goes in the first batch; with more users than one batch
        holds, later batches only add the mirror on user documents.
        """
        writes: list[dict[str, Any]] = [
            {
                "path": self._path(form_id),
                "data": {"assigned_users": list(user_ids), "updated_at": utc_now()},
                "merge": True,
                "exists": True,
            }
        ]
        writes.extend(
            {
                "path": f"{COLLECTION_MANAGED_USERS}/{user_id}",
                "array_union": {"assigned_forms": [form_id]},
                "exists": True,
            }
            for user_id in user_ids
        )
        writes.extend(
            {
                "path": f"{COLLECTION_MANAGED_USERS}/{user_id}",
                "array_remove": {"assigned_forms": [form_id]},
                "exists": True,
            }
            for user_id in removed_user_ids or ()
        )
        try:
            for batch in chunked(writes, MAX_BATCH_WRITES):
                await self._client.batch_write(batch)
        except PreconditionFailedError:
            if await self.get_by_id(form_id) is None:
                return None
            raise DocumentVersionConflictException("form", form_id) from None
        return await self.get_by_id(form_id)

    async def add_assignment(self, form_id: str, user_id: str) -> None:
        """Mirror one assignment on both the form and the user in a single commit."""
        await self._client.batch_write([
            {
                "path": self._path(form_id),
                "array_union": {"assigned_users": [user_id]},
                "exists": True,
            },
            {
                "path": f"{COLLECTION_MANAGED_USERS}/{user_id}",
                "array_union": {"assigned_forms": [form_id]},
                "exists": True,
            },
        ])

    async def _increment_count(self, form_id: str, amount: int) -> None:
        try:
            await self._client.batch_write([
                {
                    "path": self._path(form_id),
                    "increment": {"submission_count": amount},
                    "exists": True,
                }
            ])
        except PreconditionFailedError:
            raise ResourceNotFoundException("form", form_id) from None

    async def reserve_submission_slot(self, form_id: str, *, enforce_limit: bool) -> None:
        """Take one slot of the form's submission counter.

        Without a cap (or with enforce_limit False) this is a server-side
        increment. With a cap it is a compare-and-set conditioned on the
        snapshot's update time, so the cap can never be exceeded.

        Raises:
            ResourceNotFoundException: Form does not exist.
            SubmissionLimitExceededException: Cap reached.
            DocumentVersionConflictException: A concurrent write won the compare-and-set.
        """
        if not enforce_limit:
            await self._increment_count(form_id, 1)
            return
        ref = self._coll.document(form_id)
        snapshot = await ref.get()
        if not snapshot:
            raise ResourceNotFoundException("form", form_id)
        data = snapshot.to_dict()
        limit = PublicFormSettings.from_dict(data.get("public_settings")).submission_limit
        if limit is None:
            await self._increment_count(form_id, 1)
            return
        count = int(data.get("submission_count") or 0)
        if count >= limit:
            raise SubmissionLimitExceededException(form_id, limit=limit)
        try:
            updated = await ref.update(
                {"submission_count": count + 1}, update_time=snapshot.update_time
            )
        except PreconditionFailedError:
            raise DocumentVersionConflictException("form", form_id) from None
        if not updated:
            raise ResourceNotFoundException("form", form_id)

    async def release_submission_slot(self, form_id: str) -> None:
        """Give back a reserved slot whose submission was not stored."""
        try:
            await self._increment_count(form_id, -1)
        except ResourceNotFoundException:
            logger.info("Form %s deleted before its submission slot was released", form_id)

    async def delete_with_submissions(self, form_id: str) -> int:
        """Delete the form's submissions, then the form, in atomic batches.

        The form document is in the last batch, so a delete interrupted midway
        leaves the form in place and a repeat call finishes it.

        Returns:
            Number of submissions deleted.
        """
        submission_ids = [
            snapshot.id
            async for snapshot in self._client.collection(COLLECTION_SUBMISSIONS)
            .where("form_id", "==", form_id)
            .stream()
        ]
        writes: list[dict[str, Any]] = [
            {"path": f"{COLLECTION_SUBMISSIONS}/{sid}", "delete": True}
            for sid in submission_ids
        ]
        writes.append({"path": self._path(form_id), "delete": True})
        for batch in chunked(writes, MAX_BATCH_WRITES):
            await self._client.batch_write(batch)
        logger.info(
            "Deleted form %s with %d submissions", form_id, len(submission_ids)
        )
        return len(submission_ids)
