"""Firestore-backed submission repository (implements ISubmissionRepository)."""

from __future__ import annotations

import logging
from typing import Any

from formdesk.application.dtos.submission import SubmissionResult
from formdesk.core.constants import MAX_BATCH_WRITES
from formdesk.domain.enums import SubmissionStatus
from formdesk.infrastructure.firebase.client import DocumentClient
from formdesk.infrastructure.firebase.collections import (
    COLLECTION_FORMS,
    COLLECTION_SUBMISSIONS,
)
from formdesk.infrastructure.firebase.repositories._common import chunked, newest_first
from formdesk.shared.utils.datetime import utc_now
from formdesk.shared.utils.generators import generate_cuid

logger = logging.getLogger(__name__)


class FirestoreSubmissionRepository:
    """Submission repository using Firestore."""

    def __init__(self, client: DocumentClient) -> None:
        self._client = client
        self._coll = client.collection(COLLECTION_SUBMISSIONS)

    def _to_result(self, doc_id: str, data: dict[str, Any]) -> SubmissionResult:
        return SubmissionResult(
            id=doc_id,
            form_id=data.get("form_id", ""),
            submitted_by=data.get("submitted_by", ""),
            tenant_id=data.get("tenant_id", ""),
            answers=data.get("answers") or {},
            status=SubmissionStatus(data.get("status", SubmissionStatus.SUBMITTED.value)),
            ip_address=data.get("ip_address"),
            user_agent=data.get("user_agent"),
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
        )

    async def _list(self, field: str, value: str) -> list[SubmissionResult]:
        results = [
            self._to_result(snapshot.id, snapshot.to_dict())
            async for snapshot in self._coll.where(field, "==", value).stream()
        ]
        return newest_first(results)

    async def create(
        self,
        form_id: str,
        submitted_by: str,
        tenant_id: str,
        answers: dict[str, Any],
        status: SubmissionStatus,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> SubmissionResult:
        """Store a new submission; tenant_id is fixed at creation."""
        now = utc_now()
        submission_id = generate_cuid()
        data: dict[str, Any] = {
            "form_id": form_id,
            "submitted_by": submitted_by,
            "tenant_id": tenant_id,
            "answers": answers,
            "status": status.value,
            "ip_address": ip_address,
            "user_agent": user_agent,
            "created_at": now,
            "updated_at": now,
        }
        await self._coll.create(submission_id, data)
        return self._to_result(submission_id, data)

    async def get_by_id(self, submission_id: str) -> SubmissionResult | None:
        """Return submission by ID."""
        doc = await self._coll.document(submission_id).get()
        if not doc:
            return None
        return self._to_result(doc.id, doc.to_dict())

    async def list_by_submitter(self, submitted_by: str) -> list[SubmissionResult]:
        return await self._list("submitted_by", submitted_by)

    async def list_by_form(self, form_id: str) -> list[SubmissionResult]:
        return await self._list("form_id", form_id)

    async def list_by_tenant(self, tenant_id: str) -> list[SubmissionResult]:
        return await self._list("tenant_id", tenant_id)

    async def exists_for_submitter(self, form_id: str, submitted_by: str) -> bool:
        """Return True if submitted_by already has a submission for the form."""
        q = (
            self._coll.where("form_id", "==", form_id)
            .where("submitted_by", "==", submitted_by)
            .limit(1)
        )
        async for _ in q.stream():
            return True
        return False

    async def update_answers(
        self, submission_id: str, answers: dict[str, Any]
    ) -> SubmissionResult | None:
        """Replace answers wholesale (no history kept)."""
        ref = self._coll.document(submission_id)
        if not await ref.update({"answers": answers, "updated_at": utc_now()}):
            return None
        return await self.get_by_id(submission_id)

    async def delete_orphans(self) -> int:
        """Delete submissions whose form no longer exists (leftovers of an interrupted form delete)."""
        form_ids = {
            snapshot.id async for snapshot in self._client.collection(COLLECTION_FORMS).stream()
        }
        orphan_paths = [
            f"{COLLECTION_SUBMISSIONS}/{snapshot.id}"
            async for snapshot in self._coll.stream()
            if snapshot.to_dict().get("form_id") not in form_ids
        ]
        for batch in chunked(orphan_paths, MAX_BATCH_WRITES):
            await self._client.batch_write([{"path": p, "delete": True} for p in batch])
        if orphan_paths:
            logger.info("Deleted %d orphaned submissions", len(orphan_paths))
        return len(orphan_paths)
