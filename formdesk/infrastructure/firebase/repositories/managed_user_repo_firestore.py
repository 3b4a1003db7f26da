"""Firestore-backed managed user repository (implements IManagedUserRepository)."""

from __future__ import annotations

from typing import Any

from formdesk.application.dtos.principal import ManagedUserResult
from formdesk.core.constants import MAX_BATCH_WRITES
from formdesk.infrastructure.firebase.client import DocumentClient
from formdesk.infrastructure.firebase.collections import (
    COLLECTION_FORMS,
    COLLECTION_MANAGED_USERS,
)
from formdesk.infrastructure.firebase.repositories._common import (
    CredentialHashing,
    chunked,
    newest_first,
    normalize_email,
)
from formdesk.shared.utils.datetime import utc_now
from formdesk.shared.utils.generators import generate_cuid


class FirestoreManagedUserRepository:
    """Managed user repository using Firestore. Email/username are unique per tenant."""

    def __init__(
        self,
        client: DocumentClient,
        bcrypt_rounds: int = 12,
        dummy_hash: str | None = None,
    ) -> None:
        self._client = client
        self._coll = client.collection(COLLECTION_MANAGED_USERS)
        self._hashing = CredentialHashing(bcrypt_rounds, dummy_hash)

    def _to_result(self, doc_id: str, data: dict[str, Any]) -> ManagedUserResult:
        return ManagedUserResult(
            id=doc_id,
            tenant_id=data.get("tenant_id", ""),
            username=data.get("username", ""),
            email=data.get("email", ""),
            assigned_forms=tuple(data.get("assigned_forms") or ()),
            has_password=bool(data.get("hashed_password")),
            is_active=data.get("is_active", True),
            created_at=data.get("created_at"),
        )

    async def get_by_id(self, user_id: str) -> ManagedUserResult | None:
        """Return managed user by ID."""
        doc = await self._coll.document(user_id).get()
        if not doc:
            return None
        return self._to_result(doc.id, doc.to_dict())

    async def get_by_id_and_tenant(
        self, user_id: str, tenant_id: str
    ) -> ManagedUserResult | None:
        """Return managed user by ID if they belong to the tenant."""
        user = await self.get_by_id(user_id)
        if user is None or user.tenant_id != tenant_id:
            return None
        return user

    async def get_by_email_in_tenant(
        self, email: str, tenant_id: str
    ) -> ManagedUserResult | None:
        """Return the tenant's managed user with this email."""
        q = (
            self._coll.where("tenant_id", "==", tenant_id)
            .where("email", "==", normalize_email(email))
            .limit(1)
        )
        async for snapshot in q.stream():
            return self._to_result(snapshot.id, snapshot.to_dict())
        return None

    async def exists_in_tenant(self, tenant_id: str, email: str, username: str) -> bool:
        """Return True if email or (lowercased) username is taken in the tenant."""
        for field, value in (
            ("email", normalize_email(email)),
            ("username_lower", username.strip().lower()),
        ):
            q = self._coll.where("tenant_id", "==", tenant_id).where(field, "==", value).limit(1)
            async for _ in q.stream():
                return True
        return False

    async def list_by_tenant(self, tenant_id: str) -> list[ManagedUserResult]:
        """Return the tenant's managed users, newest first."""
        results = [
            self._to_result(snapshot.id, snapshot.to_dict())
            async for snapshot in self._coll.where("tenant_id", "==", tenant_id).stream()
        ]
        return newest_first(results)

    async def create(
        self,
        tenant_id: str,
        username: str,
        email: str,
        password: str | None,
        assigned_forms: tuple[str, ...] = (),
    ) -> ManagedUserResult:
        """Create managed user; password None creates a passwordless account."""
        hashed = await self._hashing.hash(password) if password else None
        now = utc_now()
        user_id = generate_cuid()
        username = username.strip()
        email = normalize_email(email)
        await self._coll.document(user_id).set({
            "tenant_id": tenant_id,
            "username": username,
            "username_lower": username.lower(),
            "email": email,
            "hashed_password": hashed,
            "assigned_forms": list(assigned_forms),
            "is_active": True,
            "created_at": now,
            "updated_at": now,
        })
        return ManagedUserResult(
            id=user_id,
            tenant_id=tenant_id,
            username=username,
            email=email,
            assigned_forms=tuple(assigned_forms),
            has_password=hashed is not None,
            is_active=True,
            created_at=now,
        )

    async def authenticate_any_tenant(
        self, email: str, password: str
    ) -> ManagedUserResult | None:
        """Return the first managed user (any tenant) with this email whose password verifies."""
        candidates = [
            snapshot
            async for snapshot in self._coll.where("email", "==", normalize_email(email)).stream()
        ]
        if not candidates:
            await self._hashing.burn(password)
            return None
        for snapshot in candidates:
            data = snapshot.to_dict()
            if not data.get("is_active", True):
                continue
            if await self._hashing.check(password, data.get("hashed_password")):
                return self._to_result(snapshot.id, data)
        return None

    async def check_password(self, user_id: str, password: str) -> bool:
        """Return True if password matches the stored hash."""
        doc = await self._coll.document(user_id).get()
        if not doc:
            await self._hashing.burn(password)
            return False
        return await self._hashing.check(password, doc.to_dict().get("hashed_password"))

    async def set_password(self, user_id: str, password: str) -> None:
        """Hash and store a new password."""
        hashed = await self._hashing.hash(password)
        await self._coll.document(user_id).update(
            {"hashed_password": hashed, "updated_at": utc_now()}
        )

    async def delete(self, user_id: str, tenant_id: str) -> None:
        """Delete the user and pull it from the tenant's forms' assigned_users.

        The user document is deleted in the last batch, so an interrupted delete
        is completed by repeating it.
        """
        form_ids = [
            snapshot.id
            async for snapshot in self._client.collection(COLLECTION_FORMS)
            .where("assigned_users", "array_contains", user_id)
            .stream()
            if snapshot.to_dict().get("owner_id") == tenant_id
        ]
        writes: list[dict[str, Any]] = [
            {
                "path": f"{COLLECTION_FORMS}/{form_id}",
                "array_remove": {"assigned_users": [user_id]},
                "exists": True,
            }
            for form_id in form_ids
        ]
        writes.append({"path": f"{COLLECTION_MANAGED_USERS}/{user_id}", "delete": True})
        for batch in chunked(writes, MAX_BATCH_WRITES):
            await self._client.batch_write(batch)
