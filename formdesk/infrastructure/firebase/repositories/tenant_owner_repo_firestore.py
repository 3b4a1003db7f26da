"""Firestore-backed tenant owner repository (implements ITenantOwnerRepository)."""

from __future__ import annotations

from typing import Any

from formdesk.application.dtos.principal import TenantOwnerResult
from formdesk.infrastructure.firebase.client import DocumentClient
from formdesk.infrastructure.firebase.collections import COLLECTION_TENANT_OWNERS
from formdesk.infrastructure.firebase.repositories._common import (
    CredentialHashing,
    normalize_email,
)
from formdesk.shared.utils.datetime import utc_now
from formdesk.shared.utils.generators import generate_cuid


class FirestoreTenantOwnerRepository:
    """Tenant owner repository using Firestore. Email and username are globally unique."""

    def __init__(
        self,
        client: DocumentClient,
        bcrypt_rounds: int = 12,
        dummy_hash: str | None = None,
    ) -> None:
        self._client = client
        self._coll = client.collection(COLLECTION_TENANT_OWNERS)
        self._hashing = CredentialHashing(bcrypt_rounds, dummy_hash)

    def _to_result(self, doc_id: str, data: dict[str, Any]) -> TenantOwnerResult:
        return TenantOwnerResult(
            id=doc_id,
            username=data.get("username", ""),
            email=data.get("email", ""),
            is_active=data.get("is_active", True),
            created_at=data.get("created_at"),
        )

    async def get_by_id(self, owner_id: str) -> TenantOwnerResult | None:
        """Return tenant owner by ID."""
        doc = await self._coll.document(owner_id).get()
        if not doc:
            return None
        return self._to_result(doc.id, doc.to_dict())

    async def exists(self, email: str, username: str) -> bool:
        """Return True if the email or the (lowercased) username is taken."""
        for field, value in (
            ("email", normalize_email(email)),
            ("username_lower", username.strip().lower()),
        ):
            async for _ in self._coll.where(field, "==", value).limit(1).stream():
                return True
        return False

    async def create(self, username: str, email: str, password: str) -> TenantOwnerResult:
        """Create tenant owner with hashed password; return created owner."""
        hashed = await self._hashing.hash(password)
        now = utc_now()
        owner_id = generate_cuid()
        username = username.strip()
        email = normalize_email(email)
        await self._coll.document(owner_id).set({
            "username": username,
            "username_lower": username.lower(),
            "email": email,
            "hashed_password": hashed,
            "is_active": True,
            "created_at": now,
            "updated_at": now,
        })
        return TenantOwnerResult(
            id=owner_id, username=username, email=email, is_active=True, created_at=now
        )

    async def authenticate(self, email: str, password: str) -> TenantOwnerResult | None:
        """Verify email/password; return owner or None."""
        q = self._coll.where("email", "==", normalize_email(email)).limit(1)
        async for snapshot in q.stream():
            data = snapshot.to_dict()
            if not data.get("is_active", True):
                return None
            if not await self._hashing.check(password, data.get("hashed_password")):
                return None
            return self._to_result(snapshot.id, data)
        await self._hashing.burn(password)
        return None
