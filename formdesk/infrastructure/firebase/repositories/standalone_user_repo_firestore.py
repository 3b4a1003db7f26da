"""Firestore-backed standalone user repository (implements IStandaloneUserRepository)."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from formdesk.application.dtos.principal import StandaloneUserResult
from formdesk.infrastructure.firebase._rest_client import PreconditionFailedError
from formdesk.infrastructure.firebase.client import DocumentClient
from formdesk.infrastructure.firebase.collections import COLLECTION_STANDALONE_USERS
from formdesk.infrastructure.firebase.repositories._common import (
    CredentialHashing,
    normalize_email,
)
from formdesk.shared.utils.datetime import ensure_utc, utc_now
from formdesk.shared.utils.generators import generate_cuid


class FirestoreStandaloneUserRepository:
    """Standalone user repository using Firestore. Email is globally unique."""

    def __init__(
        self,
        client: DocumentClient,
        bcrypt_rounds: int = 12,
        dummy_hash: str | None = None,
    ) -> None:
        self._client = client
        self._coll = client.collection(COLLECTION_STANDALONE_USERS)
        self._hashing = CredentialHashing(bcrypt_rounds, dummy_hash)

    def _to_result(self, doc_id: str, data: dict[str, Any]) -> StandaloneUserResult:
        return StandaloneUserResult(
            id=doc_id,
            name=data.get("name", ""),
            email=data.get("email", ""),
            google_id=data.get("google_id"),
            picture=data.get("picture"),
            has_password=bool(data.get("hashed_password")),
            is_active=data.get("is_active", True),
            created_at=data.get("created_at"),
        )

    async def _first(self, field: str, value: Any) -> StandaloneUserResult | None:
        async for snapshot in self._coll.where(field, "==", value).limit(1).stream():
            return self._to_result(snapshot.id, snapshot.to_dict())
        return None

    async def get_by_id(self, user_id: str) -> StandaloneUserResult | None:
        """Return standalone user by ID."""
        doc = await self._coll.document(user_id).get()
        if not doc:
            return None
        return self._to_result(doc.id, doc.to_dict())

    async def get_by_email(self, email: str) -> StandaloneUserResult | None:
        return await self._first("email", normalize_email(email))

    async def get_by_google_id(self, google_id: str) -> StandaloneUserResult | None:
        return await self._first("google_id", google_id)

    async def create(
        self,
        name: str,
        email: str,
        password: str | None,
        google_id: str | None = None,
        picture: str | None = None,
    ) -> StandaloneUserResult:
        """Create standalone user; password None for Google-only accounts."""
        hashed = await self._hashing.hash(password) if password else None
        now = utc_now()
        user_id = generate_cuid()
        email = normalize_email(email)
        await self._coll.document(user_id).set({
            "name": name.strip(),
            "email": email,
            "hashed_password": hashed,
            "google_id": google_id,
            "picture": picture,
            "reset_token_hash": None,
            "reset_token_expires_at": None,
            "is_active": True,
            "created_at": now,
            "updated_at": now,
        })
        return StandaloneUserResult(
            id=user_id,
            name=name.strip(),
            email=email,
            google_id=google_id,
            picture=picture,
            has_password=hashed is not None,
            is_active=True,
            created_at=now,
        )

    async def authenticate(self, email: str, password: str) -> StandaloneUserResult | None:
        """Verify email/password; return user or None. Google-only accounts never match."""
        q = self._coll.where("email", "==", normalize_email(email)).limit(1)
        async for snapshot in q.stream():
            data = snapshot.to_dict()
            if not data.get("is_active", True) or not data.get("hashed_password"):
                await self._hashing.burn(password)
                return None
            if not await self._hashing.check(password, data["hashed_password"]):
                return None
            return self._to_result(snapshot.id, data)
        await self._hashing.burn(password)
        return None

    async def link_google(
        self, user_id: str, google_id: str, picture: str | None
    ) -> StandaloneUserResult | None:
        """Attach a Google subject (and picture, if given) to an existing account."""
        changes: dict[str, Any] = {"google_id": google_id, "updated_at": utc_now()}
        if picture:
            changes["picture"] = picture
        if not await self._coll.document(user_id).update(changes):
            return None
        return await self.get_by_id(user_id)

    async def set_reset_token(
        self, user_id: str, token_hash: str, expires_at: datetime
    ) -> None:
        """Store the reset token digest; a new request replaces any previous token."""
        await self._coll.document(user_id).update({
            "reset_token_hash": token_hash,
            "reset_token_expires_at": expires_at,
            "updated_at": utc_now(),
        })

    async def consume_reset_token(
        self, token_hash: str, new_password: str, now: datetime
    ) -> bool:
        """Set the password and clear the token if it matches and has not expired."""
        q = self._coll.where("reset_token_hash", "==", token_hash).limit(1)
        async for snapshot in q.stream():
            expires_at = ensure_utc(snapshot.to_dict().get("reset_token_expires_at"))
            if expires_at is None or expires_at <= now:
                return False
            hashed = await self._hashing.hash(new_password)
            try:
                return await self._coll.document(snapshot.id).update(
                    {
                        "hashed_password": hashed,
                        "reset_token_hash": None,
                        "reset_token_expires_at": None,
                        "updated_at": utc_now(),
                    },
                    update_time=snapshot.update_time,
                )
            except PreconditionFailedError:
                # Another request consumed the token first.
                return False
        return False
