"""Helpers shared by the Firestore repositories."""

from __future__ import annotations

import asyncio
from collections.abc import Iterable
from datetime import UTC, datetime
from typing import Any, TypeVar

from formdesk.infrastructure.security.password import get_password_hash, verify_password

T = TypeVar("T")

_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)

_DUMMY_PASSWORD = "not-a-real-password"


async def make_dummy_hash(rounds: int) -> str:
    """Hash of a throwaway password at the configured cost, compared against for unknown identities."""
    return await asyncio.to_thread(get_password_hash, _DUMMY_PASSWORD, rounds)


class CredentialHashing:
    """Bcrypt work for a repository that stores password hashes, run off the event loop.

    dummy_hash is normally computed once at startup; without it the first
    unknown-identity check computes one for this instance.
    """

    def __init__(self, rounds: int, dummy_hash: str | None = None) -> None:
        self._rounds = rounds
        self._dummy_hash = dummy_hash

    async def hash(self, password: str) -> str:
        return await asyncio.to_thread(get_password_hash, password, self._rounds)

    async def check(self, password: str, hashed: str | None) -> bool:
        """A missing hash never matches."""
        if not hashed:
            return False
        return await asyncio.to_thread(verify_password, password, hashed)

    async def burn(self, password: str) -> None:
        """One bcrypt comparison so unknown identities take as long as known ones."""
        if self._dummy_hash is None:
            self._dummy_hash = await make_dummy_hash(self._rounds)
        await asyncio.to_thread(verify_password, password, self._dummy_hash)


def normalize_email(email: str) -> str:
    return email.strip().lower()


def newest_first(items: Iterable[T]) -> list[T]:
    """Sort read-models by created_at descending (sorted client-side; no composite index needed)."""
    return sorted(
        items,
        key=lambda item: getattr(item, "created_at", None) or _EPOCH,
        reverse=True,
    )


def chunked(items: list[Any], size: int) -> list[list[Any]]:
    return [items[i : i + size] for i in range(0, len(items), size)]
