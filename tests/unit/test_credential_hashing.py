"""Tests for repository password hashing and the unknown-identity timing check."""

from httpx import AsyncClient

from formdesk.infrastructure.firebase.repositories import FirestoreTenantOwnerRepository
from formdesk.infrastructure.firebase.repositories._common import (
    CredentialHashing,
    make_dummy_hash,
)
from formdesk.main import app


async def test_hash_uses_configured_rounds() -> None:
    hashing = CredentialHashing(rounds=5)
    hashed = await hashing.hash("secret123")
    assert hashed.startswith("$2b$05$")
    assert await hashing.check("secret123", hashed)
    assert not await hashing.check("secret123", None)


async def test_dummy_hash_follows_rounds() -> None:
    assert (await make_dummy_hash(4)).startswith("$2b$04$")


async def test_unknown_identity_compares_against_given_dummy_hash(memory_client) -> None:
    """The repository uses the startup dummy hash instead of computing its own."""
    dummy = await make_dummy_hash(4)
    repo = FirestoreTenantOwnerRepository(memory_client, bcrypt_rounds=4, dummy_hash=dummy)
    assert await repo.authenticate("nobody@example.com", "secret123") is None
    assert repo._hashing._dummy_hash == dummy


async def test_lifespan_builds_dummy_hash_at_configured_cost(client: AsyncClient) -> None:
    assert app.state.dummy_password_hash.startswith("$2b$04$")
