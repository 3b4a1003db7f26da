"""Pytest configuration and fixtures for formdesk.

The environment is set before formdesk.main is imported, so the app is built
for the in-memory document store with cheap bcrypt rounds and rate limiting
off. Every HTTP test runs the app lifespan, which gives it a fresh store.
"""

import os

os.environ.setdefault("SECRET_KEY", "test-secret-key-for-formdesk-tests")
os.environ["DATABASE_BACKEND"] = "memory"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["FRONTEND_URL"] = "http://frontend.test"

from collections.abc import Awaitable, Callable  # noqa: E402

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from formdesk.core.config import get_settings  # noqa: E402

get_settings.cache_clear()

from formdesk.infrastructure.firebase._memory_client import MemoryDocumentClient  # noqa: E402
from formdesk.main import app  # noqa: E402

AuthHeaders = dict[str, str]

SAMPLE_FIELDS = [
    {"id": "name", "type": "text", "label": "Name", "required": True},
    {"id": "age", "type": "number", "label": "Age", "min": "18", "max": "99"},
]


@pytest.fixture
async def client() -> AsyncClient:
    """Async HTTP client against the FastAPI app (ASGI) with its lifespan running."""
    async with app.router.lifespan_context(app):
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            yield ac


@pytest.fixture
def memory_client() -> MemoryDocumentClient:
    """Fresh in-memory document store for repository and service tests."""
    return MemoryDocumentClient()


def _bearer(token: str) -> AuthHeaders:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def signup_owner(client: AsyncClient) -> Callable[..., Awaitable[AuthHeaders]]:
    """Factory: register a tenant owner over HTTP and return its auth headers."""

    async def _signup(username: str = "owner", email: str = "owner@example.com") -> AuthHeaders:
        response = await client.post(
            "/api/v1/auth/tenant/signup",
            json={"username": username, "email": email, "password": "secret123"},
        )
        assert response.status_code == 201, response.text
        return _bearer(response.json()["data"]["access_token"])

    return _signup


@pytest.fixture
async def owner_headers(signup_owner) -> AuthHeaders:
    return await signup_owner()


@pytest.fixture
def create_managed_user(client: AsyncClient) -> Callable[..., Awaitable[dict]]:
    """Factory: create a managed user in the owner's tenant; returns the user payload."""

    async def _create(
        headers: AuthHeaders, username: str = "alice", email: str = "alice@example.com"
    ) -> dict:
        response = await client.post(
            "/api/v1/admin/users",
            json={"username": username, "email": email, "password": "secret123"},
            headers=headers,
        )
        assert response.status_code == 201, response.text
        return response.json()["data"]

    return _create


@pytest.fixture
def login_managed_user(client: AsyncClient) -> Callable[..., Awaitable[AuthHeaders]]:
    async def _login(email: str = "alice@example.com", password: str = "secret123") -> AuthHeaders:
        response = await client.post(
            "/api/v1/auth/user/login", json={"email": email, "password": password}
        )
        assert response.status_code == 200, response.text
        return _bearer(response.json()["data"]["access_token"])

    return _login


@pytest.fixture
def create_form(client: AsyncClient) -> Callable[..., Awaitable[dict]]:
    """Factory: create a tenant-owned form; returns the form payload."""

    async def _create(headers: AuthHeaders, title: str = "Survey", fields=None) -> dict:
        response = await client.post(
            "/api/v1/admin/forms",
            json={"title": title, "fields": SAMPLE_FIELDS if fields is None else fields},
            headers=headers,
        )
        assert response.status_code == 201, response.text
        return response.json()["data"]

    return _create


@pytest.fixture
def register_standalone(client: AsyncClient) -> Callable[..., Awaitable[AuthHeaders]]:
    async def _register(name: str = "Sam", email: str = "sam@example.com") -> AuthHeaders:
        response = await client.post(
            "/api/v1/auth/register",
            json={"name": name, "email": email, "password": "secret123"},
        )
        assert response.status_code == 201, response.text
        return _bearer(response.json()["data"]["access_token"])

    return _register
