"""Tests for session token creation and verification."""

from datetime import timedelta

import pytest
from jose import jwt

from formdesk.core.config import get_settings
from formdesk.infrastructure.security.jwt import create_access_token, verify_token


def test_round_trip_keeps_claims() -> None:
    """A fresh token decodes to its claims plus exp."""
    token = create_access_token(
        {"sub": "u1", "role": "managed_user", "tenant_id": "t1", "assigned_forms": ["f1"]}
    )
    payload = verify_token(token)
    assert payload["sub"] == "u1"
    assert payload["tenant_id"] == "t1"
    assert payload["assigned_forms"] == ["f1"]
    assert "exp" in payload


def test_expired_token_rejected() -> None:
    token = create_access_token(
        {"sub": "u1", "role": "tenant_owner"}, expires_delta=timedelta(seconds=-5)
    )
    with pytest.raises(ValueError):
        verify_token(token)


def test_missing_role_rejected() -> None:
    token = create_access_token({"sub": "u1"})
    with pytest.raises(ValueError, match="role"):
        verify_token(token)


def test_foreign_signature_rejected() -> None:
    settings = get_settings()
    token = jwt.encode(
        {"sub": "u1", "role": "tenant_owner", "exp": 4102444800},
        "not-the-secret-key-not-the-secret-key",
        algorithm=settings.algorithm,
    )
    with pytest.raises(ValueError):
        verify_token(token)
