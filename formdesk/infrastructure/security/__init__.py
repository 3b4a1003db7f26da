"""Security: JWT and password hashing."""

from formdesk.infrastructure.security.jwt import create_access_token, verify_token
from formdesk.infrastructure.security.password import get_password_hash, verify_password

__all__ = [
    "create_access_token",
    "get_password_hash",
    "verify_password",
    "verify_token",
]
