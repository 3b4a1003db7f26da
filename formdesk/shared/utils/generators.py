"""ID and token generators (CUID for document ids, UUID4 for public links, URL-safe reset tokens)."""

import hashlib
import secrets
import uuid

from cuid2 import cuid_wrapper

cuid_generator = cuid_wrapper()


def generate_cuid() -> str:
    """Generate a collision-resistant unique identifier (CUID2).

    Returns:
        A new CUID string.
    """
    result = cuid_generator()
    if not isinstance(result, str):
        raise TypeError(
            f"Expected str from cuid_generator, got {type(result).__name__}"
        )
    return result


def generate_public_token() -> str:
    """Return an unguessable public-access token for a published form (UUID4, 122 random bits)."""
    return str(uuid.uuid4())


def generate_reset_token() -> str:
    """Return a single-use password reset token (256 random bits, URL-safe)."""
    return secrets.token_urlsafe(32)


def generate_username_from_email(email: str) -> str:
    """Derive a username from the email local part plus a short random suffix."""
    local = email.split("@", 1)[0].strip() or "user"
    return f"{local}_{secrets.token_hex(3)}"


def hash_token(token: str) -> str:
    """Return the hex SHA-256 of a reset token; only the digest is stored."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()
