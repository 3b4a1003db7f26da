"""Bcrypt hashes for tenant owner, managed user and standalone user passwords.

Passwords are SHA-256 digested (base64, 44 bytes) before bcrypt so that
passphrases longer than bcrypt's 72-byte input still count in full.
Both functions are blocking; repositories call them through CredentialHashing.
"""

import base64
import hashlib

import bcrypt


def _digest(password: str) -> bytes:
    return base64.b64encode(hashlib.sha256(password.encode("utf-8")).digest())


def get_password_hash(password: str, rounds: int = 12) -> str:
    """Hash a new password at the given bcrypt cost (BCRYPT_ROUNDS)."""
    return bcrypt.hashpw(_digest(password), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str | None) -> bool:
    """Compare against a stored hash; passwordless accounts and corrupt hashes never match."""
    if not hashed_password:
        return False
    try:
        return bool(bcrypt.checkpw(_digest(plain_password), hashed_password.encode("utf-8")))
    except (ValueError, TypeError):
        return False
