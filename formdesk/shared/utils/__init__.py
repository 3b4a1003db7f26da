"""Shared utilities: datetime and generators."""

from formdesk.shared.utils.datetime import ensure_utc, utc_now
from formdesk.shared.utils.generators import (
    generate_cuid,
    generate_public_token,
    generate_reset_token,
    generate_username_from_email,
    hash_token,
)

__all__ = [
    "ensure_utc",
    "generate_cuid",
    "generate_public_token",
    "generate_reset_token",
    "generate_username_from_email",
    "hash_token",
    "utc_now",
]
