"""Validation rules for new identities (registration, admin-created users, password resets)."""

from __future__ import annotations

from email_validator import EmailNotValidError, validate_email

from formdesk.core.constants import MIN_PASSWORD_LENGTH
from formdesk.domain.exceptions import ValidationException


def validate_password(password: str, password_confirm: str | None = None) -> None:
    if len(password or "") < MIN_PASSWORD_LENGTH:
        raise ValidationException(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters long.",
            field="password",
        )
    if password_confirm is not None and password_confirm != password:
        raise ValidationException("Passwords do not match.", field="password_confirm")


def validate_new_identity(
    name: str,
    email: str,
    password: str,
    password_confirm: str | None = None,
    name_field: str = "username",
) -> str:
    """Check name, email syntax and password; return the normalised (lowercased) email.

    Raises:
        ValidationException: First rule that fails.
    """
    if not (name or "").strip():
        raise ValidationException("All fields are required.", field=name_field)
    try:
        checked = validate_email((email or "").strip(), check_deliverability=False)
    except EmailNotValidError as e:
        raise ValidationException(f"Invalid email: {e}", field="email") from None
    validate_password(password, password_confirm)
    return checked.normalized.lower()
