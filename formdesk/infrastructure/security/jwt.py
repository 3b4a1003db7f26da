"""Session tokens for the three principal kinds.

A token carries sub (principal id) and role; managed users also carry
tenant_id and an assigned_forms snapshot. Secret, algorithm and lifetime
come from Settings.
"""

from datetime import UTC, datetime, timedelta
from typing import Any, cast

from jose import JWTError, jwt

from formdesk.core.config import get_settings

_REQUIRED_CLAIMS = ("sub", "role")


def create_access_token(
    data: dict[str, Any],
    expires_delta: timedelta | None = None,
) -> str:
    """Sign a session token for the given principal claims.

    Args:
        data: sub, role and, for managed users, tenant_id and assigned_forms.
        expires_delta: Lifetime; defaults to ACCESS_TOKEN_EXPIRE_MINUTES.
    """
    settings = get_settings()
    lifetime = (
        expires_delta
        if expires_delta is not None
        else timedelta(minutes=settings.access_token_expire_minutes)
    )
    claims = {**data, "exp": datetime.now(UTC) + lifetime}
    token = jwt.encode(
        claims,
        settings.secret_key.get_secret_value(),
        algorithm=settings.algorithm,
    )
    return cast(str, token)


def verify_token(token: str) -> dict[str, Any]:
    """Return the claims of a validly signed, unexpired session token.

    Raises:
        ValueError: Bad signature, expired, or sub/role missing.
    """
    settings = get_settings()
    try:
        claims = jwt.decode(
            token,
            settings.secret_key.get_secret_value(),
            algorithms=[settings.algorithm],
            options={"require_exp": True, "require_sub": True},
        )
    except JWTError as e:
        raise ValueError(f"Invalid token: {e!s}") from e
    missing = [name for name in _REQUIRED_CLAIMS if not claims.get(name)]
    if missing:
        raise ValueError(f"Token missing required claim: {missing[0]}")
    return claims
