"""Google ID token verification (implements IIdentityVerifier).

Uses google-auth's verify_oauth2_token; the certificate fetch and signature
check are blocking, so they run in a worker thread.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from google.auth.transport import requests as google_requests
from google.oauth2 import id_token

from formdesk.application.dtos.principal import ExternalIdentity
from formdesk.domain.exceptions import AuthenticationException

logger = logging.getLogger(__name__)

_GOOGLE_ISSUERS = ("accounts.google.com", "https://accounts.google.com")


class GoogleIdentityVerifier:
    """Verify Google Sign-In ID tokens against the configured OAuth client id."""

    def __init__(self, client_id: str) -> None:
        self._client_id = client_id
        self._transport = google_requests.Request()

    def _verify(self, token: str) -> dict[str, Any]:
        return id_token.verify_oauth2_token(token, self._transport, self._client_id)

    async def verify(self, token: str) -> ExternalIdentity:
        """Return the verified identity.

        Raises:
            AuthenticationException: Token rejected, or Google sign-in is not configured.
        """
        if not self._client_id:
            raise AuthenticationException("Google sign-in is not configured")
        try:
            info = await asyncio.to_thread(self._verify, token)
        except ValueError as e:
            logger.warning("Google ID token rejected: %s", e)
            raise AuthenticationException("Invalid Google token") from e
        if info.get("iss") not in _GOOGLE_ISSUERS:
            raise AuthenticationException("Invalid Google token issuer")
        email = (info.get("email") or "").strip().lower()
        if not info.get("sub") or not email:
            raise AuthenticationException("Google token missing subject or email")
        return ExternalIdentity(
            subject=str(info["sub"]),
            email=email,
            name=info.get("name") or email.split("@", 1)[0],
            picture=info.get("picture"),
        )
