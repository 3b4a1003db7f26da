"""Service interfaces (ports) for the application layer.

Protocols define contracts for external collaborators (DIP).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from formdesk.application.dtos.principal import ExternalIdentity


class ITokenIssuer(Protocol):
    """Signs session tokens."""

    def create_access_token(self, data: dict[str, Any]) -> str:
        """Return a signed token carrying the claims."""


class IMailer(Protocol):
    """Outbound email."""

    async def send(self, to_email: str, subject: str, body: str) -> bool:
        """Send a plain-text email; False when delivery failed."""


class IIdentityVerifier(Protocol):
    """Third-party identity token verification (Google Sign-In)."""

    async def verify(self, token: str) -> ExternalIdentity:
        """Return the verified identity; raise AuthenticationException if rejected."""
