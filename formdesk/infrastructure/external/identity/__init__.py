"""Third-party identity verification (Google ID tokens)."""

from formdesk.infrastructure.external.identity.google import GoogleIdentityVerifier

__all__ = ["GoogleIdentityVerifier"]
