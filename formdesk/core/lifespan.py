"""Application lifespan: startup and shutdown.

Single place for resource handles: the document store client, the shared
outbound HTTP client, the mailer and the identity verifier are created here,
stored on app.state and closed on shutdown. No business logic here.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import httpx
from fastapi import FastAPI

from formdesk.core.config import get_settings
from formdesk.infrastructure.external.email.mailer import create_mailer
from formdesk.infrastructure.external.identity.google import GoogleIdentityVerifier
from formdesk.infrastructure.firebase.client import create_document_client
from formdesk.infrastructure.firebase.repositories._common import make_dummy_hash

logger = logging.getLogger(__name__)


@asynccontextmanager
async def create_lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Run startup then yield; on exit run shutdown.

    Startup order: shared HTTP client, document store client, mailer,
    identity verifier, then the dummy password hash used to time-equalise
    logins for unknown identities. Shutdown closes the store client, then the HTTP client.
    """
    settings = get_settings()

    # ---- Startup ----
    # Shared HTTP client for Firestore REST calls (connection reuse).
    app.state.http_client = httpx.AsyncClient(timeout=30.0)
    app.state.document_client = create_document_client(
        settings, http_client=app.state.http_client
    )
    app.state.mailer = create_mailer(settings)
    app.state.identity_verifier = GoogleIdentityVerifier(settings.google_client_id)
    app.state.dummy_password_hash = await make_dummy_hash(settings.bcrypt_rounds)
    logger.info(
        "%s %s started (store=%s)",
        settings.app_name,
        settings.app_version,
        settings.database_backend,
    )

    yield

    # ---- Shutdown ----
    if getattr(app.state, "document_client", None) is not None:
        await app.state.document_client.aclose()
        app.state.document_client = None
        logger.info("Document store client closed")

    if getattr(app.state, "http_client", None) is not None:
        await app.state.http_client.aclose()
        app.state.http_client = None
        logger.info("HTTP client closed")
