"""Document store client construction (REST-based, no firebase-admin).

Built once in the application lifespan and stored on app.state. Firestore uses
either FIREBASE_SERVICE_ACCOUNT_KEY (JSON string) or
FIREBASE_SERVICE_ACCOUNT_PATH (file path); DATABASE_BACKEND=memory uses the
in-process client with the same API.
"""

import json
import logging
from pathlib import Path
from typing import TypeAlias

import httpx

from formdesk.core.config import Settings
from formdesk.infrastructure.firebase._memory_client import MemoryDocumentClient
from formdesk.infrastructure.firebase._rest_client import (
    FirestoreRESTClient,
    _get_credentials,
)

logger = logging.getLogger(__name__)

DocumentClient: TypeAlias = FirestoreRESTClient | MemoryDocumentClient


def _load_key_dict(settings: Settings) -> dict:
    """Return service account dict from env key or file path."""
    key_json = (
        settings.firebase_service_account_key.get_secret_value()
        if settings.firebase_service_account_key
        else None
    )
    if key_json:
        try:
            return json.loads(key_json)
        except json.JSONDecodeError as e:
            raise ValueError("FIREBASE_SERVICE_ACCOUNT_KEY is not valid JSON") from e
    path = Path(settings.firebase_service_account_path or "").expanduser()
    resolved = path if path.is_absolute() else path.resolve()
    if not resolved.is_file():
        raise ValueError(
            f"FIREBASE_SERVICE_ACCOUNT_PATH file not found: {settings.firebase_service_account_path}"
        )
    with open(resolved, encoding="utf-8") as f:
        return json.load(f)


def create_document_client(
    settings: Settings, http_client: httpx.AsyncClient | None = None
) -> DocumentClient:
    """Build the document store client selected by settings.database_backend.

    Raises:
        ValueError: Firestore credentials are missing or malformed.
    """
    if settings.database_backend == "memory":
        logger.info("Using in-memory document store")
        return MemoryDocumentClient()

    key_dict = _load_key_dict(settings)
    project_id = key_dict.get("project_id")
    if not project_id:
        raise ValueError("Firebase service account JSON missing 'project_id'")
    logger.info("Using Firestore project %s", project_id)
    return FirestoreRESTClient(
        project_id, _get_credentials(key_dict), http_client=http_client
    )
