"""Document store integration: Firestore REST client, in-memory client, repositories."""

from formdesk.infrastructure.firebase.client import DocumentClient, create_document_client

__all__ = [
    "DocumentClient",
    "create_document_client",
]
