"""Thin Firestore REST API client (no firebase-admin).

Uses google-auth for service account tokens and Firestore REST v1.
Keeps the deployment bundle small (avoids grpcio / firebase-admin).
All HTTP calls use httpx.AsyncClient so they do not block the event loop.

Supported surface (shared with the in-memory client):
    - collection(name).document(id).set / get / update / delete
    - collection(name).create(id, data)
    - collection(name).where(...).where(...).limit(n).stream()
    - collection(name).stream()
    - batch_write([...]) for atomic multi-document commits
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import AsyncIterator
from typing import Any
from urllib.parse import quote

import httpx

from formdesk.infrastructure.firebase._rest_encoding import (
    decode_document,
    encode_document,
    encode_value,
)

_FIRESTORE_SCOPE = "https://www.googleapis.com/auth/datastore"
_BASE = "https://firestore.googleapis.com/v1"


def _get_credentials(key_dict: dict):
    """Return google.oauth2.service_account.Credentials for Firestore."""
    from google.oauth2 import service_account

    return service_account.Credentials.from_service_account_info(
        key_dict, scopes=[_FIRESTORE_SCOPE]
    )


def _get_access_token(credentials) -> str:
    from google.auth.transport.requests import Request

    if not credentials.valid:
        credentials.refresh(Request())
    return credentials.token


class DocumentExistsError(Exception):
    """Raised when createDocument returns ALREADY_EXISTS (document ID already taken)."""


class PreconditionFailedError(Exception):
    """Raised when a write precondition (update time, existence) does not hold or a commit aborted."""


def _error_status(resp: httpx.Response) -> str:
    """Return the google.rpc status string (e.g. FAILED_PRECONDITION) from an error body."""
    try:
        body = resp.json()
    except ValueError:
        return ""
    if isinstance(body, list):
        body = body[0] if body else {}
    return str((body.get("error") or {}).get("status", ""))


async def _request_async(
    client: httpx.AsyncClient,
    url: str,
    method: str = "GET",
    body: dict | None = None,
    access_token: str | None = None,
    params: list[tuple[str, str]] | None = None,
) -> Any:
    """Perform async HTTP request to Firestore REST API. 404 returns None."""
    headers = {"Content-Type": "application/json"}
    if access_token:
        headers["Authorization"] = f"Bearer {access_token}"
    if method == "GET":
        resp = await client.get(url, headers=headers, params=params)
    elif method == "PATCH":
        resp = await client.patch(url, headers=headers, json=body, params=params)
    elif method == "POST":
        resp = await client.post(url, headers=headers, json=body, params=params)
    elif method == "DELETE":
        resp = await client.delete(url, headers=headers, params=params)
    else:
        raise ValueError(f"Unsupported method: {method!r}")
    if resp.status_code == 404:
        return None
    if resp.status_code in (400, 409):
        status = _error_status(resp)
        if status == "ALREADY_EXISTS":
            raise DocumentExistsError("Document already exists")
        if status in ("FAILED_PRECONDITION", "ABORTED"):
            raise PreconditionFailedError(status)
    if resp.status_code not in (200, 204):
        resp.raise_for_status()
    if method == "DELETE":
        return {}
    raw = resp.content
    return json.loads(raw.decode()) if raw else {}


class DocumentSnapshot:
    """Snapshot of a document (id + data + server update time)."""

    def __init__(self, id_: str, data: dict, update_time: str | None = None):
        self.id = id_
        self._data = data
        self.update_time = update_time

    def to_dict(self) -> dict:
        return self._data


class DocumentReference:
    """Reference to a single document; matches firestore API style."""

    def __init__(self, client: "FirestoreRESTClient", path: str):
        self._client = client
        self._path = path

    @property
    def id(self) -> str:
        return self._path.split("/")[-1]

    async def set(self, data: dict[str, Any]) -> None:
        """Create or overwrite the document (PATCH with full replace)."""
        await _request_async(
            self._client._http,
            f"{_BASE}/{self._path}",
            method="PATCH",
            body=encode_document(data),
            access_token=await self._client.get_token(),
        )

    async def get(self) -> DocumentSnapshot | None:
        """Fetch the document; returns None if not found."""
        out = await _request_async(
            self._client._http,
            f"{_BASE}/{self._path}",
            access_token=await self._client.get_token(),
        )
        if not out:
            return None
        return DocumentSnapshot(
            self.id, decode_document(out.get("fields")), out.get("updateTime")
        )

    async def update(
        self, data: dict[str, Any], *, update_time: str | None = None
    ) -> bool:
        """Update only the given fields of an existing document.

        When update_time is given the write succeeds only if the document was
        not modified since that snapshot (compare-and-set); otherwise
        PreconditionFailedError is raised.

        Returns:
            False if the document does not exist, True otherwise.
        """
        params: list[tuple[str, str]] = [
            ("updateMask.fieldPaths", key) for key in data
        ]
        if update_time is not None:
            params.append(("currentDocument.updateTime", update_time))
        else:
            params.append(("currentDocument.exists", "true"))
        out = await _request_async(
            self._client._http,
            f"{_BASE}/{self._path}",
            method="PATCH",
            body=encode_document(data),
            access_token=await self._client.get_token(),
            params=params,
        )
        return out is not None

    async def delete(self) -> None:
        """Delete the document. Idempotent if document is already missing (404)."""
        await _request_async(
            self._client._http,
            f"{_BASE}/{self._path}",
            method="DELETE",
            access_token=await self._client.get_token(),
        )


_OP_MAP: dict[str, str] = {
    "==": "EQUAL",
    "!=": "NOT_EQUAL",
    "<": "LESS_THAN",
    "<=": "LESS_THAN_OR_EQUAL",
    ">": "GREATER_THAN",
    ">=": "GREATER_THAN_OR_EQUAL",
    "in": "IN",
    "not-in": "NOT_IN",
    "array_contains": "ARRAY_CONTAINS",
    "array-contains": "ARRAY_CONTAINS",
}


class _Query:
    """Fluent query builder for a collection; filters (ANDed) and limit run on the server."""

    def __init__(
        self,
        client: "FirestoreRESTClient",
        parent: str,
        collection_id: str,
    ):
        self._client = client
        self._parent = parent
        self._collection_id = collection_id
        self._filters: list[tuple[str, str, Any]] = []
        self._limit: int | None = None

    def where(self, field: str, op: str, value: Any) -> "_Query":
        self._filters.append((field, _OP_MAP.get(op, op), value))
        return self

    def limit(self, n: int) -> "_Query":
        self._limit = n
        return self

    def _structured_where(self) -> dict[str, Any] | None:
        filters = [
            {
                "fieldFilter": {
                    "field": {"fieldPath": field},
                    "op": op,
                    "value": encode_value(value),
                }
            }
            for field, op, value in self._filters
        ]
        if not filters:
            return None
        if len(filters) == 1:
            return filters[0]
        return {"compositeFilter": {"op": "AND", "filters": filters}}

    async def stream(self) -> AsyncIterator[DocumentSnapshot]:
        """Execute the query and yield document snapshots."""
        structured: dict[str, Any] = {
            "from": [{"collectionId": self._collection_id}],
        }
        where = self._structured_where()
        if where is not None:
            structured["where"] = where
        if self._limit:
            structured["limit"] = self._limit

        resp = await _request_async(
            self._client._http,
            f"{_BASE}/{self._parent}:runQuery",
            method="POST",
            body={"structuredQuery": structured},
            access_token=await self._client.get_token(),
        )
        items = resp if isinstance(resp, list) else ([resp] if resp else [])
        for item in items:
            if "document" not in item:
                continue
            doc = item["document"]
            name = doc.get("name", "")
            doc_id = name.split("/")[-1] if name else ""
            yield DocumentSnapshot(
                doc_id, decode_document(doc.get("fields")), doc.get("updateTime")
            )


class CollectionReference:
    """Reference to a collection; matches firestore API style."""

    def __init__(self, client: "FirestoreRESTClient", path: str):
        self._client = client
        self._path = path.rstrip("/")

    def document(self, document_id: str) -> DocumentReference:
        return DocumentReference(self._client, f"{self._path}/{document_id}")

    async def create(self, document_id: str, data: dict[str, Any]) -> None:
        """Create a document with the given ID (fail with DocumentExistsError if it exists)."""
        url = f"{_BASE}/{self._path}?documentId={quote(document_id, safe='')}"
        await _request_async(
            self._client._http,
            url,
            method="POST",
            body=encode_document(data),
            access_token=await self._client.get_token(),
        )

    def where(self, field: str, op: str, value: Any) -> _Query:
        """Start a query with a filter. Chain .where() / .limit(), then .stream()."""
        parent = self._path.rsplit("/", 1)[0]
        collection_id = self._path.split("/")[-1]
        return _Query(self._client, parent, collection_id).where(field, op, value)

    async def stream(self) -> AsyncIterator[DocumentSnapshot]:
        """List every document in the collection, following page tokens."""
        url = f"{_BASE}/{self._path}"
        page_token: str | None = None
        while True:
            params = [("pageToken", page_token)] if page_token else None
            out = await _request_async(
                self._client._http,
                url,
                access_token=await self._client.get_token(),
                params=params,
            )
            if not out:
                return
            for doc in out.get("documents", []):
                name = doc.get("name", "")
                doc_id = name.split("/")[-1] if name else ""
                yield DocumentSnapshot(
                    doc_id, decode_document(doc.get("fields")), doc.get("updateTime")
                )
            page_token = out.get("nextPageToken")
            if not page_token:
                return


def _field_transforms(write: dict[str, Any]) -> list[dict[str, Any]]:
    transforms: list[dict[str, Any]] = []
    for field, amount in (write.get("increment") or {}).items():
        transforms.append({"fieldPath": field, "increment": encode_value(amount)})
    for field, values in (write.get("array_union") or {}).items():
        transforms.append({
            "fieldPath": field,
            "appendMissingElements": {"values": [encode_value(v) for v in values]},
        })
    for field, values in (write.get("array_remove") or {}).items():
        transforms.append({
            "fieldPath": field,
            "removeAllFromArray": {"values": [encode_value(v) for v in values]},
        })
    return transforms


class FirestoreRESTClient:
    """Lightweight Firestore client using REST API (no firebase-admin)."""

    def __init__(
        self,
        project_id: str,
        credentials,
        *,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._project_id = project_id
        self._credentials = credentials
        self._database = f"projects/{project_id}/databases/(default)"
        self._prefix = f"{self._database}/documents"
        self._http = http_client if http_client is not None else httpx.AsyncClient(timeout=30.0)
        self._owns_http = http_client is None

    async def aclose(self) -> None:
        """Close the HTTP client only if we created it (do not close injected client)."""
        if self._owns_http:
            await self._http.aclose()

    async def get_token(self) -> str:
        """Return a valid access token; refreshes in thread pool to avoid blocking."""
        return await asyncio.to_thread(_get_access_token, self._credentials)

    def collection(self, collection_id: str) -> CollectionReference:
        return CollectionReference(self, f"{self._prefix}/{collection_id}")

    def _to_rest_write(self, write: dict[str, Any]) -> dict[str, Any]:
        name = f"{self._prefix}/{write['path']}"
        if write.get("delete"):
            return {"delete": name}
        if "data" in write:
            rest: dict[str, Any] = {
                "update": {"name": name, **encode_document(write["data"])}
            }
            if write.get("merge"):
                rest["updateMask"] = {"fieldPaths": list(write["data"])}
            transforms = _field_transforms(write)
            if transforms:
                rest["updateTransforms"] = transforms
        else:
            rest = {
                "transform": {
                    "document": name,
                    "fieldTransforms": _field_transforms(write),
                }
            }
        if write.get("exists"):
            rest["currentDocument"] = {"exists": True}
        return rest

    async def batch_write(self, writes: list[dict[str, Any]]) -> None:
        """Apply writes atomically in one commit (all or nothing).

        Each write is a dict with "path" ("collection/doc_id") and one of:
            - "data": fields to set (full replace, or only those keys with "merge": True)
            - "delete": True
            - "increment" / "array_union" / "array_remove": {field: value(s)}
        Optional "exists": True makes the write conditional on the document existing.

        Raises:
            PreconditionFailedError: A precondition failed; nothing was written.
        """
        if not writes:
            return
        await _request_async(
            self._http,
            f"{_BASE}/{self._prefix}:commit",
            method="POST",
            body={"writes": [self._to_rest_write(w) for w in writes]},
            access_token=await self.get_token(),
        )
