"""In-process document store with the same surface as FirestoreRESTClient.

Selected with DATABASE_BACKEND=memory for local development and tests.
Data lives for the lifetime of the client. Every operation completes without
yielding to the event loop, so each call (and each batch_write) is atomic.
"""

from __future__ import annotations

import copy
import itertools
import operator
from collections.abc import AsyncIterator, Callable
from typing import Any

from formdesk.infrastructure.firebase._rest_client import (
    DocumentExistsError,
    DocumentSnapshot,
    PreconditionFailedError,
)


def _array_contains(stored: Any, value: Any) -> bool:
    return isinstance(stored, list) and value in stored


def _in(stored: Any, values: Any) -> bool:
    return stored in values


def _not_in(stored: Any, values: Any) -> bool:
    return stored not in values


_OPS: dict[str, Callable[[Any, Any], bool]] = {
    "==": operator.eq,
    "!=": operator.ne,
    "<": operator.lt,
    "<=": operator.le,
    ">": operator.gt,
    ">=": operator.ge,
    "in": _in,
    "not-in": _not_in,
    "array_contains": _array_contains,
    "array-contains": _array_contains,
}


class _Document:
    __slots__ = ("data", "update_time")

    def __init__(self, data: dict[str, Any], update_time: str) -> None:
        self.data = data
        self.update_time = update_time


class MemoryDocumentReference:
    def __init__(self, client: "MemoryDocumentClient", collection_id: str, document_id: str):
        self._client = client
        self._collection_id = collection_id
        self._id = document_id

    @property
    def id(self) -> str:
        return self._id

    @property
    def _docs(self) -> dict[str, _Document]:
        return self._client._collection_docs(self._collection_id)

    async def set(self, data: dict[str, Any]) -> None:
        self._docs[self._id] = _Document(copy.deepcopy(data), self._client._tick())

    async def get(self) -> DocumentSnapshot | None:
        doc = self._docs.get(self._id)
        if doc is None:
            return None
        return DocumentSnapshot(self._id, copy.deepcopy(doc.data), doc.update_time)

    async def update(
        self, data: dict[str, Any], *, update_time: str | None = None
    ) -> bool:
        doc = self._docs.get(self._id)
        if doc is None:
            if update_time is not None:
                raise PreconditionFailedError("FAILED_PRECONDITION")
            return False
        if update_time is not None and doc.update_time != update_time:
            raise PreconditionFailedError("FAILED_PRECONDITION")
        doc.data.update(copy.deepcopy(data))
        doc.update_time = self._client._tick()
        return True

    async def delete(self) -> None:
        self._docs.pop(self._id, None)


class _MemoryQuery:
    def __init__(self, client: "MemoryDocumentClient", collection_id: str):
        self._client = client
        self._collection_id = collection_id
        self._filters: list[tuple[str, Callable[[Any, Any], bool], Any]] = []
        self._limit: int | None = None

    def where(self, field: str, op: str, value: Any) -> "_MemoryQuery":
        if op not in _OPS:
            raise ValueError(f"Unsupported query operator: {op!r}")
        self._filters.append((field, _OPS[op], value))
        return self

    def limit(self, n: int) -> "_MemoryQuery":
        self._limit = n
        return self

    def _matches(self, data: dict[str, Any]) -> bool:
        for field, op, value in self._filters:
            if field not in data:
                return False
            try:
                if not op(data[field], value):
                    return False
            except TypeError:
                return False
        return True

    async def stream(self) -> AsyncIterator[DocumentSnapshot]:
        docs = self._client._collection_docs(self._collection_id)
        matched = [
            DocumentSnapshot(doc_id, copy.deepcopy(doc.data), doc.update_time)
            for doc_id, doc in list(docs.items())
            if self._matches(doc.data)
        ]
        if self._limit:
            matched = matched[: self._limit]
        for snapshot in matched:
            yield snapshot


class MemoryCollectionReference:
    def __init__(self, client: "MemoryDocumentClient", collection_id: str):
        self._client = client
        self._collection_id = collection_id

    def document(self, document_id: str) -> MemoryDocumentReference:
        return MemoryDocumentReference(self._client, self._collection_id, document_id)

    async def create(self, document_id: str, data: dict[str, Any]) -> None:
        docs = self._client._collection_docs(self._collection_id)
        if document_id in docs:
            raise DocumentExistsError("Document already exists")
        docs[document_id] = _Document(copy.deepcopy(data), self._client._tick())

    def where(self, field: str, op: str, value: Any) -> _MemoryQuery:
        return _MemoryQuery(self._client, self._collection_id).where(field, op, value)

    async def stream(self) -> AsyncIterator[DocumentSnapshot]:
        async for snapshot in _MemoryQuery(self._client, self._collection_id).stream():
            yield snapshot


def _apply_transforms(data: dict[str, Any], write: dict[str, Any]) -> None:
    for field, amount in (write.get("increment") or {}).items():
        current = data.get(field)
        data[field] = (current if isinstance(current, (int, float)) else 0) + amount
    for field, values in (write.get("array_union") or {}).items():
        current = list(data.get(field) or [])
        for value in values:
            if value not in current:
                current.append(value)
        data[field] = current
    for field, values in (write.get("array_remove") or {}).items():
        data[field] = [v for v in (data.get(field) or []) if v not in values]


class MemoryDocumentClient:
    """Dict-backed stand-in for FirestoreRESTClient (collection/document/query/batch API)."""

    def __init__(self) -> None:
        self._collections: dict[str, dict[str, _Document]] = {}
        self._clock = itertools.count(1)

    def _tick(self) -> str:
        return f"{next(self._clock):020d}"

    def _collection_docs(self, collection_id: str) -> dict[str, _Document]:
        return self._collections.setdefault(collection_id, {})

    def collection(self, collection_id: str) -> MemoryCollectionReference:
        return MemoryCollectionReference(self, collection_id)

    async def batch_write(self, writes: list[dict[str, Any]]) -> None:
        """Apply writes all-or-nothing; same write shapes as FirestoreRESTClient.batch_write."""
        staged: dict[tuple[str, str], _Document | None] = {}

        def current(key: tuple[str, str]) -> _Document | None:
            if key in staged:
                return staged[key]
            return self._collection_docs(key[0]).get(key[1])

        for write in writes:
            collection_id, document_id = write["path"].split("/", 1)
            key = (collection_id, document_id)
            existing = current(key)
            if write.get("exists") and existing is None:
                raise PreconditionFailedError("FAILED_PRECONDITION")
            if write.get("delete"):
                staged[key] = None
                continue
            if "data" in write and not write.get("merge"):
                data = copy.deepcopy(write["data"])
            else:
                data = copy.deepcopy(existing.data) if existing is not None else {}
                data.update(copy.deepcopy(write.get("data") or {}))
            _apply_transforms(data, write)
            staged[key] = _Document(data, "")

        for (collection_id, document_id), doc in staged.items():
            docs = self._collection_docs(collection_id)
            if doc is None:
                docs.pop(document_id, None)
            else:
                doc.update_time = self._tick()
                docs[document_id] = doc

    async def aclose(self) -> None:
        """Nothing to release; present for parity with FirestoreRESTClient."""
