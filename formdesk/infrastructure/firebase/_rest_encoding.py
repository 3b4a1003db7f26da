"""Firestore REST value codec: Python values <-> typed `Value` JSON objects.

Document fields hold strings, numbers, booleans, null, UTC timestamps and
nested lists/maps; form field definitions and answers are stored as maps.
"""

from __future__ import annotations

import base64
from collections.abc import Callable
from datetime import UTC, datetime
from enum import Enum
from typing import Any


def _timestamp(value: datetime) -> str:
    if value.tzinfo is not None:
        value = value.astimezone(UTC)
    return value.strftime("%Y-%m-%dT%H:%M:%S.%fZ")


def encode_value(value: Any) -> dict[str, Any]:
    """Return the typed Firestore Value for a Python value.

    Raises:
        TypeError: Value type has no Firestore representation.
    """
    if value is None:
        return {"nullValue": None}
    # bool before int: bool is an int subclass
    if isinstance(value, bool):
        return {"booleanValue": value}
    if isinstance(value, Enum):
        return encode_value(value.value)
    if isinstance(value, int):
        return {"integerValue": str(value)}
    if isinstance(value, float):
        return {"doubleValue": value}
    if isinstance(value, str):
        return {"stringValue": value}
    if isinstance(value, datetime):
        return {"timestampValue": _timestamp(value)}
    if isinstance(value, bytes):
        return {"bytesValue": base64.b64encode(value).decode("ascii")}
    if isinstance(value, (list, tuple)):
        return {"arrayValue": {"values": [encode_value(item) for item in value]}}
    if isinstance(value, dict):
        return {"mapValue": encode_document(value)}
    raise TypeError(f"Cannot store {type(value).__name__} in a document")


def encode_document(data: dict[str, Any]) -> dict[str, Any]:
    """Return {"fields": {...}} for a flat or nested dict."""
    return {"fields": {key: encode_value(item) for key, item in data.items()}}


def _parse_timestamp(raw: str) -> datetime:
    return datetime.fromisoformat(raw.replace("Z", "+00:00"))


_DECODERS: dict[str, Callable[[Any], Any]] = {
    "nullValue": lambda _: None,
    "booleanValue": bool,
    "integerValue": int,
    "doubleValue": float,
    "stringValue": str,
    "timestampValue": _parse_timestamp,
    "bytesValue": base64.b64decode,
    "arrayValue": lambda raw: [decode_value(item) for item in raw.get("values") or ()],
    "mapValue": lambda raw: decode_document(raw.get("fields")),
}


def decode_value(obj: dict[str, Any]) -> Any:
    """Return the Python value of a typed Firestore Value (unknown kinds decode to None)."""
    for kind, raw in obj.items():
        decoder = _DECODERS.get(kind)
        if decoder is not None:
            return decoder(raw)
    return None


def decode_document(fields: dict[str, Any] | None) -> dict[str, Any]:
    """Return the Python dict for a document's `fields` mapping."""
    return {key: decode_value(item) for key, item in (fields or {}).items()}
