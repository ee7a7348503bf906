"""BSON <-> plain Python conversion for documents crossing the adapter."""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from bson import Decimal128, ObjectId


def serialize_document(value: Any) -> Any:
    """Make a driver result safe for the response envelope.

    ``ObjectId`` becomes its hex string and ``Decimal128`` a ``Decimal``,
    recursively through dicts and lists.
    """
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, Decimal128):
        return value.to_decimal()
    if isinstance(value, dict):
        return {k: serialize_document(v) for k, v in value.items()}
    if isinstance(value, list):
        return [serialize_document(v) for v in value]
    return value


def to_bson(value: Any) -> Any:
    """Convert Python values to BSON-storable ones (``Decimal`` → ``Decimal128``)."""
    if isinstance(value, Decimal):
        return Decimal128(value)
    if isinstance(value, dict):
        return {k: to_bson(v) for k, v in value.items()}
    if isinstance(value, list):
        return [to_bson(v) for v in value]
    return value


def coerce_id(value: Any) -> Any:
    """Return an ``ObjectId`` for valid 24-hex ids; other ids pass through."""
    if isinstance(value, str) and ObjectId.is_valid(value):
        return ObjectId(value)
    return value
