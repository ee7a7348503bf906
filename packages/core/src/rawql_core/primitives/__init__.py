"""Primitives: exceptions."""

from __future__ import annotations

from .exceptions import (
    EntityNotRegisteredError,
    InfrastructureError,
    PersistenceError,
    RawQLError,
    RequestShapeError,
    TranslationError,
    UnsupportedOperationError,
    ValidationError,
)

__all__ = [
    "EntityNotRegisteredError",
    "InfrastructureError",
    "PersistenceError",
    "RawQLError",
    "RequestShapeError",
    "TranslationError",
    "UnsupportedOperationError",
    "ValidationError",
]
