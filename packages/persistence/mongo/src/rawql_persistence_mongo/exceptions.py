"""MongoDB adapter exceptions."""

from __future__ import annotations

from rawql_core.primitives.exceptions import PersistenceError, TranslationError


class MongoPersistenceError(PersistenceError):
    """Base for MongoDB persistence errors."""


class MongoConnectionError(MongoPersistenceError):
    """Raised when connection to MongoDB fails."""


class MongoTranslationError(TranslationError):
    """Raised when a filter, pipeline or populate cannot be translated."""
