"""rawql-persistence-mongo — MongoDB adapter for the rawql query engine."""

from __future__ import annotations

from .adapter import CollectionBinding, MongoAdapter
from .connection import MongoConnectionManager
from .exceptions import (
    MongoConnectionError,
    MongoPersistenceError,
    MongoTranslationError,
)
from .filters import translate_filter, translate_select, translate_sort
from .pipeline import translate_group, translate_pipeline
from .populate import PopulateTranslator, RefSpec
from .serialization import coerce_id, serialize_document, to_bson

__all__ = [
    "CollectionBinding",
    "MongoAdapter",
    "MongoConnectionError",
    "MongoConnectionManager",
    "MongoPersistenceError",
    "MongoTranslationError",
    "PopulateTranslator",
    "RefSpec",
    "coerce_id",
    "serialize_document",
    "to_bson",
    "translate_filter",
    "translate_group",
    "translate_pipeline",
    "translate_select",
    "translate_sort",
]
