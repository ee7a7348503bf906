"""Validation system: ValidationResult, SchemaRegistry, RegistryValidator, schemas."""

from __future__ import annotations

from .composite import CompositeSchema
from .pydantic import PydanticSchema
from .registry import ISchema, SchemaRegistry
from .result import ValidationResult
from .validator import RegistryValidator

__all__ = [
    "CompositeSchema",
    "ISchema",
    "PydanticSchema",
    "RegistryValidator",
    "SchemaRegistry",
    "ValidationResult",
]
