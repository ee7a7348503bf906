"""CompositeSchema — chains multiple schemas, collects all errors."""

from __future__ import annotations

import inspect
from typing import TYPE_CHECKING, Any

from .result import ValidationResult

if TYPE_CHECKING:
    from .registry import ISchema


class CompositeSchema:
    """Runs a list of schemas and merges their results.

    Unlike fail-fast validation, this collects **all** errors across
    all schemas before returning.

    Usage::

        schema = CompositeSchema([PydanticSchema(UserCreate), UniqueEmail()])
        registry.register("users", "create", schema)
    """

    def __init__(self, schemas: list[ISchema] | None = None) -> None:
        self._schemas: list[ISchema] = list(schemas or [])

    def add(self, schema: ISchema) -> None:
        """Append a schema to the chain."""
        self._schemas.append(schema)

    async def validate(self, payload: Any) -> ValidationResult:
        """Run all schemas and merge errors."""
        combined = ValidationResult.success()
        for schema in self._schemas:
            result = schema.validate(payload)
            if inspect.isawaitable(result):
                result = await result
            combined = combined.merge(result)
        return combined
