"""RegistryValidator — the engine-facing validator backed by a SchemaRegistry."""

from __future__ import annotations

import inspect
from typing import TYPE_CHECKING, Any

from .result import ValidationResult

if TYPE_CHECKING:
    from .registry import SchemaRegistry


class RegistryValidator:
    """Looks up the schema for ``(entity, operation)`` and runs it.

    A pair without a registered schema is valid.

    Usage::

        registry = SchemaRegistry()
        registry.register("users", "create", PydanticSchema(UserCreate))
        engine.set_validator(RegistryValidator(registry))
    """

    def __init__(self, registry: SchemaRegistry) -> None:
        self._registry = registry

    async def validate(
        self, entity: str, operation: str, payload: Any
    ) -> ValidationResult:
        schema = self._registry.get(entity, operation)
        if schema is None:
            return ValidationResult.success()
        result = schema.validate(payload)
        if inspect.isawaitable(result):
            result = await result
        return result
