"""SchemaRegistry — validation schemas keyed by ``(entity, operation)``."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Awaitable

    from .result import ValidationResult

logger = logging.getLogger(__name__)


@runtime_checkable
class ISchema(Protocol):
    """Validates one payload; may be sync or async."""

    def validate(
        self, payload: Any
    ) -> ValidationResult | Awaitable[ValidationResult]: ...


class SchemaRegistry:
    """Holds at most one schema per ``(entity, operation)`` pair."""

    def __init__(self) -> None:
        self._schemas: dict[tuple[str, str], ISchema] = {}

    def register(self, entity: str, operation: str, schema: ISchema) -> None:
        key = (entity, _operation_key(operation))
        if key in self._schemas:
            logger.debug("Replacing schema for %s:%s", *key)
        self._schemas[key] = schema

    def get(self, entity: str, operation: str) -> ISchema | None:
        return self._schemas.get((entity, _operation_key(operation)))

    def clear(self) -> None:
        """Remove all registrations (testing utility)."""
        self._schemas.clear()


def _operation_key(operation: Any) -> str:
    # Accepts Operation members as well as their string values.
    return str(getattr(operation, "value", operation))
