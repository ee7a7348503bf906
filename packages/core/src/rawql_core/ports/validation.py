"""IValidator — payload validation protocol."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from ..validation.result import ValidationResult


@runtime_checkable
class IValidator(Protocol):
    """Protocol for payload validators consulted by the engine.

    A validator with no rule for an ``(entity, operation)`` pair must return
    :meth:`ValidationResult.success()`.
    """

    async def validate(
        self, entity: str, operation: str, payload: Any
    ) -> ValidationResult:
        """Validate *payload* for *operation* on *entity*."""
        ...
