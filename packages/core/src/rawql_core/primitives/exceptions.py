"""Engine, translation and persistence exceptions for rawql-core."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from ..response import FieldError


class RawQLError(Exception):
    """Root exception for the entire rawql toolkit.

    ``status_code`` is an HTTP-like hint for callers that expose the engine
    over a wire protocol; ``details`` carries optional structured context.
    """

    status_code: int = 400

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        details: Any = None,
    ) -> None:
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.details = details
        super().__init__(message)


class RequestShapeError(RawQLError):
    """Raised when a request violates the request contract.

    Missing ``entity``/``operation``, ``delete`` without ``id``, non-object
    ``options``, or a payload that cannot be parsed into a request at all.
    """


class ValidationError(RawQLError):
    """Raised when payload validation fails.

    Carries structured field errors: ``[FieldError(field, message), ...]``.
    """

    status_code = 422

    def __init__(
        self,
        errors: list[FieldError] | None = None,
        message: str = "Validation failed",
    ) -> None:
        self.errors: list[FieldError] = list(errors or [])
        super().__init__(message, details=self.errors)


class TranslationError(RawQLError):
    """Raised when a filter or pipeline cannot be translated to a backend."""


class UnsupportedOperationError(RawQLError):
    """Raised when neither dispatch path of an adapter supports an operation."""

    status_code = 501

    def __init__(self, operation: str, adapter: str | None = None) -> None:
        self.operation = operation
        self.adapter = adapter
        where = f" by {adapter}" if adapter else ""
        super().__init__(f"Operation '{operation}' is not supported{where}")


class InfrastructureError(RawQLError):
    """Base class for all infrastructure-related errors."""

    status_code = 500


class PersistenceError(InfrastructureError):
    """Base class for all persistence-related errors."""


class EntityNotRegisteredError(PersistenceError):
    """Raised when a request targets an entity the adapter does not know."""

    status_code = 404

    def __init__(self, entity: str) -> None:
        self.entity = entity
        super().__init__(f"Entity '{entity}' is not registered")
