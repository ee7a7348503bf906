"""PydanticSchema — validates payloads against a Pydantic model."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from ..response import FieldError
from .result import ValidationResult


class PydanticSchema:
    """Validates a payload mapping through *model* and converts any
    ``ValidationError`` into a
    :class:`~rawql_core.validation.result.ValidationResult`.

    Nested locations are joined with dots (``address.city``); model-level
    errors are reported against ``__root__``.
    """

    def __init__(self, model: type[BaseModel]) -> None:
        self._model = model

    def validate(self, payload: Any) -> ValidationResult:
        try:
            self._model.model_validate(payload)
            return ValidationResult.success()
        except PydanticValidationError as exc:
            errors: list[FieldError] = []
            for error in exc.errors(include_url=False):
                loc = ".".join(str(p) for p in error.get("loc", ())) or "__root__"
                msg = error.get("msg", "validation error")
                errors.append(FieldError(field=loc, message=msg))
            return ValidationResult.failure(errors)
