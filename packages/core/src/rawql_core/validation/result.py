"""ValidationResult — structured validation errors."""

from __future__ import annotations

from dataclasses import dataclass, field

from ..response import FieldError


def default_errors_factory() -> list[FieldError]:
    """Factory for the mutable default list in ValidationResult."""
    return []


@dataclass
class ValidationResult:
    """Collects field-level validation errors.

    Usage::

        result = ValidationResult.success()
        result = ValidationResult.failure(
            [FieldError(field="email", message="is required")]
        )
    """

    errors: list[FieldError] = field(default_factory=default_errors_factory)

    @property
    def valid(self) -> bool:
        return len(self.errors) == 0

    # ── Factory methods ──────────────────────────────────────────

    @classmethod
    def success(cls) -> ValidationResult:
        return cls()

    @classmethod
    def failure(cls, errors: list[FieldError]) -> ValidationResult:
        return cls(errors=list(errors))

    # ── Merging ──────────────────────────────────────────────────

    def merge(self, other: ValidationResult) -> ValidationResult:
        """Merge another result into this one, combining all errors."""
        return ValidationResult(errors=[*self.errors, *other.errors])

    def add_error(self, field_name: str, message: str) -> None:
        """Add a single error for *field_name*."""
        self.errors.append(FieldError(field=field_name, message=message))

    def __bool__(self) -> bool:
        return self.valid
