"""
In-memory operator evaluation strategy.

Provides the MemoryOperator protocol, one strategy per
:class:`~rawql_core.filters.FilterOperator`, and a registry mapping
operator → strategy.

Field values are resolved before evaluation; an absent field arrives as
:data:`MISSING`. The strategies mirror MongoDB semantics so the in-memory
adapter and the MongoDB adapter agree on results:

* ``eq`` with ``None`` matches absent and null fields; otherwise absent
  fields never match.
* ``ne``/``nin`` are the exact negations of ``eq``/``in`` (absent matches).
* Ordering and string operators never match absent, null, or
  incomparable values.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from ...filters import FilterOperator


class _Missing:
    """Marker for a field that is absent from the record."""

    _instance: _Missing | None = None

    def __new__(cls) -> _Missing:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"


MISSING: Any = _Missing()


class MemoryOperator(ABC):
    """
    Strategy interface for in-memory operator evaluation.

    Each operator is an isolated class with a single ``evaluate`` method.
    """

    @property
    @abstractmethod
    def name(self) -> FilterOperator:
        """The operator this strategy handles."""
        ...

    @abstractmethod
    def evaluate(self, field_value: Any, condition_value: Any) -> bool:
        """
        Evaluate the operator against concrete values.

        Args:
            field_value: The value resolved from the record, or ``MISSING``.
            condition_value: The value provided in the filter.

        Returns:
            True if the condition is satisfied.
        """
        ...


def _equals(field_value: Any, condition_value: Any) -> bool:
    if condition_value is None:
        return field_value is MISSING or field_value is None
    if field_value is MISSING:
        return False
    if isinstance(field_value, list) and not isinstance(condition_value, list):
        return condition_value in field_value
    return bool(field_value == condition_value)


def _as_list(value: Any) -> list[Any]:
    return list(value) if isinstance(value, (list, tuple, set)) else [value]


def _compare(field_value: Any, condition_value: Any, op: str) -> bool:
    if field_value is MISSING or field_value is None:
        return False
    try:
        if op == "gt":
            return bool(field_value > condition_value)
        if op == "gte":
            return bool(field_value >= condition_value)
        if op == "lt":
            return bool(field_value < condition_value)
        return bool(field_value <= condition_value)
    except TypeError:
        return False


class EqualOperator(MemoryOperator):
    @property
    def name(self) -> FilterOperator:
        return FilterOperator.EQ

    def evaluate(self, field_value: Any, condition_value: Any) -> bool:
        return _equals(field_value, condition_value)


class NotEqualOperator(MemoryOperator):
    @property
    def name(self) -> FilterOperator:
        return FilterOperator.NE

    def evaluate(self, field_value: Any, condition_value: Any) -> bool:
        return not _equals(field_value, condition_value)


class GreaterThanOperator(MemoryOperator):
    @property
    def name(self) -> FilterOperator:
        return FilterOperator.GT

    def evaluate(self, field_value: Any, condition_value: Any) -> bool:
        return _compare(field_value, condition_value, "gt")


class GreaterEqualOperator(MemoryOperator):
    @property
    def name(self) -> FilterOperator:
        return FilterOperator.GTE

    def evaluate(self, field_value: Any, condition_value: Any) -> bool:
        return _compare(field_value, condition_value, "gte")


class LessThanOperator(MemoryOperator):
    @property
    def name(self) -> FilterOperator:
        return FilterOperator.LT

    def evaluate(self, field_value: Any, condition_value: Any) -> bool:
        return _compare(field_value, condition_value, "lt")


class LessEqualOperator(MemoryOperator):
    @property
    def name(self) -> FilterOperator:
        return FilterOperator.LTE

    def evaluate(self, field_value: Any, condition_value: Any) -> bool:
        return _compare(field_value, condition_value, "lte")


class InOperator(MemoryOperator):
    @property
    def name(self) -> FilterOperator:
        return FilterOperator.IN

    def evaluate(self, field_value: Any, condition_value: Any) -> bool:
        return any(_equals(field_value, c) for c in _as_list(condition_value))


class NotInOperator(MemoryOperator):
    @property
    def name(self) -> FilterOperator:
        return FilterOperator.NIN

    def evaluate(self, field_value: Any, condition_value: Any) -> bool:
        return not any(
            _equals(field_value, c) for c in _as_list(condition_value)
        )


class SearchOperator(MemoryOperator):
    """Case-insensitive substring."""

    @property
    def name(self) -> FilterOperator:
        return FilterOperator.SEARCH

    def evaluate(self, field_value: Any, condition_value: Any) -> bool:
        if not isinstance(field_value, str):
            return False
        return str(condition_value).lower() in field_value.lower()


class StartsWithOperator(MemoryOperator):
    @property
    def name(self) -> FilterOperator:
        return FilterOperator.STARTS_WITH

    def evaluate(self, field_value: Any, condition_value: Any) -> bool:
        if not isinstance(field_value, str):
            return False
        return field_value.lower().startswith(str(condition_value).lower())


class EndsWithOperator(MemoryOperator):
    @property
    def name(self) -> FilterOperator:
        return FilterOperator.ENDS_WITH

    def evaluate(self, field_value: Any, condition_value: Any) -> bool:
        if not isinstance(field_value, str):
            return False
        return field_value.lower().endswith(str(condition_value).lower())


class MemoryOperatorRegistry:
    """
    Registry of MemoryOperator instances keyed by FilterOperator.

    Usage::

        registry = MemoryOperatorRegistry()
        registry.register(EqualOperator())

        result = registry.evaluate(FilterOperator.EQ, actual, expected)
    """

    def __init__(self) -> None:
        self._operators: dict[FilterOperator, MemoryOperator] = {}

    def register(self, operator: MemoryOperator) -> None:
        """Register an operator strategy instance."""
        self._operators[operator.name] = operator

    def register_all(self, *operators: MemoryOperator) -> None:
        for op in operators:
            self.register(op)

    def get(self, name: FilterOperator) -> MemoryOperator | None:
        return self._operators.get(name)

    @property
    def supported_operators(self) -> set[FilterOperator]:
        return set(self._operators.keys())

    def evaluate(
        self,
        name: FilterOperator,
        field_value: Any,
        condition_value: Any,
    ) -> bool:
        """
        Look up the operator and evaluate.

        Raises:
            ValueError: If the operator is not registered.
        """
        op = self.get(name)
        if op is None:
            raise ValueError(f"Unsupported operator for in-memory evaluation: {name}")
        return op.evaluate(field_value, condition_value)


def build_default_registry() -> MemoryOperatorRegistry:
    """Create a registry with every built-in operator."""
    registry = MemoryOperatorRegistry()
    registry.register_all(
        EqualOperator(),
        NotEqualOperator(),
        GreaterThanOperator(),
        GreaterEqualOperator(),
        LessThanOperator(),
        LessEqualOperator(),
        InOperator(),
        NotInOperator(),
        SearchOperator(),
        StartsWithOperator(),
        EndsWithOperator(),
    )
    return registry
