"""Evaluate filter trees, sorts and projections against plain dict records."""

from __future__ import annotations

from functools import cmp_to_key
from typing import TYPE_CHECKING, Any

from ...filters import FieldFilter, LogicalFilter
from .operators import MISSING, MemoryOperatorRegistry, build_default_registry

if TYPE_CHECKING:
    from ...filters import Filter
    from ...pipeline import SortField


def resolve_path(record: Any, path: str) -> Any:
    """Resolve a dotted *path*; returns ``MISSING`` when any segment is absent."""
    current = record
    for part in path.split("."):
        if isinstance(current, dict):
            if part not in current:
                return MISSING
            current = current[part]
        elif isinstance(current, list) and part.isdigit():
            index = int(part)
            if index >= len(current):
                return MISSING
            current = current[index]
        else:
            return MISSING
    return current


class FilterEvaluator:
    """Evaluates a :data:`~rawql_core.filters.Filter` against a record.

    ``and``/``or``/``not`` present on the same node are combined
    conjunctively, matching the MongoDB translation.
    """

    def __init__(self, registry: MemoryOperatorRegistry | None = None) -> None:
        self._registry = registry or build_default_registry()

    @property
    def registry(self) -> MemoryOperatorRegistry:
        return self._registry

    def matches(self, record: dict[str, Any], node: Filter | None) -> bool:
        if node is None:
            return True
        if isinstance(node, FieldFilter):
            return self._registry.evaluate(
                node.op, resolve_path(record, node.field), node.value
            )
        if isinstance(node, LogicalFilter):
            if node.and_ is not None and not all(
                self.matches(record, child) for child in node.and_
            ):
                return False
            if node.or_ is not None and not any(
                self.matches(record, child) for child in node.or_
            ):
                return False
            if node.not_ is not None and self.matches(record, node.not_):
                return False
            return True
        raise TypeError(f"Unsupported filter node: {type(node).__name__}")

    def filter(
        self, records: list[dict[str, Any]], node: Filter | None
    ) -> list[dict[str, Any]]:
        return [record for record in records if self.matches(record, node)]


def _compare_values(left: Any, right: Any) -> int:
    # Absent and null sort first, as in MongoDB ascending order.
    left_empty = left is MISSING or left is None
    right_empty = right is MISSING or right is None
    if left_empty or right_empty:
        return int(right_empty) - int(left_empty) if left_empty != right_empty else 0
    try:
        if left < right:
            return -1
        if left > right:
            return 1
    except TypeError:
        return (str(left) > str(right)) - (str(left) < str(right))
    return 0


def sort_records(
    records: list[dict[str, Any]], sort: list[SortField]
) -> list[dict[str, Any]]:
    """Return *records* ordered by the sort keys, earlier keys first."""
    if not sort:
        return list(records)

    def compare(a: dict[str, Any], b: dict[str, Any]) -> int:
        for key in sort:
            result = _compare_values(
                resolve_path(a, key.field), resolve_path(b, key.field)
            )
            if result:
                return -result if key.direction == "desc" else result
        return 0

    return sorted(records, key=cmp_to_key(compare))


def project_record(
    record: dict[str, Any], select: list[str], id_field: str = "id"
) -> dict[str, Any]:
    """Keep only the selected top-level fields, plus the id.

    ``-name`` entries drop fields instead; when every entry is an exclusion
    the rest of the record is kept.
    """
    if not select:
        return dict(record)
    dropped = {path[1:].split(".", 1)[0] for path in select if path.startswith("-")}
    kept = [path for path in select if not path.startswith("-")]
    if not kept:
        return {key: value for key, value in record.items() if key not in dropped}
    keep = {id_field, *(path.split(".", 1)[0] for path in kept)} - dropped
    return {key: value for key, value in record.items() if key in keep}
