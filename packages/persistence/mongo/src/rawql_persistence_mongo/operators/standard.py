"""Comparison operators for MongoDB filter translation."""

from __future__ import annotations

from typing import Any

from rawql_core.filters import FilterOperator

_MONGO_OP_MAP: dict[FilterOperator, str] = {
    FilterOperator.EQ: "$eq",
    FilterOperator.NE: "$ne",
    FilterOperator.GT: "$gt",
    FilterOperator.GTE: "$gte",
    FilterOperator.LT: "$lt",
    FilterOperator.LTE: "$lte",
    FilterOperator.IN: "$in",
    FilterOperator.NIN: "$nin",
}


def compile_standard(
    field: str, op: FilterOperator, val: Any
) -> dict[str, Any] | None:
    """Compile comparison operators to ``{field: {$op: value}}``.

    Returns None if *op* is not a comparison operator.
    """
    mongo_op = _MONGO_OP_MAP.get(op)
    if mongo_op is None:
        return None
    if op in {FilterOperator.IN, FilterOperator.NIN}:
        normalized = list(val) if isinstance(val, (list, tuple, set)) else [val]
        return {field: {mongo_op: normalized}}
    return {field: {mongo_op: val}}
