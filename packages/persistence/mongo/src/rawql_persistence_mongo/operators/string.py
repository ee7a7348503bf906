"""String operators -> $regex, $options (case-insensitive)."""

from __future__ import annotations

import re
from typing import Any

from rawql_core.filters import FilterOperator

from ..exceptions import MongoTranslationError

_STRING_OPS = frozenset(
    {FilterOperator.SEARCH, FilterOperator.STARTS_WITH, FilterOperator.ENDS_WITH}
)


def compile_string(field: str, op: FilterOperator, val: Any) -> dict[str, Any] | None:
    """Compile string operators to MongoDB $regex. Returns None if not a string op.

    The value is matched literally: regex metacharacters are escaped.
    """
    if op not in _STRING_OPS:
        return None
    if not isinstance(val, str):
        raise MongoTranslationError(
            f"String operator {op.value} requires a string value"
        )
    pattern = re.escape(val)
    if op is FilterOperator.STARTS_WITH:
        pattern = "^" + pattern
    elif op is FilterOperator.ENDS_WITH:
        pattern = pattern + "$"
    return {field: {"$regex": pattern, "$options": "i"}}
