"""Filter tree → MongoDB query document."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from rawql_core.filters import FieldFilter, LogicalFilter

from .exceptions import MongoTranslationError
from .operators import compile_standard, compile_string

if TYPE_CHECKING:
    from rawql_core.filters import Filter
    from rawql_core.pipeline import SortField

_COMPILERS = [
    compile_standard,
    compile_string,
]


def _compile_leaf(node: FieldFilter) -> dict[str, Any]:
    """Compile a single field condition to a MongoDB query document."""
    for compiler in _COMPILERS:
        result = compiler(node.field, node.op, node.value)
        if result is not None:
            return result
    raise MongoTranslationError(f"Unsupported filter operator: {node.op.value}")


def _compile_node(node: Filter) -> dict[str, Any]:
    """Recursively compile a filter node.

    Every key present on a logical node is translated independently and the
    results share one document, so they combine conjunctively.
    """
    if isinstance(node, FieldFilter):
        return _compile_leaf(node)
    if isinstance(node, LogicalFilter):
        query: dict[str, Any] = {}
        if node.and_ is not None:
            query["$and"] = [_compile_node(child) for child in node.and_]
        if node.or_ is not None:
            query["$or"] = [_compile_node(child) for child in node.or_]
        if node.not_ is not None:
            query["$nor"] = [_compile_node(node.not_)]
        return query
    raise MongoTranslationError(
        f"Filter node must be a FieldFilter or LogicalFilter, got {type(node).__name__}"
    )


def translate_filter(node: Filter | None) -> dict[str, Any]:
    """Translate *node* to a MongoDB query; ``None`` matches everything."""
    if node is None:
        return {}
    return _compile_node(node)


def translate_sort(sort: list[SortField]) -> dict[str, int]:
    """Build a MongoDB sort document, keeping key order."""
    return {s.field: -1 if s.direction == "desc" else 1 for s in sort}


def translate_select(fields: list[str]) -> dict[str, int] | None:
    """Build a projection; ``-name`` excludes a field. None means no projection.

    Inclusion and exclusion cannot be mixed, except for excluding ``_id``.
    """
    if not fields:
        return None
    projection: dict[str, int] = {}
    for name in fields:
        excluded = name.startswith("-")
        key = name[1:] if excluded else name
        if not key:
            raise MongoTranslationError(f"Invalid select field: {name!r}")
        projection[key] = 0 if excluded else 1
    modes = {flag for key, flag in projection.items() if key != "_id"}
    if len(modes) > 1:
        raise MongoTranslationError(
            "Cannot mix included and excluded fields in select: "
            + ", ".join(fields)
        )
    return projection
