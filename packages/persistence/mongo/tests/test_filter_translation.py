"""Tests for filter tree → MongoDB query translation."""

from __future__ import annotations

import pytest
from rawql_core.filters import FieldFilter, FilterOperator, LogicalFilter
from rawql_core.pipeline import SortField
from rawql_persistence_mongo.exceptions import MongoTranslationError
from rawql_persistence_mongo.filters import (
    translate_filter,
    translate_select,
    translate_sort,
)


def leaf(field: str, op: str, value) -> FieldFilter:
    return FieldFilter(field=field, op=FilterOperator(op), value=value)


def test_none_matches_everything() -> None:
    assert translate_filter(None) == {}


@pytest.mark.parametrize(
    ("op", "mongo_op"),
    [
        ("eq", "$eq"),
        ("ne", "$ne"),
        ("gt", "$gt"),
        ("gte", "$gte"),
        ("lt", "$lt"),
        ("lte", "$lte"),
    ],
)
def test_comparison_operators(op: str, mongo_op: str) -> None:
    assert translate_filter(leaf("age", op, 18)) == {"age": {mongo_op: 18}}


def test_in_and_nin_take_lists() -> None:
    assert translate_filter(leaf("status", "in", ["a", "b"])) == {
        "status": {"$in": ["a", "b"]}
    }
    assert translate_filter(leaf("status", "nin", "a")) == {"status": {"$nin": ["a"]}}


def test_string_operators_escape_and_ignore_case() -> None:
    assert translate_filter(leaf("name", "search", "a.b")) == {
        "name": {"$regex": r"a\.b", "$options": "i"}
    }
    assert translate_filter(leaf("name", "startsWith", "Al")) == {
        "name": {"$regex": "^Al", "$options": "i"}
    }
    assert translate_filter(leaf("name", "endsWith", "(x)")) == {
        "name": {"$regex": r"\(x\)$", "$options": "i"}
    }


def test_string_operator_requires_string_value() -> None:
    with pytest.raises(MongoTranslationError, match="requires a string value"):
        translate_filter(leaf("name", "search", 5))


def test_logical_nodes() -> None:
    node = LogicalFilter(
        and_=[leaf("age", "gte", 18), leaf("status", "eq", "active")]
    )

    assert translate_filter(node) == {
        "$and": [{"age": {"$gte": 18}}, {"status": {"$eq": "active"}}]
    }


def test_not_becomes_nor() -> None:
    node = LogicalFilter(not_=leaf("x", "eq", 1))

    assert translate_filter(node) == {"$nor": [{"x": {"$eq": 1}}]}


def test_multiple_keys_share_one_document() -> None:
    node = LogicalFilter(
        and_=[leaf("a", "eq", 1)],
        or_=[leaf("b", "eq", 2), leaf("c", "eq", 3)],
        not_=leaf("d", "eq", 4),
    )

    assert translate_filter(node) == {
        "$and": [{"a": {"$eq": 1}}],
        "$or": [{"b": {"$eq": 2}}, {"c": {"$eq": 3}}],
        "$nor": [{"d": {"$eq": 4}}],
    }


def test_nested_tree() -> None:
    node = LogicalFilter(
        or_=[
            LogicalFilter(and_=[leaf("a", "eq", 1), leaf("b", "lt", 5)]),
            LogicalFilter(not_=LogicalFilter(or_=[leaf("c", "in", [1, 2])])),
        ]
    )

    assert translate_filter(node) == {
        "$or": [
            {"$and": [{"a": {"$eq": 1}}, {"b": {"$lt": 5}}]},
            {"$nor": [{"$or": [{"c": {"$in": [1, 2]}}]}]},
        ]
    }


def test_non_filter_node_is_rejected() -> None:
    with pytest.raises(MongoTranslationError, match="Filter node must be"):
        translate_filter({"field": "a"})  # type: ignore[arg-type]


def test_sort_and_select() -> None:
    sort = [SortField(field="b", direction="desc"), SortField(field="a")]

    assert list(translate_sort(sort).items()) == [("b", -1), ("a", 1)]
    assert translate_select(["name", "age"]) == {"name": 1, "age": 1}
    assert translate_select([]) is None


def test_select_with_leading_dash_excludes_fields() -> None:
    assert translate_select(["-password", "-token"]) == {"password": 0, "token": 0}
    assert translate_select(["name", "-_id"]) == {"name": 1, "_id": 0}


def test_select_rejects_mixed_inclusion_and_exclusion() -> None:
    with pytest.raises(MongoTranslationError, match="Cannot mix"):
        translate_select(["name", "-password"])
    with pytest.raises(MongoTranslationError, match="Invalid select field"):
        translate_select(["-"])
