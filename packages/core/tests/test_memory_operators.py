"""Tests for in-memory filter evaluation."""

from __future__ import annotations

import pytest

from rawql_core.adapters.memory import (
    MISSING,
    FilterEvaluator,
    MemoryOperatorRegistry,
    build_default_registry,
    project_record,
    resolve_path,
    sort_records,
)
from rawql_core.filters import FieldFilter, FilterOperator, LogicalFilter
from rawql_core.pipeline import SortField


def leaf(field: str, op: str, value) -> FieldFilter:
    return FieldFilter(field=field, op=FilterOperator(op), value=value)


class TestResolvePath:
    def test_nested_and_missing(self) -> None:
        record = {"address": {"city": "Oslo"}, "tags": ["a", "b"]}

        assert resolve_path(record, "address.city") == "Oslo"
        assert resolve_path(record, "tags.1") == "b"
        assert resolve_path(record, "address.zip") is MISSING
        assert resolve_path(record, "name") is MISSING


class TestOperators:
    @pytest.fixture
    def registry(self) -> MemoryOperatorRegistry:
        return build_default_registry()

    @pytest.mark.parametrize(
        ("op", "field_value", "condition", "expected"),
        [
            (FilterOperator.EQ, 5, 5, True),
            (FilterOperator.EQ, MISSING, 5, False),
            (FilterOperator.EQ, MISSING, None, True),
            (FilterOperator.EQ, ["x", "y"], "y", True),
            (FilterOperator.NE, MISSING, 5, True),
            (FilterOperator.NE, 5, 5, False),
            (FilterOperator.GT, 6, 5, True),
            (FilterOperator.GTE, 5, 5, True),
            (FilterOperator.LT, None, 5, False),
            (FilterOperator.LTE, "a", 5, False),
            (FilterOperator.IN, "b", ["a", "b"], True),
            (FilterOperator.IN, MISSING, ["a"], False),
            (FilterOperator.NIN, MISSING, ["a"], True),
            (FilterOperator.NIN, "a", ["a"], False),
            (FilterOperator.SEARCH, "Hello World", "lo wo", True),
            (FilterOperator.SEARCH, 42, "4", False),
            (FilterOperator.STARTS_WITH, "Alice", "al", True),
            (FilterOperator.ENDS_WITH, "Alice", "CE", True),
            (FilterOperator.ENDS_WITH, "Alice", "li", False),
        ],
    )
    def test_operator_semantics(
        self, registry, op, field_value, condition, expected
    ) -> None:
        assert registry.evaluate(op, field_value, condition) is expected

    def test_string_operators_match_literally(self, registry) -> None:
        assert registry.evaluate(FilterOperator.SEARCH, "a.c", "a.c") is True
        assert registry.evaluate(FilterOperator.SEARCH, "abc", "a.c") is False

    def test_unregistered_operator_raises(self) -> None:
        registry = MemoryOperatorRegistry()

        with pytest.raises(ValueError, match="Unsupported operator"):
            registry.evaluate(FilterOperator.EQ, 1, 1)

    def test_default_registry_covers_every_operator(self, registry) -> None:
        assert registry.supported_operators == set(FilterOperator)


class TestFilterEvaluator:
    @pytest.fixture
    def evaluator(self) -> FilterEvaluator:
        return FilterEvaluator()

    def test_none_matches_everything(self, evaluator) -> None:
        assert evaluator.matches({"a": 1}, None)

    def test_and_or(self, evaluator) -> None:
        adult_active = LogicalFilter(
            and_=[leaf("age", "gte", 18), leaf("status", "eq", "active")]
        )
        either = LogicalFilter(or_=[leaf("age", "lt", 10), leaf("vip", "eq", True)])

        assert evaluator.matches({"age": 30, "status": "active"}, adult_active)
        assert not evaluator.matches({"age": 30, "status": "idle"}, adult_active)
        assert evaluator.matches({"age": 30, "vip": True}, either)
        assert not evaluator.matches({"age": 30}, either)

    def test_not_matches_records_missing_the_field(self, evaluator) -> None:
        negation = LogicalFilter(not_=leaf("x", "eq", 1))

        assert evaluator.matches({"id": "2"}, negation)
        assert not evaluator.matches({"id": "1", "x": 1}, negation)

    def test_keys_on_one_node_combine_conjunctively(self, evaluator) -> None:
        node = LogicalFilter(
            and_=[leaf("age", "gte", 18)],
            not_=leaf("status", "eq", "banned"),
        )

        assert evaluator.matches({"age": 20, "status": "ok"}, node)
        assert not evaluator.matches({"age": 20, "status": "banned"}, node)
        assert not evaluator.matches({"age": 10, "status": "ok"}, node)


def test_sort_records_multi_key_with_missing_first() -> None:
    records = [
        {"id": "1", "team": "b", "score": 3},
        {"id": "2", "team": "a", "score": 1},
        {"id": "3", "team": "a", "score": 7},
        {"id": "4", "score": 5},
    ]

    ordered = sort_records(
        records,
        [SortField(field="team"), SortField(field="score", direction="desc")],
    )

    assert [r["id"] for r in ordered] == ["4", "3", "2", "1"]


def test_project_record_keeps_id() -> None:
    record = {"id": "1", "name": "Ann", "age": 3, "address": {"city": "Oslo"}}

    assert project_record(record, ["name", "address.city"]) == {
        "id": "1",
        "name": "Ann",
        "address": {"city": "Oslo"},
    }
    assert project_record(record, []) == record


def test_project_record_excludes_dashed_fields() -> None:
    record = {"id": "1", "name": "Ann", "password": "x", "token": "t"}

    assert project_record(record, ["-password", "-token"]) == {
        "id": "1",
        "name": "Ann",
    }
