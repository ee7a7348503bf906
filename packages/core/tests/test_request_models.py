"""Tests for Request, Filter and pipeline stage parsing."""

from __future__ import annotations

import pytest
from pydantic import ValidationError as PydanticValidationError

from rawql_core.filters import (
    FieldFilter,
    FilterOperator,
    LogicalFilter,
    and_filters,
)
from rawql_core.pipeline import (
    AccumulatorOp,
    AddFieldsStage,
    FacetStage,
    GraphLookupStage,
    GroupStage,
    LookupStage,
    MatchStage,
    PipelineLookup,
    SimpleLookup,
    SortStage,
    UnwindSpec,
    UnwindStage,
    stage_name,
)
from rawql_core.request import Operation, Populate, QueryOptions, Request

# --- Filters ---


def test_field_filter_parses_from_wire_shape() -> None:
    request = Request.parse(
        {
            "operation": "list",
            "entity": "users",
            "filter": {"field": "age", "op": "gte", "value": 18},
        }
    )

    assert isinstance(request.filter, FieldFilter)
    assert request.filter.op is FilterOperator.GTE
    assert request.filter.value == 18


def test_field_filter_accepts_operator_alias() -> None:
    request = Request.parse(
        {
            "operation": "list",
            "entity": "users",
            "filter": {"field": "name", "operator": "startsWith", "value": "Al"},
        }
    )

    assert request.filter == FieldFilter(
        field="name", op=FilterOperator.STARTS_WITH, value="Al"
    )


def test_logical_filter_parses_nested_tree() -> None:
    request = Request.parse(
        {
            "operation": "list",
            "entity": "users",
            "filter": {
                "and": [
                    {"field": "age", "op": "gte", "value": 18},
                    {
                        "or": [
                            {"field": "status", "op": "eq", "value": "active"},
                            {"not": {"field": "banned", "op": "eq", "value": True}},
                        ]
                    },
                ]
            },
        }
    )

    node = request.filter
    assert isinstance(node, LogicalFilter)
    assert node.and_ is not None
    assert isinstance(node.and_[0], FieldFilter)
    inner = node.and_[1]
    assert isinstance(inner, LogicalFilter)
    assert inner.or_ is not None
    assert isinstance(inner.or_[1], LogicalFilter)
    assert isinstance(inner.or_[1].not_, FieldFilter)


def test_unknown_operator_is_rejected() -> None:
    with pytest.raises(PydanticValidationError):
        Request.parse(
            {
                "operation": "list",
                "entity": "users",
                "filter": {"field": "age", "op": "like", "value": 1},
            }
        )


def test_filter_without_field_or_logical_keys_is_rejected() -> None:
    with pytest.raises(PydanticValidationError, match="Filter node must be"):
        Request.parse(
            {"operation": "list", "entity": "users", "filter": {"foo": "bar"}}
        )


def test_empty_logical_group_is_rejected() -> None:
    with pytest.raises(PydanticValidationError):
        LogicalFilter.model_validate({"and": []})


def test_and_filters_skips_missing_parts() -> None:
    leaf = FieldFilter(field="tenantId", op=FilterOperator.EQ, value="t1")

    assert and_filters(None, None) is None
    assert and_filters(None, leaf) is leaf
    combined = and_filters(leaf, leaf)
    assert isinstance(combined, LogicalFilter)
    assert combined.and_ == [leaf, leaf]


# --- Pipeline stages ---


def test_pipeline_stages_parse_by_key() -> None:
    request = Request.parse(
        {
            "operation": "aggregate",
            "entity": "orders",
            "pipeline": [
                {"match": {"field": "status", "op": "eq", "value": "paid"}},
                {
                    "group": {
                        "_id": "customerId",
                        "fields": {
                            "orders": {"op": "count"},
                            "revenue": {"op": "sum", "field": "total"},
                        },
                    }
                },
                {"sort": [{"field": "revenue", "direction": "desc"}]},
                {"addFields": {"vip": True}},
            ],
        }
    )

    stages = request.pipeline
    assert stages is not None
    assert [stage_name(s) for s in stages] == ["match", "group", "sort", "addFields"]
    assert isinstance(stages[0], MatchStage)
    group = stages[1]
    assert isinstance(group, GroupStage)
    assert group.group.id == "customerId"
    assert group.group.fields["orders"].op is AccumulatorOp.COUNT
    assert isinstance(stages[2], SortStage)
    assert stages[2].sort[0].direction == "desc"
    assert isinstance(stages[3], AddFieldsStage)


def test_unknown_pipeline_stage_is_rejected() -> None:
    with pytest.raises(PydanticValidationError, match="Unknown pipeline stage"):
        Request.parse(
            {"operation": "aggregate", "entity": "orders", "pipeline": [{"bogus": 1}]}
        )


def test_stage_with_two_keys_is_rejected() -> None:
    with pytest.raises(PydanticValidationError, match="Unknown pipeline stage"):
        Request.parse(
            {
                "operation": "aggregate",
                "entity": "orders",
                "pipeline": [{"limit": 1, "skip": 2}],
            }
        )


def test_accumulator_requires_field_unless_count() -> None:
    with pytest.raises(PydanticValidationError, match="requires a field"):
        GroupStage.model_validate(
            {"group": {"_id": None, "fields": {"total": {"op": "sum"}}}}
        )


def test_lookup_forms_are_distinguished() -> None:
    simple = LookupStage.model_validate(
        {"lookup": {"from": "users", "localField": "authorId", "foreignField": "_id"}}
    )
    sub = LookupStage.model_validate(
        {
            "lookup": {
                "from": "items",
                "let": {"orderId": "$_id"},
                "pipeline": [{"limit": 5}],
                "as": "lines",
            }
        }
    )

    assert isinstance(simple.lookup, SimpleLookup)
    assert simple.lookup.as_ is None
    assert isinstance(sub.lookup, PipelineLookup)
    assert sub.lookup.as_ == "lines"
    assert len(sub.lookup.pipeline) == 1


def test_invalid_lookup_is_rejected() -> None:
    with pytest.raises(PydanticValidationError, match="Invalid lookup"):
        LookupStage.model_validate({"lookup": {"from": "users"}})


def test_unwind_accepts_path_or_spec() -> None:
    bare = UnwindStage.model_validate({"unwind": "tags"})
    spec = UnwindStage.model_validate(
        {"unwind": {"path": "tags", "preserveNullAndEmptyArrays": True}}
    )

    assert bare.unwind == "tags"
    assert isinstance(spec.unwind, UnwindSpec)
    assert spec.unwind.preserve_null_and_empty_arrays is True
    assert spec.unwind.include_array_index is None


def test_graph_lookup_keeps_zero_max_depth() -> None:
    stage = GraphLookupStage.model_validate(
        {
            "graphLookup": {
                "from": "employees",
                "startWith": "$managerId",
                "connectFromField": "managerId",
                "connectToField": "_id",
                "as": "chain",
                "maxDepth": 0,
            }
        }
    )

    assert stage.graph_lookup.max_depth == 0


def test_facet_branches_parse_recursively() -> None:
    stage = FacetStage.model_validate(
        {"facet": {"first": [{"limit": 1}], "total": [{"count": "n"}]}}
    )

    assert set(stage.facet) == {"first", "total"}
    assert stage_name(stage.facet["total"][0]) == "count"


# --- Request / options ---


def test_request_accepts_type_alias_and_generates_request_id() -> None:
    request = Request.parse({"type": "get", "entity": "users", "id": "u1"})

    assert request.operation is Operation.GET
    assert request.request_id


def test_request_rejects_unknown_keys() -> None:
    with pytest.raises(PydanticValidationError):
        Request.parse({"operation": "get", "entity": "users", "unexpected": 1})


def test_request_is_immutable() -> None:
    request = Request(operation=Operation.GET, entity="users", id="u1")

    with pytest.raises(PydanticValidationError):
        request.entity = "posts"  # type: ignore[misc]


def test_scoped_returns_new_request_with_combined_filter() -> None:
    original = Request.parse(
        {
            "operation": "list",
            "entity": "users",
            "filter": {"field": "age", "op": "gt", "value": 30},
        }
    )
    scope = FieldFilter(field="tenantId", op=FilterOperator.EQ, value="t1")

    scoped = original.scoped(scope)

    assert isinstance(original.filter, FieldFilter)
    assert isinstance(scoped.filter, LogicalFilter)
    assert scoped.filter.and_ == [original.filter, scope]
    assert scoped.request_id == original.request_id


def test_populate_accepts_single_entry() -> None:
    options = QueryOptions.model_validate(
        {"populate": {"field": "author", "select": ["name"]}}
    )

    assert options.populate == [Populate(field="author", select=["name"])]


def test_query_options_window_prefers_page() -> None:
    assert QueryOptions(page=3, limit=10, skip=5).window() == (20, 10)
    assert QueryOptions(skip=7, limit=5).window() == (7, 5)
    assert QueryOptions().window() == (0, 10)
    assert QueryOptions(limit=0, skip=-4).window(default_limit=25) == (0, 25)
