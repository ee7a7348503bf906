"""Filter predicate tree.

A filter node is either a :class:`FieldFilter` leaf (``{field, op, value}``)
or a :class:`LogicalFilter` (``{and?, or?, not?}``). The two shapes are told
apart by key presence; anything else is rejected when the request is parsed.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Union

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Discriminator,
    Field,
    Tag,
    model_validator,
)

_LOGICAL_KEYS = ("and", "or", "not", "and_", "or_", "not_")


class FilterOperator(str, Enum):
    """Supported leaf comparison operators."""

    EQ = "eq"
    NE = "ne"
    GT = "gt"
    GTE = "gte"
    LT = "lt"
    LTE = "lte"
    IN = "in"
    NIN = "nin"

    # Case-insensitive string matching
    SEARCH = "search"
    STARTS_WITH = "startsWith"
    ENDS_WITH = "endsWith"


class FieldFilter(BaseModel):
    """Leaf comparison: ``field <op> value``."""

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    field: str = Field(min_length=1)
    op: FilterOperator = Field(validation_alias=AliasChoices("op", "operator"))
    value: Any


class LogicalFilter(BaseModel):
    """Boolean composition; every present key applies (conjunctively)."""

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    and_: Annotated[list[Filter], Field(min_length=1)] | None = Field(
        default=None, alias="and"
    )
    or_: Annotated[list[Filter], Field(min_length=1)] | None = Field(
        default=None, alias="or"
    )
    not_: Filter | None = Field(default=None, alias="not")

    @model_validator(mode="after")
    def _at_least_one_branch(self) -> LogicalFilter:
        if self.and_ is None and self.or_ is None and self.not_ is None:
            raise ValueError("logical filter needs at least one of and/or/not")
        return self


def _filter_kind(value: Any) -> str | None:
    if isinstance(value, FieldFilter):
        return "field"
    if isinstance(value, LogicalFilter):
        return "logical"
    if isinstance(value, dict):
        if "field" in value:
            return "field"
        if any(key in value for key in _LOGICAL_KEYS):
            return "logical"
    return None


Filter = Annotated[
    Union[
        Annotated[FieldFilter, Tag("field")],
        Annotated[LogicalFilter, Tag("logical")],
    ],
    Discriminator(
        _filter_kind,
        custom_error_type="invalid_filter",
        custom_error_message=(
            "Filter node must be a field condition {field, op, value} "
            "or a logical group {and, or, not}"
        ),
    ),
]

LogicalFilter.model_rebuild()


def and_filters(*filters: Filter | None) -> Filter | None:
    """Combine filters conjunctively, skipping ``None`` entries."""
    present = [f for f in filters if f is not None]
    if not present:
        return None
    if len(present) == 1:
        return present[0]
    return LogicalFilter(and_=present)
