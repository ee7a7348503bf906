"""Request — immutable, backend-agnostic operation descriptor."""

from __future__ import annotations

import uuid
from enum import Enum
from typing import TYPE_CHECKING, Any

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)
from pydantic.alias_generators import to_camel

from .filters import Filter, and_filters
from .pipeline import PipelineStage, SortField

if TYPE_CHECKING:
    from collections.abc import Mapping


class Operation(str, Enum):
    """Operations every adapter understands."""

    LIST = "list"
    GET = "get"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    COUNT = "count"
    AGGREGATE = "aggregate"


ALL_OPERATIONS: frozenset[Operation] = frozenset(Operation)


class _RequestModel(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        alias_generator=to_camel,
        populate_by_name=True,
    )


class Populate(_RequestModel):
    """Relation expansion: replace a reference field with the referenced
    record(s), optionally narrowed by ``select`` and expanded further."""

    field: str = Field(min_length=1)
    select: list[str] | None = None
    populate: list[Populate] | None = None

    @field_validator("populate", mode="before")
    @classmethod
    def _wrap_single(cls, value: Any) -> Any:
        if isinstance(value, (dict, Populate)):
            return [value]
        return value


class QueryOptions(_RequestModel):
    """Result shaping for list/get/update.

    ``sort`` and ``select`` may arrive as a single value; the engine turns
    them into lists during normalization.
    """

    sort: list[SortField] | SortField | None = None
    limit: int | None = None
    skip: int | None = None
    page: int | None = Field(default=None, ge=1)
    select: list[str] | str | None = None
    populate: list[Populate] | None = None

    @field_validator("populate", mode="before")
    @classmethod
    def _wrap_single(cls, value: Any) -> Any:
        if isinstance(value, (dict, Populate)):
            return [value]
        return value

    @property
    def sort_fields(self) -> list[SortField]:
        if self.sort is None:
            return []
        return self.sort if isinstance(self.sort, list) else [self.sort]

    @property
    def select_fields(self) -> list[str]:
        if self.select is None:
            return []
        return self.select if isinstance(self.select, list) else [self.select]

    def window(self, default_limit: int = 10) -> tuple[int, int]:
        """Return ``(skip, limit)``; ``page`` takes precedence over ``skip``."""
        limit = self.limit if self.limit and self.limit > 0 else default_limit
        if self.page is not None:
            return (self.page - 1) * limit, limit
        return max(self.skip or 0, 0), limit


class Request(_RequestModel):
    """A single data operation against one entity.

    Operation-specific rules (``delete`` needs ``id``, ``aggregate`` needs a
    pipeline) are enforced by the engine, not at construction, so that a
    malformed request still produces a failure envelope.
    """

    request_id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    operation: Operation = Field(validation_alias=AliasChoices("operation", "type"))
    entity: str
    id: str | None = None
    data: dict[str, Any] | None = None
    filter: Filter | None = None
    options: QueryOptions | None = None
    pipeline: list[PipelineStage] | None = None

    @classmethod
    def parse(cls, raw: Mapping[str, Any]) -> Request:
        """Build a request from a plain (wire-shaped) mapping."""
        return cls.model_validate(dict(raw))

    def scoped(self, extra: Filter) -> Request:
        """Return a copy whose filter is ``self.filter AND extra``."""
        return self.model_copy(update={"filter": and_filters(self.filter, extra)})

    def with_options(self, options: QueryOptions | None) -> Request:
        return self.model_copy(update={"options": options})
