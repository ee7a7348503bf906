"""Aggregation pipeline stages.

Each stage is a single-key mapping on the wire (``{"match": {...}}``,
``{"group": {...}}``, ...) and a dedicated model in Python. The key selects
the model; a mapping with zero or several stage keys, or an unknown key, is
rejected when the request is parsed.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Discriminator,
    Field,
    NonNegativeInt,
    PositiveInt,
    Tag,
    model_validator,
)
from pydantic.alias_generators import to_camel

from .filters import Filter


class _StageModel(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        alias_generator=to_camel,
        populate_by_name=True,
    )


# ── Stage arguments ──────────────────────────────────────────────


class SortField(_StageModel):
    field: str = Field(min_length=1)
    direction: Literal["asc", "desc"] = "asc"


class AccumulatorOp(str, Enum):
    COUNT = "count"
    SUM = "sum"
    AVG = "avg"
    MIN = "min"
    MAX = "max"


class Accumulator(_StageModel):
    """Output field of a group: ``count`` or an op over a source field."""

    op: AccumulatorOp
    field: str | None = None

    @model_validator(mode="after")
    def _field_required_unless_count(self) -> Accumulator:
        if self.op is not AccumulatorOp.COUNT and not self.field:
            raise ValueError(f"accumulator '{self.op.value}' requires a field")
        return self


class GroupSpec(_StageModel):
    id: str | dict[str, str] | None = Field(alias="_id")
    fields: dict[str, Accumulator] = Field(default_factory=dict)


class SimpleLookup(_StageModel):
    """Equality join on ``localField == foreignField``."""

    from_: str = Field(alias="from", min_length=1)
    local_field: str
    foreign_field: str
    as_: str | None = Field(default=None, alias="as")


class PipelineLookup(_StageModel):
    """Join through a correlated sub-pipeline."""

    from_: str = Field(alias="from", min_length=1)
    let: dict[str, Any]
    pipeline: list[PipelineStage] = Field(default_factory=list)
    as_: str | None = Field(default=None, alias="as")


def _lookup_kind(value: Any) -> str | None:
    if isinstance(value, SimpleLookup):
        return "simple"
    if isinstance(value, PipelineLookup):
        return "pipeline"
    if isinstance(value, dict):
        if "localField" in value or "local_field" in value:
            return "simple"
        if "let" in value:
            return "pipeline"
    return None


LookupSpec = Annotated[
    Union[
        Annotated[SimpleLookup, Tag("simple")],
        Annotated[PipelineLookup, Tag("pipeline")],
    ],
    Discriminator(
        _lookup_kind,
        custom_error_type="invalid_lookup",
        custom_error_message=(
            "Invalid lookup configuration: expected localField/foreignField "
            "or let/pipeline"
        ),
    ),
]


class UnwindSpec(_StageModel):
    path: str = Field(min_length=1)
    preserve_null_and_empty_arrays: bool | None = None
    include_array_index: str | None = None


class GraphLookupSpec(_StageModel):
    from_: str = Field(alias="from", min_length=1)
    start_with: Any
    connect_from_field: str
    connect_to_field: str
    as_: str = Field(alias="as")
    max_depth: NonNegativeInt | None = None
    depth_field: str | None = None
    restrict_search_with_match: Filter | None = None


# ── Stages ───────────────────────────────────────────────────────


class MatchStage(_StageModel):
    match: Filter


class GroupStage(_StageModel):
    group: GroupSpec


class SortStage(_StageModel):
    sort: list[SortField] = Field(min_length=1)


class LimitStage(_StageModel):
    limit: PositiveInt


class SkipStage(_StageModel):
    skip: NonNegativeInt


class ProjectStage(_StageModel):
    project: dict[str, Literal[0, 1]]


class LookupStage(_StageModel):
    lookup: LookupSpec


class UnwindStage(_StageModel):
    unwind: str | UnwindSpec


class AddFieldsStage(_StageModel):
    add_fields: dict[str, Any]


class CountStage(_StageModel):
    count: str = Field(min_length=1)


class GraphLookupStage(_StageModel):
    graph_lookup: GraphLookupSpec


class FacetStage(_StageModel):
    facet: dict[str, list[PipelineStage]]


#: Wire key -> stage model. Python attribute names are accepted as well.
STAGE_TYPES: dict[str, type[_StageModel]] = {
    "match": MatchStage,
    "group": GroupStage,
    "sort": SortStage,
    "limit": LimitStage,
    "skip": SkipStage,
    "project": ProjectStage,
    "lookup": LookupStage,
    "unwind": UnwindStage,
    "addFields": AddFieldsStage,
    "count": CountStage,
    "graphLookup": GraphLookupStage,
    "facet": FacetStage,
}

_STAGE_KEYS: dict[str, str] = {
    **{key: key for key in STAGE_TYPES},
    "add_fields": "addFields",
    "graph_lookup": "graphLookup",
}
_STAGE_TAGS: dict[type[_StageModel], str] = {
    model: key for key, model in STAGE_TYPES.items()
}


def _stage_kind(value: Any) -> str | None:
    if isinstance(value, BaseModel):
        return _STAGE_TAGS.get(type(value))  # type: ignore[arg-type]
    if isinstance(value, dict) and len(value) == 1:
        (key,) = value
        return _STAGE_KEYS.get(key)
    return None


PipelineStage = Annotated[
    Union[
        Annotated[MatchStage, Tag("match")],
        Annotated[GroupStage, Tag("group")],
        Annotated[SortStage, Tag("sort")],
        Annotated[LimitStage, Tag("limit")],
        Annotated[SkipStage, Tag("skip")],
        Annotated[ProjectStage, Tag("project")],
        Annotated[LookupStage, Tag("lookup")],
        Annotated[UnwindStage, Tag("unwind")],
        Annotated[AddFieldsStage, Tag("addFields")],
        Annotated[CountStage, Tag("count")],
        Annotated[GraphLookupStage, Tag("graphLookup")],
        Annotated[FacetStage, Tag("facet")],
    ],
    Discriminator(
        _stage_kind,
        custom_error_type="unknown_pipeline_stage",
        custom_error_message=(
            "Unknown pipeline stage: each stage must have exactly one of "
            "match, group, sort, limit, skip, project, lookup, unwind, "
            "addFields, count, graphLookup, facet"
        ),
    ),
]

PipelineLookup.model_rebuild()
LookupStage.model_rebuild()
FacetStage.model_rebuild()


def stage_name(stage: BaseModel) -> str:
    """Return the wire key of a stage model (``"addFields"``, ...)."""
    return _STAGE_TAGS.get(type(stage), type(stage).__name__)  # type: ignore[arg-type]
