"""Aggregation pipeline → MongoDB aggregation stages.

Translation is order-preserving and one-to-one: stage *i* of the input is
stage *i* of the output. Stages are never reordered or fused.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from rawql_core.pipeline import (
    AccumulatorOp,
    AddFieldsStage,
    CountStage,
    FacetStage,
    GraphLookupStage,
    GroupStage,
    LimitStage,
    LookupStage,
    MatchStage,
    PipelineLookup,
    ProjectStage,
    SimpleLookup,
    SkipStage,
    SortStage,
    UnwindStage,
    stage_name,
)

from .exceptions import MongoTranslationError
from .filters import translate_filter, translate_sort

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from pydantic import BaseModel
    from rawql_core.pipeline import Accumulator, GroupSpec, PipelineStage

    StageTranslator = Callable[[Any], dict[str, Any]]

_ACCUMULATORS: dict[AccumulatorOp, str] = {
    AccumulatorOp.SUM: "$sum",
    AccumulatorOp.AVG: "$avg",
    AccumulatorOp.MIN: "$min",
    AccumulatorOp.MAX: "$max",
}


def field_path(name: str) -> str:
    """Return *name* as a ``$``-prefixed field path."""
    return name if name.startswith("$") else f"${name}"


# ── Stage translators ────────────────────────────────────────────


def _match(stage: MatchStage) -> dict[str, Any]:
    return {"$match": translate_filter(stage.match)}


def _group_key(key: str | dict[str, str] | None) -> Any:
    if key is None:
        return None
    if isinstance(key, dict):
        return {name: field_path(path) for name, path in key.items()}
    return field_path(key)


def _accumulator(acc: Accumulator) -> dict[str, Any]:
    if acc.op is AccumulatorOp.COUNT:
        return {"$sum": 1}
    if not acc.field:
        raise MongoTranslationError(f"Accumulator '{acc.op.value}' requires a field")
    return {_ACCUMULATORS[acc.op]: field_path(acc.field)}


def translate_group(spec: GroupSpec) -> dict[str, Any]:
    group: dict[str, Any] = {"_id": _group_key(spec.id)}
    for name, acc in spec.fields.items():
        group[name] = _accumulator(acc)
    return group


def _group(stage: GroupStage) -> dict[str, Any]:
    return {"$group": translate_group(stage.group)}


def _sort(stage: SortStage) -> dict[str, Any]:
    return {"$sort": translate_sort(stage.sort)}


def _limit(stage: LimitStage) -> dict[str, Any]:
    return {"$limit": stage.limit}


def _skip(stage: SkipStage) -> dict[str, Any]:
    return {"$skip": stage.skip}


def _project(stage: ProjectStage) -> dict[str, Any]:
    return {"$project": dict(stage.project)}


def _add_fields(stage: AddFieldsStage) -> dict[str, Any]:
    return {"$addFields": dict(stage.add_fields)}


def _count(stage: CountStage) -> dict[str, Any]:
    return {"$count": stage.count}


def _lookup(stage: LookupStage) -> dict[str, Any]:
    spec = stage.lookup
    if isinstance(spec, SimpleLookup):
        return {
            "$lookup": {
                "from": spec.from_,
                "localField": spec.local_field,
                "foreignField": spec.foreign_field,
                "as": spec.as_ or spec.from_,
            }
        }
    if isinstance(spec, PipelineLookup):
        return {
            "$lookup": {
                "from": spec.from_,
                "let": dict(spec.let),
                "pipeline": translate_pipeline(spec.pipeline),
                "as": spec.as_ or spec.from_,
            }
        }
    raise MongoTranslationError("Invalid lookup configuration")


def _unwind(stage: UnwindStage) -> dict[str, Any]:
    spec = stage.unwind
    if isinstance(spec, str):
        return {"$unwind": field_path(spec)}
    unwind: dict[str, Any] = {"path": field_path(spec.path)}
    if spec.preserve_null_and_empty_arrays is not None:
        unwind["preserveNullAndEmptyArrays"] = spec.preserve_null_and_empty_arrays
    if spec.include_array_index is not None:
        unwind["includeArrayIndex"] = spec.include_array_index
    return {"$unwind": unwind}


def _graph_lookup(stage: GraphLookupStage) -> dict[str, Any]:
    spec = stage.graph_lookup
    graph: dict[str, Any] = {
        "from": spec.from_,
        "startWith": spec.start_with,
        "connectFromField": spec.connect_from_field,
        "connectToField": spec.connect_to_field,
        "as": spec.as_,
    }
    if spec.max_depth is not None:
        graph["maxDepth"] = spec.max_depth
    if spec.depth_field is not None:
        graph["depthField"] = spec.depth_field
    if spec.restrict_search_with_match is not None:
        graph["restrictSearchWithMatch"] = translate_filter(
            spec.restrict_search_with_match
        )
    return {"$graphLookup": graph}


def _facet(stage: FacetStage) -> dict[str, Any]:
    return {
        "$facet": {
            name: _translate(branch, _FACET_TRANSLATORS)
            for name, branch in stage.facet.items()
        }
    }


_TRANSLATORS: dict[type[BaseModel], StageTranslator] = {
    MatchStage: _match,
    GroupStage: _group,
    SortStage: _sort,
    LimitStage: _limit,
    SkipStage: _skip,
    ProjectStage: _project,
    LookupStage: _lookup,
    UnwindStage: _unwind,
    AddFieldsStage: _add_fields,
    CountStage: _count,
    GraphLookupStage: _graph_lookup,
    FacetStage: _facet,
}

# Stages allowed inside a facet branch.
_FACET_TRANSLATORS: dict[type[BaseModel], StageTranslator] = {
    model: fn for model, fn in _TRANSLATORS.items() if model is not FacetStage
}


def _translate(
    stages: Iterable[PipelineStage],
    translators: dict[type[BaseModel], StageTranslator],
) -> list[dict[str, Any]]:
    result: list[dict[str, Any]] = []
    for stage in stages:
        translator = translators.get(type(stage))
        if translator is None:
            name = stage_name(stage)
            if translators is _FACET_TRANSLATORS and isinstance(stage, FacetStage):
                raise MongoTranslationError(
                    f"Stage '{name}' is not allowed inside a facet"
                )
            raise MongoTranslationError(f"Unknown pipeline stage: {name}")
        result.append(translator(stage))
    return result


def translate_pipeline(stages: Iterable[PipelineStage]) -> list[dict[str, Any]]:
    """Translate *stages* into MongoDB aggregation stages, in order."""
    return _translate(stages, _TRANSLATORS)
