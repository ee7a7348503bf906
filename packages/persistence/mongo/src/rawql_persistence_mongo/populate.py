"""Relation expansion (``options.populate``) → ``$lookup`` stages."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from .exceptions import MongoTranslationError
from .filters import translate_select

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from rawql_core.request import Populate


@dataclass(frozen=True)
class RefSpec:
    """A reference field pointing at documents of another collection.

    ``many`` marks an array of references; such fields are not unwound.
    """

    collection: str
    many: bool = False
    foreign_field: str = "_id"

    @classmethod
    def coerce(cls, value: RefSpec | str | tuple[str, bool]) -> RefSpec:
        """Accept ``"users"``, ``("tags", True)`` or a ready ``RefSpec``."""
        if isinstance(value, RefSpec):
            return value
        if isinstance(value, str):
            return cls(collection=value)
        collection, many = value
        return cls(collection=collection, many=many)


class PopulateTranslator:
    """Builds lookup stages for a list of populate directives.

    *refs_for* returns the declared refs of a collection; it is consulted
    again for every nested level.
    """

    def __init__(self, refs_for: Callable[[str], Mapping[str, RefSpec]]) -> None:
        self._refs_for = refs_for

    def translate(
        self, collection: str, populates: list[Populate]
    ) -> list[dict[str, Any]]:
        stages: list[dict[str, Any]] = []
        refs = self._refs_for(collection)
        for populate in populates:
            ref = refs.get(populate.field)
            if ref is None:
                raise MongoTranslationError(
                    f"Cannot populate '{populate.field}': no reference declared "
                    f"on '{collection}'"
                )
            stages.append(self._lookup(populate, ref))
            if not ref.many:
                stages.append(
                    {
                        "$unwind": {
                            "path": f"${populate.field}",
                            "preserveNullAndEmptyArrays": True,
                        }
                    }
                )
        return stages

    def _lookup(self, populate: Populate, ref: RefSpec) -> dict[str, Any]:
        if not populate.select and not populate.populate:
            return {
                "$lookup": {
                    "from": ref.collection,
                    "localField": populate.field,
                    "foreignField": ref.foreign_field,
                    "as": populate.field,
                }
            }

        if ref.many:
            match = {
                "$in": [f"${ref.foreign_field}", {"$ifNull": ["$$ref", []]}]
            }
        else:
            match = {"$eq": [f"${ref.foreign_field}", "$$ref"]}
        pipeline: list[dict[str, Any]] = [{"$match": {"$expr": match}}]
        if populate.populate:
            pipeline.extend(self.translate(ref.collection, populate.populate))
        projection = translate_select(populate.select or [])
        if projection is not None:
            pipeline.append({"$project": projection})
        return {
            "$lookup": {
                "from": ref.collection,
                "let": {"ref": f"${populate.field}"},
                "pipeline": pipeline,
                "as": populate.field,
            }
        }
