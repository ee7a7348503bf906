"""
In-memory adapter.

A dict-backed implementation of every operation except ``aggregate``,
intended for tests and local prototyping. Records are plain dicts kept in
insertion order per entity; callers always receive copies.
"""

from __future__ import annotations

import copy
import logging
import uuid
from typing import TYPE_CHECKING, Any

from ...registry import EntityRegistry, NotRegistered
from ...request import Operation, QueryOptions
from ...response import Response
from ..base import BaseAdapter
from .evaluator import FilterEvaluator, project_record, sort_records

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from ...request import Request

logger = logging.getLogger("rawql.adapters.memory")


class InMemoryAdapter(BaseAdapter):
    """In-memory adapter backed by one record list per entity.

    Usage::

        adapter = InMemoryAdapter({"users": [{"id": "u1", "name": "Ann"}]})
        engine = QueryEngine(adapter)
    """

    CAPABILITIES = frozenset(
        {
            Operation.LIST,
            Operation.GET,
            Operation.CREATE,
            Operation.UPDATE,
            Operation.DELETE,
            Operation.COUNT,
        }
    )

    def __init__(
        self,
        initial_data: Mapping[str, Iterable[Mapping[str, Any]]] | None = None,
        *,
        id_field: str = "id",
        evaluator: FilterEvaluator | None = None,
        default_limit: int = 10,
    ) -> None:
        self._entities: EntityRegistry[list[dict[str, Any]]] = EntityRegistry()
        self._id_field = id_field
        self._evaluator = evaluator or FilterEvaluator()
        self._default_limit = default_limit
        for entity, records in (initial_data or {}).items():
            self.register(entity, records)

    def register(
        self, entity: str, records: Iterable[Mapping[str, Any]] | None = None
    ) -> None:
        """Register *entity*, optionally seeded with *records*."""
        self._entities.register(
            entity, [copy.deepcopy(dict(r)) for r in records or ()]
        )

    def records(self, entity: str) -> list[dict[str, Any]]:
        """Return copies of all stored records (test helper)."""
        store = self._entities.lookup(entity)
        if isinstance(store, NotRegistered):
            return []
        return copy.deepcopy(store)

    def clear(self) -> None:
        for entity in self._entities.entities:
            self._entities.register(entity, [])

    # ── Operations ───────────────────────────────────────────────

    async def list(self, request: Request) -> Response:
        store = self._entities.lookup(request.entity)
        if isinstance(store, NotRegistered):
            return Response.failure(store.message)

        options = request.options or QueryOptions()
        matched = self._evaluator.filter(store, request.filter)
        ordered = sort_records(matched, options.sort_fields)
        skip, limit = options.window(self._default_limit)
        window = ordered[skip : skip + limit]
        items = [
            project_record(copy.deepcopy(r), options.select_fields, self._id_field)
            for r in window
        ]
        return Response.paginated(
            f"Fetched {request.entity} list successfully",
            items,
            total_items=len(matched),
            skip=skip,
            limit=limit,
        )

    async def get(self, request: Request) -> Response:
        store = self._entities.lookup(request.entity)
        if isinstance(store, NotRegistered):
            return Response.failure(store.message)

        index = self._find_index(store, request)
        if index is None:
            return Response.failure(f"{request.entity} not found")
        options = request.options or QueryOptions()
        item = project_record(
            copy.deepcopy(store[index]), options.select_fields, self._id_field
        )
        return Response.single(f"Fetched {request.entity} successfully", item)

    async def create(self, request: Request) -> Response:
        store = self._entities.lookup(request.entity)
        if isinstance(store, NotRegistered):
            return Response.failure(store.message)

        record = {
            self._id_field: uuid.uuid4().hex,
            **copy.deepcopy(request.data or {}),
        }
        store.append(record)
        logger.debug("Created %s %s", request.entity, record[self._id_field])
        return Response.single(
            f"{request.entity} created successfully", copy.deepcopy(record)
        )

    async def update(self, request: Request) -> Response:
        store = self._entities.lookup(request.entity)
        if isinstance(store, NotRegistered):
            return Response.failure(store.message)

        index = self._find_index(store, request)
        if index is None:
            return Response.failure(f"{request.entity} not found")
        changes = {
            k: v for k, v in (request.data or {}).items() if k != self._id_field
        }
        store[index].update(copy.deepcopy(changes))
        return Response.single(
            f"{request.entity} updated successfully", copy.deepcopy(store[index])
        )

    async def delete(self, request: Request) -> Response:
        store = self._entities.lookup(request.entity)
        if isinstance(store, NotRegistered):
            return Response.failure(store.message)

        index = self._find_index(store, request)
        if index is None:
            return Response.failure(f"{request.entity} not found")
        removed = store.pop(index)
        return Response.single(f"Deleted {request.entity} successfully", removed)

    async def count(self, request: Request) -> Response:
        store = self._entities.lookup(request.entity)
        if isinstance(store, NotRegistered):
            return Response.failure(store.message)

        total = sum(1 for r in store if self._evaluator.matches(r, request.filter))
        return Response.single(f"Counted {request.entity} successfully", total)

    # ── Helpers ──────────────────────────────────────────────────

    def _find_index(
        self, store: list[dict[str, Any]], request: Request
    ) -> int | None:
        """First record matching both ``request.id`` and ``request.filter``."""
        for index, record in enumerate(store):
            record_id = record.get(self._id_field)
            if request.id is not None and str(record_id) != request.id:
                continue
            if self._evaluator.matches(record, request.filter):
                return index
        return None
