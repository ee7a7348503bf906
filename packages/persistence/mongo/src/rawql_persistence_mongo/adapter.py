"""MongoAdapter — executes requests against MongoDB through Motor."""

from __future__ import annotations

import functools
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, TypeVar

from pymongo import ReturnDocument
from pymongo.errors import PyMongoError
from rawql_core.adapters.base import BaseAdapter
from rawql_core.primitives.exceptions import PersistenceError, ValidationError
from rawql_core.registry import EntityRegistry, NotRegistered
from rawql_core.request import ALL_OPERATIONS, QueryOptions
from rawql_core.response import Response
from rawql_core.validation.pydantic import PydanticSchema

from .filters import translate_filter, translate_select, translate_sort
from .pipeline import translate_pipeline
from .populate import PopulateTranslator, RefSpec
from .serialization import coerce_id, serialize_document, to_bson

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Mapping

    from pydantic import BaseModel
    from rawql_core.request import Request

    from .connection import MongoConnectionManager

logger = logging.getLogger("rawql.persistence.mongo")

_F = TypeVar("_F", bound="Callable[..., Awaitable[Response]]")


@dataclass(frozen=True)
class CollectionBinding:
    """Where an entity lives and how its documents are shaped."""

    collection: str
    model: type[BaseModel] | None = None
    refs: Mapping[str, RefSpec] = field(default_factory=dict)


def _backend_errors(method: _F) -> _F:
    """Turn driver and persistence errors into failed responses."""

    @functools.wraps(method)
    async def wrapper(self: MongoAdapter, request: Request) -> Response:
        try:
            return await method(self, request)
        except PyMongoError as exc:
            logger.warning(
                "MongoDB error during %s on %s: %s",
                request.operation.value,
                request.entity,
                exc,
            )
            return Response.failure(str(exc))
        except PersistenceError as exc:
            logger.warning(
                "Persistence error during %s on %s: %s",
                request.operation.value,
                request.entity,
                exc.message,
            )
            return Response.failure(exc.message)

    return wrapper  # type: ignore[return-value]


class MongoAdapter(BaseAdapter):
    """Adapter serving every operation from MongoDB collections.

    Usage::

        connection = MongoConnectionManager("mongodb://localhost:27017")
        adapter = MongoAdapter(connection, database="app")
        adapter.register("users", model=User)
        adapter.register("posts", refs={"author": "users", "tags": ("tags", True)})
        engine = QueryEngine(adapter)

    Entities are bound to collections with :meth:`register`; requests for an
    unregistered entity fail with a "not registered" response.
    """

    CAPABILITIES = ALL_OPERATIONS

    def __init__(
        self,
        connection: MongoConnectionManager,
        *,
        database: str,
        default_limit: int = 10,
    ) -> None:
        self._connection = connection
        self._database = database
        self._default_limit = default_limit
        self._entities: EntityRegistry[CollectionBinding] = EntityRegistry()
        self._populate = PopulateTranslator(self._refs_for_collection)

    @property
    def connection(self) -> MongoConnectionManager:
        return self._connection

    def register(
        self,
        entity: str,
        collection: str | None = None,
        *,
        model: type[BaseModel] | None = None,
        refs: Mapping[str, RefSpec | str | tuple[str, bool]] | None = None,
    ) -> None:
        """Bind *entity* to *collection* (defaults to the entity name).

        *model* validates and coerces ``create`` payloads; *refs* declares the
        fields that ``options.populate`` may expand.
        """
        binding = CollectionBinding(
            collection=collection or entity,
            model=model,
            refs={name: RefSpec.coerce(ref) for name, ref in (refs or {}).items()},
        )
        self._entities.register(entity, binding)

    def close(self) -> None:
        self._connection.close()

    # ── Operations ───────────────────────────────────────────────

    @_backend_errors
    async def list(self, request: Request) -> Response:
        binding = self._entities.lookup(request.entity)
        if isinstance(binding, NotRegistered):
            return Response.failure(binding.message)

        coll = await self._collection(binding)
        options = request.options or QueryOptions()
        query = translate_filter(request.filter)
        skip, limit = options.window(self._default_limit)
        sort = translate_sort(options.sort_fields)
        projection = translate_select(options.select_fields)

        if options.populate:
            stages: list[dict[str, Any]] = [{"$match": query}]
            if sort:
                stages.append({"$sort": sort})
            stages.extend([{"$skip": skip}, {"$limit": limit}])
            stages.extend(
                self._populate.translate(binding.collection, options.populate)
            )
            if projection is not None:
                stages.append({"$project": projection})
            logger.debug("Aggregation pipeline for %s: %s", request.entity, stages)
            docs = await coll.aggregate(stages).to_list(length=None)
        else:
            cursor = coll.find(query, projection)
            if sort:
                cursor = cursor.sort(list(sort.items()))
            docs = await cursor.skip(skip).limit(limit).to_list(length=None)

        total = await coll.count_documents(query)
        return Response.paginated(
            f"Fetched {request.entity} list successfully",
            serialize_document(docs),
            total_items=total,
            skip=skip,
            limit=limit,
        )

    @_backend_errors
    async def get(self, request: Request) -> Response:
        binding = self._entities.lookup(request.entity)
        if isinstance(binding, NotRegistered):
            return Response.failure(binding.message)

        coll = await self._collection(binding)
        doc = await self._find_one(
            coll, binding, request, self._target_query(request)
        )
        if doc is None:
            return Response.failure(f"{request.entity} not found")
        return Response.single(
            f"Fetched {request.entity} successfully", serialize_document(doc)
        )

    @_backend_errors
    async def create(self, request: Request) -> Response:
        binding = self._entities.lookup(request.entity)
        if isinstance(binding, NotRegistered):
            return Response.failure(binding.message)

        payload = dict(request.data or {})
        if binding.model is not None:
            result = PydanticSchema(binding.model).validate(payload)
            if not result.valid:
                raise ValidationError(result.errors)
            payload = binding.model.model_validate(payload).model_dump()
        if "_id" in payload:
            payload["_id"] = coerce_id(payload["_id"])

        coll = await self._collection(binding)
        inserted = await coll.insert_one(to_bson(payload))
        doc = await coll.find_one({"_id": inserted.inserted_id})
        return Response.single(
            f"{request.entity} created successfully", serialize_document(doc)
        )

    @_backend_errors
    async def update(self, request: Request) -> Response:
        binding = self._entities.lookup(request.entity)
        if isinstance(binding, NotRegistered):
            return Response.failure(binding.message)

        coll = await self._collection(binding)
        query = self._target_query(request)
        changes = {k: v for k, v in (request.data or {}).items() if k != "_id"}

        if changes:
            updated = await coll.find_one_and_update(
                query,
                {"$set": to_bson(changes)},
                projection={"_id": 1},
                return_document=ReturnDocument.AFTER,
            )
            # Re-read by _id: the changes may no longer match the filter.
            doc = (
                None
                if updated is None
                else await self._find_one(
                    coll, binding, request, {"_id": updated["_id"]}
                )
            )
        else:
            doc = await self._find_one(coll, binding, request, query)

        if doc is None:
            return Response.failure(f"{request.entity} not found")
        return Response.single(
            f"{request.entity} updated successfully", serialize_document(doc)
        )

    @_backend_errors
    async def delete(self, request: Request) -> Response:
        binding = self._entities.lookup(request.entity)
        if isinstance(binding, NotRegistered):
            return Response.failure(binding.message)

        coll = await self._collection(binding)
        doc = await coll.find_one_and_delete(self._target_query(request))
        if doc is None:
            return Response.failure(f"{request.entity} not found")
        return Response.single(
            f"Deleted {request.entity} successfully", serialize_document(doc)
        )

    @_backend_errors
    async def count(self, request: Request) -> Response:
        binding = self._entities.lookup(request.entity)
        if isinstance(binding, NotRegistered):
            return Response.failure(binding.message)

        coll = await self._collection(binding)
        total = await coll.count_documents(translate_filter(request.filter))
        return Response.single(f"Counted {request.entity} successfully", total)

    @_backend_errors
    async def aggregate(self, request: Request) -> Response:
        binding = self._entities.lookup(request.entity)
        if isinstance(binding, NotRegistered):
            return Response.failure(binding.message)

        stages = translate_pipeline(request.pipeline or [])
        logger.debug("Aggregation pipeline for %s: %s", request.entity, stages)
        coll = await self._collection(binding)
        docs = await coll.aggregate(stages).to_list(length=None)
        return Response.multiple(
            f"Aggregated {request.entity} successfully", serialize_document(docs)
        )

    # ── Helpers ──────────────────────────────────────────────────

    async def _collection(self, binding: CollectionBinding) -> Any:
        db = await self._connection.database(self._database)
        return db[binding.collection]

    async def _find_one(
        self,
        coll: Any,
        binding: CollectionBinding,
        request: Request,
        query: dict[str, Any],
    ) -> dict[str, Any] | None:
        """First document matching *query*, shaped by ``select``/``populate``."""
        options = request.options or QueryOptions()
        projection = translate_select(options.select_fields)
        if not options.populate:
            return await coll.find_one(query, projection)  # type: ignore[no-any-return]

        stages: list[dict[str, Any]] = [{"$match": query}, {"$limit": 1}]
        stages.extend(self._populate.translate(binding.collection, options.populate))
        if projection is not None:
            stages.append({"$project": projection})
        logger.debug("Aggregation pipeline for %s: %s", request.entity, stages)
        docs = await coll.aggregate(stages).to_list(length=1)
        return docs[0] if docs else None

    def _target_query(self, request: Request) -> dict[str, Any]:
        """Query for ``request.id`` AND ``request.filter``."""
        query = translate_filter(request.filter)
        if request.id is None:
            return query
        by_id = {"_id": coerce_id(request.id)}
        if not query:
            return by_id
        return {"$and": [by_id, query]}

    def _refs_for_collection(self, collection: str) -> Mapping[str, RefSpec]:
        for entity in self._entities.entities:
            binding = self._entities.lookup(entity)
            if (
                isinstance(binding, CollectionBinding)
                and binding.collection == collection
            ):
                return binding.refs
        return {}
