"""rawql-core — backend-agnostic query engine.

Request/response envelope, filter tree, aggregation pipeline model,
middleware, payload validation and the in-memory adapter. Backend adapters
live in their own packages (``rawql_persistence_mongo``).
"""

from __future__ import annotations

# ── Adapters ────────────────────────────────────────────────────
from .adapters import BaseAdapter, InMemoryAdapter

# ── Engine ──────────────────────────────────────────────────────
from .engine import QueryEngine, validation_payload

# ── Request model ───────────────────────────────────────────────
from .filters import (
    FieldFilter,
    Filter,
    FilterOperator,
    LogicalFilter,
    and_filters,
)

# ── Middleware ──────────────────────────────────────────────────
from .middleware import FilterScopeMiddleware, LoggingMiddleware, build_pipeline
from .normalization import (
    EngineConfig,
    check_request_shape,
    normalize_request,
    parse_request,
)
from .pipeline import (
    Accumulator,
    AccumulatorOp,
    AddFieldsStage,
    CountStage,
    FacetStage,
    GraphLookupSpec,
    GraphLookupStage,
    GroupSpec,
    GroupStage,
    LimitStage,
    LookupStage,
    MatchStage,
    PipelineLookup,
    PipelineStage,
    ProjectStage,
    SimpleLookup,
    SkipStage,
    SortField,
    SortStage,
    UnwindSpec,
    UnwindStage,
)

# ── Ports ───────────────────────────────────────────────────────
from .ports import IAdapter, IMiddleware, IValidator

# ── Primitives ──────────────────────────────────────────────────
from .primitives import (
    EntityNotRegisteredError,
    InfrastructureError,
    PersistenceError,
    RawQLError,
    RequestShapeError,
    TranslationError,
    UnsupportedOperationError,
    ValidationError,
)
from .registry import EntityRegistry, NotRegistered
from .request import ALL_OPERATIONS, Operation, Populate, QueryOptions, Request
from .response import (
    FieldError,
    MultipleData,
    PaginatedData,
    Response,
    SingleData,
)

# ── Validation ──────────────────────────────────────────────────
from .validation import (
    CompositeSchema,
    ISchema,
    PydanticSchema,
    RegistryValidator,
    SchemaRegistry,
    ValidationResult,
)

__all__ = [
    "ALL_OPERATIONS",
    "Accumulator",
    "AccumulatorOp",
    "AddFieldsStage",
    "BaseAdapter",
    "CompositeSchema",
    "CountStage",
    "EngineConfig",
    "EntityNotRegisteredError",
    "EntityRegistry",
    "FacetStage",
    "FieldError",
    "FieldFilter",
    "Filter",
    "FilterOperator",
    "FilterScopeMiddleware",
    "GraphLookupSpec",
    "GraphLookupStage",
    "GroupSpec",
    "GroupStage",
    "IAdapter",
    "IMiddleware",
    "ISchema",
    "IValidator",
    "InMemoryAdapter",
    "InfrastructureError",
    "LimitStage",
    "LogicalFilter",
    "LoggingMiddleware",
    "LookupStage",
    "MatchStage",
    "MultipleData",
    "NotRegistered",
    "Operation",
    "PaginatedData",
    "PersistenceError",
    "PipelineLookup",
    "PipelineStage",
    "Populate",
    "ProjectStage",
    "PydanticSchema",
    "QueryEngine",
    "QueryOptions",
    "RawQLError",
    "RegistryValidator",
    "Request",
    "RequestShapeError",
    "Response",
    "SchemaRegistry",
    "SimpleLookup",
    "SingleData",
    "SkipStage",
    "SortField",
    "SortStage",
    "TranslationError",
    "UnsupportedOperationError",
    "UnwindSpec",
    "UnwindStage",
    "ValidationError",
    "ValidationResult",
    "and_filters",
    "build_pipeline",
    "check_request_shape",
    "normalize_request",
    "parse_request",
    "validation_payload",
]
