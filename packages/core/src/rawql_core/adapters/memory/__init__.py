from .adapter import InMemoryAdapter
from .evaluator import FilterEvaluator, project_record, resolve_path, sort_records
from .operators import (
    MISSING,
    MemoryOperator,
    MemoryOperatorRegistry,
    build_default_registry,
)

__all__ = [
    "MISSING",
    "FilterEvaluator",
    "InMemoryAdapter",
    "MemoryOperator",
    "MemoryOperatorRegistry",
    "build_default_registry",
    "project_record",
    "resolve_path",
    "sort_records",
]
