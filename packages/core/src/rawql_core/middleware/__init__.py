"""Middleware components."""

from .logging import LoggingMiddleware
from .pipeline import build_pipeline
from .scoping import FilterScopeMiddleware

__all__ = [
    "FilterScopeMiddleware",
    "LoggingMiddleware",
    "build_pipeline",
]
