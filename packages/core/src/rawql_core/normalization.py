"""Request shape checks and default normalization.

Both steps run before middleware. Shape checks raise
:class:`~rawql_core.primitives.exceptions.RequestShapeError`; normalization is
a pure function returning a new request.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from .primitives.exceptions import RequestShapeError
from .request import Operation, QueryOptions, Request


@dataclass(frozen=True)
class EngineConfig:
    """Defaults applied during normalization."""

    default_limit: int = 10


def check_raw_shape(raw: Mapping[str, Any]) -> None:
    """Contract checks on a wire-shaped mapping, before it is parsed."""
    if not raw.get("entity"):
        raise RequestShapeError("`entity` (string) is required")
    if not (raw.get("operation") or raw.get("type")):
        raise RequestShapeError("`operation` is required")
    options = raw.get("options")
    if options is not None and not isinstance(options, Mapping):
        raise RequestShapeError("`options` must be an object if provided")


def parse_request(raw: Request | Mapping[str, Any]) -> Request:
    """Return *raw* as a :class:`Request`, converting parse failures."""
    if isinstance(raw, Request):
        return raw
    if not isinstance(raw, Mapping):
        raise RequestShapeError(
            f"Request must be a Request or a mapping, got {type(raw).__name__}"
        )
    check_raw_shape(raw)
    try:
        return Request.parse(raw)
    except PydanticValidationError as exc:
        raise RequestShapeError(
            f"Invalid request: {describe_errors(exc)}",
            details=exc.errors(include_url=False),
        ) from exc


def describe_errors(exc: PydanticValidationError) -> str:
    parts = []
    for error in exc.errors(include_url=False):
        loc = ".".join(str(p) for p in error.get("loc", ()))
        msg = error.get("msg", "invalid value")
        value = error.get("input")
        if error.get("type") == "unknown_pipeline_stage" and isinstance(
            value, Mapping
        ):
            msg = f"{msg} (got {', '.join(sorted(map(str, value)))})"
        parts.append(f"{loc}: {msg}" if loc else msg)
    return "; ".join(parts)


def check_request_shape(request: Request) -> None:
    """Operation-independent contract checks on a parsed request."""
    if not request.entity:
        raise RequestShapeError("`entity` (string) is required")
    if request.operation is Operation.DELETE and not request.id:
        raise RequestShapeError(
            f"`{request.operation.value}` requires a string `id`"
        )


def normalize_request(request: Request, config: EngineConfig | None = None) -> Request:
    """Apply defaults; never mutates *request*.

    ``list``: ``limit`` defaults to ``config.default_limit`` when absent or
    not positive, ``skip`` to 0 when absent or negative, and a single
    ``sort``/``select`` value becomes a one-element list.
    """
    config = config or EngineConfig()
    if request.operation is not Operation.LIST:
        return request

    options = request.options or QueryOptions()
    limit = options.limit
    if limit is None or limit <= 0:
        limit = config.default_limit
    skip = options.skip
    if skip is None or skip < 0:
        skip = 0
    normalized = options.model_copy(
        update={
            "limit": limit,
            "skip": skip,
            "sort": options.sort_fields or None,
            "select": options.select_fields or None,
        }
    )
    return request.with_options(normalized)
