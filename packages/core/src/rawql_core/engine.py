"""QueryEngine — the single entry point that turns a request into a response."""

from __future__ import annotations

import inspect
import logging
from typing import TYPE_CHECKING, Any, NamedTuple

from .middleware.pipeline import build_pipeline
from .normalization import (
    EngineConfig,
    check_request_shape,
    normalize_request,
    parse_request,
)
from .primitives.exceptions import (
    RawQLError,
    RequestShapeError,
    UnsupportedOperationError,
    ValidationError,
)
from .request import Operation, Request
from .response import FieldError, Response

if TYPE_CHECKING:
    from collections.abc import Mapping

    from .ports.adapter import IAdapter
    from .ports.middleware import IMiddleware
    from .ports.validation import IValidator

logger = logging.getLogger("rawql.engine")


class _AdapterBinding(NamedTuple):
    adapter: IAdapter
    capabilities: frozenset[Operation]


class QueryEngine:
    """Routes requests through shape checks, middleware and validation to an
    adapter.

    ``execute`` never raises: every failure comes back as
    ``Response(status=False, ...)``.

    Parameters
    ----------
    adapter:
        Backend adapter (see :class:`~rawql_core.ports.adapter.IAdapter`).
    validator:
        Optional payload validator consulted before dispatch.
    config:
        Normalization defaults.
    """

    def __init__(
        self,
        adapter: IAdapter,
        validator: IValidator | None = None,
        *,
        config: EngineConfig | None = None,
    ) -> None:
        self._binding = self._bind(adapter)
        self._validator = validator
        self._config = config or EngineConfig()
        self._middlewares: list[IMiddleware] = []

    # ── Configuration ────────────────────────────────────────────

    @property
    def adapter(self) -> IAdapter:
        return self._binding.adapter

    @property
    def validator(self) -> IValidator | None:
        return self._validator

    @property
    def config(self) -> EngineConfig:
        return self._config

    def use(self, middleware: IMiddleware) -> QueryEngine:
        """Append *middleware*; the first registered runs outermost."""
        self._middlewares.append(middleware)
        return self

    def set_adapter(self, adapter: IAdapter) -> None:
        """Swap the backend; in-flight calls keep the adapter they started with."""
        self._binding = self._bind(adapter)

    def set_validator(self, validator: IValidator | None) -> None:
        self._validator = validator

    async def close(self) -> None:
        """Close the adapter if it exposes ``close``."""
        close = getattr(self._binding.adapter, "close", None)
        if close is None:
            return
        result = close()
        if inspect.isawaitable(result):
            await result

    # ── Execution ────────────────────────────────────────────────

    async def execute(self, request: Request | Mapping[str, Any]) -> Response:
        """Execute *request* and return its response envelope."""
        binding = self._binding
        validator = self._validator
        middlewares = list(self._middlewares)

        try:
            parsed = parse_request(request)
            check_request_shape(parsed)
            if parsed.operation is Operation.AGGREGATE and not parsed.pipeline:
                raise RequestShapeError("Missing 'pipeline' in aggregate request")
            normalized = normalize_request(parsed, self._config)

            async def _innermost(req: Request) -> Response:
                return await self._validate_and_dispatch(req, binding, validator)

            pipeline = build_pipeline(middlewares, _innermost)
            return await pipeline(normalized)
        except ValidationError as exc:
            return Response.failure(exc.message, exc.errors or None)
        except RawQLError as exc:
            logger.warning("Request failed: %s", exc.message)
            return Response.failure(exc.message)
        except Exception as exc:
            logger.exception("Unexpected error while executing request")
            return Response.failure(str(exc) or type(exc).__name__)

    async def _validate_and_dispatch(
        self,
        request: Request,
        binding: _AdapterBinding,
        validator: IValidator | None,
    ) -> Response:
        if validator is not None:
            result = await validator.validate(
                request.entity,
                request.operation.value,
                validation_payload(request),
            )
            if not result.valid:
                raise ValidationError(
                    result.errors
                    or [FieldError(field="_unknown", message="Validation failed")]
                )

        logger.debug(
            "Dispatching %s on %s (request_id=%s)",
            request.operation.value,
            request.entity,
            request.request_id,
        )
        if request.operation in binding.capabilities:
            method = getattr(binding.adapter, request.operation.value, None)
            if method is None:
                raise UnsupportedOperationError(
                    request.operation.value, type(binding.adapter).__name__
                )
            return await method(request)  # type: ignore[no-any-return]
        return await binding.adapter.execute(request)

    @staticmethod
    def _bind(adapter: IAdapter) -> _AdapterBinding:
        return _AdapterBinding(adapter, frozenset(adapter.capabilities))


def validation_payload(request: Request) -> Any:
    """Select what the validator sees for *request*'s operation."""
    operation = request.operation
    if operation in (Operation.CREATE, Operation.UPDATE):
        return request.data or {}
    if operation is Operation.LIST:
        if request.options is None:
            return {}
        return request.options.model_dump(by_alias=True, exclude_none=True)
    if operation is Operation.AGGREGATE:
        if request.data is not None:
            return request.data
        return [
            stage.model_dump(by_alias=True, exclude_none=True)
            for stage in request.pipeline or []
        ]
    return {
        "id": request.id,
        "filter": (
            request.filter.model_dump(by_alias=True, exclude_none=True)
            if request.filter is not None
            else None
        ),
    }
