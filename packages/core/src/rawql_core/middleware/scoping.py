"""FilterScopeMiddleware — injects a scoping filter into every request."""

from __future__ import annotations

import inspect
import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from ..filters import Filter
    from ..request import Request
    from ..response import Response

logger = logging.getLogger("rawql.middleware")


class FilterScopeMiddleware:
    """ANDs a resolver-produced filter into the request.

    Typical use is tenant scoping::

        def tenant_scope(request: Request) -> Filter | None:
            return FieldFilter(field="tenantId", op="eq", value=current_tenant())

        engine.use(FilterScopeMiddleware(tenant_scope))

    The resolver may be sync or async. Returning ``None`` leaves the request
    untouched. Only filter-driven operations are scoped by default; create
    and aggregate carry no request filter.
    """

    def __init__(
        self,
        resolver: Callable[[Request], Filter | None | Awaitable[Filter | None]],
        *,
        operations: frozenset[str] | None = None,
    ) -> None:
        self._resolver = resolver
        self._operations = operations or frozenset(
            {"list", "get", "update", "delete", "count"}
        )

    async def __call__(
        self,
        request: Request,
        next_handler: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        if request.operation.value not in self._operations:
            return await next_handler(request)

        scope = self._resolver(request)
        if inspect.isawaitable(scope):
            scope = await scope
        if scope is None:
            return await next_handler(request)

        logger.debug(
            "Scoping %s on %s (request_id=%s)",
            request.operation.value,
            request.entity,
            request.request_id,
        )
        return await next_handler(request.scoped(scope))
