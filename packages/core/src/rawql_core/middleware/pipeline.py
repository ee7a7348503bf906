"""build_pipeline — construct the middleware chain."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Sequence

    from ..ports.middleware import IMiddleware
    from ..request import Request
    from ..response import Response


def build_pipeline(
    middlewares: Sequence[IMiddleware],
    handler_fn: Callable[[Request], Awaitable[Response]],
) -> Callable[[Request], Awaitable[Response]]:
    """Build a middleware chain ending at *handler_fn*.

    The first middleware in the list is the **outermost** wrapper, so
    middlewares see the request in registration order.
    Each middleware must implement: ``async def __call__(request, next_handler)``.
    """
    pipeline = handler_fn

    for mw in reversed(middlewares):
        current_next = pipeline  # capture for closure

        async def _wrapper(
            request: Request,
            _mw: IMiddleware = mw,
            _next: Callable[[Request], Awaitable[Response]] = current_next,
        ) -> Response:
            return await _mw(request, _next)

        pipeline = _wrapper

    return pipeline
