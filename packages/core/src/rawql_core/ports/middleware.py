"""IMiddleware — request interceptor protocol."""

from __future__ import annotations

from typing import (
    TYPE_CHECKING,
    Protocol,
    runtime_checkable,
)

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from ..request import Request
    from ..response import Response


@runtime_checkable
class IMiddleware(Protocol):
    """Protocol for middleware in the engine pipeline.

    Middleware receives the normalized request and hands a request (the same
    one, or a replaced copy such as ``request.scoped(...)``) to
    ``next_handler``. Raising aborts the chain.
    The chain is applied in registration order (first registered = outermost).
    """

    async def __call__(
        self,
        request: Request,
        next_handler: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        """Execute middleware logic and call next_handler to proceed.

        Parameters
        ----------
        request:
            The current request.
        next_handler:
            Async callable representing the rest of the pipeline.

        Returns
        -------
        The response from the rest of the chain.
        """
        ...
