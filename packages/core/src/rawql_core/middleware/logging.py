"""LoggingMiddleware — logs request execution details."""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from ..request import Request
    from ..response import Response

logger = logging.getLogger("rawql.middleware")


class LoggingMiddleware:
    """Logs request execution — operation, entity, request_id, duration."""

    async def __call__(
        self,
        request: Request,
        next_handler: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        """Log the request execution."""
        op = request.operation.value
        logger.info(
            "Executing %s on %s (request_id=%s)",
            op,
            request.entity,
            request.request_id,
        )
        start = time.perf_counter()
        try:
            response = await next_handler(request)
            elapsed = (time.perf_counter() - start) * 1000
            logger.info(
                "%s on %s completed in %.2fms (status=%s)",
                op,
                request.entity,
                elapsed,
                response.status,
            )
            return response
        except Exception:
            elapsed = (time.perf_counter() - start) * 1000
            logger.exception(
                "%s on %s failed after %.2fms", op, request.entity, elapsed
            )
            raise
