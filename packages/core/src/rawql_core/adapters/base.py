"""BaseAdapter — generic ``execute`` built on per-operation methods."""

from __future__ import annotations

from typing import TYPE_CHECKING, ClassVar

from ..primitives.exceptions import UnsupportedOperationError
from ..request import Operation

if TYPE_CHECKING:
    from ..request import Request
    from ..response import Response


class BaseAdapter:
    """Base class for adapters that implement per-operation methods.

    Subclasses list the operations they implement in ``CAPABILITIES`` and
    define a coroutine method named after each one. ``execute`` routes to
    those methods and raises
    :class:`~rawql_core.primitives.exceptions.UnsupportedOperationError` for
    anything else.
    """

    CAPABILITIES: ClassVar[frozenset[Operation]] = frozenset()

    @property
    def capabilities(self) -> frozenset[Operation]:
        return self.CAPABILITIES

    async def execute(self, request: Request) -> Response:
        if request.operation not in self.capabilities:
            raise UnsupportedOperationError(
                request.operation.value, type(self).__name__
            )
        method = getattr(self, request.operation.value)
        return await method(request)  # type: ignore[no-any-return]
