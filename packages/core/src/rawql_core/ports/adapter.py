"""IAdapter — storage adapter protocol."""

from __future__ import annotations

from typing import (
    TYPE_CHECKING,
    Protocol,
    runtime_checkable,
)

if TYPE_CHECKING:
    from ..request import Operation, Request
    from ..response import Response


@runtime_checkable
class IAdapter(Protocol):
    """Protocol for storage adapters.

    ``execute`` is the mandatory generic entry point. ``capabilities`` names
    the operations that also have a dedicated coroutine method with the same
    name as the operation (``list``, ``get``, ``create``, ``update``,
    ``delete``, ``count``, ``aggregate``); the engine prefers those.

    Adapters that hold backend resources also expose ``close()``. It is not
    part of the protocol because it is optional.
    """

    @property
    def capabilities(self) -> frozenset[Operation]:
        """Operations served by dedicated per-operation methods."""
        ...

    async def execute(self, request: Request) -> Response:
        """Execute any request.

        Raises
        ------
        UnsupportedOperationError
            If the adapter cannot serve ``request.operation`` at all.
        """
        ...
