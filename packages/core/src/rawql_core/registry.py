"""EntityRegistry — per-adapter map of entity name to backend binding.

Lookups return either the binding or a :class:`NotRegistered` marker, so
adapters can tell "unknown entity" apart from "backend unavailable" without
catching exceptions.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Generic, TypeVar

from .primitives.exceptions import EntityNotRegisteredError

logger = logging.getLogger(__name__)

TBinding = TypeVar("TBinding")


@dataclass(frozen=True)
class NotRegistered:
    """Lookup result for an entity the registry does not know."""

    entity: str

    def to_error(self) -> EntityNotRegisteredError:
        return EntityNotRegisteredError(self.entity)

    @property
    def message(self) -> str:
        return str(self.to_error())


class EntityRegistry(Generic[TBinding]):
    """Registry owned by a single adapter instance."""

    def __init__(self) -> None:
        self._bindings: dict[str, TBinding] = {}

    def register(self, entity: str, binding: TBinding) -> None:
        """Bind *entity*; re-registering replaces the previous binding."""
        if not entity:
            raise ValueError("entity name must be a non-empty string")
        if entity in self._bindings:
            logger.debug("Replacing binding for entity %s", entity)
        self._bindings[entity] = binding

    def unregister(self, entity: str) -> None:
        self._bindings.pop(entity, None)

    def lookup(self, entity: str) -> TBinding | NotRegistered:
        binding = self._bindings.get(entity)
        if binding is None:
            return NotRegistered(entity)
        return binding

    def __contains__(self, entity: object) -> bool:
        return entity in self._bindings

    def __len__(self) -> int:
        return len(self._bindings)

    @property
    def entities(self) -> list[str]:
        return list(self._bindings)
