"""Entity identifiers and the registry that hands them out."""

from __future__ import annotations

import itertools

Entity = int
"""An entity is a plain integer identifier."""

NONE_ENTITY: Entity = 0xFFFFFFFF
"""Marker for "no entity", e.g. the parent of a root scene node."""


class EntityRegistry:
    """Hands out consecutive entity identifiers starting at zero."""

    def __init__(self) -> None:
        self._counter = itertools.count()

    def get_new(self) -> Entity:
        """Return a fresh entity identifier."""
        return next(self._counter)


_DEFAULT_REGISTRY = EntityRegistry()


def default_registry() -> EntityRegistry:
    """Return the process-wide registry."""
    return _DEFAULT_REGISTRY