"""Sparse-set storage of components keyed by entity, with change signals."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from typing import Any, Generic, TypeVar

from .entity import NONE_ENTITY, Entity

T = TypeVar("T")


class Signal:
    """A list of callables invoked in connection order on emit."""

    def __init__(self) -> None:
        self._slots: list[Callable[..., Any]] = []

    def connect(self, slot: Callable[..., Any]) -> Callable[..., Any]:
        """Register a slot; returns it so this can be used as a decorator."""
        self._slots.append(slot)
        return slot

    def emit(self, *args: Any) -> None:
        """Call every connected slot with the given arguments."""
        for slot in list(self._slots):
            slot(*args)


class ComponentStorage(Generic[T]):
    """Densely packed components of one type, addressable by entity.

    ``component_added`` fires with ``(entity, component)`` after a store,
    ``component_removed`` fires with ``(entity,)`` after a drop.
    """

    def __init__(self) -> None:
        self._index: dict[Entity, int] = {}
        self._entities: list[Entity] = []
        self._components: list[T] = []
        self.component_added = Signal()
        self.component_removed = Signal()

    def __contains__(self, entity: object) -> bool:
        return entity != NONE_ENTITY and entity in self._index

    def store(self, entity: Entity, component: T) -> None:
        """Attach ``component`` to ``entity``, replacing any previous one."""
        if entity == NONE_ENTITY:
            raise ValueError("cannot store a component for NONE_ENTITY")
        idx = self._index.get(entity)
        if idx is None:
            self._index[entity] = len(self._components)
            self._entities.append(entity)
            self._components.append(component)
        else:
            self._components[idx] = component
        self.component_added.emit(entity, component)

    def drop(self, entity: Entity) -> None:
        """Remove the component of ``entity``; does nothing if it has none."""
        idx = self._index.pop(entity, None)
        if idx is None:
            return
        last_entity = self._entities.pop()
        last_component = self._components.pop()
        if idx < len(self._components):
            self._entities[idx] = last_entity
            self._components[idx] = last_component
            self._index[last_entity] = idx
        self.component_removed.emit(entity)

    def values(self) -> list[T]:
        """The dense list of stored components."""
        return self._components

    def __getitem__(self, entity: Entity) -> T:
        try:
            return self._components[self._index[entity]]
        except KeyError:
            raise KeyError(entity) from None

    def __len__(self) -> int:
        return len(self._components)

    def __iter__(self) -> Iterator[Entity]:
        return iter(list(self._entities))