"""Parent/child hierarchy of transforms."""

from __future__ import annotations

from collections import deque

import numpy as np

from .components import SceneNodeComponent, TransformComponent
from .entity import NONE_ENTITY, Entity
from .storage import ComponentStorage


class SceneGraph:
    """Keeps entities in parent-before-child order and propagates world transforms."""

    def __init__(self, transforms: ComponentStorage, nodes: ComponentStorage) -> None:
        self._transforms = transforms
        self._nodes = nodes
        self._order: list[Entity] = []
        self._topo_sort()

    @property
    def order(self) -> tuple[Entity, ...]:
        """Entities in the order their world transforms are computed."""
        return tuple(self._order)

    def add_node(
        self,
        entity: Entity,
        transform: TransformComponent,
        parent: Entity = NONE_ENTITY,
    ) -> None:
        self._transforms.store(entity, transform)
        self._order.append(entity)
        self._nodes.store(entity, SceneNodeComponent(entity, parent))
        if parent in self._nodes:
            self._nodes[parent].children.append(entity)

    def node(self, entity: Entity) -> SceneNodeComponent:
        return self._nodes[entity]

    def update(self) -> None:
        """Recompute every world transform from its parent's world and its local."""
        for entity in self._order:
            if entity not in self._transforms:
                continue
            transform: TransformComponent = self._transforms[entity]
            parent = self._nodes[entity].parent
            if parent not in self._transforms:
                transform.world = np.array(transform.local, dtype=np.float32)
                continue
            parent_world = self._transforms[parent].world
            transform.world = (parent_world @ transform.local).astype(np.float32)

    def _topo_sort(self) -> None:
        queue: deque[SceneNodeComponent] = deque(
            node for node in self._nodes.values() if node.parent == NONE_ENTITY
        )
        while queue:
            node = queue.popleft()
            self._order.append(node.entity)
            queue.extend(self._nodes[child] for child in node.children if child in self._nodes)