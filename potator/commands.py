"""Commands that change entity state, their queues and the dispatcher."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections import deque
from collections.abc import Iterable

import numpy as np

from .components import TransformComponent, VelocityComponent
from .entity import Entity
from .storage import ComponentStorage


def _vector3(values: Iterable[float] | None) -> np.ndarray:
    if values is None:
        return np.zeros(3, dtype=np.float32)
    vector = np.array(values, dtype=np.float32)
    if vector.shape != (3,):
        raise ValueError(f"expected three components, got shape {vector.shape}")
    return vector


def _rotation_x(angle: float) -> np.ndarray:
    c, s = np.cos(angle), np.sin(angle)
    return np.array([[1, 0, 0], [0, c, -s], [0, s, c]], dtype=np.float32)


def _rotation_y(angle: float) -> np.ndarray:
    c, s = np.cos(angle), np.sin(angle)
    return np.array([[c, 0, s], [0, 1, 0], [-s, 0, c]], dtype=np.float32)


def _rotation_z(angle: float) -> np.ndarray:
    c, s = np.cos(angle), np.sin(angle)
    return np.array([[c, -s, 0], [s, c, 0], [0, 0, 1]], dtype=np.float32)


class Command(ABC):
    """A deferred action applied to one entity."""

    @abstractmethod
    def execute(self, entity: Entity) -> None:
        """Apply the command to ``entity``."""


class CommandQueueComponent:
    """First-in first-out queue of commands belonging to one entity."""

    def __init__(self, owner: Entity) -> None:
        self.owner = owner
        self._queue: deque[Command] = deque()

    def enqueue(self, command: Command) -> None:
        self._queue.append(command)

    def dequeue(self) -> Command | None:
        """Remove and return the oldest command, or ``None`` when empty."""
        if not self._queue:
            return None
        return self._queue.popleft()

    def __len__(self) -> int:
        return len(self._queue)


class CommandDispatcher:
    """Queues commands per entity and runs them all on dispatch."""

    def __init__(self, command_queues: ComponentStorage) -> None:
        self._command_queues = command_queues

    def enqueue(self, entity: Entity, command: Command) -> None:
        if entity in self._command_queues:
            self._command_queues[entity].enqueue(command)
            return
        queue = CommandQueueComponent(entity)
        queue.enqueue(command)
        self._command_queues.store(entity, queue)

    def dispatch(self) -> None:
        """Execute every queued command, each queue in order, emptying them."""
        for queue in self._command_queues.values():
            while (command := queue.dequeue()) is not None:
                command.execute(queue.owner)


class AxisBoundVelocityCommand(Command):
    """Sets an entity's velocity exactly as given, in world axes."""

    def __init__(
        self,
        movements: ComponentStorage,
        *,
        linear_velocity: Iterable[float] | None = None,
        angular_velocity: Iterable[float] | None = None,
    ) -> None:
        self._movements = movements
        self.linear_velocity = _vector3(linear_velocity)
        self.angular_velocity = _vector3(angular_velocity)

    def execute(self, entity: Entity) -> None:
        if entity not in self._movements:
            return
        movement: VelocityComponent = self._movements[entity]
        movement.linear = self.linear_velocity.copy()
        movement.angular = self.angular_velocity.copy()


class RelativeVelocityCommand(Command):
    """Sets an entity's velocity expressed in its own rotated frame.

    The world rotation block is scaled to unit Frobenius norm before it is
    applied to the given velocities.
    """

    def __init__(
        self,
        movements: ComponentStorage,
        transforms: ComponentStorage,
        *,
        linear_velocity: Iterable[float] | None = None,
        angular_velocity: Iterable[float] | None = None,
    ) -> None:
        self._movements = movements
        self._transforms = transforms
        self.linear_velocity = _vector3(linear_velocity)
        self.angular_velocity = _vector3(angular_velocity)

    def execute(self, entity: Entity) -> None:
        if entity not in self._movements or entity not in self._transforms:
            return
        transform: TransformComponent = self._transforms[entity]
        rotation = np.array(transform.world[:3, :3], dtype=np.float32)
        norm = np.linalg.norm(rotation)
        if norm > 0:
            rotation /= norm
        velocity: VelocityComponent = self._movements[entity]
        velocity.linear = (rotation @ self.linear_velocity).astype(np.float32)
        velocity.angular = (rotation @ self.angular_velocity).astype(np.float32)


class RelativeTransformationCommand(Command):
    """Post-multiplies an entity's local transform by scale, rotation and translation.

    A zero vector leaves that part out. Rotation angles are applied X, then Y,
    then Z; the translation is not affected by the rotation or scale.
    """

    def __init__(
        self,
        transforms: ComponentStorage,
        *,
        translate: Iterable[float] | None = None,
        rotate: Iterable[float] | None = None,
        scale: Iterable[float] | None = None,
    ) -> None:
        self._transforms = transforms
        self.translate = _vector3(translate)
        self.rotate = _vector3(rotate)
        self.scale = _vector3(scale)

    def execute(self, entity: Entity) -> None:
        if entity not in self._transforms:
            return
        transform: TransformComponent = self._transforms[entity]

        affine = np.eye(4, dtype=np.float32)
        if np.any(self.scale != 0):
            affine[:3, :3] = affine[:3, :3] @ np.diag(self.scale)
        if np.any(self.rotate != 0):
            rotation = np.eye(4, dtype=np.float32)
            x, y, z = (float(v) for v in self.rotate)
            rotation[:3, :3] = _rotation_z(z) @ _rotation_y(y) @ _rotation_x(x)
            affine = rotation @ affine
        if np.any(self.translate != 0):
            affine[:3, 3] += self.translate

        transform.local = (transform.local @ affine).astype(np.float32)