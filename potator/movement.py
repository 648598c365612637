"""Fixed-step movement of entities and the velocity API exposed to scripts."""

from __future__ import annotations

import enum

import numpy as np

from .commands import CommandDispatcher, RelativeVelocityCommand
from .components import TransformComponent, VelocityComponent
from .entity import Entity
from .storage import ComponentStorage
from .timing import FixedStep


def _rotation(x: float, y: float, z: float) -> np.ndarray:
    """Rotation about X, then Y, then Z (Z * Y * X)."""
    cx, sx = np.cos(x), np.sin(x)
    cy, sy = np.cos(y), np.sin(y)
    cz, sz = np.cos(z), np.sin(z)
    rx = np.array([[1, 0, 0], [0, cx, -sx], [0, sx, cx]], dtype=np.float32)
    ry = np.array([[cy, 0, sy], [0, 1, 0], [-sy, 0, cy]], dtype=np.float32)
    rz = np.array([[cz, -sz, 0], [sz, cz, 0], [0, 0, 1]], dtype=np.float32)
    return rz @ ry @ rx


class MovementSystem(FixedStep):
    """Applies velocities to the local transforms of entities that have both."""

    def __init__(self, transforms: ComponentStorage, movements: ComponentStorage) -> None:
        self._transforms = transforms
        self._movements = movements
        self._tick_period = 1.0
        self._movable: list[Entity] = []
        movements.component_added.connect(self._on_velocity_added)
        movements.component_removed.connect(self._remove_movable)
        transforms.component_added.connect(self._on_transform_added)
        transforms.component_removed.connect(self._remove_movable)

    @property
    def movable(self) -> tuple[Entity, ...]:
        return tuple(self._movable)

    @property
    def tick_period(self) -> float:
        return self._tick_period

    def set_tick_rate(self, tick_rate: int) -> None:
        self._tick_period = 1.0 / tick_rate

    def update(self) -> None:
        """Move each entity by its linear velocity and turn it by angular velocity times the tick."""
        for entity in list(self._movable):
            transform: TransformComponent = self._transforms[entity]
            velocity: VelocityComponent = self._movements[entity]
            local = np.asarray(transform.local, dtype=np.float32)

            position = local[:3, 3] + np.asarray(velocity.linear, dtype=np.float32)
            ax, ay, az = (float(a) * self._tick_period for a in velocity.angular)
            rotation = _rotation(ax, ay, az) @ local[:3, :3]

            result = np.eye(4, dtype=np.float32)
            result[:3, :3] = rotation
            result[:3, 3] = position
            transform.local = result

    def _add(self, entity: Entity) -> None:
        if entity not in self._movable:
            self._movable.append(entity)

    def _on_velocity_added(self, entity: Entity, component: VelocityComponent) -> None:
        if entity in self._transforms:
            self._add(entity)

    def _on_transform_added(self, entity: Entity, component: TransformComponent) -> None:
        if entity in self._movements:
            self._add(entity)

    def _remove_movable(self, entity: Entity) -> None:
        if entity in self._movable:
            self._movable.remove(entity)


class Axis(enum.IntEnum):
    X = 0
    Y = 1
    Z = 2


class MovementApi:
    """Queues velocity changes, expressed in the entity's own frame, along one axis."""

    def __init__(
        self,
        command_dispatcher: CommandDispatcher,
        movements: ComponentStorage,
        transforms: ComponentStorage,
    ) -> None:
        self._dispatcher = command_dispatcher
        self._movements = movements
        self._transforms = transforms

    def _command(self) -> RelativeVelocityCommand:
        return RelativeVelocityCommand(self._movements, self._transforms)

    def set_angular_velocity(
        self, entity: Entity, radians_per_second: float, around: Axis
    ) -> None:
        command = self._command()
        command.angular_velocity[Axis(around)] = radians_per_second
        self._dispatcher.enqueue(entity, command)

    def set_linear_velocity(self, entity: Entity, units_per_second: float, around: Axis) -> None:
        command = self._command()
        command.linear_velocity[Axis(around)] = units_per_second
        self._dispatcher.enqueue(entity, command)