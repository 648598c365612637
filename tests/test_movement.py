import math

import numpy as np
import pytest

from potator.commands import CommandDispatcher, RelativeVelocityCommand
from potator.components import TransformComponent, VelocityComponent
from potator.movement import Axis, MovementApi, MovementSystem
from potator.storage import ComponentStorage


@pytest.fixture
def stores():
    return ComponentStorage(), ComponentStorage()


def test_linear_velocity_moves_position(stores):
    transforms, movements = stores
    system = MovementSystem(transforms, movements)
    transform = TransformComponent()
    transforms.store(1, transform)
    movements.store(1, VelocityComponent(linear=np.array([1.0, 2.0, 3.0], dtype=np.float32)))
    system.update()
    np.testing.assert_allclose(transform.local[:3, 3], [1.0, 2.0, 3.0])
    np.testing.assert_allclose(transform.local[:3, :3], np.eye(3), atol=1e-6)


def test_entity_needs_both_components(stores):
    transforms, movements = stores
    system = MovementSystem(transforms, movements)
    movements.store(1, VelocityComponent(linear=np.ones(3, dtype=np.float32)))
    assert system.movable == ()
    transforms.store(2, TransformComponent())
    assert system.movable == ()


def test_order_of_adding_does_not_matter(stores):
    transforms, movements = stores
    system = MovementSystem(transforms, movements)
    movements.store(1, VelocityComponent())
    transforms.store(1, TransformComponent())
    transforms.store(2, TransformComponent())
    movements.store(2, VelocityComponent())
    assert system.movable == (1, 2)


def test_restoring_velocity_moves_only_once(stores):
    transforms, movements = stores
    system = MovementSystem(transforms, movements)
    transform = TransformComponent()
    transforms.store(1, transform)
    movements.store(1, VelocityComponent(linear=np.array([1.0, 0.0, 0.0], dtype=np.float32)))
    movements.store(1, VelocityComponent(linear=np.array([1.0, 0.0, 0.0], dtype=np.float32)))
    system.update()
    np.testing.assert_allclose(transform.local[:3, 3], [1.0, 0.0, 0.0])


def test_angular_velocity_scaled_by_tick_period(stores):
    transforms, movements = stores
    system = MovementSystem(transforms, movements)
    system.set_tick_rate(2)
    assert system.tick_period == 0.5
    transform = TransformComponent()
    transforms.store(1, transform)
    movements.store(1, VelocityComponent(angular=np.array([0.0, 0.0, math.pi], dtype=np.float32)))
    system.update()
    expected = np.array([[0, -1, 0], [1, 0, 0], [0, 0, 1]], dtype=np.float32)
    np.testing.assert_allclose(transform.local[:3, :3], expected, atol=1e-6)
    np.testing.assert_allclose(transform.local[3], [0, 0, 0, 1])


def test_rotation_stays_orthonormal(stores):
    transforms, movements = stores
    system = MovementSystem(transforms, movements)
    transform = TransformComponent()
    transforms.store(1, transform)
    movements.store(1, VelocityComponent(angular=np.array([0.3, -0.7, 1.1], dtype=np.float32)))
    for _ in range(5):
        system.update()
    rotation = transform.local[:3, :3]
    np.testing.assert_allclose(rotation @ rotation.T, np.eye(3), atol=1e-5)
    assert np.linalg.det(rotation) == pytest.approx(1.0, abs=1e-5)


def test_dropped_transform_is_no_longer_moved(stores):
    transforms, movements = stores
    system = MovementSystem(transforms, movements)
    transform = TransformComponent()
    transforms.store(1, transform)
    movements.store(1, VelocityComponent(linear=np.ones(3, dtype=np.float32)))
    transforms.drop(1)
    system.update()
    assert system.movable == ()
    np.testing.assert_array_equal(transform.local, np.eye(4))


def _api_setup():
    transforms, movements, queues = ComponentStorage(), ComponentStorage(), ComponentStorage()
    dispatcher = CommandDispatcher(queues)
    transforms.store(5, TransformComponent())
    movements.store(5, VelocityComponent())
    return MovementApi(dispatcher, movements, transforms), dispatcher, movements, transforms, queues


@pytest.mark.parametrize("axis", list(Axis))
def test_set_angular_velocity_along_axis(axis):
    api, dispatcher, movements, transforms, queues = _api_setup()
    api.set_angular_velocity(5, 2.0, axis)
    assert len(queues[5]) == 1
    dispatcher.dispatch()
    angular = movements[5].angular
    assert angular[axis] > 0
    assert all(angular[other] == 0 for other in Axis if other != axis)
    np.testing.assert_array_equal(movements[5].linear, np.zeros(3))


@pytest.mark.parametrize("axis", list(Axis))
def test_set_linear_velocity_matches_relative_command(axis):
    api, dispatcher, movements, transforms, queues = _api_setup()
    api.set_linear_velocity(5, 3.0, axis)
    dispatcher.dispatch()
    via_api = movements[5].linear.copy()
    vector = np.zeros(3)
    vector[axis] = 3.0
    RelativeVelocityCommand(movements, transforms, linear_velocity=vector).execute(5)
    np.testing.assert_allclose(via_api, movements[5].linear)
    assert len(queues[5]) == 0