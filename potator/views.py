"""Cameras and the view/projection data uploaded for them."""

from __future__ import annotations

import math

import numpy as np

from .components import CameraComponent, LaunchingParams, TransformComponent
from .entity import NONE_ENTITY, Entity, EntityRegistry, default_registry
from .gpu import (
    ConstantBuffer,
    GraphicsDevice,
    PipelineStage,
    PsConstantBufferSlots,
    VsConstantBufferSlots,
)
from .scene_graph import SceneGraph
from .storage import ComponentStorage, Signal


def default_camera() -> CameraComponent:
    """The camera created when a view manager starts."""
    return CameraComponent(z_near=0.1, z_far=1000.0, fov_y=1.5)


def view_transform(camera_world: np.ndarray) -> np.ndarray:
    """The view matrix: the inverse of the camera's world transform."""
    return np.linalg.inv(np.asarray(camera_world, dtype=np.float32)).astype(np.float32)


def projection_transform(camera: CameraComponent, aspect_ratio: float) -> np.ndarray:
    """Left-handed perspective projection mapping depth to [0, 1]."""
    h = 1.0 / math.tan(camera.fov_y * 0.5)
    w = h / aspect_ratio
    depth = camera.z_far - camera.z_near
    result = np.zeros((4, 4), dtype=np.float32)
    result[0, 0] = w
    result[1, 1] = h
    result[2, 2] = camera.z_far / depth
    result[2, 3] = -camera.z_near * camera.z_far / depth
    result[3, 2] = 1.0
    return result


class ViewManager:
    """Tracks the active camera and uploads its view-projection and position.

    ``view_changed`` fires with the camera entity whenever the active camera is set.
    """

    def __init__(
        self,
        transforms: ComponentStorage,
        cameras: ComponentStorage,
        scene: SceneGraph,
        device: GraphicsDevice,
        params: LaunchingParams,
        registry: EntityRegistry | None = None,
    ) -> None:
        self._transforms = transforms
        self._cameras = cameras
        self._scene = scene
        self._device = device
        self._active: Entity = NONE_ENTITY
        self._aspect_ratio = params.width / params.height
        self._projection = np.eye(4, dtype=np.float32)
        self.view_changed = Signal()

        registry = registry or default_registry()
        camera_entity = registry.get_new()
        transform = TransformComponent()
        self.add(camera_entity, default_camera(), transform)
        self.set_active(camera_entity)

        self._proj_view_buffer = ConstantBuffer(np.eye(4, dtype=np.float32))
        self._proj_view_buffer.update(transform.world)
        self._proj_view_handle = device.create_constant_buffer(self._proj_view_buffer)
        device.bind_constant_buffer(
            self._proj_view_handle,
            PipelineStage.VERTEX_SHADER,
            VsConstantBufferSlots.VIEW_PROJ_TRANSFORM,
        )

        self._world_pos_buffer = ConstantBuffer(np.zeros(4, dtype=np.float32))
        self._world_pos_buffer.update(np.array(transform.world[:, 3], dtype=np.float32))
        self._world_pos_handle = device.create_constant_buffer(self._world_pos_buffer)
        device.bind_constant_buffer(
            self._world_pos_handle,
            PipelineStage.PIXEL_SHADER,
            PsConstantBufferSlots.CAMERA_WORLD,
        )

    @property
    def active(self) -> Entity:
        return self._active

    @property
    def projection(self) -> np.ndarray:
        return self._projection

    @property
    def aspect_ratio(self) -> float:
        return self._aspect_ratio

    def update(self) -> None:
        """Upload the active camera's transposed view-projection and world position."""
        if self._active == NONE_ENTITY:
            return
        camera_world = self._transforms[self._active].world
        proj_view = (self._projection @ view_transform(camera_world)).T
        self._proj_view_buffer.update(np.ascontiguousarray(proj_view, dtype=np.float32))
        self._device.update(self._proj_view_buffer, self._proj_view_handle)

        position = np.array(camera_world[:, 3], dtype=np.float32)
        self._world_pos_buffer.update(position)
        self._device.update(self._world_pos_buffer, self._world_pos_handle)

    def add(self, entity: Entity, camera: CameraComponent, transform: TransformComponent) -> None:
        self._scene.add_node(entity, transform)
        self._cameras.store(entity, camera)

    def set_active(self, camera: Entity) -> None:
        self._active = camera
        self._projection = projection_transform(self._cameras[camera], self._aspect_ratio)
        self.view_changed.emit(camera)

    def on_window_resized(self, width: int, height: int) -> None:
        self._aspect_ratio = width / height
        self._projection = projection_transform(self._cameras[self._active], self._aspect_ratio)