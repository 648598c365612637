"""Draws every entity that has a mesh, a material and a transform."""

from __future__ import annotations

import numpy as np

from .components import MaterialComponent, MeshComponent, TransformComponent
from .entity import Entity
from .gpu import ConstantBuffer, GraphicsDevice, PipelineStage, VsConstantBufferSlots
from .storage import ComponentStorage


class MeshRenderer:
    """Uploads each drawable's model transform and draws it."""

    def __init__(
        self,
        device: GraphicsDevice,
        meshes: ComponentStorage,
        transforms: ComponentStorage,
        materials: ComponentStorage,
    ) -> None:
        self._device = device
        self._meshes = meshes
        self._transforms = transforms
        self._materials = materials
        self._drawable: list[Entity] = []

        meshes.component_added.connect(self._on_mesh_added)
        meshes.component_removed.connect(self._remove_drawable)
        transforms.component_added.connect(self._on_transform_added)
        transforms.component_removed.connect(self._remove_drawable)
        materials.component_added.connect(self._on_material_added)
        materials.component_removed.connect(self._remove_drawable)

        self._transformation_buffer = ConstantBuffer(np.eye(4, dtype=np.float32))
        self._transformation_handle = device.create_constant_buffer(self._transformation_buffer)
        device.bind_constant_buffer(
            self._transformation_handle,
            PipelineStage.VERTEX_SHADER,
            VsConstantBufferSlots.MODEL_TRANSFORM,
        )

    @property
    def drawable(self) -> tuple[Entity, ...]:
        return tuple(self._drawable)

    def render(self) -> None:
        for entity in list(self._drawable):
            transform: TransformComponent = self._transforms[entity]
            model = np.ascontiguousarray(transform.world.T, dtype=np.float32)
            self._transformation_buffer.update(model)
            self._device.update(self._transformation_buffer, self._transformation_handle)
            self._device.draw(self._meshes[entity], self._materials[entity])

    def _add(self, entity: Entity) -> None:
        if entity not in self._drawable:
            self._drawable.append(entity)

    def _on_mesh_added(self, entity: Entity, component: MeshComponent) -> None:
        if entity in self._transforms and entity in self._materials:
            self._add(entity)

    def _on_transform_added(self, entity: Entity, component: TransformComponent) -> None:
        if entity in self._meshes and entity in self._materials:
            self._add(entity)

    def _on_material_added(self, entity: Entity, component: MaterialComponent) -> None:
        if entity in self._meshes and entity in self._transforms:
            self._add(entity)

    def _remove_drawable(self, entity: Entity) -> None:
        if entity in self._drawable:
            self._drawable.remove(entity)