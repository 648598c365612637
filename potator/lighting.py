"""Collects point lights and uploads them with the global lighting setup."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field, replace

import numpy as np

from .components import (
    AmbientLightComponent,
    DirectionalLightComponent,
    PointLightComponent,
    TransformComponent,
)
from .entity import Entity
from .gpu import (
    ConstantBuffer,
    GraphicsDevice,
    PipelineStage,
    PsConstantBufferSlots,
    PsStructuredBufferSlots,
    StructuredBuffer,
)
from .storage import ComponentStorage

MAX_POINT_LIGHTS = 16


@dataclass(eq=False)
class LightsConfig:
    ambient: AmbientLightComponent = field(default_factory=AmbientLightComponent)
    directional: DirectionalLightComponent = field(default_factory=DirectionalLightComponent)
    point_lights_count: int = 0

    def pack(self) -> bytes:
        """GPU bytes: ambient, directional, light count, 12 bytes padding."""
        return (
            self.ambient.pack()
            + self.directional.pack()
            + struct.pack("<I", self.point_lights_count)
            + bytes(12)
        )


class Lighting:
    """Tracks entities with both a point light and a transform and uploads them each frame."""

    def __init__(
        self,
        lights: ComponentStorage,
        transforms: ComponentStorage,
        device: GraphicsDevice,
    ) -> None:
        self._lights = lights
        self._transforms = transforms
        self._device = device
        self._config = LightsConfig()
        self._entities: list[Entity] = []
        self._point_lights = [PointLightComponent() for _ in range(MAX_POINT_LIGHTS)]

        lights.component_added.connect(self._on_light_added)
        lights.component_removed.connect(self._remove_light)
        transforms.component_added.connect(self._on_transform_added)
        transforms.component_removed.connect(self._remove_light)

        self._config_buffer = ConstantBuffer(self._config)
        self._config_handle = device.create_constant_buffer(self._config_buffer)
        device.bind_constant_buffer(
            self._config_handle, PipelineStage.PIXEL_SHADER, PsConstantBufferSlots.LIGHTS_CONFIG
        )

        self._point_lights_buffer = StructuredBuffer(self._point_lights)
        self._point_lights_handle = device.create_structured_buffer(self._point_lights_buffer)
        device.bind_shader_resource(
            self._point_lights_handle.view,
            PipelineStage.PIXEL_SHADER,
            PsStructuredBufferSlots.POINT_LIGHTS,
        )

    @property
    def config(self) -> LightsConfig:
        """The editable ambient and directional light setup."""
        return self._config

    @property
    def lit_entities(self) -> tuple[Entity, ...]:
        return tuple(self._entities)

    @property
    def point_lights(self) -> tuple[PointLightComponent, ...]:
        """The point lights as last uploaded, with world positions."""
        return tuple(self._point_lights)

    def update(self) -> None:
        count = min(len(self._entities), MAX_POINT_LIGHTS)
        self._config.point_lights_count = count
        self._config_buffer.update(self._config)
        self._device.update(self._config_buffer, self._config_handle)

        for slot, entity in enumerate(self._entities[:count]):
            light: PointLightComponent = self._lights[entity]
            transform: TransformComponent = self._transforms[entity]
            self._point_lights[slot] = replace(
                light,
                color=np.array(light.color, dtype=np.float32),
                position=np.array(transform.world[:3, 3], dtype=np.float32),
            )

        self._point_lights_buffer.update(self._point_lights)
        self._device.update(self._point_lights_buffer, self._point_lights_handle.buffer)

    def _add(self, entity: Entity) -> None:
        if entity not in self._entities:
            self._entities.append(entity)

    def _on_light_added(self, entity: Entity, component: PointLightComponent) -> None:
        if entity in self._transforms:
            self._add(entity)

    def _on_transform_added(self, entity: Entity, component: TransformComponent) -> None:
        if entity in self._lights:
            self._add(entity)

    def _remove_light(self, entity: Entity) -> None:
        if entity in self._entities:
            self._entities.remove(entity)