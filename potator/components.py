"""Plain component records and the bundle of their storages."""

from __future__ import annotations

import enum
import struct
from collections.abc import Callable
from dataclasses import dataclass, field

import numpy as np

from .entity import NONE_ENTITY, Entity
from .gpu import (
    INVALID_ID,
    ConstantBufferHandle,
    IndexBufferHandle,
    InputLayoutHandle,
    PixelShaderHandle,
    ShaderBinary,
    ShaderResourceHandle,
    VertexBufferHandle,
    VertexShaderHandle,
)
from .storage import ComponentStorage

MISSING_COLOR = (1.0, 0.0, 1.0, 1.0)


def _vector(*values: float) -> np.ndarray:
    return np.array(values, dtype=np.float32)


def _floats(values: np.ndarray) -> bytes:
    return np.asarray(values, dtype="<f4").tobytes()


class GpuApi(enum.Enum):
    DX11 = "dx11"
    OPENGL = "opengl"


@dataclass
class LaunchingParams:
    title: str = "Potator"
    width: int = 800
    height: int = 600
    api: GpuApi = GpuApi.DX11
    fixed_step_rate: int = 100


@dataclass(eq=False)
class AmbientLightComponent:
    color: np.ndarray = field(default_factory=lambda: _vector(0.05, 0.05, 0.05, 1.0))

    def pack(self) -> bytes:
        """GPU bytes: one float4."""
        return _floats(self.color)


@dataclass
class CameraComponent:
    z_near: float
    z_far: float
    fov_y: float


@dataclass(eq=False)
class DirectionalLightComponent:
    color: np.ndarray = field(default_factory=lambda: _vector(1.0, 1.0, 1.0, 1.0))
    direction: np.ndarray = field(default_factory=lambda: _vector(-1.0, -0.5, -0.25))

    def __post_init__(self) -> None:
        direction = np.asarray(self.direction, dtype=np.float32)
        self.direction = direction / np.linalg.norm(direction)

    def pack(self) -> bytes:
        """GPU bytes: float4 colour, float3 direction, 4 bytes padding."""
        return _floats(self.color) + _floats(self.direction) + bytes(4)


@dataclass
class ImGuiComponent:
    draw: Callable[[], None] | None = None


@dataclass(eq=False)
class MaterialDescriptor:
    color: np.ndarray = field(default_factory=lambda: _vector(*MISSING_COLOR))
    specular_exponent: float = 20.0
    specular_intensity: float = 1.0
    has_texture: int = 0
    has_color: int = 0

    def pack(self) -> bytes:
        """GPU bytes: float4 colour, two floats, two ints."""
        return _floats(self.color) + struct.pack(
            "<ffii",
            self.specular_exponent,
            self.specular_intensity,
            int(self.has_texture),
            int(self.has_color),
        )


@dataclass
class MaterialComponent:
    texture: ShaderResourceHandle | None = None
    vs_binary: ShaderBinary | None = None
    vertex_shader: VertexShaderHandle = VertexShaderHandle(INVALID_ID)
    pixel_shader: PixelShaderHandle = PixelShaderHandle(INVALID_ID)
    input_layout: InputLayoutHandle = InputLayoutHandle(INVALID_ID)
    descriptor_handle: ConstantBufferHandle = ConstantBufferHandle(INVALID_ID)


@dataclass
class MeshComponent:
    vertex_buffer: VertexBufferHandle = VertexBufferHandle(INVALID_ID)
    index_buffer: IndexBufferHandle = IndexBufferHandle(INVALID_ID)
    index_count: int = 0
    start_index_location: int = 0


@dataclass(eq=False)
class PointLightComponent:
    color: np.ndarray = field(default_factory=lambda: _vector(1.0, 1.0, 1.0, 1.0))
    position: np.ndarray = field(default_factory=lambda: _vector(0.0, 0.0, 0.0))
    quadratic_att: float = 0.0007
    linear_att: float = 0.014
    const_att: float = 1.0

    def pack(self) -> bytes:
        """GPU bytes: float4 colour, float3 position, three attenuations, 8 bytes padding."""
        return (
            _floats(self.color)
            + _floats(self.position)
            + struct.pack("<fff", self.quadratic_att, self.linear_att, self.const_att)
            + bytes(8)
        )


@dataclass
class SceneNodeComponent:
    entity: Entity
    parent: Entity = NONE_ENTITY
    children: list[Entity] = field(default_factory=list)


@dataclass
class ScriptComponent:
    script: str = ""


@dataclass(eq=False)
class TransformComponent:
    local: np.ndarray = field(default_factory=lambda: np.eye(4, dtype=np.float32))
    world: np.ndarray = field(default_factory=lambda: np.eye(4, dtype=np.float32))


@dataclass(eq=False)
class VelocityComponent:
    linear: np.ndarray = field(default_factory=lambda: np.zeros(3, dtype=np.float32))
    angular: np.ndarray = field(default_factory=lambda: np.zeros(3, dtype=np.float32))


@dataclass
class RgbaTextureContainer:
    width: int = 0
    height: int = 0
    pixels: bytes = b""


@dataclass(eq=False)
class Components:
    """Every component storage the engine works with."""

    meshes: ComponentStorage = field(default_factory=ComponentStorage)
    materials: ComponentStorage = field(default_factory=ComponentStorage)
    transforms: ComponentStorage = field(default_factory=ComponentStorage)
    movements: ComponentStorage = field(default_factory=ComponentStorage)
    nodes: ComponentStorage = field(default_factory=ComponentStorage)
    command_queues: ComponentStorage = field(default_factory=ComponentStorage)
    cameras: ComponentStorage = field(default_factory=ComponentStorage)
    point_lights: ComponentStorage = field(default_factory=ComponentStorage)
    scripts: ComponentStorage = field(default_factory=ComponentStorage)
    imgui_elements: ComponentStorage = field(default_factory=ComponentStorage)