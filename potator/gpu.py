"""Handles, CPU-side buffers and the abstract graphics device interface."""

from __future__ import annotations

import enum
import struct
from abc import ABC, abstractmethod
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Generic, TypeVar

import numpy as np

if TYPE_CHECKING:
    from .components import MaterialComponent, MeshComponent, RgbaTextureContainer
    from .vertices import VertexMemberDescriptor

INVALID_ID = 0xFFFFFFFF

T = TypeVar("T")


class BufferType(enum.Enum):
    VERTEX = "vertex"
    INDEX = "index"
    CONSTANT = "constant"


class PipelineStage(enum.Enum):
    VERTEX_SHADER = "vertex_shader"
    PIXEL_SHADER = "pixel_shader"


class PsConstantBufferSlots(enum.IntEnum):
    MATERIAL_DESCRIPTOR = 0
    LIGHTS_CONFIG = 1
    CAMERA_WORLD = 2


class VsConstantBufferSlots(enum.IntEnum):
    MODEL_TRANSFORM = 0
    VIEW_PROJ_TRANSFORM = 1


class PsStructuredBufferSlots(enum.IntEnum):
    MATERIAL_TEXTURE = 0
    POINT_LIGHTS = 1


@dataclass(frozen=True)
class VertexShaderHandle:
    id: int


@dataclass(frozen=True)
class PixelShaderHandle:
    id: int


@dataclass(frozen=True)
class InputLayoutHandle:
    id: int


@dataclass(frozen=True)
class ShaderResourceHandle:
    id: int


@dataclass(frozen=True)
class ConstantBufferHandle:
    id: int


@dataclass(frozen=True)
class VertexBufferHandle:
    id: int


@dataclass(frozen=True)
class IndexBufferHandle:
    id: int


@dataclass(frozen=True)
class StructuredBufferHandle:
    buffer: ConstantBufferHandle
    view: ShaderResourceHandle


def _to_bytes(value: Any) -> bytes:
    """Serialise a value for upload.

    Bytes pass through, objects with ``pack()`` pack themselves, anything
    else is read as 32-bit floats with matrices laid out column by column.
    """
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    pack = getattr(value, "pack", None)
    if callable(pack):
        return pack()
    return np.asarray(value, dtype="<f4").tobytes(order="F")


class Buffer(ABC):
    """Bytes ready for upload, with their total size and element stride."""

    @property
    @abstractmethod
    def data(self) -> bytes: ...

    @property
    @abstractmethod
    def size(self) -> int: ...

    @property
    @abstractmethod
    def stride(self) -> int: ...


class ConstantBuffer(Buffer, Generic[T]):
    """A single value of fixed byte size."""

    def __init__(self, data: T) -> None:
        self._value = data
        self._bytes = _to_bytes(data)

    @property
    def value(self) -> T:
        return self._value

    @property
    def data(self) -> bytes:
        return self._bytes

    @property
    def size(self) -> int:
        return self.stride

    @property
    def stride(self) -> int:
        return len(self._bytes)

    def update(self, data: T) -> None:
        """Replace the value; its packed size must not change."""
        packed = _to_bytes(data)
        if len(packed) != len(self._bytes):
            raise ValueError(
                f"constant buffer holds {len(self._bytes)} bytes, got {len(packed)}"
            )
        self._value = data
        self._bytes = packed


class StructuredBuffer(Buffer, Generic[T]):
    """A fixed number of equally sized elements."""

    def __init__(self, items: Iterable[T]) -> None:
        items = tuple(items)
        if not items:
            raise ValueError("a structured buffer needs at least one element")
        packed = self._pack(items)
        self._stride = len(packed[0])
        self._check_stride(packed)
        self._items = items
        self._bytes = b"".join(packed)

    @staticmethod
    def _pack(items: Sequence[T]) -> list[bytes]:
        return [_to_bytes(item) for item in items]

    def _check_stride(self, packed: list[bytes]) -> None:
        if any(len(chunk) != self._stride for chunk in packed):
            raise ValueError(f"every element must pack to {self._stride} bytes")

    @property
    def items(self) -> tuple[T, ...]:
        return self._items

    def __len__(self) -> int:
        return len(self._items)

    @property
    def data(self) -> bytes:
        return self._bytes

    @property
    def size(self) -> int:
        return self._stride * len(self._items)

    @property
    def stride(self) -> int:
        return self._stride

    def update(self, items: Iterable[T]) -> None:
        """Replace every element; the count and element size must not change."""
        items = tuple(items)
        if len(items) != len(self._items):
            raise ValueError(f"expected {len(self._items)} elements, got {len(items)}")
        packed = self._pack(items)
        self._check_stride(packed)
        self._items = items
        self._bytes = b"".join(packed)


class IndexBuffer(Buffer):
    """16-bit unsigned triangle indices."""

    def __init__(self, indices: Iterable[int] = (), offset: int = 0) -> None:
        self._indices = tuple(indices)
        self._offset = offset
        try:
            self._bytes = struct.pack(f"<{len(self._indices)}H", *self._indices)
        except struct.error as exc:
            raise ValueError(f"index out of 16-bit range: {exc}") from exc

    @property
    def indices(self) -> tuple[int, ...]:
        return self._indices

    @property
    def offset(self) -> int:
        return self._offset

    def __len__(self) -> int:
        return len(self._indices)

    @property
    def data(self) -> bytes:
        return self._bytes

    @property
    def size(self) -> int:
        return len(self._bytes)

    @property
    def stride(self) -> int:
        return 2


class VertexBuffer(Buffer):
    """Vertices of one type, packed back to back."""

    def __init__(self, vertices: Iterable[Any] = (), vertex_type: type | None = None) -> None:
        self._vertices = tuple(vertices)
        if vertex_type is None:
            if not self._vertices:
                raise ValueError("an empty vertex buffer needs an explicit vertex type")
            vertex_type = type(self._vertices[0])
        if any(type(v) is not vertex_type for v in self._vertices):
            raise ValueError(f"all vertices must be {vertex_type.__name__}")
        self._vertex_type = vertex_type
        self._bytes = b"".join(v.pack() for v in self._vertices)

    @property
    def vertex_type(self) -> type:
        return self._vertex_type

    @property
    def vertices(self) -> tuple[Any, ...]:
        return self._vertices

    def __len__(self) -> int:
        return len(self._vertices)

    @property
    def data(self) -> bytes:
        return self._bytes

    @property
    def size(self) -> int:
        return self.stride * len(self._vertices)

    @property
    def stride(self) -> int:
        return self._vertex_type.size


class ShaderBinary(ABC):
    """Compiled shader bytecode."""

    @property
    @abstractmethod
    def data(self) -> bytes: ...

    @property
    def size(self) -> int:
        return len(self.data)


class ShaderCache(ABC):
    """Compiled shaders and their device handles, looked up by name."""

    @abstractmethod
    def shader_binary(self, name: str) -> ShaderBinary: ...

    @abstractmethod
    def vertex_shader_handle(self, name: str) -> VertexShaderHandle: ...

    @abstractmethod
    def pixel_shader_handle(self, name: str) -> PixelShaderHandle: ...


class GraphicsDevice(ABC):
    """Creates GPU resources, binds them and issues draws."""

    @abstractmethod
    def clear(self, r: float, g: float, b: float, a: float) -> None: ...

    @abstractmethod
    def create_vertex_buffer(self, buffer: VertexBuffer) -> VertexBufferHandle: ...

    @abstractmethod
    def create_index_buffer(self, buffer: IndexBuffer) -> IndexBufferHandle: ...

    @abstractmethod
    def create_constant_buffer(self, buffer: Buffer) -> ConstantBufferHandle: ...

    @abstractmethod
    def create_vertex_shader(self, binary: ShaderBinary) -> VertexShaderHandle: ...

    @abstractmethod
    def create_pixel_shader(self, binary: ShaderBinary) -> PixelShaderHandle: ...

    @abstractmethod
    def create_input_layout(
        self, members: Sequence[VertexMemberDescriptor], binary: ShaderBinary
    ) -> InputLayoutHandle: ...

    @abstractmethod
    def create_2d_texture(self, source: RgbaTextureContainer) -> ShaderResourceHandle: ...

    @abstractmethod
    def create_structured_buffer(self, buffer: Buffer) -> StructuredBufferHandle: ...

    @abstractmethod
    def bind_vertex_buffer(self, handle: VertexBufferHandle) -> None: ...

    @abstractmethod
    def bind_index_buffer(self, handle: IndexBufferHandle) -> None: ...

    @abstractmethod
    def bind_constant_buffer(
        self, handle: ConstantBufferHandle, stage: PipelineStage, slot: int
    ) -> None: ...

    @abstractmethod
    def bind_shader_resource(
        self, handle: ShaderResourceHandle, stage: PipelineStage, slot: int
    ) -> None: ...

    @abstractmethod
    def bind_vertex_shader(self, handle: VertexShaderHandle) -> None: ...

    @abstractmethod
    def bind_pixel_shader(self, handle: PixelShaderHandle) -> None: ...

    @abstractmethod
    def bind_input_layout(self, handle: InputLayoutHandle) -> None: ...

    @abstractmethod
    def update(self, buffer: Buffer, handle: ConstantBufferHandle) -> None: ...

    @abstractmethod
    def draw(self, mesh: MeshComponent, material: MaterialComponent) -> None: ...

    @abstractmethod
    def present(self) -> None: ...

    @abstractmethod
    def on_window_resized(self, width: int, height: int) -> None: ...

    @abstractmethod
    def init_imgui_context(self) -> None: ...