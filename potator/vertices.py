"""Vertex records and the member layouts that describe them to the GPU."""

from __future__ import annotations

import enum
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import ClassVar

import numpy as np

MISSING_COLOR = (1.0, 0.0, 1.0, 1.0)


class DataFormat(enum.IntEnum):
    FLOAT4 = 0
    FLOAT3 = 1
    FLOAT2 = 2


@dataclass(frozen=True)
class VertexMemberDescriptor:
    name: str
    offset: int
    stride: int
    format: DataFormat


def _zeros(n: int) -> np.ndarray:
    return np.zeros(n, dtype=np.float32)


def _pack(size: int, members: Iterable[tuple[VertexMemberDescriptor, np.ndarray]]) -> bytes:
    out = bytearray(size)
    for member, value in members:
        raw = np.asarray(value, dtype="<f4").tobytes()
        if len(raw) != member.stride:
            raise ValueError(
                f"{member.name} needs {member.stride // 4} floats, got {len(raw) // 4}"
            )
        out[member.offset:member.offset + member.stride] = raw
    return bytes(out)


@dataclass(eq=False)
class Vertex:
    position: np.ndarray = field(default_factory=lambda: _zeros(4))
    size: ClassVar[int] = 16

    @classmethod
    def layout(cls) -> list[VertexMemberDescriptor]:
        return [VertexMemberDescriptor("Position", 0, 16, DataFormat.FLOAT4)]

    def pack(self) -> bytes:
        return _pack(self.size, zip(self.layout(), (self.position,)))


@dataclass(eq=False)
class ColoredVertex:
    position: np.ndarray = field(default_factory=lambda: _zeros(4))
    color: np.ndarray = field(default_factory=lambda: _zeros(4))
    size: ClassVar[int] = 32

    @classmethod
    def layout(cls) -> list[VertexMemberDescriptor]:
        return [
            VertexMemberDescriptor("Position", 0, 16, DataFormat.FLOAT4),
            VertexMemberDescriptor("Color", 16, 16, DataFormat.FLOAT4),
        ]

    def pack(self) -> bytes:
        return _pack(self.size, zip(self.layout(), (self.position, self.color)))


@dataclass(eq=False)
class CompositeVertex:
    position: np.ndarray = field(default_factory=lambda: _zeros(4))
    color: np.ndarray = field(default_factory=lambda: np.array(MISSING_COLOR, dtype=np.float32))
    normal: np.ndarray = field(default_factory=lambda: _zeros(3))
    uv: np.ndarray = field(default_factory=lambda: _zeros(2))
    size: ClassVar[int] = 64

    @classmethod
    def layout(cls) -> list[VertexMemberDescriptor]:
        return [
            VertexMemberDescriptor("Position", 0, 16, DataFormat.FLOAT4),
            VertexMemberDescriptor("Color", 16, 16, DataFormat.FLOAT4),
            VertexMemberDescriptor("Normal", 32, 12, DataFormat.FLOAT4),
            VertexMemberDescriptor("Uv", 44, 8, DataFormat.FLOAT2),
        ]

    def pack(self) -> bytes:
        return _pack(
            self.size,
            zip(self.layout(), (self.position, self.color, self.normal, self.uv)),
        )


@dataclass(eq=False)
class TexturedVertex:
    position: np.ndarray = field(default_factory=lambda: _zeros(4))
    uv: np.ndarray = field(default_factory=lambda: _zeros(2))
    size: ClassVar[int] = 32

    @classmethod
    def layout(cls) -> list[VertexMemberDescriptor]:
        return [
            VertexMemberDescriptor("Position", 0, 16, DataFormat.FLOAT4),
            VertexMemberDescriptor("Uv", 16, 8, DataFormat.FLOAT2),
        ]

    def pack(self) -> bytes:
        return _pack(self.size, zip(self.layout(), (self.position, self.uv)))