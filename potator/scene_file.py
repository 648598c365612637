"""Reading the parts of a binary glTF scene that carry engine extras."""

from __future__ import annotations

import json
import os
import struct
from collections.abc import Iterable, Iterator
from typing import Any

import numpy as np

from .components import PointLightComponent

GLB_MAGIC = 0x46546C67
JSON_CHUNK = 0x4E4F534A

_HEADER = struct.Struct("<III")
_CHUNK_HEADER = struct.Struct("<II")


class GlbFormatError(ValueError):
    """Raised when a file is not a binary glTF with a leading JSON chunk."""


def _read_exact(stream: Any, size: int, what: str) -> bytes:
    data = stream.read(size)
    if len(data) != size:
        raise GlbFormatError(f"file ends inside the {what}")
    return data


def load_glb_json(path: str | os.PathLike[str]) -> Any:
    """Return the parsed JSON chunk of the GLB file at ``path``."""
    with open(path, "rb") as stream:
        magic, _version, _length = _HEADER.unpack(
            _read_exact(stream, _HEADER.size, "GLB header")
        )
        if magic != GLB_MAGIC:
            raise GlbFormatError("Not a GLB file")
        chunk_length, chunk_type = _CHUNK_HEADER.unpack(
            _read_exact(stream, _CHUNK_HEADER.size, "chunk header")
        )
        if chunk_type != JSON_CHUNK:
            raise GlbFormatError("First chunk is not JSON")
        payload = _read_exact(stream, chunk_length, "JSON chunk")
    try:
        return json.loads(payload.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise GlbFormatError(f"JSON chunk is not valid JSON: {exc}") from exc


def _node_extras(document: Any, key: str) -> Iterator[tuple[str, str]]:
    nodes = document.get("nodes", []) if isinstance(document, dict) else []
    for node in nodes:
        extras = node.get("extras")
        if not isinstance(extras, dict) or key not in extras:
            continue
        name = node.get("name")
        value = extras[key]
        if not isinstance(name, str):
            raise GlbFormatError(f"node with a '{key}' extra has no name")
        if not isinstance(value, str):
            raise GlbFormatError(f"'{key}' extra of node {name!r} is not a string")
        yield name, value


def lua_scripts(path: str | os.PathLike[str]) -> dict[str, str]:
    """Map node names to the Lua scripts stored in their ``extras.lua``."""
    return dict(_node_extras(load_glb_json(path), "lua"))


def custom_pixel_shader_names(path: str | os.PathLike[str]) -> dict[str, str]:
    """Map node names to the pixel shader names stored in their ``extras.ps``."""
    return dict(_node_extras(load_glb_json(path), "ps"))


def matrix_from_rows(rows: Iterable[Iterable[float]]) -> np.ndarray:
    """Build a 4x4 float matrix from four rows of four values."""
    matrix = np.array([list(row) for row in rows], dtype=np.float32)
    if matrix.shape != (4, 4):
        raise ValueError(f"expected a 4x4 matrix, got shape {matrix.shape}")
    return matrix


def point_light_from_color(r: float, g: float, b: float) -> PointLightComponent:
    """A point light whose colour is the given diffuse colour scaled to unit length.

    The alpha channel is zero; a black colour stays black.
    """
    color = np.array([r, g, b, 0.0], dtype=np.float32)
    norm = float(np.linalg.norm(color))
    if norm > 0:
        color = (color / norm).astype(np.float32)
    return PointLightComponent(color=color)