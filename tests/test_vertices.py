import numpy as np
import pytest

from potator.vertices import (
    MISSING_COLOR,
    ColoredVertex,
    CompositeVertex,
    DataFormat,
    TexturedVertex,
    Vertex,
)


def _assert_fits(members, size):
    members = sorted(members, key=lambda m: m.offset)
    assert members[0].offset == 0
    for prev, nxt in zip(members, members[1:]):
        assert prev.offset + prev.stride <= nxt.offset
    assert members[-1].offset + members[-1].stride <= size


def test_layout_members_fit_and_do_not_overlap():
    _assert_fits(Vertex.layout(), Vertex.size)
    _assert_fits(ColoredVertex.layout(), ColoredVertex.size)
    _assert_fits(CompositeVertex.layout(), CompositeVertex.size)
    _assert_fits(TexturedVertex.layout(), TexturedVertex.size)


def test_pack_length_matches_size():
    assert len(Vertex().pack()) == Vertex.size
    assert len(ColoredVertex().pack()) == ColoredVertex.size
    assert len(CompositeVertex().pack()) == CompositeVertex.size
    assert len(TexturedVertex().pack()) == TexturedVertex.size


def test_layout_names():
    assert [m.name for m in Vertex.layout()] == ["Position"]
    assert [m.name for m in ColoredVertex.layout()] == ["Position", "Color"]
    assert [m.name for m in CompositeVertex.layout()] == ["Position", "Color", "Normal", "Uv"]
    assert [m.name for m in TexturedVertex.layout()] == ["Position", "Uv"]


def test_composite_uv_is_float2_and_default_color_missing():
    uv = CompositeVertex.layout()[3]
    assert uv.format is DataFormat.FLOAT2
    np.testing.assert_allclose(CompositeVertex().color, MISSING_COLOR)


def test_composite_pack_round_trip():
    vertex = CompositeVertex(
        position=np.array([1, 2, 3, 1], dtype=np.float32),
        normal=np.array([0, 1, 0], dtype=np.float32),
        uv=np.array([0.25, 0.75], dtype=np.float32),
    )
    data = vertex.pack()
    values = {"Position": vertex.position, "Color": vertex.color, "Normal": vertex.normal, "Uv": vertex.uv}
    for member in CompositeVertex.layout():
        chunk = np.frombuffer(data[member.offset:member.offset + member.stride], dtype="<f4")
        np.testing.assert_allclose(chunk, values[member.name])


def test_textured_pack_round_trip():
    vertex = TexturedVertex(uv=np.array([0.5, 0.5], dtype=np.float32))
    data = vertex.pack()
    uv = TexturedVertex.layout()[1]
    np.testing.assert_allclose(
        np.frombuffer(data[uv.offset:uv.offset + uv.stride], dtype="<f4"), [0.5, 0.5]
    )


def test_wrong_member_length_raises():
    with pytest.raises(ValueError):
        Vertex(position=np.zeros(3, dtype=np.float32)).pack()