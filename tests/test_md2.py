"""Tests for mesh_formats.md2."""

import logging

import numpy as np
import pytest

from mesh_formats import md2_normals
from mesh_formats.config import DecoderConfig
from mesh_formats.exceptions import (
    BadSignatureError,
    EmptyModelError,
    LimitExceededError,
    TruncatedError,
    UnsupportedVersionError,
)
from mesh_formats.md2 import Md2Decoder, decode_md2, is_md2

TRIANGLE = [((0, 1, 2), (0, 1, 2))]


def one_frame(vertices, scale=(1.0, 1.0, 1.0), translate=(0.0, 0.0, 0.0), name="frame"):
    return [(scale, translate, name, vertices)]


def test_decode_reconstructs_positions_exactly(simple_md2):
    model = decode_md2(simple_md2)

    assert model.header.version == 15
    assert len(model.frames) == 2
    frame = model.frames[0]
    assert frame.name == "stand01"

    quantized = np.array([[0, 0, 0], [10, 0, 0], [0, 20, 3]], dtype=np.float32)
    expected = quantized * np.array([0.5, 0.25, 2.0], dtype=np.float32) + np.array([-1.0, 0.0, 10.0], dtype=np.float32)
    assert frame.positions.dtype == np.float32
    assert np.array_equal(frame.positions, expected)


def test_decode_swaps_normal_axes(simple_md2):
    frame = decode_md2(simple_md2).frames[0]
    # table entries 5, 32 and 52 are +Z, +Y and +X in the Z-up source convention
    np.testing.assert_array_equal(frame.normals, [[0, 1, 0], [0, 0, 1], [1, 0, 0]])


def test_out_of_range_normal_index_uses_last_entry(simple_md2):
    frame = decode_md2(simple_md2).frames[1]
    last = md2_normals.swap_yz(md2_normals.NORMALS[161])
    np.testing.assert_array_equal(frame.normals[1], last)
    np.testing.assert_array_equal(frame.normals[2], last)


def test_sections_are_decoded(simple_md2):
    model = decode_md2(simple_md2)
    assert [t.vertex_indices for t in model.triangles] == [(0, 1, 2)]
    assert [t.texcoord_indices for t in model.triangles] == [(0, 1, 2)]
    assert [s.name for s in model.skins] == ["models/player/skin.pcx"]
    assert [(tc.s, tc.t) for tc in model.texcoords] == [(0, 0), (128, 0), (0, 128)]


def test_meshes_one_per_frame(simple_md2):
    model = decode_md2(simple_md2)
    meshes = model.meshes()
    assert [m.name for m in meshes] == ["stand01", "stand02"]
    for mesh, frame in zip(meshes, model.frames):
        assert mesh.num_vertices == 3
        assert mesh.faces.tolist() == [[0, 1, 2]]
        assert np.array_equal(mesh.vertices, frame.positions)
        assert not mesh.has_custom_color

    static = model.meshes(static_pose=True)
    assert len(static) == 1
    assert static[0].name == "stand01"


def test_reversed_magic_is_accepted(md2_builder):
    buffer = md2_builder(one_frame([(1, 2, 3, 0)] * 3), triangles=TRIANGLE, magic=b"2PDI")
    assert is_md2(buffer)
    model = decode_md2(buffer)
    assert len(model.frames) == 1


def test_bad_magic(md2_builder):
    buffer = md2_builder(one_frame([(0, 0, 0, 0)]), magic=b"IDPO")
    assert not is_md2(buffer)
    with pytest.raises(BadSignatureError) as excinfo:
        decode_md2(buffer)
    assert excinfo.value.details["signature"] == b"IDPO"


def test_unsupported_version(md2_builder):
    buffer = md2_builder(one_frame([(0, 0, 0, 0)]), version=8)
    with pytest.raises(UnsupportedVersionError) as excinfo:
        decode_md2(buffer)
    assert excinfo.value.version == 8


def test_lenient_version_logs_warning(md2_builder, caplog):
    buffer = md2_builder(one_frame([(0, 0, 0, 0)]), version=8)
    decoder = Md2Decoder(DecoderConfig(md2_strict_version=False))
    with caplog.at_level(logging.WARNING, logger="mesh_formats"):
        model = decoder.decode(buffer)
    assert len(model.frames) == 1
    assert "version is 8" in caplog.text


def test_no_frames_is_empty_model(md2_builder):
    with pytest.raises(EmptyModelError):
        decode_md2(md2_builder([]))


@pytest.mark.parametrize("field, value", [
    ("num_frames", 513),
    ("num_frames", -1),
    ("num_vertices", 2049),
    ("num_triangles", 4097),
    ("num_skins", 33),
    ("num_texcoords", -4),
])
def test_counts_outside_limits(md2_builder, field, value):
    buffer = md2_builder(one_frame([(0, 0, 0, 0)]), overrides={field: value})
    with pytest.raises(LimitExceededError) as excinfo:
        decode_md2(buffer)
    assert excinfo.value.field == field
    assert excinfo.value.value == value


def test_header_too_short():
    with pytest.raises(TruncatedError):
        decode_md2(b"IDP2" + b"\x00" * 20)


def test_truncated_frame_block(simple_md2):
    with pytest.raises(TruncatedError):
        decode_md2(simple_md2[:-10])


def test_offset_past_end(md2_builder):
    buffer = md2_builder(one_frame([(0, 0, 0, 0)]), triangles=TRIANGLE, overrides={"offset_triangles": 10_000})
    with pytest.raises(TruncatedError) as excinfo:
        decode_md2(buffer)
    assert excinfo.value.details["available"] == len(buffer)


def test_negative_offset(md2_builder):
    buffer = md2_builder(one_frame([(0, 0, 0, 0)]), overrides={"offset_frames": -40})
    with pytest.raises(TruncatedError):
        decode_md2(buffer)


def test_uint8_vertex_format(md2_builder):
    buffer = md2_builder(
        one_frame([(0, 0, 0, 5), (255, 0, 0, 32), (0, 128, 64, 52)], scale=(0.1, 0.1, 0.1)),
        triangles=TRIANGLE,
        vertex_format="uint8",
    )
    model = Md2Decoder(DecoderConfig(md2_vertex_format="uint8")).decode(buffer)
    expected = np.array([[0, 0, 0], [255, 0, 0], [0, 128, 64]], dtype=np.float32) * np.float32(0.1)
    assert np.array_equal(model.frames[0].positions, expected)
    assert model.header.frame_size == 40 + 3 * 4


def test_triangle_index_out_of_range_warns(md2_builder, caplog):
    buffer = md2_builder(one_frame([(0, 0, 0, 0)] * 3), triangles=[((0, 1, 7), (0, 0, 0))])
    with caplog.at_level(logging.WARNING, logger="mesh_formats"):
        model = decode_md2(buffer)
    assert model.triangles[0].vertex_indices == (0, 1, 7)
    assert "outside [0, 3)" in caplog.text


def test_decoded_arrays_are_read_only(simple_md2):
    frame = decode_md2(simple_md2).frames[0]
    with pytest.raises(ValueError):
        frame.positions[0, 0] = 1.0
