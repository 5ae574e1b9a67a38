"""Shared builders for synthetic MD2 and STL buffers."""

import struct

import numpy as np
import pytest

MD2_HEADER_FIELDS = [
    "magic", "version", "skin_width", "skin_height", "frame_size",
    "num_skins", "num_vertices", "num_texcoords", "num_triangles",
    "num_glcommands", "num_frames", "offset_skins", "offset_texcoords",
    "offset_triangles", "offset_frames", "offset_glcommands", "offset_end",
]


def build_md2(frames, triangles=(), skins=(), texcoords=(), magic=b"IDP2", version=15,
              vertex_format="int32", overrides=None):
    """
    Build an MD2 buffer.

    Args:
        frames: list of (scale, translate, name, vertices) where vertices is
            a list of (x, y, z, normal_index)
        triangles: list of ((v0, v1, v2), (t0, t1, t2))
        skins: list of skin names
        texcoords: list of (s, t)
        overrides: header field values to force after layout
    """
    num_vertices = len(frames[0][3]) if frames else 0
    component = "<4i" if vertex_format == "int32" else "<4B"
    frame_size = 40 + num_vertices * struct.calcsize(component)

    skin_block = b"".join(name.encode("latin-1").ljust(64, b"\x00") for name in skins)
    texcoord_block = b"".join(struct.pack("<2i", s, t) for s, t in texcoords)
    triangle_block = b"".join(struct.pack("<6i", *v, *t) for v, t in triangles)
    frame_block = b""
    for scale, translate, name, vertices in frames:
        frame_block += struct.pack("<3f", *scale) + struct.pack("<3f", *translate)
        frame_block += name.encode("latin-1").ljust(16, b"\x00")
        for vertex in vertices:
            frame_block += struct.pack(component, *vertex)

    offset_skins = 68
    offset_texcoords = offset_skins + len(skin_block)
    offset_triangles = offset_texcoords + len(texcoord_block)
    offset_frames = offset_triangles + len(triangle_block)
    offset_end = offset_frames + len(frame_block)

    header = {
        "magic": int.from_bytes(magic, "little"),
        "version": version,
        "skin_width": 256,
        "skin_height": 256,
        "frame_size": frame_size,
        "num_skins": len(skins),
        "num_vertices": num_vertices,
        "num_texcoords": len(texcoords),
        "num_triangles": len(triangles),
        "num_glcommands": 0,
        "num_frames": len(frames),
        "offset_skins": offset_skins,
        "offset_texcoords": offset_texcoords,
        "offset_triangles": offset_triangles,
        "offset_frames": offset_frames,
        "offset_glcommands": offset_end,
        "offset_end": offset_end,
    }
    header.update(overrides or {})
    packed = struct.pack("<17i", *(header[name] for name in MD2_HEADER_FIELDS))
    return packed + skin_block + texcoord_block + triangle_block + frame_block


def build_binary_stl(facets, header=b""):
    """facets: list of (normal, v1, v2, v3) tuples."""
    body = b"".join(
        struct.pack("<3f", *normal) + struct.pack("<9f", *v1, *v2, *v3) + struct.pack("<H", 0)
        for normal, v1, v2, v3 in facets
    )
    return header.ljust(80, b"\x00")[:80] + struct.pack("<I", len(facets)) + body


CUBE_ASCII = (
    "solid cube\n"
    "facet normal 0 0 1\n"
    "outer loop\n"
    "vertex 0 0 0\n"
    "vertex 1 0 0\n"
    "vertex 0 1 0\n"
    "endloop\n"
    "endfacet\n"
    "endsolid cube\n"
)


@pytest.fixture
def md2_builder():
    return build_md2


@pytest.fixture
def stl_builder():
    return build_binary_stl


@pytest.fixture
def cube_ascii():
    return CUBE_ASCII


@pytest.fixture
def simple_md2():
    """Two frames of a single triangle, with one skin and three texcoords."""
    frames = [
        ((0.5, 0.25, 2.0), (-1.0, 0.0, 10.0), "stand01", [(0, 0, 0, 5), (10, 0, 0, 32), (0, 20, 3, 52)]),
        ((1.0, 1.0, 1.0), (0.0, 0.0, 0.0), "stand02", [(1, 2, 3, 0), (4, 5, 6, 161), (7, 8, 9, 999)]),
    ]
    return build_md2(
        frames,
        triangles=[((0, 1, 2), (0, 1, 2))],
        skins=["models/player/skin.pcx"],
        texcoords=[(0, 0), (128, 0), (0, 128)],
    )


@pytest.fixture
def random_mesh_arrays():
    rng = np.random.default_rng(1234)
    face_count = 16
    vertices = rng.uniform(-100.0, 100.0, size=(face_count * 3, 3)).astype(np.float32)
    facet_normals = rng.normal(size=(face_count, 3)).astype(np.float32)
    facet_normals[3] = 0.0
    normals = np.repeat(facet_normals, 3, axis=0)
    return vertices, normals
