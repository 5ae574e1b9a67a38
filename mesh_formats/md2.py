"""
MD2 keyframe model decoder.

Layout (little-endian):
- 68-byte header of 17 int32 fields
- skins: 64-byte texture paths
- texture coordinates: (s, t) int32 pairs
- triangles: 3 vertex indices + 3 texcoord indices, int32
- frames: scale (3 float32), translate (3 float32), 16-byte name, then one
  quantized vertex record per model vertex (3 coordinates + normal index)

The width of the quantized vertex components is configurable: the reference
layout stores int32 components, while historical files store uint8.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import numpy as np

from . import md2_normals
from .binary_cursor import BinaryCursor, Buffer
from .config import DecoderConfig
from .constants import (
    MD2_FRAME_NAME_SIZE,
    MD2_FRAME_VERTICES_OFFSET,
    MD2_HEADER_SIZE,
    MD2_MAGIC_BE,
    MD2_MAGIC_LE,
    MD2_MAX_FRAMES,
    MD2_MAX_QPATH,
    MD2_MAX_SKINS,
    MD2_MAX_TEXCOORDS,
    MD2_MAX_TRIANGLES,
    MD2_MAX_VERTS,
    MD2_SKIN_SIZE,
    MD2_TEXCOORD_SIZE,
    MD2_TRIANGLE_SIZE,
    MD2_VERSION,
    MD2_VERTEX_FORMATS,
)
from .exceptions import (
    BadSignatureError,
    EmptyModelError,
    OutOfBoundsError,
    TruncatedError,
    UnsupportedVersionError,
    raise_limit_exceeded,
    raise_truncated,
)
from .mesh import MeshData


@dataclass(frozen=True)
class Md2Header:
    magic: int
    version: int
    skin_width: int
    skin_height: int
    frame_size: int
    num_skins: int
    num_vertices: int
    num_texcoords: int
    num_triangles: int
    num_glcommands: int
    num_frames: int
    offset_skins: int
    offset_texcoords: int
    offset_triangles: int
    offset_frames: int
    offset_glcommands: int
    offset_end: int

    @classmethod
    def read(cls, cursor: BinaryCursor) -> "Md2Header":
        return cls(*cursor.read_i32_vector(17))


@dataclass(frozen=True)
class Md2Triangle:
    vertex_indices: Tuple[int, int, int]
    texcoord_indices: Tuple[int, int, int]


@dataclass(frozen=True)
class Md2TexCoord:
    s: int
    t: int


@dataclass(frozen=True)
class Md2Skin:
    name: str


@dataclass(frozen=True, eq=False)
class Md2Frame:
    """One decoded keyframe; positions and normals are (N, 3) float32."""
    name: str
    scale: Tuple[float, float, float]
    translate: Tuple[float, float, float]
    positions: np.ndarray
    normals: np.ndarray


@dataclass(frozen=True, eq=False)
class Md2Model:
    header: Md2Header
    frames: List[Md2Frame]
    triangles: List[Md2Triangle]
    skins: List[Md2Skin] = field(default_factory=list)
    texcoords: List[Md2TexCoord] = field(default_factory=list)

    def face_indices(self) -> np.ndarray:
        if not self.triangles:
            return np.zeros((0, 3), dtype=np.int32)
        return np.array([t.vertex_indices for t in self.triangles], dtype=np.int32)

    def meshes(self, static_pose: bool = False) -> List[MeshData]:
        """
        Build one mesh per frame, or only the first frame for a static pose.

        Every mesh shares the triangle index list; positions and normals
        come from the frame.
        """
        faces = self.face_indices()
        frames = self.frames[:1] if static_pose else self.frames
        return [
            MeshData(
                name=frame.name or f"frame_{index}",
                vertices=frame.positions,
                normals=frame.normals,
                faces=faces,
                metadata={"frame_index": index, "skins": [s.name for s in self.skins]},
            )
            for index, frame in enumerate(frames)
        ]


def _check_count(field_name: str, value: int, limit: int) -> None:
    if value < 0 or value > limit:
        raise_limit_exceeded(field_name, value, limit)


def _seek_section(cursor: BinaryCursor, section: str, offset: int, count: int, record_size: int) -> None:
    """Validate that a whole section fits in the buffer, then move to it."""
    required = offset + count * record_size
    if offset < 0 or required > cursor.length:
        raise_truncated(
            f"MD2 {section} section ({count} x {record_size} bytes at offset {offset}) "
            f"exceeds buffer length {cursor.length}",
            required=required, available=cursor.length
        )
    cursor.seek(offset)


def reconstruct_positions(quantized: np.ndarray, scale, translate) -> np.ndarray:
    """Dequantize (N, 3) integer coordinates: quantized * scale + translate, in float32."""
    scale = np.asarray(scale, dtype=np.float32)
    translate = np.asarray(translate, dtype=np.float32)
    return quantized.astype(np.float32) * scale + translate


def reconstruct_normals(normal_indices: np.ndarray) -> np.ndarray:
    """Table lookup followed by the Z-up to Y-up axis swap."""
    return md2_normals.swap_yz(md2_normals.lookup_many(normal_indices))


class Md2Decoder:
    """
    Decoder for MD2 buffers.

    A decoder holds only configuration; every decode() call works on its own
    buffer and returns an independent model.
    """

    def __init__(self, config: Optional[DecoderConfig] = None, logger: Optional[logging.Logger] = None):
        self.config = config or DecoderConfig()
        self.logger = logger or logging.getLogger(__name__)
        self.component_dtype, self.vertex_record_size = MD2_VERTEX_FORMATS[self.config.md2_vertex_format]

    def frame_size(self, num_vertices: int) -> int:
        return MD2_FRAME_VERTICES_OFFSET + num_vertices * self.vertex_record_size

    def decode(self, buffer: Buffer, length: int = None) -> Md2Model:
        """
        Decode an MD2 buffer.

        Raises:
            TruncatedError: Buffer ends before a required section
            BadSignatureError: Magic number is not IDP2 in either byte order
            UnsupportedVersionError: Version is not 15 (strict mode)
            LimitExceededError: A count is negative or above the format maximum
            EmptyModelError: The model has no frames
        """
        cursor = BinaryCursor(buffer, length)
        if cursor.length < MD2_HEADER_SIZE:
            raise_truncated(f"MD2 buffer of {cursor.length} bytes is too small for the header",
                            required=MD2_HEADER_SIZE, available=cursor.length)
        try:
            return self._decode(cursor)
        except OutOfBoundsError as e:
            raise TruncatedError(f"MD2 buffer ended unexpectedly: {e.message}",
                                 required=(e.offset or 0) + (e.size or 0),
                                 available=cursor.length) from e

    def _decode(self, cursor: BinaryCursor) -> Md2Model:
        header = Md2Header.read(cursor)
        self._validate_header(header)

        frames = self._read_frames(cursor, header)
        triangles = self._read_triangles(cursor, header)
        skins = self._read_skins(cursor, header)
        texcoords = self._read_texcoords(cursor, header)

        self.logger.debug(
            f"MD2 decoded: {len(frames)} frames, {header.num_vertices} vertices, "
            f"{len(triangles)} triangles, {len(skins)} skins, {len(texcoords)} texcoords"
        )
        return Md2Model(header=header, frames=frames, triangles=triangles,
                        skins=skins, texcoords=texcoords)

    def _validate_header(self, header: Md2Header) -> None:
        if header.magic not in (MD2_MAGIC_LE, MD2_MAGIC_BE):
            signature = header.magic.to_bytes(4, "little", signed=True)
            raise BadSignatureError(f"Invalid MD2 magic word {signature!r}, expected b'IDP2'",
                                    signature=signature)

        if header.version != MD2_VERSION:
            if self.config.md2_strict_version:
                raise UnsupportedVersionError(f"Unsupported MD2 version {header.version}",
                                              version=header.version, expected=MD2_VERSION)
            self.logger.warning(f"MD2 version is {header.version}, expected {MD2_VERSION}; decoding anyway")

        _check_count("num_frames", header.num_frames, MD2_MAX_FRAMES)
        _check_count("num_vertices", header.num_vertices, MD2_MAX_VERTS)
        _check_count("num_triangles", header.num_triangles, MD2_MAX_TRIANGLES)
        _check_count("num_skins", header.num_skins, MD2_MAX_SKINS)
        _check_count("num_texcoords", header.num_texcoords, MD2_MAX_TEXCOORDS)

        if header.num_frames == 0:
            raise EmptyModelError("MD2 model contains no frames")

        expected_frame_size = self.frame_size(header.num_vertices)
        if header.frame_size != expected_frame_size:
            self.logger.debug(
                f"MD2 header frame size {header.frame_size} differs from the "
                f"{self.config.md2_vertex_format} layout size {expected_frame_size}"
            )

    def _read_frames(self, cursor: BinaryCursor, header: Md2Header) -> List[Md2Frame]:
        frame_size = self.frame_size(header.num_vertices)
        _seek_section(cursor, "frame", header.offset_frames, header.num_frames, frame_size)

        dtype = np.dtype(self.component_dtype)
        frames = []
        for _ in range(header.num_frames):
            scale = cursor.read_f32_vector(3)
            translate = cursor.read_f32_vector(3)
            name = cursor.read_fixed_string(MD2_FRAME_NAME_SIZE)
            block = cursor.read_bytes(header.num_vertices * self.vertex_record_size)
            records = np.frombuffer(block, dtype=dtype).reshape(header.num_vertices, 4)

            positions = reconstruct_positions(records[:, :3], scale, translate)
            normals = reconstruct_normals(records[:, 3])
            positions.flags.writeable = False
            normals.flags.writeable = False
            frames.append(Md2Frame(name=name, scale=scale, translate=translate,
                                   positions=positions, normals=normals))
        return frames

    def _read_triangles(self, cursor: BinaryCursor, header: Md2Header) -> List[Md2Triangle]:
        if header.num_triangles == 0:
            return []
        _seek_section(cursor, "triangle", header.offset_triangles, header.num_triangles, MD2_TRIANGLE_SIZE)

        triangles = []
        out_of_range = 0
        for _ in range(header.num_triangles):
            values = cursor.read_i32_vector(6)
            triangle = Md2Triangle(vertex_indices=values[:3], texcoord_indices=values[3:])
            if any(i < 0 or i >= header.num_vertices for i in triangle.vertex_indices):
                out_of_range += 1
            triangles.append(triangle)

        if out_of_range:
            self.logger.warning(f"MD2: {out_of_range} triangles reference vertices outside [0, {header.num_vertices})")
        return triangles

    def _read_skins(self, cursor: BinaryCursor, header: Md2Header) -> List[Md2Skin]:
        if header.num_skins == 0:
            return []
        _seek_section(cursor, "skin", header.offset_skins, header.num_skins, MD2_SKIN_SIZE)
        return [Md2Skin(cursor.read_fixed_string(MD2_MAX_QPATH)) for _ in range(header.num_skins)]

    def _read_texcoords(self, cursor: BinaryCursor, header: Md2Header) -> List[Md2TexCoord]:
        if header.num_texcoords == 0:
            return []
        _seek_section(cursor, "texcoord", header.offset_texcoords, header.num_texcoords, MD2_TEXCOORD_SIZE)
        return [Md2TexCoord(*cursor.read_i32_vector(2)) for _ in range(header.num_texcoords)]


def decode_md2(buffer: Buffer, config: Optional[DecoderConfig] = None) -> Md2Model:
    """Decode an MD2 buffer with an optional configuration."""
    return Md2Decoder(config).decode(buffer)


def is_md2(buffer: Buffer) -> bool:
    """True when the first four bytes carry the MD2 signature in either byte order."""
    head = bytes(buffer[:4])
    return len(head) == 4 and int.from_bytes(head, "little") in (MD2_MAGIC_LE, MD2_MAGIC_BE)
