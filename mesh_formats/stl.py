"""
STL processing module for mesh_formats.

Handles both storage representations:
- binary: 80-byte header, uint32 face count, 50 bytes per facet
- ASCII: keyword-driven "solid ... facet normal ... vertex ... endsolid" text

STL has no magic number, so the representation is classified structurally
before decoding. Vertices are never shared between facets; every facet
contributes three vertices carrying the facet normal.
"""

import enum
import logging
import re
import struct
from typing import List, Optional, Sequence, Tuple, Union

import numpy as np

from .binary_cursor import BinaryCursor, Buffer
from .config import DecoderConfig
from .constants import (
    DEFAULT_COLOR,
    STL_ASCII_NAME,
    STL_ASCII_PROBE_BYTES,
    STL_BINARY_NAME,
    STL_COLOR_MARKER,
    STL_FACET_SIZE,
    STL_HEADER_SIZE,
    STL_MAX_NAME_LENGTH,
    STL_PREAMBLE_SIZE,
    STL_SOLID_TOKEN,
)
from .exceptions import (
    EmptyModelError,
    InvalidVertexCountError,
    MalformedNumberError,
    NormalMismatchError,
    OutOfBoundsError,
    TruncatedError,
    UnknownFormatError,
    raise_truncated,
)
from .mesh import MeshData, sequential_faces

FACET_DTYPE = np.dtype([
    ("normal", "<f4", (3,)),
    ("vertices", "<f4", (3, 3)),
    ("attribute", "<u2"),
])

_WHITESPACE = b" \t\r\n\f\v"
_TOKEN_SEPARATOR = re.compile(r"[ \t\r\n\f\v]+")
_COLOR_SCALE = np.float32(1.0 / 255.0)


class StlFormat(enum.Enum):
    BINARY = "binary"
    ASCII = "ascii"
    UNKNOWN = "unknown"


def _file_size(buffer: Buffer, file_size: Optional[int]) -> int:
    return len(buffer) if file_size is None else file_size


def is_binary_stl(buffer: Buffer, file_size: int = None) -> bool:
    """
    Structural binary test: 84 + face_count * 50 must equal the file size.

    The face count is the uint32 at offset 80. A binary header may start
    with "solid", so this test always runs before the ASCII one.
    """
    size = _file_size(buffer, file_size)
    if size < STL_PREAMBLE_SIZE:
        return False
    cursor = BinaryCursor(buffer, size)
    try:
        cursor.seek(STL_HEADER_SIZE)
        face_count = cursor.read_u32()
    except OutOfBoundsError:
        return False
    return STL_PREAMBLE_SIZE + face_count * STL_FACET_SIZE == size


def is_ascii_stl(buffer: Buffer, file_size: int = None) -> bool:
    """
    ASCII test: "solid" after leading whitespace and 7-bit bytes only.

    Many exporters write "solid" at the start of binary headers too, so the
    first 500 bytes must also be plain ASCII.
    """
    size = _file_size(buffer, file_size)
    if is_binary_stl(buffer, size):
        return False

    cursor = BinaryCursor(buffer, size)
    position = 0
    while position < cursor.length and cursor.peek_byte_at(position) in _WHITESPACE:
        position += 1

    if position + len(STL_SOLID_TOKEN) >= cursor.length:
        return False
    cursor.seek(position)
    if cursor.read_bytes(len(STL_SOLID_TOKEN)) != STL_SOLID_TOKEN:
        return False

    probe = min(STL_ASCII_PROBE_BYTES, cursor.length)
    return all(cursor.peek_byte_at(i) <= 127 for i in range(probe))


def classify(buffer: Buffer, file_size: int = None) -> StlFormat:
    """Classify a buffer as binary STL, ASCII STL or neither."""
    if is_binary_stl(buffer, file_size):
        return StlFormat.BINARY
    if is_ascii_stl(buffer, file_size):
        return StlFormat.ASCII
    return StlFormat.UNKNOWN


class StlDecoder:
    """
    STL decoder handling both ASCII and binary representations.
    """

    def __init__(self, config: Optional[DecoderConfig] = None, logger: Optional[logging.Logger] = None):
        self.config = config or DecoderConfig()
        self.logger = logger or logging.getLogger(__name__)

    def decode(self, buffer: Buffer, file_size: int = None) -> MeshData:
        """
        Classify and decode an STL buffer.

        Raises:
            UnknownFormatError: Buffer is neither binary nor ASCII STL
        """
        size = _file_size(buffer, file_size)
        storage = classify(buffer, size)
        self.logger.debug(f"STL storage representation: {storage.value} ({size} bytes)")

        if storage is StlFormat.BINARY:
            return self.decode_binary(buffer, size)
        if storage is StlFormat.ASCII:
            return self.decode_ascii(bytes(buffer[:size]))
        raise UnknownFormatError("Failed to determine STL storage representation")

    def decode_binary(self, buffer: Buffer, file_size: int = None) -> MeshData:
        """
        Decode a binary STL buffer.

        Returns:
            MeshData with 3 * face_count unshared vertices, each carrying
            its facet normal. Zero normals are passed through unchanged.
        """
        size = _file_size(buffer, file_size)
        if size < STL_PREAMBLE_SIZE:
            raise_truncated("STL: file is too small for the header",
                            required=STL_PREAMBLE_SIZE, available=size)

        cursor = BinaryCursor(buffer, size)
        try:
            color, has_color = self._read_header_color(cursor)

            cursor.seek(STL_HEADER_SIZE)
            face_count = cursor.read_u32()
            required = STL_PREAMBLE_SIZE + face_count * STL_FACET_SIZE
            if size < required:
                raise_truncated(f"STL: file is too small to hold all {face_count} facets",
                                required=required, available=size)
            if face_count == 0:
                raise EmptyModelError("STL: file is empty. There are no facets defined")

            block = cursor.read_bytes(face_count * STL_FACET_SIZE)
        except OutOfBoundsError as e:
            raise TruncatedError(f"STL: binary buffer ended unexpectedly: {e.message}",
                                 required=(e.offset or 0) + (e.size or 0),
                                 available=cursor.length) from e

        facets = np.frombuffer(block, dtype=FACET_DTYPE)
        vertices = facets["vertices"].reshape(-1, 3)
        normals = np.repeat(facets["normal"], 3, axis=0)

        self.logger.debug(f"STL binary: {face_count} facets, custom color: {has_color}")
        return MeshData(
            name=STL_BINARY_NAME,
            vertices=vertices,
            normals=normals,
            faces=sequential_faces(face_count),
            color=color,
            has_custom_color=has_color,
        )

    def _read_header_color(self, cursor: BinaryCursor) -> Tuple[Tuple[float, ...], bool]:
        """Look for a Materialise-style "COLOR=" default color in the header."""
        header = cursor.read_bytes(STL_HEADER_SIZE)
        marker = header.find(STL_COLOR_MARKER)
        if marker < 0:
            return DEFAULT_COLOR, False
        if marker + len(STL_COLOR_MARKER) + 16 > STL_HEADER_SIZE:
            self.logger.warning(f"STL: COLOR= marker at offset {marker} leaves no room for the color in the header, ignoring it")
            return DEFAULT_COLOR, False

        cursor.seek(marker + len(STL_COLOR_MARKER))
        rgba = np.array(cursor.read_f32_vector(4), dtype=np.float32) * _COLOR_SCALE
        self.logger.debug(f"STL header default color: {rgba.tolist()}")
        return tuple(float(c) for c in rgba), True

    def decode_ascii(self, text: Union[str, bytes]) -> MeshData:
        """
        Decode ASCII STL text.

        The scan is a single forward pass over whitespace-separated tokens,
        driven by the "facet", "vertex" and "endsolid" keywords. "outer loop",
        "endloop" and "endfacet" are not required. Structural slips inside a
        facet are logged as warnings; malformed numbers, a missing
        "endsolid" and inconsistent totals abort the decode.
        """
        if isinstance(text, (bytes, bytearray, memoryview)):
            text = bytes(text).decode("latin-1")

        body = text.lstrip(_WHITESPACE.decode("ascii"))
        if not body.startswith("solid"):
            raise UnknownFormatError("STL: ASCII text does not start with 'solid'")
        body = body[len("solid"):]

        tokens = _split_tokens(body)
        name, start = self._solid_name(body, tokens)

        positions, normals = self._scan_facets(tokens, start)

        if not positions:
            raise EmptyModelError("STL: ASCII file is empty or invalid; no data loaded")
        if len(positions) % 3 != 0:
            raise InvalidVertexCountError(f"STL: Invalid number of vertices ({len(positions)})",
                                          vertex_count=len(positions))
        if len(normals) != len(positions):
            raise NormalMismatchError("STL: normal buffer size does not match position buffer size",
                                      normal_count=len(normals), vertex_count=len(positions))

        face_count = len(positions) // 3
        self.logger.debug(f"STL ASCII '{name}': {face_count} facets")
        return MeshData(
            name=name,
            vertices=positions,
            normals=normals,
            faces=sequential_faces(face_count),
        )

    def _solid_name(self, body: str, tokens: List[str]) -> Tuple[str, int]:
        """Return the node name and the index of the first token after it."""
        header_line = _split_tokens(body.split("\n", 1)[0])
        if not header_line or header_line[0] in ("facet", "endsolid"):
            return STL_ASCII_NAME, 0

        name = tokens[0]
        if len(name) >= self.config.stl_max_name_length:
            self.logger.warning(f"STL: solid name of {len(name)} characters is too long, using {STL_ASCII_NAME}")
            return STL_ASCII_NAME, 1
        return name, 1

    def _scan_facets(self, tokens: List[str], index: int) -> Tuple[list, list]:
        positions = []
        normals = []
        facet_vertex_count = 0

        while True:
            if index >= len(tokens):
                raise TruncatedError("STL: unexpected EOF, 'endsolid' keyword was expected",
                                     required=index + 1, available=len(tokens))
            token = tokens[index]

            if token == "facet":
                if facet_vertex_count not in (0, 3):
                    self.logger.warning(
                        f"STL: a new facet begins but the previous one has {facet_vertex_count} vertices"
                    )
                facet_vertex_count = 0
                index += 1
                if index < len(tokens) and tokens[index] == "normal":
                    index += 1
                else:
                    self.logger.warning("STL: a facet normal vector was expected but not found")
                normal = _parse_vector(tokens, index)
                normals.extend([normal] * 3)
                index += 3

            elif token == "vertex":
                if facet_vertex_count >= 3:
                    self.logger.warning("STL: a facet with more than 3 vertices has been found")
                else:
                    positions.append(_parse_vector(tokens, index + 1))
                    facet_vertex_count += 1
                index += 4

            elif token == "endsolid":
                break

            else:
                index += 1

        return positions, normals


def _split_tokens(text: str) -> List[str]:
    """Split on ASCII whitespace only; other control bytes stay inside tokens."""
    return [token for token in _TOKEN_SEPARATOR.split(text) if token]


def _parse_vector(tokens: Sequence[str], index: int) -> Tuple[float, float, float]:
    if index + 3 > len(tokens):
        raise TruncatedError("STL: unexpected EOF while parsing facet",
                             required=index + 3, available=len(tokens))
    values = []
    for position in range(index, index + 3):
        token = tokens[position]
        try:
            if "_" in token:
                raise ValueError(token)
            values.append(float(token))
        except ValueError as e:
            raise MalformedNumberError(f"STL: '{token}' is not a floating-point number",
                                       token=token, token_index=position) from e
    return tuple(values)


def encode_binary_stl(mesh: MeshData, header: bytes = b"") -> bytes:
    """
    Encode a mesh as binary STL.

    Each face becomes one facet whose normal is the normal of its first
    vertex. A custom mesh color is written as "COLOR=" followed by four
    float32 values scaled to [0, 255].
    """
    header = bytes(header)
    if mesh.has_custom_color:
        room = STL_HEADER_SIZE - len(STL_COLOR_MARKER) - 16
        header = header.replace(STL_COLOR_MARKER, b"")[:room]
        header += STL_COLOR_MARKER + struct.pack('<4f', *(c * 255.0 for c in mesh.color))
    elif STL_COLOR_MARKER in header:
        raise ValueError("header contains a COLOR= marker but the mesh has no custom color")
    header = header[:STL_HEADER_SIZE].ljust(STL_HEADER_SIZE, b"\x00")

    faces = mesh.faces
    facets = np.zeros(len(faces), dtype=FACET_DTYPE)
    if len(faces):
        facets["vertices"] = mesh.vertices[faces]
        facets["normal"] = mesh.normals[faces[:, 0]]
    return header + struct.pack('<I', len(faces)) + facets.tobytes()


def decode_binary_stl(buffer: Buffer, file_size: int = None) -> MeshData:
    return StlDecoder().decode_binary(buffer, file_size)


def decode_ascii_stl(text: Union[str, bytes], max_name_length: int = STL_MAX_NAME_LENGTH) -> MeshData:
    return StlDecoder(DecoderConfig(stl_max_name_length=max_name_length)).decode_ascii(text)


def decode_stl(buffer: Buffer, file_size: int = None) -> MeshData:
    return StlDecoder().decode(buffer, file_size)
