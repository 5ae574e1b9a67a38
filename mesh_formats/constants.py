"""
Format constants for the mesh_formats package.
"""

# MD2 signatures: the four magic bytes read as a little-endian int32, in both byte orders
MD2_MAGIC_LE = int.from_bytes(b"IDP2", "little")
MD2_MAGIC_BE = int.from_bytes(b"IDP2", "big")
MD2_VERSION = 15

# MD2 documented limits
MD2_MAX_QPATH = 64
MD2_MAX_FRAMES = 512
MD2_MAX_SKINS = 32
MD2_MAX_VERTS = 2048
MD2_MAX_TRIANGLES = 4096
MD2_MAX_TEXCOORDS = MD2_MAX_VERTS * 3

# MD2 record sizes (bytes)
MD2_HEADER_SIZE = 17 * 4
MD2_FRAME_NAME_SIZE = 16
MD2_FRAME_VERTICES_OFFSET = 6 * 4 + MD2_FRAME_NAME_SIZE
MD2_TRIANGLE_SIZE = 6 * 4
MD2_TEXCOORD_SIZE = 2 * 4
MD2_SKIN_SIZE = MD2_MAX_QPATH

# Vertex record layouts: name -> (numpy component dtype, record size)
MD2_VERTEX_FORMATS = {
    "int32": ("<i4", 16),
    "uint8": ("u1", 4),
}
MD2_DEFAULT_VERTEX_FORMAT = "int32"

# STL binary layout
STL_HEADER_SIZE = 80
STL_PREAMBLE_SIZE = 84
STL_FACET_SIZE = 50
STL_COLOR_MARKER = b"COLOR="

# STL ASCII detection
STL_ASCII_PROBE_BYTES = 500
STL_SOLID_TOKEN = b"solid"
STL_MAX_NAME_LENGTH = 1024

# Node names used when the file supplies none
STL_BINARY_NAME = "<STL_BINARY>"
STL_ASCII_NAME = "<STL_ASCII>"

# Light gray, matching other geometric formats without material data
DEFAULT_COLOR = (0.6, 0.6, 0.6, 1.0)
