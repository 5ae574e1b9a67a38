"""
mesh_formats - MD2 and STL mesh decoders

Decodes model files into immutable MeshData values:
- MD2 keyframe models with quantized vertices and table-compressed normals
- STL surfaces, binary and ASCII, with structural format detection
"""

from .config import DecoderConfig, load_config
from .exceptions import MeshDecodeError
from .importer import MeshImporter, load_meshes
from .md2 import Md2Model, decode_md2
from .mesh import MeshData
from .stl import StlFormat, classify, decode_ascii_stl, decode_binary_stl, decode_stl, encode_binary_stl

__version__ = "1.0.0"
__all__ = [
    "DecoderConfig",
    "MeshData",
    "MeshDecodeError",
    "MeshImporter",
    "Md2Model",
    "StlFormat",
    "classify",
    "decode_ascii_stl",
    "decode_binary_stl",
    "decode_md2",
    "decode_stl",
    "encode_binary_stl",
    "load_config",
    "load_meshes",
]
