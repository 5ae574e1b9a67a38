"""
File-level entry point: reads a model file once and dispatches it to the
matching decoder by extension, falling back to signature checks.
"""

import logging
from pathlib import Path
from typing import List, Optional, Union

from .binary_cursor import Buffer
from .config import DecoderConfig
from .exceptions import MeshDecodeError, UnknownFormatError
from .md2 import Md2Decoder, is_md2
from .mesh import MeshData
from .stl import StlDecoder, StlFormat, classify

SUPPORTED_EXTENSIONS = {".md2": "md2", ".stl": "stl"}


class MeshImporter:
    """
    Import MD2 and STL files into MeshData lists.

    The importer only obtains the byte buffer; all parsing happens in the
    format decoders, which hold no state between calls.
    """

    def __init__(self, config: Optional[DecoderConfig] = None, logger: Optional[logging.Logger] = None):
        self.config = config or DecoderConfig()
        self.logger = logger or logging.getLogger(__name__)
        self.md2_decoder = Md2Decoder(self.config, self.logger.getChild("md2"))
        self.stl_decoder = StlDecoder(self.config, self.logger.getChild("stl"))

    def can_read(self, path: Union[str, Path], check_signature: bool = False) -> bool:
        """
        Check whether a file looks importable.

        Args:
            path: File to check
            check_signature: Also inspect the file contents when the
                extension is not recognised
        """
        path = Path(path)
        if path.suffix.lower() in SUPPORTED_EXTENSIONS:
            return True
        if not check_signature or not path.is_file():
            return False
        return self.detect_format(path.read_bytes()) is not None

    def detect_format(self, buffer: Buffer) -> Optional[str]:
        """Return "md2", "stl" or None from the buffer contents alone."""
        if is_md2(buffer):
            return "md2"
        if classify(buffer) is not StlFormat.UNKNOWN:
            return "stl"
        return None

    def read_file(self, path: Union[str, Path]) -> List[MeshData]:
        """
        Read and decode a model file.

        Returns:
            List of meshes: one per MD2 frame (or one for a static pose),
            exactly one for STL

        Raises:
            MeshDecodeError: Decoding failed; details["file"] names the file
        """
        path = Path(path)
        buffer = path.read_bytes()
        self.logger.info(f"Importing {path.name} ({len(buffer)} bytes)")

        hint = SUPPORTED_EXTENSIONS.get(path.suffix.lower())
        try:
            meshes = self.read_buffer(buffer, hint)
        except MeshDecodeError as e:
            e.details.setdefault("file", str(path))
            self.logger.error(f"Failed to import {path}: {e.message}")
            raise

        self.logger.info(f"Imported {len(meshes)} mesh(es) from {path.name}")
        return meshes

    def read_buffer(self, buffer: Buffer, hint: Optional[str] = None) -> List[MeshData]:
        """Decode an in-memory buffer; ``hint`` is "md2", "stl" or None to sniff."""
        fmt = hint or self.detect_format(buffer)
        if fmt == "md2":
            model = self.md2_decoder.decode(buffer)
            return model.meshes(static_pose=self.config.md2_static_pose)
        if fmt == "stl":
            return [self.stl_decoder.decode(buffer)]
        raise UnknownFormatError("Unable to determine the model format")


def load_meshes(path: Union[str, Path], config: Optional[DecoderConfig] = None) -> List[MeshData]:
    """Convenience wrapper around MeshImporter.read_file()."""
    return MeshImporter(config).read_file(path)
