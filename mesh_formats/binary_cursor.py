"""
Bounds-checked sequential reader over a fixed byte buffer.
"""

import struct
from typing import Tuple, Union

from .exceptions import OutOfBoundsError

Buffer = Union[bytes, bytearray, memoryview]


class BinaryCursor:
    """
    Sequential reader with an explicit length limit.

    Every read advances the position and raises OutOfBoundsError when it
    would run past ``length``. The cursor never clamps or pads a short read.
    """

    def __init__(self, buffer: Buffer, length: int = None, byteorder: str = "<"):
        if byteorder not in ("<", ">"):
            raise ValueError(f"byteorder must be '<' or '>', got {byteorder!r}")
        self.buffer = memoryview(buffer).cast("B")
        self.length = len(self.buffer) if length is None else min(length, len(self.buffer))
        self.byteorder = byteorder
        self.position = 0

    def _require(self, size: int, offset: int = None) -> int:
        start = self.position if offset is None else offset
        if size < 0 or start < 0 or start + size > self.length:
            raise OutOfBoundsError(
                f"Read of {size} bytes at offset {start} exceeds buffer length {self.length}",
                offset=start, size=size, length=self.length
            )
        return start

    def _unpack(self, fmt: str):
        size = struct.calcsize(self.byteorder + fmt)
        start = self._require(size)
        values = struct.unpack_from(self.byteorder + fmt, self.buffer, start)
        self.position = start + size
        return values

    def tell(self) -> int:
        return self.position

    def remaining(self) -> int:
        return self.length - self.position

    def seek(self, offset: int) -> None:
        """Move to an absolute offset; the end of the buffer itself is a valid position."""
        if offset < 0 or offset > self.length:
            raise OutOfBoundsError(
                f"Seek to offset {offset} outside buffer of length {self.length}",
                offset=offset, length=self.length
            )
        self.position = offset

    def skip(self, count: int) -> None:
        self._require(count)
        self.position += count

    def read_i32(self) -> int:
        return self._unpack("i")[0]

    def read_u32(self) -> int:
        return self._unpack("I")[0]

    def read_f32(self) -> float:
        return self._unpack("f")[0]

    def read_i32_vector(self, count: int) -> Tuple[int, ...]:
        return self._unpack(f"{count}i")

    def read_f32_vector(self, count: int) -> Tuple[float, ...]:
        return self._unpack(f"{count}f")

    def read_bytes(self, count: int) -> bytes:
        start = self._require(count)
        self.position = start + count
        return bytes(self.buffer[start:start + count])

    def read_fixed_string(self, count: int, encoding: str = "latin-1") -> str:
        """
        Read a fixed-width character field.

        The field is cut at the first NUL, then trailing whitespace is
        stripped, so padding after the terminator never leaks into the name.
        """
        raw = self.read_bytes(count)
        raw = raw.split(b"\x00", 1)[0]
        return raw.decode(encoding).rstrip()

    def peek_byte_at(self, offset: int) -> int:
        """Return the byte at an absolute offset without moving the cursor."""
        self._require(1, offset)
        return self.buffer[offset]
