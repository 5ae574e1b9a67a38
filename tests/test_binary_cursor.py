"""Tests for mesh_formats.binary_cursor."""

import struct

import pytest

from mesh_formats.binary_cursor import BinaryCursor
from mesh_formats.exceptions import MeshDecodeError, OutOfBoundsError


def test_sequential_little_endian_reads():
    data = struct.pack("<ifI", -7, 1.5, 4000000000)
    cursor = BinaryCursor(data)

    assert cursor.read_i32() == -7
    assert cursor.read_f32() == 1.5
    assert cursor.read_u32() == 4000000000
    assert cursor.remaining() == 0
    assert cursor.tell() == len(data)


def test_big_endian_reads():
    cursor = BinaryCursor(struct.pack(">if", 15, -2.25), byteorder=">")
    assert cursor.read_i32() == 15
    assert cursor.read_f32() == -2.25


def test_invalid_byteorder_rejected():
    with pytest.raises(ValueError):
        BinaryCursor(b"", byteorder="!")


def test_vector_reads():
    cursor = BinaryCursor(struct.pack("<3f2i", 1.0, 2.0, 3.0, 4, 5))
    assert cursor.read_f32_vector(3) == (1.0, 2.0, 3.0)
    assert cursor.read_i32_vector(2) == (4, 5)


def test_read_past_end_raises_out_of_bounds():
    cursor = BinaryCursor(b"\x01\x02\x03")
    with pytest.raises(OutOfBoundsError) as excinfo:
        cursor.read_i32()
    assert excinfo.value.details["length"] == 3
    assert excinfo.value.error_code == "OUT_OF_BOUNDS"
    # a failed read does not move the cursor
    assert cursor.tell() == 0


def test_out_of_bounds_is_a_decode_error():
    with pytest.raises(MeshDecodeError):
        BinaryCursor(b"").read_u32()


def test_explicit_length_limits_reads():
    cursor = BinaryCursor(b"\x00" * 8, length=4)
    cursor.read_i32()
    with pytest.raises(OutOfBoundsError):
        cursor.read_bytes(1)


def test_fixed_string_trims_padding():
    data = b"stand01\x00\x00junk\x00\x00\x00" + b"skin.pcx   \t"
    cursor = BinaryCursor(data)
    assert cursor.read_fixed_string(16) == "stand01"
    assert cursor.read_fixed_string(12) == "skin.pcx"


def test_seek_skip_and_peek():
    cursor = BinaryCursor(bytes(range(10)))
    cursor.seek(10)
    assert cursor.remaining() == 0
    cursor.seek(2)
    cursor.skip(3)
    assert cursor.tell() == 5
    assert cursor.peek_byte_at(9) == 9
    assert cursor.tell() == 5

    with pytest.raises(OutOfBoundsError):
        cursor.seek(11)
    with pytest.raises(OutOfBoundsError):
        cursor.seek(-1)
    with pytest.raises(OutOfBoundsError):
        cursor.peek_byte_at(10)
    with pytest.raises(OutOfBoundsError):
        cursor.skip(6)
