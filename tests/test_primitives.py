"""Tests for big-endian primitive reads and writes."""

import struct

import pytest

from scsyndef.errors import StringTooLong, Truncated
from scsyndef.primitives import (
    read_bytes,
    read_float,
    read_floats,
    read_int16,
    read_int32,
    read_pstring,
    read_uint8,
    to_float32,
    write_float,
    write_floats,
    write_int16,
    write_int32,
    write_pstring,
    write_uint8,
)


class TestReads:
    def test_int32_is_signed_big_endian(self):
        value, remainder = read_int32(b"\xff\xff\xff\xff\x01")
        assert value == -1
        assert bytes(remainder) == b"\x01"

    def test_int16_is_signed_big_endian(self):
        value, remainder = read_int16(b"\x01\x02")
        assert value == 0x0102
        assert bytes(remainder) == b""
        assert read_int16(b"\x80\x00")[0] == -32768

    def test_uint8(self):
        assert read_uint8(b"\xff")[0] == 255

    def test_float(self):
        value, remainder = read_float(struct.pack(">f", 0.5) + b"xy")
        assert value == 0.5
        assert bytes(remainder) == b"xy"

    def test_floats(self):
        data = struct.pack(">3f", 1.0, 2.0, 3.0) + b"!"
        values, remainder = read_floats(data, 3)
        assert values == (1.0, 2.0, 3.0)
        assert bytes(remainder) == b"!"

    def test_floats_negative_count_reads_nothing(self):
        values, remainder = read_floats(b"abcd", -2)
        assert values == ()
        assert bytes(remainder) == b"abcd"

    def test_pstring(self):
        value, remainder = read_pstring(b"\x05helloworld")
        assert value == "hello"
        assert bytes(remainder) == b"world"

    def test_pstring_empty(self):
        value, remainder = read_pstring(b"\x00rest")
        assert value == ""
        assert bytes(remainder) == b"rest"

    def test_pstring_raw_bytes(self):
        """Non-ASCII bytes are accepted without text validation."""
        value, _ = read_pstring(b"\x02\xff\xfe")
        assert value.encode("latin-1") == b"\xff\xfe"

    def test_reads_accept_memoryview(self):
        value, remainder = read_int32(memoryview(b"\x00\x00\x00\x07\x01"))
        assert value == 7
        assert bytes(remainder) == b"\x01"

    def test_read_bytes(self):
        value, remainder = read_bytes(b"SCgfmore", 4)
        assert value == b"SCgf"
        assert bytes(remainder) == b"more"


class TestTruncation:
    @pytest.mark.parametrize(
        "reader, data, needed",
        [
            (read_uint8, b"", 1),
            (read_int16, b"\x01", 2),
            (read_int32, b"\x01\x02\x03", 4),
            (read_float, b"", 4),
        ],
    )
    def test_short_reads_raise(self, reader, data, needed):
        with pytest.raises(Truncated) as exc_info:
            reader(data)
        assert exc_info.value.needed == needed
        assert exc_info.value.remaining == len(data)

    def test_floats_truncated(self):
        with pytest.raises(Truncated) as exc_info:
            read_floats(b"\x00" * 7, 2, "constants")
        assert exc_info.value.needed == 8
        assert exc_info.value.section == "constants"

    def test_pstring_payload_truncated(self):
        with pytest.raises(Truncated) as exc_info:
            read_pstring(b"\x05abc", "name")
        assert exc_info.value.section == "name"
        assert exc_info.value.needed == 6
        assert exc_info.value.remaining == 4

    def test_section_in_message(self):
        with pytest.raises(Truncated, match="ugen count"):
            read_int32(b"", "ugen count")


class TestWrites:
    def test_int32(self):
        assert write_int32(-1) == b"\xff\xff\xff\xff"
        assert write_int32(258) == b"\x00\x00\x01\x02"

    def test_int16(self):
        assert write_int16(2) == b"\x00\x02"

    def test_uint8(self):
        assert write_uint8(200) == b"\xc8"

    def test_float(self):
        assert write_float(1.0) == b"\x3f\x80\x00\x00"

    def test_floats(self):
        assert write_floats([1.0, 2.0]) == struct.pack(">2f", 1.0, 2.0)
        assert write_floats([]) == b""

    def test_pstring(self):
        assert write_pstring("SinOsc") == b"\x06SinOsc"

    def test_pstring_at_limit(self):
        encoded = write_pstring("x" * 255)
        assert encoded[0] == 255
        assert len(encoded) == 256

    def test_pstring_too_long(self):
        with pytest.raises(StringTooLong) as exc_info:
            write_pstring("x" * 256)
        assert exc_info.value.length == 256

    def test_string_too_long_is_value_error(self):
        with pytest.raises(ValueError):
            write_pstring("y" * 300)

    def test_to_float32(self):
        assert to_float32(0.2) != 0.2
        assert to_float32(0.2) == struct.unpack(">f", struct.pack(">f", 0.2))[0]
        assert to_float32(0.5) == 0.5

    def test_to_float32_shares_nan(self):
        a = to_float32(float("nan"))
        b = to_float32(struct.unpack(">f", struct.pack(">f", float("nan")))[0])
        assert a is b
        assert (a,) == (b,)
