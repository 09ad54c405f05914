"""Big-endian primitive encode/decode for the SCgf binary format.

Readers take a buffer and return ``(value, remainder)``. They raise
``Truncated`` when the buffer is shorter than the field. Writers return
``bytes``.
"""

from __future__ import annotations

import struct
from collections.abc import Iterable
from typing import Union

from .errors import StringTooLong, Truncated

Buffer = Union[bytes, bytearray, memoryview]

# latin-1 maps every byte to exactly one code point, so decoded names
# re-encode to the original bytes.
STRING_ENCODING = "latin-1"
MAXIMUM_PSTRING_LENGTH = 255

_UINT8 = struct.Struct(">B")
_INT16 = struct.Struct(">h")
_INT32 = struct.Struct(">i")
_FLOAT = struct.Struct(">f")

# One shared object per float32 NaN bit pattern, so tuples holding NaN
# compare equal.
_NANS: dict[bytes, float] = {}


def _read(format_: struct.Struct, data: Buffer, section: str) -> tuple[int, Buffer]:
    if len(data) < format_.size:
        raise Truncated(section, format_.size, len(data))
    return format_.unpack_from(data)[0], data[format_.size :]


def read_bytes(data: Buffer, size: int, section: str = "bytes") -> tuple[bytes, Buffer]:
    if len(data) < size:
        raise Truncated(section, size, len(data))
    return bytes(data[:size]), data[size:]


def read_uint8(data: Buffer, section: str = "uint8") -> tuple[int, Buffer]:
    return _read(_UINT8, data, section)


def read_int16(data: Buffer, section: str = "int16") -> tuple[int, Buffer]:
    return _read(_INT16, data, section)


def read_int32(data: Buffer, section: str = "int32") -> tuple[int, Buffer]:
    return _read(_INT32, data, section)


def read_float(data: Buffer, section: str = "float32") -> tuple[float, Buffer]:
    if len(data) < _FLOAT.size:
        raise Truncated(section, _FLOAT.size, len(data))
    return _FLOAT.unpack_from(data)[0], data[_FLOAT.size :]


def read_floats(
    data: Buffer, count: int, section: str = "float32 array"
) -> tuple[tuple[float, ...], Buffer]:
    """Read ``count`` consecutive float32 values.

    A negative count reads nothing.
    """
    count = max(count, 0)
    size = _FLOAT.size * count
    if len(data) < size:
        raise Truncated(section, size, len(data))
    return struct.unpack_from(f">{count}f", data), data[size:]


def read_pstring(data: Buffer, section: str = "pstring") -> tuple[str, Buffer]:
    """Read a uint8 length followed by that many raw bytes."""
    length, remainder = read_uint8(data, f"{section} length")
    if len(remainder) < length:
        # Report against the start of the pstring, not its payload.
        raise Truncated(section, length + 1, len(data))
    return str(remainder[:length], STRING_ENCODING), remainder[length:]


def write_uint8(value: int) -> bytes:
    return _UINT8.pack(value)


def write_int16(value: int) -> bytes:
    return _INT16.pack(value)


def write_int32(value: int) -> bytes:
    return _INT32.pack(value)


def write_float(value: float) -> bytes:
    return _FLOAT.pack(value)


def write_floats(values: Iterable[float]) -> bytes:
    return b"".join(_FLOAT.pack(value) for value in values)


def write_pstring(value: str) -> bytes:
    encoded = value.encode(STRING_ENCODING)
    if len(encoded) > MAXIMUM_PSTRING_LENGTH:
        raise StringTooLong(encoded)
    return _UINT8.pack(len(encoded)) + encoded


def to_float32(value: float) -> float:
    """Narrow a Python float to the nearest IEEE-754 single-precision value.

    NaNs with the same float32 bit pattern narrow to the same object.
    """
    narrowed = _FLOAT.unpack(_FLOAT.pack(value))[0]
    if narrowed != narrowed:
        return _NANS.setdefault(_FLOAT.pack(narrowed), narrowed)
    return narrowed
