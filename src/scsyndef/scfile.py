"""The ``.scsyndef`` file container: SCgf header plus one or more SynthDefs."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from pathlib import Path

from .errors import DecodeError, UnsupportedVersion
from .primitives import (
    Buffer,
    read_bytes,
    read_int16,
    read_int32,
    write_int16,
    write_int32,
)
from .synthdef import (
    DEFAULT_DECODE_OPTIONS,
    DecodeOptions,
    SynthDef,
    _decode_synthdef,
    encode_synthdef,
)

logger = logging.getLogger(__name__)

MAGIC = b"SCgf"
FILE_VERSION = 2


@dataclass(frozen=True, repr=False)
class SynthDefFile:
    """An SCgf version 2 container holding SynthDefs in file order.

    ``magic`` is kept as decoded so that re-encoding reproduces the input.
    """

    synthdefs: tuple[SynthDef, ...] = field(default=())
    magic: bytes = MAGIC
    version: int = FILE_VERSION

    def __post_init__(self) -> None:
        if len(self.magic) != 4:
            raise ValueError(f"magic must be 4 bytes, got {self.magic!r}")
        if self.version != FILE_VERSION:
            raise ValueError(f"only version {FILE_VERSION} is supported")
        synthdefs = tuple(self.synthdefs)
        for synthdef in synthdefs:
            if not isinstance(synthdef, SynthDef):
                raise TypeError(f"Expected SynthDef, got {synthdef!r}")
        object.__setattr__(self, "synthdefs", synthdefs)
        object.__setattr__(self, "magic", bytes(self.magic))

    def __repr__(self) -> str:
        names = ", ".join(synthdef.name for synthdef in self.synthdefs)
        return f"<SynthDefFile: {names}>"

    def __len__(self) -> int:
        return len(self.synthdefs)

    def __iter__(self) -> Iterator[SynthDef]:
        return iter(self.synthdefs)

    def __getitem__(self, name: str) -> SynthDef:
        """Return the first SynthDef called ``name``."""
        for synthdef in self.synthdefs:
            if synthdef.name == name:
                return synthdef
        raise KeyError(name)

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(synthdef.name for synthdef in self.synthdefs)

    @classmethod
    def from_bytes(
        cls, data: Buffer, options: DecodeOptions | None = None
    ) -> SynthDefFile:
        return decode_file(data, options)

    def to_bytes(self) -> bytes:
        return encode_file(self)


def decode_file(data: Buffer, options: DecodeOptions | None = None) -> SynthDefFile:
    """Decode an SCgf file image.

    The version is checked before any SynthDef bytes are read. Any
    ``DecodeError`` aborts the whole file; its ``offset`` is the absolute
    position of the failing read in ``data``. Bytes after the last declared
    SynthDef are ignored.
    """
    options = options or DEFAULT_DECODE_OPTIONS
    buffer = memoryview(data)
    try:
        magic, remainder = read_bytes(buffer, 4, "file magic")
        version_start = remainder
        version, remainder = read_int32(remainder, "file version")
        if version != FILE_VERSION:
            raise UnsupportedVersion(version, remaining=len(version_start))
        count, remainder = read_int16(remainder, "synthdef count")
        synthdefs = []
        for position in range(count):
            synthdef, remainder = _decode_synthdef(remainder, options, position)
            synthdefs.append(synthdef)
    except DecodeError as error:
        error.locate(len(buffer))
        logger.debug("SCgf decode failed at byte %s: %s", error.offset, error)
        raise
    if len(remainder):
        logger.debug("Ignoring %d trailing bytes after SynthDefs", len(remainder))
    logger.debug(
        "Decoded %d SynthDefs: %s",
        len(synthdefs),
        ", ".join(synthdef.name for synthdef in synthdefs),
    )
    return SynthDefFile(tuple(synthdefs), magic=magic)


def encode_file(synthdefs: SynthDefFile | SynthDef | Iterable[SynthDef]) -> bytes:
    """Encode a SynthDefFile, a single SynthDef, or several SynthDefs.

    The header count is always taken from the number of definitions given.
    """
    magic = MAGIC
    if isinstance(synthdefs, SynthDefFile):
        magic = synthdefs.magic
        synthdefs_ = synthdefs.synthdefs
    elif isinstance(synthdefs, SynthDef):
        synthdefs_ = (synthdefs,)
    else:
        synthdefs_ = tuple(synthdefs)
    return b"".join(
        [
            magic,
            write_int32(FILE_VERSION),
            write_int16(len(synthdefs_)),
            encode_synthdef(synthdefs_),
        ]
    )


def load_file(
    path: str | os.PathLike[str], options: DecodeOptions | None = None
) -> SynthDefFile:
    """Read and decode a ``.scsyndef`` file."""
    path = Path(path)
    logger.debug("Loading SynthDefs from %s", path)
    return decode_file(path.read_bytes(), options)


def load_synthdefs(
    path: str | os.PathLike[str], options: DecodeOptions | None = None
) -> tuple[SynthDef, ...]:
    """Read a ``.scsyndef`` file and return only its SynthDefs."""
    return load_file(path, options).synthdefs


def save_file(
    path: str | os.PathLike[str],
    synthdefs: SynthDefFile | SynthDef | Iterable[SynthDef],
) -> Path:
    """Encode ``synthdefs`` and write them to ``path``. Returns the path."""
    path = Path(path)
    path.write_bytes(encode_file(synthdefs))
    logger.debug("Wrote SynthDefs to %s", path)
    return path
