"""Exception types raised by scsyndef."""

from __future__ import annotations


class ScsyndefError(Exception):
    pass


class DecodeError(ScsyndefError):
    """Base class for failures while decoding SCgf bytes.

    ``section`` names the field being read when decoding stopped and
    ``remaining`` is the number of input bytes left when that read started.
    ``offset`` is the absolute byte offset of the failing read; it stays
    ``None`` until ``decode_file()`` or ``decode_synthdef()`` has located
    the error against its full input.
    """

    def __init__(
        self,
        message: str,
        section: str | None = None,
        remaining: int | None = None,
    ) -> None:
        super().__init__(message)
        self.section = section
        self.remaining = remaining
        self.offset: int | None = None

    def __str__(self) -> str:
        message = super().__str__()
        if self.offset is not None:
            return f"{message} (at byte {self.offset})"
        return message

    def locate(self, total_size: int) -> None:
        """Resolve ``offset`` from the size of the buffer decoding started on."""
        if self.offset is None and self.remaining is not None:
            self.offset = total_size - self.remaining


class Truncated(DecodeError):
    """Fewer bytes remain than the field being read requires."""

    def __init__(self, section: str, needed: int, remaining: int) -> None:
        super().__init__(
            f"truncated {section}: needed {needed} bytes, {remaining} remaining",
            section=section,
            remaining=remaining,
        )
        self.needed = needed


class UnsupportedVersion(DecodeError):
    def __init__(self, version: int, remaining: int | None = None) -> None:
        super().__init__(
            f"unsupported SCgf version {version}, only version 2 is supported",
            section="file version",
            remaining=remaining,
        )
        self.version = version


class InvalidUGenIndex(DecodeError):
    """An input spec discriminator is neither -1 nor a UGen index."""

    def __init__(
        self,
        value: int,
        section: str = "input spec",
        remaining: int | None = None,
    ) -> None:
        super().__init__(
            f"invalid UGen index {value} in {section}",
            section=section,
            remaining=remaining,
        )
        self.value = value


class StringTooLong(ScsyndefError, ValueError):
    def __init__(self, value: bytes) -> None:
        super().__init__(
            f"pstring of {len(value)} bytes exceeds the 255 byte limit: "
            f"{value[:16]!r}..."
        )
        self.length = len(value)


class ConfigError(ScsyndefError, ValueError):
    pass
