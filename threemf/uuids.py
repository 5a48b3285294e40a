"""Random (version 4) UUID generation and UUID string validation."""

from __future__ import annotations

import os
from typing import BinaryIO, Optional

__all__ = ["InvalidUUIDError", "set_rand", "new", "validate"]

_HEX_DIGITS = frozenset(b"0123456789abcdefABCDEF")
_URN_PREFIX = b"urn:uuid:"
_DASH_POSITIONS = (8, 13, 18, 23)
_PAIR_OFFSETS = (0, 2, 4, 6, 9, 11, 14, 16, 19, 21, 24, 26, 28, 30, 32, 34)


class InvalidUUIDError(ValueError):
    """Raised when a string is not a valid UUID."""


class _RandomSource:
    """Supplies random bytes from a reader or from the operating system."""

    def __init__(self) -> None:
        self.reader: Optional[BinaryIO] = None

    def read(self, size: int) -> bytes:
        if self.reader is None:
            return os.urandom(size)
        chunks = bytearray()
        while len(chunks) < size:
            chunk = self.reader.read(size - len(chunks))
            if not chunk:
                raise EOFError("random source returned too few bytes")
            chunks.extend(chunk)
        return bytes(chunks)


_source = _RandomSource()


def set_rand(reader: Optional[BinaryIO]) -> None:
    """Use ``reader`` (anything with ``read(n)``) as the random source.

    Passing ``None`` restores the operating system's random generator.
    """
    if reader is not None and not callable(getattr(reader, "read", None)):
        raise TypeError("random source must provide a read(size) method")
    _source.reader = reader


def new() -> str:
    """Return a new random (version 4) UUID in its canonical textual form."""
    raw = bytearray(_source.read(16))
    raw[6] = (raw[6] & 0x0F) | 0x40
    raw[8] = (raw[8] & 0x3F) | 0x80
    h = raw.hex()
    return f"{h[:8]}-{h[8:12]}-{h[12:16]}-{h[16:20]}-{h[20:]}"


def _is_hex_pair(data: bytes, offset: int) -> bool:
    return data[offset] in _HEX_DIGITS and data[offset + 1] in _HEX_DIGITS


def validate(s: str) -> None:
    """Raise :class:`InvalidUUIDError` unless ``s`` is a valid UUID.

    Accepted forms are ``xxxxxxxx-xxxx-xxxx-xxxx-xxxxxxxxxxxx``, the same
    prefixed by ``urn:uuid:``, the same enclosed in braces and 32 raw hex digits.
    """
    data = s.encode("utf-8", "surrogateescape")
    length = len(data)
    if length == 36:
        pass
    elif length == 36 + 9:
        prefix = data[:9]
        if prefix.lower() != _URN_PREFIX:
            shown = prefix.decode("utf-8", "replace")
            raise InvalidUUIDError(f"invalid urn prefix: {shown!r}")
        data = data[9:]
    elif length == 36 + 2:
        data = data[1:]
    elif length == 32:
        if not all(_is_hex_pair(data, offset) for offset in range(0, 32, 2)):
            raise InvalidUUIDError("invalid UUID format")
        return
    else:
        raise InvalidUUIDError(f"invalid UUID length: {length}")

    if any(data[pos] != ord("-") for pos in _DASH_POSITIONS):
        raise InvalidUUIDError("invalid UUID format")
    if not all(_is_hex_pair(data, offset) for offset in _PAIR_OFFSETS):
        raise InvalidUUIDError("invalid UUID format")