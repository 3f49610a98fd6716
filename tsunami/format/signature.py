"""Recognise and strip the optional signed wrapper.

An external signer may prepend ``b"RBX2"`` followed by four little-endian
``u32`` fields.  This package never writes the wrapper.
"""

from __future__ import annotations

import struct
from typing import Optional, Tuple

SIGNATURE_MAGIC = b"RBX2"
_SIGNATURE_FIELDS = struct.Struct("<IIII")
SIGNATURE_SIZE = len(SIGNATURE_MAGIC) + _SIGNATURE_FIELDS.size
# Detection only requires this many bytes, fewer than the full wrapper.
MIN_SIGNED_LENGTH = 16


def has_signature(buffer: bytes) -> bool:
    return len(buffer) >= MIN_SIGNED_LENGTH and bytes(buffer[:4]) == SIGNATURE_MAGIC


def read_signature(buffer: bytes) -> Optional[Tuple[int, int, int, int]]:
    """Return the four signature fields, or ``None`` when absent or truncated."""

    if not has_signature(buffer) or len(buffer) < SIGNATURE_SIZE:
        return None
    return _SIGNATURE_FIELDS.unpack_from(bytes(buffer), len(SIGNATURE_MAGIC))


def decompress(buffer: bytes) -> bytes:
    """Return ``buffer`` without its signed wrapper.

    Buffers without the magic are returned unchanged.
    """

    if has_signature(buffer):
        return bytes(buffer[SIGNATURE_SIZE:])
    return buffer


__all__ = [
    "MIN_SIGNED_LENGTH",
    "SIGNATURE_MAGIC",
    "SIGNATURE_SIZE",
    "decompress",
    "has_signature",
    "read_signature",
]
