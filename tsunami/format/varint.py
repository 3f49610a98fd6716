"""Unsigned LEB128-style variable length integers.

Each byte carries seven value bits, least significant group first.  Bit 7 is
set on every byte except the last one.
"""

from __future__ import annotations

from typing import Tuple

from ..exceptions import EncodingError, MalformedBytecodeError

MAX_VARINT = 0xFFFFFFFF
# 32 bits need at most five 7-bit groups.
MAX_VARINT_BYTES = 5


def encode_varint(value: int) -> bytes:
    """Return the varint encoding of the unsigned 32-bit ``value``."""

    if value < 0 or value > MAX_VARINT:
        raise EncodingError(f"varint out of range: {value}")
    out = bytearray()
    while True:
        byte = value & 0x7F
        value >>= 7
        if value:
            out.append(byte | 0x80)
        else:
            out.append(byte)
            return bytes(out)


def decode_varint(data: bytes, offset: int = 0) -> Tuple[int, int]:
    """Decode a varint at ``offset`` and return ``(value, next_offset)``."""

    result = 0
    shift = 0
    position = offset
    while True:
        if position >= len(data):
            raise MalformedBytecodeError(f"truncated varint at offset {offset}")
        byte = data[position]
        position += 1
        result |= (byte & 0x7F) << shift
        if not byte & 0x80:
            return result, position
        shift += 7
        if position - offset >= MAX_VARINT_BYTES:
            raise MalformedBytecodeError(f"varint at offset {offset} exceeds 32 bits")


__all__ = ["MAX_VARINT", "encode_varint", "decode_varint"]
