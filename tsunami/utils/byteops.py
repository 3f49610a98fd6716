"""Helpers for reading packed little-endian fields and chunking buffers."""

from __future__ import annotations

from typing import Iterable, Literal

from ..exceptions import MalformedBytecodeError

Endian = Literal["little", "big"]


def read_uint(data: bytes, offset: int, size: int, *, endian: Endian = "little") -> int:
    """Return an unsigned integer read from ``data`` starting at ``offset``.

    Unlike a lenient reader, a truncated field raises
    :class:`MalformedBytecodeError` so callers never see padded values.
    """

    if size <= 0:
        return 0
    end = offset + size
    chunk = data[offset:end]
    if offset < 0 or len(chunk) < size:
        raise MalformedBytecodeError(
            f"need {size} bytes at offset {offset}, only {max(0, len(data) - offset)} available"
        )
    return int.from_bytes(chunk, endian, signed=False)


def iter_words(data: bytes, size: int) -> Iterable[tuple[int, bytes]]:
    """Yield ``(offset, word_bytes)`` chunks of ``size`` bytes."""

    if size <= 0:
        return
    for offset in range(0, len(data), size):
        yield offset, data[offset : offset + size]


__all__ = ["read_uint", "iter_words"]
