"""Memoisation of scalar push modules."""

from __future__ import annotations

import logging
import struct
from dataclasses import dataclass
from typing import Callable, Dict, Generic, Hashable, TypeVar, Union

from .builder import create_push_boolean, create_push_number, create_push_string

LOG = logging.getLogger(__name__)

K = TypeVar("K", bound=Hashable)


@dataclass
class CacheStats:
    hits: int = 0
    misses: int = 0
    entries: int = 0

    def as_dict(self) -> Dict[str, int]:
        return {"hits": self.hits, "misses": self.misses, "entries": self.entries}


class _Memo(Generic[K]):
    def __init__(self, name: str, build: Callable[[K], bytes]) -> None:
        self.name = name
        self._build = build
        self._entries: Dict[K, bytes] = {}
        self.hits = 0
        self.misses = 0

    def get(self, key: K, value: object) -> bytes:
        cached = self._entries.get(key)
        if cached is not None:
            self.hits += 1
            return cached
        self.misses += 1
        buffer = self._build(value)  # type: ignore[arg-type]
        self._entries[key] = buffer
        LOG.debug("cached %s module for %r", self.name, value)
        return buffer

    def clear(self) -> None:
        self._entries.clear()
        self.hits = 0
        self.misses = 0

    def stats(self) -> CacheStats:
        return CacheStats(self.hits, self.misses, len(self._entries))


def _number_key(value: float) -> bytes:
    # Keyed on the IEEE bit pattern so -0.0 and NaN get their own entries.
    return struct.pack("<d", value)


class BytecodeCache:
    """Per-value cache of boolean, number, string and integer modules.

    The four maps are independent: ``get_integer(1)`` and ``get_number(1.0)``
    build separate (identical) entries.  Instances are not thread safe;
    callers sharing one across threads must serialise access.
    """

    def __init__(self) -> None:
        self._booleans: _Memo[bool] = _Memo("boolean", create_push_boolean)
        self._numbers: _Memo[bytes] = _Memo("number", create_push_number)
        self._strings: _Memo[Union[str, bytes]] = _Memo("string", create_push_string)
        self._integers: _Memo[int] = _Memo("integer", lambda value: create_push_number(float(value)))

    def get_boolean(self, value: bool) -> bytes:
        flag = bool(value)
        return self._booleans.get(flag, flag)

    def get_number(self, value: float) -> bytes:
        number = float(value)
        return self._numbers.get(_number_key(number), number)

    def get_string(self, value: Union[str, bytes]) -> bytes:
        return self._strings.get(value, value)

    def get_integer(self, value: int) -> bytes:
        integer = int(value)
        return self._integers.get(integer, integer)

    def clear(self) -> None:
        for memo in self._memos():
            memo.clear()

    def stats(self) -> Dict[str, CacheStats]:
        return {memo.name: memo.stats() for memo in self._memos()}

    def __len__(self) -> int:
        return sum(memo.stats().entries for memo in self._memos())

    def _memos(self):
        return (self._booleans, self._numbers, self._strings, self._integers)


__all__ = ["BytecodeCache", "CacheStats"]
