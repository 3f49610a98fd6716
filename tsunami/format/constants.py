"""Tagged constants and the ordered constant pool."""

from __future__ import annotations

import math
import struct
from dataclasses import dataclass
from enum import IntEnum
from typing import Iterator, List, Union

from ..exceptions import EncodingError
from .varint import encode_varint

ConstantValue = Union[None, bool, float, bytes]


class ConstantType(IntEnum):
    """Tag byte written in front of every pool entry."""

    NIL = 0
    BOOLEAN = 1
    NUMBER = 2
    STRING = 3
    IMPORT = 4
    TABLE = 5
    CLOSURE = 6


# Tags the encoder knows how to write.  The remaining ones are reserved.
ENCODABLE_TYPES = frozenset(
    {ConstantType.NIL, ConstantType.BOOLEAN, ConstantType.NUMBER, ConstantType.STRING}
)


@dataclass(frozen=True)
class Constant:
    """An immutable pool entry."""

    type: ConstantType
    value: ConstantValue = None

    @classmethod
    def nil(cls) -> "Constant":
        return cls(ConstantType.NIL)

    @classmethod
    def boolean(cls, value: bool) -> "Constant":
        return cls(ConstantType.BOOLEAN, bool(value))

    @classmethod
    def number(cls, value: float) -> "Constant":
        return cls(ConstantType.NUMBER, float(value))

    @classmethod
    def string(cls, value: Union[str, bytes, bytearray]) -> "Constant":
        if isinstance(value, str):
            # lone surrogates are kept as their raw UTF-8 style bytes
            raw = value.encode("utf-8", errors="surrogatepass")
        else:
            raw = bytes(value)
        return cls(ConstantType.STRING, raw)

    def encode(self) -> bytes:
        """Return the tag byte followed by the tag specific payload."""

        tag = bytes([int(self.type)])
        if self.type is ConstantType.NIL:
            return tag
        if self.type is ConstantType.BOOLEAN:
            return tag + (b"\x01" if self.value else b"\x00")
        if self.type is ConstantType.NUMBER:
            return tag + struct.pack("<d", self.value)
        if self.type is ConstantType.STRING:
            raw = self.value if isinstance(self.value, bytes) else b""
            return tag + encode_varint(len(raw)) + raw
        raise EncodingError(f"constant type {self.type.name} cannot be encoded")

    def describe(self) -> str:
        """Return a short human readable rendering used by diagnostics."""

        if self.type is ConstantType.NIL:
            return "nil"
        if self.type is ConstantType.BOOLEAN:
            return "true" if self.value else "false"
        if self.type is ConstantType.NUMBER:
            number = float(self.value)  # type: ignore[arg-type]
            if math.isfinite(number) and number.is_integer():
                return str(int(number))
            return repr(number)
        if self.type is ConstantType.STRING:
            raw = self.value if isinstance(self.value, bytes) else b""
            return '"' + raw.decode("utf-8", errors="backslashreplace") + '"'
        return self.type.name.lower()


class ConstantPool:
    """Append-only, ordered collection of constants.

    Entries are never deduplicated; the index returned by :meth:`append` is the
    position instructions use to reference the constant.
    """

    def __init__(self) -> None:
        self._entries: List[Constant] = []

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[Constant]:
        return iter(self._entries)

    def __getitem__(self, index: int) -> Constant:
        return self._entries[index]

    def append(self, constant: Constant) -> int:
        if constant.type not in ENCODABLE_TYPES:
            raise EncodingError(f"constant type {constant.type.name} is reserved")
        self._entries.append(constant)
        return len(self._entries) - 1

    def add_nil(self) -> int:
        return self.append(Constant.nil())

    def add_boolean(self, value: bool) -> int:
        return self.append(Constant.boolean(value))

    def add_number(self, value: float) -> int:
        return self.append(Constant.number(value))

    def add_string(self, value: Union[str, bytes, bytearray]) -> int:
        return self.append(Constant.string(value))

    def entries(self) -> List[Constant]:
        return list(self._entries)

    def encode(self) -> bytes:
        """Return ``varint(count)`` followed by every encoded entry."""

        out = bytearray(encode_varint(len(self._entries)))
        for entry in self._entries:
            out += entry.encode()
        return bytes(out)


__all__ = ["Constant", "ConstantPool", "ConstantType", "ConstantValue", "ENCODABLE_TYPES"]
