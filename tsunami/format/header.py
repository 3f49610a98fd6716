"""Fixed-layout module header and payload checksum."""

from __future__ import annotations

import struct
from dataclasses import dataclass, replace

from ..exceptions import MalformedBytecodeError

BYTECODE_VERSION = 0x02

# version, flags, typesize, numbersize, size, hash
_HEADER_STRUCT = struct.Struct("<BBBBII")
HEADER_SIZE = _HEADER_STRUCT.size

FNV_OFFSET_BASIS = 2166136261
FNV_PRIME = 16777619


def checksum(payload: bytes) -> int:
    """Return the 32-bit FNV-1a hash of ``payload``."""

    value = FNV_OFFSET_BASIS
    for byte in payload:
        value ^= byte
        value = (value * FNV_PRIME) & 0xFFFFFFFF
    return value


@dataclass(frozen=True)
class Header:
    version: int = BYTECODE_VERSION
    flags: int = 0
    typesize: int = 8
    numbersize: int = 8
    size: int = 0
    hash: int = 0

    def pack(self) -> bytes:
        return _HEADER_STRUCT.pack(
            self.version,
            self.flags,
            self.typesize,
            self.numbersize,
            self.size,
            self.hash,
        )

    @classmethod
    def unpack(cls, data: bytes) -> "Header":
        """Parse the first :data:`HEADER_SIZE` bytes of ``data``."""

        if len(data) < HEADER_SIZE:
            raise MalformedBytecodeError(
                f"buffer of {len(data)} bytes is shorter than the {HEADER_SIZE} byte header"
            )
        version, flags, typesize, numbersize, size, hash_ = _HEADER_STRUCT.unpack_from(data, 0)
        return cls(version, flags, typesize, numbersize, size, hash_)

    def sealed(self, payload: bytes) -> "Header":
        """Return a copy whose ``size`` and ``hash`` describe ``payload``."""

        return replace(self, size=len(payload), hash=checksum(payload))


__all__ = [
    "BYTECODE_VERSION",
    "FNV_OFFSET_BASIS",
    "FNV_PRIME",
    "HEADER_SIZE",
    "Header",
    "checksum",
]
