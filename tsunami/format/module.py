"""Module assembly: header, constant pool and one function prototype."""

from __future__ import annotations

import logging
from typing import Optional

from ..config import FormatConfig, get_config
from .constants import ConstantPool
from .header import BYTECODE_VERSION, HEADER_SIZE, Header
from .proto import FunctionProto
from .varint import encode_varint

LOG = logging.getLogger(__name__)


def default_header(config: Optional[FormatConfig] = None) -> Header:
    """Return an unsealed header carrying the configured format fields."""

    cfg = config or get_config()
    return Header(
        version=BYTECODE_VERSION,
        flags=cfg.flags,
        typesize=cfg.typesize,
        numbersize=cfg.numbersize,
    )


def assemble_module(
    pool: ConstantPool,
    proto: FunctionProto,
    *,
    header: Optional[Header] = None,
) -> bytes:
    """Serialise ``pool`` and ``proto`` into a sealed module buffer.

    A placeholder header is written first; once the payload is complete its
    ``size`` and ``hash`` fields are patched in place.
    """

    base = header or default_header()
    buffer = bytearray(base.pack())
    buffer += pool.encode()
    buffer += encode_varint(1)
    buffer += proto.encode()

    payload = bytes(buffer[HEADER_SIZE:])
    sealed = base.sealed(payload)
    buffer[:HEADER_SIZE] = sealed.pack()
    LOG.debug("assembled module: %d byte payload, hash 0x%08x", sealed.size, sealed.hash)
    return bytes(buffer)


__all__ = ["assemble_module", "default_header"]
