"""Header level integrity checks for module buffers."""

from __future__ import annotations

import logging

from .header import BYTECODE_VERSION, HEADER_SIZE, Header, checksum

LOG = logging.getLogger(__name__)


def validate_bytecode(buffer: object) -> bool:
    """Return ``True`` when ``buffer`` carries a consistent header.

    The check covers the header length, the format version, the declared
    payload size and the payload checksum.  Constants and instructions are
    not inspected.  Malformed input is reported as ``False``, never raised.
    """

    if not isinstance(buffer, (bytes, bytearray, memoryview)):
        LOG.debug("rejecting %s: not a byte buffer", type(buffer).__name__)
        return False
    data = bytes(buffer)
    if len(data) < HEADER_SIZE:
        LOG.debug("rejecting buffer: %d bytes is shorter than the header", len(data))
        return False

    header = Header.unpack(data)
    if header.version != BYTECODE_VERSION:
        LOG.debug("rejecting buffer: version 0x%02x", header.version)
        return False

    payload = data[HEADER_SIZE:]
    if header.size != len(payload):
        LOG.debug("rejecting buffer: header size %d, payload %d", header.size, len(payload))
        return False

    actual = checksum(payload)
    if header.hash != actual:
        LOG.debug("rejecting buffer: hash 0x%08x, computed 0x%08x", header.hash, actual)
        return False
    return True


__all__ = ["validate_bytecode"]
