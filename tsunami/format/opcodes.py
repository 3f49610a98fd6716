"""Opcode enumeration, operand layouts and the opcode byte transform.

Every opcode byte written to an instruction stream is permuted with
``(opcode * 227) % 256``.  The multiplier is odd, so the mapping is a bijection
over the byte range and is undone by multiplying with the modular inverse
``203``.  This is an obfuscation step private to this format, not a
cryptographic one, and no stock interpreter decodes it.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Dict, Tuple

from ..exceptions import EncodingError

OPCODE_MULTIPLIER = 227
OPCODE_INVERSE = 203


class LuauOpcode(IntEnum):
    NOP = 0
    LOADNIL = 1
    LOADB = 2
    LOADN = 3
    LOADK = 4
    MOVE = 5
    GETGLOBAL = 6
    SETGLOBAL = 7
    GETUPVAL = 8
    SETUPVAL = 9
    CLOSEUPVALS = 10
    GETIMPORT = 11
    GETTABLE = 12
    SETTABLE = 13
    GETTABLEKS = 14
    SETTABLEKS = 15
    NAMECALL = 16
    CALL = 17
    RETURN = 18
    JUMP = 19
    JUMPBACK = 20
    JUMPIF = 21
    JUMPIFNOT = 22
    JUMPIFEQ = 23
    JUMPIFLE = 24
    JUMPIFLT = 25
    JUMPIFNOTEQ = 26
    JUMPIFNOTLE = 27
    JUMPIFNOTLT = 28
    ADD = 29
    SUB = 30
    MUL = 31
    DIV = 32
    MOD = 33
    POW = 34
    ADDK = 35
    SUBK = 36
    MULK = 37
    DIVK = 38
    MODK = 39
    POWK = 40
    CONCAT = 41
    NOT = 42
    MINUS = 43
    LENGTH = 44
    NEWTABLE = 45
    DUPTABLE = 46
    SETLIST = 47
    FORNPREP = 48
    FORNLOOP = 49
    FORGLOOP = 50
    FORGPREP_INEXT = 51
    FORGPREP_NEXT = 52
    AND = 53
    ANDK = 54
    OR = 55
    ORK = 56
    COVERAGE = 57
    GETTABLEN = 58
    SETTABLEN = 59
    FASTCALL = 60
    FASTCALL1 = 61
    FASTCALL2 = 62
    FASTCALL2K = 63
    FASTCALL3 = 64
    FORGPREP = 65
    JUMPIFEQK = 66
    JUMPIFNOTEQK = 67
    LOADKX = 68
    FASTCALL2M = 69
    CAPTURE = 70
    JUMPX = 71
    FASTCALLM = 72


# Opcodes carrying a 16-bit immediate after their register operand.
DOUBLE_WORD_OPCODES = frozenset(
    {
        LuauOpcode.GETGLOBAL,
        LuauOpcode.SETGLOBAL,
        LuauOpcode.GETIMPORT,
        LuauOpcode.GETTABLEKS,
        LuauOpcode.SETTABLEKS,
        LuauOpcode.NAMECALL,
        LuauOpcode.JUMPIFEQ,
        LuauOpcode.JUMPIFLE,
        LuauOpcode.JUMPIFLT,
        LuauOpcode.JUMPIFNOTEQ,
        LuauOpcode.JUMPIFNOTLE,
        LuauOpcode.JUMPIFNOTLT,
        LuauOpcode.NEWTABLE,
        LuauOpcode.SETLIST,
        LuauOpcode.FORGLOOP,
        LuauOpcode.LOADKX,
        LuauOpcode.JUMPIFEQK,
        LuauOpcode.JUMPIFNOTEQK,
        LuauOpcode.FASTCALL2,
        LuauOpcode.FASTCALL2K,
    }
)


@dataclass(frozen=True)
class OpFormat:
    """Operand layout of one opcode.

    ``operands`` names the byte-sized fields in order.  When ``wide`` is set
    the final field ``D`` is a 16-bit little-endian immediate.
    """

    opcode: LuauOpcode
    operands: Tuple[str, ...]
    wide: bool = False

    @property
    def size(self) -> int:
        """Encoded size in bytes including the opcode byte."""

        if self.wide:
            return 1 + (len(self.operands) - 1) + 2
        return 1 + len(self.operands)


_SINGLE_DEFAULT = ("A", "B", "C")
_DOUBLE_DEFAULT = ("A", "D")

_OPERAND_OVERRIDES: Dict[LuauOpcode, Tuple[str, ...]] = {
    LuauOpcode.NOP: (),
    LuauOpcode.LOADNIL: ("A",),
    LuauOpcode.LOADN: ("A", "B"),
    LuauOpcode.LOADK: ("A", "B"),
    LuauOpcode.MOVE: ("A", "B"),
    LuauOpcode.RETURN: ("A", "B"),
    LuauOpcode.CLOSEUPVALS: ("A",),
    LuauOpcode.GETUPVAL: ("A", "B"),
    LuauOpcode.SETUPVAL: ("A", "B"),
    LuauOpcode.NOT: ("A", "B"),
    LuauOpcode.MINUS: ("A", "B"),
    LuauOpcode.LENGTH: ("A", "B"),
    LuauOpcode.COVERAGE: (),
}


def _build_formats() -> Dict[LuauOpcode, OpFormat]:
    formats: Dict[LuauOpcode, OpFormat] = {}
    for opcode in LuauOpcode:
        wide = opcode in DOUBLE_WORD_OPCODES
        operands = _OPERAND_OVERRIDES.get(opcode, _DOUBLE_DEFAULT if wide else _SINGLE_DEFAULT)
        formats[opcode] = OpFormat(opcode, operands, wide)
    return formats


OPCODE_FORMATS: Dict[LuauOpcode, OpFormat] = _build_formats()


def encode_opcode(opcode: int) -> int:
    """Return the byte written to the stream for the logical ``opcode``."""

    return (int(opcode) * OPCODE_MULTIPLIER) & 0xFF


def decode_opcode(encoded: int) -> int:
    """Invert :func:`encode_opcode`."""

    return (int(encoded) * OPCODE_INVERSE) & 0xFF


def is_double_word(opcode: int) -> bool:
    return opcode in DOUBLE_WORD_OPCODES


def opcode_format(opcode: int) -> OpFormat:
    """Return the :class:`OpFormat` for ``opcode``.

    Raises :class:`EncodingError` for values outside the enumeration.
    """

    try:
        return OPCODE_FORMATS[LuauOpcode(opcode)]
    except ValueError as exc:
        raise EncodingError(f"unknown opcode {opcode}") from exc


__all__ = [
    "DOUBLE_WORD_OPCODES",
    "LuauOpcode",
    "OPCODE_FORMATS",
    "OPCODE_INVERSE",
    "OPCODE_MULTIPLIER",
    "OpFormat",
    "decode_opcode",
    "encode_opcode",
    "is_double_word",
    "opcode_format",
]
