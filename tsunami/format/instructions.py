"""Instruction encoding on top of the opcode layout table."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Sequence, Tuple

from ..exceptions import EncodingError, MalformedBytecodeError
from .opcodes import LuauOpcode, decode_opcode, encode_opcode, opcode_format


@dataclass(frozen=True)
class Instruction:
    """A logical opcode together with its operand values."""

    opcode: LuauOpcode
    operands: Tuple[int, ...] = ()

    @property
    def name(self) -> str:
        return self.opcode.name

    def fields(self) -> Dict[str, int]:
        """Return the operands keyed by their field names (``A``, ``B``, ...)."""

        layout = opcode_format(self.opcode).operands
        return dict(zip(layout, self.operands))

    def encode(self) -> bytes:
        return encode_instruction(self.opcode, self.operands)

    def render(self) -> str:
        if not self.operands:
            return self.name
        return f"{self.name:<10} " + " ".join(str(value) for value in self.operands)


def encode_instruction(opcode: int, operands: Sequence[int] = ()) -> bytes:
    """Return the encoded bytes for ``opcode`` with ``operands``.

    Byte fields are truncated to eight bits and the ``D`` immediate of
    double-word opcodes to sixteen bits.  Supplying the wrong number of
    operands raises :class:`EncodingError`.
    """

    layout = opcode_format(opcode)
    if len(operands) != len(layout.operands):
        raise EncodingError(
            f"{layout.opcode.name} takes {len(layout.operands)} operands, got {len(operands)}"
        )

    out = bytearray([encode_opcode(layout.opcode)])
    if layout.wide:
        *head, immediate = operands
        out.extend(int(value) & 0xFF for value in head)
        out.extend((int(immediate) & 0xFFFF).to_bytes(2, "little"))
    else:
        out.extend(int(value) & 0xFF for value in operands)
    return bytes(out)


def decode_instruction(data: bytes, offset: int = 0) -> Tuple[Instruction, int]:
    """Decode one instruction at ``offset`` and return it with the next offset."""

    if offset >= len(data):
        raise MalformedBytecodeError(f"truncated instruction at offset {offset}")
    logical = decode_opcode(data[offset])
    try:
        layout = opcode_format(logical)
    except EncodingError as exc:
        raise MalformedBytecodeError(
            f"unknown opcode byte 0x{data[offset]:02x} at offset {offset}"
        ) from exc

    end = offset + layout.size
    if end > len(data):
        raise MalformedBytecodeError(
            f"truncated {layout.opcode.name} at offset {offset}: need {layout.size} bytes"
        )
    body = data[offset + 1 : end]
    if layout.wide:
        operands = tuple(body[:-2]) + (int.from_bytes(body[-2:], "little"),)
    else:
        operands = tuple(body)
    return Instruction(layout.opcode, operands), end


__all__ = ["Instruction", "decode_instruction", "encode_instruction"]
