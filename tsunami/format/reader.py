"""Parse module buffers back into headers, constants and prototypes.

The reader is the structural counterpart of :mod:`tsunami.format.module`.  It
does not verify the payload checksum; :func:`validate_bytecode` covers that.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from typing import List, Tuple

from ..exceptions import MalformedBytecodeError
from ..utils.byteops import read_uint
from .constants import Constant, ConstantType
from .header import HEADER_SIZE, Header
from .instructions import Instruction, decode_instruction
from .opcodes import LuauOpcode
from .proto import FunctionProto
from .varint import decode_varint


@dataclass
class ModuleImage:
    """Decoded view of a module buffer."""

    header: Header
    constants: List[Constant] = field(default_factory=list)
    protos: List[FunctionProto] = field(default_factory=list)

    @property
    def main(self) -> FunctionProto:
        if not self.protos:
            raise MalformedBytecodeError("module does not contain a function prototype")
        return self.protos[0]

    def constants_of(self, kind: ConstantType) -> List[Constant]:
        return [constant for constant in self.constants if constant.type is kind]

    def instructions_of(self, opcode: LuauOpcode) -> List[Instruction]:
        return [ins for proto in self.protos for ins in proto.instructions if ins.opcode is opcode]


class _Cursor:
    def __init__(self, data: bytes, offset: int) -> None:
        self.data = data
        self.offset = offset

    def varint(self) -> int:
        value, self.offset = decode_varint(self.data, self.offset)
        return value

    def byte(self) -> int:
        value = read_uint(self.data, self.offset, 1)
        self.offset += 1
        return value

    def take(self, size: int) -> bytes:
        end = self.offset + size
        if end > len(self.data):
            raise MalformedBytecodeError(
                f"need {size} bytes at offset {self.offset}, buffer ends at {len(self.data)}"
            )
        chunk = bytes(self.data[self.offset : end])
        self.offset = end
        return chunk

    def instruction(self) -> Instruction:
        instruction, self.offset = decode_instruction(self.data, self.offset)
        return instruction


def _read_constant(cursor: _Cursor) -> Constant:
    start = cursor.offset
    tag = cursor.byte()
    if tag == ConstantType.NIL:
        return Constant.nil()
    if tag == ConstantType.BOOLEAN:
        return Constant.boolean(cursor.byte() != 0)
    if tag == ConstantType.NUMBER:
        (value,) = struct.unpack("<d", cursor.take(8))
        return Constant.number(value)
    if tag == ConstantType.STRING:
        length = cursor.varint()
        return Constant.string(cursor.take(length))
    raise MalformedBytecodeError(f"unsupported constant tag {tag} at offset {start}")


def _read_proto(cursor: _Cursor) -> FunctionProto:
    max_stack_size = cursor.varint()
    num_params = cursor.varint()
    num_upvalues = cursor.varint()
    is_vararg = cursor.varint() != 0
    count = cursor.varint()
    instructions: Tuple[Instruction, ...] = tuple(cursor.instruction() for _ in range(count))
    size_k = cursor.varint()
    size_p = cursor.varint()
    line_defined = cursor.varint()
    debug_name = cursor.varint()
    line_info = cursor.byte()
    debug_info = cursor.byte()
    return FunctionProto(
        max_stack_size=max_stack_size,
        num_params=num_params,
        num_upvalues=num_upvalues,
        is_vararg=is_vararg,
        instructions=instructions,
        size_k=size_k,
        size_p=size_p,
        line_defined=line_defined,
        debug_name=debug_name,
        line_info=line_info,
        debug_info=debug_info,
    )


def read_module(buffer: bytes) -> ModuleImage:
    """Decode ``buffer`` into a :class:`ModuleImage`.

    Raises :class:`MalformedBytecodeError` when the buffer is truncated, uses a
    reserved constant tag, contains an unknown opcode or has trailing bytes.
    """

    data = bytes(buffer)
    header = Header.unpack(data)
    cursor = _Cursor(data, HEADER_SIZE)

    constant_count = cursor.varint()
    constants = [_read_constant(cursor) for _ in range(constant_count)]
    function_count = cursor.varint()
    protos = [_read_proto(cursor) for _ in range(function_count)]

    if cursor.offset != len(data):
        raise MalformedBytecodeError(
            f"{len(data) - cursor.offset} trailing bytes after offset {cursor.offset}"
        )
    return ModuleImage(header=header, constants=constants, protos=protos)


__all__ = ["ModuleImage", "read_module"]
