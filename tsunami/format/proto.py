"""Function prototypes and the instruction-level proto builder."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple, Union

from .constants import ConstantPool
from .instructions import Instruction
from .opcodes import LuauOpcode
from .varint import encode_varint

LOG = logging.getLogger(__name__)


@dataclass(frozen=True)
class FunctionProto:
    """One function unit: metadata, instruction stream and resource counts.

    ``line_info`` and ``debug_info`` are single raw bytes; every other field is
    written as a varint.
    """

    max_stack_size: int
    num_params: int = 0
    num_upvalues: int = 0
    is_vararg: bool = False
    instructions: Tuple[Instruction, ...] = ()
    size_k: int = 0
    size_p: int = 0
    line_defined: int = 0
    debug_name: int = 0
    line_info: int = 0
    debug_info: int = 0

    def encode(self) -> bytes:
        out = bytearray()
        out += encode_varint(self.max_stack_size)
        out += encode_varint(self.num_params)
        out += encode_varint(self.num_upvalues)
        out += encode_varint(1 if self.is_vararg else 0)
        out += encode_varint(len(self.instructions))
        for instruction in self.instructions:
            out += instruction.encode()
        out += encode_varint(self.size_k)
        out += encode_varint(self.size_p)
        out += encode_varint(self.line_defined)
        out += encode_varint(self.debug_name)
        out.append(self.line_info & 0xFF)
        out.append(self.debug_info & 0xFF)
        return bytes(out)


class ProtoBuilder:
    """Accumulate instructions for a single function prototype.

    Constant-loading helpers append to ``pool`` first and reference the new
    index.  Register and constant operands are not bounds checked; the builder
    only records the highest register touched so :meth:`build` can size the
    stack frame.
    """

    def __init__(self, pool: Optional[ConstantPool] = None) -> None:
        self.pool = pool if pool is not None else ConstantPool()
        self._instructions: List[Instruction] = []
        self._max_register = -1
        self.num_params = 0
        self.num_upvalues = 0
        self.is_vararg = False

    def __len__(self) -> int:
        return len(self._instructions)

    @property
    def instructions(self) -> Tuple[Instruction, ...]:
        return tuple(self._instructions)

    @property
    def max_register(self) -> int:
        return self._max_register

    def _touch(self, *registers: int) -> None:
        for register in registers:
            if register > self._max_register:
                self._max_register = register

    def emit(self, opcode: LuauOpcode, *operands: int) -> Instruction:
        instruction = Instruction(opcode, tuple(int(value) for value in operands))
        # Validate the operand count eagerly so errors point at the caller.
        instruction.encode()
        self._instructions.append(instruction)
        return instruction

    # --- primitive instruction builders ----------------------------------
    def load_nil(self, register: int) -> Instruction:
        self._touch(register)
        return self.emit(LuauOpcode.LOADNIL, register)

    def load_boolean(self, register: int, value: bool, jump: int = 0) -> Instruction:
        self._touch(register)
        return self.emit(LuauOpcode.LOADB, register, 1 if value else 0, jump)

    def load_number(self, register: int, value: float) -> Instruction:
        index = self.pool.add_number(value)
        return self.load_number_constant(register, index)

    def load_number_constant(self, register: int, index: int) -> Instruction:
        self._touch(register)
        return self.emit(LuauOpcode.LOADN, register, index)

    def load_string(self, register: int, value: Union[str, bytes]) -> Instruction:
        index = self.pool.add_string(value)
        return self.load_constant(register, index)

    def load_constant(self, register: int, index: int) -> Instruction:
        self._touch(register)
        return self.emit(LuauOpcode.LOADK, register, index)

    def move(self, target: int, source: int) -> Instruction:
        self._touch(target, source)
        return self.emit(LuauOpcode.MOVE, target, source)

    def new_table(self, register: int, array_size: int = 0, hash_size: int = 0) -> Instruction:
        self._touch(register)
        sizes = (array_size & 0xFF) | ((hash_size & 0xFF) << 8)
        return self.emit(LuauOpcode.NEWTABLE, register, sizes)

    def set_table(self, table: int, key: int, value: int) -> Instruction:
        self._touch(table, key, value)
        return self.emit(LuauOpcode.SETTABLE, table, key, value)

    def set_list(self, table: int, count: int, table_index: int = 0) -> Instruction:
        self._touch(table + count)
        packed = (count & 0xFF) | ((table_index & 0xFF) << 8)
        return self.emit(LuauOpcode.SETLIST, table, packed)

    def get_global(self, register: int, name: Union[str, bytes]) -> Instruction:
        index = self.pool.add_string(name)
        self._touch(register)
        return self.emit(LuauOpcode.GETGLOBAL, register, index)

    def call(self, function: int, arg_count: int, result_count: int) -> Instruction:
        self._touch(function + arg_count)
        return self.emit(LuauOpcode.CALL, function, arg_count + 1, result_count + 1)

    def return_(self, start: int, count: int) -> Instruction:
        self._touch(start + max(count - 1, 0))
        return self.emit(LuauOpcode.RETURN, start, count)

    # --- finalisation -----------------------------------------------------
    def build(self, *, max_stack_size: Optional[int] = None) -> FunctionProto:
        stack = self._max_register + 1 if max_stack_size is None else max_stack_size
        proto = FunctionProto(
            max_stack_size=max(stack, 0),
            num_params=self.num_params,
            num_upvalues=self.num_upvalues,
            is_vararg=self.is_vararg,
            instructions=tuple(self._instructions),
            size_k=len(self.pool),
        )
        LOG.debug(
            "built proto: %d instructions, %d constants, stack %d",
            len(proto.instructions),
            proto.size_k,
            proto.max_stack_size,
        )
        return proto


__all__ = ["FunctionProto", "ProtoBuilder"]
