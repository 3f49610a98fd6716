from __future__ import annotations

from tsunami.compiler import Compiler
from tsunami.format.opcodes import LuauOpcode
from tsunami.format.reader import read_module
from tsunami.format.validator import validate_bytecode


def test_values_land_in_consecutive_registers() -> None:
    compiler = Compiler()
    assert compiler.push_nil() == 0
    assert compiler.push_boolean(True) == 1
    assert compiler.push_number(4.0) == 2
    assert compiler.push_string("name") == 3
    assert compiler.top == 4

    buffer = compiler.compile()
    assert validate_bytecode(buffer)

    image = read_module(buffer)
    assert image.main.max_stack_size == 4
    assert [c.value for c in image.constants] == [4.0, b"name"]
    assert [ins.fields()["A"] for ins in image.main.instructions] == [0, 1, 2, 3]


def test_push_array_uses_scratch_registers() -> None:
    compiler = Compiler()
    compiler.push_nil()
    table = compiler.push_array(["a", "b"])
    assert table == 1
    assert compiler.top == 2

    image = read_module(compiler.compile())
    assert image.main.max_stack_size == 4
    setlist = image.instructions_of(LuauOpcode.SETLIST)
    assert [ins.operands for ins in setlist] == [(1, 2)]


def test_empty_array_is_a_table() -> None:
    compiler = Compiler()
    compiler.push_array([])
    image = read_module(compiler.compile())
    assert [ins.opcode for ins in image.main.instructions] == [LuauOpcode.NEWTABLE]


def test_clear_resets_state() -> None:
    compiler = Compiler()
    compiler.push_string("x")
    compiler.clear()
    assert compiler.top == 0
    assert len(compiler.builder) == 0
    assert len(compiler.builder.pool) == 0


def test_listing() -> None:
    compiler = Compiler()
    compiler.push_string("hi")
    compiler.push_boolean(False)
    lines = compiler.listing()
    assert lines[0] == "; 1 constants, 2 instructions"
    assert lines[1] == 'K0    "hi"'
    assert lines[2].startswith("0000  LOADK")
    assert lines[3].split() == ["0001", "LOADB", "1", "0", "0"]
