from __future__ import annotations

import math
import struct

import pytest

from tsunami import builder
from tsunami.format.constants import ConstantType
from tsunami.format.header import HEADER_SIZE, Header, checksum
from tsunami.format.opcodes import LuauOpcode
from tsunami.format.reader import read_module
from tsunami.format.validator import validate_bytecode

ALL_BUILDS = {
    "nil": lambda: builder.create_push_nil(),
    "true": lambda: builder.create_push_boolean(True),
    "false": lambda: builder.create_push_boolean(False),
    "number": lambda: builder.create_push_number(3.14159),
    "integer": lambda: builder.create_push_integer(42),
    "string": lambda: builder.create_push_string("Hello World"),
    "empty_string": lambda: builder.create_push_string(""),
    "table": lambda: builder.create_push_table(5, 3),
    "array": lambda: builder.create_push_array(["sword", "shield", "potion"]),
    "dictionary": lambda: builder.create_push_dictionary({"name": "bob", "rank": "1"}),
    "multiple": lambda: builder.create_push_multiple(["player1", "100", "true", "3.14"]),
    "vector3": lambda: builder.create_push_vector3(1.0, 2.0, 3.0),
    "cframe": lambda: builder.create_push_cframe(0.0, 5.0, 0.0),
    "instance": lambda: builder.create_push_instance("Part", [("Name", "Base")]),
    "call": lambda: builder.create_function_call("print", ["hi", "there"]),
    "compiled": lambda: builder.compile_source("return 12"),
}


@pytest.mark.parametrize("kind", sorted(ALL_BUILDS))
def test_every_builder_produces_a_valid_module(kind: str) -> None:
    buffer = ALL_BUILDS[kind]()
    assert validate_bytecode(buffer)
    header = Header.unpack(buffer)
    assert header.version == 2
    assert header.size == len(buffer) - HEADER_SIZE
    assert header.hash == checksum(buffer[HEADER_SIZE:])
    image = read_module(buffer)
    assert len(image.protos) == 1
    assert image.main.size_p == 0
    assert image.main.size_k == len(image.constants)


def test_push_nil_exact_payload() -> None:
    buffer = builder.create_push_nil()
    assert buffer[HEADER_SIZE:] == bytes.fromhex("00 01 01 00 00 00 01 e3 00 00 00 00 00 00 00")
    assert buffer[:4] == b"\x02\x00\x08\x08"


def test_push_boolean_inline_value() -> None:
    image = read_module(builder.create_push_boolean(True))
    assert image.constants == []
    (instruction,) = image.main.instructions
    assert instruction.opcode is LuauOpcode.LOADB
    assert instruction.operands == (0, 1, 0)
    assert read_module(builder.create_push_boolean(False)).main.instructions[0].operands == (0, 0, 0)


def test_push_number_scenario() -> None:
    buffer = builder.create_push_number(3.14159)
    assert Header.unpack(buffer).version == 2
    image = read_module(buffer)
    numbers = image.constants_of(ConstantType.NUMBER)
    assert len(image.constants) == 1 and len(numbers) == 1
    assert struct.pack("<d", numbers[0].value) == struct.pack("<d", 3.14159)
    assert b"\x02" + struct.pack("<d", 3.14159) in buffer
    (instruction,) = image.main.instructions
    assert instruction.opcode is LuauOpcode.LOADN
    assert instruction.fields() == {"A": 0, "B": 0}
    assert validate_bytecode(buffer)


def test_push_integer_widens_to_number() -> None:
    assert builder.create_push_integer(7) == builder.create_push_number(7.0)


def test_push_string_uses_loadk() -> None:
    image = read_module(builder.create_push_string("hi"))
    assert [c.value for c in image.constants] == [b"hi"]
    assert image.main.instructions[0].opcode is LuauOpcode.LOADK
    assert image.main.max_stack_size == 1


def test_push_table_sizes() -> None:
    image = read_module(builder.create_push_table(5, 3))
    (instruction,) = image.main.instructions
    assert instruction.opcode is LuauOpcode.NEWTABLE
    assert instruction.operands == (0, 5 | (3 << 8))
    assert builder.create_push_table(5, 3)[HEADER_SIZE:].endswith(b"\xe7\x00\x05\x03" + b"\x00" * 6)


def test_empty_array_equals_empty_table() -> None:
    assert builder.create_push_array([]) == builder.create_push_table(0, 0)


def test_push_array_layout() -> None:
    values = ["sword", "shield", "potion"]
    image = read_module(builder.create_push_array(values))
    proto = image.main
    assert proto.max_stack_size == 1 + len(values)
    assert [c.value for c in image.constants] == [v.encode() for v in values]
    opcodes = [ins.opcode for ins in proto.instructions]
    assert opcodes == [LuauOpcode.NEWTABLE] + [LuauOpcode.LOADK] * 3 + [LuauOpcode.SETLIST]
    assert proto.instructions[0].operands == (0, 3)
    assert [ins.operands for ins in proto.instructions[1:4]] == [(1, 0), (2, 1), (3, 2)]
    assert proto.instructions[-1].operands == (0, 3)


def test_push_dictionary_layout() -> None:
    image = read_module(builder.create_push_dictionary([("a", "1"), ("b", "2")]))
    proto = image.main
    assert [c.value for c in image.constants] == [b"a", b"1", b"b", b"2"]
    assert proto.instructions[0].operands == (0, 2 << 8)
    assert [ins.opcode for ins in proto.instructions[1:]] == [
        LuauOpcode.LOADK,
        LuauOpcode.LOADK,
        LuauOpcode.SETTABLE,
    ] * 2
    assert proto.max_stack_size == 3
    assert builder.create_push_dictionary({}) == builder.create_push_table(0, 0)


def test_push_multiple_classifies_and_pools_by_category() -> None:
    image = read_module(builder.create_push_multiple(["player1", "100", "true", "3.14"]))
    kinds = [c.type for c in image.constants]
    assert kinds == [ConstantType.NUMBER, ConstantType.NUMBER, ConstantType.BOOLEAN, ConstantType.STRING]
    assert [c.value for c in image.constants] == [100.0, 3.14, True, b"player1"]

    proto = image.main
    assert proto.max_stack_size == 4
    rendered = [(ins.opcode, ins.operands) for ins in proto.instructions]
    assert rendered == [
        (LuauOpcode.LOADK, (0, 3)),
        (LuauOpcode.LOADN, (1, 0)),
        (LuauOpcode.LOADB, (2, 1, 0)),
        (LuauOpcode.LOADN, (3, 1)),
    ]


def test_push_multiple_empty_is_nil() -> None:
    assert builder.create_push_multiple([]) == builder.create_push_nil()


@pytest.mark.parametrize(
    "factory,array_size,hash_size",
    [
        (lambda: builder.create_push_vector2(1, 2), 2, 0),
        (lambda: builder.create_push_vector3(1, 2, 3), 3, 0),
        (lambda: builder.create_push_color3(1, 0, 0), 3, 0),
        (lambda: builder.create_push_udim(0.5, 10), 2, 0),
        (lambda: builder.create_push_udim2(0.5, 10, 0.5, 20), 4, 0),
        (lambda: builder.create_push_cframe(1, 2, 3), 12, 0),
        (lambda: builder.create_push_brick_color(194), 1, 0),
        (lambda: builder.create_push_instance("Part", {"Name": "x", "Anchored": "true"}), 0, 2),
    ],
)
def test_engine_types_degrade_to_sized_tables(factory, array_size: int, hash_size: int) -> None:
    assert factory() == builder.create_push_table(array_size, hash_size)


def test_function_call_layout() -> None:
    image = read_module(builder.create_function_call("print", ["a", "b"], num_returns=0))
    proto = image.main
    assert [c.value for c in image.constants] == [b"print", b"a", b"b"]
    assert [(ins.opcode, ins.operands) for ins in proto.instructions] == [
        (LuauOpcode.GETGLOBAL, (0, 0)),
        (LuauOpcode.LOADK, (1, 1)),
        (LuauOpcode.LOADK, (2, 2)),
        (LuauOpcode.CALL, (0, 3, 1)),
    ]
    assert proto.max_stack_size == 3


@pytest.mark.parametrize(
    "text,expected",
    [
        ("0", 0.0),
        ("100", 100.0),
        ("-2.5", -2.5),
        ("1e3", 1000.0),
        (".5", 0.5),
        ("5.", 5.0),
        ("  7", 7.0),
        ("0x10", 16.0),
        ("0x1p4", 16.0),
        ("-inf", -math.inf),
    ],
)
def test_parse_number_accepts_full_literals(text: str, expected: float) -> None:
    assert builder.parse_number(text) == expected


@pytest.mark.parametrize("text", ["", " ", "7 ", "1_000", "abc", "1e", "0x", "12abc", "--1", "nil"])
def test_parse_number_rejects_partial_literals(text: str) -> None:
    assert builder.parse_number(text) is None


def test_parse_number_nan() -> None:
    assert math.isnan(builder.parse_number("nan"))


@pytest.mark.parametrize(
    "source,kind,expected",
    [
        ("return nil", "nil", builder.create_push_nil()),
        ("return true", "boolean", builder.create_push_boolean(True)),
        ("return false", "boolean", builder.create_push_boolean(False)),
        ('return ""', "string", builder.create_push_string("")),
        ('return "hi"', "string", builder.create_push_string("hi")),
        ("return 0x1p99999", "number", builder.create_push_number(math.inf)),
    ],
)
def test_compile_literal_supported(source: str, kind: str, expected: bytes) -> None:
    result = builder.compile_literal(source)
    assert result.supported is True
    assert result.kind == kind
    assert result.buffer == expected
    assert builder.compile_source(source) == expected


@pytest.mark.parametrize(
    "source",
    ["", "return", 'return "', "return nil ", "return  nil", "garbage", "return 1 + 1"],
)
def test_compile_literal_falls_back_to_nil(source: str) -> None:
    result = builder.compile_literal(source)
    assert result.supported is False
    assert result.kind == "nil"
    assert result.value is None
    assert result.buffer == builder.create_push_nil()


@pytest.mark.parametrize(
    "text,expected",
    [("0x1p99999", math.inf), ("-0x1p99999", -math.inf), ("1e99999", math.inf)],
)
def test_parse_number_overflow_saturates(text: str, expected: float) -> None:
    assert builder.parse_number(text) == expected


def test_overflowing_hex_is_classified_as_number() -> None:
    image = read_module(builder.create_push_multiple(["0x1p99999"]))
    assert [c.type for c in image.constants] == [ConstantType.NUMBER]
    assert image.constants[0].value == math.inf


def test_push_string_accepts_lone_surrogate() -> None:
    buffer = builder.create_push_string("\udcff")
    assert validate_bytecode(buffer)
    assert read_module(buffer).constants[0].value == b"\xed\xb3\xbf"
