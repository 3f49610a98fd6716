from __future__ import annotations

import pytest

from tsunami.exceptions import EncodingError, MalformedBytecodeError
from tsunami.format.instructions import Instruction, decode_instruction, encode_instruction
from tsunami.format.opcodes import (
    DOUBLE_WORD_OPCODES,
    OPCODE_FORMATS,
    LuauOpcode,
    decode_opcode,
    encode_opcode,
    is_double_word,
    opcode_format,
)


def test_opcode_transform_is_a_bijection() -> None:
    images = {encode_opcode(value) for value in range(256)}
    assert len(images) == 256


def test_opcode_transform_inverse() -> None:
    for value in range(256):
        assert decode_opcode(encode_opcode(value)) == value
        assert encode_opcode(decode_opcode(value)) == value


def test_opcode_transform_known_values() -> None:
    assert encode_opcode(LuauOpcode.LOADNIL) == 0xE3
    assert encode_opcode(LuauOpcode.LOADB) == 0xC6
    assert encode_opcode(LuauOpcode.LOADN) == 0xA9
    assert encode_opcode(LuauOpcode.LOADK) == 0x8C
    assert encode_opcode(LuauOpcode.NEWTABLE) == 0xE7
    assert encode_opcode(LuauOpcode.SETLIST) == 0xAD


def test_enumeration_covers_all_formats() -> None:
    assert len(LuauOpcode) == 73
    assert set(OPCODE_FORMATS) == set(LuauOpcode)
    assert all(OPCODE_FORMATS[op].wide for op in DOUBLE_WORD_OPCODES)
    assert is_double_word(LuauOpcode.NEWTABLE)
    assert not is_double_word(LuauOpcode.LOADK)


def test_opcode_format_rejects_unknown_opcode() -> None:
    with pytest.raises(EncodingError):
        opcode_format(200)


@pytest.mark.parametrize(
    "opcode,operands,expected",
    [
        (LuauOpcode.LOADNIL, (0,), b"\xe3\x00"),
        (LuauOpcode.LOADB, (0, 1, 0), b"\xc6\x00\x01\x00"),
        (LuauOpcode.LOADK, (3, 7), b"\x8c\x03\x07"),
        (LuauOpcode.NEWTABLE, (0, 5 | (3 << 8)), b"\xe7\x00\x05\x03"),
        (LuauOpcode.GETGLOBAL, (1, 0x1234), bytes([encode_opcode(6), 1, 0x34, 0x12])),
    ],
)
def test_encode_instruction_layouts(opcode: LuauOpcode, operands: tuple, expected: bytes) -> None:
    assert encode_instruction(opcode, operands) == expected


def test_encode_instruction_truncates_fields() -> None:
    assert encode_instruction(LuauOpcode.MOVE, (256 + 2, 1)) == bytes([encode_opcode(5), 2, 1])


def test_encode_instruction_operand_count_mismatch() -> None:
    with pytest.raises(EncodingError):
        encode_instruction(LuauOpcode.LOADNIL, (0, 1))
    with pytest.raises(EncodingError):
        encode_instruction(LuauOpcode.LOADB, (0,))


def test_decode_instruction_round_trip() -> None:
    original = Instruction(LuauOpcode.SETLIST, (0, 3))
    decoded, offset = decode_instruction(original.encode() + b"\xff")
    assert decoded == original
    assert offset == 4
    assert decoded.fields() == {"A": 0, "D": 3}


def test_decode_instruction_truncated() -> None:
    with pytest.raises(MalformedBytecodeError):
        decode_instruction(encode_instruction(LuauOpcode.LOADB, (0, 1, 0))[:2])


def test_decode_instruction_unknown_opcode() -> None:
    # 100 is outside the enumeration, so its encoded byte cannot be decoded.
    with pytest.raises(MalformedBytecodeError):
        decode_instruction(bytes([encode_opcode(100), 0, 0, 0]))
