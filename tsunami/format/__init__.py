"""Binary module format: varints, constants, instructions, header and checks."""

from .constants import Constant, ConstantPool, ConstantType
from .header import BYTECODE_VERSION, HEADER_SIZE, Header, checksum
from .instructions import Instruction, decode_instruction, encode_instruction
from .module import assemble_module, default_header
from .opcodes import LuauOpcode, decode_opcode, encode_opcode, is_double_word
from .proto import FunctionProto, ProtoBuilder
from .reader import ModuleImage, read_module
from .signature import SIGNATURE_MAGIC, SIGNATURE_SIZE, decompress, has_signature, read_signature
from .validator import validate_bytecode
from .varint import decode_varint, encode_varint

__all__ = [
    "BYTECODE_VERSION",
    "Constant",
    "ConstantPool",
    "ConstantType",
    "FunctionProto",
    "HEADER_SIZE",
    "Header",
    "Instruction",
    "LuauOpcode",
    "ModuleImage",
    "ProtoBuilder",
    "SIGNATURE_MAGIC",
    "SIGNATURE_SIZE",
    "assemble_module",
    "checksum",
    "decode_instruction",
    "decode_opcode",
    "decode_varint",
    "decompress",
    "default_header",
    "encode_instruction",
    "encode_opcode",
    "encode_varint",
    "has_signature",
    "is_double_word",
    "read_module",
    "read_signature",
    "validate_bytecode",
]
