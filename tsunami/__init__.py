"""Build, validate and inspect minimal stack-machine bytecode modules."""

from .builder import (
    CompileResult,
    compile_literal,
    compile_source,
    create_function_call,
    create_push_array,
    create_push_boolean,
    create_push_brick_color,
    create_push_cframe,
    create_push_color3,
    create_push_dictionary,
    create_push_instance,
    create_push_integer,
    create_push_multiple,
    create_push_nil,
    create_push_number,
    create_push_string,
    create_push_table,
    create_push_udim,
    create_push_udim2,
    create_push_vector2,
    create_push_vector3,
)
from .cache import BytecodeCache
from .compiler import Compiler
from .diagnostics import get_bytecode_info, hex_dump
from .exceptions import BytecodeError, EncodingError, MalformedBytecodeError
from .format import decompress, read_module, validate_bytecode
from .pusher import BytecodePusher, Executor

__version__ = "0.1.0"

__all__ = [
    "BytecodeCache",
    "BytecodeError",
    "BytecodePusher",
    "CompileResult",
    "Compiler",
    "EncodingError",
    "Executor",
    "MalformedBytecodeError",
    "compile_literal",
    "compile_source",
    "create_function_call",
    "create_push_array",
    "create_push_boolean",
    "create_push_brick_color",
    "create_push_cframe",
    "create_push_color3",
    "create_push_dictionary",
    "create_push_instance",
    "create_push_integer",
    "create_push_multiple",
    "create_push_nil",
    "create_push_number",
    "create_push_string",
    "create_push_table",
    "create_push_udim",
    "create_push_udim2",
    "create_push_vector2",
    "create_push_vector3",
    "decompress",
    "get_bytecode_info",
    "hex_dump",
    "read_module",
    "validate_bytecode",
]
