"""High level builders producing one-function modules.

Every ``create_push_*`` helper returns a sealed module buffer whose single
prototype leaves the requested value in register 0 when an external loader
runs it.  All builders are total over their inputs.
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from .format.constants import ConstantPool
from .format.module import assemble_module
from .format.proto import ProtoBuilder

LOG = logging.getLogger(__name__)

Pairs = Union[Mapping[str, str], Iterable[Tuple[str, str]]]

# C ``isspace`` characters skipped by ``strtod`` before a number.
_LEADING_SPACE = " \t\n\v\f\r"
_DECIMAL_RE = re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")
_HEX_RE = re.compile(r"[+-]?0[xX](?:[0-9a-fA-F]+\.?[0-9a-fA-F]*|\.[0-9a-fA-F]+)(?:[pP][+-]?[0-9]+)?")
_SPECIAL_RE = re.compile(r"[+-]?(?:inf(?:inity)?|nan)", re.IGNORECASE)

_RETURN_PREFIX = "return "


def parse_number(text: str) -> Optional[float]:
    """Parse ``text`` as a complete numeric literal.

    Accepts the ``strtod`` grammar: leading whitespace, an optional sign,
    decimal or hexadecimal digits (including hex floats), and ``inf`` /
    ``infinity`` / ``nan``.  Returns ``None`` when any character is left over.
    """

    candidate = text.lstrip(_LEADING_SPACE)
    if not candidate:
        return None
    if _DECIMAL_RE.fullmatch(candidate):
        return float(candidate)
    if _HEX_RE.fullmatch(candidate):
        try:
            return float.fromhex(candidate)
        except OverflowError:
            # strtod saturates to a signed infinity
            return -math.inf if candidate.startswith("-") else math.inf
        except ValueError:
            return None
    if _SPECIAL_RE.fullmatch(candidate):
        return float(candidate)
    return None


def _finish(kind: str, builder: ProtoBuilder, *, max_stack_size: Optional[int] = None) -> bytes:
    proto = builder.build(max_stack_size=max_stack_size)
    buffer = assemble_module(builder.pool, proto)
    LOG.debug("built %s module (%d bytes)", kind, len(buffer))
    return buffer


# --- scalars ---------------------------------------------------------------
def create_push_nil() -> bytes:
    builder = ProtoBuilder()
    builder.load_nil(0)
    return _finish("nil", builder)


def create_push_boolean(value: bool) -> bytes:
    builder = ProtoBuilder()
    builder.load_boolean(0, bool(value))
    return _finish("boolean", builder)


def create_push_number(value: float) -> bytes:
    builder = ProtoBuilder()
    builder.load_number(0, float(value))
    return _finish("number", builder)


def create_push_integer(value: int) -> bytes:
    """Integers travel as numbers; the value is widened to a double."""

    return create_push_number(float(value))


def create_push_string(value: Union[str, bytes]) -> bytes:
    builder = ProtoBuilder()
    builder.load_string(0, value)
    return _finish("string", builder)


# --- tables ----------------------------------------------------------------
def create_push_table(array_size: int = 0, hash_size: int = 0) -> bytes:
    """Build an empty table; the sizes are preallocation hints only."""

    builder = ProtoBuilder()
    builder.new_table(0, array_size, hash_size)
    return _finish("table", builder)


def create_push_array(values: Sequence[Union[str, bytes]]) -> bytes:
    """Build a table holding ``values`` at indices ``1..n``.

    Each element is loaded into registers ``1..n`` and stored with a single
    ``SETLIST``.
    """

    items = list(values)
    if not items:
        return create_push_table(0, 0)

    builder = ProtoBuilder()
    builder.new_table(0, len(items), 0)
    for index, item in enumerate(items):
        builder.load_string(index + 1, item)
    builder.set_list(0, len(items))
    return _finish("array", builder, max_stack_size=1 + len(items))


def _iter_pairs(pairs: Pairs) -> List[Tuple[str, str]]:
    if isinstance(pairs, Mapping):
        return [(key, value) for key, value in pairs.items()]
    return [(key, value) for key, value in pairs]


def create_push_dictionary(pairs: Pairs) -> bytes:
    """Build a table with string keys mapped to string values.

    Pairs are stored in order with one ``SETTABLE`` each, using registers 1
    and 2 as scratch for the key and value.
    """

    entries = _iter_pairs(pairs)
    if not entries:
        return create_push_table(0, 0)

    builder = ProtoBuilder()
    builder.new_table(0, 0, len(entries))
    for key, value in entries:
        builder.load_string(1, key)
        builder.load_string(2, value)
        builder.set_table(0, 1, 2)
    return _finish("dictionary", builder)


# --- multiple values ---------------------------------------------------------
def _classify(value: str) -> Tuple[str, Any]:
    if value == "true":
        return "boolean", True
    if value == "false":
        return "boolean", False
    number = parse_number(value)
    if number is not None:
        return "number", number
    return "string", value


def create_push_multiple(values: Sequence[str]) -> bytes:
    """Load each element of ``values`` into the register matching its index.

    Elements are classified as booleans, numbers or strings.  Constants are
    pooled by category (numbers, then booleans, then strings) even though
    ``LOADB`` carries its value inline.  This is a best effort loader, not a
    real multiple return.
    """

    items = list(values)
    if not items:
        return create_push_nil()

    classified = [_classify(item) for item in items]
    pool = ConstantPool()
    number_slots = [pool.add_number(value) for kind, value in classified if kind == "number"]
    for kind, value in classified:
        if kind == "boolean":
            pool.add_boolean(value)
    string_slots = [pool.add_string(value) for kind, value in classified if kind == "string"]

    builder = ProtoBuilder(pool)
    numbers = iter(number_slots)
    strings = iter(string_slots)
    for register, (kind, value) in enumerate(classified):
        if kind == "boolean":
            builder.load_boolean(register, value)
        elif kind == "number":
            builder.load_number_constant(register, next(numbers))
        else:
            builder.load_constant(register, next(strings))
    return _finish("multiple", builder, max_stack_size=len(items))


# --- engine specific types -------------------------------------------------
# These degrade to an empty table with one array slot per component.  The
# components are not stored.
def create_push_vector2(x: float, y: float) -> bytes:
    return create_push_table(2, 0)


def create_push_vector3(x: float, y: float, z: float) -> bytes:
    return create_push_table(3, 0)


def create_push_color3(r: float, g: float, b: float) -> bytes:
    return create_push_table(3, 0)


def create_push_udim(scale: float, offset: int) -> bytes:
    return create_push_table(2, 0)


def create_push_udim2(x_scale: float, x_offset: int, y_scale: float, y_offset: int) -> bytes:
    return create_push_table(4, 0)


def create_push_cframe(
    px: float,
    py: float,
    pz: float,
    rx: float = 0.0,
    ry: float = 0.0,
    rz: float = 0.0,
    rw: float = 1.0,
) -> bytes:
    # Position plus a 3x3 rotation matrix.
    return create_push_table(12, 0)


def create_push_brick_color(color_id: int) -> bytes:
    return create_push_table(1, 0)


def create_push_instance(class_name: str, properties: Pairs = ()) -> bytes:
    return create_push_table(0, len(_iter_pairs(properties)))


# --- calls -------------------------------------------------------------------
def create_function_call(
    function_name: str,
    args: Sequence[Union[str, bytes]] = (),
    num_returns: int = 1,
) -> bytes:
    """Call the global ``function_name`` with string ``args``.

    The function lands in register 0, arguments in ``1..n``, and the results
    overwrite the frame from register 0.
    """

    arguments = list(args)
    builder = ProtoBuilder()
    builder.get_global(0, function_name)
    for index, argument in enumerate(arguments):
        builder.load_string(index + 1, argument)
    builder.call(0, len(arguments), num_returns)
    stack = max(len(arguments) + 1, num_returns, 1)
    return _finish("call", builder, max_stack_size=stack)


# --- literal compiler --------------------------------------------------------
@dataclass(frozen=True)
class CompileResult:
    """Outcome of :func:`compile_literal`.

    ``supported`` is ``False`` when the source was not a recognised
    ``return <literal>`` statement; ``buffer`` then holds the nil module.
    """

    buffer: bytes
    kind: str
    value: Any = None
    supported: bool = True


def compile_literal(source: str) -> CompileResult:
    """Translate ``return <literal>`` into a module.

    Recognised literals are ``nil``, ``true``, ``false``, full numeric literals
    and double quoted strings (taken verbatim, without escape processing).
    """

    if source.startswith(_RETURN_PREFIX):
        literal = source[len(_RETURN_PREFIX) :]
        if literal == "nil":
            return CompileResult(create_push_nil(), "nil")
        if literal in ("true", "false"):
            value = literal == "true"
            return CompileResult(create_push_boolean(value), "boolean", value)
        number = parse_number(literal)
        if number is not None:
            return CompileResult(create_push_number(number), "number", number)
        if len(literal) >= 2 and literal[0] == '"' and literal[-1] == '"':
            text = literal[1:-1]
            return CompileResult(create_push_string(text), "string", text)

    LOG.debug("unsupported source %r; substituting nil", source[:40])
    return CompileResult(create_push_nil(), "nil", None, supported=False)


def compile_source(source: str) -> bytes:
    """Return the module for ``source``, falling back to nil when unsupported."""

    return compile_literal(source).buffer


__all__ = [
    "CompileResult",
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
    "parse_number",
]
