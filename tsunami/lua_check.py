"""Cross-check compiled literals against a real Lua runtime.

The literal compiler in :mod:`tsunami.builder` follows its own small grammar.
These helpers evaluate the same source with :mod:`lupa` inside an empty
environment and report whether the module would yield the value Lua itself
computes.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Optional

try:  # pragma: no cover - optional dependency
    from lupa import LuaError, LuaRuntime
except ImportError:  # pragma: no cover - lupa missing
    LuaRuntime = None  # type: ignore[assignment]
    LuaError = Exception  # type: ignore[assignment]

from .builder import compile_literal
from .format.constants import ConstantType
from .format.opcodes import LuauOpcode
from .format.reader import read_module

LOG = logging.getLogger(__name__)

_LOADER = """
function(source)
  local chunk, err = load(source, "=literal", "t", {})
  if not chunk then
    return false, err
  end
  local ok, value = pcall(chunk)
  if not ok then
    return false, value
  end
  return true, value
end
"""


def is_lua_available() -> bool:
    return LuaRuntime is not None


def _runtime() -> "LuaRuntime":
    if LuaRuntime is None:
        raise RuntimeError("lupa is required for Lua literal checks")
    return LuaRuntime(encoding=None, unpack_returned_tuples=True, register_eval=False)


def evaluate_literal(source: str) -> Any:
    """Run ``source`` in a fresh Lua state and return its first result.

    Strings come back as ``bytes``.  Syntax or runtime errors raise
    :class:`ValueError` with Lua's message.
    """

    runtime = _runtime()
    loader = runtime.eval(_LOADER)
    try:
        ok, value = loader(source.encode("utf-8"))
    except LuaError as exc:
        raise ValueError(str(exc)) from exc
    if not ok:
        message = value.decode("utf-8", "replace") if isinstance(value, bytes) else str(value)
        raise ValueError(message)
    return value


def module_value(buffer: bytes) -> Any:
    """Return the value a builder module leaves in register 0."""

    image = read_module(buffer)
    for instruction in image.main.instructions:
        fields = instruction.fields()
        if fields.get("A") != 0:
            continue
        if instruction.opcode is LuauOpcode.LOADNIL:
            return None
        if instruction.opcode is LuauOpcode.LOADB:
            return bool(fields["B"])
        if instruction.opcode in (LuauOpcode.LOADN, LuauOpcode.LOADK):
            constant = image.constants[fields["B"]]
            if constant.type is ConstantType.NIL:
                return None
            return constant.value
    return None


def _same(left: Any, right: Any) -> bool:
    if isinstance(left, bool) or isinstance(right, bool):
        return left is right
    if isinstance(left, (int, float)) and isinstance(right, (int, float)):
        if math.isnan(left) and math.isnan(right):
            return True
        return float(left) == float(right)
    return left == right


@dataclass
class ParityReport:
    source: str
    supported: bool
    compiled: Any
    lua: Any = None
    error: Optional[str] = None

    @property
    def matches(self) -> bool:
        return self.error is None and _same(self.compiled, self.lua)


def check_compiled(source: str) -> ParityReport:
    """Compare :func:`compile_literal` output for ``source`` with Lua."""

    result = compile_literal(source)
    compiled = module_value(result.buffer)
    report = ParityReport(source=source, supported=result.supported, compiled=compiled)
    try:
        report.lua = evaluate_literal(source)
    except ValueError as exc:
        report.error = str(exc)
    if not report.matches:
        LOG.info("literal mismatch for %r: compiled=%r lua=%r", source, compiled, report.lua)
    return report


__all__ = [
    "ParityReport",
    "check_compiled",
    "evaluate_literal",
    "is_lua_available",
    "module_value",
]
