"""Command line entry point for building and inspecting module buffers."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence

from .. import builder
from ..config import get_config
from ..diagnostics import get_bytecode_info, hex_dump
from ..exceptions import BytecodeError
from ..format.signature import decompress, has_signature
from ..format.validator import validate_bytecode
from ..logging_config import close_debug_logger, configure_debug_file_logger, configure_logging
from ..utils.io_utils import ensure_out, write_bytes

LOG = logging.getLogger(__name__)

BUILD_KINDS = (
    "nil",
    "boolean",
    "number",
    "integer",
    "string",
    "table",
    "array",
    "dictionary",
    "multiple",
    "call",
)


def _parse_bool(token: str) -> bool:
    lowered = token.strip().lower()
    if lowered in {"true", "1", "yes"}:
        return True
    if lowered in {"false", "0", "no"}:
        return False
    raise ValueError(f"not a boolean: {token!r}")


def _parse_pairs(values: Sequence[str]) -> List[tuple]:
    pairs = []
    for item in values:
        key, sep, value = item.partition("=")
        if not sep:
            raise ValueError(f"expected key=value, got {item!r}")
        pairs.append((key, value))
    return pairs


def _require(values: Sequence[str], count: int, kind: str) -> None:
    if len(values) != count:
        raise ValueError(f"{kind} takes {count} value(s), got {len(values)}")


def build_module(kind: str, values: Sequence[str]) -> bytes:
    """Build the module for ``kind`` from command line ``values``.

    Raises :class:`ValueError` when ``values`` do not fit ``kind``.
    """

    if kind == "nil":
        _require(values, 0, kind)
        return builder.create_push_nil()
    if kind == "boolean":
        _require(values, 1, kind)
        return builder.create_push_boolean(_parse_bool(values[0]))
    if kind == "number":
        _require(values, 1, kind)
        number = builder.parse_number(values[0])
        if number is None:
            raise ValueError(f"not a number: {values[0]!r}")
        return builder.create_push_number(number)
    if kind == "integer":
        _require(values, 1, kind)
        return builder.create_push_integer(int(values[0], 0))
    if kind == "string":
        _require(values, 1, kind)
        return builder.create_push_string(values[0])
    if kind == "table":
        if len(values) > 2:
            raise ValueError("table takes at most 2 values")
        sizes = [int(value, 0) for value in values] + [0, 0]
        return builder.create_push_table(sizes[0], sizes[1])
    if kind == "array":
        return builder.create_push_array(list(values))
    if kind == "dictionary":
        return builder.create_push_dictionary(_parse_pairs(values))
    if kind == "multiple":
        return builder.create_push_multiple(list(values))
    if kind == "call":
        if not values:
            raise ValueError("call needs a function name")
        return builder.create_function_call(values[0], list(values[1:]))
    raise ValueError(f"unknown kind {kind!r}")


def _default_output(name: str) -> Path:
    return Path(ensure_out(get_config().output_dir)) / name


def _write(buffer: bytes, output: Optional[str], default_name: str) -> Path:
    target = Path(output) if output else _default_output(default_name)
    write_bytes(target, buffer)
    LOG.info("wrote %s (%d bytes)", target, len(buffer))
    return target


def _cmd_build(args: argparse.Namespace) -> int:
    buffer = build_module(args.kind, args.values)
    _write(buffer, args.output, f"{args.kind}.bc")
    return 0


def _cmd_compile(args: argparse.Namespace) -> int:
    result = builder.compile_literal(args.source)
    if not result.supported:
        LOG.warning("unsupported source; emitting nil module")
    _write(result.buffer, args.output, "compiled.bc")
    if args.check_lua:
        from ..lua_check import check_compiled

        report = check_compiled(args.source)
        if not report.matches:
            print(f"lua mismatch: compiled={report.compiled!r} lua={report.lua!r} {report.error or ''}".rstrip())
            return 1
        print("lua parity: ok")
    return 0


def _cmd_validate(args: argparse.Namespace) -> int:
    status = 0
    for name in args.files:
        data = Path(name).read_bytes()
        if args.strip:
            data = decompress(data)
        ok = validate_bytecode(data)
        print(f"{name}: {'valid' if ok else 'invalid'}")
        if not ok:
            status = 1
    return status


def _cmd_info(args: argparse.Namespace) -> int:
    sys.stdout.write(get_bytecode_info(Path(args.file).read_bytes()))
    return 0


def _cmd_hexdump(args: argparse.Namespace) -> int:
    sys.stdout.write(hex_dump(Path(args.file).read_bytes(), args.max_bytes))
    return 0


def _cmd_strip(args: argparse.Namespace) -> int:
    data = Path(args.file).read_bytes()
    if not has_signature(data):
        LOG.info("%s has no signature wrapper", args.file)
    _write(decompress(data), args.output, Path(args.file).stem + ".stripped.bc")
    return 0


_COMMANDS: Dict[str, Callable[[argparse.Namespace], int]] = {
    "build": _cmd_build,
    "compile": _cmd_compile,
    "validate": _cmd_validate,
    "info": _cmd_info,
    "hexdump": _cmd_hexdump,
    "strip": _cmd_strip,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="tsunami", description="Bytecode module builder")
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")
    parser.add_argument("--trace", type=Path, default=None, help="write a build trace to this file")
    sub = parser.add_subparsers(dest="command", required=True)

    build = sub.add_parser("build", help="build a value-producing module")
    build.add_argument("kind", choices=BUILD_KINDS)
    build.add_argument("values", nargs="*")
    build.add_argument("-o", "--output", default=None)

    compile_ = sub.add_parser("compile", help="compile 'return <literal>'")
    compile_.add_argument("source")
    compile_.add_argument("-o", "--output", default=None)
    compile_.add_argument("--check-lua", action="store_true", help="compare with a real Lua runtime")

    validate = sub.add_parser("validate", help="check header size and hash")
    validate.add_argument("files", nargs="+")
    validate.add_argument("--strip", action="store_true", help="remove a signature wrapper first")

    info = sub.add_parser("info", help="describe a module")
    info.add_argument("file")

    dump = sub.add_parser("hexdump", help="hex dump the start of a file")
    dump.add_argument("file")
    dump.add_argument("--max-bytes", type=int, default=None)

    strip = sub.add_parser("strip", help="remove a signature wrapper")
    strip.add_argument("file")
    strip.add_argument("-o", "--output", default=None)
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    trace_logger = None
    if args.trace is not None:
        trace_logger = configure_debug_file_logger("tsunami", args.trace)

    try:
        return _COMMANDS[args.command](args)
    except ValueError as exc:
        if isinstance(exc, BytecodeError):
            LOG.error("%s", exc)
            return 1
        parser.error(str(exc))
    except (BytecodeError, OSError, RuntimeError) as exc:
        LOG.error("%s", exc)
        return 1
    finally:
        if trace_logger is not None:
            close_debug_logger(trace_logger)
    return 2


if __name__ == "__main__":  # pragma: no cover - CLI wrapper
    raise SystemExit(main())
