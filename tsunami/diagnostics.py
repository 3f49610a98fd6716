"""Human readable dumps of module buffers."""

from __future__ import annotations

from typing import List, Optional

from .config import get_config
from .exceptions import MalformedBytecodeError
from .format.header import HEADER_SIZE, Header
from .format.reader import read_module
from .format.signature import decompress, has_signature, read_signature
from .format.validator import validate_bytecode
from .utils.byteops import iter_words


def hex_dump(data: bytes, max_bytes: Optional[int] = None) -> str:
    """Return at most ``max_bytes`` of ``data`` as lowercase hex.

    Every byte is followed by a space and a newline closes each row of 16 and
    the final partial row.
    """

    cfg = get_config()
    limit = cfg.hexdump_max_bytes if max_bytes is None else max_bytes
    window = bytes(data[: max(limit, 0)])
    rows = []
    for _offset, row in iter_words(window, cfg.hexdump_width):
        rows.append("".join(f"{byte:02x} " for byte in row) + "\n")
    return "".join(rows)


def get_bytecode_info(buffer: bytes) -> str:
    """Describe ``buffer``: wrapper, header, validity, constants and code.

    Never raises; structural problems are reported inside the text.
    """

    data = bytes(buffer)
    lines: List[str] = [f"Size: {len(data)} bytes"]

    if has_signature(data):
        fields = read_signature(data)
        if fields is None:
            lines.append("Signature: RBX2 (truncated)")
        else:
            lines.append("Signature: RBX2 " + " ".join(f"0x{value:08x}" for value in fields))
        data = decompress(data)
    else:
        lines.append("Signature: none")

    if len(data) < HEADER_SIZE:
        lines.append(f"Header: truncated ({len(data)} of {HEADER_SIZE} bytes)")
        lines.append("Valid: no")
        return "\n".join(lines) + "\n"

    header = Header.unpack(data)
    lines.append(
        f"Header: version={header.version} flags=0x{header.flags:02x} "
        f"typesize={header.typesize} numbersize={header.numbersize}"
    )
    lines.append(f"Payload: size={header.size} hash=0x{header.hash:08x}")
    lines.append("Valid: " + ("yes" if validate_bytecode(data) else "no"))

    try:
        image = read_module(data)
    except MalformedBytecodeError as exc:
        lines.append(f"Parse error: {exc}")
        return "\n".join(lines) + "\n"

    lines.append(f"Constants: {len(image.constants)}")
    for index, constant in enumerate(image.constants):
        lines.append(f"  K{index:<4} {constant.type.name.lower():<8} {constant.describe()}")
    for number, proto in enumerate(image.protos):
        lines.append(
            f"Function {number}: stack={proto.max_stack_size} params={proto.num_params} "
            f"upvalues={proto.num_upvalues} vararg={'yes' if proto.is_vararg else 'no'} "
            f"sizek={proto.size_k} sizep={proto.size_p}"
        )
        for index, instruction in enumerate(proto.instructions):
            lines.append(f"  {index:04d}  {instruction.render()}")
    return "\n".join(lines) + "\n"


__all__ = ["get_bytecode_info", "hex_dump"]
