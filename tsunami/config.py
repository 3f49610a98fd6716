"""Format defaults loaded from ``config.json`` with environment overrides."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

LOG = logging.getLogger(__name__)

_CONFIG_PATH = Path(__file__).with_name("config.json")
_DATA: Dict[str, Any] = json.loads(_CONFIG_PATH.read_text(encoding="utf-8"))

ENV_OUT_DIR = "TSUNAMI_OUT_DIR"
ENV_HEXDUMP_BYTES = "TSUNAMI_HEXDUMP_BYTES"


@dataclass(frozen=True)
class FormatConfig:
    """Header defaults and diagnostic settings shared by the builders."""

    flags: int = 0x00
    typesize: int = 8
    numbersize: int = 8
    hexdump_max_bytes: int = 64
    hexdump_width: int = 16
    output_dir: str = "out"


def _coerce_positive(value: Optional[str], default: int, *, name: str) -> int:
    if value is None or not value.strip():
        return default
    try:
        parsed = int(value.strip(), 0)
    except ValueError:
        LOG.warning("ignoring %s=%r: not an integer", name, value)
        return default
    if parsed <= 0:
        LOG.warning("ignoring %s=%r: must be positive", name, value)
        return default
    return parsed


def load_config(
    data: Mapping[str, Any] | None = None,
    *,
    env: Mapping[str, str] | None = None,
) -> FormatConfig:
    """Build a :class:`FormatConfig` from ``data`` and ``env``.

    ``data`` defaults to the bundled ``config.json`` and ``env`` to
    :data:`os.environ`.  Only ``TSUNAMI_OUT_DIR`` and ``TSUNAMI_HEXDUMP_BYTES``
    are read from the environment.
    """

    source = _DATA if data is None else data
    environ = os.environ if env is None else env

    header = source.get("header", {})
    hexdump = source.get("hexdump", {})
    output = source.get("output", {})

    max_bytes = int(hexdump.get("max_bytes", 64))
    max_bytes = _coerce_positive(environ.get(ENV_HEXDUMP_BYTES), max_bytes, name=ENV_HEXDUMP_BYTES)
    output_dir = environ.get(ENV_OUT_DIR) or str(output.get("directory", "out"))

    return FormatConfig(
        flags=int(header.get("flags", 0)) & 0xFF,
        typesize=int(header.get("typesize", 8)) & 0xFF,
        numbersize=int(header.get("numbersize", 8)) & 0xFF,
        hexdump_max_bytes=max_bytes,
        hexdump_width=int(hexdump.get("width", 16)),
        output_dir=output_dir,
    )


_ACTIVE: Optional[FormatConfig] = None


def get_config() -> FormatConfig:
    """Return the process configuration, loading it on first use."""

    global _ACTIVE
    if _ACTIVE is None:
        _ACTIVE = load_config()
    return _ACTIVE


def reset_config() -> None:
    """Forget the cached configuration so the next call reloads it."""

    global _ACTIVE
    _ACTIVE = None


__all__ = [
    "ENV_HEXDUMP_BYTES",
    "ENV_OUT_DIR",
    "FormatConfig",
    "get_config",
    "load_config",
    "reset_config",
]
