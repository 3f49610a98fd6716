"""Shared helpers for byte handling and artefact output."""

from .byteops import iter_words, read_uint
from .io_utils import ensure_out, write_bytes

__all__ = [
    "ensure_out",
    "iter_words",
    "read_uint",
    "write_bytes",
]
