"""Filesystem helpers for emitting module buffers and reports."""

from __future__ import annotations

import os
import tempfile
from typing import Callable, IO


def _as_fs_path(path: str | os.PathLike[str]) -> str:
    return os.fspath(path)


def _ensure_directory(path: str) -> str:
    directory = os.path.dirname(path)
    if not directory:
        directory = "."
    os.makedirs(directory, exist_ok=True)
    return directory


def _atomic_write(
    path: str | os.PathLike[str],
    writer: Callable[[IO], None],
    *,
    mode: str,
    encoding: str | None = None,
) -> None:
    target = _as_fs_path(path)
    directory = _ensure_directory(target)
    fd, temp_path = tempfile.mkstemp(prefix=".tmp-", suffix=".partial", dir=directory)
    try:
        with os.fdopen(fd, mode, encoding=encoding) as handle:
            writer(handle)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(temp_path, target)
    except BaseException:
        try:
            os.unlink(temp_path)
        except FileNotFoundError:
            pass
        raise


__all__ = [
    "ensure_out",
    "write_bytes",
]


def ensure_out(*paths: str | os.PathLike[str]) -> str:
    """Ensure that the output directory ``paths`` exists and return it."""

    if paths:
        fs_path = os.path.join(*(os.fspath(p) for p in paths))
    else:
        fs_path = "out"
    os.makedirs(fs_path, exist_ok=True)
    return fs_path


def write_bytes(path: str | os.PathLike[str], data: bytes) -> None:
    """Atomically write ``data`` to ``path``."""

    def _writer(handle: IO) -> None:
        handle.write(data)

    _atomic_write(path, _writer, mode="wb")

