"""Logging helpers for the CLI and per-run build traces."""

from __future__ import annotations

import logging
from pathlib import Path

__all__ = [
    "configure_logging",
    "configure_debug_file_logger",
    "close_debug_logger",
]

_TRACE_MARKER = "_tsunami_build_trace"


def configure_logging(verbose: bool) -> None:
    """Configure root logging handlers."""

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
    level = logging.DEBUG if verbose else logging.INFO
    root.setLevel(level)

    stream = logging.StreamHandler()
    stream.setLevel(level)
    if verbose:
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    else:
        formatter = logging.Formatter("%(levelname)s: %(message)s")
    stream.setFormatter(formatter)
    root.addHandler(stream)


def configure_debug_file_logger(
    name: str,
    path: Path,
    *,
    level: int = logging.DEBUG,
    formatter: logging.Formatter | None = None,
) -> logging.Logger:
    """Return a logger writing debug traces to ``path``.

    Any previously configured trace handlers on ``name`` are removed so repeated
    invocations replace earlier traces instead of appending to them.  The file
    is opened in text mode with UTF-8 encoding.
    """

    path.parent.mkdir(parents=True, exist_ok=True)
    logger = logging.getLogger(name)
    logger.setLevel(level)

    for handler in list(logger.handlers):
        if getattr(handler, _TRACE_MARKER, False):
            logger.removeHandler(handler)
            handler.close()

    handler = logging.FileHandler(path, mode="w", encoding="utf-8")
    setattr(handler, _TRACE_MARKER, True)
    if formatter is None:
        formatter = logging.Formatter("%(name)s: %(message)s")
    handler.setFormatter(formatter)
    logger.addHandler(handler)
    return logger


def close_debug_logger(logger: logging.Logger) -> None:
    """Tear down handlers installed by :func:`configure_debug_file_logger`."""

    for handler in list(logger.handlers):
        if getattr(handler, _TRACE_MARKER, False):
            logger.removeHandler(handler)
            handler.close()
    logger.setLevel(logging.NOTSET)
