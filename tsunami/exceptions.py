"""Custom exception hierarchy for the bytecode encoder."""

from __future__ import annotations


class BytecodeError(Exception):
    """Base class for all bytecode related errors."""


class EncodingError(BytecodeError, ValueError):
    """Raised when a value cannot be represented in the module format."""


class MalformedBytecodeError(BytecodeError, ValueError):
    """Raised when a module buffer cannot be parsed."""


__all__ = ["BytecodeError", "EncodingError", "MalformedBytecodeError"]
