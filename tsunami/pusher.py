"""Caller-owned push context bridging builders and an external loader.

Loading and running a module belongs to an embedding host.  This module only
defines the seam: an :class:`Executor` receives a finished buffer and reports
success or failure.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Protocol, Sequence, Union, runtime_checkable

from . import builder
from .cache import BytecodeCache
from .format.signature import decompress

LOG = logging.getLogger(__name__)


@runtime_checkable
class Executor(Protocol):
    """Load and run a module buffer, returning ``True`` on success."""

    def execute(self, buffer: bytes) -> bool: ...


class BytecodePusher:
    """Build modules for values and hand them to an :class:`Executor`.

    The pusher owns its :class:`BytecodeCache` unless one is supplied.  It is
    a single-writer object; use one instance per thread.
    """

    def __init__(self, executor: Executor, cache: Optional[BytecodeCache] = None) -> None:
        if not isinstance(executor, Executor):
            raise TypeError("executor must provide an execute(buffer) method")
        self.executor = executor
        self.cache = cache if cache is not None else BytecodeCache()
        self._nil: Optional[bytes] = None

    def __enter__(self) -> "BytecodePusher":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self.cache.clear()
        self._nil = None

    def execute(self, buffer: bytes) -> bool:
        payload = decompress(buffer)
        ok = bool(self.executor.execute(payload))
        if not ok:
            LOG.debug("executor rejected %d byte module", len(payload))
        return ok

    # --- typed pushes ------------------------------------------------------
    def push_nil(self) -> bool:
        if self._nil is None:
            self._nil = builder.create_push_nil()
        return self.execute(self._nil)

    def push_boolean(self, value: bool) -> bool:
        return self.execute(self.cache.get_boolean(value))

    def push_number(self, value: float) -> bool:
        return self.execute(self.cache.get_number(value))

    def push_integer(self, value: int) -> bool:
        return self.execute(self.cache.get_integer(value))

    def push_string(self, value: Union[str, bytes]) -> bool:
        return self.execute(self.cache.get_string(value))

    def push_table(self, array_size: int = 0, hash_size: int = 0) -> bool:
        return self.execute(builder.create_push_table(array_size, hash_size))

    def push_array(self, values: Sequence[Union[str, bytes]]) -> bool:
        return self.execute(builder.create_push_array(values))

    def push_dictionary(self, pairs: Mapping[str, str]) -> bool:
        return self.execute(builder.create_push_dictionary(pairs))

    def push_multiple(self, values: Sequence[str]) -> bool:
        return self.execute(builder.create_push_multiple(values))

    def push_source(self, source: str) -> bool:
        return self.execute(builder.compile_source(source))

    def push(self, value: Any) -> bool:
        """Dispatch on the Python type of ``value``.

        Unsupported types push nil.
        """

        if value is None:
            return self.push_nil()
        if isinstance(value, bool):
            return self.push_boolean(value)
        if isinstance(value, int):
            return self.push_integer(value)
        if isinstance(value, float):
            return self.push_number(value)
        if isinstance(value, (str, bytes)):
            return self.push_string(value)
        if isinstance(value, Mapping):
            return self.push_dictionary({str(k): str(v) for k, v in value.items()})
        if isinstance(value, (list, tuple)):
            return self.push_array([item if isinstance(item, bytes) else str(item) for item in value])
        LOG.debug("no push mapping for %s; pushing nil", type(value).__name__)
        return self.push_nil()


__all__ = ["BytecodePusher", "Executor"]
