"""Stateful compiler accumulating several values into one prototype.

Unlike the single-shot builders in :mod:`tsunami.builder`, a :class:`Compiler`
keeps its constant pool and instruction list across calls.  Each ``push_*``
call places its value in the next free register.  Instances are single-writer
objects with no internal locking.
"""

from __future__ import annotations

import logging
from typing import List, Sequence, Union

from .format.module import assemble_module
from .format.proto import ProtoBuilder

LOG = logging.getLogger(__name__)


class Compiler:
    def __init__(self) -> None:
        self._builder = ProtoBuilder()
        self._top = 0

    @property
    def top(self) -> int:
        """Index of the next free register."""

        return self._top

    @property
    def builder(self) -> ProtoBuilder:
        """The underlying :class:`ProtoBuilder` for raw instruction access."""

        return self._builder

    def _claim(self) -> int:
        register = self._top
        self._top += 1
        return register

    def push_nil(self) -> int:
        register = self._claim()
        self._builder.load_nil(register)
        return register

    def push_boolean(self, value: bool) -> int:
        register = self._claim()
        self._builder.load_boolean(register, value)
        return register

    def push_number(self, value: float) -> int:
        register = self._claim()
        self._builder.load_number(register, float(value))
        return register

    def push_string(self, value: Union[str, bytes]) -> int:
        register = self._claim()
        self._builder.load_string(register, value)
        return register

    def push_table(self, array_size: int = 0, hash_size: int = 0) -> int:
        register = self._claim()
        self._builder.new_table(register, array_size, hash_size)
        return register

    def push_array(self, values: Sequence[Union[str, bytes]]) -> int:
        """Push a table filled from ``values``.

        The elements are staged in the registers above the table; those
        registers are free again once the ``SETLIST`` has run.
        """

        items = list(values)
        register = self.push_table(len(items), 0)
        if not items:
            return register
        for offset, item in enumerate(items, start=1):
            self._builder.load_string(register + offset, item)
        self._builder.set_list(register, len(items))
        return register

    def compile(self) -> bytes:
        """Assemble the accumulated state into a module buffer."""

        proto = self._builder.build()
        buffer = assemble_module(self._builder.pool, proto)
        LOG.debug("compiled %d values into %d bytes", self._top, len(buffer))
        return buffer

    def clear(self) -> None:
        self._builder = ProtoBuilder()
        self._top = 0

    def listing(self) -> List[str]:
        """Return one line per constant and instruction."""

        lines = [f"; {len(self._builder.pool)} constants, {len(self._builder)} instructions"]
        for index, constant in enumerate(self._builder.pool):
            lines.append(f"K{index:<4} {constant.describe()}")
        for index, instruction in enumerate(self._builder.instructions):
            lines.append(f"{index:04d}  {instruction.render()}")
        return lines


__all__ = ["Compiler"]
