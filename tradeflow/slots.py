"""Seqlock-versioned message slots and the subscriber that reads them in order."""

from __future__ import annotations

import time
from collections.abc import Iterator, Sequence
from typing import Any


class Slot:
    """One message cell with a seqlock version.

    An even version means the slot holds a complete message. An odd version
    means a write is in progress. Each write raises the version by two, so the
    version also counts how many times the slot has been filled.
    """

    __slots__ = ("version", "msg")

    def __init__(self) -> None:
        self.version = 0
        self.msg: Any = None

    def __repr__(self) -> str:
        return f"Slot(version={self.version}, msg={self.msg!r})"

    def write(self, msg: Any) -> None:
        """Store msg, replacing any earlier message. Only one writer may use a slot."""
        if self.version & 1:
            raise RuntimeError("slot is already being written")
        self.version += 1
        self.msg = msg
        self.version += 1

    def _load(self) -> tuple[int, Any] | None:
        """A consistent (version, msg) pair, or None if a write got in the way."""
        version = self.version
        if version & 1:
            return None
        msg = self.msg
        if self.version != version:
            return None
        return version, msg


class Subscriber:
    """Reads messages from a power-of-two ring of slots, reporting overwritten ones.

    Each subscriber keeps its own position, so several can read the same ring
    independently. Reads never block: :meth:`read` returns None when nothing
    new has been written.
    """

    def __init__(self, slots: Sequence[Slot]) -> None:
        capacity = len(slots)
        if capacity < 2 or capacity & (capacity - 1):
            raise ValueError(
                f"slot count must be a power of two of at least 2, got {capacity}"
            )
        self._slots = slots
        self._cap_mask = capacity - 1
        self._lost_shift = capacity.bit_length() - 2
        self._version = 2
        self._reader_idx = 0

    def __repr__(self) -> str:
        return (
            f"Subscriber(position={self._reader_idx}, "
            f"capacity={self._cap_mask + 1}, version={self._version})"
        )

    def read(self) -> tuple[Any, int] | None:
        """Return (message, lost_count) for the next message, or None if there is none.

        lost_count is how many messages were overwritten before this
        subscriber could read them.
        """
        slot = self._slots[self._reader_idx]
        while True:
            snapshot = slot._load()
            if snapshot is None:
                time.sleep(0)
                continue
            version, msg = snapshot
            if version < self._version:
                return None
            lost_count = (version - self._version) << self._lost_shift
            self._version = version
            self._reader_idx = (self._reader_idx + 1) & self._cap_mask
            if self._reader_idx == 0:
                self._version += 2
            return msg, lost_count

    def read_spinning(self) -> tuple[Any, int]:
        """Wait, yielding the processor, until a message arrives, then return it."""
        while True:
            result = self.read()
            if result is not None:
                return result
            time.sleep(0)

    def clone(self) -> Subscriber:
        """An independent subscriber that starts at this one's position."""
        twin = Subscriber.__new__(Subscriber)
        twin._slots = self._slots
        twin._cap_mask = self._cap_mask
        twin._lost_shift = self._lost_shift
        twin._version = self._version
        twin._reader_idx = self._reader_idx
        return twin

    __copy__ = clone

    def __iter__(self) -> Iterator[tuple[Any, int]]:
        """Yield (message, lost_count) pairs forever, waiting for each one."""
        while True:
            yield self.read_spinning()