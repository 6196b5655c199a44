"""A single-producer, multi-consumer ring buffer that overwrites the oldest messages."""

from __future__ import annotations

from typing import Any

from tradeflow.slots import Slot, Subscriber


def _round_capacity(cap: int) -> int:
    if cap < 0:
        raise ValueError(f"capacity must not be negative, got {cap}")
    cap = max(cap, 2)
    return 1 << (cap - 1).bit_length()


class RingBuffer:
    """A fixed ring of seqlock slots.

    The requested capacity is raised to at least 2 and rounded up to the next
    power of two. When the writer laps a reader, the oldest messages are
    overwritten and the reader is told how many it lost.
    """

    def __init__(self, cap: int) -> None:
        self._cap = _round_capacity(cap)
        self._slots: tuple[Slot, ...] = tuple(Slot() for _ in range(self._cap))
        self._writer_idx = 0

    def __repr__(self) -> str:
        return f"RingBuffer(capacity={self._cap}, writer_position={self._writer_idx})"

    def capacity(self) -> int:
        """The number of slots, always a power of two."""
        return self._cap

    @property
    def writer_position(self) -> int:
        """Index of the slot the next write goes to."""
        return self._writer_idx

    def split(self) -> tuple[Publisher, Subscriber]:
        """A publisher for the single writer and a subscriber at the start of the ring.

        More readers are made with :meth:`Subscriber.clone`.
        """
        return Publisher(self), Subscriber(self._slots)

    def _write(self, msg: Any) -> None:
        self._slots[self._writer_idx].write(msg)
        self._writer_idx = (self._writer_idx + 1) & (self._cap - 1)


class Publisher:
    """Writes messages into a ring buffer. Only one thread may write at a time."""

    def __init__(self, ring: RingBuffer) -> None:
        self._ring = ring

    def __repr__(self) -> str:
        return f"Publisher({self._ring!r})"

    def write(self, msg: Any) -> None:
        """Store msg in the next slot, overwriting the oldest message when full."""
        self._ring._write(msg)