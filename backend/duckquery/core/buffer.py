"""Append-only row buffer with amortized growth."""

from __future__ import annotations

from typing import Iterator, List, Optional

from duckquery.core.result import Row

DEFAULT_INITIAL_CAPACITY = 2048


class RowBuffer:
    """
    Accumulates rows when the final row count is unknown.

    Slots are preallocated up to ``capacity``. When an append would not fit,
    capacity grows to ``new_length * 3 // 2 + 1`` so n appends trigger only
    O(log n) reallocations.

    Example:
        >>> buf = RowBuffer(initial_capacity=2)
        >>> for row in rows:
        ...     buf.append(row)
        >>> table_rows = buf.to_list()
    """

    def __init__(self, initial_capacity: int = DEFAULT_INITIAL_CAPACITY) -> None:
        if initial_capacity < 0:
            raise ValueError("initial_capacity must be >= 0")
        self._slots: List[Optional[Row]] = [None] * initial_capacity
        self._length = 0
        self.grow_count = 0

    @property
    def capacity(self) -> int:
        return len(self._slots)

    def append(self, row: Row) -> None:
        total = self._length + 1
        if total > self.capacity:
            new_capacity = total * 3 // 2 + 1
            self._slots.extend([None] * (new_capacity - self.capacity))
            self.grow_count += 1
        self._slots[self._length] = row
        self._length = total

    def to_list(self) -> List[Row]:
        """Snapshot of the appended rows, in append order."""
        return self._slots[: self._length]  # type: ignore[return-value]

    def __len__(self) -> int:
        return self._length

    def __iter__(self) -> Iterator[Row]:
        for i in range(self._length):
            yield self._slots[i]  # type: ignore[misc]

    def __repr__(self) -> str:
        return f"RowBuffer({self._length}/{self.capacity})"
