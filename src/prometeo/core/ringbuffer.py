from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import Generic, TypeVar

import numpy as np

T = TypeVar("T")


class RingBuffer(Generic[T]):
    """
    Fixed-size ring buffer for streaming data.
    Overwrites the oldest entries when full.
    """

    __slots__ = ("_capacity", "_data", "_start", "_size")

    def __init__(self, capacity: int) -> None:
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        self._capacity = int(capacity)
        self._data: list[T | None] = [None] * self._capacity
        self._start = 0
        self._size = 0

    @property
    def capacity(self) -> int:
        return self._capacity

    def is_full(self) -> bool:
        return self._size == self._capacity

    def append(self, item: T) -> None:
        idx = (self._start + self._size) % self._capacity
        self._data[idx] = item
        if self._size < self._capacity:
            self._size += 1
        else:
            self._start = (self._start + 1) % self._capacity

    def extend(self, items: Iterable[T]) -> None:
        for item in items:
            self.append(item)

    def popleft(self) -> T:
        """Remove and return the oldest entry."""
        if self._size == 0:
            raise IndexError("pop from empty RingBuffer")
        item = self._data[self._start]
        self._data[self._start] = None
        self._start = (self._start + 1) % self._capacity
        self._size -= 1
        assert item is not None
        return item

    def clear(self) -> None:
        self._data = [None] * self._capacity
        self._start = 0
        self._size = 0

    def __len__(self) -> int:  # pragma: no cover - trivial
        return self._size

    def __getitem__(self, index: int) -> T:
        """Support buf[i] and buf[-1] indexing over the *logical* contents."""
        size = self._size
        if size == 0:
            raise IndexError("RingBuffer is empty")

        if index < 0:
            index += size

        if index < 0 or index >= size:
            raise IndexError("RingBuffer index out of range")

        physical = (self._start + index) % self._capacity
        item = self._data[physical]
        assert item is not None
        return item

    def __iter__(self) -> Iterator[T]:
        for i in range(self._size):
            idx = (self._start + i) % self._capacity
            item = self._data[idx]
            if item is not None:
                yield item

    def tail(self, count: int) -> list[T]:
        """Return the newest ``count`` entries, oldest first."""
        count = max(0, min(int(count), self._size))
        offset = self._size - count
        return [self[offset + i] for i in range(count)]

    def tail_array(self, count: int) -> np.ndarray:
        """Same as :meth:`tail` but as a ``float64`` array for numeric buffers."""
        values = self.tail(count)
        return np.fromiter((float(v) for v in values), dtype=np.float64, count=len(values))
