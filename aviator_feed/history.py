"""
Bounded newest-first buffers for results and resolved forecasts.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Iterator
from itertools import islice
from typing import Generic, TypeVar

from .models import Outcome

T = TypeVar("T")

HISTORY_CAPACITY = 100
RECORD_CAPACITY = 50


class RollingWindow(Generic[T]):
    """Append-at-front buffer that drops the oldest entry once full.

    Eviction is by insertion order, not by any timestamp on the items.
    """

    def __init__(self, capacity: int) -> None:
        if capacity <= 0:
            raise ValueError(f"capacity must be positive, got {capacity}")
        self._capacity = capacity
        self._items: deque[T] = deque(maxlen=capacity)

    @property
    def capacity(self) -> int:
        return self._capacity

    def append(self, item: T) -> None:
        """Insert as the newest entry."""
        self._items.appendleft(item)

    def recent(self, n: int) -> list[T]:
        """First ``n`` entries, newest first. Does not mutate."""
        if n <= 0:
            return []
        return list(islice(self._items, n))

    def snapshot(self) -> tuple[T, ...]:
        return tuple(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[T]:
        return iter(self._items)

    def __getitem__(self, index: int) -> T:
        return self._items[index]


class ResultHistory(RollingWindow[Outcome]):
    """Last 100 round results.

    Duplicate session ids are kept as separate entries.
    """

    def __init__(self, capacity: int = HISTORY_CAPACITY) -> None:
        super().__init__(capacity)

    @property
    def latest(self) -> Outcome | None:
        return self._items[0] if self._items else None

    def multipliers(self, n: int | None = None) -> list[float]:
        """Multipliers of the ``n`` most recent results (all if None)."""
        items = self._items if n is None else islice(self._items, max(n, 0))
        return [outcome.multiplier for outcome in items]
