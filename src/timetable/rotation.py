"""Carousel index for the presentation view.

The index is derived from elapsed time rather than counted tick by tick, so
a late or skipped timer callback never makes the carousel drift. Both the
image carousel and the active-class carousel use their own Rotation.
"""

from collections.abc import Sequence
from typing import Generic, TypeVar

T = TypeVar("T")


class Rotation(Generic[T]):
    """Cycles through `items`, one step every `duration_seconds`.

    With fewer than two items the rotation is not armed and the index stays 0.
    """

    def __init__(self, items: Sequence[T], duration_seconds: float, started_at: float = 0.0) -> None:
        self._items: tuple[T, ...] = ()
        self._duration = 0.0
        self._started_at = 0.0
        self._index = 0
        self.reset(items, duration_seconds, started_at)

    def reset(self, items: Sequence[T], duration_seconds: float, now: float) -> None:
        """Replace the items/duration and restart from the first item."""
        if duration_seconds <= 0:
            raise ValueError(f"duration_seconds must be positive, got {duration_seconds}")
        self._items = tuple(items)
        self._duration = float(duration_seconds)
        self._started_at = now
        self._index = 0

    def update(self, items: Sequence[T], duration_seconds: float, now: float) -> bool:
        """Reset only if the items or the duration changed.

        Returns:
            True if the rotation restarted.
        """
        if tuple(items) == self._items and float(duration_seconds) == self._duration:
            return False
        self.reset(items, duration_seconds, now)
        return True

    @property
    def armed(self) -> bool:
        return len(self._items) > 1

    @property
    def duration_seconds(self) -> float:
        return self._duration

    @property
    def items(self) -> tuple[T, ...]:
        return self._items

    @property
    def current_index(self) -> int:
        return self._index

    @property
    def current(self) -> T | None:
        if not self._items:
            return None
        return self._items[self._index]

    def tick(self, now: float) -> int:
        """Recompute the index for time `now` (seconds, same clock as reset)."""
        if not self.armed:
            self._index = 0
            return 0
        steps = int(max(0.0, now - self._started_at) // self._duration)
        self._index = steps % len(self._items)
        return self._index
