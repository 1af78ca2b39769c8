"""Ordinals - comparable positions for reported events.

An ordinal is a sequence of non-negative integers compared
lexicographically, where a strict prefix sorts first:

    (0, 3) < (0, 3, 0) < (0, 3, 1) < (0, 4)

A lineage advances with next() (bump the last component). Work handed to
another thread gets a branch() (append a zero component), whose own next()
calls stay strictly between the parent's current ordinal and the parent's
next one. Sorting every event of a run by ordinal therefore reproduces the
order a sequential run would have produced.
"""

import threading
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True, order=True)
class Ordinal:
    """Immutable, totally ordered position token."""
    stamps: tuple[int, ...] = (0, 0)

    def __post_init__(self):
        if not self.stamps:
            raise ValueError("An ordinal needs at least one component.")
        if any(s < 0 for s in self.stamps):
            raise ValueError(f"Ordinal components must be non-negative: {self.stamps}")

    @classmethod
    def first(cls, run_stamp: int = 0) -> "Ordinal":
        """First ordinal of the run identified by run_stamp."""
        return cls((run_stamp, 0))

    @property
    def run_stamp(self) -> int:
        return self.stamps[0]

    @property
    def depth(self) -> int:
        return len(self.stamps)

    def next(self) -> "Ordinal":
        """Successor at the same depth."""
        return Ordinal(self.stamps[:-1] + (self.stamps[-1] + 1,))

    def branch(self) -> "Ordinal":
        """First ordinal of a child lineage."""
        return Ordinal(self.stamps + (0,))

    def __str__(self) -> str:
        return ".".join(str(s) for s in self.stamps)


class Tracker:
    """Hands out the ordinals of one execution lineage.

    One tracker per lineage; next_tracker() forks a new lineage for work
    given to a distributor.
    """

    def __init__(self, first_ordinal: Optional[Ordinal] = None):
        """Initialize tracker.

        Args:
            first_ordinal: Ordinal returned by the first next_ordinal() call.
                           Default: Ordinal.first().
        """
        self._current = first_ordinal or Ordinal.first()
        self._lock = threading.Lock()

    @property
    def current(self) -> Ordinal:
        """Ordinal the next call to next_ordinal() will return."""
        with self._lock:
            return self._current

    def next_ordinal(self) -> Ordinal:
        """Return the current ordinal and advance past it."""
        with self._lock:
            ordinal = self._current
            self._current = ordinal.next()
            return ordinal

    def next_tracker(self) -> "Tracker":
        """Fork a tracker for a concurrently executed unit of work.

        The child starts at current.branch(); this tracker moves on to
        current.next(), so neither lineage can produce the other's ordinals.
        """
        with self._lock:
            child = Tracker(self._current.branch())
            self._current = self._current.next()
            return child

    def __repr__(self) -> str:
        return f"Tracker(current={self.current})"
