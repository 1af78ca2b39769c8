"""Result collector for suite runs.

Collects events from every branch of a run and merges them into ordinal
order.
"""

import threading
from collections import Counter
from dataclasses import dataclass, field
from operator import attrgetter
from typing import Optional

from ..core.events import Event, EventKind
from ..reporting.reporter import Reporter


@dataclass
class CollectedResult:
    """Aggregated events of one run, in ordinal order."""
    events: list[Event] = field(default_factory=list)

    def count(self, kind: EventKind) -> int:
        return sum(1 for e in self.events if e.kind == kind)

    def get_counts(self) -> dict[str, int]:
        """Number of events per kind value."""
        counts = Counter(e.kind.value for e in self.events)
        return dict(counts)

    @property
    def has_errors(self) -> bool:
        return any(
            e.kind in (EventKind.TEST_FAILED, EventKind.SUITE_ABORTED, EventKind.RUN_ABORTED)
            for e in self.events
        )

    @property
    def terminal_event(self) -> Optional[Event]:
        for event in reversed(self.events):
            if event.is_terminal:
                return event
        return None


class EventCollector(Reporter):
    """Reporter that keeps every event it receives.

    Safe to call from several worker threads at once.
    """

    def __init__(self):
        self._events: list[Event] = []
        self._lock = threading.Lock()

    def __call__(self, event: Event) -> None:
        with self._lock:
            self._events.append(event)

    @property
    def received(self) -> list[Event]:
        """Events in arrival order."""
        with self._lock:
            return list(self._events)

    def ordered_events(self) -> list[Event]:
        """Events sorted by ordinal, i.e. in sequential-run order."""
        return sorted(self.received, key=attrgetter("ordinal"))

    def result(self) -> CollectedResult:
        return CollectedResult(events=self.ordered_events())

    def clear(self) -> None:
        with self._lock:
            self._events.clear()
