"""Fan-out reporter delivering each event to several reporters."""

from collections.abc import Iterable
from typing import Optional, TextIO

from ..core.events import Event
from .catch_reporter import CatchReporter
from .reporter import Reporter


class DispatchReporter(Reporter):
    """Delivers every event to each reporter, isolating them from each other."""

    def __init__(self, reporters: Iterable[Reporter], out: Optional[TextIO] = None):
        self.reporters = [
            r if isinstance(r, CatchReporter) else CatchReporter(r, out)
            for r in reporters
        ]

    def __call__(self, event: Event) -> None:
        for reporter in self.reporters:
            reporter(event)

    def dispose(self) -> None:
        for reporter in self.reporters:
            reporter.dispose()
