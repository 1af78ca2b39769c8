"""Line-oriented console reporter."""

import sys
import threading
from typing import Optional, TextIO

from ..core.events import Event, EventKind
from ..messages import message
from .reporter import Reporter

_STATUS = {
    EventKind.TEST_SUCCEEDED: "PASS",
    EventKind.TEST_FAILED: "FAIL",
    EventKind.TEST_IGNORED: "IGNORED",
    EventKind.TEST_PENDING: "PENDING",
    EventKind.SUITE_ABORTED: "ABORTED",
}


class PrintReporter(Reporter):
    """Prints one line per interesting event."""

    def __init__(self, out: Optional[TextIO] = None, verbose: bool = False):
        """Initialize print reporter.

        Args:
            out: Output stream. Default: sys.stdout.
            verbose: Also print starting events.
        """
        self.out = out or sys.stdout
        self.verbose = verbose
        self._lock = threading.Lock()

    def __call__(self, event: Event) -> None:
        line = self._format(event)
        if line is None:
            return
        with self._lock:
            print(line, file=self.out)

    def _format(self, event: Event) -> Optional[str]:
        kind = event.kind

        if kind in _STATUS:
            subject = event.test_name or event.suite_name
            line = f"  [{_STATUS[kind]}] {subject}"
            if event.failure:
                line += f": {event.failure.message}"
                if event.failure.location:
                    line += f" ({event.failure.location})"
            return line

        if kind == EventKind.RUN_STARTING:
            return message("runStarting", event.expected_test_count or 0)
        if kind == EventKind.RUN_COMPLETED:
            return message("runCompleted", event.duration_ms or 0)
        if kind == EventKind.RUN_STOPPED:
            return message("runStopped")
        if kind == EventKind.RUN_ABORTED:
            return message("runAborted", event.message)
        if kind == EventKind.SUITE_STARTING:
            return f"{event.suite_name}:"

        if self.verbose:
            return f"  {event}"
        return None
