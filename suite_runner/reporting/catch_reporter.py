"""Fault-isolating reporter wrapper.

A misbehaving reporter must never abort a run: every fault it raises is
written as one diagnostic line to a fixed stream and swallowed.
"""

import sys
import threading
from typing import Callable, Optional, TextIO

from loguru import logger

from ..core.events import Event
from ..messages import message
from .reporter import Reporter


class CatchReporter(Reporter):
    """Wraps a reporter, catching anything it raises."""

    def __init__(self, reporter: Reporter, out: Optional[TextIO] = None):
        """Initialize catch reporter.

        Args:
            reporter: The wrapped reporter.
            out: Diagnostic stream. Default: sys.stderr at the time of a fault.
        """
        self.reporter = reporter
        self._out = out
        self._lock = threading.Lock()

    @property
    def out(self) -> TextIO:
        return self._out or sys.stderr

    def __call__(self, event: Event) -> None:
        self.dispatch("apply", lambda reporter: reporter(event), event)

    def dispose(self) -> None:
        self.dispatch("dispose", _dispose)

    def dispatch(
        self,
        method_name: str,
        method_call: Callable[[Reporter], None],
        event: Optional[Event] = None,
    ) -> None:
        """Invoke method_call on the wrapped reporter, swallowing any fault."""
        try:
            method_call(self.reporter)
        except Exception as e:
            self._handle_reporter_exception(e, method_name, event)

    def _handle_reporter_exception(
        self, error: Exception, method_name: str, event: Optional[Event]
    ) -> None:
        line = message(
            "reporterThrew",
            f"{type(self.reporter).__name__}.{method_name}",
            type(error).__name__,
            error,
            event if event is not None else "<none>",
        )
        # One write per line under a lock: concurrent faults may interleave
        # lines but never split one.
        with self._lock:
            self.out.write(line.replace("\n", " ") + "\n")
            self.out.flush()
        logger.opt(exception=error).debug("Reporter fault swallowed in {}", method_name)


def _dispose(reporter: Reporter) -> None:
    # Plain callables are accepted as reporters and have nothing to dispose.
    dispose = getattr(reporter, "dispose", None)
    if dispose is not None:
        dispose()


def wrap_reporter_if_necessary(reporter: Reporter) -> Reporter:
    """Return reporter unchanged if it already isolates faults."""
    # Local import: DispatchReporter isolates each of its reporters itself.
    from .dispatch_reporter import DispatchReporter

    if isinstance(reporter, (CatchReporter, DispatchReporter)):
        return reporter
    return CatchReporter(reporter)
