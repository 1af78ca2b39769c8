"""Event records delivered to reporters.

Events are produced only by the traversal (and the run drivers) and are
never mutated after emission. Every event carries the ordinal that places
it in the run's total order.
"""

import threading
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from ..errors import AbortCategory
from .ordinal import Ordinal


class EventKind(str, Enum):
    """Kinds of reported events."""
    RUN_STARTING = "run_starting"
    RUN_COMPLETED = "run_completed"
    RUN_STOPPED = "run_stopped"
    RUN_ABORTED = "run_aborted"
    SUITE_STARTING = "suite_starting"
    SUITE_COMPLETED = "suite_completed"
    SUITE_ABORTED = "suite_aborted"
    TEST_STARTING = "test_starting"
    TEST_SUCCEEDED = "test_succeeded"
    TEST_FAILED = "test_failed"
    TEST_IGNORED = "test_ignored"
    TEST_PENDING = "test_pending"


TERMINAL_KINDS = {
    EventKind.RUN_COMPLETED,
    EventKind.RUN_STOPPED,
    EventKind.RUN_ABORTED,
}


class FailureKind(str, Enum):
    """Why a test failed."""
    ASSERTION = "assertion"
    UNEXPECTED = "unexpected"


@dataclass(frozen=True)
class Location:
    """Source position hint for a failure."""
    file: str
    line: int
    function: str = ""

    def __str__(self) -> str:
        return f"{self.file}:{self.line}"


@dataclass(frozen=True)
class FailureDetail:
    """Description of a failed test or aborted suite/run."""
    message: str
    kind: FailureKind = FailureKind.UNEXPECTED
    exception_type: Optional[str] = None
    location: Optional[Location] = None
    traceback: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "message": self.message,
            "kind": self.kind.value,
            "exception_type": self.exception_type,
            "location": str(self.location) if self.location else None,
        }


@dataclass(frozen=True)
class RerunDescriptor:
    """Enough information for the rerunner to rebuild and rerun a test."""
    suite_id: str
    test_name: Optional[str] = None


@dataclass(frozen=True)
class Event:
    """A single reported event."""
    kind: EventKind
    ordinal: Ordinal
    suite_name: Optional[str] = None
    suite_id: Optional[str] = None
    test_name: Optional[str] = None
    short_name: Optional[str] = None
    message: str = ""
    failure: Optional[FailureDetail] = None
    rerun: Optional[RerunDescriptor] = None
    abort_category: Optional[AbortCategory] = None
    expected_test_count: Optional[int] = None
    duration_ms: Optional[int] = None
    thread_name: str = field(default_factory=lambda: threading.current_thread().name)
    timestamp: float = field(default_factory=time.time)

    @property
    def is_terminal(self) -> bool:
        return self.kind in TERMINAL_KINDS

    def to_dict(self) -> dict[str, Any]:
        """Convert event to dictionary for serialization."""
        data: dict[str, Any] = {
            "kind": self.kind.value,
            "ordinal": list(self.ordinal.stamps),
            "suite_name": self.suite_name,
            "suite_id": self.suite_id,
            "test_name": self.test_name,
            "short_name": self.short_name,
            "message": self.message,
            "thread": self.thread_name,
            "timestamp": self.timestamp,
        }
        if self.failure:
            data["failure"] = self.failure.to_dict()
        if self.rerun:
            data["rerun"] = {
                "suite_id": self.rerun.suite_id,
                "test_name": self.rerun.test_name,
            }
        if self.abort_category:
            data["abort_category"] = self.abort_category.value
        if self.expected_test_count is not None:
            data["expected_test_count"] = self.expected_test_count
        if self.duration_ms is not None:
            data["duration_ms"] = self.duration_ms
        return {k: v for k, v in data.items() if v is not None}

    def __str__(self) -> str:
        subject = self.test_name or self.suite_name or ""
        return f"{self.kind.value}@{self.ordinal}" + (f"({subject})" if subject else "")
