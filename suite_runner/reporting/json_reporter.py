"""JSON report generator for suite runs.

Generates structured JSON reports from a run's events.
"""

import json
import threading
from datetime import datetime, timezone
from operator import attrgetter
from pathlib import Path
from typing import Any, Optional, Union

from ..core.events import Event, EventKind
from .reporter import Reporter

_TEST_STATUS = {
    EventKind.TEST_SUCCEEDED: "passed",
    EventKind.TEST_FAILED: "failed",
    EventKind.TEST_IGNORED: "ignored",
    EventKind.TEST_PENDING: "pending",
}


class JsonReporter(Reporter):
    """Generates JSON reports from suite-run events.

    Used as a reporter it buffers events and, if a path was given, writes
    the report when disposed.
    """

    def __init__(self, path: Optional[Union[str, Path]] = None, run_name: str = "run"):
        """Initialize JSON reporter.

        Args:
            path: File written on dispose(). None = don't write.
            run_name: Name recorded in the report.
        """
        self.path = Path(path) if path else None
        self.run_name = run_name
        self._events: list[Event] = []
        self._lock = threading.Lock()

    def __call__(self, event: Event) -> None:
        with self._lock:
            self._events.append(event)

    def dispose(self) -> None:
        if self.path is None:
            return
        with self._lock:
            events = list(self._events)
        self.save(self.generate(self.run_name, events), self.path)

    def generate(
        self,
        run_name: str,
        events: list[Event],
        duration_ms: Optional[int] = None,
        error: Optional[str] = None,
    ) -> dict[str, Any]:
        """Generate a JSON report from run events.

        Args:
            run_name: Name of the run.
            events: Events of the run, in any order.
            duration_ms: Run duration. Default: taken from RunCompleted.
            error: Overall error message if the run could not complete.

        Returns:
            Report dictionary ready for JSON serialization.
        """
        events = sorted(events, key=attrgetter("ordinal"))
        tests = [e for e in events if e.kind in _TEST_STATUS]
        aborts = [
            e for e in events
            if e.kind in (EventKind.SUITE_ABORTED, EventKind.RUN_ABORTED)
        ]
        terminal = next((e for e in reversed(events) if e.is_terminal), None)

        if duration_ms is None:
            duration_ms = terminal.duration_ms if terminal and terminal.duration_ms else 0

        failed = sum(1 for e in tests if e.kind == EventKind.TEST_FAILED)
        if error or aborts:
            status = "aborted"
        elif terminal is not None and terminal.kind == EventKind.RUN_STOPPED:
            status = "stopped"
        elif failed:
            status = "failed"
        else:
            status = "passed"

        report = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "run": run_name,
            "status": status,
            "summary": {
                "total": len(tests),
                "passed": sum(1 for e in tests if e.kind == EventKind.TEST_SUCCEEDED),
                "failed": failed,
                "ignored": sum(1 for e in tests if e.kind == EventKind.TEST_IGNORED),
                "pending": sum(1 for e in tests if e.kind == EventKind.TEST_PENDING),
                "aborted": len(aborts),
                "duration_ms": duration_ms,
            },
            "tests": [
                {
                    "suite": e.suite_name,
                    "name": e.test_name,
                    "status": _TEST_STATUS[e.kind],
                    "duration_ms": e.duration_ms,
                    "reason": e.failure.message if e.failure else None,
                    "location": str(e.failure.location) if e.failure and e.failure.location else None,
                    "rerun": [e.rerun.suite_id, e.rerun.test_name] if e.rerun else None,
                }
                for e in tests
            ],
            "aborts": [
                {
                    "kind": e.kind.value,
                    "suite": e.suite_name or e.suite_id,
                    "category": e.abort_category.value if e.abort_category else None,
                    "reason": e.message,
                }
                for e in aborts
            ],
            "error": error,
        }

        return report

    def save(self, report: dict[str, Any], path: Union[str, Path]) -> Path:
        """Save report to a JSON file.

        Args:
            report: Report dictionary.
            path: Output file path.

        Returns:
            Path to the saved file.
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w", encoding="utf-8") as f:
            json.dump(report, f, indent=2, ensure_ascii=False)

        return path

    def to_json_string(self, report: dict[str, Any], pretty: bool = True) -> str:
        """Convert report to JSON string."""
        if pretty:
            return json.dumps(report, indent=2, ensure_ascii=False)
        return json.dumps(report, ensure_ascii=False)

    def generate_flow_output(
        self,
        report: dict[str, Any],
        report_path: Optional[str] = None,
        command: str = "run",
    ) -> dict[str, Any]:
        """Generate the CLI's JSON summary.

        Follows the flow JSON output standard:
        {
            "success": bool,
            "command": "run",
            "data": { ... },
            "message": str
        }

        Args:
            report: Report dictionary from generate().
            report_path: Path where the report was saved.
            command: CLI command that produced the report.

        Returns:
            Flow-compatible JSON output.
        """
        summary = report["summary"]
        status = report["status"]
        all_passed = status == "passed"

        data: dict[str, Any] = {
            "run": report["run"],
            "total_tests": summary["total"],
            "passed": summary["passed"],
            "failed": summary["failed"],
            "ignored": summary["ignored"],
            "pending": summary["pending"],
            "aborted": summary["aborted"],
            "duration_ms": summary["duration_ms"],
        }

        if report_path:
            data["report_path"] = report_path

        if report.get("error"):
            msg = f"Run failed: {report['error']}"
        elif status == "aborted":
            reasons = "; ".join(a["reason"] for a in report["aborts"] if a["reason"])
            msg = f"Run aborted: {reasons}" if reasons else "Run aborted"
        elif status == "stopped":
            msg = "Run stopped before completion"
        elif status == "failed":
            msg = f"{summary['failed']} of {summary['total']} tests failed"
        else:
            msg = "All tests passed"

        return {
            "success": all_passed,
            "command": command,
            "data": data,
            "message": msg,
        }
