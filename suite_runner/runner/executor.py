"""Suite executor - orchestrates a complete run.

Coordinates the full run flow:
1. Count the tests the filter lets through
2. Report RunStarting
3. Run every top-level suite (inline or on a distributor)
4. Report RunCompleted, RunStopped or RunAborted
5. Dispose reporters and optionally save the JSON report
"""

import time
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from loguru import logger

from ..core.events import AbortCategory, Event, EventKind, FailureKind
from ..core.filter import Filter
from ..core.ordinal import Ordinal, Tracker
from ..core.outcome import describe_exception
from ..core.stopper import Stopper
from ..errors import NullArgumentError
from ..messages import message
from ..reporting.dispatch_reporter import DispatchReporter
from ..reporting.json_reporter import JsonReporter
from ..reporting.reporter import Reporter
from ..tree.suite import Suite, run_suite
from .distributor import ConcurrentDistributor
from .result_collector import CollectedResult, EventCollector


@dataclass
class ExecutionConfig:
    """Configuration for a run."""
    workers: int = 0
    save_report: bool = False
    report_dir: Optional[Path] = None
    run_name: str = "run"


@dataclass
class ExecutionResult:
    """Complete result of a run."""
    run_name: str
    succeeded: int = 0
    failed: int = 0
    ignored: int = 0
    pending: int = 0
    suites_aborted: int = 0
    stopped: bool = False
    aborted: bool = False
    events: list[Event] = field(default_factory=list)
    duration_ms: int = 0
    error: Optional[str] = None
    report_path: Optional[str] = None

    @property
    def all_passed(self) -> bool:
        return not (
            self.failed or self.suites_aborted or self.stopped or self.aborted or self.error
        )

    @classmethod
    def from_collected(cls, run_name: str, collected: CollectedResult) -> "ExecutionResult":
        terminal = collected.terminal_event
        return cls(
            run_name=run_name,
            succeeded=collected.count(EventKind.TEST_SUCCEEDED),
            failed=collected.count(EventKind.TEST_FAILED),
            ignored=collected.count(EventKind.TEST_IGNORED),
            pending=collected.count(EventKind.TEST_PENDING),
            suites_aborted=collected.count(EventKind.SUITE_ABORTED),
            stopped=terminal is not None and terminal.kind == EventKind.RUN_STOPPED,
            aborted=terminal is not None and terminal.kind == EventKind.RUN_ABORTED,
            events=collected.events,
        )

    def to_flow_json(self, command: str = "run") -> dict:
        """Convert to flow CLI compatible JSON output."""
        reporter = JsonReporter()
        report = reporter.generate(
            run_name=self.run_name,
            events=self.events,
            duration_ms=self.duration_ms,
            error=self.error,
        )
        return reporter.generate_flow_output(report, self.report_path, command)


class SuiteExecutor:
    """Orchestrates a run over a list of top-level suites.

    Events go to an internal collector plus the caller's reporter, each
    isolated from the other's faults.
    """

    def __init__(
        self,
        suites: Iterable[Suite],
        filter: Optional[Filter] = None,
        reporter: Optional[Reporter] = None,
        config: Optional[ExecutionConfig] = None,
        properties: Optional[Mapping[str, Any]] = None,
        stopper: Optional[Stopper] = None,
        test_name: Optional[str] = None,
        run_stamp: int = 0,
    ):
        """Initialize suite executor.

        Args:
            suites: Top-level suites, run in order.
            filter: Tag filter. Default: Filter.default().
            reporter: Additional event sink (e.g. a PrintReporter).
            config: Execution configuration.
            properties: Free-form mapping handed to every suite.
            stopper: Stop flag. Default: a fresh Stopper.
            test_name: Run only this test of each suite.
            run_stamp: First component of every ordinal of the run.
        """
        self.suites = list(suites)
        self.filter = filter if filter is not None else Filter.default()
        self.reporter = reporter
        self.config = config or ExecutionConfig()
        self.properties = dict(properties or {})
        self.stopper = stopper if stopper is not None else Stopper()
        self.test_name = test_name
        self.run_stamp = run_stamp
        self._json = JsonReporter()

    def expected_test_count(self) -> int:
        if self.test_name is None:
            return sum(s.expected_test_count(self.filter) for s in self.suites)

        count = 0
        for suite in self.suites:
            example = suite.example(self.test_name)
            if example is not None and self.filter.included_count(
                {example.full_name: example.tags}, suite.tags
            ):
                count += 1
        return count

    def execute(self) -> ExecutionResult:
        """Execute the full run.

        Returns:
            ExecutionResult with every event in ordinal order.

        Raises:
            NullArgumentError: If a suite is None.
        """
        start_time = time.perf_counter()
        collector = EventCollector()
        reporters: list[Reporter] = [collector]
        if self.reporter is not None:
            reporters.append(self.reporter)
        reporter = DispatchReporter(reporters)
        tracker = Tracker(Ordinal.first(self.run_stamp))
        error: Optional[str] = None

        try:
            expected = self.expected_test_count()
            logger.debug("Starting run of {} suites, {} tests", len(self.suites), expected)
            reporter(Event(
                kind=EventKind.RUN_STARTING,
                ordinal=tracker.next_ordinal(),
                expected_test_count=expected,
                message=message("runStarting", expected),
            ))

            if self.config.workers > 0 and self.test_name is None:
                self._run_distributed(reporter, tracker)
            else:
                self._run_sequential(reporter, tracker)

            duration_ms = int((time.perf_counter() - start_time) * 1000)
            if self.stopper.stop_requested:
                logger.warning(message("runStopped"))
                reporter(Event(
                    kind=EventKind.RUN_STOPPED,
                    ordinal=tracker.next_ordinal(),
                    duration_ms=duration_ms,
                    message=message("runStopped"),
                ))
            else:
                reporter(Event(
                    kind=EventKind.RUN_COMPLETED,
                    ordinal=tracker.next_ordinal(),
                    duration_ms=duration_ms,
                    message=message("runCompleted", duration_ms),
                ))

        except NullArgumentError:
            raise

        except Exception as e:
            error = message("bigProblems", type(e).__name__, e)
            logger.warning(error)
            reporter(Event(
                kind=EventKind.RUN_ABORTED,
                ordinal=tracker.next_ordinal(),
                message=error,
                failure=describe_exception(e, FailureKind.UNEXPECTED),
                abort_category=AbortCategory.UNEXPECTED,
            ))

        finally:
            reporter.dispose()

        result = ExecutionResult.from_collected(self.config.run_name, collector.result())
        result.duration_ms = int((time.perf_counter() - start_time) * 1000)
        result.error = error

        # Save report if configured
        if self.config.save_report:
            result.report_path = self._save_report(result)

        return result

    def _suites_to_run(self) -> list[Suite]:
        """Suites holding the named test, or every suite when none does.

        A name no suite knows still reaches each suite so that the missing
        entry point is reported as SuiteAborted.
        """
        if self.test_name is None:
            return list(self.suites)
        holders = [s for s in self.suites if s.example(self.test_name) is not None]
        return holders or list(self.suites)

    def _run_sequential(self, reporter: Reporter, tracker: Tracker) -> None:
        for suite in self._suites_to_run():
            if self.stopper.stop_requested:
                break
            run_suite(
                suite, reporter, self.stopper, self.filter, self.properties,
                None, tracker, test_name=self.test_name,
            )

    def _run_distributed(self, reporter: Reporter, tracker: Tracker) -> None:
        with ConcurrentDistributor(
            reporter, self.stopper, self.filter, self.properties,
            max_workers=self.config.workers,
        ) as distributor:
            for suite in self.suites:
                if self.stopper.stop_requested:
                    break
                distributor.put(suite, tracker.next_tracker())
            distributor.wait()
            logger.debug("Distributed {} suites", distributor.submitted)

    def _save_report(self, result: ExecutionResult) -> Optional[str]:
        """Save run report to file."""
        try:
            report_dir = self.config.report_dir or Path(".")
            report_path = Path(report_dir) / f"suite_report_{result.run_name}.json"

            report = self._json.generate(
                run_name=result.run_name,
                events=result.events,
                duration_ms=result.duration_ms,
                error=result.error,
            )

            saved_path = self._json.save(report, report_path)
            logger.info("Report saved: {}", saved_path)
            return str(saved_path)

        except OSError as e:
            logger.warning("Failed to save report: {}", e)
            return None
