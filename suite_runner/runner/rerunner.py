"""Rerunning a single test (or suite) from its rerun descriptor.

Nothing raised while resolving or running escapes to the caller: resolution
failures become categorized RunAborted events, anything else a RunAborted
with the "unexpected" category.
"""

import time
from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any, Optional

from loguru import logger

from ..core.events import Event, EventKind, FailureKind
from ..core.filter import Filter
from ..core.ordinal import Ordinal, Tracker
from ..core.outcome import describe_exception
from ..core.stopper import Stopper
from ..errors import AbortCategory, EntryPointMissingError, ResolutionError, require
from ..messages import message
from ..reporting.catch_reporter import wrap_reporter_if_necessary
from ..reporting.reporter import Reporter
from ..tree.suite import run_suite
from .resolver import SuiteResolver

if TYPE_CHECKING:
    from .distributor import Distributor


class Rerunner:
    """Rebuilds suites through a resolver and reruns them."""

    def __init__(self, resolver: SuiteResolver):
        """Initialize rerunner.

        Args:
            resolver: Turns suite identifiers into fresh suite instances.
        """
        require(resolver=resolver)
        self.resolver = resolver

    def rerun(
        self,
        suite_id: str,
        test_name: str,
        reporter: Reporter,
        stopper: Stopper,
        include_tags: Iterable[str],
        exclude_tags: Iterable[str],
        config: Mapping[str, Any],
        distributor: Optional["Distributor"] = None,
        start_ordinal: Optional[Ordinal] = None,
    ) -> Ordinal:
        """Rerun exactly one test of one suite.

        Emits RunStarting, the test's events and RunCompleted (or RunStopped);
        or a single RunAborted if the suite or test cannot be resolved.

        Returns:
            The first ordinal not used by this rerun.
        """
        require(
            suite_id=suite_id, test_name=test_name, reporter=reporter, stopper=stopper,
            include_tags=include_tags, exclude_tags=exclude_tags, config=config,
        )
        reporter = wrap_reporter_if_necessary(reporter)
        tracker = Tracker(start_ordinal or Ordinal.first())

        try:
            filter = Filter(include_tags, exclude_tags)
            suite = self.resolver.resolve(suite_id)
            if suite.example(test_name) is None:
                raise EntryPointMissingError(message("cannotFindTest", test_name), suite_id)

            reporter(Event(
                kind=EventKind.RUN_STARTING,
                ordinal=tracker.next_ordinal(),
                expected_test_count=1,
                message=message("runStarting", 1),
            ))
            start = time.perf_counter()
            suite.run(test_name, reporter, stopper, filter, config, distributor, tracker)
            self._report_end(reporter, stopper, tracker, start)
        except ResolutionError as e:
            self._report_aborted(reporter, tracker, suite_id, e, e.category)
        except Exception as e:
            self._report_aborted(reporter, tracker, suite_id, e, AbortCategory.UNEXPECTED)

        return tracker.current

    def rerun_suite(
        self,
        suite_id: str,
        reporter: Reporter,
        stopper: Stopper,
        include_tags: Iterable[str],
        exclude_tags: Iterable[str],
        config: Mapping[str, Any],
        distributor: Optional["Distributor"] = None,
        start_ordinal: Optional[Ordinal] = None,
    ) -> Ordinal:
        """Rerun a whole suite, bracketed by SuiteStarting/SuiteCompleted."""
        require(
            suite_id=suite_id, reporter=reporter, stopper=stopper,
            include_tags=include_tags, exclude_tags=exclude_tags, config=config,
        )
        reporter = wrap_reporter_if_necessary(reporter)
        tracker = Tracker(start_ordinal or Ordinal.first())

        try:
            filter = Filter(include_tags, exclude_tags)
            suite = self.resolver.resolve(suite_id)
            expected = suite.expected_test_count(filter)

            reporter(Event(
                kind=EventKind.RUN_STARTING,
                ordinal=tracker.next_ordinal(),
                expected_test_count=expected,
                message=message("runStarting", expected),
            ))
            start = time.perf_counter()
            run_suite(suite, reporter, stopper, filter, config, distributor, tracker)
            self._report_end(reporter, stopper, tracker, start)
        except ResolutionError as e:
            self._report_aborted(reporter, tracker, suite_id, e, e.category)
        except Exception as e:
            self._report_aborted(reporter, tracker, suite_id, e, AbortCategory.UNEXPECTED)

        return tracker.current

    @staticmethod
    def _report_end(reporter: Reporter, stopper: Stopper, tracker: Tracker, start: float) -> None:
        if stopper.stop_requested:
            reporter(Event(
                kind=EventKind.RUN_STOPPED,
                ordinal=tracker.next_ordinal(),
                message=message("runStopped"),
            ))
            return

        duration_ms = int((time.perf_counter() - start) * 1000)
        reporter(Event(
            kind=EventKind.RUN_COMPLETED,
            ordinal=tracker.next_ordinal(),
            duration_ms=duration_ms,
            message=message("runCompleted", duration_ms),
        ))

    @staticmethod
    def _report_aborted(
        reporter: Reporter,
        tracker: Tracker,
        suite_id: str,
        error: Exception,
        category: AbortCategory,
    ) -> None:
        if category is AbortCategory.UNEXPECTED:
            text = message("bigProblems", type(error).__name__, error)
        else:
            text = str(error)
        logger.warning("Rerun of {} aborted ({}): {}", suite_id, category.value, text)

        reporter(Event(
            kind=EventKind.RUN_ABORTED,
            ordinal=tracker.next_ordinal(),
            suite_id=suite_id,
            message=text,
            failure=describe_exception(error, FailureKind.UNEXPECTED),
            abort_category=category,
        ))
