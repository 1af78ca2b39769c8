"""Suites and the traversal that runs them.

Traversal of one suite instance:

    run -> run_nested_suites -> run_tests -> run_test (per test)

Nested suites run inline, depth-first, unless a distributor is given, in
which case each one is handed off with its own forked tracker and the
traversal moves on without waiting. The stopper is polled before every
nested suite and every test; a running test body is never interrupted.
"""

import time
from collections.abc import Iterable, Iterator, Mapping
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Optional

from loguru import logger

from ..core.events import Event, EventKind, FailureKind, RerunDescriptor
from ..core.filter import IGNORE_TAG, Filter, FilterDecision
from ..core.ordinal import Tracker
from ..core.outcome import Outcome, OutcomeStatus, describe_exception
from ..core.stopper import Stopper
from ..errors import (
    DuplicateTestNameError,
    EntryPointMissingError,
    NullArgumentError,
    TestPendingError,
    require,
)
from ..messages import message
from ..reporting.catch_reporter import wrap_reporter_if_necessary
from ..reporting.reporter import Reporter
from .behavior import Behavior
from .nodes import Description, Example, TestBody, Trunk, make_example

if TYPE_CHECKING:
    from ..runner.distributor import Distributor


class Suite:
    """A named tree of tests plus non-owning references to nested suites.

    Tests are registered with test()/it()/ignore(), grouped with describe()
    and pulled in from shared behaviors with behaves_like(). Subclasses
    usually register their tests in __init__ so the rerunner can rebuild
    them from an identifier.
    """

    def __init__(
        self,
        name: Optional[str] = None,
        tags: Iterable[str] = (),
        nested_suites: Iterable["Suite"] = (),
        suite_id: Optional[str] = None,
    ):
        """Initialize suite.

        Args:
            name: Display name. Default: the class name.
            tags: Suite-level tags (see Filter.inherit_suite_tags).
            nested_suites: Suites run before this suite's own tests.
            suite_id: Rerun identifier. Default: "module:QualName" for
                      subclasses, None (not rerunnable) for plain Suites.
        """
        self.suite_name = name or type(self).__name__
        self.tags = frozenset(tags)
        self.suite_id = suite_id or _default_suite_id(type(self))
        self._nested_suites: list[Suite] = list(nested_suites)
        self._trunk = Trunk()
        self._current_branch = self._trunk
        self._examples_by_name: dict[str, Example] = {}

    # ---------------- registration ----------------

    def test(self, name: str, body: Optional[TestBody] = None, tags: Iterable[str] = ()):
        """Register a test shown under its own name. Usable as a decorator."""
        return self._register(name, False, body, tags)

    def it(self, name: str, body: Optional[TestBody] = None, tags: Iterable[str] = ()):
        """Register a test shown as "<context> should <name>". Usable as a decorator."""
        return self._register(name, True, body, tags)

    def ignore(
        self,
        name: str,
        body: Optional[TestBody] = None,
        tags: Iterable[str] = (),
        needs_prefix: bool = False,
    ):
        """Register a test tagged as ignored."""
        return self._register(name, needs_prefix, body, set(tags) | {IGNORE_TAG})

    @contextmanager
    def describe(self, name: str) -> Iterator[Description]:
        """Group the tests registered inside the with-block under name."""
        branch = Description(self._current_branch, name)
        self._current_branch.add(branch)
        previous, self._current_branch = self._current_branch, branch
        try:
            yield branch
        finally:
            self._current_branch = previous

    def behaves_like(self, behavior: Behavior, tags: Iterable[str] = ()) -> list[Example]:
        """Materialize a shared behavior at the current position."""
        examples = behavior.materialize(self._current_branch)
        for example in examples:
            example.tags = frozenset(tags)
            self._attach(example)
        return examples

    def add_nested_suite(self, suite: "Suite") -> "Suite":
        require(suite=suite)
        self._nested_suites.append(suite)
        return suite

    def _register(
        self,
        raw_name: str,
        needs_prefix: bool,
        body: Optional[TestBody],
        tags: Iterable[str],
    ):
        tag_set = frozenset(tags)

        def register(fn: TestBody) -> TestBody:
            example = make_example(self._current_branch, raw_name, needs_prefix, fn, tag_set)
            self._attach(example)
            return fn

        if body is not None:
            return register(body)
        return register

    def _attach(self, example: Example) -> None:
        if example.full_name in self._examples_by_name:
            raise DuplicateTestNameError(
                f"Duplicate test name in {self.suite_name}: {example.full_name}"
            )
        self._current_branch.add(example)
        self._examples_by_name[example.full_name] = example

    # ---------------- queries ----------------

    @property
    def nested_suites(self) -> tuple["Suite", ...]:
        return tuple(self._nested_suites)

    @property
    def test_names(self) -> list[str]:
        """Full test names in declaration order."""
        return [example.full_name for example in self._trunk.examples()]

    def examples(self) -> list[Example]:
        return list(self._trunk.examples())

    def example(self, test_name: str) -> Optional[Example]:
        return self._examples_by_name.get(test_name)

    def tags_for(self, test_name: str) -> frozenset[str]:
        example = self._examples_by_name.get(test_name)
        if example is None:
            raise KeyError(test_name)
        return example.tags

    def expected_test_count(self, filter: Filter) -> int:
        """Number of tests this suite and its nested suites will run."""
        own = filter.included_count(
            {e.full_name: e.tags for e in self._trunk.examples()}, self.tags
        )
        return own + sum(s.expected_test_count(filter) for s in self._nested_suites)

    # ---------------- lifecycle hooks ----------------

    def before_all(self) -> None:
        """Called once before the suite's nested suites and tests run."""

    def after_all(self) -> None:
        """Called once after the suite's nested suites and tests, even if they raised."""

    def before_each(self) -> None:
        """Called before every test body. A fault here fails the test."""

    def after_each(self) -> None:
        """Called after every test body that started, even if it failed."""

    # ---------------- traversal ----------------

    def run(
        self,
        test_name: Optional[str],
        reporter: Reporter,
        stopper: Stopper,
        filter: Filter,
        config: Mapping[str, Any],
        distributor: Optional["Distributor"],
        tracker: Tracker,
    ) -> None:
        """Run this suite's nested suites and tests.

        Args:
            test_name: Run only this test (still subject to the filter).
                       None runs every nested suite and test.
            reporter: Event sink; wrapped for fault isolation if needed.
            stopper: Cooperative stop flag.
            filter: Tag filter.
            config: Free-form configuration passed on to nested suites.
            distributor: If given, nested suites are handed off to it.
            tracker: Ordinal tracker of the calling lineage.

        Raises:
            NullArgumentError: If a required argument is None.
            EntryPointMissingError: If test_name names no test of this suite.
            Exception: Whatever before_all() or after_all() raise.
        """
        require(reporter=reporter, stopper=stopper, filter=filter, config=config, tracker=tracker)
        reporter = wrap_reporter_if_necessary(reporter)

        self.before_all()
        try:
            if test_name is None:
                self.run_nested_suites(reporter, stopper, filter, config, distributor, tracker)
            self.run_tests(test_name, reporter, stopper, filter, config, tracker)
        except Exception:
            # The first error is the one reported.
            try:
                self.after_all()
            except Exception as later:
                logger.warning("{}: after_all also failed: {}", self.suite_name, later)
            raise
        self.after_all()

        if stopper.stop_requested:
            logger.warning("{}: {}", self.suite_name, message("executeStopping"))

    def run_nested_suites(
        self,
        reporter: Reporter,
        stopper: Stopper,
        filter: Filter,
        config: Mapping[str, Any],
        distributor: Optional["Distributor"],
        tracker: Tracker,
    ) -> None:
        for nested in self._nested_suites:
            if stopper.stop_requested:
                break
            if distributor is not None:
                logger.debug("Distributing nested suite {}", nested.suite_name)
                distributor.put(nested, tracker.next_tracker())
            else:
                run_suite(nested, reporter, stopper, filter, config, None, tracker)

    def run_tests(
        self,
        test_name: Optional[str],
        reporter: Reporter,
        stopper: Stopper,
        filter: Filter,
        config: Mapping[str, Any],
        tracker: Tracker,
    ) -> None:
        if test_name is not None:
            example = self._examples_by_name.get(test_name)
            if example is None:
                raise EntryPointMissingError(
                    message("cannotFindTest", test_name), identifier=self.suite_id or ""
                )
            examples: Iterable[Example] = [example]
        else:
            examples = self._trunk.examples()

        for example in examples:
            if stopper.stop_requested:
                break
            decision = filter.should_run(example.tags, self.tags)
            if decision is FilterDecision.RUN:
                self.run_test(example, reporter, config, tracker)
            elif decision is FilterDecision.SKIP_AND_REPORT:
                reporter(self._test_event(
                    EventKind.TEST_IGNORED, tracker, example, message=message("testIgnored")
                ))

    def run_test(
        self,
        example: Example,
        reporter: Reporter,
        config: Mapping[str, Any],
        tracker: Tracker,
    ) -> Outcome:
        """Run one example's body exactly once and report the outcome."""
        reporter(self._test_event(EventKind.TEST_STARTING, tracker, example))
        logger.debug("Running test {}", example.full_name)

        start = time.perf_counter()
        outcome = self._invoke(example)
        duration_ms = int((time.perf_counter() - start) * 1000)

        if outcome.status is OutcomeStatus.SUCCEEDED:
            event = self._test_event(
                EventKind.TEST_SUCCEEDED, tracker, example, duration_ms=duration_ms
            )
        elif outcome.status is OutcomeStatus.PENDING:
            event = self._test_event(
                EventKind.TEST_PENDING, tracker, example,
                message=outcome.message or message("testPending"),
            )
        else:
            event = self._test_event(
                EventKind.TEST_FAILED, tracker, example,
                message=outcome.failure.message if outcome.failure else "",
                failure=outcome.failure,
                duration_ms=duration_ms,
            )
        reporter(event)
        return outcome

    def _invoke(self, example: Example) -> Outcome:
        outcome = _outcome_of(self.before_each)
        if not outcome.succeeded:
            return outcome

        outcome = _outcome_of(example.body)
        after = _outcome_of(self.after_each)
        if outcome.succeeded:
            return after
        return outcome

    def _test_event(self, kind: EventKind, tracker: Tracker, example: Example, **fields) -> Event:
        return Event(
            kind=kind,
            ordinal=tracker.next_ordinal(),
            suite_name=self.suite_name,
            suite_id=self.suite_id,
            test_name=example.full_name,
            short_name=example.short_name,
            rerun=self.rerun_descriptor(example.full_name),
            **fields,
        )

    def rerun_descriptor(self, test_name: Optional[str] = None) -> Optional[RerunDescriptor]:
        if self.suite_id is None:
            return None
        return RerunDescriptor(self.suite_id, test_name)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(name={self.suite_name!r}, "
            f"tests={len(self._examples_by_name)}, nested={len(self._nested_suites)})"
        )


def run_suite(
    suite: Suite,
    reporter: Reporter,
    stopper: Stopper,
    filter: Filter,
    config: Mapping[str, Any],
    distributor: Optional["Distributor"],
    tracker: Tracker,
    test_name: Optional[str] = None,
) -> bool:
    """Run a suite bracketed by SuiteStarting and SuiteCompleted/SuiteAborted.

    An unexpected error from the suite aborts only that suite.

    Returns:
        True if the suite completed, False if it was aborted.
    """
    require(
        suite=suite, reporter=reporter, stopper=stopper, filter=filter, config=config,
        tracker=tracker,
    )
    reporter = wrap_reporter_if_necessary(reporter)
    rerun = suite.rerun_descriptor()

    reporter(Event(
        kind=EventKind.SUITE_STARTING,
        ordinal=tracker.next_ordinal(),
        suite_name=suite.suite_name,
        suite_id=suite.suite_id,
        message=message("suiteExecutionStarting"),
        rerun=rerun,
    ))

    start = time.perf_counter()
    try:
        suite.run(test_name, reporter, stopper, filter, config, distributor, tracker)
    except NullArgumentError:
        raise
    except Exception as e:
        logger.warning("Suite {} aborted: {}: {}", suite.suite_name, type(e).__name__, e)
        reporter(Event(
            kind=EventKind.SUITE_ABORTED,
            ordinal=tracker.next_ordinal(),
            suite_name=suite.suite_name,
            suite_id=suite.suite_id,
            message=message("executeException"),
            failure=describe_exception(e, FailureKind.UNEXPECTED),
            rerun=rerun,
        ))
        return False

    reporter(Event(
        kind=EventKind.SUITE_COMPLETED,
        ordinal=tracker.next_ordinal(),
        suite_name=suite.suite_name,
        suite_id=suite.suite_id,
        message=message("suiteCompletedNormally"),
        rerun=rerun,
        duration_ms=int((time.perf_counter() - start) * 1000),
    ))
    return True


def _outcome_of(fn) -> Outcome:
    """Call a test body or per-test hook and classify how it finished."""
    try:
        result = fn()
    except AssertionError as e:
        return Outcome(OutcomeStatus.FAILED, describe_exception(e, FailureKind.ASSERTION))
    except TestPendingError as e:
        return Outcome.pending(str(e))
    except Exception as e:
        return Outcome(OutcomeStatus.FAILED, describe_exception(e, FailureKind.UNEXPECTED))

    if isinstance(result, Outcome):
        return result
    return Outcome.success()


def _default_suite_id(cls: type) -> Optional[str]:
    if cls is Suite:
        return None
    return f"{cls.__module__}:{cls.__qualname__}"
