"""Tests for the suite tree and its traversal.

PYTEST_DONT_REWRITE: the fixture suites raise AssertionError with exact
messages that pytest's assertion rewriting would otherwise alter.
"""

import io

import pytest

from suite_runner.core.events import EventKind, FailureKind
from suite_runner.core.filter import Filter
from suite_runner.core.ordinal import Tracker
from suite_runner.core.outcome import Outcome
from suite_runner.core.stopper import Stopper
from suite_runner.errors import DuplicateTestNameError, EntryPointMissingError, NullArgumentError
from suite_runner.reporting.catch_reporter import CatchReporter
from suite_runner.tree.suite import Suite, run_suite

from .fixtures.sample_suites import MixedSuite, ParentSuite, StackSuite


def kinds(events, *wanted):
    return [(e.kind, e.test_name or e.suite_name) for e in events if e.kind in wanted]


def only_tests(events):
    return [e for e in events if e.test_name is not None]


class TestNaming:
    def test_nested_descriptions(self):
        suite = Suite("S")
        with suite.describe("A Stack"):
            with suite.describe("when empty"):
                suite.it("be empty", lambda: None)
                suite.test("has no top", lambda: None)

        example = suite.examples()[0]
        assert example.full_name == "A Stack when empty should be empty"
        assert example.short_name == "should be empty"
        assert suite.test_names[1] == "A Stack when empty has no top"

    def test_top_level_it(self):
        suite = Suite("S")
        suite.it("work", lambda: None)
        assert suite.test_names == ["it should work"]

    def test_duplicate_name_rejected(self):
        suite = Suite("S")
        suite.test("same", lambda: None)
        with pytest.raises(DuplicateTestNameError):
            suite.test("same", lambda: None)

    def test_default_name_and_suite_id(self):
        suite = StackSuite()
        assert suite.suite_id == "tests.fixtures.sample_suites:StackSuite"
        assert Suite().suite_name == "Suite"
        assert Suite().suite_id is None

    def test_ignore_adds_ignore_tag(self):
        assert "ignore" in MixedSuite().tags_for("is ignored")


class TestTraversal:
    def test_single_suite_event_sequence(self, run):
        events = run(StackSuite())
        assert [e.kind for e in events] == [
            EventKind.SUITE_STARTING,
            EventKind.TEST_STARTING, EventKind.TEST_SUCCEEDED,
            EventKind.TEST_STARTING, EventKind.TEST_SUCCEEDED,
            EventKind.TEST_STARTING, EventKind.TEST_SUCCEEDED,
            EventKind.TEST_STARTING, EventKind.TEST_SUCCEEDED,
            EventKind.SUITE_COMPLETED,
        ]

    def test_emission_order_matches_ordinal_order(self, collector, run):
        run(ParentSuite())
        received = collector.received
        assert [e.ordinal for e in received] == sorted(e.ordinal for e in received)
        assert len({e.ordinal for e in received}) == len(received)

    def test_nested_suites_run_before_own_tests(self, run):
        events = run(ParentSuite())
        suites = kinds(events, EventKind.SUITE_STARTING, EventKind.SUITE_COMPLETED)
        assert suites == [
            (EventKind.SUITE_STARTING, "ParentSuite"),
            (EventKind.SUITE_STARTING, "StackSuite"),
            (EventKind.SUITE_COMPLETED, "StackSuite"),
            (EventKind.SUITE_STARTING, "MixedSuite"),
            (EventKind.SUITE_COMPLETED, "MixedSuite"),
            (EventKind.SUITE_COMPLETED, "ParentSuite"),
        ]
        assert only_tests(events)[-1].test_name == "runs after nested suites"

    def test_behavior_examples_run_in_declared_position(self, run):
        events = run(StackSuite())
        started = [e.test_name for e in events if e.kind == EventKind.TEST_STARTING]
        assert started == [
            "A Stack should start empty",
            "A Stack should pop the last pushed item",
            "A Stack (when non-empty) should not be empty",
            "A Stack (when non-empty) should return the top item on peek",
        ]

    def test_body_invoked_exactly_once(self, run):
        calls = []
        suite = Suite("S")
        suite.test("counts", lambda: calls.append(1))
        run(suite)
        assert calls == [1]

    def test_test_name_runs_only_that_test(self, run):
        events = run(MixedSuite(), test_name="passes")
        assert kinds(events, EventKind.TEST_STARTING) == [(EventKind.TEST_STARTING, "passes")]

    def test_named_test_still_goes_through_filter(self, run):
        suite = Suite("S")
        suite.test("slow", lambda: None, tags={"Slow"})
        events = run(suite, filter=Filter(exclude_tags={"Slow"}), test_name="slow")
        assert only_tests(events) == []

    def test_unknown_test_name_raises_from_run(self, collector, stopper, tracker):
        with pytest.raises(EntryPointMissingError):
            MixedSuite().run("no such test", collector, stopper, Filter(), {}, None, tracker)

    def test_unknown_test_name_aborts_suite_in_run_suite(self, run):
        events = run(MixedSuite(), test_name="no such test")
        assert [e.kind for e in events] == [EventKind.SUITE_STARTING, EventKind.SUITE_ABORTED]
        assert events[-1].failure.exception_type == "EntryPointMissingError"

    def test_rerun_descriptor_on_events(self, run):
        events = run(StackSuite())
        succeeded = [e for e in events if e.kind == EventKind.TEST_SUCCEEDED]
        assert succeeded[0].rerun.suite_id == "tests.fixtures.sample_suites:StackSuite"
        assert succeeded[0].rerun.test_name == "A Stack should start empty"

    def test_plain_suite_events_have_no_rerun_descriptor(self, run):
        suite = Suite("S")
        suite.test("t", lambda: None)
        assert all(e.rerun is None for e in run(suite))


class TestOutcomes:
    @pytest.fixture
    def events(self, run):
        return run(MixedSuite(), filter=Filter.default())

    def by_name(self, events, name):
        return [e for e in events if e.test_name == name]

    def test_assertion_failure(self, events):
        starting, failed = self.by_name(events, "fails on assertion")
        assert failed.kind is EventKind.TEST_FAILED
        assert failed.failure.kind is FailureKind.ASSERTION
        assert failed.failure.message == "arithmetic is broken"
        assert failed.failure.location.file.endswith("sample_suites.py")
        assert failed.failure.location.function == "_fails"

    def test_unexpected_failure(self, events):
        _, failed = self.by_name(events, "raises unexpectedly")
        assert failed.kind is EventKind.TEST_FAILED
        assert failed.failure.kind is FailureKind.UNEXPECTED
        assert failed.failure.exception_type == "RuntimeError"
        assert "boom" in failed.failure.traceback

    def test_pending(self, events):
        _, pending = self.by_name(events, "is pending")
        assert pending.kind is EventKind.TEST_PENDING
        assert pending.message == "later"

    def test_failure_by_value(self, events):
        _, failed = self.by_name(events, "reports failure by value")
        assert failed.kind is EventKind.TEST_FAILED
        assert failed.failure.kind is FailureKind.ASSERTION
        assert failed.failure.message == "by value"

    def test_ignored_test_reported_without_running(self, events):
        assert [e.kind for e in self.by_name(events, "is ignored")] == [EventKind.TEST_IGNORED]

    def test_failures_do_not_stop_later_tests(self, events):
        assert self.by_name(events, "reports failure by value")
        assert events[-1].kind is EventKind.SUITE_COMPLETED

    def test_pending_by_value(self, run):
        suite = Suite("values")
        suite.test("waits", lambda: Outcome.pending("not yet"))
        suite.test("passes", lambda: Outcome.success())
        events = only_tests(run(suite))
        assert [(e.kind, e.test_name) for e in events] == [
            (EventKind.TEST_STARTING, "waits"),
            (EventKind.TEST_PENDING, "waits"),
            (EventKind.TEST_STARTING, "passes"),
            (EventKind.TEST_SUCCEEDED, "passes"),
        ]
        assert events[1].message == "not yet"

    def test_event_to_dict(self, events):
        _, failed = self.by_name(events, "fails on assertion")
        data = failed.to_dict()
        assert data["kind"] == "test_failed"
        assert data["ordinal"] == list(failed.ordinal.stamps)
        assert data["failure"]["message"] == "arithmetic is broken"
        assert data["rerun"] == {"suite_id": failed.suite_id, "test_name": "fails on assertion"}
        assert "abort_category" not in data


class RecordingSuite(Suite):
    def __init__(self, fail_in=None):
        super().__init__("Recording")
        self.calls = []
        self.fail_in = fail_in
        self.test("first", lambda: self.calls.append("first"))
        self.test("second", self._second)

    def _second(self):
        self.calls.append("second")
        assert False, "second is broken"

    def _hook(self, name):
        self.calls.append(name)
        if self.fail_in == name:
            raise RuntimeError(f"{name} blew up")

    def before_all(self):
        self._hook("before_all")

    def after_all(self):
        self._hook("after_all")

    def before_each(self):
        self._hook("before_each")

    def after_each(self):
        self._hook("after_each")


class TestLifecycleHooks:
    def outcomes(self, events):
        return [
            (e.kind, e.test_name) for e in events
            if e.kind in (EventKind.TEST_SUCCEEDED, EventKind.TEST_FAILED)
        ]

    def test_call_order(self, run):
        suite = RecordingSuite()
        run(suite)
        assert suite.calls == [
            "before_all",
            "before_each", "first", "after_each",
            "before_each", "second", "after_each",
            "after_all",
        ]

    def test_before_each_fault_fails_test_without_running_body(self, run):
        suite = RecordingSuite(fail_in="before_each")
        events = run(suite)
        assert self.outcomes(events) == [
            (EventKind.TEST_FAILED, "first"),
            (EventKind.TEST_FAILED, "second"),
        ]
        assert "first" not in suite.calls
        assert "after_each" not in suite.calls
        failed = [e for e in events if e.kind is EventKind.TEST_FAILED][0]
        assert failed.failure.kind is FailureKind.UNEXPECTED
        assert failed.failure.message == "before_each blew up"
        assert events[-1].kind is EventKind.SUITE_COMPLETED

    def test_after_each_fault_fails_passing_test(self, run):
        events = run(RecordingSuite(fail_in="after_each"))
        first, second = [e for e in events if e.kind is EventKind.TEST_FAILED]
        assert first.test_name == "first"
        assert first.failure.message == "after_each blew up"
        # The body's own failure is the one reported.
        assert second.failure.message == "second is broken"
        assert second.failure.kind is FailureKind.ASSERTION

    def test_before_all_fault_aborts_suite(self, run):
        suite = RecordingSuite(fail_in="before_all")
        events = run(suite)
        assert [e.kind for e in events] == [EventKind.SUITE_STARTING, EventKind.SUITE_ABORTED]
        assert events[-1].failure.message == "before_all blew up"
        assert suite.calls == ["before_all"]

    def test_after_all_fault_aborts_suite_after_tests(self, run):
        events = run(RecordingSuite(fail_in="after_all"))
        assert self.outcomes(events) == [
            (EventKind.TEST_SUCCEEDED, "first"),
            (EventKind.TEST_FAILED, "second"),
        ]
        assert events[-1].kind is EventKind.SUITE_ABORTED
        assert events[-1].failure.message == "after_all blew up"

    def test_after_all_runs_when_tests_abort(self, run):
        suite = RecordingSuite()
        events = run(suite, test_name="no such test")
        assert suite.calls == ["before_all", "after_all"]
        assert events[-1].kind is EventKind.SUITE_ABORTED


class TestTagFiltering:
    def test_excluded_test_produces_no_starting_event(self, run):
        suite = Suite("Tagged")
        suite.test("untagged", lambda: None)
        suite.test("slow", lambda: None, tags={"Slow"})
        suite.test("slow and flaky", lambda: None, tags={"Slow", "Flaky"})

        events = run(suite, filter=Filter(include_tags=set(), exclude_tags={"Flaky"}))

        started = [e.test_name for e in events if e.kind == EventKind.TEST_STARTING]
        finished = [e.test_name for e in events if e.kind in (EventKind.TEST_SUCCEEDED, EventKind.TEST_FAILED)]
        assert started == ["untagged", "slow"]
        assert finished == ["untagged", "slow"]
        assert all(e.test_name != "slow and flaky" for e in events)

    def test_expected_test_count(self):
        f = Filter.default()
        assert MixedSuite().expected_test_count(f) == 5
        assert ParentSuite().expected_test_count(f) == 4 + 5 + 1
        assert ParentSuite().expected_test_count(Filter(include_tags={"Nothing"})) == 0

    def test_inherited_suite_tags(self, run):
        f = Filter(exclude_tags={"Stack"}, inherit_suite_tags=True)
        events = run(StackSuite(), filter=f)
        assert only_tests(events) == []


class TestStopper:
    def test_running_test_completes_and_later_tests_are_skipped(self, run, stopper):
        suite = Suite("S")
        suite.test("first", lambda: None)
        suite.test("requests stop", stopper.request_stop)
        suite.test("never runs", lambda: None)

        events = run(suite)

        assert kinds(events, EventKind.TEST_SUCCEEDED) == [
            (EventKind.TEST_SUCCEEDED, "first"),
            (EventKind.TEST_SUCCEEDED, "requests stop"),
        ]
        assert all(e.test_name != "never runs" for e in events)

    def test_no_nested_suites_after_stop(self, run, stopper):
        stopper.request_stop()
        events = run(ParentSuite())
        assert [e.kind for e in events] == [EventKind.SUITE_STARTING, EventKind.SUITE_COMPLETED]

    def test_reset(self, stopper):
        stopper.request_stop()
        stopper.reset()
        assert not stopper.stop_requested


class TestContracts:
    def test_missing_reporter_fails_before_any_event(self, collector, stopper, tracker):
        with pytest.raises(NullArgumentError) as info:
            StackSuite().run(None, None, stopper, Filter(), {}, None, tracker)
        assert info.value.name == "reporter"

    @pytest.mark.parametrize("missing", ["stopper", "filter", "config", "tracker"])
    def test_missing_arguments(self, collector, missing):
        arguments = dict(
            reporter=collector, stopper=Stopper(), filter=Filter(), config={}, tracker=Tracker(),
        )
        arguments[missing] = None
        with pytest.raises(NullArgumentError):
            StackSuite().run(None, distributor=None, **arguments)
        assert collector.received == []

    def test_run_suite_propagates_contract_violation(self, collector):
        with pytest.raises(NullArgumentError):
            run_suite(StackSuite(), collector, Stopper(), None, {}, None, Tracker())
        assert collector.received == []

    def test_faulty_reporter_does_not_abort_the_run(self):
        def faulty(event):
            raise RuntimeError("sink broken")

        out = io.StringIO()
        completed = run_suite(
            StackSuite(), CatchReporter(faulty, out), Stopper(), Filter(), {}, None, Tracker()
        )

        assert completed
        assert len(out.getvalue().splitlines()) == 10
