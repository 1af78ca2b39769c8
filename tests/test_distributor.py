"""Tests for the concurrent distributor."""

import threading

import pytest

from suite_runner.core.events import EventKind
from suite_runner.core.filter import Filter
from suite_runner.core.ordinal import Tracker
from suite_runner.core.stopper import Stopper
from suite_runner.errors import NullArgumentError
from suite_runner.runner.distributor import ConcurrentDistributor
from suite_runner.runner.result_collector import EventCollector
from suite_runner.tree.suite import Suite, run_suite

from .fixtures.sample_suites import MixedSuite, ParentSuite, StackSuite


def signature(events):
    return [(e.kind, e.suite_name, e.test_name) for e in events]


class ContractBreakingSuite(Suite):
    def run(self, test_name, reporter, stopper, filter, config, distributor, tracker):
        raise NullArgumentError("reporter")


def wide_suite():
    root = Suite("Root")
    for i in range(6):
        nested = ParentSuite() if i % 2 else StackSuite()
        root.add_nested_suite(nested)
    root.test("root test", lambda: None)
    return root


class TestConcurrentDistributor:
    def run_distributed(self, suite, stopper=None, workers=4):
        collector = EventCollector()
        stopper = stopper or Stopper()
        with ConcurrentDistributor(collector, stopper, Filter(), {}, max_workers=workers) as distributor:
            run_suite(suite, collector, stopper, Filter(), {}, distributor, Tracker())
            distributor.wait()
        return collector, distributor

    def test_ordinal_order_matches_sequential_run(self):
        sequential = EventCollector()
        run_suite(wide_suite(), sequential, Stopper(), Filter(), {}, None, Tracker())

        collector, _ = self.run_distributed(wide_suite())

        assert signature(collector.ordered_events()) == signature(sequential.ordered_events())

    def test_every_ordinal_is_unique(self):
        collector, _ = self.run_distributed(wide_suite())
        ordinals = [e.ordinal for e in collector.received]
        assert len(set(ordinals)) == len(ordinals)

    def test_nested_suites_of_distributed_suites_are_distributed(self):
        root = Suite("Root", nested_suites=[ParentSuite()])
        _, distributor = self.run_distributed(root)
        # ParentSuite, then its StackSuite and MixedSuite
        assert distributor.submitted == 3

    def test_nested_suites_run_on_worker_threads(self):
        collector, _ = self.run_distributed(Suite("Root", nested_suites=[MixedSuite()]))
        nested = [e for e in collector.received if e.suite_name == "MixedSuite"]
        assert nested
        assert all(e.thread_name.startswith("suite-runner") for e in nested)

    def test_put_runs_the_suite_with_bracketing(self):
        collector = EventCollector()
        with ConcurrentDistributor(collector, Stopper(), Filter(), {}, max_workers=1) as distributor:
            distributor.put(StackSuite(), Tracker())
            distributor.wait()
        kinds = [e.kind for e in collector.ordered_events()]
        assert kinds[0] is EventKind.SUITE_STARTING
        assert kinds[-1] is EventKind.SUITE_COMPLETED

    def test_stop_prevents_hand_off(self):
        stopper = Stopper()
        stopper.request_stop()
        _, distributor = self.run_distributed(wide_suite(), stopper=stopper)
        assert distributor.submitted == 0

    def test_queued_suite_does_not_start_after_stop(self):
        started, release = threading.Event(), threading.Event()
        stopper = Stopper()
        blocking = Suite("Blocking")

        @blocking.test("blocks")
        def blocks():
            started.set()
            release.wait(5)

        queued = Suite("Queued")
        queued.test("never", lambda: None)

        collector = EventCollector()
        with ConcurrentDistributor(collector, stopper, Filter(), {}, max_workers=1) as distributor:
            distributor.put(blocking, Tracker())
            distributor.put(queued, Tracker())
            assert started.wait(5)
            stopper.request_stop()
            release.set()
            distributor.wait()

        assert {e.suite_name for e in collector.received} == {"Blocking"}
        assert collector.ordered_events()[-1].kind is EventKind.SUITE_COMPLETED

    def test_wait_reraises_worker_contract_violation(self):
        distributor = ConcurrentDistributor(EventCollector(), Stopper(), Filter(), {}, max_workers=2)
        try:
            distributor.put(ContractBreakingSuite("Broken"), Tracker())
            with pytest.raises(NullArgumentError):
                distributor.wait()
        finally:
            distributor.shutdown()

    def test_put_requires_arguments(self):
        with ConcurrentDistributor(EventCollector(), Stopper(), Filter(), {}) as distributor:
            with pytest.raises(NullArgumentError):
                distributor.put(None, Tracker())

    def test_max_workers_defaults_to_at_least_one(self):
        with ConcurrentDistributor(EventCollector(), Stopper(), Filter(), {}, max_workers=0) as distributor:
            assert distributor.max_workers >= 1
