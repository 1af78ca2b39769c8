"""Shared fixtures for suite-runner tests."""

import io

import pytest
from loguru import logger

from suite_runner.core.filter import Filter
from suite_runner.core.ordinal import Tracker
from suite_runner.core.stopper import Stopper
from suite_runner.runner.result_collector import EventCollector
from suite_runner.tree.suite import Suite, run_suite


@pytest.fixture(autouse=True)
def reset_logging():
    """Undo any configure_logging call made by a test (e.g. through the CLI)."""
    yield
    logger.remove()
    logger.disable("suite_runner")


@pytest.fixture
def collector():
    return EventCollector()


@pytest.fixture
def stopper():
    return Stopper()


@pytest.fixture
def tracker():
    return Tracker()


@pytest.fixture
def diagnostics():
    """Diagnostic stream for fault-isolating reporters."""
    return io.StringIO()


@pytest.fixture
def run(collector, stopper):
    """Run a suite sequentially into the collector; returns its events."""

    def _run(suite: Suite, filter: Filter = None, test_name: str = None, config=None):
        run_suite(
            suite,
            collector,
            stopper,
            filter if filter is not None else Filter(),
            config or {},
            None,
            Tracker(),
            test_name=test_name,
        )
        return collector.ordered_events()

    return _run
