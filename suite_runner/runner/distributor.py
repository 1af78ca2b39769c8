"""Distributors - hand-off points for concurrent nested-suite execution.

A traversal that has a distributor puts each nested suite into it together
with a forked tracker and moves on. Running and joining the handed-off work
is the distributor's business.
"""

import os
import threading
from collections.abc import Mapping
from concurrent import futures
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Optional, Protocol

from loguru import logger

from ..core.filter import Filter
from ..core.ordinal import Tracker
from ..core.stopper import Stopper
from ..errors import require
from ..reporting.catch_reporter import wrap_reporter_if_necessary
from ..reporting.reporter import Reporter
from ..tree.suite import Suite, run_suite


class Distributor(Protocol):
    """Accepts suites for execution elsewhere."""

    def put(self, suite: Suite, tracker: Tracker) -> None:
        """Enqueue suite; its events must be ordered with tracker."""
        ...


class ConcurrentDistributor:
    """Runs distributed suites on a thread pool.

    Suites nested inside a distributed suite are distributed again, so a
    whole tree fans out across the pool. Call wait() to join everything.
    """

    def __init__(
        self,
        reporter: Reporter,
        stopper: Stopper,
        filter: Filter,
        config: Mapping[str, Any],
        max_workers: Optional[int] = None,
    ):
        """Initialize concurrent distributor.

        Args:
            reporter: Reporter shared by all workers.
            stopper: Stop flag shared by all workers.
            filter: Tag filter applied in every distributed suite.
            config: Configuration passed to every distributed suite.
            max_workers: Pool size. Default: CPU count.
        """
        require(reporter=reporter, stopper=stopper, filter=filter, config=config)
        self.reporter = wrap_reporter_if_necessary(reporter)
        self.stopper = stopper
        self.filter = filter
        self.config = config
        self.max_workers = max(1, max_workers or os.cpu_count() or 1)
        self._pool = ThreadPoolExecutor(
            max_workers=self.max_workers, thread_name_prefix="suite-runner"
        )
        self._futures: list[Future] = []
        self._lock = threading.Lock()

    def put(self, suite: Suite, tracker: Tracker) -> None:
        require(suite=suite, tracker=tracker)
        logger.debug("Submitting {} at {}", suite.suite_name, tracker.current)
        future = self._pool.submit(self._run, suite, tracker)
        with self._lock:
            self._futures.append(future)

    def _run(self, suite: Suite, tracker: Tracker) -> None:
        # A suite still queued when a stop arrives never starts.
        if self.stopper.stop_requested:
            logger.debug("Stop requested, skipping queued suite {}", suite.suite_name)
            return
        run_suite(suite, self.reporter, self.stopper, self.filter, self.config, self, tracker)

    @property
    def submitted(self) -> int:
        with self._lock:
            return len(self._futures)

    def wait(self) -> None:
        """Block until every submitted suite, including late submissions, is done.

        Raises:
            Exception: The first error a worker raised outside suite
                       containment (e.g. a contract violation).
        """
        while True:
            with self._lock:
                pending = [f for f in self._futures if not f.done()]
            if not pending:
                break
            futures.wait(pending)

        with self._lock:
            submitted = list(self._futures)
        for future in submitted:
            error = future.exception()
            if error is not None:
                logger.error("Distributed suite failed: {}: {}", type(error).__name__, error)
                raise error

    def shutdown(self, wait: bool = True) -> None:
        self._pool.shutdown(wait=wait)

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.shutdown()
