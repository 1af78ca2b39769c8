"""suite-runner - hierarchical test suites with ordered, fault-isolated reporting.

Suites are trees of named tests; runs report a stream of events whose
ordinals reproduce sequential order even when nested suites run
concurrently.
"""

from loguru import logger

from .core import (
    IGNORE_TAG,
    AbortCategory,
    Event,
    EventKind,
    Filter,
    FilterDecision,
    Ordinal,
    Outcome,
    Stopper,
    Tracker,
)
from .errors import (
    DuplicateTestNameError,
    NullArgumentError,
    ResolutionError,
    SuiteRunnerError,
    pending,
)
from .logs import configure_logging
from .reporting import (
    CatchReporter,
    DispatchReporter,
    JsonReporter,
    PrintReporter,
    Reporter,
)
from .runner import (
    ConcurrentDistributor,
    EventCollector,
    ExecutionConfig,
    ExecutionResult,
    ImportResolver,
    Rerunner,
    SuiteExecutor,
    SuiteRegistry,
)
from .tree import Behavior, Suite, run_suite

__version__ = "0.1.0"

logger.disable("suite_runner")

__all__ = [
    "IGNORE_TAG",
    "AbortCategory",
    "Event",
    "EventKind",
    "Filter",
    "FilterDecision",
    "Ordinal",
    "Outcome",
    "Stopper",
    "Tracker",
    "DuplicateTestNameError",
    "NullArgumentError",
    "ResolutionError",
    "SuiteRunnerError",
    "pending",
    "configure_logging",
    "CatchReporter",
    "DispatchReporter",
    "JsonReporter",
    "PrintReporter",
    "Reporter",
    "ConcurrentDistributor",
    "EventCollector",
    "ExecutionConfig",
    "ExecutionResult",
    "ImportResolver",
    "Rerunner",
    "SuiteExecutor",
    "SuiteRegistry",
    "Behavior",
    "Suite",
    "run_suite",
]
