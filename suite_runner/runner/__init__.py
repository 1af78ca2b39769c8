"""Runner module - run orchestration, distribution and reruns."""

from .distributor import ConcurrentDistributor, Distributor
from .executor import ExecutionConfig, ExecutionResult, SuiteExecutor
from .rerunner import Rerunner
from .resolver import ImportResolver, SuiteRegistry, SuiteResolver, instantiate
from .result_collector import CollectedResult, EventCollector

__all__ = [
    "ConcurrentDistributor",
    "Distributor",
    "ExecutionConfig",
    "ExecutionResult",
    "SuiteExecutor",
    "Rerunner",
    "ImportResolver",
    "SuiteRegistry",
    "SuiteResolver",
    "instantiate",
    "CollectedResult",
    "EventCollector",
]
