"""Tree module - suites, test nodes and shared behaviors."""

from .nodes import Branch, Description, Example, Trunk
from .behavior import Behavior, SharedExample
from .suite import Suite, run_suite

__all__ = [
    "Branch",
    "Description",
    "Example",
    "Trunk",
    "Behavior",
    "SharedExample",
    "Suite",
    "run_suite",
]
