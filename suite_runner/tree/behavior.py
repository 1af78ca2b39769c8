"""Shared behaviors - reusable templates of named test bodies.

A Behavior collects SharedExamples and can be composed into any number of
branches. Each materialization produces fresh Example nodes, so a behavior
is a template and never shares mutable state with the suites using it.
"""

from dataclasses import dataclass, field
from typing import Callable, Optional

from ..errors import DuplicateTestNameError
from .nodes import Branch, Example, TestBody, make_example


@dataclass(frozen=True)
class SharedExample:
    """A test body registered on a behavior, not yet placed in a suite."""
    raw_name: str
    needs_prefix: bool
    body: TestBody = field(repr=False)


class Behavior:
    """Ordered collection of shared examples.

    Examples are stored most-recent-first: registering prepends, and
    composing prepends the other behavior's whole list. materialize()
    reverses once, which yields registration order with composed behaviors
    at the point where they were composed.
    """

    def __init__(self, name: str = ""):
        self.name = name
        self._shared: list[SharedExample] = []

    @property
    def shared_examples(self) -> list[SharedExample]:
        """Shared examples in registration order."""
        return list(reversed(self._shared))

    @property
    def expected_example_count(self) -> int:
        return len(self._shared)

    def register_example(self, raw_name: str, needs_prefix: bool, body: TestBody) -> None:
        if any(s.raw_name == raw_name for s in self._shared):
            raise DuplicateTestNameError(f"Duplicate shared example name: {raw_name}")
        self._shared = [SharedExample(raw_name, needs_prefix, body)] + self._shared

    def specify(self, raw_name: str, body: Optional[TestBody] = None):
        """Register an example shown as-is. Usable as a decorator."""
        return self._register(raw_name, False, body)

    def should(self, raw_name: str, body: Optional[TestBody] = None):
        """Register an example shown as "<context> should <raw_name>".

        Usable as a decorator.
        """
        return self._register(raw_name, True, body)

    def compose_with(self, other: "Behavior") -> "Behavior":
        """Include all of other's examples at this point of registration."""
        for shared in other._shared:
            if any(s.raw_name == shared.raw_name for s in self._shared):
                raise DuplicateTestNameError(
                    f"Duplicate shared example name: {shared.raw_name}"
                )
        self._shared = list(other._shared) + self._shared
        return self

    def materialize(self, branch: Branch) -> list[Example]:
        """Build fresh examples for every shared example, named under branch.

        Positions stay unassigned until the owning branch adds them.
        """
        return [
            make_example(branch, shared.raw_name, shared.needs_prefix, shared.body)
            for shared in reversed(self._shared)
        ]

    def _register(
        self, raw_name: str, needs_prefix: bool, body: Optional[TestBody]
    ) -> TestBody | Callable[[TestBody], TestBody]:
        if body is not None:
            self.register_example(raw_name, needs_prefix, body)
            return body

        def decorator(fn: TestBody) -> TestBody:
            self.register_example(raw_name, needs_prefix, fn)
            return fn

        return decorator

    def __repr__(self) -> str:
        return f"Behavior(name={self.name!r}, examples={self.expected_example_count})"
