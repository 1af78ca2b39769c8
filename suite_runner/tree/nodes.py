"""Nodes of a suite's test tree.

A suite owns a Trunk; describe() blocks add Description branches under it,
and tests are Example leaves. Children are kept in declaration order.
"""

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Callable, Optional, Union

from ..messages import message

TestBody = Callable[[], object]

# Linking word inserted between a branch's context and an example's raw name.
LINKING_WORD = "should"


class Branch:
    """A named grouping owning an ordered list of examples and branches."""

    def __init__(self, parent: Optional["Branch"] = None, name: str = ""):
        self.parent = parent
        self.name = name
        self.children: list[Union["Branch", "Example"]] = []

    @property
    def contextual_name(self) -> str:
        """Names of this branch and its ancestors, outermost first."""
        if self.parent is None:
            return self.name
        prefix = self.parent.contextual_name
        if not prefix:
            return self.name
        return message("prefixSuffix", prefix, self.name)

    def add(self, node: Union["Branch", "Example"]) -> None:
        """Append a child, assigning its position if it is an example."""
        if isinstance(node, Example):
            node.parent = self
            node.position = len(self.children)
        self.children.append(node)

    def examples(self) -> Iterator["Example"]:
        """Depth-first iteration over examples in declaration order."""
        for child in self.children:
            if isinstance(child, Branch):
                yield from child.examples()
            else:
                yield child


class Trunk(Branch):
    """Root branch of a suite; contributes no name."""

    def __init__(self):
        super().__init__(None, "")


class Description(Branch):
    """A nested description, e.g. "A Stack" or "when empty"."""

    def __init__(self, parent: Branch, name: str):
        super().__init__(parent, name)


@dataclass
class Example:
    """A single named, taggable test."""
    parent: Branch
    full_name: str
    raw_name: str
    needs_prefix: bool
    short_name: str
    position: Optional[int]
    body: TestBody = field(repr=False)
    tags: frozenset[str] = frozenset()


def full_name_for(raw_name: str, needs_prefix: bool, branch: Branch) -> str:
    """Full test name of raw_name declared under branch."""
    prefix = branch.contextual_name.strip()
    if not prefix:
        return message("itShould", raw_name) if needs_prefix else raw_name
    if needs_prefix:
        return message("prefixShouldSuffix", prefix, raw_name)
    return message("prefixSuffix", prefix, raw_name)


def short_name_for(raw_name: str, needs_prefix: bool) -> str:
    """Name shown under the enclosing description."""
    return f"{LINKING_WORD} {raw_name}" if needs_prefix else raw_name


def make_example(
    branch: Branch,
    raw_name: str,
    needs_prefix: bool,
    body: TestBody,
    tags: frozenset[str] = frozenset(),
    position: Optional[int] = None,
) -> Example:
    """Create an example named in the context of branch (not yet attached)."""
    return Example(
        parent=branch,
        full_name=full_name_for(raw_name, needs_prefix, branch),
        raw_name=raw_name,
        needs_prefix=needs_prefix,
        short_name=short_name_for(raw_name, needs_prefix),
        position=position,
        body=body,
        tags=tags,
    )
