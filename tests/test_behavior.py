"""Tests for shared behaviors and their composition."""

import pytest

from suite_runner.errors import DuplicateTestNameError
from suite_runner.tree.behavior import Behavior
from suite_runner.tree.nodes import Description, Trunk
from suite_runner.tree.suite import Suite


def noop():
    pass


@pytest.fixture
def stack_branch():
    trunk = Trunk()
    branch = Description(trunk, "A Stack")
    trunk.add(branch)
    return branch


class TestBehavior:
    def test_materializes_in_registration_order(self):
        x = Behavior("X")
        x.should("foo", noop)
        x.should("bar", noop)

        examples = x.materialize(Trunk())
        assert [e.raw_name for e in examples] == ["foo", "bar"]

    def test_composed_examples_come_first_when_composed_first(self, stack_branch):
        x = Behavior("X")
        x.should("foo", noop)
        x.should("bar", noop)
        y = Behavior("Y").compose_with(x)
        y.should("baz", noop)

        names = [e.full_name for e in y.materialize(stack_branch)]
        assert names == ["A Stack should foo", "A Stack should bar", "A Stack should baz"]

    def test_composition_position_is_preserved(self, stack_branch):
        x = Behavior("X")
        x.specify("x1", noop)
        y = Behavior("Y")
        y.specify("y1", noop)
        y.compose_with(x)
        y.specify("y2", noop)

        assert [s.raw_name for s in y.shared_examples] == ["y1", "x1", "y2"]

    def test_positions_are_unassigned_until_added(self, stack_branch):
        b = Behavior()
        b.should("foo", noop)
        assert [e.position for e in b.materialize(stack_branch)] == [None]

    def test_materializing_twice_yields_independent_examples(self):
        b = Behavior()
        b.should("foo", noop)
        trunk = Trunk()
        first_branch, second_branch = Description(trunk, "First"), Description(trunk, "Second")

        first = b.materialize(first_branch)
        second = b.materialize(second_branch)

        assert first[0] is not second[0]
        assert first[0].full_name == "First should foo"
        assert second[0].full_name == "Second should foo"
        first[0].tags = frozenset({"changed"})
        assert second[0].tags == frozenset()

    def test_names_without_prefix(self, stack_branch):
        b = Behavior()
        b.specify("is a stack", noop)
        example = b.materialize(stack_branch)[0]
        assert example.full_name == "A Stack is a stack"
        assert example.short_name == "is a stack"

    def test_prefixed_names_under_trunk(self):
        b = Behavior()
        b.should("work", noop)
        example = b.materialize(Trunk())[0]
        assert example.full_name == "it should work"
        assert example.short_name == "should work"

    def test_decorator_registration_returns_body(self):
        b = Behavior()

        @b.should("decorate")
        def body():
            return 42

        assert body() == 42
        assert b.expected_example_count == 1

    def test_duplicate_names_rejected(self):
        b = Behavior()
        b.should("foo", noop)
        with pytest.raises(DuplicateTestNameError):
            b.should("foo", noop)

    def test_duplicate_names_rejected_on_compose(self):
        x = Behavior()
        x.should("foo", noop)
        y = Behavior()
        y.should("foo", noop)
        with pytest.raises(DuplicateTestNameError):
            y.compose_with(x)


class TestBehavesLike:
    def test_examples_interleave_at_declared_position(self):
        b = Behavior()
        b.should("shared one", noop)
        b.should("shared two", noop)

        suite = Suite("S")
        suite.test("before", noop)
        suite.behaves_like(b)
        suite.test("after", noop)

        assert suite.test_names == ["before", "it should shared one", "it should shared two", "after"]
        assert [e.position for e in suite.examples()] == [0, 1, 2, 3]

    def test_same_behavior_in_two_suites(self):
        b = Behavior()
        b.should("foo", noop)
        s1, s2 = Suite("S1"), Suite("S2")
        with s1.describe("One"):
            s1.behaves_like(b)
        with s2.describe("Two"):
            s2.behaves_like(b, tags={"Shared"})

        assert s1.test_names == ["One should foo"]
        assert s2.test_names == ["Two should foo"]
        assert s1.tags_for("One should foo") == frozenset()
        assert s2.tags_for("Two should foo") == frozenset({"Shared"})
