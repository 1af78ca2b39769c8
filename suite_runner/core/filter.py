"""Tag-based filtering of tests.

Exclusion is always evaluated before inclusion, and an empty include set
means "no include restriction".
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import Enum

from ..errors import NullArgumentError

# Tag attached by Suite.ignore(); excluded and reported by default.
IGNORE_TAG = "ignore"


class FilterDecision(str, Enum):
    """Outcome of filtering a single test."""
    RUN = "run"
    SKIP = "skip"
    SKIP_AND_REPORT = "skip_and_report"


@dataclass(frozen=True, init=False)
class Filter:
    """Immutable include/exclude tag policy."""
    include_tags: frozenset[str]
    exclude_tags: frozenset[str]
    report_ignored: bool
    inherit_suite_tags: bool

    def __init__(
        self,
        include_tags: Iterable[str] = (),
        exclude_tags: Iterable[str] = (),
        report_ignored: bool = False,
        inherit_suite_tags: bool = False,
    ):
        """Initialize filter.

        Args:
            include_tags: Run only tests carrying one of these tags.
                          Empty = no include restriction.
            exclude_tags: Never run tests carrying one of these tags.
            report_ignored: Report excluded tests as ignored instead of
                            omitting them silently.
            inherit_suite_tags: Treat a suite's own tags as tags of every
                                test in it.
        """
        if include_tags is None:
            raise NullArgumentError("include_tags")
        if exclude_tags is None:
            raise NullArgumentError("exclude_tags")
        object.__setattr__(self, "include_tags", frozenset(include_tags))
        object.__setattr__(self, "exclude_tags", frozenset(exclude_tags))
        object.__setattr__(self, "report_ignored", report_ignored)
        object.__setattr__(self, "inherit_suite_tags", inherit_suite_tags)

    @classmethod
    def default(cls) -> "Filter":
        """Filter that runs everything except ignored tests, which it reports."""
        return cls(exclude_tags={IGNORE_TAG}, report_ignored=True)

    def effective_tags(
        self, test_tags: Iterable[str], suite_tags: Iterable[str] = ()
    ) -> frozenset[str]:
        tags = frozenset(test_tags)
        if self.inherit_suite_tags:
            tags |= frozenset(suite_tags)
        return tags

    def should_run(
        self, test_tags: Iterable[str], suite_tags: Iterable[str] = ()
    ) -> FilterDecision:
        """Decide whether a test with the given tags runs."""
        tags = self.effective_tags(test_tags, suite_tags)

        included = not self.include_tags or bool(self.include_tags & tags)

        if self.exclude_tags & tags:
            # Only tests that pass the include set are reported as ignored.
            if self.report_ignored and included:
                return FilterDecision.SKIP_AND_REPORT
            return FilterDecision.SKIP

        if not included:
            return FilterDecision.SKIP

        return FilterDecision.RUN

    def __call__(
        self,
        tags_by_name: Mapping[str, Iterable[str]],
        suite_tags: Iterable[str] = (),
    ) -> list[tuple[str, bool]]:
        """Filter test names by their tags.

        Returns:
            (name, ignored) pairs, in input order, for every test that is
            either run (ignored=False) or reported as ignored (ignored=True).
            Silently skipped tests are left out.
        """
        selected = []
        for name, tags in tags_by_name.items():
            decision = self.should_run(tags, suite_tags)
            if decision is FilterDecision.RUN:
                selected.append((name, False))
            elif decision is FilterDecision.SKIP_AND_REPORT:
                selected.append((name, True))
        return selected

    def included_count(
        self,
        tags_by_name: Mapping[str, Iterable[str]],
        suite_tags: Iterable[str] = (),
    ) -> int:
        """Number of tests in tags_by_name that will actually run."""
        return sum(1 for _, ignored in self(tags_by_name, suite_tags) if not ignored)
