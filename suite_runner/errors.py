"""Exception hierarchy for suite-runner.

Only contract violations (NullArgumentError) are meant to escape a run.
Resolution errors are translated into RunAborted events by the rerunner.
"""

from enum import Enum
from typing import Any


class AbortCategory(str, Enum):
    """Categories of run-aborted events raised while resolving a suite."""
    IDENTIFIER_NOT_FOUND = "identifier-not-found"
    INSTANTIATION_NOT_PERMITTED = "instantiation-not-permitted"
    INSTANTIATION_FAILED = "instantiation-failed"
    ENTRY_POINT_MISSING = "required-entry-point-missing"
    ACCESS_DENIED = "access-denied"
    DEPENDENCY_MISSING = "dependency-missing"
    UNEXPECTED = "unexpected"


class SuiteRunnerError(Exception):
    """Base class for all suite-runner errors."""


class NullArgumentError(SuiteRunnerError, ValueError):
    """A required argument was None."""

    def __init__(self, name: str):
        super().__init__(f"{name} was None")
        self.name = name


def require(**arguments: Any) -> None:
    """Raise NullArgumentError for the first argument that is None."""
    for name, value in arguments.items():
        if value is None:
            raise NullArgumentError(name)


class DuplicateTestNameError(SuiteRunnerError, ValueError):
    """A test with the same name was already registered."""


class TestPendingError(SuiteRunnerError):
    """Raised from a test body to mark the test as pending."""

    __test__ = False


def pending(message: str = "") -> None:
    """Mark the currently running test as pending."""
    raise TestPendingError(message)


class ResolutionError(SuiteRunnerError):
    """A suite identifier could not be turned into a runnable suite."""

    category: AbortCategory = AbortCategory.UNEXPECTED

    def __init__(self, message: str, identifier: str = ""):
        super().__init__(message)
        self.identifier = identifier


class SuiteNotFoundError(ResolutionError):
    category = AbortCategory.IDENTIFIER_NOT_FOUND


class InstantiationNotPermittedError(ResolutionError):
    category = AbortCategory.INSTANTIATION_NOT_PERMITTED


class InstantiationFailedError(ResolutionError):
    category = AbortCategory.INSTANTIATION_FAILED


class EntryPointMissingError(ResolutionError):
    category = AbortCategory.ENTRY_POINT_MISSING


class AccessDeniedError(ResolutionError):
    category = AbortCategory.ACCESS_DENIED


class DependencyMissingError(ResolutionError):
    category = AbortCategory.DEPENDENCY_MISSING
