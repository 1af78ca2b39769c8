"""Explicit result type for test bodies.

A body may return an Outcome instead of raising. Returning None counts as
success. Raised exceptions are still contained by the traversal: an
AssertionError is an assertion failure, TestPendingError marks the test
pending, and anything else is an unexpected failure.
"""

import sys
import traceback
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .events import FailureDetail, FailureKind, Location


class OutcomeStatus(str, Enum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    PENDING = "pending"


@dataclass(frozen=True)
class Outcome:
    """Completion value of a test body."""
    status: OutcomeStatus
    failure: Optional[FailureDetail] = None
    message: str = ""

    @property
    def succeeded(self) -> bool:
        return self.status is OutcomeStatus.SUCCEEDED

    @classmethod
    def success(cls) -> "Outcome":
        return cls(OutcomeStatus.SUCCEEDED)

    @classmethod
    def failed(cls, message: str, location: Optional[Location] = None) -> "Outcome":
        """Assertion failure reported by value.

        The location defaults to the caller's frame.
        """
        if location is None:
            frame = sys._getframe(1)
            location = Location(
                file=frame.f_code.co_filename,
                line=frame.f_lineno,
                function=frame.f_code.co_name,
            )
        return cls(
            OutcomeStatus.FAILED,
            failure=FailureDetail(
                message=message,
                kind=FailureKind.ASSERTION,
                location=location,
            ),
        )

    @classmethod
    def pending(cls, message: str = "") -> "Outcome":
        return cls(OutcomeStatus.PENDING, message=message)


def describe_exception(error: BaseException, kind: FailureKind) -> FailureDetail:
    """Build a FailureDetail for an exception raised by test or suite code.

    The location is the innermost frame of the traceback, i.e. where the
    assertion or fault was raised.
    """
    frames = traceback.extract_tb(error.__traceback__)
    location = None
    if frames:
        frame = frames[-1]
        location = Location(file=frame.filename, line=frame.lineno or 0, function=frame.name)

    return FailureDetail(
        message=str(error) or type(error).__name__,
        kind=kind,
        exception_type=type(error).__name__,
        location=location,
        traceback="".join(traceback.format_exception(type(error), error, error.__traceback__)),
    )
