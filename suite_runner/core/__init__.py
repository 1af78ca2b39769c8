"""Core module - ordinals, events, filtering and cancellation."""

from .ordinal import Ordinal, Tracker
from .events import (
    AbortCategory,
    Event,
    EventKind,
    FailureDetail,
    FailureKind,
    Location,
    RerunDescriptor,
)
from .filter import IGNORE_TAG, Filter, FilterDecision
from .outcome import Outcome, OutcomeStatus
from .stopper import Stopper

__all__ = [
    "Ordinal",
    "Tracker",
    "AbortCategory",
    "Event",
    "EventKind",
    "FailureDetail",
    "FailureKind",
    "Location",
    "RerunDescriptor",
    "IGNORE_TAG",
    "Filter",
    "FilterDecision",
    "Outcome",
    "OutcomeStatus",
    "Stopper",
]
