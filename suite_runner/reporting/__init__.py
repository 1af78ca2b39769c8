"""Reporting module - event sinks and report generation."""

from .reporter import NullReporter, Reporter
from .catch_reporter import CatchReporter, wrap_reporter_if_necessary
from .dispatch_reporter import DispatchReporter
from .print_reporter import PrintReporter
from .json_reporter import JsonReporter

__all__ = [
    "NullReporter",
    "Reporter",
    "CatchReporter",
    "wrap_reporter_if_necessary",
    "DispatchReporter",
    "PrintReporter",
    "JsonReporter",
]
