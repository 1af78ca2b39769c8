"""Config module - YAML run configuration parsing."""

from .schema import (
    LoggingSection,
    ReportSection,
    RunConfig,
    RunSection,
    ValidationError,
    ValidationResult,
)
from .parser import parse_run_config, parse_run_config_data
from .validator import validate_run_config

__all__ = [
    "LoggingSection",
    "ReportSection",
    "RunConfig",
    "RunSection",
    "ValidationError",
    "ValidationResult",
    "parse_run_config",
    "parse_run_config_data",
    "validate_run_config",
]
