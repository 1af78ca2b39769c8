"""Run configuration models.

Defines dataclasses for parsing and representing YAML run configurations.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from ..core.filter import IGNORE_TAG, Filter
from ..runner.executor import ExecutionConfig

VALID_LOG_LEVELS = {"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"}


@dataclass
class RunSection:
    """What to run and which tests to let through."""
    suites: list[str] = field(default_factory=list)
    test: Optional[str] = None
    include: list[str] = field(default_factory=list)
    exclude: list[str] = field(default_factory=lambda: [IGNORE_TAG])
    report_ignored: bool = True
    inherit_suite_tags: bool = False
    workers: int = 0


@dataclass
class ReportSection:
    """JSON report output."""
    save: bool = False
    dir: Optional[str] = None


@dataclass
class LoggingSection:
    level: str = "WARNING"

    def __post_init__(self):
        self.level = str(self.level).upper()


@dataclass
class RunConfig:
    """A complete run configuration."""
    run: RunSection = field(default_factory=RunSection)
    properties: dict[str, Any] = field(default_factory=dict)
    report: ReportSection = field(default_factory=ReportSection)
    logging: LoggingSection = field(default_factory=LoggingSection)

    def to_filter(self) -> Filter:
        """Build the tag filter described by the run section."""
        return Filter(
            include_tags=self.run.include,
            exclude_tags=self.run.exclude,
            report_ignored=self.run.report_ignored,
            inherit_suite_tags=self.run.inherit_suite_tags,
        )

    def to_execution_config(self, run_name: str = "run") -> ExecutionConfig:
        return ExecutionConfig(
            workers=self.run.workers,
            save_report=self.report.save,
            report_dir=Path(self.report.dir) if self.report.dir else None,
            run_name=run_name,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert config to dictionary for serialization."""
        return {
            "run": dict(self.run.__dict__),
            "properties": dict(self.properties),
            "report": dict(self.report.__dict__),
            "logging": dict(self.logging.__dict__),
        }


@dataclass
class ValidationError:
    """A single validation error."""
    path: str
    message: str
    severity: str = "error"  # "error" or "warning"


@dataclass
class ValidationResult:
    """Result of run configuration validation."""
    valid: bool
    errors: list[ValidationError] = field(default_factory=list)
    warnings: list[ValidationError] = field(default_factory=list)

    @property
    def error_count(self) -> int:
        return len(self.errors)

    @property
    def warning_count(self) -> int:
        return len(self.warnings)

    def __str__(self) -> str:
        if self.valid:
            msg = "Valid"
            if self.warnings:
                msg += f" ({self.warning_count} warnings)"
            return msg
        return f"Invalid: {self.error_count} errors, {self.warning_count} warnings"
