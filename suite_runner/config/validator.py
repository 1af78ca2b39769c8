"""Run configuration validator.

Validates parsed RunConfig objects against business rules.
"""

from .schema import (
    RunConfig,
    ValidationError,
    ValidationResult,
    VALID_LOG_LEVELS,
)


def validate_run_config(config: RunConfig) -> ValidationResult:
    """Validate a parsed RunConfig object.

    Checks:
    - Suite identifiers and tag names are non-empty strings
    - Worker count is a non-negative integer
    - Logging level is known to loguru

    Args:
        config: Parsed RunConfig to validate.

    Returns:
        ValidationResult with errors and warnings.
    """
    errors: list[ValidationError] = []
    warnings: list[ValidationError] = []

    _validate_suites(config, errors, warnings)
    _validate_tags(config, errors, warnings)

    workers = config.run.workers
    if isinstance(workers, bool) or not isinstance(workers, int) or workers < 0:
        errors.append(ValidationError(
            path="run.workers",
            message=f"'workers' must be a non-negative integer, got {workers!r}.",
        ))

    if config.run.test is not None and (
        not isinstance(config.run.test, str) or not config.run.test.strip()
    ):
        errors.append(ValidationError(
            path="run.test",
            message="'test' must be a non-empty string when given.",
        ))

    if config.logging.level not in VALID_LOG_LEVELS:
        errors.append(ValidationError(
            path="logging.level",
            message=f"Invalid level '{config.logging.level}'. Must be one of: {', '.join(sorted(VALID_LOG_LEVELS))}",
        ))

    return ValidationResult(
        valid=len(errors) == 0,
        errors=errors,
        warnings=warnings,
    )


def _validate_suites(
    config: RunConfig,
    errors: list[ValidationError],
    warnings: list[ValidationError],
) -> None:
    """Validate suite identifiers."""
    if not config.run.suites:
        warnings.append(ValidationError(
            path="run.suites",
            message="No suites listed. Suites must then be given on the command line.",
            severity="warning",
        ))
        return

    for i, identifier in enumerate(config.run.suites):
        if not isinstance(identifier, str) or not identifier.strip():
            errors.append(ValidationError(
                path=f"run.suites[{i}]",
                message=f"Suite identifier must be a non-empty string, got {identifier!r}.",
            ))


def _validate_tags(
    config: RunConfig,
    errors: list[ValidationError],
    warnings: list[ValidationError],
) -> None:
    """Validate include/exclude tag lists."""
    for name in ("include", "exclude"):
        for i, tag in enumerate(getattr(config.run, name)):
            if not isinstance(tag, str) or not tag.strip():
                errors.append(ValidationError(
                    path=f"run.{name}[{i}]",
                    message=f"Tag must be a non-empty string, got {tag!r}.",
                ))

    both = {t for t in config.run.include if isinstance(t, str)} & {
        t for t in config.run.exclude if isinstance(t, str)
    }
    for tag in sorted(both):
        warnings.append(ValidationError(
            path="run.include",
            message=f"Tag '{tag}' is both included and excluded; tests carrying it will not run.",
            severity="warning",
        ))
