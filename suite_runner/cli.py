"""CLI entry point for suite-runner.

    suite-runner run pkg.module:MySuite [options]
    suite-runner rerun pkg.module:MySuite "my test" [options]
    python -m suite_runner run ...

The last line written to stdout is always a flow-style JSON summary.
"""

import json
import sys
import time
from pathlib import Path

import click
from loguru import logger

from . import __version__
from .core.stopper import Stopper
from .errors import ResolutionError
from .logs import configure_logging
from .reporting.dispatch_reporter import DispatchReporter
from .reporting.print_reporter import PrintReporter
from .runner.executor import ExecutionResult
from .runner.result_collector import EventCollector

tag_options = [
    click.option("-n", "--include", "include", multiple=True, help="Run only tests with this tag."),
    click.option("-l", "--exclude", "exclude", multiple=True, help="Skip tests with this tag."),
    click.option("--log-level", default=None, help="Loguru level (default: WARNING)."),
    click.option("-q", "--quiet", is_flag=True, help="Only print the JSON summary."),
]


def with_tag_options(fn):
    for option in reversed(tag_options):
        fn = option(fn)
    return fn


@click.group()
@click.version_option(__version__, prog_name="suite-runner")
def main():
    """Run hierarchical test suites and report their events."""


@main.command()
@click.argument("suite_ids", nargs=-1)
@click.option("-c", "--config", "config_path", default=None, help="YAML run configuration.")
@click.option("-t", "--test", "test_name", default=None, help="Run only this test.")
@click.option("-w", "--workers", type=int, default=None, help="Run suites on N threads (0 = sequential).")
@click.option("--save-report", is_flag=True, help="Save the JSON report.")
@click.option("--report-dir", default=None, help="Directory for saved reports.")
@with_tag_options
def run(suite_ids, config_path, test_name, workers, save_report, report_dir,
        include, exclude, log_level, quiet):
    """Run SUITE_IDS (or the suites listed in the config)."""
    from .config.parser import parse_run_config
    from .config.schema import RunConfig
    from .config.validator import validate_run_config
    from .runner.executor import SuiteExecutor
    from .runner.resolver import ImportResolver

    # Parse and validate config
    try:
        config = parse_run_config(config_path) if config_path else RunConfig()
    except (FileNotFoundError, ValueError) as e:
        output_error(f"Failed to parse config: {e}")
        sys.exit(1)

    # Command-line options override the config file
    if suite_ids:
        config.run.suites = list(suite_ids)
    if test_name is not None:
        config.run.test = test_name
    if include:
        config.run.include = list(include)
    if exclude:
        config.run.exclude = list(exclude)
    if workers is not None:
        config.run.workers = workers
    if save_report:
        config.report.save = True
    if report_dir:
        config.report.dir = report_dir
    if log_level:
        config.logging.level = log_level.upper()

    validation = validate_run_config(config)
    if not validation.valid:
        errors_str = "; ".join(f"{e.path}: {e.message}" for e in validation.errors)
        output_error(f"Invalid config: {errors_str}")
        sys.exit(1)
    if not config.run.suites:
        output_error("At least one suite identifier is required.")
        sys.exit(1)

    configure_logging(config.logging.level)
    for warning in validation.warnings:
        logger.warning("{}: {}", warning.path, warning.message)

    resolver = ImportResolver()
    try:
        suites = [resolver.resolve(identifier) for identifier in config.run.suites]
    except ResolutionError as e:
        output_error(
            f"Cannot resolve suite: {e}",
            identifier=e.identifier,
            category=e.category.value,
        )
        sys.exit(1)

    run_name = config_path and Path(config_path).stem or "run"
    stopper = Stopper()
    start_time = time.time()

    try:
        executor = SuiteExecutor(
            suites,
            filter=config.to_filter(),
            reporter=None if quiet else PrintReporter(sys.stdout),
            config=config.to_execution_config(run_name),
            properties=config.properties,
            stopper=stopper,
            test_name=config.run.test,
        )
        result = executor.execute()

    except KeyboardInterrupt:
        stopper.request_stop()
        duration_ms = int((time.time() - start_time) * 1000)
        output_error("Run interrupted by user", duration_ms=duration_ms)
        sys.exit(130)

    except Exception as e:
        duration_ms = int((time.time() - start_time) * 1000)
        output_error(f"Run failed: {e}", duration_ms=duration_ms)
        sys.exit(1)

    finish(result.to_flow_json("run"))


@main.command()
@click.argument("suite_id")
@click.argument("test_name", required=False)
@with_tag_options
def rerun(suite_id, test_name, include, exclude, log_level, quiet):
    """Rerun TEST_NAME of SUITE_ID, or the whole suite if no test is named."""
    from .runner.rerunner import Rerunner
    from .runner.resolver import ImportResolver

    configure_logging(log_level.upper() if log_level else "WARNING")

    collector = EventCollector()
    reporters = [collector] if quiet else [collector, PrintReporter(sys.stdout)]
    reporter = DispatchReporter(reporters)
    rerunner = Rerunner(ImportResolver())
    stopper = Stopper()
    start_time = time.time()

    try:
        if test_name is None:
            rerunner.rerun_suite(suite_id, reporter, stopper, include, exclude, {})
        else:
            rerunner.rerun(suite_id, test_name, reporter, stopper, include, exclude, {})
    except KeyboardInterrupt:
        stopper.request_stop()
        output_error("Rerun interrupted by user", command="rerun")
        sys.exit(130)
    finally:
        reporter.dispose()

    result = ExecutionResult.from_collected("rerun", collector.result())
    result.duration_ms = int((time.time() - start_time) * 1000)
    finish(result.to_flow_json("rerun"))


def finish(flow_output: dict) -> None:
    """Print the JSON summary and exit 1 unless everything passed."""
    click.echo(json.dumps(flow_output, ensure_ascii=False))
    if not flow_output.get("success", False):
        sys.exit(1)


def output_error(message: str, command: str = "run", **extra):
    """Output error in flow JSON format."""
    output = {
        "success": False,
        "command": command,
        "data": extra or None,
        "message": message,
    }
    click.echo(json.dumps(output, ensure_ascii=False))


if __name__ == "__main__":
    main()
