"""Logging setup for suite-runner.

The library logs through loguru under the ``suite_runner`` namespace, which
is disabled on import. Programs (and the CLI) opt in with configure_logging.
"""

import sys
from pathlib import Path
from typing import Optional, TextIO, Union

from loguru import logger

LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level} | {message}"


def configure_logging(
    level: str = "WARNING",
    sink: Optional[TextIO] = None,
    log_file: Optional[Union[str, Path]] = None,
    rotation: str = "1 day",
    retention: str = "30 days",
) -> None:
    """Configure the global loguru logger for suite-runner output.

    Args:
        level: Minimum level for all sinks.
        sink: Text stream for console logging. Default: sys.stderr.
        log_file: Optional log file path; rotated and retained per the
                  rotation/retention arguments.
        rotation: loguru rotation spec for the file sink.
        retention: loguru retention spec for the file sink.
    """
    logger.remove()
    logger.add(
        sink or sys.stderr,
        level=level.upper(),
        format=LOG_FORMAT,
        backtrace=False,
        diagnose=False,
    )

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            str(log_file),
            level=level.upper(),
            format=LOG_FORMAT,
            rotation=rotation,
            retention=retention,
            enqueue=True,  # worker threads share the file sink
        )

    logger.enable("suite_runner")
    logger.debug("Logging configured at level {}", level.upper())
