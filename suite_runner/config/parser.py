"""YAML run configuration parser.

Parses YAML run configuration files into RunConfig dataclass objects.
"""

from pathlib import Path
from typing import Any, Union

import yaml

from .schema import LoggingSection, ReportSection, RunConfig, RunSection

_LIST_FIELDS = ("suites", "include", "exclude")


def parse_run_config(file_path: Union[str, Path]) -> RunConfig:
    """Parse a YAML run configuration file into a RunConfig object.

    Args:
        file_path: Path to the YAML configuration file.

    Returns:
        Parsed RunConfig object.

    Raises:
        FileNotFoundError: If the configuration file doesn't exist.
        ValueError: If the YAML is malformed or missing required fields.
    """
    file_path = Path(file_path)

    if not file_path.exists():
        raise FileNotFoundError(f"Config file not found: {file_path}")

    if file_path.suffix not in (".yaml", ".yml"):
        raise ValueError(f"Expected .yaml or .yml file, got: {file_path.suffix}")

    with open(file_path, "r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Malformed YAML in {file_path}: {e}") from e

    if data is None:
        raise ValueError(f"Empty config file: {file_path}")

    return parse_run_config_data(data, source=str(file_path))


def parse_run_config_data(data: dict, source: str = "<inline>") -> RunConfig:
    """Parse a run configuration from a dictionary (already loaded YAML).

    Unknown keys are ignored.

    Args:
        data: Dictionary with configuration data.
        source: Source identifier for error messages.

    Returns:
        Parsed RunConfig object.

    Raises:
        ValueError: If required fields are missing or malformed.
    """
    if not isinstance(data, dict):
        raise ValueError(f"Config must be a YAML mapping, got {type(data).__name__}")

    _require_fields(data, ["run"], "config", source)

    # Parse run
    run_data = _section(data, "run", source)
    for name in _LIST_FIELDS:
        if name in run_data and not isinstance(run_data[name], list):
            raise ValueError(f"'run.{name}' must be a list in {source}")
    run = RunSection(**_known_fields(run_data, RunSection))

    # Parse properties
    properties = data.get("properties") or {}
    if not isinstance(properties, dict):
        raise ValueError(f"'properties' must be a mapping in {source}")

    report = ReportSection(**_known_fields(_section(data, "report", source), ReportSection))
    logging = LoggingSection(**_known_fields(_section(data, "logging", source), LoggingSection))

    return RunConfig(run=run, properties=properties, report=report, logging=logging)


def _section(data: dict, name: str, source: str) -> dict:
    section = data.get(name) or {}
    if not isinstance(section, dict):
        raise ValueError(f"'{name}' must be a mapping in {source}")
    return section


def _known_fields(data: dict, cls: type) -> dict[str, Any]:
    return {k: v for k, v in data.items() if k in cls.__dataclass_fields__}


def _require_fields(
    data: dict, fields: list[str], context: str, source: str
) -> None:
    """Check that required fields exist in a dictionary."""
    for field_name in fields:
        if field_name not in data:
            raise ValueError(
                f"Missing required field '{field_name}' in {context} ({source})"
            )
