"""
Configuration and record loaders for Record Report.

This module loads report configuration YAML files and record files, validating
them before they reach the report engine. Loaders are glue around the engine:
the engine itself never reads files.

Functions:
    load_report_config: Load and validate report.config.yaml
    load_records: Load a list of records from a JSON or YAML file
    parse_filters: Parse "field=value" CLI arguments into an equality filter
"""

import json
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from record_report.exceptions import (
    ConfigFileNotFoundError,
    ConfigValidationError,
    RecordSourceError,
)

from .schema import ReportConfig

RECORD_FILE_SUFFIXES = (".json", ".yaml", ".yml")


def load_report_config(config_path: str | Path) -> ReportConfig:
    """
    Load report.config.yaml and validate it.

    This function:
    1. Loads YAML from the specified path
    2. Validates structure using the ReportConfig Pydantic model
    3. Returns the validated configuration (columns + render options)

    Args:
        config_path: Path to the YAML file (relative or absolute)

    Returns:
        ReportConfig with validated columns and render options

    Raises:
        ConfigFileNotFoundError: If the file doesn't exist
        ConfigValidationError: If YAML is invalid or validation fails

    Example:
        >>> config = load_report_config("examples/report.config.yaml")
        >>> [c.type for c in config.columns][:4]
        ['text', 'text', 'text', 'currency']

    Security:
        - Uses yaml.safe_load() to prevent code injection
    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise ConfigFileNotFoundError(f"Configuration file not found: {config_path}")

    try:
        with config_path.open(encoding="utf-8") as f:
            raw_config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigValidationError(f"Invalid YAML syntax in {config_path}: {e}") from e
    except OSError as e:
        raise ConfigValidationError(
            f"Failed to read configuration file {config_path}: {e}"
        ) from e

    if raw_config is None:
        raise ConfigValidationError(f"Configuration file is empty: {config_path}")

    try:
        return ReportConfig.model_validate(raw_config)
    except ValidationError as e:
        # Format validation errors in a user-friendly way
        error_messages = []
        for error in e.errors():
            loc = ".".join(str(x) for x in error["loc"])
            msg = error["msg"]
            error_messages.append(f"  - {loc}: {msg}")

        raise ConfigValidationError(
            f"Configuration validation failed in {config_path}:\n"
            + "\n".join(error_messages)
        ) from e


def load_records(records_path: str | Path) -> list[dict[str, Any]]:
    """
    Load records from a JSON or YAML file.

    The file must contain a list of mappings. Record order is preserved.
    YAML dates (e.g. 2024-03-15 without quotes) load as date objects, which
    date columns render directly.

    Args:
        records_path: Path to a .json, .yaml or .yml file

    Returns:
        List of record dicts in file order

    Raises:
        RecordSourceError: If the file is missing, unreadable, has an
            unsupported suffix, or doesn't contain a list of mappings

    Example:
        >>> records = load_records("examples/contracts.json")
        >>> records[0]["contractNumber"]
        'HT-2024-001'
    """
    records_path = Path(records_path)
    suffix = records_path.suffix.lower()

    if suffix not in RECORD_FILE_SUFFIXES:
        raise RecordSourceError(
            f"Unsupported records file type '{suffix}' for {records_path}. "
            f"Use one of: {', '.join(RECORD_FILE_SUFFIXES)}"
        )

    if not records_path.exists():
        raise RecordSourceError(f"Records file not found: {records_path}")

    try:
        with records_path.open(encoding="utf-8") as f:
            if suffix == ".json":
                data = json.load(f)
            else:
                data = yaml.safe_load(f)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise RecordSourceError(f"Invalid records file {records_path}: {e}") from e
    except OSError as e:
        raise RecordSourceError(f"Failed to read records file {records_path}: {e}") from e

    if data is None:
        return []

    if not isinstance(data, list):
        raise RecordSourceError(
            f"Records file must contain a list, got {type(data).__name__}: {records_path}"
        )

    for index, record in enumerate(data):
        if not isinstance(record, dict):
            raise RecordSourceError(
                f"Record {index} in {records_path} must be a mapping, "
                f"got {type(record).__name__}"
            )

    return data


def parse_filters(raw_filters: list[str] | None) -> dict[str, str]:
    """
    Parse "field=value" strings into an equality filter dict.

    Args:
        raw_filters: Values of repeated --filter options

    Returns:
        Mapping of field name to required value (later duplicates win)

    Raises:
        ConfigValidationError: If an entry has no "=" or an empty field name

    Examples:
        >>> parse_filters(["status=active", "type=采购合同"])
        {'status': 'active', 'type': '采购合同'}
        >>> parse_filters(None)
        {}
    """
    filters: dict[str, str] = {}

    for raw in raw_filters or []:
        field, sep, value = raw.partition("=")
        field = field.strip()
        if not sep or not field:
            raise ConfigValidationError(
                f"Invalid filter '{raw}': expected format field=value"
            )
        filters[field] = value.strip()

    return filters
