"""
Custom exceptions for Record Report.

Errors a caller can act on. Configuration problems are raised before any
rendering starts; record source problems are raised by the loaders and
sources. Everything derives from RecordReportError.

Exception Hierarchy:
    RecordReportError (base)
    ├── ConfigurationError
    │   ├── ConfigFileNotFoundError
    │   ├── ConfigValidationError
    │   └── ColumnSpecError
    └── RecordSourceError

Cell formatting problems have no exception class: a value
that cannot be rendered as its declared type degrades to plain text and is
never raised to the caller.

Usage:
    from record_report.exceptions import ColumnSpecError

    try:
        html = generate_table(records, columns)
    except ColumnSpecError as e:
        logger.error(f"Invalid columns: {e}")
        sys.exit(1)
"""


class RecordReportError(Exception):
    """
    Base exception for all Record Report errors.

    Catch this to handle every error the package raises on purpose.
    """

    pass


# ============================================================================
# Configuration Errors
# ============================================================================


class ConfigurationError(RecordReportError):
    """
    Base class for configuration-related errors.

    Raised when a report configuration or column list is invalid.
    Generation never starts when this is raised, so no partial HTML exists.
    Should be caught and result in exit code 1 (configuration error).
    """

    pass


class ConfigFileNotFoundError(ConfigurationError):
    """
    Report configuration file does not exist at the specified path.

    Example:
        raise ConfigFileNotFoundError("/path/to/report.yaml")
    """

    pass


class ConfigValidationError(ConfigurationError):
    """
    Report configuration file is invalid (YAML syntax or schema validation failed).

    Should include details about which field(s) failed validation.

    Example:
        raise ConfigValidationError("  - columns.0.field: field cannot be empty")
    """

    pass


class ColumnSpecError(ConfigurationError):
    """
    Column list passed to the report generator is invalid.

    Raised for an empty column list, a column with an empty field or label,
    a currency column without a currency code, and similar problems.

    Example:
        raise ColumnSpecError("columns[0].field: field cannot be empty")
    """

    pass


# ============================================================================
# Record Source Errors
# ============================================================================


class RecordSourceError(RecordReportError):
    """
    Records could not be loaded from their source.

    Raised when a records file is missing, unreadable, or does not contain
    a list of mappings. Should be caught and result in exit code 2.

    Example:
        raise RecordSourceError("Records file must contain a list, got dict")
    """

    pass
