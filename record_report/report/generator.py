"""
HTML report generation for Record Report.

This module assembles records, column specifications and render options into
a single self-contained HTML document with inline CSS and no external assets.

Key features:
- Column validation up front: a bad column spec aborts before any rendering
- Stable ordering: columns and rows appear exactly in input order
- Explicit escaping step (escape_text) plus Jinja2 autoescaping
- Explicit empty state: no records still yields a header row and an
  indicator row, never a silently empty table body
- Deterministic output: no timestamps or other ambient data are added

Security:
- CRITICAL: Jinja2 autoescaping enabled to prevent HTML injection
- All record values, labels, titles and subtitles are escaped

Example:
    >>> columns = [
    ...     {"field": "contractNumber", "label": "合同编号"},
    ...     {"field": "amount", "label": "金额", "type": "currency", "currency": "CNY"},
    ... ]
    >>> html = generate_table(
    ...     [{"contractNumber": "HT-001", "amount": 1234.5}],
    ...     columns,
    ...     {"title": "我的合同报表"},
    ... )
    >>> "¥1,234.50" in html
    True
"""

import logging
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, select_autoescape
from markupsafe import Markup
from pydantic import BaseModel, ValidationError

from ..config.schema import (
    COLUMN_ADAPTER,
    ColumnSpec,
    RenderOptions,
    normalize_column_type,
)
from ..exceptions import ColumnSpecError, ConfigurationError
from .cell_formatter import escape_text, format_cell

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).parent / "templates"
TEMPLATE_NAME = "report.html.j2"

DEFAULT_DOCUMENT_TITLE = "Report"


def generate_table(
    records: Iterable[Any] | None,
    columns: Iterable[ColumnSpec | Mapping[str, Any]],
    options: RenderOptions | Mapping[str, Any] | None = None,
) -> str:
    """
    Generate a complete HTML report document.

    Steps:
    1. Validate columns and options (fail fast, nothing is rendered on error)
    2. Build the header block from title/subtitle (omitted when absent)
    3. Build one header cell per column, in column order
    4. Build one row per record, one cell per column, via format_cell
    5. Build the empty-state row when there are no records
    6. Render the self-contained document

    Args:
        records: Ordered records (mappings, or objects read by attribute).
            None is treated as no records.
        columns: Ordered, non-empty column specs (models or plain dicts)
        options: RenderOptions, a plain dict of its fields, or None

    Returns:
        HTML string (self-contained, ready to write to file)

    Raises:
        ColumnSpecError: If the column list is empty or any column is invalid
        ConfigurationError: If options are invalid, or records is a string or
            a single mapping instead of a sequence of records
        ValueError: If the report template cannot be loaded or rendered

    Example:
        >>> html = generate_table([], [{"field": "name", "label": "名称"}])
        >>> 'class="empty-row"' in html
        True

    Note:
        - Output is a pure function of the inputs (byte-identical on re-run)
        - Inputs are never mutated
        - Per-cell formatting problems degrade to text and never abort
    """
    validated_columns = validate_columns(columns)
    render_options = resolve_options(options)
    if isinstance(records, str | bytes | Mapping):
        raise ConfigurationError(
            f"records must be a list of records, got {type(records).__name__}"
        )
    record_list = list(records) if records is not None else []

    template = _load_template()

    rows = build_rows(record_list, validated_columns)
    template_data = {
        "lang": render_options.lang,
        "document_title": escape_text(render_options.title or DEFAULT_DOCUMENT_TITLE),
        "header": build_header(render_options),
        "header_cells": build_header_cells(validated_columns),
        "rows": rows,
        "empty_state": build_empty_state(rows, validated_columns, render_options),
    }

    try:
        html = template.render(**template_data)
    except Exception as e:
        logger.error(f"Failed to render template: {e}", exc_info=True)
        raise ValueError(f"Cannot render report template: {e}") from e

    logger.info(
        "HTML report generated",
        extra={"context": {"columns": len(validated_columns), "rows": len(rows)}},
    )
    return html


def validate_columns(
    columns: Iterable[ColumnSpec | Mapping[str, Any]] | None,
) -> list[ColumnSpec]:
    """
    Validate and normalize the column list.

    Plain dicts are validated into column models; a missing type defaults to
    "text" and unknown types are treated as "text". Every invalid entry is
    reported, not just the first one.

    Args:
        columns: Ordered column specs (models or plain dicts)

    Returns:
        List of validated column models, in input order

    Raises:
        ColumnSpecError: If the list is empty or any column is invalid

    Example:
        >>> validate_columns([{"field": "", "label": "Name"}])
        Traceback (most recent call last):
        ...
        record_report.exceptions.ColumnSpecError: Invalid column specification:
          - columns[0].field: Value error, field cannot be empty
    """
    if columns is None or isinstance(columns, str | bytes | Mapping):
        raise ColumnSpecError("columns must be a list of column specifications")

    column_list = list(columns)
    if not column_list:
        raise ColumnSpecError("At least one column is required")

    validated: list[ColumnSpec] = []
    error_messages = []

    for index, column in enumerate(column_list):
        if isinstance(column, BaseModel) and not isinstance(column, Mapping):
            column = column.model_dump()
        if not isinstance(column, Mapping):
            error_messages.append(
                f"  - columns[{index}]: expected a mapping, got {type(column).__name__}"
            )
            continue

        try:
            validated.append(
                COLUMN_ADAPTER.validate_python(normalize_column_type(column))
            )
        except ValidationError as e:
            for error in e.errors():
                # First loc element is the union tag, e.g. ('currency', 'currency')
                loc = ".".join(str(x) for x in error["loc"][1:])
                suffix = f".{loc}" if loc else ""
                error_messages.append(
                    f"  - columns[{index}]{suffix}: {error['msg']}"
                )

    if error_messages:
        raise ColumnSpecError(
            "Invalid column specification:\n" + "\n".join(error_messages)
        )

    return validated


def resolve_options(
    options: RenderOptions | Mapping[str, Any] | None,
) -> RenderOptions:
    """
    Coerce caller-supplied options into RenderOptions.

    Raises:
        ConfigurationError: If a plain mapping fails validation
    """
    if options is None:
        return RenderOptions()
    if isinstance(options, RenderOptions):
        return options

    try:
        return RenderOptions.model_validate(dict(options))
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid render options: {e}") from e


def build_header(options: RenderOptions) -> dict[str, Markup | None] | None:
    """
    Build the escaped title/subtitle block.

    Returns None when neither title nor subtitle is set, so the template
    emits no header markup at all. Empty strings count as absent.
    """
    title = escape_text(options.title) if options.title else None
    subtitle = escape_text(options.subtitle) if options.subtitle else None

    if title is None and subtitle is None:
        return None

    return {"title": title, "subtitle": subtitle}


def build_header_cells(columns: list[ColumnSpec]) -> list[dict[str, Any]]:
    """Build one escaped header cell per column, in column order."""
    return [
        {"label": escape_text(column.label), "type": column.type}
        for column in columns
    ]


def build_rows(
    records: list[Any],
    columns: list[ColumnSpec],
) -> list[list[dict[str, Any]]]:
    """
    Build the table body: one row per record, one cell per column.

    Args:
        records: Records in display order
        columns: Validated columns in display order

    Returns:
        Rows of cells; each cell has "content" (escaped Markup) and "type"
    """
    return [
        [
            {
                "content": format_cell(_field_value(record, column.field), column),
                "type": column.type,
            }
            for column in columns
        ]
        for record in records
    ]


def build_empty_state(
    rows: list[list[dict[str, Any]]],
    columns: list[ColumnSpec],
    options: RenderOptions,
) -> dict[str, Any] | None:
    """
    Build the "no data" indicator row.

    Returns:
        None when there are rows; otherwise a dict with "colspan" (number of
        columns) and "message" (escaped options.empty_message)

    Example:
        >>> from record_report.config.schema import TextColumn
        >>> build_empty_state([], [TextColumn(field="a", label="A")], RenderOptions())
        {'colspan': 1, 'message': Markup('No data')}
    """
    if rows:
        return None

    return {
        "colspan": len(columns),
        "message": escape_text(options.empty_message),
    }


def write_report(output_path: str | Path, html: str) -> Path:
    """
    Write a generated HTML report to disk.

    Args:
        output_path: Destination file path (parent directories are created)
        html: HTML string from generate_table()

    Returns:
        Path the report was written to

    Raises:
        OSError: If the file cannot be written

    Note:
        - UTF-8 encoding for international characters
        - The report engine itself never touches the file system
    """
    path = Path(output_path)

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as f:
            f.write(html)
    except OSError as e:
        logger.error(f"Failed to write HTML report: {path}", exc_info=True)
        raise OSError(
            f"Cannot write HTML report '{path}': {e}. "
            f"Check disk space and permissions."
        ) from e

    logger.info(f"HTML report written to: {path}")
    return path


def _field_value(record: Any, field: str) -> Any:
    """Read a field from a record; missing or unreadable fields read as None."""
    if isinstance(record, Mapping):
        return record.get(field)
    try:
        return getattr(record, field, None)
    except Exception as e:
        logger.debug(
            f"Record attribute could not be read: {type(e).__name__}",
            extra={"context": {"field": field, "record_type": type(record).__name__}},
        )
        return None


def _load_template():
    env = Environment(
        loader=FileSystemLoader(str(TEMPLATE_DIR)),
        autoescape=select_autoescape(["html", "xml", "j2"]),
        trim_blocks=True,
        lstrip_blocks=True,
    )

    try:
        return env.get_template(TEMPLATE_NAME)
    except Exception as e:
        logger.error(f"Failed to load template: {e}", exc_info=True)
        raise ValueError(f"Cannot load report template: {e}") from e
