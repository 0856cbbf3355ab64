"""
HTML report generation module for Record Report.

This module renders records into beautiful, self-contained HTML reports with
inline CSS, no external dependencies, and XSS protection via explicit escaping
plus Jinja2 autoescaping.

Key exports:
    - generate_table: Generate HTML string from records, columns and options
    - write_report: Write a generated HTML string to disk
    - format_cell: Format one raw value for its column
    - format_currency: Canonical currency formatting
"""

from .cell_formatter import escape_text, format_cell
from .currency_formatter import format_currency
from .generator import generate_table, validate_columns, write_report

__all__ = [
    "escape_text",
    "format_cell",
    "format_currency",
    "generate_table",
    "validate_columns",
    "write_report",
]
