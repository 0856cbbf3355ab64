"""
Report configuration: column specifications, render options and loaders.

Key exports:
    - ColumnSpec and its variants (TextColumn, CurrencyColumn, DateColumn, StatusColumn)
    - RenderOptions, ReportConfig
    - load_report_config, load_records
"""

from .loader import load_records, load_report_config, parse_filters
from .schema import (
    ColumnSpec,
    CurrencyColumn,
    DateColumn,
    RenderOptions,
    ReportConfig,
    StatusColumn,
    StatusLabel,
    TextColumn,
)

__all__ = [
    "ColumnSpec",
    "CurrencyColumn",
    "DateColumn",
    "RenderOptions",
    "ReportConfig",
    "StatusColumn",
    "StatusLabel",
    "TextColumn",
    "load_records",
    "load_report_config",
    "parse_filters",
]
