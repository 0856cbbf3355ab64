"""
Type-aware cell formatting for HTML reports.

Turns one raw record value plus its column specification into display text
that is already safe to embed in HTML. Formatting is total: a value that
doesn't fit its column type degrades to its plain-text rendering instead of
failing the report.

Each typed formatter returns the formatted text, or None to request the text
fallback. format_cell is the single dispatcher that composes them.

Example:
    >>> from record_report.config.schema import CurrencyColumn
    >>> column = CurrencyColumn(field="amount", label="金额", currency="CNY")
    >>> format_cell(1234.5, column)
    Markup('¥1,234.50')
    >>> format_cell("n/a", column)
    Markup('n/a')
"""

import logging
import math
from collections.abc import Callable
from decimal import Decimal

from markupsafe import Markup, escape

from ..config.schema import (
    ColumnSpec,
    CurrencyColumn,
    DateColumn,
    StatusColumn,
    TextColumn,
)
from ..utils.time import parse_calendar_date
from .currency_formatter import format_currency

logger = logging.getLogger(__name__)


def escape_text(value: object) -> Markup:
    """
    HTML-escape a value for insertion into markup.

    Escapes the five HTML-significant characters: & < > " '
    Values that are already Markup are returned unchanged.

    Args:
        value: Any value; None becomes an empty string

    Returns:
        Markup: Escaped text

    Examples:
        >>> escape_text("<script>alert('x')</script>")
        Markup('&lt;script&gt;alert(&#39;x&#39;)&lt;/script&gt;')
        >>> escape_text(None)
        Markup('')
    """
    if value is None:
        return Markup("")
    return escape(value)


def format_text(value: object) -> Markup:
    """
    Render a value with the plain-text rule.

    None gives an empty cell, anything else its str() form, escaped.
    If str() itself raises, the cell shows "<unprintable TypeName>".
    """
    if value is None:
        return Markup("")
    try:
        text = str(value)
    except Exception:
        logger.warning(
            f"Cannot convert {type(value).__name__} value to text",
            exc_info=True,
        )
        text = f"<unprintable {type(value).__name__}>"
    return escape(text)


def _format_currency_cell(value: object, column: CurrencyColumn) -> str | None:
    # bool is an int subclass but never an amount
    if isinstance(value, bool) or not isinstance(value, int | float | Decimal):
        return None
    if isinstance(value, float) and not math.isfinite(value):
        return None
    if isinstance(value, Decimal) and not value.is_finite():
        return None
    return escape(format_currency(value, column.currency))


def _format_date_cell(value: object, column: DateColumn) -> str | None:
    parsed = parse_calendar_date(value)
    if parsed is None:
        return None
    return escape(parsed.strftime(column.pattern))


def _format_status_cell(value: object, column: StatusColumn) -> str | None:
    status = column.lookup(value)
    if status is None:
        return None
    if status.style is None:
        return escape(status.label)
    return Markup('<span class="status status-{}">{}</span>').format(
        status.style, status.label
    )


def _format_text_cell(value: object, column: TextColumn) -> str | None:
    return format_text(value)


_FORMATTERS: dict[type, Callable[[object, ColumnSpec], str | None]] = {
    TextColumn: _format_text_cell,
    CurrencyColumn: _format_currency_cell,
    DateColumn: _format_date_cell,
    StatusColumn: _format_status_cell,
}


def format_cell(value: object, column: ColumnSpec) -> Markup:
    """
    Format one raw value for display in its column.

    Dispatches on the column variant:
    - text: str(value), escaped; None -> ""
    - currency: canonical currency rule (see currency_formatter) for finite
      int/float/Decimal values
    - date: column.pattern applied to a parsed calendar date
    - status: mapped label, optionally wrapped in a style span

    Any value the typed formatter can't handle (wrong shape, unparseable date,
    non-numeric amount, unmapped status) falls back to the text rule.

    Args:
        value: Raw field value from a record (may be None)
        column: Validated column specification

    Returns:
        Markup: Escaped display text, safe to embed in HTML

    Examples:
        >>> from record_report.config.schema import DateColumn, StatusColumn
        >>> format_cell("2024-03-15", DateColumn(field="d", label="D"))
        Markup('2024-03-15')
        >>> status = StatusColumn(field="s", label="S", mapping={"active": "生效中"})
        >>> format_cell("active", status)
        Markup('生效中')
        >>> format_cell("terminated", status)
        Markup('terminated')

    Note:
        Never raises and never modifies its inputs.
    """
    formatter = _FORMATTERS.get(type(column), _format_text_cell)

    try:
        formatted = formatter(value, column)
    except Exception:
        logger.warning(
            f"Formatter for column {column.field!r} failed, rendering as text",
            exc_info=True,
            extra={"context": {"field": column.field, "type": column.type}},
        )
        formatted = None

    if formatted is None:
        logger.debug(
            "Cell value rendered with text fallback",
            extra={
                "context": {
                    "field": column.field,
                    "type": column.type,
                    "value_type": type(value).__name__,
                }
            },
        )
        return format_text(value)

    return Markup(formatted)
