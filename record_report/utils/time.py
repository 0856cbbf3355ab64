"""
Time and calendar-date utilities for Record Report.

All wall-clock timestamps MUST be in UTC with explicit timezone markers.
Wall-clock time is only used for logging and for caller-side subtitles
(e.g. "generated at ..."); the report engine itself never reads the clock.

This module provides:
- utc_now(): Current time as timezone-aware datetime
- utc_timestamp(): ISO 8601 timestamp string with 'Z' suffix
- parse_calendar_date(): Lenient parse of a raw record value into a date

Examples:
    >>> from record_report.utils.time import utc_timestamp, parse_calendar_date
    >>> utc_timestamp()
    '2025-11-02T08:30:45Z'
    >>> parse_calendar_date("2024-03-15")
    datetime.date(2024, 3, 15)
"""

from datetime import UTC, date, datetime

# Accepted non-ISO string layouts, tried after the ISO parsers
_EXTRA_DATE_FORMATS = ("%Y/%m/%d",)


def utc_now() -> datetime:
    """
    Return current time in UTC with timezone info.

    Returns:
        datetime: Current UTC time with tzinfo=timezone.utc

    Note:
        NEVER use datetime.now() without timezone parameter.
        NEVER use datetime.utcnow() (deprecated, returns naive datetime).
    """
    return datetime.now(UTC)


def utc_timestamp() -> str:
    """
    Return ISO 8601 timestamp string with 'Z' suffix.

    Format: YYYY-MM-DDTHH:MM:SSZ

    Returns:
        str: ISO 8601 formatted timestamp in UTC
    """
    return utc_now().strftime("%Y-%m-%dT%H:%M:%SZ")


def parse_calendar_date(value: object) -> date | None:
    """
    Interpret a raw record value as a calendar date.

    Accepts date and datetime objects, ISO 8601 date strings (YYYY-MM-DD),
    ISO 8601 datetime strings (with optional 'Z' or offset) and YYYY/MM/DD
    strings. For datetimes the calendar date is taken as written, without
    any timezone conversion.

    Args:
        value: Raw value from a record

    Returns:
        date if the value denotes a valid calendar date, None otherwise

    Examples:
        >>> parse_calendar_date("2024-03-15")
        datetime.date(2024, 3, 15)

        >>> parse_calendar_date("2024-03-15T23:30:00Z")
        datetime.date(2024, 3, 15)

        >>> parse_calendar_date("2024/03/15")
        datetime.date(2024, 3, 15)

        >>> parse_calendar_date("2024-02-30") is None
        True

        >>> parse_calendar_date(20240315) is None
        True

    Note:
        Numbers are never treated as dates (epoch values are ambiguous).
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text:
        return None

    try:
        return date.fromisoformat(text)
    except ValueError:
        pass

    try:
        # fromisoformat accepts the 'Z' suffix on Python 3.11+
        return datetime.fromisoformat(text).date()
    except ValueError:
        pass

    for layout in _EXTRA_DATE_FORMATS:
        try:
            return datetime.strptime(text, layout).date()
        except ValueError:
            continue

    return None
