"""
JSON log lines for Record Report.

Modules log through the standard library (``logging.getLogger(__name__)``).
setup_logging() points the root logger at stderr and renders each record as
one JSON object, so stdout stays free for Rich output and ``--format json``.

Structured fields travel in ``extra``:

    logger.info("HTML report generated", extra={"context": {"rows": 12}})

Record values are never logged; only field names, types and counts.

Example:
    >>> setup_logging(verbose=True)
    >>> log_with_context(
    ...     get_logger("record_report.report.generator"),
    ...     logging.INFO,
    ...     "HTML report generated",
    ...     context={"columns": 8, "rows": 5},
    ... )
    {"timestamp": "2025-11-02T08:30:45Z", "level": "INFO", ...}
"""

import json
import logging
import sys
from typing import Any

from record_report.utils.time import utc_timestamp


class JSONFormatter(logging.Formatter):
    """
    Render a LogRecord as a single-line JSON object.

    Keys: timestamp (UTC, 'Z' suffix), level, component (logger name),
    message, and when present context, report_id and exception.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": utc_timestamp(),
            "level": record.levelname,
            "component": record.name,
            "message": record.getMessage(),
        }

        context = getattr(record, "context", None)
        if isinstance(context, dict):
            entry["context"] = context

        if hasattr(record, "report_id"):
            entry["report_id"] = record.report_id

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        # Chinese labels and field names stay readable
        return json.dumps(entry, ensure_ascii=False, default=str)


def setup_logging(verbose: bool = False, quiet_logs: bool = False) -> None:
    """
    Send all logging to stderr as JSON lines.

    Args:
        verbose: DEBUG level. Wins over quiet_logs.
        quiet_logs: WARNING level, so routine INFO lines don't interleave
            with the CLI's own output.

    Without either flag the level is INFO. Calling this again replaces the
    previous handler rather than adding a second one.
    """
    if verbose:
        level = logging.DEBUG
    elif quiet_logs:
        level = logging.WARNING
    else:
        level = logging.INFO

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(JSONFormatter())

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)


def get_logger(component: str) -> logging.Logger:
    """Return the logger for a dotted component name."""
    return logging.getLogger(component)


def log_with_context(
    logger: logging.Logger,
    level: int,
    message: str,
    context: dict[str, Any] | None = None,
    report_id: str | None = None,
) -> None:
    """
    Log ``message`` with optional structured context and report id.

    Shorthand for ``logger.log(level, message, extra={...})`` that leaves out
    keys whose value is None.
    """
    extra: dict[str, Any] = {}
    if context is not None:
        extra["context"] = context
    if report_id is not None:
        extra["report_id"] = report_id

    logger.log(level, message, extra=extra or None)
