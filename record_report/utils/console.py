"""
Terminal output for the record-report CLI.

Every command speaks to two audiences. A person at a terminal gets Rich
spinners, coloured status lines and a column table. A script passing
``--format json`` gets a single JSON object on stdout, accumulated while the
command runs and written once at the end.

The helpers below consult the shared ``output_mode`` so command code never
branches on the format itself.

Example:
    >>> from record_report.utils.console import output_mode, spinner, success
    >>> output_mode.format = "json"
    >>> with spinner("Loading records..."):
    ...     records = load_records("contracts.json")
    >>> success(f"Loaded {len(records)} records")
    >>> output_mode.flush_json()
    {
      "status": "success",
      "message": "Loaded 3 records"
    }
"""

from __future__ import annotations

import json
import sys
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

from rich import box
from rich.console import Console
from rich.markup import escape as escape_markup
from rich.table import Table

if TYPE_CHECKING:
    from record_report.config.schema import ColumnSpec

OUTPUT_FORMATS = ("text", "json")


class OutputMode:
    """
    Where and how CLI feedback is written.

    Attributes:
        format: "text" for people, "json" for scripts
        quiet: Hide progress and success lines (errors are always shown)

    Examples:
        >>> mode = OutputMode("json")
        >>> mode.add_json("records", 3)
        >>> mode.is_agent()
        True
    """

    def __init__(self, format_type: str = "text", quiet: bool = False):
        if format_type not in OUTPUT_FORMATS:
            raise ValueError(
                f"Invalid format: {format_type}. Must be one of {', '.join(OUTPUT_FORMATS)}"
            )

        self.format = format_type
        self.quiet = quiet
        self._json_buffer: dict[str, Any] = {}

    def is_human(self) -> bool:
        return self.format == "text"

    def is_agent(self) -> bool:
        return self.format == "json"

    def add_json(self, key: str, value: Any) -> None:
        """Record a field for the final JSON object; later writes win."""
        self._json_buffer[key] = value

    def flush_json(self) -> None:
        """
        Write the collected fields to stdout as one JSON object.

        Does nothing in text mode or when nothing was collected. The buffer
        is emptied after writing.
        """
        if not self.is_agent() or not self._json_buffer:
            return

        sys.stdout.write(json.dumps(self._json_buffer, indent=2, ensure_ascii=False))
        sys.stdout.write("\n")
        sys.stdout.flush()
        self._json_buffer.clear()

    def reset(self) -> None:
        """Return to text mode, not quiet, with nothing collected."""
        self.format = "text"
        self.quiet = False
        self._json_buffer.clear()


output_mode = OutputMode()

console = Console()
console_err = Console(stderr=True)


def _chatty() -> bool:
    return output_mode.is_human() and not output_mode.quiet


@contextmanager
def spinner(message: str):
    """Show a spinner while the block runs; yields None outside chatty text mode."""
    if not _chatty():
        yield None
        return

    with console.status(f"[bold blue]{message}", spinner="dots") as status:
        yield status


def success(message: str) -> None:
    """
    Report a completed step.

    JSON mode records ``status: success`` and the message.
    """
    if output_mode.is_agent():
        output_mode.add_json("status", "success")
        output_mode.add_json("message", message)
    elif _chatty():
        console.print(f"[green]✓[/green] {message}")


def error(message: str) -> None:
    """
    Report a failure.

    Text mode prints to stderr even when quiet. JSON mode records
    ``status: error`` and the message under ``error``.
    """
    if output_mode.is_agent():
        output_mode.add_json("status", "error")
        output_mode.add_json("error", message)
    else:
        console_err.print(f"[red]✗[/red] {message}", style="red")


def warning(message: str) -> None:
    if output_mode.is_agent():
        output_mode.add_json("warning", message)
    elif _chatty():
        console.print(f"[yellow]⚠[/yellow] {message}", style="yellow")


def info(message: str) -> None:
    if _chatty():
        console.print(f"[blue]ℹ[/blue] {message}")


def print_banner(version: str) -> None:
    if not _chatty():
        return

    width = 39
    console.print(
        f"\n[bold cyan]╔{'═' * width}╗\n"
        f"║ {'Record Report v' + version:<{width - 2}} ║\n"
        f"║ {'Records to self-contained HTML':<{width - 2}} ║\n"
        f"╚{'═' * width}╝[/bold cyan]\n"
    )


def print_column_table(columns: list[ColumnSpec]) -> None:
    """
    Show the report's column layout.

    Text mode prints a table of field, label, type and type options. JSON
    mode records the columns as a list under ``columns``.
    """
    if output_mode.is_agent():
        output_mode.add_json(
            "columns", [column.model_dump(mode="json") for column in columns]
        )
        return

    if output_mode.quiet:
        return

    table = Table(title="Columns", box=box.ROUNDED)
    table.add_column("#", justify="right", style="dim")
    table.add_column("Field", style="cyan", no_wrap=True)
    table.add_column("Label", style="magenta")
    table.add_column("Type", justify="center")
    table.add_column("Options", style="green")

    for index, column in enumerate(columns, start=1):
        # Labels come from config files; keep "[...]" literal
        table.add_row(
            str(index),
            escape_markup(column.field),
            escape_markup(column.label),
            column.type,
            escape_markup(_describe_options(column)),
        )

    console.print(table)


def _describe_options(column: ColumnSpec) -> str:
    if column.type == "currency":
        return column.currency
    if column.type == "date":
        return column.pattern
    if column.type == "status":
        return f"{len(column.mapping)} mapped values"
    return ""
