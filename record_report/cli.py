"""
CLI entrypoint for Record Report.

Provides a dual-mode command-line interface around the report engine with:
- Human-friendly output: Rich spinners, tables, colored text
- Agent-friendly output: Structured JSON for automation

Commands:
    render: Render records from a JSON/YAML file into an HTML report
    validate: Validate a report configuration without rendering
    demo: Render the sample contract report from the mock data source

Exit codes:
    0: Success
    1: Configuration error (invalid YAML, bad column spec, bad filter)
    2: Record source error (records file missing or malformed)
    3: Output error (report could not be written)

Examples:
    # Render active contracts
    record-report render --config report.config.yaml --records contracts.json \\
        --output output/report.html --filter status=active

    # Machine-readable output
    record-report render -c report.config.yaml -r contracts.json -o out.html --format json

    # Try it without any files
    record-report demo
"""

import asyncio
import logging
from pathlib import Path

import typer
from rich.traceback import install as install_rich_traceback

from record_report.config.loader import load_report_config, parse_filters
from record_report.config.schema import RenderOptions
from record_report.exceptions import (
    ConfigFileNotFoundError,
    ConfigurationError,
    ConfigValidationError,
    RecordSourceError,
)
from record_report.report.generator import (
    generate_table,
    validate_columns,
    write_report,
)
from record_report.sources.file import FileDataSource
from record_report.sources.mock import CONTRACT_COLUMNS, MockDataSource
from record_report.utils.console import (
    error,
    info,
    output_mode,
    print_banner,
    print_column_table,
    spinner,
    success,
    warning,
)
from record_report.utils.logging import get_logger, log_with_context, setup_logging
from record_report.utils.time import utc_now

# Install Rich tracebacks for better error messages
install_rich_traceback(show_locals=False)

# Exit codes
EXIT_SUCCESS = 0  # Report rendered / config valid
EXIT_CONFIG_ERROR = 1  # Config or column validation failed
EXIT_SOURCE_ERROR = 2  # Records could not be loaded
EXIT_OUTPUT_ERROR = 3  # Report could not be written

DEMO_REPORT_FILENAME = "contracts-report.html"

logger = get_logger("record_report.cli")

app = typer.Typer(
    name="record-report",
    help="Render tabular records into self-contained HTML reports",
    add_completion=False,
)


def _set_output_mode(format: str, quiet: bool = False) -> None:
    if format not in ("text", "json"):
        error(f"Invalid format: {format}. Must be 'text' or 'json'")
        raise typer.Exit(EXIT_CONFIG_ERROR)
    output_mode.format = format
    output_mode.quiet = quiet


def _fail(message: str, exit_code: int) -> None:
    error(message)
    output_mode.add_json("exit_code", exit_code)
    output_mode.flush_json()
    raise typer.Exit(exit_code)


@app.command()
def render(
    config: Path = typer.Option(
        ...,
        "--config",
        "-c",
        help="Path to report configuration YAML (title, columns, ...)",
    ),
    records: Path = typer.Option(
        ...,
        "--records",
        "-r",
        help="Path to records file (.json, .yaml or .yml)",
    ),
    output: Path = typer.Option(
        ...,
        "--output",
        "-o",
        help="Where to write the HTML report",
    ),
    filters: list[str] = typer.Option(
        None,
        "--filter",
        help="Equality filter field=value (repeatable)",
    ),
    subtitle: str = typer.Option(
        None,
        "--subtitle",
        help="Override the subtitle from the configuration",
    ),
    format: str = typer.Option(
        "text",
        "--format",
        "-f",
        help="Output format: 'text' (human-friendly) or 'json' (machine-readable)",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Only print errors",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable debug logging",
    ),
):
    """
    Render records into a self-contained HTML report.

    This command will:
    1. Load the report configuration (columns and render options)
    2. Load records from the records file, applying --filter equality filters
    3. Render the HTML report
    4. Write it to --output

    Exit codes:
      0: Report written
      1: Configuration error
      2: Records could not be loaded
      3: Report could not be written
    """
    _set_output_mode(format, quiet)
    setup_logging(verbose=verbose, quiet_logs=not verbose)
    print_banner(_read_version())

    try:
        with spinner("Loading configuration..."):
            report_config = load_report_config(config)
            record_filters = parse_filters(filters)
        success(f"Loaded configuration with {len(report_config.columns)} columns")
    except ConfigFileNotFoundError as e:
        _fail(f"Configuration file not found: {e}", EXIT_CONFIG_ERROR)
    except ConfigValidationError as e:
        _fail(f"Configuration validation failed: {e}", EXIT_CONFIG_ERROR)

    try:
        with spinner("Loading records..."):
            source = FileDataSource(records)
            loaded = asyncio.run(source.get_records(record_filters))
        if record_filters:
            info(f"Filters: {record_filters}")
        success(f"Loaded {len(loaded)} records")
    except RecordSourceError as e:
        _fail(f"Cannot load records: {e}", EXIT_SOURCE_ERROR)

    if not loaded:
        warning("No records to report; the table will show the empty state")

    options = report_config.render_options()
    if subtitle is not None:
        options = options.model_copy(update={"subtitle": subtitle})

    try:
        html = generate_table(loaded, report_config.columns, options)
    except ConfigurationError as e:
        _fail(f"Invalid report configuration: {e}", EXIT_CONFIG_ERROR)

    try:
        written = write_report(output, html)
    except OSError as e:
        _fail(str(e), EXIT_OUTPUT_ERROR)

    log_with_context(
        logger,
        logging.INFO,
        "Report written",
        context={"records": len(loaded), "columns": len(report_config.columns)},
        report_id=written.stem,
    )
    success(f"Report written to {written}")
    output_mode.add_json("output", str(written))
    output_mode.add_json("records", len(loaded))
    output_mode.add_json("columns", len(report_config.columns))
    output_mode.flush_json()
    raise typer.Exit(EXIT_SUCCESS)


@app.command()
def validate(
    config: Path = typer.Option(
        ...,
        "--config",
        "-c",
        help="Path to report configuration YAML",
    ),
    format: str = typer.Option(
        "text",
        "--format",
        "-f",
        help="Output format: 'text' or 'json'",
    ),
):
    """
    Validate a report configuration without rendering.

    Checks:
    - YAML syntax is valid
    - Every column has a non-empty field and label
    - Type-specific options are valid (currency codes, date patterns, status styles)

    Exit codes:
      0: Configuration is valid
      1: Configuration is invalid
    """
    _set_output_mode(format)

    try:
        with spinner("Validating configuration..."):
            report_config = load_report_config(config)
    except ConfigurationError as e:
        output_mode.add_json("valid", False)
        _fail(f"Validation failed: {e}", EXIT_CONFIG_ERROR)

    success("Configuration is valid")
    print_column_table(report_config.columns)
    output_mode.add_json("valid", True)
    output_mode.flush_json()
    raise typer.Exit(EXIT_SUCCESS)


@app.command()
def demo(
    output_dir: Path = typer.Option(
        Path("output"),
        "--output-dir",
        "-o",
        help="Directory for the generated demo report",
    ),
    status: str = typer.Option(
        None,
        "--status",
        "-s",
        help="Only include contracts with this status (e.g. active)",
    ),
    format: str = typer.Option(
        "text",
        "--format",
        "-f",
        help="Output format: 'text' or 'json'",
    ),
):
    """
    Render the sample contract report from built-in mock data.

    No configuration or records file needed. The "generated at" subtitle is
    supplied here, by the caller, so the report engine itself stays
    deterministic.

    Examples:
      record-report demo
      record-report demo --status active --output-dir /tmp/reports
    """
    _set_output_mode(format)
    setup_logging(quiet_logs=True)
    print_banner(_read_version())

    source = MockDataSource()
    filters = {"status": status} if status else None

    with spinner("Fetching contracts..."):
        contracts = asyncio.run(source.get_contracts(filters))
    success(f"Fetched {len(contracts)} contracts")
    if not contracts:
        warning(
            f"No contracts with status '{status}'; the table will show the empty state"
        )

    columns = validate_columns(CONTRACT_COLUMNS)
    options = RenderOptions(
        title="我的合同报表",
        subtitle=f"生成于 {utc_now():%Y-%m-%d}",
        empty_message="暂无数据",
        lang="zh-CN",
    )

    html = generate_table(contracts, columns, options)

    try:
        written = write_report(output_dir / DEMO_REPORT_FILENAME, html)
    except OSError as e:
        _fail(str(e), EXIT_OUTPUT_ERROR)

    log_with_context(
        logger,
        logging.INFO,
        "Report written",
        context={"records": len(contracts), "columns": len(columns)},
        report_id=written.stem,
    )
    print_column_table(columns)
    success(f"Report written to {written}")
    output_mode.add_json("output", str(written))
    output_mode.add_json("records", len(contracts))
    output_mode.flush_json()
    raise typer.Exit(EXIT_SUCCESS)


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show version and exit",
    ),
):
    """
    Record Report - render tabular records into self-contained HTML.

    Use 'record-report COMMAND --help' for detailed command documentation.
    """
    # Typer commands share the module-level output mode across invocations
    output_mode.reset()

    if version:
        from rich.console import Console

        console = Console()
        console.print(f"[bold cyan]record-report[/bold cyan] version {_read_version()}")
        raise typer.Exit(EXIT_SUCCESS)

    if ctx.invoked_subcommand is None:
        from rich.console import Console

        console = Console()
        console.print("[yellow]Use --help to see available commands[/yellow]")
        console.print()
        console.print("Commands:")
        console.print("  render    Render records into an HTML report")
        console.print("  validate  Validate a report configuration")
        console.print("  demo      Render the sample contract report")


def _read_version() -> str:
    """
    Read version from package metadata (pyproject.toml).

    Returns:
        Version string (e.g., "0.1.0")
    """
    from importlib.metadata import PackageNotFoundError, version

    try:
        return version("record-report")
    except PackageNotFoundError:
        return "0.1.0"


if __name__ == "__main__":
    app()
