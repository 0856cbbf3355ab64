"""
Entry point for running Record Report as a module.

Enables execution via:
    python -m record_report [command] [options]

This is equivalent to running the installed CLI:
    record-report [command] [options]

Examples:
    python -m record_report --help
    python -m record_report render --config examples/report.config.yaml \
        --records examples/contracts.json --output output/report.html
    python -m record_report demo
"""

from record_report.cli import app

if __name__ == "__main__":
    app()
