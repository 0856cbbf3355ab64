"""
Tests for CLI module - commands, output modes and exit codes.

This module tests the Typer CLI application:

Commands:
    - render: Config + records file to HTML report
    - validate: Config validation without rendering
    - demo: Sample contract report from the mock data source
    - main callback: Version flag and bare invocation

Output Modes:
    - Human mode (--format text): Rich output
    - Agent mode (--format json): Valid JSON on stdout

Exit Codes:
    - 0: Success
    - 1: Configuration error
    - 2: Record source error
    - 3: Output error
"""

import json
import logging

import pytest
import yaml
from freezegun import freeze_time
from typer.testing import CliRunner

from record_report.cli import (
    DEMO_REPORT_FILENAME,
    EXIT_CONFIG_ERROR,
    EXIT_OUTPUT_ERROR,
    EXIT_SOURCE_ERROR,
    EXIT_SUCCESS,
    app,
)
from record_report.utils.logging import JSONFormatter

# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def cli_runner():
    """Return CliRunner for testing Typer apps."""
    return CliRunner()


@pytest.fixture(autouse=True)
def restore_root_logger():
    """Commands reconfigure the root logger; put it back after each test."""
    root = logging.getLogger()
    level = root.level

    yield

    for handler in root.handlers[:]:
        if isinstance(handler.formatter, JSONFormatter):
            root.removeHandler(handler)
    root.setLevel(level)


@pytest.fixture
def config_file(tmp_path):
    """Create a valid report configuration file."""
    config_data = {
        "title": "我的合同报表",
        "empty_message": "暂无数据",
        "lang": "zh-CN",
        "columns": [
            {"field": "contractNumber", "label": "合同编号"},
            {"field": "amount", "label": "金额", "type": "currency", "currency": "CNY"},
            {
                "field": "status",
                "label": "状态",
                "type": "status",
                "mapping": {"active": "生效中"},
            },
            {"field": "startDate", "label": "开始日期", "type": "date"},
        ],
    }
    path = tmp_path / "report.config.yaml"
    path.write_text(yaml.safe_dump(config_data, allow_unicode=True), encoding="utf-8")
    return path


@pytest.fixture
def records_file(tmp_path):
    """Create a records file with three contracts."""
    records = [
        {"contractNumber": "HT-2024-001", "amount": 1234.5, "status": "active", "startDate": "2024-03-15"},
        {"contractNumber": "HT-2023-017", "amount": 96000, "status": "expired", "startDate": "2023-01-01"},
        {"contractNumber": "HT-2024-002", "amount": "待定", "status": "active", "startDate": "2024-01-01"},
    ]
    path = tmp_path / "contracts.json"
    path.write_text(json.dumps(records, ensure_ascii=False), encoding="utf-8")
    return path


def _render_args(config_file, records_file, output, *extra):
    return [
        "render",
        "--config",
        str(config_file),
        "--records",
        str(records_file),
        "--output",
        str(output),
        *extra,
    ]


# ============================================================================
# Tests - render
# ============================================================================


class TestRenderCommand:
    """Test suite for the render command."""

    def test_render_writes_report(self, cli_runner, config_file, records_file, tmp_path):
        output = tmp_path / "out" / "report.html"

        result = cli_runner.invoke(app, _render_args(config_file, records_file, output))

        assert result.exit_code == EXIT_SUCCESS
        html = output.read_text(encoding="utf-8")
        assert '<html lang="zh-CN">' in html
        assert "¥1,234.50" in html
        assert "生效中" in html
        assert "Report written to" in result.stdout

    def test_render_with_filter(self, cli_runner, config_file, records_file, tmp_path):
        output = tmp_path / "report.html"

        result = cli_runner.invoke(
            app,
            _render_args(config_file, records_file, output, "--filter", "status=expired"),
        )

        assert result.exit_code == EXIT_SUCCESS
        html = output.read_text(encoding="utf-8")
        assert "HT-2023-017" in html
        assert "HT-2024-001" not in html

    def test_render_filter_without_matches_renders_empty_state(
        self, cli_runner, config_file, records_file, tmp_path
    ):
        output = tmp_path / "report.html"

        result = cli_runner.invoke(
            app,
            _render_args(config_file, records_file, output, "--filter", "status=draft"),
        )

        assert result.exit_code == EXIT_SUCCESS
        assert '<td colspan="4">暂无数据</td>' in output.read_text(encoding="utf-8")

    def test_render_without_matches_warns_in_json(
        self, cli_runner, config_file, records_file, tmp_path
    ):
        output = tmp_path / "report.html"

        result = cli_runner.invoke(
            app,
            _render_args(
                config_file,
                records_file,
                output,
                "--filter",
                "status=draft",
                "--format",
                "json",
            ),
        )

        assert result.exit_code == EXIT_SUCCESS
        data = json.loads(result.stdout)
        assert data["records"] == 0
        assert "empty state" in data["warning"]

    def test_render_with_records_has_no_warning(
        self, cli_runner, config_file, records_file, tmp_path
    ):
        result = cli_runner.invoke(
            app,
            _render_args(
                config_file, records_file, tmp_path / "report.html", "--format", "json"
            ),
        )
        assert "warning" not in json.loads(result.stdout)

    def test_render_logs_written_report(
        self, cli_runner, config_file, records_file, tmp_path, caplog, monkeypatch
    ):
        # Keep pytest's capture handler on the root logger
        monkeypatch.setattr("record_report.cli.setup_logging", lambda **kwargs: None)
        output = tmp_path / "contracts-active.html"

        with caplog.at_level(logging.INFO, logger="record_report.cli"):
            result = cli_runner.invoke(
                app,
                _render_args(config_file, records_file, output, "--format", "json"),
            )

        assert result.exit_code == EXIT_SUCCESS
        record = next(r for r in caplog.records if r.getMessage() == "Report written")
        assert record.name == "record_report.cli"
        assert record.context == {"records": 3, "columns": 4}
        assert record.report_id == "contracts-active"

    def test_render_subtitle_override(
        self, cli_runner, config_file, records_file, tmp_path
    ):
        output = tmp_path / "report.html"

        result = cli_runner.invoke(
            app,
            _render_args(config_file, records_file, output, "--subtitle", "2024 年度"),
        )

        assert result.exit_code == EXIT_SUCCESS
        assert '<p class="report-subtitle">2024 年度</p>' in output.read_text(
            encoding="utf-8"
        )

    def test_render_json_output(self, cli_runner, config_file, records_file, tmp_path):
        output = tmp_path / "report.html"

        result = cli_runner.invoke(
            app, _render_args(config_file, records_file, output, "--format", "json")
        )

        assert result.exit_code == EXIT_SUCCESS
        data = json.loads(result.stdout)
        assert data["status"] == "success"
        assert data["output"] == str(output)
        assert data["records"] == 3
        assert data["columns"] == 4
        assert "\x1b[" not in result.stdout

    def test_render_missing_config(self, cli_runner, records_file, tmp_path):
        result = cli_runner.invoke(
            app,
            _render_args(tmp_path / "missing.yaml", records_file, tmp_path / "r.html"),
        )
        assert result.exit_code == EXIT_CONFIG_ERROR

    def test_render_invalid_column(self, cli_runner, records_file, tmp_path):
        config = tmp_path / "bad.yaml"
        config.write_text(
            yaml.safe_dump({"columns": [{"field": "", "label": "名称"}]}, allow_unicode=True),
            encoding="utf-8",
        )

        result = cli_runner.invoke(
            app,
            _render_args(config, records_file, tmp_path / "r.html", "--format", "json"),
        )

        assert result.exit_code == EXIT_CONFIG_ERROR
        data = json.loads(result.stdout)
        assert data["status"] == "error"
        assert "field cannot be empty" in data["error"]
        assert data["exit_code"] == EXIT_CONFIG_ERROR

    def test_render_invalid_filter(self, cli_runner, config_file, records_file, tmp_path):
        result = cli_runner.invoke(
            app,
            _render_args(config_file, records_file, tmp_path / "r.html", "--filter", "status"),
        )
        assert result.exit_code == EXIT_CONFIG_ERROR

    def test_render_missing_records(self, cli_runner, config_file, tmp_path):
        result = cli_runner.invoke(
            app,
            _render_args(config_file, tmp_path / "missing.json", tmp_path / "r.html"),
        )
        assert result.exit_code == EXIT_SOURCE_ERROR

    def test_render_malformed_records(self, cli_runner, config_file, tmp_path):
        records = tmp_path / "records.json"
        records.write_text('{"not": "a list"}', encoding="utf-8")

        result = cli_runner.invoke(
            app, _render_args(config_file, records, tmp_path / "r.html")
        )
        assert result.exit_code == EXIT_SOURCE_ERROR

    def test_render_unwritable_output(
        self, cli_runner, config_file, records_file, tmp_path
    ):
        blocker = tmp_path / "blocker"
        blocker.write_text("", encoding="utf-8")

        result = cli_runner.invoke(
            app, _render_args(config_file, records_file, blocker / "report.html")
        )
        assert result.exit_code == EXIT_OUTPUT_ERROR

    def test_render_invalid_format(self, cli_runner, config_file, records_file, tmp_path):
        result = cli_runner.invoke(
            app,
            _render_args(config_file, records_file, tmp_path / "r.html", "--format", "xml"),
        )
        assert result.exit_code == EXIT_CONFIG_ERROR


# ============================================================================
# Tests - validate
# ============================================================================


class TestValidateCommand:
    """Test suite for the validate command."""

    def test_validate_valid_config(self, cli_runner, config_file):
        result = cli_runner.invoke(app, ["validate", "--config", str(config_file)])

        assert result.exit_code == EXIT_SUCCESS
        assert "Configuration is valid" in result.stdout
        assert "contractNumber" in result.stdout

    def test_validate_json_lists_columns(self, cli_runner, config_file):
        result = cli_runner.invoke(
            app, ["validate", "--config", str(config_file), "--format", "json"]
        )

        assert result.exit_code == EXIT_SUCCESS
        data = json.loads(result.stdout)
        assert data["valid"] is True
        assert [c["type"] for c in data["columns"]] == [
            "text",
            "currency",
            "status",
            "date",
        ]
        assert data["columns"][1]["currency"] == "CNY"

    def test_validate_invalid_config(self, cli_runner, tmp_path):
        config = tmp_path / "bad.yaml"
        config.write_text(
            yaml.safe_dump({"columns": [{"field": "amount", "label": "金额", "type": "currency"}]}),
            encoding="utf-8",
        )

        result = cli_runner.invoke(
            app, ["validate", "--config", str(config), "--format", "json"]
        )

        assert result.exit_code == EXIT_CONFIG_ERROR
        data = json.loads(result.stdout)
        assert data["valid"] is False
        assert "currency" in data["error"]

    def test_validate_missing_file(self, cli_runner, tmp_path):
        result = cli_runner.invoke(
            app, ["validate", "--config", str(tmp_path / "missing.yaml")]
        )
        assert result.exit_code == EXIT_CONFIG_ERROR


# ============================================================================
# Tests - demo
# ============================================================================


class TestDemoCommand:
    """Test suite for the demo command."""

    def test_demo_writes_contract_report(self, cli_runner, tmp_path):
        result = cli_runner.invoke(app, ["demo", "--output-dir", str(tmp_path)])

        assert result.exit_code == EXIT_SUCCESS
        html = (tmp_path / DEMO_REPORT_FILENAME).read_text(encoding="utf-8")
        assert '<h1 class="report-title">我的合同报表</h1>' in html
        assert "¥1,234.50" in html
        assert "深圳 &lt;Bright&gt; &amp; Partners" in html
        assert '<span class="status status-success">生效中</span>' in html

    def test_demo_subtitle_uses_current_date(self, cli_runner, tmp_path):
        with freeze_time("2024-05-20 08:00:00"):
            result = cli_runner.invoke(
                app, ["demo", "--output-dir", str(tmp_path), "--format", "json"]
            )

        assert result.exit_code == EXIT_SUCCESS
        html = (tmp_path / DEMO_REPORT_FILENAME).read_text(encoding="utf-8")
        assert '<p class="report-subtitle">生成于 2024-05-20</p>' in html

    def test_demo_status_filter(self, cli_runner, tmp_path):
        result = cli_runner.invoke(
            app,
            ["demo", "--output-dir", str(tmp_path), "--status", "active", "--format", "json"],
        )

        assert result.exit_code == EXIT_SUCCESS
        data = json.loads(result.stdout)
        assert data["records"] == 2
        assert data["output"] == str(tmp_path / DEMO_REPORT_FILENAME)

        html = (tmp_path / DEMO_REPORT_FILENAME).read_text(encoding="utf-8")
        assert "已过期" not in html

    def test_demo_unknown_status_renders_empty_state(self, cli_runner, tmp_path):
        result = cli_runner.invoke(
            app, ["demo", "--output-dir", str(tmp_path), "--status", "draft"]
        )

        assert result.exit_code == EXIT_SUCCESS
        html = (tmp_path / DEMO_REPORT_FILENAME).read_text(encoding="utf-8")
        assert '<td colspan="8">暂无数据</td>' in html

    def test_demo_unknown_status_warns_in_json(self, cli_runner, tmp_path):
        result = cli_runner.invoke(
            app,
            ["demo", "--output-dir", str(tmp_path), "--status", "draft", "--format", "json"],
        )

        assert result.exit_code == EXIT_SUCCESS
        data = json.loads(result.stdout)
        assert data["records"] == 0
        assert "'draft'" in data["warning"]

    def test_demo_unwritable_output(self, cli_runner, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("", encoding="utf-8")

        result = cli_runner.invoke(app, ["demo", "--output-dir", str(blocker)])
        assert result.exit_code == EXIT_OUTPUT_ERROR


# ============================================================================
# Tests - main callback
# ============================================================================


class TestMainCallback:
    """Test suite for the top-level callback."""

    def test_version_flag(self, cli_runner):
        result = cli_runner.invoke(app, ["--version"])

        assert result.exit_code == EXIT_SUCCESS
        assert "record-report" in result.stdout
        assert "version" in result.stdout

    def test_no_command_lists_commands(self, cli_runner):
        result = cli_runner.invoke(app, [])

        assert result.exit_code == EXIT_SUCCESS
        assert "render" in result.stdout
        assert "demo" in result.stdout
