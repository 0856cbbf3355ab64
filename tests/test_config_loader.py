"""
Tests for config.loader module.

This module tests configuration and record loading:
- YAML report configuration loading and validation
- Error handling for missing files, invalid YAML, empty files and schema errors
- JSON/YAML record files (order preserved, shape checked)
- CLI filter parsing ("field=value")
"""

import json
import logging
from datetime import date
from pathlib import Path

import pytest
import yaml

from record_report.config.loader import load_records, load_report_config, parse_filters
from record_report.config.schema import CurrencyColumn, StatusColumn
from record_report.exceptions import (
    ConfigFileNotFoundError,
    ConfigurationError,
    ConfigValidationError,
    RecordSourceError,
)

EXAMPLES_DIR = Path(__file__).parent.parent / "examples"

# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def valid_config_dict():
    """Return a valid report configuration dictionary."""
    return {
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


@pytest.fixture
def write_yaml(tmp_path):
    """Write a dict to a YAML file and return its path."""

    def _write(data, name="report.config.yaml"):
        path = tmp_path / name
        path.write_text(yaml.safe_dump(data, allow_unicode=True), encoding="utf-8")
        return path

    return _write


# ============================================================================
# Tests - load_report_config
# ============================================================================


class TestLoadReportConfig:
    """Test suite for load_report_config."""

    def test_loads_valid_config(self, write_yaml, valid_config_dict):
        config = load_report_config(write_yaml(valid_config_dict))

        assert config.title == "我的合同报表"
        assert config.lang == "zh-CN"
        assert [c.field for c in config.columns] == [
            "contractNumber",
            "amount",
            "status",
            "startDate",
        ]
        assert isinstance(config.columns[1], CurrencyColumn)
        assert isinstance(config.columns[2], StatusColumn)

    def test_accepts_string_path(self, write_yaml, valid_config_dict):
        config = load_report_config(str(write_yaml(valid_config_dict)))
        assert len(config.columns) == 4

    def test_shipped_example_config(self):
        config = load_report_config(EXAMPLES_DIR / "report.config.yaml")

        assert config.empty_message == "暂无数据"
        assert [c.type for c in config.columns][:4] == [
            "text",
            "text",
            "text",
            "currency",
        ]

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigFileNotFoundError, match="not found"):
            load_report_config(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("columns: [unclosed", encoding="utf-8")

        with pytest.raises(ConfigValidationError, match="Invalid YAML syntax"):
            load_report_config(path)

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")

        with pytest.raises(ConfigValidationError, match="empty"):
            load_report_config(path)

    def test_schema_errors_listed_by_location(self, write_yaml, valid_config_dict):
        valid_config_dict["columns"][0]["field"] = ""
        del valid_config_dict["columns"][1]["currency"]

        with pytest.raises(ConfigValidationError) as exc_info:
            load_report_config(write_yaml(valid_config_dict))

        message = str(exc_info.value)
        assert "Configuration validation failed" in message
        assert "  - columns.0.text.field:" in message
        assert "  - columns.1.currency.currency:" in message

    def test_missing_columns(self, write_yaml):
        with pytest.raises(ConfigValidationError, match="columns"):
            load_report_config(write_yaml({"title": "T"}))

    def test_errors_are_configuration_errors(self, tmp_path):
        with pytest.raises(ConfigurationError):
            load_report_config(tmp_path / "missing.yaml")

    def test_yaml_is_loaded_safely(self, tmp_path):
        path = tmp_path / "unsafe.yaml"
        path.write_text("!!python/object/apply:os.system ['echo hi']\n", encoding="utf-8")

        with pytest.raises(ConfigValidationError):
            load_report_config(path)

    def test_unquoted_yaml_boolean_status_key_warns(self, tmp_path, caplog):
        path = tmp_path / "report.yaml"
        path.write_text(
            "columns:\n"
            "  - field: enabled\n"
            "    label: 启用\n"
            "    type: status\n"
            "    mapping:\n"
            "      on: 启用\n"
            "      'off': 停用\n",
            encoding="utf-8",
        )

        with caplog.at_level(logging.WARNING, logger="record_report.config.schema"):
            config = load_report_config(path)

        assert set(config.columns[0].mapping) == {"True", "off"}
        assert "quote it in YAML" in caplog.text


# ============================================================================
# Tests - load_records
# ============================================================================


class TestLoadRecords:
    """Test suite for load_records."""

    def test_loads_json_in_order(self, tmp_path):
        path = tmp_path / "records.json"
        path.write_text(
            json.dumps([{"id": 2}, {"id": 1}, {"id": 3}]), encoding="utf-8"
        )

        assert [r["id"] for r in load_records(path)] == [2, 1, 3]

    def test_loads_yaml_with_native_dates(self, tmp_path):
        path = tmp_path / "records.yaml"
        path.write_text(
            "- contractNumber: HT-1\n  startDate: 2024-03-15\n", encoding="utf-8"
        )

        records = load_records(path)
        assert records == [{"contractNumber": "HT-1", "startDate": date(2024, 3, 15)}]

    def test_yml_suffix(self, tmp_path):
        path = tmp_path / "records.yml"
        path.write_text("- {a: 1}\n", encoding="utf-8")
        assert load_records(path) == [{"a": 1}]

    def test_shipped_example_records(self):
        records = load_records(EXAMPLES_DIR / "contracts.json")
        assert records[0]["contractNumber"] == "HT-2024-001"

    def test_empty_yaml_is_no_records(self, tmp_path):
        path = tmp_path / "records.yaml"
        path.write_text("", encoding="utf-8")
        assert load_records(path) == []

    def test_unsupported_suffix(self, tmp_path):
        path = tmp_path / "records.csv"
        path.write_text("a,b\n1,2\n", encoding="utf-8")

        with pytest.raises(RecordSourceError, match="Unsupported records file type"):
            load_records(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(RecordSourceError, match="not found"):
            load_records(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "records.json"
        path.write_text("[{", encoding="utf-8")

        with pytest.raises(RecordSourceError, match="Invalid records file"):
            load_records(path)

    def test_not_a_list(self, tmp_path):
        path = tmp_path / "records.json"
        path.write_text(json.dumps({"records": []}), encoding="utf-8")

        with pytest.raises(RecordSourceError, match="must contain a list, got dict"):
            load_records(path)

    def test_record_not_a_mapping(self, tmp_path):
        path = tmp_path / "records.json"
        path.write_text(json.dumps([{"a": 1}, "oops"]), encoding="utf-8")

        with pytest.raises(RecordSourceError, match="Record 1 .* must be a mapping"):
            load_records(path)


# ============================================================================
# Tests - parse_filters
# ============================================================================


class TestParseFilters:
    """Test suite for parse_filters."""

    def test_none_is_empty(self):
        assert parse_filters(None) == {}

    def test_empty_list_is_empty(self):
        assert parse_filters([]) == {}

    def test_parses_pairs(self):
        assert parse_filters(["status=active", "type=采购合同"]) == {
            "status": "active",
            "type": "采购合同",
        }

    def test_value_may_contain_equals(self):
        assert parse_filters(["note=a=b"]) == {"note": "a=b"}

    def test_whitespace_trimmed(self):
        assert parse_filters([" status = active "]) == {"status": "active"}

    def test_empty_value_allowed(self):
        assert parse_filters(["status="]) == {"status": ""}

    def test_later_duplicate_wins(self):
        assert parse_filters(["status=active", "status=expired"]) == {
            "status": "expired"
        }

    @pytest.mark.parametrize("raw", ["status", "=active", "  =x"])
    def test_invalid_filter(self, raw):
        with pytest.raises(ConfigValidationError, match="expected format field=value"):
            parse_filters([raw])
