"""
Configuration schema models for Record Report.

This module defines Pydantic models for column specifications, render options
and the report.config.yaml file. Column specifications form a tagged union
keyed on ``type``: each variant carries only the options relevant to it, so
the formatter never has to ask whether an option exists.

Models:
    TextColumn: Plain text column (default type)
    CurrencyColumn: Monetary amounts with an ISO 4217 currency code
    DateColumn: Calendar dates rendered with a strftime pattern
    StatusLabel: Display label (and optional style class) for one status value
    StatusColumn: Status codes mapped to display labels
    ColumnSpec: Discriminated union of the four column variants
    RenderOptions: Presentational metadata (title, subtitle, empty message, lang)
    ReportConfig: Root configuration model (render options + columns)
"""

import logging
import re
from collections.abc import Mapping
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator

logger = logging.getLogger(__name__)

COLUMN_TYPES = ("text", "currency", "date", "status")
DEFAULT_COLUMN_TYPE = "text"

# Canonical date rendering, fixed so reports don't depend on the host locale
DEFAULT_DATE_PATTERN = "%Y-%m-%d"

DEFAULT_EMPTY_MESSAGE = "No data"
DEFAULT_LANG = "en"

_CURRENCY_CODE_PATTERN = re.compile(r"^[A-Z]{3}$")
_STYLE_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")
_LANG_PATTERN = re.compile(r"^[A-Za-z]{1,8}(-[A-Za-z0-9]{1,8})*$")


def _require_text(value: str, name: str) -> str:
    if not value or value.isspace():
        raise ValueError(f"{name} cannot be empty")
    return value


class _ColumnBase(BaseModel):
    """
    Fields shared by every column variant.

    Attributes:
        field: Record key the column reads its value from
        label: Header text shown for the column
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    field: str
    label: str

    @field_validator("field")
    @classmethod
    def validate_field(cls, v: str) -> str:
        """Validate field is non-empty."""
        return _require_text(v, "field")

    @field_validator("label")
    @classmethod
    def validate_label(cls, v: str) -> str:
        """Validate label is non-empty."""
        return _require_text(v, "label")


class TextColumn(_ColumnBase):
    """Column rendered as escaped plain text."""

    type: Literal["text"] = "text"


class CurrencyColumn(_ColumnBase):
    """
    Column of monetary amounts.

    Attributes:
        currency: ISO 4217 alphabetic code (e.g. "CNY"), normalized to upper case
    """

    type: Literal["currency"] = "currency"
    currency: str

    @field_validator("currency")
    @classmethod
    def validate_currency(cls, v: str) -> str:
        """Validate currency is a three-letter code."""
        code = v.strip().upper()
        if not _CURRENCY_CODE_PATTERN.match(code):
            raise ValueError(
                f"currency must be a three-letter ISO 4217 code, got: {v!r}"
            )
        return code


class DateColumn(_ColumnBase):
    """
    Column of calendar dates.

    Attributes:
        pattern: strftime pattern used for display (default: %Y-%m-%d)
    """

    type: Literal["date"] = "date"
    pattern: str = DEFAULT_DATE_PATTERN

    @field_validator("pattern")
    @classmethod
    def validate_pattern(cls, v: str) -> str:
        """Validate pattern is non-empty."""
        return _require_text(v, "pattern")


class StatusLabel(BaseModel):
    """
    Display information for one raw status value.

    Attributes:
        label: Text shown in the cell (escaped on output)
        style: Optional CSS class suffix; the cell is wrapped in
               <span class="status status-{style}">
    """

    model_config = ConfigDict(frozen=True)

    label: str
    style: str | None = None

    @field_validator("label")
    @classmethod
    def validate_label(cls, v: str) -> str:
        """Validate label is non-empty."""
        return _require_text(v, "label")

    @field_validator("style")
    @classmethod
    def validate_style(cls, v: str | None) -> str | None:
        """Validate style is a safe CSS class fragment."""
        if v is not None and not _STYLE_PATTERN.match(v):
            raise ValueError(
                f"style may only contain letters, digits, '-' and '_', got: {v!r}"
            )
        return v


class StatusColumn(_ColumnBase):
    """
    Column of status codes mapped to display labels.

    Attributes:
        mapping: Raw value (as string) -> StatusLabel. A bare string value is
                 shorthand for StatusLabel(label=<string>).

    Example:
        columns:
          - field: status
            label: 状态
            type: status
            mapping:
              active: 生效中
              expired: {label: 已过期, style: muted}
    """

    type: Literal["status"] = "status"
    mapping: dict[str, StatusLabel] = Field(default_factory=dict)

    @field_validator("mapping", mode="before")
    @classmethod
    def normalize_mapping(cls, v: Any) -> Any:
        """Stringify keys and expand bare-string labels."""
        if v is None:
            return {}
        if not isinstance(v, Mapping):
            return v
        for key in v:
            # YAML reads unquoted on/off/yes/no keys as booleans
            if isinstance(key, bool):
                logger.warning(
                    f"Status mapping key {key!r} is a boolean and will only match "
                    f"the value {str(key)!r}; quote it in YAML (e.g. 'on')"
                )
        return {
            str(key): {"label": value} if isinstance(value, str) else value
            for key, value in v.items()
        }

    def lookup(self, value: object) -> StatusLabel | None:
        """Return the StatusLabel for a raw value, or None if unmapped."""
        if value is None:
            return None
        return self.mapping.get(str(value))


ColumnSpec = Annotated[
    TextColumn | CurrencyColumn | DateColumn | StatusColumn,
    Field(discriminator="type"),
]

COLUMN_ADAPTER: TypeAdapter[ColumnSpec] = TypeAdapter(ColumnSpec)


def normalize_column_type(raw: Mapping[str, Any]) -> dict[str, Any]:
    """
    Return a copy of a raw column dict with a usable ``type`` discriminator.

    A missing type becomes "text". Unknown types are treated as "text" too,
    with a warning, so a typo in one column doesn't block the whole report.

    Args:
        raw: Column specification as a plain mapping

    Returns:
        New dict safe to validate with COLUMN_ADAPTER (input is not modified)

    Examples:
        >>> normalize_column_type({"field": "name", "label": "Name"})["type"]
        'text'
        >>> normalize_column_type({"field": "x", "label": "X", "type": "Currency"})["type"]
        'currency'
    """
    column = dict(raw)
    column_type = column.get("type")

    if column_type is None:
        column["type"] = DEFAULT_COLUMN_TYPE
        return column

    normalized = str(column_type).strip().lower()
    if normalized not in COLUMN_TYPES:
        logger.warning(
            f"Unknown column type {column_type!r} for field "
            f"{column.get('field')!r}, rendering as text"
        )
        normalized = DEFAULT_COLUMN_TYPE

    column["type"] = normalized
    return column


class RenderOptions(BaseModel):
    """
    Presentational metadata for a report. All text is treated as untrusted.

    Attributes:
        title: Optional heading (also used as the document <title>)
        subtitle: Optional line under the heading, e.g. a caller-supplied
                  "generated at" stamp
        empty_message: Text of the indicator row shown when there are no records
        lang: Language tag for the <html lang> attribute
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    title: str | None = None
    subtitle: str | None = None
    empty_message: str = DEFAULT_EMPTY_MESSAGE
    lang: str = DEFAULT_LANG

    @field_validator("empty_message")
    @classmethod
    def validate_empty_message(cls, v: str) -> str:
        """Validate empty_message is non-empty."""
        return _require_text(v, "empty_message")

    @field_validator("lang")
    @classmethod
    def validate_lang(cls, v: str) -> str:
        """Validate lang looks like a BCP 47 language tag."""
        if not _LANG_PATTERN.match(v):
            raise ValueError(f"lang must be a language tag like 'en' or 'zh-CN', got: {v!r}")
        return v


class ReportConfig(RenderOptions):
    """
    Root configuration model for report.config.yaml.

    Attributes:
        columns: Ordered, non-empty list of column specifications

    Example:
        title: 我的合同报表
        lang: zh-CN
        columns:
          - {field: contractNumber, label: 合同编号}
          - {field: amount, label: 金额, type: currency, currency: CNY}
    """

    columns: list[ColumnSpec] = Field(min_length=1)

    @field_validator("columns", mode="before")
    @classmethod
    def normalize_columns(cls, v: Any) -> Any:
        """Default or coerce each column's type before discrimination."""
        if not isinstance(v, list):
            return v
        return [
            normalize_column_type(item) if isinstance(item, Mapping) else item
            for item in v
        ]

    def render_options(self) -> RenderOptions:
        """Return the presentational part of the configuration."""
        return RenderOptions.model_validate(self.model_dump(exclude={"columns"}))
