"""
Currency formatting utilities for HTML report generation.

Provides one canonical, locale-independent rendering of monetary amounts so
that reports are byte-for-byte reproducible on any machine:

- Amounts are rounded half-up to the currency's fraction digits
- Thousands are grouped with "," and the decimal separator is "."
- Known currencies get their symbol as a prefix with no space ("¥1,234.50")
- Unknown currencies get the ISO code and a space as prefix ("CHF 1,234.50")
- Negative amounts carry a leading "-" before the symbol ("-$5.00")

This module provides:
- CurrencyConvention: Symbol and fraction digits for one currency
- currency_convention: Look up the convention for an ISO 4217 code
- format_currency: Format a single amount

Examples:
    >>> from record_report.report.currency_formatter import format_currency
    >>> format_currency(1234.5, "CNY")
    '¥1,234.50'
    >>> format_currency(1234.5, "JPY")
    '¥1,235'
    >>> format_currency(-42, "CHF")
    '-CHF 42.00'
"""

import logging
import math
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

logger = logging.getLogger(__name__)

DEFAULT_FRACTION_DIGITS = 2


@dataclass(frozen=True)
class CurrencyConvention:
    """
    Display convention for one currency.

    Attributes:
        prefix: Text placed before the grouped amount
        fraction_digits: Number of digits after the decimal point
    """

    prefix: str
    fraction_digits: int = DEFAULT_FRACTION_DIGITS


KNOWN_CURRENCIES: dict[str, CurrencyConvention] = {
    "CNY": CurrencyConvention("¥"),
    "USD": CurrencyConvention("$"),
    "EUR": CurrencyConvention("€"),
    "GBP": CurrencyConvention("£"),
    "HKD": CurrencyConvention("HK$"),
    "JPY": CurrencyConvention("¥", 0),
    "KRW": CurrencyConvention("₩", 0),
}


def currency_convention(code: str) -> CurrencyConvention:
    """
    Return the display convention for an ISO 4217 currency code.

    Args:
        code: Currency code, case-insensitive (e.g. "cny", "USD")

    Returns:
        CurrencyConvention: Known symbol, or "<CODE> " prefix with 2 digits

    Examples:
        >>> currency_convention("usd").prefix
        '$'
        >>> currency_convention("CHF")
        CurrencyConvention(prefix='CHF ', fraction_digits=2)
    """
    normalized = code.strip().upper()
    return KNOWN_CURRENCIES.get(normalized, CurrencyConvention(f"{normalized} "))


def _to_decimal(amount: int | float | Decimal) -> Decimal:
    if isinstance(amount, Decimal):
        return amount
    if isinstance(amount, float):
        # repr gives the shortest round-tripping digits, so 2.675 stays 2.675
        return Decimal(repr(amount))
    return Decimal(amount)


def format_currency(amount: int | float | Decimal, code: str) -> str:
    """
    Format a monetary amount using the canonical rule for its currency.

    Args:
        amount: Finite numeric amount (int, float or Decimal)
        code: ISO 4217 currency code

    Returns:
        str: Formatted amount (e.g. "¥1,234.50")

    Raises:
        ValueError: If amount is NaN or infinite

    Examples:
        >>> format_currency(1234.5, "CNY")
        '¥1,234.50'

        >>> format_currency(0, "USD")
        '$0.00'

        >>> format_currency(2.675, "USD")  # half-up on the written digits
        '$2.68'

        >>> format_currency(-1234567.891, "EUR")
        '-€1,234,567.89'

        >>> format_currency(-0.001, "USD")  # rounds to zero, no sign
        '$0.00'

        >>> format_currency(float("nan"), "USD")
        Traceback (most recent call last):
        ...
        ValueError: Amount must be finite: nan

    Note:
        - Never consults the process locale
        - Decimal arithmetic avoids binary float rounding surprises
    """
    if isinstance(amount, float) and not math.isfinite(amount):
        raise ValueError(f"Amount must be finite: {amount}")

    value = _to_decimal(amount)
    if not value.is_finite():
        raise ValueError(f"Amount must be finite: {amount}")

    convention = currency_convention(code)
    quantum = Decimal(1).scaleb(-convention.fraction_digits)
    rounded = value.quantize(quantum, rounding=ROUND_HALF_UP)

    sign = "-" if rounded < 0 else ""
    grouped = format(abs(rounded), f",.{convention.fraction_digits}f")

    return f"{sign}{convention.prefix}{grouped}"
