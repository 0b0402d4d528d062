"""Utility helpers for calculator modules."""

from __future__ import annotations

import re
from decimal import Decimal

INVALID_NUMBER_KEY = "errors.invalid_number"

# Full-width digits and separators typed with a Japanese IME.
_FULL_WIDTH = str.maketrans("０１２３４５６７８９，", "0123456789,")
_DIGITS = re.compile(r"[0-9]+")


class IncomeParseError(ValueError):
    """Raised when free-text input cannot be read as a yen amount."""

    message_key = INVALID_NUMBER_KEY


def parse_income_text(text: str) -> int:
    """Parse user-entered text such as ``"1,234,567円"`` into whole yen."""

    cleaned = text.translate(_FULL_WIDTH).strip()
    cleaned = cleaned.removeprefix("¥").removeprefix("￥").removesuffix("円").strip()
    cleaned = cleaned.replace(",", "").replace("、", "")

    if not _DIGITS.fullmatch(cleaned):
        raise IncomeParseError(f"Not a whole yen amount: {text!r}")
    return int(cleaned)


def format_number(value: int | float | Decimal) -> str:
    """Return ``value`` with thousands separators."""

    if isinstance(value, (float, Decimal)) and value != int(value):
        return f"{value:,.2f}"
    return f"{int(value):,}"


def format_signed(value: int) -> str:
    """Return an arithmetic suffix such as ``"- 100,000"`` for formula labels."""

    sign = "-" if value < 0 else "+"
    return f"{sign} {format_number(abs(value))}"


def format_rate(value: Decimal) -> str:
    """Return a compact label for a formula rate (``2.4``, ``0.9``)."""

    return format(value.normalize(), "f")


__all__ = [
    "INVALID_NUMBER_KEY",
    "IncomeParseError",
    "format_number",
    "format_rate",
    "format_signed",
    "parse_income_text",
]
