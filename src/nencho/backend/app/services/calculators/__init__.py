"""Calculator helpers for the salary income tools."""

from .salary_income import (
    Bracket,
    Discontinuity,
    TaxableIncomeResult,
    build_bracket_table,
    compute,
    evaluate,
    find_discontinuities,
    get_bracket_table,
)
from .utils import (
    IncomeParseError,
    format_number,
    format_rate,
    format_signed,
    parse_income_text,
)

__all__ = [
    "Bracket",
    "Discontinuity",
    "IncomeParseError",
    "TaxableIncomeResult",
    "build_bracket_table",
    "compute",
    "evaluate",
    "find_discontinuities",
    "format_number",
    "format_rate",
    "format_signed",
    "get_bracket_table",
    "parse_income_text",
]
