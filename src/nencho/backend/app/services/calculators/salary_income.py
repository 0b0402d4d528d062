"""Salary income deduction table evaluation.

Maps a gross salary figure to the taxable salary income ("給与所得の金額") used
during the year-end adjustment. The table for each year is configuration data;
:func:`build_bracket_table` compiles it into an immutable tuple of
``(upper bound, formula)`` pairs that :func:`compute` walks in ascending order.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from decimal import ROUND_FLOOR, Decimal
from functools import lru_cache
from typing import NamedTuple

from nencho.backend.config.year_config import (
    FormulaConfig,
    SalaryIncomeConfig,
    default_year,
    load_year_configuration,
)

_LOGGER = logging.getLogger(__name__)

Formula = Callable[[int], Decimal]


class TaxableIncomeResult(NamedTuple):
    """Taxable income and the index of the bracket that produced it."""

    taxable_income: int
    bracket_index: int


@dataclass(frozen=True, slots=True)
class Bracket:
    """A compiled table row covering ``lower_bound`` to ``upper_bound`` inclusive."""

    index: int
    lower_bound: int
    upper_bound: int | None
    formula: Formula
    spec: FormulaConfig
    allow_step_down: bool = False

    def contains(self, income: int) -> bool:
        if income < self.lower_bound:
            return False
        return self.upper_bound is None or income <= self.upper_bound


@dataclass(frozen=True, slots=True)
class Discontinuity:
    """A boundary where taxable income drops when income crosses into ``bracket``."""

    bracket: int
    income: int
    before: int
    after: int


def _floor(value: Decimal) -> int:
    return int(value.to_integral_value(rounding=ROUND_FLOOR))


def compile_formula(spec: FormulaConfig) -> Formula:
    """Return a callable evaluating ``spec`` for a salary income ``A``."""

    adjustment = Decimal(spec.adjustment)

    if spec.kind == "fixed":
        amount = Decimal(spec.amount or 0)
        return lambda income: amount

    if spec.kind == "linear":
        return lambda income: Decimal(income) + adjustment

    rate = spec.rate
    if rate is None:  # pragma: no cover - guarded by the schema
        raise ValueError(f"'{spec.kind}' formulas require a rate")

    if spec.kind == "quarter":
        # A ÷ 4 is truncated before the rate applies
        return lambda income: Decimal(income // 4) * rate + adjustment

    return lambda income: Decimal(_floor(Decimal(income) * rate)) + adjustment


def build_bracket_table(config: SalaryIncomeConfig) -> tuple[Bracket, ...]:
    """Compile configured brackets into contiguous table rows."""

    rows: list[Bracket] = []
    lower = 0
    for index, bracket in enumerate(config.brackets):
        rows.append(
            Bracket(
                index=index,
                lower_bound=lower,
                upper_bound=bracket.upper_bound,
                formula=compile_formula(bracket.formula),
                spec=bracket.formula,
                allow_step_down=bracket.allow_step_down,
            )
        )
        if bracket.upper_bound is not None:
            lower = bracket.upper_bound + 1
    return tuple(rows)


@lru_cache(maxsize=8)
def get_bracket_table(year: int) -> tuple[Bracket, ...]:
    """Return the compiled bracket table for ``year``."""

    configuration = load_year_configuration(year)
    table = build_bracket_table(configuration.salary_income)
    _LOGGER.debug("Compiled %d salary income brackets for %s", len(table), year)
    return table


def _validate_income(income: int) -> None:
    if isinstance(income, bool) or not isinstance(income, int):
        raise ValueError("Salary income must be an integer amount of yen")
    if income < 0:
        raise ValueError("Salary income cannot be negative")


def evaluate(income: int, table: Sequence[Bracket]) -> TaxableIncomeResult:
    """Apply the first bracket of ``table`` whose upper bound covers ``income``."""

    _validate_income(income)
    for bracket in table:
        if bracket.contains(income):
            taxable = _floor(bracket.formula(income))
            return TaxableIncomeResult(max(taxable, 0), bracket.index)

    raise ValueError("Salary income table does not cover the requested amount")


def compute(income: int, year: int | None = None) -> TaxableIncomeResult:
    """Return the taxable salary income and matching bracket index for ``income``.

    Amounts are whole yen. Fractions produced by the rate-based brackets are
    truncated.
    """

    resolved_year = default_year() if year is None else year
    return evaluate(income, get_bracket_table(resolved_year))


def find_discontinuities(table: Sequence[Bracket]) -> list[Discontinuity]:
    """List boundaries where moving into the next bracket lowers taxable income."""

    drops: list[Discontinuity] = []
    for previous, current in zip(table, table[1:]):
        if previous.upper_bound is None:  # pragma: no cover - guarded by the schema
            break
        before = evaluate(previous.upper_bound, table).taxable_income
        after = evaluate(current.lower_bound, table).taxable_income
        if after < before:
            drops.append(
                Discontinuity(
                    bracket=current.index,
                    income=current.lower_bound,
                    before=before,
                    after=after,
                )
            )
    return drops


__all__ = [
    "Bracket",
    "Discontinuity",
    "Formula",
    "TaxableIncomeResult",
    "build_bracket_table",
    "compile_formula",
    "compute",
    "evaluate",
    "find_discontinuities",
    "get_bracket_table",
]
