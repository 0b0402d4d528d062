"""Utilities for validating year configuration data and surfacing issues."""

from __future__ import annotations

import argparse
from typing import Sequence

from nencho.backend.app.services.calculators.salary_income import (
    Bracket,
    build_bracket_table,
    evaluate,
    find_discontinuities,
)

from .year_config import (
    YearConfiguration,
    available_years,
    load_year_configuration,
)


def _format_scope(scope: str, message: str) -> str:
    return f"{scope}: {message}"


def _validate_lower_bounds(table: Sequence[Bracket]) -> list[str]:
    errors: list[str] = []
    for bracket in table:
        result = bracket.formula(bracket.lower_bound)
        if result < 0:
            errors.append(
                _format_scope(
                    f"salary_income.brackets[{bracket.index}]",
                    (
                        f"formula yields {result} at {bracket.lower_bound}; "
                        "taxable income must be non-negative"
                    ),
                )
            )
    return errors


def _validate_continuity(table: Sequence[Bracket]) -> list[str]:
    errors: list[str] = []
    for drop in find_discontinuities(table):
        if table[drop.bracket].allow_step_down:
            continue
        errors.append(
            _format_scope(
                f"salary_income.brackets[{drop.bracket}]",
                (
                    f"taxable income drops from {drop.before} to {drop.after} "
                    f"at {drop.income}"
                ),
            )
        )
    return errors


def _validate_step_down_flags(table: Sequence[Bracket]) -> list[str]:
    """Flag ``allow_step_down`` markers that no longer match a real drop."""

    dropping = {drop.bracket for drop in find_discontinuities(table)}
    return [
        _format_scope(
            f"salary_income.brackets[{bracket.index}]",
            "allow_step_down is set but the boundary does not step down",
        )
        for bracket in table
        if bracket.allow_step_down and bracket.index not in dropping
    ]


def _validate_meta(config: YearConfiguration) -> list[str]:
    errors: list[str] = []
    for key in ("source_url", "forms_url"):
        value = config.meta.get(key)
        if value is None:
            continue
        if not str(value).startswith(("http://", "https://")):
            errors.append(_format_scope(f"meta.{key}", "must be an absolute HTTP(S) URL"))
    if not config.source_url:
        errors.append(_format_scope("meta.source_url", "missing reference document"))
    return errors


def validate_year_configuration(config: YearConfiguration) -> list[str]:
    """Return human-readable issues for ``config``."""

    table = build_bracket_table(config.salary_income)

    errors: list[str] = []
    errors.extend(_validate_lower_bounds(table))
    errors.extend(_validate_continuity(table))
    errors.extend(_validate_step_down_flags(table))
    errors.extend(_validate_meta(config))

    # Every table must map zero income to zero taxable income.
    if evaluate(0, table).taxable_income != 0:
        errors.append(_format_scope("salary_income.brackets[0]", "zero income must map to zero"))

    return errors


def validate_all_years(years: Sequence[int] | None = None) -> dict[int, list[str]]:
    """Validate all configured years and return issues keyed by year."""

    targets = years or available_years()
    results: dict[int, list[str]] = {}

    for year in targets:
        config = load_year_configuration(year)
        results[int(year)] = validate_year_configuration(config)

    return results


def _build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description=(
            "Validate configured salary income tables and report issues helpful "
            "to contributors."
        )
    )
    parser.add_argument(
        "years",
        nargs="*",
        type=int,
        help="Specific years to validate (defaults to all configured years)",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for running validations from the command line."""

    parser = _build_argument_parser()
    args = parser.parse_args(argv)
    years = args.years or available_years()

    if not years:
        parser.print_help()
        return 1

    exit_code = 0

    for year in years:
        try:
            config = load_year_configuration(year)
        except FileNotFoundError as error:
            print(f"[{year}] failed to load configuration: {error}")
            exit_code = 1
            continue

        issues = validate_year_configuration(config)
        if issues:
            exit_code = 1
            print(f"[{year}] {len(issues)} issue(s) detected:")
            for issue in issues:
                print(f"  - {issue}")
        else:
            print(f"[{year}] OK")

    return exit_code


if __name__ == "__main__":  # pragma: no cover - CLI invocation
    raise SystemExit(main())
