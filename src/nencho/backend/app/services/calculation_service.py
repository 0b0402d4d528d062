"""Orchestrate request validation, normalisation, and taxable income lookups.

The service turns the loosely typed calculator payload (free text from an
input box, optional year and locale) into a :class:`CalculationInput`, runs the
bracket table for the requested year and decorates the result with the labels
the UI needs to render the reference table.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping, Sequence
from contextlib import contextmanager
from time import perf_counter
from typing import Any

from pydantic import ValidationError

from nencho.backend.app.localization import Translator, get_translator
from nencho.backend.app.models import (
    BracketRow,
    CalculationInput,
    TaxableIncomeRequest,
    TaxableIncomeResponse,
    format_validation_error,
)
from nencho.backend.config.year_config import (
    YearConfiguration,
    default_year,
    load_year_configuration,
)

from .calculators import (
    Bracket,
    IncomeParseError,
    evaluate,
    format_number,
    format_rate,
    format_signed,
    get_bracket_table,
    parse_income_text,
)

_LOGGER = logging.getLogger(__name__)


def _profiling_enabled() -> bool:
    """Return ``True`` when calculation profiling should be captured."""

    flag = os.getenv("NENCHO_PROFILE_CALCULATIONS", "")
    return flag.strip().lower() in {"1", "true", "yes", "on"}


@contextmanager
def _profile_section(name: str, store: dict[str, float] | None):
    """Capture the duration of a named section when profiling is enabled."""

    if store is None:
        yield
        return

    start = perf_counter()
    try:
        yield
    finally:
        store[name] = perf_counter() - start


def _resolve_income(value: str | int) -> int:
    if isinstance(value, int):
        if value < 0:
            raise IncomeParseError("Salary income cannot be negative")
        return value
    return parse_income_text(value)


def _normalise_payload(request: TaxableIncomeRequest) -> CalculationInput:
    year = request.year if request.year is not None else default_year()
    translator = get_translator(request.locale)
    try:
        income = _resolve_income(request.income)
    except IncomeParseError as exc:
        raise IncomeParseError(translator(exc.message_key)) from exc

    return CalculationInput(year=year, locale=translator.locale, income=income)


def describe_range(bracket: Bracket, translator: Translator) -> str:
    """Return the localised income range label for ``bracket``."""

    lower = format_number(bracket.lower_bound)
    if bracket.upper_bound is None:
        return translator.format("range.open", lower=lower)
    upper = format_number(bracket.upper_bound)
    if bracket.lower_bound == 0:
        return translator.format("range.upto", upper=upper)
    return translator.format("range.bounded", lower=lower, upper=upper)


def describe_formula(bracket: Bracket, translator: Translator) -> str:
    """Return the localised formula label for ``bracket``."""

    spec = bracket.spec
    if spec.kind == "fixed":
        return translator.format("formula.fixed", amount=format_number(spec.amount or 0))

    values: dict[str, str] = {"adjustment": format_signed(spec.adjustment)}
    if spec.rate is not None:
        values["rate"] = format_rate(spec.rate)
    return translator.format(f"formula.{spec.kind}", **values)


def build_bracket_rows(
    table: Sequence[Bracket],
    translator: Translator,
    highlighted: int | None = None,
) -> list[dict[str, Any]]:
    """Serialise ``table`` for display, flagging the ``highlighted`` row."""

    rows: list[dict[str, Any]] = []
    for bracket in table:
        row = BracketRow(
            index=bracket.index,
            lower_bound=bracket.lower_bound,
            upper_bound=bracket.upper_bound,
            range_label=describe_range(bracket, translator),
            formula_label=describe_formula(bracket, translator),
            highlighted=bracket.index == highlighted,
        )
        rows.append(row.model_dump(mode="json"))
    return rows


def _build_meta(config: YearConfiguration, locale: str) -> dict[str, Any]:
    meta: dict[str, Any] = {"year": config.year, "locale": locale}
    if config.source_url:
        meta["source_url"] = config.source_url
    forms_url = config.meta.get("forms_url")
    if forms_url:
        meta["forms_url"] = str(forms_url)
    return meta


def calculate_taxable_income(
    payload: Mapping[str, Any] | TaxableIncomeRequest,
) -> dict[str, Any]:
    """Compute the taxable salary income for the provided payload."""

    if isinstance(payload, TaxableIncomeRequest):
        request_model = payload
    else:
        if not isinstance(payload, Mapping):
            raise ValueError("Payload must be a mapping")
        if "income" not in payload:
            raise ValueError("Payload must include an income amount")
        try:
            request_model = TaxableIncomeRequest.model_validate(payload)
        except ValidationError as exc:
            raise ValueError(format_validation_error(exc)) from exc

    timings: dict[str, float] | None = {} if _profiling_enabled() else None
    overall_start = perf_counter() if timings is not None else None

    with _profile_section("normalise_payload", timings):
        normalised = _normalise_payload(request_model)

    config = load_year_configuration(normalised.year)
    translator = get_translator(normalised.locale)

    with _profile_section("salary_income", timings):
        table = get_bracket_table(normalised.year)
        result = evaluate(normalised.income, table)

    if timings is not None and overall_start is not None:
        timings["total"] = perf_counter() - overall_start
        _LOGGER.debug(
            "calculate_taxable_income timings (ms): %s",
            {name: round(duration * 1000, 3) for name, duration in timings.items()},
        )

    summary: dict[str, Any] = {
        "income": normalised.income,
        "taxable_income": result.taxable_income,
        "bracket_index": result.bracket_index,
        "income_display": translator.currency(format_number(normalised.income)),
        "taxable_income_display": translator.currency(
            format_number(result.taxable_income)
        ),
        "labels": {
            "income": translator("summary.income"),
            "taxable_income": translator("summary.taxable_income"),
            "bracket": translator("summary.bracket"),
        },
    }

    response_model = TaxableIncomeResponse.model_validate(
        {
            "summary": summary,
            "brackets": build_bracket_rows(table, translator, result.bracket_index),
            "meta": _build_meta(config, translator.locale),
        }
    )

    return response_model.model_dump(mode="json", exclude_none=True)


__all__ = [
    "build_bracket_rows",
    "calculate_taxable_income",
    "describe_formula",
    "describe_range",
]
