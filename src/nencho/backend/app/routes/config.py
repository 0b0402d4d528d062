"""Expose configuration metadata consumed by the decoupled front-end.

These endpoints bridge the YAML-backed year configuration and the static UI so
that the reference table next to the calculator is rendered from the same
brackets the calculation uses.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from flask import Blueprint, jsonify, request

from nencho.backend.app.http import ProblemResponse, translated_problem
from nencho.backend.app.localization import (
    Translator,
    get_translator,
    normalise_locale,
)
from nencho.backend.app.services.calculation_service import build_bracket_rows
from nencho.backend.app.services.calculators import get_bracket_table
from nencho.backend.config.year_config import (
    YearConfiguration,
    load_manifest,
    load_year_configuration,
)
from nencho.backend.version import get_project_version

blueprint = Blueprint("config", __name__, url_prefix="/api/v1/config")


@dataclass(frozen=True)
class YearRouteContext:
    """Common context shared by year-scoped configuration endpoints."""

    year: int
    locale: str
    translator: Translator
    configuration: YearConfiguration


def _build_year_context(year: int, locale_hint: str | None) -> YearRouteContext | ProblemResponse:
    """Resolve configuration and localisation helpers for a given year."""

    locale = normalise_locale(locale_hint)
    translator = get_translator(locale)

    try:
        configuration = load_year_configuration(year)
    except FileNotFoundError:
        return translated_problem(
            "not_found",
            "errors.year_not_found",
            status=404,
            translator=translator,
            year=year,
        )

    return YearRouteContext(
        year=year,
        locale=translator.locale,
        translator=translator,
        configuration=configuration,
    )


def get_configuration_metadata() -> dict[str, Any]:
    """Expose runtime metadata derived from the configuration manifest."""

    manifest = load_manifest()
    return {
        "version": get_project_version(),
        "supported_years": list(manifest.supported_years),
        "default_year": manifest.resolved_default_year,
    }


def _serialise_year(year: int, translator: Translator) -> dict[str, Any]:
    manifest_entry = load_manifest().get_entry(year)
    configuration = load_year_configuration(year)
    label_key = str(configuration.meta.get("label_key") or f"years.{year}")

    payload: dict[str, Any] = {
        "year": year,
        "label": translator(label_key),
        "status": manifest_entry.status,
        "bracket_count": len(configuration.salary_income.brackets),
    }
    if configuration.source_url:
        payload["source_url"] = configuration.source_url
    if manifest_entry.notes_url:
        payload["notes_url"] = manifest_entry.notes_url
    return payload


@blueprint.get("/years")
def list_years() -> tuple[Any, int]:
    """Return the supported years with localised labels."""

    translator = get_translator(request.args.get("locale"))
    metadata = get_configuration_metadata()
    payload = {
        "locale": translator.locale,
        "years": [_serialise_year(year, translator) for year in metadata["supported_years"]],
        "default_year": metadata["default_year"],
        "supported_years": metadata["supported_years"],
    }
    return jsonify(payload), 200


@blueprint.get("/<int:year>/brackets")
def get_brackets(year: int) -> tuple[Any, int]:
    """Expose the salary income bracket table with locale-aware labels."""

    context = _build_year_context(year, request.args.get("locale"))
    if isinstance(context, ProblemResponse):
        return context.to_response()

    translator = context.translator
    payload = {
        "year": context.year,
        "locale": context.locale,
        "headings": {
            "income_range": translator("table.income_range"),
            "taxable_income": translator("table.taxable_income"),
        },
        "brackets": build_bracket_rows(get_bracket_table(context.year), translator),
        "forms_url": context.configuration.meta.get("forms_url"),
        "source_url": context.configuration.source_url,
    }
    return jsonify(payload), 200
