"""REST endpoints for taxable income calculations."""

from __future__ import annotations

from typing import Any

from flask import Blueprint, request

from nencho.backend.app.http import translated_problem
from nencho.backend.app.localization import get_translator
from nencho.backend.services import (
    build_calculation_response,
    calculate_taxable_income,
    parse_calculation_payload,
)

blueprint = Blueprint("calculations", __name__, url_prefix="/api/v1")


@blueprint.post("/taxable-income")
def create_calculation() -> tuple[Any, int]:
    """Calculate taxable salary income using the submitted JSON payload."""

    payload = parse_calculation_payload(request)
    try:
        result = calculate_taxable_income(payload)
    except FileNotFoundError:
        return translated_problem(
            "not_found",
            "errors.year_not_found",
            status=404,
            translator=get_translator(payload.get("locale")),
            year=payload.get("year"),
        ).to_response()

    return build_calculation_response(result)
