"""Typed request/response models shared across the calculation services.

Incoming payloads are validated with Pydantic models from :mod:`.api`; the
service layer then works on a frozen :class:`CalculationInput` so that parsing
and localisation decisions are made exactly once per request.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from .api import (
    BracketRow,
    FormFieldPayload,
    FormFieldsResponse,
    ResponseMeta,
    TaxableIncomeRequest,
    TaxableIncomeResponse,
    TaxableIncomeSummary,
    format_validation_error,
)

__all__ = [
    "BracketRow",
    "CalculationInput",
    "FormFieldPayload",
    "FormFieldsResponse",
    "ResponseMeta",
    "TaxableIncomeRequest",
    "TaxableIncomeResponse",
    "TaxableIncomeSummary",
    "format_validation_error",
]


class CalculationInput(BaseModel):
    """Validated and normalised user input for taxable income calculations."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    year: int
    locale: str
    income: int = Field(ge=0)
