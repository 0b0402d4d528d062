"""Pydantic models describing the public API surface."""

from __future__ import annotations

from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
)

__all__ = [
    "TaxableIncomeRequest",
    "BracketRow",
    "TaxableIncomeSummary",
    "ResponseMeta",
    "TaxableIncomeResponse",
    "FormFieldPayload",
    "FormFieldsResponse",
    "format_validation_error",
]


class TaxableIncomeRequest(BaseModel):
    """Salary income submitted by the calculator form."""

    model_config = ConfigDict(extra="forbid")

    income: str | int
    year: int | None = Field(default=None, ge=1989, le=2100)
    locale: str | None = None

    @field_validator("income", mode="before")
    @classmethod
    def _reject_booleans(cls, value: Any) -> Any:
        if isinstance(value, bool):
            raise ValueError("income must be a number or numeric text")
        return value

    @field_validator("locale", mode="before")
    @classmethod
    def _normalise_locale(cls, value: Any) -> str | None:
        if value is None:
            return None
        text = str(value).strip()
        return text or None


class BracketRow(BaseModel):
    """One row of the reference table shown next to the calculator."""

    model_config = ConfigDict(extra="forbid")

    index: int
    lower_bound: int
    upper_bound: int | None = None
    range_label: str
    formula_label: str
    highlighted: bool = False


class TaxableIncomeSummary(BaseModel):
    """Calculated figures with display-ready labels."""

    model_config = ConfigDict(extra="forbid")

    income: int
    taxable_income: int
    bracket_index: int
    income_display: str
    taxable_income_display: str
    labels: dict[str, str]


class ResponseMeta(BaseModel):
    """Metadata returned alongside the calculation output."""

    model_config = ConfigDict(extra="forbid")

    year: int
    locale: str
    source_url: str | None = None
    forms_url: str | None = None


class TaxableIncomeResponse(BaseModel):
    """Full response payload produced by the calculation service."""

    model_config = ConfigDict(extra="forbid")

    summary: TaxableIncomeSummary
    brackets: list[BracketRow]
    meta: ResponseMeta


class FormFieldPayload(BaseModel):
    """Serialisable description of a single AcroForm field."""

    model_config = ConfigDict(extra="forbid")

    name: str
    id: str | None = None
    page: int
    type: str
    rect: list[float]
    value: str | bool
    default_value: str = ""
    options: list[str] | None = None
    export_value: str | None = None
    export_label: str | None = None
    checked: bool | None = None


class FormFieldsResponse(BaseModel):
    """Fields discovered in an uploaded PDF document."""

    model_config = ConfigDict(extra="forbid")

    filename: str
    page_count: int
    fields: list[FormFieldPayload]


def format_validation_error(error: ValidationError) -> str:
    """Return a concise human-readable description of validation issues."""

    messages: list[str] = []
    for issue in error.errors():
        location = ".".join(str(part) for part in issue.get("loc", ()))
        message = issue.get("msg", "Invalid value")
        if location:
            messages.append(f"{location}: {message}")
        else:
            messages.append(message)

    details = "; ".join(messages) if messages else str(error)
    return f"Invalid calculation payload: {details}"
