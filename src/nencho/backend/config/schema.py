"""Pydantic models describing the tax year configuration schema."""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Literal, Mapping, Sequence

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    computed_field,
    field_validator,
    model_validator,
)

FormulaKind = Literal["fixed", "linear", "quarter", "scaled"]


class ConfigurationError(ValueError):
    """Raised when configuration values violate schema expectations."""


class ImmutableModel(BaseModel):
    """Base class that freezes instances and rejects unknown fields."""

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)


class FormulaConfig(ImmutableModel):
    """Formula turning salary income ``A`` into taxable income.

    ``fixed``
        Constant ``amount``.
    ``linear``
        ``A + adjustment``.
    ``quarter``
        ``floor(A / 4) * rate + adjustment``.
    ``scaled``
        ``floor(A * rate) + adjustment``.
    """

    kind: FormulaKind
    amount: int | None = None
    rate: Decimal | None = None
    adjustment: int = 0

    @field_validator("rate", mode="before")
    @classmethod
    def _coerce_rate(cls, value: Any) -> Any:
        # YAML floats would carry binary noise into the Decimal
        if isinstance(value, float):
            return str(value)
        return value

    @model_validator(mode="after")
    def _validate_parameters(self) -> FormulaConfig:
        if self.kind == "fixed":
            if self.amount is None:
                raise ConfigurationError("Fixed formulas require an amount")
            if self.amount < 0:
                raise ConfigurationError("Fixed amounts must be non-negative")
            if self.rate is not None:
                raise ConfigurationError("Fixed formulas do not accept a rate")
        elif self.kind == "linear":
            if self.rate is not None or self.amount is not None:
                raise ConfigurationError("Linear formulas only accept an adjustment")
        else:
            if self.rate is None:
                raise ConfigurationError(f"'{self.kind}' formulas require a rate")
            if self.rate <= 0:
                raise ConfigurationError("Formula rates must be positive")
            if self.amount is not None:
                raise ConfigurationError(f"'{self.kind}' formulas do not accept an amount")
        return self


class SalaryIncomeBracket(ImmutableModel):
    """Represents a single row of the salary income deduction table."""

    upper_bound: int | None = Field(default=None, alias="upper")
    formula: FormulaConfig
    allow_step_down: bool = False

    @field_validator("formula", mode="before")
    @classmethod
    def _expand_shorthand(cls, value: Any) -> Any:
        # ``formula: 0`` is shorthand for a fixed zero amount
        if isinstance(value, int) and not isinstance(value, bool):
            return {"kind": "fixed", "amount": value}
        return value

    @model_validator(mode="after")
    def _validate_bound(self) -> SalaryIncomeBracket:
        if self.upper_bound is not None and self.upper_bound < 0:
            raise ConfigurationError("Upper bounds must be non-negative values")
        return self


class SalaryIncomeConfig(ImmutableModel):
    """Salary income deduction table for a single tax year."""

    brackets: Sequence[SalaryIncomeBracket]

    @model_validator(mode="after")
    def _validate_brackets(self) -> SalaryIncomeConfig:
        if not self.brackets:
            raise ConfigurationError("At least one salary income bracket must be defined")
        last_upper: int | None = None
        for bracket in self.brackets[:-1]:
            upper = bracket.upper_bound
            if upper is None:
                raise ConfigurationError("Only the final bracket may be unbounded")
            if last_upper is not None and upper <= last_upper:
                raise ConfigurationError("Salary income brackets must be in ascending order")
            last_upper = upper
        if self.brackets[-1].upper_bound is not None:
            raise ConfigurationError("Final salary income bracket must have an open upper bound")
        return self


class YearConfiguration(ImmutableModel):
    """Structured representation of a tax year configuration."""

    year: int
    meta: Mapping[str, Any] = Field(default_factory=dict)
    salary_income: SalaryIncomeConfig

    @model_validator(mode="before")
    @classmethod
    def _prepare(cls, data: Any) -> Mapping[str, Any]:
        if not isinstance(data, Mapping):
            raise ConfigurationError("Configuration file must define a mapping at the top level")

        prepared = dict(data)
        meta = prepared.get("meta")
        if meta is None:
            prepared["meta"] = {}
        elif not isinstance(meta, Mapping):
            raise ConfigurationError("'meta' section must be a mapping if provided")

        if not isinstance(prepared.get("salary_income"), Mapping):
            raise ConfigurationError("Configuration must include a 'salary_income' section")

        return prepared

    @property
    def source_url(self) -> str | None:
        value = self.meta.get("source_url")
        return str(value) if value else None


class TaxYearManifestEntry(ImmutableModel):
    """Entry describing a supported tax year in the manifest."""

    year: int
    filename: str | None = None
    status: str = "active"
    notes_url: str | None = None

    @computed_field
    @property
    def resolved_filename(self) -> str:
        return self.filename or f"{self.year}.yaml"


class TaxYearManifest(ImmutableModel):
    """Manifest describing the available tax year configuration files."""

    years: Sequence[TaxYearManifestEntry]
    default_year: int | None = None

    @model_validator(mode="after")
    def _validate_years(self) -> TaxYearManifest:
        seen: set[int] = set()
        for entry in self.years:
            if entry.year in seen:
                raise ConfigurationError(
                    f"Duplicate year {entry.year} declared in the configuration manifest"
                )
            seen.add(entry.year)
        if self.default_year is not None and self.default_year not in seen:
            raise ConfigurationError(
                f"Default year {self.default_year} is not declared in the manifest"
            )
        return self

    def get_entry(self, year: int) -> TaxYearManifestEntry:
        for entry in self.years:
            if entry.year == year:
                return entry
        raise KeyError(year)

    @computed_field
    @property
    def supported_years(self) -> tuple[int, ...]:
        return tuple(sorted(entry.year for entry in self.years))

    @property
    def resolved_default_year(self) -> int | None:
        if self.default_year is not None:
            return self.default_year
        years = self.supported_years
        return years[-1] if years else None


__all__ = [
    "ConfigurationError",
    "FormulaConfig",
    "FormulaKind",
    "ImmutableModel",
    "SalaryIncomeBracket",
    "SalaryIncomeConfig",
    "TaxYearManifest",
    "TaxYearManifestEntry",
    "ValidationError",
    "YearConfiguration",
]
