"""Unit tests for the calculation service."""
from __future__ import annotations

import logging

import pytest

from nencho.backend.app.localization import get_translator
from nencho.backend.app.models import TaxableIncomeRequest
from nencho.backend.app.services.calculation_service import (
    build_bracket_rows,
    calculate_taxable_income,
    describe_formula,
    describe_range,
)
from nencho.backend.app.services.calculators import IncomeParseError, get_bracket_table


def test_calculate_taxable_income_parses_free_text() -> None:
    result = calculate_taxable_income({"income": "551,000円", "year": 2024})

    summary = result["summary"]
    assert summary["income"] == 551000
    assert summary["taxable_income"] == 1000
    assert summary["bracket_index"] == 1
    assert summary["income_display"] == "551,000円"
    assert summary["taxable_income_display"] == "1,000円"
    assert summary["labels"]["taxable_income"] == "所得金額"


def test_calculate_taxable_income_accepts_integers_and_models() -> None:
    from_mapping = calculate_taxable_income({"income": 3600000, "year": 2024})
    from_model = calculate_taxable_income(
        TaxableIncomeRequest(income=3600000, year=2024)
    )

    assert from_mapping == from_model
    assert from_mapping["summary"]["taxable_income"] == 2440000


def test_calculate_taxable_income_highlights_matching_row() -> None:
    result = calculate_taxable_income({"income": "1628000", "year": 2024})

    highlighted = [row["index"] for row in result["brackets"] if row["highlighted"]]
    assert highlighted == [6]
    assert result["summary"]["taxable_income"] == 876800
    assert len(result["brackets"]) == 11
    assert "upper_bound" not in result["brackets"][-1]


def test_calculate_taxable_income_defaults_year_and_locale() -> None:
    result = calculate_taxable_income({"income": "1000000"})

    assert result["meta"]["year"] == 2024
    assert result["meta"]["locale"] == "ja"
    assert result["meta"]["source_url"].startswith("https://")
    assert result["meta"]["forms_url"].startswith("https://")


def test_calculate_taxable_income_localises_labels() -> None:
    result = calculate_taxable_income({"income": "551000", "locale": "en"})

    assert result["meta"]["locale"] == "en"
    assert result["summary"]["taxable_income_display"] == "¥1,000"
    assert result["summary"]["labels"]["income"] == "Salary income"


@pytest.mark.parametrize(
    ("locale", "message"),
    [("ja", "正しい数値を入力してください。"), ("en", "Please enter a valid number.")],
)
def test_invalid_income_text_raises_translated_error(locale: str, message: str) -> None:
    with pytest.raises(IncomeParseError) as excinfo:
        calculate_taxable_income({"income": "abc", "locale": locale})

    assert str(excinfo.value) == message


def test_negative_integer_income_is_rejected() -> None:
    with pytest.raises(IncomeParseError):
        calculate_taxable_income({"income": -5})


def test_missing_income_is_rejected() -> None:
    with pytest.raises(ValueError, match="income"):
        calculate_taxable_income({"year": 2024})


@pytest.mark.parametrize(
    "payload",
    [
        {"income": True},
        {"income": "1000", "unexpected": 1},
        {"income": "1000", "year": 1900},
    ],
)
def test_invalid_payloads_raise_value_error(payload: dict) -> None:
    with pytest.raises(ValueError, match="Invalid calculation payload"):
        calculate_taxable_income(payload)


def test_unknown_year_raises_file_not_found() -> None:
    with pytest.raises(FileNotFoundError):
        calculate_taxable_income({"income": "1000000", "year": 2030})


def test_profiling_logs_section_timings(
    monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
) -> None:
    monkeypatch.setenv("NENCHO_PROFILE_CALCULATIONS", "1")

    with caplog.at_level(
        logging.DEBUG, logger="nencho.backend.app.services.calculation_service"
    ):
        calculate_taxable_income({"income": "1000000"})

    assert any("timings" in record.getMessage() for record in caplog.records)


def test_bracket_labels_in_japanese() -> None:
    table = get_bracket_table(2024)
    translator = get_translator("ja")

    assert describe_range(table[0], translator) == "550,999円 以下"
    assert describe_range(table[1], translator) == "551,000円 ～ 1,618,999円"
    assert describe_range(table[-1], translator) == "8,500,000円 ～"
    assert describe_formula(table[0], translator) == "0円"
    assert describe_formula(table[1], translator) == "A - 550,000円"
    assert describe_formula(table[2], translator) == "1,069,000円"
    assert describe_formula(table[6], translator) == "A ÷ 4 × 2.4 - 100,000円"
    assert describe_formula(table[9], translator) == "A × 0.9 - 1,100,000円"


def test_build_bracket_rows_without_highlight() -> None:
    rows = build_bracket_rows(get_bracket_table(2025), get_translator("en"))

    assert [row["index"] for row in rows] == list(range(6))
    assert not any(row["highlighted"] for row in rows)
    assert rows[0]["range_label"] == "up to ¥650,999"
    assert rows[-1]["upper_bound"] is None
