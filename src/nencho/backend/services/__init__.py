"""Service-layer helpers for the Nencho backend."""

from nencho.backend.app.services.calculation_service import calculate_taxable_income

from .request_parser import parse_calculation_payload, parse_form_values, parse_pdf_upload
from .response_builder import build_calculation_response, build_pdf_response

__all__ = [
    "calculate_taxable_income",
    "parse_calculation_payload",
    "parse_form_values",
    "parse_pdf_upload",
    "build_calculation_response",
    "build_pdf_response",
]
