"""Endpoints for inspecting and filling AcroForm fields of uploaded PDFs."""

from __future__ import annotations

import logging
from typing import Any

from flask import Blueprint, Response, jsonify, request

from nencho.backend.app.http import translated_problem
from nencho.backend.app.localization import get_translator
from nencho.backend.app.models import FormFieldsResponse
from nencho.backend.app.services.pdf_form_service import (
    FormValueError,
    PdfFormError,
    fill_form,
    read_form,
)
from nencho.backend.services import (
    build_pdf_response,
    parse_form_values,
    parse_pdf_upload,
)
from nencho.backend.services.request_parser import resolve_locale

blueprint = Blueprint("forms", __name__, url_prefix="/api/v1/forms")

logger = logging.getLogger(__name__)


def _pdf_problem(error: PdfFormError) -> tuple[Any, int]:
    translator = get_translator(resolve_locale(request))
    if isinstance(error, FormValueError):
        problem = translated_problem(
            "invalid_values",
            "errors.invalid_values",
            status=400,
            translator=translator,
            reason=str(error),
        )
    else:
        problem = translated_problem(
            "invalid_pdf",
            "errors.invalid_pdf",
            status=400,
            translator=translator,
            reason=str(error),
        )
    return problem.to_response()


@blueprint.post("/fields")
def list_fields() -> tuple[Any, int]:
    """Return the editable fields of the uploaded PDF."""

    upload = parse_pdf_upload(request)
    try:
        document = read_form(upload.data)
    except PdfFormError as error:
        logger.info("Rejected PDF upload %r: %s", upload.filename, error)
        return _pdf_problem(error)

    logger.info(
        "Read %d form field(s) from %r (%d page(s))",
        len(document.fields),
        upload.filename,
        document.page_count,
    )
    response = FormFieldsResponse.model_validate(
        {
            "filename": upload.filename,
            "page_count": document.page_count,
            "fields": [field.as_dict() for field in document.fields],
        }
    )
    return jsonify(response.model_dump(mode="json")), 200


@blueprint.post("/fill")
def fill_fields() -> Response | tuple[Any, int]:
    """Write the submitted values into the uploaded PDF and return it."""

    upload = parse_pdf_upload(request)
    values = parse_form_values(request)
    try:
        data = fill_form(upload.data, values)
    except PdfFormError as error:
        logger.info("Could not fill PDF %r: %s", upload.filename, error)
        return _pdf_problem(error)

    logger.info("Filled %d value(s) into %r", len(values), upload.filename)
    return build_pdf_response(data)
