"""Utilities for serialising calculation and form-editor responses."""

from __future__ import annotations

from collections.abc import Mapping
from io import BytesIO
from typing import Any, Tuple

from flask import Response, jsonify, send_file

ResponseTuple = Tuple[Any, int]

EDITED_PDF_FILENAME = "編集済み.pdf"


def build_calculation_response(payload: Mapping[str, Any]) -> ResponseTuple:
    """Return a Flask JSON response for the calculation ``payload``."""

    return jsonify(payload), 200


def build_pdf_response(data: bytes, filename: str = EDITED_PDF_FILENAME) -> Response:
    """Return ``data`` as a downloadable PDF attachment."""

    return send_file(
        BytesIO(data),
        mimetype="application/pdf",
        as_attachment=True,
        download_name=filename,
    )
