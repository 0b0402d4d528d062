"""Helpers for normalising incoming calculator and form-editor requests."""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from flask import Request
from werkzeug.exceptions import BadRequest

from nencho.backend.app.localization import get_translator, normalise_locale

PDF_MIMETYPES = {"application/pdf", "application/x-pdf", "application/octet-stream", ""}


@dataclass(frozen=True)
class PdfUpload:
    """Uploaded PDF document held in memory for the duration of a request."""

    filename: str
    data: bytes


def resolve_locale(req: Request, payload: Mapping[str, Any] | None = None) -> str:
    """Pick the locale from the payload, query string or ``Accept-Language``."""

    locale = payload.get("locale") if payload else None
    if isinstance(locale, str) and locale.strip():
        return normalise_locale(locale)

    locale_param = req.args.get("locale") or req.form.get("locale")
    if locale_param:
        return normalise_locale(locale_param)

    accept_language = req.headers.get("Accept-Language")
    if accept_language:
        primary = accept_language.split(",")[0].split(";")[0].strip()
        if primary:
            return normalise_locale(primary)

    return normalise_locale(None)


def parse_calculation_payload(req: Request) -> dict[str, Any]:
    """Extract and validate a JSON payload from ``req``."""

    data = req.get_json(silent=True)
    if data is None:
        raise BadRequest("Request body must be valid JSON")
    if not isinstance(data, Mapping):
        raise BadRequest("Request JSON must be an object")

    payload = dict(data)
    payload["locale"] = resolve_locale(req, payload)

    return payload


def parse_pdf_upload(req: Request, field: str = "file") -> PdfUpload:
    """Return the uploaded PDF from the multipart ``field`` of ``req``."""

    translator = get_translator(resolve_locale(req))
    upload = req.files.get(field)
    if upload is None or not upload.filename:
        raise BadRequest(translator("errors.missing_file"))

    mimetype = (upload.mimetype or "").lower()
    if mimetype not in PDF_MIMETYPES and not upload.filename.lower().endswith(".pdf"):
        raise BadRequest(
            translator.format("errors.invalid_pdf", reason=f"unsupported type {mimetype}")
        )

    return PdfUpload(filename=upload.filename, data=upload.read())


def parse_form_values(req: Request, field: str = "values") -> dict[str, Any]:
    """Decode the JSON object of field values submitted alongside an upload."""

    translator = get_translator(resolve_locale(req))
    raw = req.form.get(field)
    if raw is None or not raw.strip():
        return {}

    try:
        values = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise BadRequest(
            translator.format("errors.invalid_values", reason=exc.msg)
        ) from exc

    if not isinstance(values, Mapping):
        raise BadRequest(
            translator.format("errors.invalid_values", reason="expected a JSON object")
        )
    return {str(key): value for key, value in values.items()}


__all__ = [
    "PdfUpload",
    "parse_calculation_payload",
    "parse_form_values",
    "parse_pdf_upload",
    "resolve_locale",
]
