"""Serve translation catalogues to the front-end shell."""

from __future__ import annotations

from flask import Blueprint, jsonify, request

from nencho.backend.app.localization import load_translations, normalise_locale
from nencho.backend.services.request_parser import resolve_locale

blueprint = Blueprint("translations", __name__, url_prefix="/api/v1/translations")


@blueprint.get("/", defaults={"locale": None})
@blueprint.get("/<locale>")
def get_translations(locale: str | None):
    """Return the catalogue for ``locale``, or the one negotiated from the request."""

    resolved = normalise_locale(locale) if locale else resolve_locale(request)
    response = jsonify(load_translations(resolved))
    response.vary.add("Accept-Language")
    return response
