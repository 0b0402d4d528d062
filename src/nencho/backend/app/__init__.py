"""Application factory for Nencho backend services."""

import logging
import os
from pathlib import Path
from warnings import warn

from flask import Flask, jsonify, send_from_directory
from flask_cors import CORS
from werkzeug.exceptions import BadRequest, RequestEntityTooLarge

from .http import problem_response
from .localization import get_translator
from .routes import register_routes
from .routes.config import get_configuration_metadata

# Resolve the repository root so we can serve the static front-end directly
# from ``src/frontend`` during local development.
FRONTEND_ROOT = Path(__file__).resolve().parents[3] / "frontend"
ASSETS_ROOT = FRONTEND_ROOT / "assets"

DEFAULT_MAX_UPLOAD_BYTES = 10 * 1024 * 1024

logger = logging.getLogger(__name__)


def _parse_allowed_origins(raw: str | None) -> set[str]:
    """Convert an environment variable into a normalised set of origins."""

    if not raw:
        return set()

    return {origin.strip() for origin in raw.split(",") if origin.strip()}


def _parse_max_upload_bytes(raw: str | None) -> int:
    """Return the upload cap in bytes, ignoring invalid overrides."""

    if raw is None or not raw.strip():
        return DEFAULT_MAX_UPLOAD_BYTES
    try:
        parsed = int(raw)
    except ValueError:
        logger.warning("Ignoring invalid value for NENCHO_MAX_UPLOAD_BYTES: %s", raw)
        return DEFAULT_MAX_UPLOAD_BYTES
    if parsed <= 0:
        logger.warning("Ignoring non-positive value for NENCHO_MAX_UPLOAD_BYTES: %s", raw)
        return DEFAULT_MAX_UPLOAD_BYTES
    return parsed


def create_app() -> Flask:
    """Create and configure the Flask application instance."""

    app = Flask(__name__)
    app.config["MAX_CONTENT_LENGTH"] = _parse_max_upload_bytes(
        os.getenv("NENCHO_MAX_UPLOAD_BYTES")
    )
    app.json.ensure_ascii = False

    allowed_origins = _parse_allowed_origins(os.getenv("NENCHO_ALLOWED_ORIGINS"))

    if not allowed_origins:
        warn(
            "No allowed origins configured; cross-origin requests will be rejected.",
            stacklevel=1,
        )

    CORS(
        app,
        resources={r"/api/*": {"origins": sorted(allowed_origins)}},
        supports_credentials=False,
        methods=["GET", "OPTIONS", "POST"],
        allow_headers=["Content-Type"],
        expose_headers=["Content-Disposition"],
    )

    register_routes(app)

    @app.route("/", methods=["GET"])
    def serve_frontend():
        """Return the static UI entry point for the local shell."""

        return send_from_directory(FRONTEND_ROOT, "index.html")

    @app.route("/assets/<path:filename>", methods=["GET"])
    def serve_frontend_assets(filename: str):
        """Expose static assets (CSS/JS) used by the UI shell."""

        return send_from_directory(ASSETS_ROOT, filename)

    @app.route("/health", methods=["GET"])
    def health_check():
        """Simple health check endpoint for infrastructure monitoring."""

        payload = {"status": "ok", **get_configuration_metadata()}
        return jsonify(payload)

    @app.errorhandler(RequestEntityTooLarge)
    def handle_payload_too_large(error: RequestEntityTooLarge):
        """Reject uploads above ``MAX_CONTENT_LENGTH`` with a JSON payload."""

        message = get_translator()("errors.payload_too_large")
        return problem_response(
            "payload_too_large", status=413, message=message
        ).to_response()

    @app.errorhandler(BadRequest)
    def handle_bad_request(error: BadRequest):
        """Return consistent JSON responses for malformed payloads."""

        message = error.description or "Invalid request"
        return problem_response("bad_request", status=400, message=message).to_response()

    @app.errorhandler(ValueError)
    def handle_value_error(error: ValueError):
        """Gracefully surface domain validation errors to clients."""

        return problem_response(
            "validation_error", status=400, message=str(error)
        ).to_response()

    return app
