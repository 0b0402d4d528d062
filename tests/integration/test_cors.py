"""Integration tests for cross-origin access to the calculator and form APIs."""

import json
from io import BytesIO

import pytest
from flask.testing import FlaskClient

from nencho.backend.app import create_app

EDITOR_ORIGIN = "https://editor.nencho.test"
PORTAL_ORIGIN = "https://portal.nencho.test"
UNKNOWN_ORIGIN = "https://unknown.test"


@pytest.fixture()
def cors_client(monkeypatch: pytest.MonkeyPatch) -> FlaskClient:
    monkeypatch.setenv("NENCHO_ALLOWED_ORIGINS", f" {EDITOR_ORIGIN}, ,{PORTAL_ORIGIN} ")

    app = create_app()
    app.config.update(TESTING=True)

    with app.test_client() as client:
        yield client


def _upload(data: bytes) -> tuple[BytesIO, str, str]:
    return BytesIO(data), "form.pdf", "application/pdf"


def test_calculation_allows_listed_origin(cors_client: FlaskClient) -> None:
    response = cors_client.post(
        "/api/v1/taxable-income",
        json={"income": "5000000", "year": 2024},
        headers={"Origin": PORTAL_ORIGIN},
    )

    assert response.headers.get("Access-Control-Allow-Origin") == PORTAL_ORIGIN


def test_fields_upload_allows_listed_origin(cors_client: FlaskClient, form_pdf: bytes) -> None:
    response = cors_client.post(
        "/api/v1/forms/fields",
        data={"file": _upload(form_pdf)},
        content_type="multipart/form-data",
        headers={"Origin": EDITOR_ORIGIN},
    )

    assert response.status_code == 200
    assert response.headers.get("Access-Control-Allow-Origin") == EDITOR_ORIGIN


def test_filled_pdf_exposes_content_disposition(
    cors_client: FlaskClient, form_pdf: bytes
) -> None:
    response = cors_client.post(
        "/api/v1/forms/fill",
        data={"file": _upload(form_pdf), "values": json.dumps({"name": "Hanako"})},
        content_type="multipart/form-data",
        headers={"Origin": EDITOR_ORIGIN},
    )

    assert response.status_code == 200
    assert response.headers.get("Access-Control-Allow-Origin") == EDITOR_ORIGIN
    exposed = response.headers.get("Access-Control-Expose-Headers", "")
    assert "content-disposition" in exposed.lower()


def test_form_upload_preflight_allows_post(cors_client: FlaskClient) -> None:
    response = cors_client.options(
        "/api/v1/forms/fill",
        headers={
            "Origin": EDITOR_ORIGIN,
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "Content-Type",
        },
    )

    assert response.status_code == 200
    assert response.headers.get("Access-Control-Allow-Origin") == EDITOR_ORIGIN
    assert "POST" in response.headers.get("Access-Control-Allow-Methods", "")


def test_unknown_origin_is_not_granted_access(cors_client: FlaskClient, form_pdf: bytes) -> None:
    response = cors_client.post(
        "/api/v1/forms/fields",
        data={"file": _upload(form_pdf)},
        content_type="multipart/form-data",
        headers={"Origin": UNKNOWN_ORIGIN},
    )

    assert response.status_code == 200
    assert response.headers.get("Access-Control-Allow-Origin") is None

    preflight = cors_client.options(
        "/api/v1/forms/fill",
        headers={"Origin": UNKNOWN_ORIGIN, "Access-Control-Request-Method": "POST"},
    )
    assert preflight.headers.get("Access-Control-Allow-Origin") is None
