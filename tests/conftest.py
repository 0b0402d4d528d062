"""Test configuration utilities and shared fixtures."""

import sys
from pathlib import Path

# Ensure the ``src`` directory is importable when tests are executed without an
# editable install. This keeps developer experience smooth for first-time
# contributors running ``pytest`` directly in VS Code.
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

import pytest  # noqa: E402
from flask import Flask  # noqa: E402
from flask.testing import FlaskClient  # noqa: E402

from nencho.backend.app import create_app  # noqa: E402

_RECT = b"/Rect [50 %d 250 %d]"


def _widget(body: bytes, top: int) -> bytes:
    rect = _RECT % (top - 20, top)
    return b"<< /Type /Annot /Subtype /Widget /P 3 0 R " + rect + b" " + body + b" >>"


def build_pdf(objects: list[bytes]) -> bytes:
    """Serialise numbered PDF objects (object 1 is the catalog) with a valid xref."""

    buffer = bytearray(b"%PDF-1.7\n")
    offsets: list[int] = []
    for number, body in enumerate(objects, start=1):
        offsets.append(len(buffer))
        buffer += b"%d 0 obj\n" % number + body + b"\nendobj\n"

    xref_offset = len(buffer)
    buffer += b"xref\n0 %d\n" % (len(objects) + 1)
    buffer += b"0000000000 65535 f \n"
    for offset in offsets:
        buffer += b"%010d 00000 n \n" % offset
    buffer += b"trailer\n<< /Size %d /Root 1 0 R >>\n" % (len(objects) + 1)
    buffer += b"startxref\n%d\n%%%%EOF\n" % xref_offset
    return bytes(buffer)


def build_form_pdf() -> bytes:
    """Return a one-page PDF with text, dropdown, checkbox and pushbutton fields."""

    appearance = b"<< /Type /XObject /Subtype /Form /BBox [0 0 20 20] /Length 3 >>\nstream\nq Q\nendstream"
    return build_pdf(
        [
            b"<< /Type /Catalog /Pages 2 0 R /AcroForm << /Fields [4 0 R 5 0 R 6 0 R 7 0 R]"
            b" /DA (/Helv 0 Tf 0 g) /DR << /Font << /Helv 8 0 R >> >> >> >>",
            b"<< /Type /Pages /Kids [3 0 R] /Count 1 >>",
            b"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 595 842]"
            b" /Annots [4 0 R 5 0 R 6 0 R 7 0 R] >>",
            _widget(b"/FT /Tx /T (name) /V (Taro) /DA (/Helv 12 Tf 0 g)", 720),
            _widget(
                b"/FT /Ch /Ff 131072 /T (plan) /Opt [(basic) (premium)] /V (basic)"
                b" /DA (/Helv 12 Tf 0 g)",
                680,
            ),
            _widget(
                b"/FT /Btn /T (agree) /V /Off /AS /Off /AP << /N << /Yes 9 0 R /Off 10 0 R >> >>",
                640,
            ),
            _widget(b"/FT /Btn /Ff 65536 /T (submit)", 600),
            b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>",
            appearance,
            appearance,
        ]
    )


def build_nested_form_pdf() -> bytes:
    """Return a PDF with hierarchical names, split widgets and option pairs.

    ``applicant.name`` is a text widget below a non-terminal parent,
    ``consent`` is a checkbox field with two kid widgets, ``plan`` lists
    ``[export, display]`` option pairs and ``choices`` is a list box.
    """

    appearance = b"/AP << /N << /Yes 11 0 R /Off 11 0 R >> >>"
    return build_pdf(
        [
            b"<< /Type /Catalog /Pages 2 0 R /AcroForm << /Fields [4 0 R 6 0 R 9 0 R 10 0 R] >> >>",
            b"<< /Type /Pages /Kids [3 0 R] /Count 1 >>",
            b"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 595 842]"
            b" /Annots [5 0 R 7 0 R 8 0 R 9 0 R 10 0 R] >>",
            b"<< /T (applicant) /Kids [5 0 R] >>",
            _widget(b"/Parent 4 0 R /T (name) /FT /Tx /V (Jiro)", 720),
            b"<< /T (consent) /FT /Btn /V /Off /Kids [7 0 R 8 0 R] >>",
            _widget(b"/Parent 6 0 R /AS /Off " + appearance, 680),
            _widget(b"/Parent 6 0 R /AS /Off " + appearance, 640),
            _widget(
                b"/FT /Ch /Ff 131072 /T (plan) /Opt [[(B) (Basic)] [(P) (Premium)]]"
                b" /V (B) /DV (B)",
                600,
            ),
            _widget(b"/FT /Ch /T (choices) /Opt [(a) (b)] /V (a)", 560),
            b"<< /Type /XObject /Subtype /Form /BBox [0 0 20 20] /Length 3 >>\nstream\nq Q\nendstream",
        ]
    )


def build_cyclic_form_pdf() -> bytes:
    """Return a PDF whose field ``/Parent`` chain loops back on itself."""

    return build_pdf(
        [
            b"<< /Type /Catalog /Pages 2 0 R /AcroForm << /Fields [4 0 R] >> >>",
            b"<< /Type /Pages /Kids [3 0 R] /Count 1 >>",
            b"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 595 842] /Annots [6 0 R] >>",
            b"<< /T (loop) /FT /Tx /Parent 5 0 R >>",
            b"<< /T (back) /Parent 4 0 R >>",
            _widget(b"/Parent 4 0 R", 720),
        ]
    )


def build_plain_pdf() -> bytes:
    """Return a one-page PDF without an interactive form."""

    return build_pdf(
        [
            b"<< /Type /Catalog /Pages 2 0 R >>",
            b"<< /Type /Pages /Kids [3 0 R] /Count 1 >>",
            b"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 595 842] >>",
        ]
    )


@pytest.fixture()
def app() -> Flask:
    """Return a configured Flask application for integration tests."""

    application = create_app()
    application.config.update(TESTING=True)
    return application


@pytest.fixture()
def client(app: Flask) -> FlaskClient:
    """Provide a test client bound to the configured Flask app."""

    return app.test_client()


@pytest.fixture()
def form_pdf() -> bytes:
    """Raw bytes of a small fillable PDF."""

    return build_form_pdf()


@pytest.fixture()
def nested_form_pdf() -> bytes:
    """Raw bytes of a fillable PDF with a field hierarchy."""

    return build_nested_form_pdf()


@pytest.fixture()
def cyclic_form_pdf() -> bytes:
    """Raw bytes of a PDF with a looping field hierarchy."""

    return build_cyclic_form_pdf()


@pytest.fixture()
def plain_pdf() -> bytes:
    """Raw bytes of a PDF with no AcroForm."""

    return build_plain_pdf()
