"""Read and write AcroForm field values through :mod:`pypdf`.

Parsing and serialising the document is left entirely to ``pypdf``. This
module only walks the widget annotations of each page, maps them to simple
field descriptors, and writes edited values back into the field dictionaries.
Appearance streams are not redrawn; the ``NeedAppearances`` flag asks the
viewer to regenerate them.

Only combo boxes are treated as dropdowns. List boxes and multi-select choice
fields are skipped. Dropdowns expose the display half of ``[export, display]``
option pairs while ``/V`` keeps the export value.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from io import BytesIO
from typing import Any

from pypdf import PdfReader, PdfWriter
from pypdf.errors import PyPdfError
from pypdf.generic import (
    ArrayObject,
    DictionaryObject,
    IndirectObject,
    NameObject,
    TextStringObject,
)

_LOGGER = logging.getLogger(__name__)

FIELD_TEXT = "text"
FIELD_DROPDOWN = "dropdown"
FIELD_CHECKBOX = "checkbox"

_RADIO_FLAG = 1 << 15
_PUSHBUTTON_FLAG = 1 << 16
_COMBO_FLAG = 1 << 17
_MULTI_SELECT_FLAG = 1 << 21
_OFF = "/Off"
_DEFAULT_EXPORT = "Yes"
_FALSE_STRINGS = {"", "0", "false", "off", "no"}
# pypdf decodes non-UTF-8 names with these charsets before giving up.
_NAME_CHARSETS = ("latin-1", "gbk")


class PdfFormError(ValueError):
    """Raised when a document cannot be read or written as a PDF form."""


class FormValueError(PdfFormError):
    """Raised when a submitted value does not fit the target field."""


@dataclass(slots=True)
class FormField:
    """Field descriptor exposed to the form editor."""

    name: str
    id: str | None
    page: int
    type: str
    rect: list[float]
    value: str | bool
    default_value: str = ""
    options: list[str] | None = None
    export_value: str | None = None
    export_label: str | None = None
    checked: bool | None = None

    def as_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "name": self.name,
            "id": self.id,
            "page": self.page,
            "type": self.type,
            "rect": list(self.rect),
            "value": self.value,
            "default_value": self.default_value,
        }
        if self.options is not None:
            payload["options"] = list(self.options)
        if self.type == FIELD_CHECKBOX:
            payload["export_value"] = self.export_value
            payload["export_label"] = self.export_label
            payload["checked"] = self.checked
        return payload


@dataclass(slots=True)
class _Widget:
    page: int
    reference: IndirectObject | None
    annotation: DictionaryObject
    field: DictionaryObject
    name: str
    field_type: str | None
    flags: int


@dataclass(slots=True)
class FormDocument:
    """Fields discovered in a document together with its page count."""

    page_count: int
    fields: list[FormField]


def decode_export_label(name: str) -> str:
    """Recover a Shift-JIS encoded name that was decoded with the wrong charset."""

    if name.isascii():
        return name

    for charset in _NAME_CHARSETS:
        try:
            raw = name.encode(charset)
            decoded = raw.decode("shift_jis")
        except (UnicodeEncodeError, UnicodeDecodeError):
            continue
        # half-width katakana means the bytes were not Shift-JIS to begin with
        if any("｡" <= char <= "ﾟ" for char in decoded):
            continue
        return decoded
    return name


def _open_reader(data: bytes) -> PdfReader:
    if not data:
        raise PdfFormError("The uploaded file is empty")

    try:
        reader = PdfReader(BytesIO(data))
        if reader.is_encrypted and not reader.decrypt(""):
            raise PdfFormError("Encrypted documents are not supported")
        # Force the page tree to load so structural errors surface here.
        len(reader.pages)
    except PyPdfError as exc:
        raise PdfFormError(str(exc) or exc.__class__.__name__) from exc
    return reader


def _text(value: Any) -> str:
    if value is None:
        return ""
    value = value.get_object() if isinstance(value, IndirectObject) else value
    if isinstance(value, ArrayObject):
        return _text(value[0]) if value else ""
    if isinstance(value, NameObject):
        return value[1:]
    if isinstance(value, bytes):
        return value.decode("latin-1")
    return str(value)


def _lineage(dictionary: DictionaryObject) -> Iterator[DictionaryObject]:
    """Yield ``dictionary`` and its ``/Parent`` ancestors, nearest first."""

    seen: set[int] = set()
    current: DictionaryObject | None = dictionary
    while current is not None:
        if id(current) in seen:
            raise PdfFormError("Form field hierarchy contains a /Parent cycle")
        seen.add(id(current))
        yield current
        parent = current.get("/Parent")
        current = parent.get_object() if parent is not None else None


def _inherited(dictionary: DictionaryObject, key: str) -> Any:
    for node in _lineage(dictionary):
        if key in node:
            return node[key]
    return None


def _qualified_name(dictionary: DictionaryObject) -> str:
    parts = [_text(node["/T"]) for node in _lineage(dictionary) if "/T" in node]
    return ".".join(reversed(parts))


def _field_dictionary(annotation: DictionaryObject) -> DictionaryObject:
    if "/T" in annotation or "/Parent" not in annotation:
        return annotation
    return annotation["/Parent"].get_object()


def _iter_widgets(pages: Iterable[Any]) -> Iterator[_Widget]:
    for page_number, page in enumerate(pages, start=1):
        annotations = page.get("/Annots")
        if annotations is None:
            continue
        for entry in annotations.get_object():
            annotation = entry.get_object()
            if annotation.get("/Subtype") != "/Widget":
                continue
            field_dict = _field_dictionary(annotation)
            name = _qualified_name(field_dict)
            if not name:
                continue
            field_type = _inherited(field_dict, "/FT")
            flags = _inherited(field_dict, "/Ff")
            yield _Widget(
                page=page_number,
                reference=entry if isinstance(entry, IndirectObject) else None,
                annotation=annotation,
                field=field_dict,
                name=name,
                field_type=str(field_type) if field_type is not None else None,
                flags=int(flags) if flags is not None else 0,
            )


def _is_checkbox(widget: _Widget) -> bool:
    return widget.field_type == "/Btn" and not widget.flags & (_RADIO_FLAG | _PUSHBUTTON_FLAG)


def _export_name(annotation: DictionaryObject) -> str:
    appearance = annotation.get("/AP")
    if appearance is not None:
        normal = appearance.get_object().get("/N")
        if normal is not None:
            normal = normal.get_object()
            if isinstance(normal, DictionaryObject):
                for state in normal:
                    if state != _OFF:
                        return state[1:]
    return _DEFAULT_EXPORT


def _is_dropdown(widget: _Widget) -> bool:
    # list boxes and multi-select choices are not editable here
    return (
        widget.field_type == "/Ch"
        and bool(widget.flags & _COMBO_FLAG)
        and not widget.flags & _MULTI_SELECT_FLAG
    )


def _dropdown_options(field_dict: DictionaryObject) -> list[tuple[str, str]]:
    """Return ``(export value, display value)`` pairs of a choice field."""

    raw = _inherited(field_dict, "/Opt")
    if raw is None:
        return []
    options: list[tuple[str, str]] = []
    for option in raw.get_object():
        option = option.get_object()
        if isinstance(option, ArrayObject) and len(option) >= 2:
            options.append((_text(option[0]), _text(option[1])))
        else:
            text = _text(option)
            options.append((text, text))
    return options


def _display_value(options: list[tuple[str, str]], export: str) -> str:
    for export_value, display in options:
        if export_value == export:
            return display
    return export


def _export_value(widget: _Widget, text: str) -> str:
    """Map a submitted display (or export) value to the export value stored in ``/V``."""

    if not text:
        return text
    options = _dropdown_options(widget.field)
    for export_value, display in options:
        if display == text:
            return export_value
    if any(export_value == text for export_value, _ in options):
        return text
    raise FormValueError(f"'{text}' is not an option of field '{widget.name}'")


def _describe(widget: _Widget) -> FormField | None:
    annotation = widget.annotation
    field_dict = widget.field
    rect = [float(value) for value in annotation.get("/Rect", [])]
    reference = f"{widget.reference.idnum}R" if widget.reference is not None else None
    default_value = _text(_inherited(field_dict, "/DV"))

    if widget.field_type == "/Tx":
        return FormField(
            name=widget.name,
            id=reference,
            page=widget.page,
            type=FIELD_TEXT,
            rect=rect,
            value=_text(_inherited(field_dict, "/V")),
            default_value=default_value,
        )

    if _is_dropdown(widget):
        options = _dropdown_options(field_dict)
        return FormField(
            name=widget.name,
            id=reference,
            page=widget.page,
            type=FIELD_DROPDOWN,
            rect=rect,
            value=_display_value(options, _text(_inherited(field_dict, "/V"))),
            default_value=_display_value(options, default_value),
            options=[display for _, display in options],
        )

    if _is_checkbox(widget):
        export = _export_name(annotation)
        current = _text(_inherited(field_dict, "/V")) or _text(annotation.get("/AS"))
        checked = current == export
        return FormField(
            name=widget.name,
            id=reference,
            page=widget.page,
            type=FIELD_CHECKBOX,
            rect=rect,
            value=checked,
            default_value=default_value,
            export_value=export,
            export_label=decode_export_label(export),
            checked=checked,
        )

    return None


def read_form(data: bytes) -> FormDocument:
    """Return the page count and the editable fields of the PDF in ``data``."""

    reader = _open_reader(data)
    page_count = len(reader.pages)
    if "/AcroForm" not in reader.trailer["/Root"]:
        return FormDocument(page_count=page_count, fields=[])

    fields: list[FormField] = []
    seen: set[str] = set()
    for widget in _iter_widgets(reader.pages):
        if widget.name in seen:
            continue
        described = _describe(widget)
        if described is None:
            continue
        seen.add(widget.name)
        fields.append(described)

    return FormDocument(page_count=page_count, fields=fields)


def extract_form_fields(data: bytes) -> list[FormField]:
    """Return the text, dropdown and checkbox fields of the PDF in ``data``."""

    return read_form(data).fields


def _is_checked(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() not in _FALSE_STRINGS
    return bool(value)


def _apply_value(widget: _Widget, value: Any) -> bool:
    field_dict = widget.field

    if widget.field_type == "/Tx":
        text = "" if value is None else str(value)
        field_dict[NameObject("/V")] = TextStringObject(text)
        return True

    if _is_dropdown(widget):
        text = "" if value is None else str(value)
        field_dict[NameObject("/V")] = TextStringObject(_export_value(widget, text))
        return True

    if _is_checkbox(widget):
        if _is_checked(value):
            state = NameObject(f"/{_export_name(widget.annotation)}")
        else:
            state = NameObject(_OFF)
        field_dict[NameObject("/V")] = state
        widget.annotation[NameObject("/AS")] = state
        return True

    return False


def fill_form(data: bytes, values: Mapping[str, Any]) -> bytes:
    """Write ``values`` (keyed by field name) into the PDF and return the new bytes."""

    reader = _open_reader(data)
    try:
        writer = PdfWriter(clone_from=reader)
    except PyPdfError as exc:
        raise PdfFormError(str(exc) or exc.__class__.__name__) from exc

    applied: set[str] = set()
    for widget in _iter_widgets(writer.pages):
        if widget.name not in values:
            continue
        if _apply_value(widget, values[widget.name]):
            applied.add(widget.name)

    for name in sorted(set(values) - applied):
        _LOGGER.debug("Ignoring value for unknown or unsupported field %r", name)

    writer.set_need_appearances_writer(True)

    buffer = BytesIO()
    try:
        writer.write(buffer)
    except PyPdfError as exc:
        raise PdfFormError(str(exc) or exc.__class__.__name__) from exc
    return buffer.getvalue()


__all__ = [
    "FIELD_CHECKBOX",
    "FIELD_DROPDOWN",
    "FIELD_TEXT",
    "FormDocument",
    "FormField",
    "FormValueError",
    "PdfFormError",
    "decode_export_label",
    "extract_form_fields",
    "fill_form",
    "read_form",
]
