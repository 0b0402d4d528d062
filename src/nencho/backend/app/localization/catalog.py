"""Japanese-first message catalogues shared by the API and the front-end shell.

Each ``nencho/translations/<locale>.json`` holds a flat ``backend`` mapping of
API messages and a nested ``frontend`` tree that is served to the browser as
is. Japanese is the base locale: other catalogues fall back to it key by key.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from functools import cache
from importlib import resources
from typing import Any, Final, Mapping

BASE_LOCALE: Final = "ja"
_PACKAGE: Final = "nencho.translations"


@dataclass(frozen=True)
class Translator:
    """Look up backend messages for one locale."""

    locale: str
    _messages: Mapping[str, str]
    _fallback: Mapping[str, str]

    def __call__(self, key: str) -> str:
        return self._messages.get(key) or self._fallback.get(key, key)

    def format(self, key: str, **values: Any) -> str:
        """Return the message for ``key`` with ``{placeholders}`` substituted."""

        return self(key).format(**values)

    def currency(self, amount: str) -> str:
        return self.format("format.currency", amount=amount)


@dataclass(frozen=True)
class Catalogue:
    locale: str
    backend: Mapping[str, str] = field(default_factory=dict)
    frontend: Mapping[str, Any] = field(default_factory=dict)

    def as_payload(self) -> dict[str, Any]:
        return {"locale": self.locale, "backend": dict(self.backend), "frontend": self.frontend}


@cache
def available_locales() -> tuple[str, ...]:
    """Locales that ship a JSON catalogue, sorted."""

    names = (entry.name for entry in resources.files(_PACKAGE).iterdir())
    locales = sorted(name.removesuffix(".json") for name in names if name.endswith(".json"))
    return tuple(locales) or (BASE_LOCALE,)


@cache
def _catalogue(locale: str) -> Catalogue:
    resource = resources.files(_PACKAGE).joinpath(f"{locale}.json")
    if not resource.is_file():
        return Catalogue(locale=locale)

    payload = json.loads(resource.read_text(encoding="utf-8"))
    backend = payload.get("backend")
    frontend = payload.get("frontend")
    # scripts/validate_translations.py rejects non-mapping sections
    return Catalogue(
        locale=locale,
        backend={key: str(value) for key, value in backend.items()} if isinstance(backend, dict) else {},
        frontend=frontend if isinstance(frontend, dict) else {},
    )


def normalise_locale(locale: str | None) -> str:
    """Map tags such as ``en-US`` or ``en_GB`` to a published catalogue, else Japanese."""

    if not locale:
        return BASE_LOCALE

    language = locale.strip().lower().replace("_", "-").partition("-")[0]
    return language if language in available_locales() else BASE_LOCALE


def get_translator(locale: str | None = None) -> Translator:
    catalogue = _catalogue(normalise_locale(locale))
    return Translator(
        locale=catalogue.locale,
        _messages=catalogue.backend,
        _fallback=_catalogue(BASE_LOCALE).backend,
    )


def load_translations(locale: str | None = None) -> dict[str, Any]:
    """Return the requested catalogue, the locale list and the Japanese fallback."""

    payload = _catalogue(normalise_locale(locale)).as_payload()
    payload["available_locales"] = list(available_locales())
    payload["fallback"] = _catalogue(BASE_LOCALE).as_payload()
    return payload


__all__ = [
    "BASE_LOCALE",
    "Catalogue",
    "Translator",
    "available_locales",
    "get_translator",
    "load_translations",
    "normalise_locale",
]
