#!/usr/bin/env python3
"""Validate translation catalogues for missing keys and placeholder drift."""

from __future__ import annotations

import argparse
import json
import re
import sys
from collections import defaultdict
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
TRANSLATIONS_DIR = REPO_ROOT / "src" / "nencho" / "translations"
BASE_LOCALE = "ja"

PLACEHOLDER_PATTERN = re.compile(r"{\s*([a-zA-Z0-9_]+)\s*}")


class ValidationError(Exception):
    """Raised when validation detects unrecoverable issues."""


def _flatten_messages(tree: dict, prefix: str = "") -> dict[str, str]:
    items: dict[str, str] = {}
    for key, value in tree.items():
        path = f"{prefix}.{key}" if prefix else key
        if isinstance(value, dict):
            items.update(_flatten_messages(value, path))
        else:
            items[path] = "" if value is None else str(value)
    return items


def _load_translation_payloads(directory: Path) -> dict[str, dict[str, dict[str, str]]]:
    catalogues: dict[str, dict[str, dict[str, str]]] = {}

    if not directory.is_dir():
        raise ValidationError(f"Missing translations directory: {directory}")

    for path in sorted(directory.glob("*.json")):
        with path.open("r", encoding="utf-8") as handle:
            payload = json.load(handle)

        if not isinstance(payload, dict):
            raise ValidationError(f"Unexpected payload format in {path}")

        backend = payload.get("backend") or {}
        frontend = payload.get("frontend") or {}
        if not isinstance(backend, dict) or not isinstance(frontend, dict):
            raise ValidationError(f"Translation payload must define backend/frontend mappings: {path}")

        catalogues[path.stem] = {
            "backend": _flatten_messages(backend),
            "frontend": _flatten_messages(frontend),
        }

    if not catalogues:
        raise ValidationError("No translation catalogues discovered")

    return catalogues


def _missing_keys(catalogues: dict[str, dict[str, dict[str, str]]], base_locale: str) -> list[str]:
    issues: list[str] = []
    base = catalogues.get(base_locale)
    if not base:
        return [f"Base locale '{base_locale}' has no catalogue"]

    for section in ("backend", "frontend"):
        expected = set(base[section])
        for locale, payload in sorted(catalogues.items()):
            missing = expected - set(payload[section])
            if missing:
                issues.append(
                    f"Locale '{locale}' missing {len(missing)} {section} keys: {', '.join(sorted(missing))}"
                )
            extra = set(payload[section]) - expected
            if extra:
                issues.append(
                    f"Locale '{locale}' defines {len(extra)} unknown {section} keys: {', '.join(sorted(extra))}"
                )
    return issues


def _placeholder_inconsistencies(catalogues: dict[str, dict[str, dict[str, str]]]) -> list[str]:
    placeholders: dict[tuple[str, str], dict[str, frozenset[str]]] = defaultdict(dict)
    for locale, sections in catalogues.items():
        for section, messages in sections.items():
            for key, message in messages.items():
                placeholders[(section, key)][locale] = frozenset(
                    PLACEHOLDER_PATTERN.findall(message)
                )

    inconsistencies: list[str] = []
    for (section, key), locale_map in sorted(placeholders.items()):
        if len(set(locale_map.values())) <= 1:
            continue
        details = ", ".join(
            f"{locale}={{{', '.join(sorted(values))}}}"
            for locale, values in sorted(locale_map.items())
        )
        inconsistencies.append(f"{section}:{key} placeholders differ: {details}")
    return inconsistencies


def validate(directory: Path = TRANSLATIONS_DIR, base_locale: str = BASE_LOCALE) -> list[str]:
    """Return every issue found in the catalogues under ``directory``."""

    catalogues = _load_translation_payloads(directory)
    return _missing_keys(catalogues, base_locale) + _placeholder_inconsistencies(catalogues)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--directory",
        type=Path,
        default=TRANSLATIONS_DIR,
        help="Directory containing <locale>.json catalogues",
    )
    args = parser.parse_args(argv)

    try:
        issues = validate(args.directory)
    except ValidationError as error:
        print(f"error: {error}", file=sys.stderr)
        return 1

    for issue in issues:
        print(f"- {issue}")
    if issues:
        return 1
    print("Translations OK")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
