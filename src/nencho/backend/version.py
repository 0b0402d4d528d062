"""Resolve the running Nencho version reported by ``/health``."""

from __future__ import annotations

import logging
import re
from functools import lru_cache
from importlib import metadata
from pathlib import Path
from typing import Final

DISTRIBUTION: Final = "nencho"
PYPROJECT_PATH: Final = Path(__file__).resolve().parents[3] / "pyproject.toml"

_LOGGER = logging.getLogger(__name__)
# version key inside the [project] table, before any other table header
_PROJECT_VERSION = re.compile(
    r'^\[project\]\s*$(?:(?!^\[).)*?^version\s*=\s*"(?P<version>[^"]+)"',
    re.MULTILINE | re.DOTALL,
)


@lru_cache(maxsize=1)
def get_project_version() -> str:
    """Return the installed distribution version, else the checkout's ``pyproject.toml``."""

    try:
        return metadata.version(DISTRIBUTION)
    except metadata.PackageNotFoundError:
        _LOGGER.debug("%s is not installed; reading %s", DISTRIBUTION, PYPROJECT_PATH)
        return pyproject_version()


def pyproject_version(path: Path = PYPROJECT_PATH) -> str:
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise RuntimeError(f"Unable to locate project metadata at {path}") from exc

    match = _PROJECT_VERSION.search(text)
    if match is None:
        raise RuntimeError(f"No [project] version declared in {path}")
    return match.group("version")


__all__ = ["DISTRIBUTION", "get_project_version", "pyproject_version"]
