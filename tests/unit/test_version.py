"""Unit coverage for the version reported by the health endpoint."""

from __future__ import annotations

from importlib import metadata
from pathlib import Path

import pytest

from nencho.backend import version
from nencho.backend.version import DISTRIBUTION, get_project_version, pyproject_version


@pytest.fixture(autouse=True)
def _clear_version_cache():
    get_project_version.cache_clear()
    yield
    get_project_version.cache_clear()


def test_pyproject_version_reads_checkout_metadata() -> None:
    assert version.PYPROJECT_PATH.name == "pyproject.toml"
    assert pyproject_version() == "0.3.0"


def test_installed_distribution_version_wins(monkeypatch: pytest.MonkeyPatch) -> None:
    requested: list[str] = []

    def fake_version(name: str) -> str:
        requested.append(name)
        return "9.9.9"

    monkeypatch.setattr(metadata, "version", fake_version)

    assert get_project_version() == "9.9.9"
    assert requested == [DISTRIBUTION]


def test_missing_distribution_falls_back_to_pyproject(monkeypatch: pytest.MonkeyPatch) -> None:
    def not_installed(_: str) -> str:
        raise metadata.PackageNotFoundError(DISTRIBUTION)

    monkeypatch.setattr(metadata, "version", not_installed)

    assert get_project_version() == pyproject_version()


def test_pyproject_version_ignores_other_tables(tmp_path: Path) -> None:
    pyproject = tmp_path / "pyproject.toml"
    pyproject.write_text(
        '[tool.other]\nversion = "0.0.1"\n\n[project]\nname = "nencho"\nversion = "1.2.3"\n',
        encoding="utf-8",
    )

    assert pyproject_version(pyproject) == "1.2.3"


def test_pyproject_version_requires_project_version(tmp_path: Path) -> None:
    pyproject = tmp_path / "pyproject.toml"
    pyproject.write_text('[project]\nname = "nencho"\n\n[tool.x]\nversion = "1"\n', encoding="utf-8")

    with pytest.raises(RuntimeError, match="No \\[project\\] version"):
        pyproject_version(pyproject)
    with pytest.raises(RuntimeError, match="Unable to locate"):
        pyproject_version(tmp_path / "missing.toml")
