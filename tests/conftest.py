"""Shared test fixtures for rrr."""

from __future__ import annotations

import pytest
from pathlib import Path
from unittest.mock import MagicMock

from rrr.config.loader import ConfigLoader


@pytest.fixture
def mock_subprocess(mocker):
    """Mock subprocess.run for WAIT-mode execution."""
    mock = mocker.patch("subprocess.run")
    mock.return_value = MagicMock(returncode=0, stdout="", stderr="")
    return mock


@pytest.fixture
def mock_subprocess_popen(mocker):
    """Mock subprocess.Popen for FORK-mode execution."""
    mock_popen = MagicMock()
    mock_popen.returncode = None
    return mocker.patch("subprocess.Popen", return_value=mock_popen)


@pytest.fixture
def mock_execvp(mocker):
    """Mock os.execvp so EXEC mode returns instead of replacing the process."""
    return mocker.patch("os.execvp")


@pytest.fixture
def write_config(tmp_path):
    """Write a config file under tmp_path and return its path."""

    def _write(content: str, name: str = "rrr.conf") -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
        return path

    return _write


@pytest.fixture
def build_book(write_config):
    """Load a config text and build the rule book."""

    def _build(content: str, **loader_kwargs):
        path = write_config(content)
        return ConfigLoader(**loader_kwargs).load(path).build()

    return _build


@pytest.fixture
def desktop_file(tmp_path):
    """Create a desktop entry file."""

    def _create(
        name: str = "viewer.desktop",
        exec_line: str | None = "zathura %U",
        mime_types: str | None = "application/pdf;",
        directory: Path | None = None,
    ) -> Path:
        lines = ["[Desktop Entry]", "Type=Application", "Name=Viewer"]
        if exec_line is not None:
            lines.append(f"Exec={exec_line}")
        if mime_types is not None:
            lines.append(f"MimeType={mime_types}")
        path = (directory or tmp_path) / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("\n".join(lines) + "\n")
        return path

    return _create


@pytest.fixture
def mock_home_dir(mocker, tmp_path):
    """Mock Path.home() to return a temp directory."""
    mocker.patch.object(Path, "home", return_value=tmp_path)
    return tmp_path


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Remove RRR_* variables and point settings at a missing file."""
    for name in (
        "RRR_CONFIG",
        "RRR_PROFILE",
        "RRR_CASE_SENSITIVE",
        "RRR_FALLBACK",
        "RRR_SHELL",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("RRR_SETTINGS", str(tmp_path / "no-settings.toml"))
