"""Shared pytest fixtures for the toyjq test suite."""

from __future__ import annotations

import pytest
from click.testing import CliRunner


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    """Run inside an empty temp directory so no stray config is picked up."""
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def config_project(workdir):
    """A directory holding a .toyjq.toml with a narrow width."""
    (workdir / ".toyjq.toml").write_text(
        "[format]\nwidth = 10\nindent = 4\n"
        "[output]\ncolor = false\nstrict = true\n"
    )
    sub = workdir / "data"
    sub.mkdir()
    return workdir
