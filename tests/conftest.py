"""
Pytest configuration and fixtures for bootcheck tests.
"""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from bootcheck.config import BootcheckConfig, reset_config
from fakes import FakeProbe, FakeRunner


@pytest.fixture(autouse=True)
def _reset_config():
    """Reset the global config singleton around each test."""
    reset_config()
    yield
    reset_config()


@pytest.fixture
def project_root(tmp_path: Path) -> Path:
    root = tmp_path / "project"
    root.mkdir()
    return root


@pytest.fixture
def config(project_root: Path) -> BootcheckConfig:
    return BootcheckConfig(project_root=project_root, extra_bin_dirs=[])


@pytest.fixture
def env_config(project_root: Path, monkeypatch) -> Path:
    """Point environment-driven configuration at the test project."""
    monkeypatch.setenv("BOOTCHECK_PROJECT_ROOT", str(project_root))
    monkeypatch.setenv("BOOTCHECK_EXTRA_BIN_DIRS", "[]")
    return project_root


@pytest.fixture
def runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def probe() -> FakeProbe:
    return FakeProbe()


@pytest.fixture(autouse=True)
def _reset_logging():
    """Drop handlers configure_logging() attached during a test."""
    yield
    root = logging.getLogger("bootcheck")
    for handler in list(root.handlers):
        root.removeHandler(handler)
    root.setLevel(logging.NOTSET)
    root.propagate = True
