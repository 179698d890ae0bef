"""
Shared test fixtures and configuration.
"""

import os
from pathlib import Path

import pytest

LOCKFILE_CONTENT = '{\n  "name": "site",\n  "lockfileVersion": 3,\n  "packages": {}\n}\n'


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Isolate tests from the runner's own GitHub Actions environment."""
    for name in list(os.environ):
        if name.startswith("INPUT_"):
            monkeypatch.delenv(name)
    for name in (
        "GITHUB_ACTIONS", "GITHUB_ENV", "GITHUB_OUTPUT",
        "GITHUB_WORKFLOW", "GITHUB_SHA",
        "E2E_CACHE_DIR", "E2E_LOG_LEVEL", "E2E_LOG_FILE", "E2E_LOG_FILE_LEVEL",
        "CI", "TERM",
    ):
        # setenv first so the variable is removed again on teardown even
        # when the code under test exports it
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """A checkout with a package-lock.json."""
    root = tmp_path / "project"
    root.mkdir()
    (root / "package-lock.json").write_text(LOCKFILE_CONTENT)
    return root


@pytest.fixture
def cache_root(tmp_path: Path) -> Path:
    """Return an empty directory for the local cache store."""
    root = tmp_path / "cache-store"
    root.mkdir()
    return root
