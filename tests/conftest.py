"""Pytest configuration for repository test runs."""

from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest


def pytest_sessionstart() -> None:
    """Add src and the repository root to sys.path for test imports."""
    project_root = Path(__file__).resolve().parent.parent
    for import_root in (project_root / "src", project_root):
        if str(import_root) not in sys.path:
            sys.path.insert(0, str(import_root))


@pytest.fixture(autouse=True)
def _clear_lakesample_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep developer LAKESAMPLE_* settings from leaking into tests."""
    for name in list(os.environ):
        if name.startswith("LAKESAMPLE_"):
            monkeypatch.delenv(name, raising=False)
