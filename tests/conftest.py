"""Shared pytest setup: isolated settings directory, headless Qt, fresh singletons."""
from __future__ import annotations

import os
import sys
import tempfile

import pytest

# Keep the user's real settings.toml out of the test run
os.environ["XDG_CONFIG_HOME"] = tempfile.mkdtemp(prefix="pagecanvas-tests-")
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import settings  # noqa: E402


@pytest.fixture(autouse=True)
def fresh_settings():
    """Every test starts from default settings."""
    settings._settings_manager = None
    yield
    settings._settings_manager = None


@pytest.fixture(scope="session")
def qapp():
    """Provide a single QApplication for the entire test session."""
    from PyQt6.QtWidgets import QApplication
    app = QApplication.instance() or QApplication(sys.argv)
    yield app
