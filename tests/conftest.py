"""Shared fixtures for gitcanvas tests."""

import os

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PySide6.QtWidgets import QApplication  # noqa: E402


@pytest.fixture(scope="session")
def qapp():
    """A Qt application object; signals, timers and widgets need one to exist."""
    app = QApplication.instance() or QApplication([])
    yield app
