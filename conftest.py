"""Shared pytest fixtures for Qt application lifecycle and isolated storage."""

import os
import sys
import tempfile

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
os.environ.setdefault("CLASSBOARD_HOME", tempfile.mkdtemp(prefix="classboard-tests-"))

import pytest
from PyQt6.QtCore import QCoreApplication
from PyQt6.QtWidgets import QApplication


@pytest.fixture(scope="session")
def app():
    """Provide a single QApplication for all tests that render or use widgets."""
    instance = QApplication.instance()
    if instance is None:
        instance = QApplication(sys.argv)

    yield instance

    QCoreApplication.processEvents()
