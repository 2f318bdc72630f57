"""Shared pytest fixtures for Respira tests."""

import os
import sys
import tempfile

# Keep settings, cached sounds and the database out of the real
# app-support directory; must happen before respira is imported.
os.environ.setdefault("RESPIRA_HOME", tempfile.mkdtemp(prefix="respira_test_"))
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest

from PyQt6.QtWidgets import QApplication

from respira.database.db import configure_engine, init_db
from respira.breathing.engine import BreathingEngine


@pytest.fixture(scope="session")
def qapp():
    """A single QApplication instance shared across the entire test run."""
    app = QApplication.instance() or QApplication(sys.argv)
    yield app


@pytest.fixture(autouse=True)
def test_db():
    """Point every test at a fresh in-memory SQLite database."""
    configure_engine("sqlite:///:memory:")
    init_db()
    yield


@pytest.fixture
def engine(qapp):
    """Fresh BreathingEngine with session logging ON."""
    return BreathingEngine(parent=None, db_enabled=True)


@pytest.fixture
def engine_no_db(qapp):
    """Fresh BreathingEngine with DB disabled (pure state-machine tests)."""
    return BreathingEngine(parent=None, db_enabled=False)
