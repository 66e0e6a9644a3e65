"""Shared pytest fixtures for Pomodo tests."""

import os
import sys

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PyQt6.QtWidgets import QApplication

from pomodo.database.db import configure_engine, init_db
from pomodo.timer.engine import SessionEngine, EngineConfig


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
    """Fresh SessionEngine with default durations, auto-start OFF."""
    return SessionEngine(EngineConfig())


@pytest.fixture
def engine_auto(qapp):
    """Fresh SessionEngine with auto-start ON."""
    return SessionEngine(EngineConfig(auto_start=True))


@pytest.fixture
def short_engine(qapp):
    """Engine with tiny durations so tests can tick through whole phases."""
    return SessionEngine(EngineConfig(
        work_duration=5,
        short_break_duration=2,
        long_break_duration=3,
        sessions_until_long_break=4,
    ))


@pytest.fixture
def isolated_paths(tmp_path, monkeypatch):
    """Redirect settings and token files into *tmp_path*."""
    monkeypatch.setattr("pomodo.settings.APP_SUPPORT_DIR", tmp_path)
    monkeypatch.setattr("pomodo.settings.SETTINGS_PATH", tmp_path / "settings.json")
    monkeypatch.setattr("pomodo.playback.auth.TOKEN_PATH", tmp_path / "tokens.json")
    return tmp_path
