"""Shared fixtures: offscreen Qt, a session QApplication and isolated settings."""
from __future__ import annotations

import os
import sys

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import settings as settings_module
from settings import SettingsManager


@pytest.fixture(scope="session")
def qapp():
    """Provide a single QApplication for the entire test session."""
    from PyQt6.QtWidgets import QApplication
    app = QApplication.instance() or QApplication(sys.argv)
    yield app


@pytest.fixture(autouse=True, scope="session")
def isolated_settings(tmp_path_factory):
    """Point the settings singleton at a throwaway directory."""
    sm = SettingsManager(settings_dir=tmp_path_factory.mktemp("config"))
    settings_module._settings_manager = sm
    yield sm
    settings_module._settings_manager = None


@pytest.fixture()
def no_message_boxes(monkeypatch):
    """Record QMessageBox calls instead of blocking on a modal dialog."""
    from PyQt6.QtWidgets import QMessageBox
    shown = []

    def fake(kind):
        def _show(parent, title, text, *args, **kwargs):
            shown.append((kind, title, text))
            return QMessageBox.StandardButton.Yes
        return _show

    for kind in ("information", "warning", "critical", "question"):
        monkeypatch.setattr(QMessageBox, kind, staticmethod(fake(kind)))
    return shown
