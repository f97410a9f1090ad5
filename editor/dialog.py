"""
editor/dialog.py

Crosshair editor window: canvas, shape toolbar, property panel and
save/load/apply of the design.
"""

from __future__ import annotations

import logging
from typing import Optional

from PyQt6.QtCore import pyqtSignal
from PyQt6.QtWidgets import (
    QDialog,
    QFileDialog,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QMessageBox,
    QPushButton,
    QVBoxLayout,
)

from canvas.scene import EditorScene
from canvas.view import EditorView
from errors import PersistenceError, ValidationError
from models import CrosshairProfile, ShapeKind
from profiles.library import CrosshairLibrary
from properties.dock import PropertyPanel

log = logging.getLogger(__name__)


class CrosshairEditorDialog(QDialog):
    """
    Editor for custom crosshair designs.

    Args:
        library: Where Save writes and Load looks for designs.
        initial: Design to start from; the canvas starts empty when None.
        parent: Optional Qt parent.

    Emits ``crosshair_applied(CrosshairProfile)`` when Apply succeeds.
    """

    crosshair_applied = pyqtSignal(object)

    def __init__(self, library: CrosshairLibrary, initial: Optional[CrosshairProfile] = None, parent=None):
        super().__init__(parent)
        self.setWindowTitle("Crosshair Editor")
        self.library = library
        self.applied_profile: Optional[CrosshairProfile] = None

        self.scene = EditorScene(parent=self)
        self.engine = self.scene.engine
        self.view = EditorView(self.scene, self)
        self.view.setMinimumSize(420, 420)
        self.panel = PropertyPanel(self.engine, self)
        self.panel.setMinimumWidth(220)

        self._init_layout()
        if initial is not None:
            self.load_profile(initial)

    def _init_layout(self):
        layout = QVBoxLayout(self)

        tools = QHBoxLayout()
        self.add_line_btn = QPushButton("Add Line")
        self.add_circle_btn = QPushButton("Add Circle")
        self.add_rect_btn = QPushButton("Add Rectangle")
        self.delete_btn = QPushButton("Delete Selected")
        self.clear_btn = QPushButton("Clear All")
        for b in (self.add_line_btn, self.add_circle_btn, self.add_rect_btn, self.delete_btn, self.clear_btn):
            tools.addWidget(b)
        tools.addStretch(1)
        self.fit_btn = QPushButton("Fit")
        self.fit_btn.setToolTip("Zoom to fit the canvas")
        tools.addWidget(self.fit_btn)
        layout.addLayout(tools)

        body = QHBoxLayout()
        body.addWidget(self.view, 1)
        body.addWidget(self.panel)
        layout.addLayout(body, 1)

        bottom = QHBoxLayout()
        bottom.addWidget(QLabel("Name:"))
        self.name_edit = QLineEdit()
        self.name_edit.setPlaceholderText("Crosshair name")
        bottom.addWidget(self.name_edit, 1)
        self.save_btn = QPushButton("Save")
        self.load_btn = QPushButton("Load...")
        self.apply_btn = QPushButton("Apply")
        self.apply_btn.setDefault(True)
        for b in (self.save_btn, self.load_btn, self.apply_btn):
            bottom.addWidget(b)
        layout.addLayout(bottom)

        self.add_line_btn.clicked.connect(lambda: self.engine.add_shape(ShapeKind.LINE))
        self.add_circle_btn.clicked.connect(lambda: self.engine.add_shape(ShapeKind.CIRCLE))
        self.add_rect_btn.clicked.connect(lambda: self.engine.add_shape(ShapeKind.RECTANGLE))
        self.delete_btn.clicked.connect(self.engine.delete_selected)
        self.clear_btn.clicked.connect(self.engine.clear_all)
        self.fit_btn.clicked.connect(self.view.zoom_fit)
        self.save_btn.clicked.connect(lambda: self.save_crosshair())
        self.load_btn.clicked.connect(self.load_crosshair)
        self.apply_btn.clicked.connect(self.apply_crosshair)

    # ---- save / load ----

    def save_crosshair(self, announce: bool = True) -> Optional[CrosshairProfile]:
        """Export the canvas and write it to the library.

        Returns:
            The saved design, or None after showing why it was not saved.
        """
        try:
            profile = self.engine.export_profile(self.name_edit.text())
        except ValidationError as e:
            QMessageBox.warning(self, "Name Required", str(e))
            return None
        try:
            self.library.save(profile)
        except ValidationError as e:
            QMessageBox.warning(self, "Invalid Name", str(e))
            return None
        except PersistenceError as e:
            QMessageBox.critical(self, "Error", f"Error saving crosshair: {e}")
            return None
        if announce:
            QMessageBox.information(self, "Saved", f"Crosshair '{profile.name}' saved successfully.")
        return profile

    def load_profile(self, profile: CrosshairProfile) -> None:
        """Replace the canvas contents with ``profile``."""
        self.engine.import_profile(profile)
        self.name_edit.setText(profile.name)

    def load_crosshair(self):
        """Pick a saved design file and load it onto the canvas."""
        self.library.root.mkdir(parents=True, exist_ok=True)
        path, _ = QFileDialog.getOpenFileName(
            self, "Load Crosshair", str(self.library.root), "JSON Files (*.json)"
        )
        if not path:
            return
        try:
            profile = self.library.load_file(path)
        except ValidationError as e:
            QMessageBox.critical(self, "Error", f"Error loading crosshair: {e}")
            return
        self.load_profile(profile)
        log.info("Loaded crosshair %r from %s", profile.name, path)

    def apply_crosshair(self) -> Optional[CrosshairProfile]:
        """Save the design, hand it to listeners and close the editor."""
        profile = self.save_crosshair(announce=False)
        if profile is None:
            return None
        self.applied_profile = profile
        self.crosshair_applied.emit(profile)
        self.accept()
        return profile

    def done(self, result):
        self.panel.detach()
        self.scene.detach()
        super().done(result)
