"""
canvas/view.py

QGraphicsView for the crosshair editor canvas.
"""

from __future__ import annotations

from PyQt6.QtCore import Qt
from PyQt6.QtGui import QPainter
from PyQt6.QtWidgets import QGraphicsView

from canvas.scene import EditorScene
from settings import get_settings


class EditorView(QGraphicsView):
    """
    Graphics view that keeps the whole design canvas in sight.

    The scene is refitted on resize until the user zooms with the wheel;
    ``zoom_fit`` (the editor's Fit button) returns to fitted mode.
    """

    def __init__(self, scene: EditorScene, parent=None):
        super().__init__(scene, parent)
        self.setRenderHint(QPainter.RenderHint.Antialiasing, True)
        self.setDragMode(QGraphicsView.DragMode.NoDrag)
        self.setTransformationAnchor(QGraphicsView.ViewportAnchor.AnchorUnderMouse)
        self.setHorizontalScrollBarPolicy(Qt.ScrollBarPolicy.ScrollBarAsNeeded)
        self.setVerticalScrollBarPolicy(Qt.ScrollBarPolicy.ScrollBarAsNeeded)
        self._fitted = True

    def wheelEvent(self, event):
        """Zoom with mouse wheel."""
        delta = event.angleDelta().y()
        if delta == 0:
            return
        # Zoom factor from settings. Default: 1.15 (15% per scroll step)
        zoom_factor = get_settings().settings.editor.wheel_zoom_factor
        factor = zoom_factor if delta > 0 else 1 / zoom_factor
        self._fitted = False
        self.scale(factor, factor)

    def resizeEvent(self, event):
        super().resizeEvent(event)
        if self._fitted:
            self.zoom_fit()

    def zoom_fit(self):
        """Zoom to fit the design canvas in the view."""
        self._fitted = True
        self.fitInView(self.scene().sceneRect(), Qt.AspectRatioMode.KeepAspectRatio)
