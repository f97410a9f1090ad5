"""
overlay/window.py

Frameless, always-on-top, click-through window that paints the crosshair.
"""

from __future__ import annotations

import logging
from typing import Optional

from PyQt6.QtCore import Qt, QLineF, QRectF
from PyQt6.QtGui import QBrush, QPainter, QPen
from PyQt6.QtWidgets import QWidget

from models import CrosshairProfile, ShapeKind
from overlay.engine import CrosshairRenderer, RenderedShape, overlay_origin
from overlay.targets import TargetRect
from settings import get_settings
from utils import color_name_to_qcolor
from debug_trace import trace

log = logging.getLogger(__name__)


class OverlayWindow(QWidget):
    """
    Transparent overlay that draws ``renderer.visible_shapes()``.

    The window never takes focus or mouse input. Placement and visibility
    are applied together by ``place_at`` once per tick.
    """

    def __init__(self, renderer: Optional[CrosshairRenderer] = None, parent=None):
        super().__init__(parent)
        s = get_settings().settings.overlay
        if renderer is None:
            renderer = CrosshairRenderer(s.window_size, s.window_size, s.base_size)
        self.renderer = renderer

        self.setWindowFlags(
            Qt.WindowType.FramelessWindowHint
            | Qt.WindowType.WindowStaysOnTopHint
            | Qt.WindowType.Tool
            | Qt.WindowType.WindowTransparentForInput
        )
        self.setAttribute(Qt.WidgetAttribute.WA_TranslucentBackground, True)
        self.setAttribute(Qt.WidgetAttribute.WA_TransparentForMouseEvents, True)
        self.setAttribute(Qt.WidgetAttribute.WA_ShowWithoutActivating, True)
        self.setFocusPolicy(Qt.FocusPolicy.NoFocus)
        self.setCursor(Qt.CursorShape.BlankCursor)
        self.setFixedSize(int(renderer.width), int(renderer.height))

    # ---- state ----

    def apply_settings(
        self,
        color: str,
        thickness: float,
        size: float,
        crosshair_type: str,
        custom_profile: Optional[CrosshairProfile] = None,
    ) -> None:
        """Apply a full RenderState change and repaint once."""
        self.renderer.apply_settings(color, thickness, size, crosshair_type, custom_profile)
        self.update()

    def place_at(self, rect: Optional[TargetRect], enabled: bool = True) -> None:
        """Centre on ``rect`` and show, or hide when disabled or no target."""
        if not enabled or rect is None:
            if self.isVisible():
                self.hide()
            return
        x, y = overlay_origin(rect.center, self.width(), self.height())
        if self.x() != x or self.y() != y:
            self.move(x, y)
        if not self.isVisible():
            self.show()

    # ---- painting ----

    def paintEvent(self, event):
        trace("overlay paint", "PAINT")
        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.Antialiasing, True)
        try:
            for shape in self.renderer.visible_shapes():
                self._paint_shape(painter, shape)
        finally:
            painter.end()

    @staticmethod
    def _paint_shape(painter: QPainter, shape: RenderedShape) -> None:
        color = color_name_to_qcolor(shape.color)
        if shape.thickness > 0:
            pen = QPen(color, shape.thickness)
            pen.setCapStyle(Qt.PenCapStyle.FlatCap)
            painter.setPen(pen)
        else:
            painter.setPen(Qt.PenStyle.NoPen)

        if shape.kind == ShapeKind.LINE:
            painter.drawLine(QLineF(shape.x1, shape.y1, shape.x2, shape.y2))
            return

        painter.setBrush(QBrush(color) if shape.filled else Qt.BrushStyle.NoBrush)
        rect = QRectF(shape.x1, shape.y1, shape.width, shape.height)
        if shape.kind == ShapeKind.CIRCLE:
            painter.drawEllipse(rect)
        else:
            painter.drawRect(rect)
