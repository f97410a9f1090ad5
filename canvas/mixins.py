"""
canvas/mixins.py

Mixin for graphics items that mirror an editor engine element.
"""

from __future__ import annotations

from PyQt6.QtCore import Qt, QRectF
from PyQt6.QtGui import QBrush, QColor, QPainter, QPen

from models import CrosshairElement
from utils import color_name_to_qcolor

# QGraphicsItem.data() key holding the engine element id
ELEMENT_ID_KEY = 0

# Extra space around the shape for the selection outline
SELECTION_MARGIN = 3.0


class ElementMixin:
    """
    Links a graphics item to an engine element id.

    Items never edit geometry themselves: the scene routes mouse input to
    the engine, and the engine's change events call ``sync_from_element``.
    ``highlighted`` mirrors the engine selection and is painted as a
    dashed outline.
    """

    def __init__(self, element_id: int):
        self.element_id = element_id
        self.highlighted = False
        self.setData(ELEMENT_ID_KEY, element_id)

    def set_highlighted(self, on: bool) -> None:
        if on != self.highlighted:
            self.prepareGeometryChange()
            self.highlighted = on
            self.update()

    @staticmethod
    def _element_pen(elem: CrosshairElement) -> QPen:
        if elem.thickness <= 0:
            return QPen(Qt.PenStyle.NoPen)
        pen = QPen(color_name_to_qcolor(elem.color), elem.thickness)
        pen.setCapStyle(Qt.PenCapStyle.FlatCap)
        return pen

    @staticmethod
    def _element_brush(elem: CrosshairElement) -> QBrush:
        if elem.filled and not elem.is_line:
            return QBrush(color_name_to_qcolor(elem.color))
        return QBrush(Qt.BrushStyle.NoBrush)

    def _paint_selection(self, painter: QPainter, shape_rect: QRectF, color: QColor) -> None:
        """Draw the dashed selection outline around ``shape_rect``."""
        pen = QPen(color, 1, Qt.PenStyle.DashLine)
        pen.setCosmetic(True)
        painter.setPen(pen)
        painter.setBrush(Qt.BrushStyle.NoBrush)
        m = SELECTION_MARGIN / 2
        painter.drawRect(shape_rect.adjusted(-m, -m, m, m))
