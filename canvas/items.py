"""
canvas/items.py

Graphics items for the crosshair editor: lines, circles, rectangles and
the background guide lines.
"""

from __future__ import annotations

from typing import Dict, Type

from PyQt6.QtCore import Qt, QPointF, QRectF, QLineF
from PyQt6.QtGui import QColor, QPainter, QPen
from PyQt6.QtWidgets import (
    QGraphicsItem,
    QGraphicsEllipseItem,
    QGraphicsLineItem,
    QGraphicsRectItem,
    QStyle,
    QStyleOptionGraphicsItem,
)

from models import CrosshairElement, ShapeKind
from canvas.mixins import ELEMENT_ID_KEY, SELECTION_MARGIN, ElementMixin
from settings import get_settings
from debug_trace import trace


# =============================================================================
# Cached editor settings - read once at first access to avoid settings
# lookups during paint.
# =============================================================================

class _CachedEditorSettings:
    """Cache for editor colours used while painting."""

    _instance = None

    def __init__(self):
        self._initialized = False
        self.guide_color = QColor("#3C3C3C")
        self.selection_color = QColor("#0078D7")

    def _ensure_initialized(self):
        if self._initialized:
            return
        s = get_settings().settings.editor
        guide = QColor(s.guide_color)
        if guide.isValid():
            self.guide_color = guide
        selection = QColor(s.selection_color)
        if selection.isValid():
            self.selection_color = selection
        self._initialized = True

    @classmethod
    def get(cls) -> "_CachedEditorSettings":
        """Get the singleton instance."""
        if cls._instance is None:
            cls._instance = cls()
        cls._instance._ensure_initialized()
        return cls._instance


def _get_selection_color() -> QColor:
    """Selection outline colour. Default: #0078D7 (blue)."""
    return _CachedEditorSettings.get().selection_color


def _get_guide_color() -> QColor:
    """Guide line colour. Default: #3C3C3C (dark gray)."""
    return _CachedEditorSettings.get().guide_color


def _unselected_option(option) -> QStyleOptionGraphicsItem:
    """Copy of ``option`` without State_Selected, suppressing Qt's own outline."""
    my_option = QStyleOptionGraphicsItem(option)
    my_option.state &= ~QStyle.StateFlag.State_Selected
    return my_option


class ElementLineItem(QGraphicsLineItem, ElementMixin):
    """Line element. Positioned at its start point; the line is local."""

    KIND = ShapeKind.LINE

    def __init__(self, element_id: int, elem: CrosshairElement):
        QGraphicsLineItem.__init__(self)
        ElementMixin.__init__(self, element_id)
        self.setFlag(QGraphicsItem.GraphicsItemFlag.ItemIsSelectable, False)
        self.sync_from_element(elem)

    def sync_from_element(self, elem: CrosshairElement) -> None:
        self.prepareGeometryChange()
        self.setPos(QPointF(elem.x1, elem.y1))
        self.setLine(QLineF(0, 0, elem.x2 - elem.x1, elem.y2 - elem.y1))
        self.setPen(self._element_pen(elem))

    def boundingRect(self) -> QRectF:
        r = super().boundingRect()
        if self.highlighted:
            r = r.adjusted(-SELECTION_MARGIN, -SELECTION_MARGIN, SELECTION_MARGIN, SELECTION_MARGIN)
        return r

    def paint(self, painter: QPainter, option, widget=None):
        super().paint(painter, _unselected_option(option), widget)
        if self.highlighted:
            self._paint_selection(painter, QRectF(self.line().p1(), self.line().p2()).normalized(),
                                  _get_selection_color())


class ElementRectItem(QGraphicsRectItem, ElementMixin):
    """Rectangle element, anchored at its top-left corner."""

    KIND = ShapeKind.RECTANGLE

    def __init__(self, element_id: int, elem: CrosshairElement):
        QGraphicsRectItem.__init__(self)
        ElementMixin.__init__(self, element_id)
        self.sync_from_element(elem)

    def sync_from_element(self, elem: CrosshairElement) -> None:
        self.prepareGeometryChange()
        self.setPos(QPointF(elem.x1, elem.y1))
        self.setRect(QRectF(0, 0, elem.width, elem.height))
        self.setPen(self._element_pen(elem))
        self.setBrush(self._element_brush(elem))

    def boundingRect(self) -> QRectF:
        r = super().boundingRect()
        if self.highlighted:
            r = r.adjusted(-SELECTION_MARGIN, -SELECTION_MARGIN, SELECTION_MARGIN, SELECTION_MARGIN)
        return r

    def paint(self, painter: QPainter, option, widget=None):
        super().paint(painter, _unselected_option(option), widget)
        if self.highlighted:
            self._paint_selection(painter, self.rect(), _get_selection_color())


class ElementEllipseItem(QGraphicsEllipseItem, ElementMixin):
    """Circle element: an ellipse inscribed in its width x height box."""

    KIND = ShapeKind.CIRCLE

    def __init__(self, element_id: int, elem: CrosshairElement):
        QGraphicsEllipseItem.__init__(self)
        ElementMixin.__init__(self, element_id)
        self.sync_from_element(elem)

    def sync_from_element(self, elem: CrosshairElement) -> None:
        self.prepareGeometryChange()
        self.setPos(QPointF(elem.x1, elem.y1))
        self.setRect(QRectF(0, 0, elem.width, elem.height))
        self.setPen(self._element_pen(elem))
        self.setBrush(self._element_brush(elem))

    def boundingRect(self) -> QRectF:
        r = super().boundingRect()
        if self.highlighted:
            r = r.adjusted(-SELECTION_MARGIN, -SELECTION_MARGIN, SELECTION_MARGIN, SELECTION_MARGIN)
        return r

    def paint(self, painter: QPainter, option, widget=None):
        super().paint(painter, _unselected_option(option), widget)
        if self.highlighted:
            self._paint_selection(painter, self.rect(), _get_selection_color())


class GuideLineItem(QGraphicsLineItem):
    """Background grid line. Drawn one pixel wide regardless of zoom."""

    def __init__(self, element_id: int, elem: CrosshairElement):
        super().__init__(QLineF(elem.x1, elem.y1, elem.x2, elem.y2))
        self.element_id = element_id
        self.setData(ELEMENT_ID_KEY, element_id)
        pen = QPen(_get_guide_color(), 1)
        pen.setCosmetic(True)
        self.setPen(pen)
        self.setAcceptedMouseButtons(Qt.MouseButton.NoButton)

    def sync_from_element(self, elem: CrosshairElement) -> None:
        self.setLine(QLineF(elem.x1, elem.y1, elem.x2, elem.y2))

    def set_highlighted(self, on: bool) -> None:
        pass


ITEM_CLASSES: Dict[str, Type[QGraphicsItem]] = {
    ShapeKind.LINE: ElementLineItem,
    ShapeKind.CIRCLE: ElementEllipseItem,
    ShapeKind.RECTANGLE: ElementRectItem,
}


def create_item(element_id: int, elem: CrosshairElement, guide: bool = False) -> QGraphicsItem:
    """Build the graphics item for an engine element."""
    if guide:
        return GuideLineItem(element_id, elem)
    trace(f"create_item {elem.kind} id={element_id}", "CANVAS")
    return ITEM_CLASSES[elem.kind](element_id, elem)
