"""
canvas/scene.py

QGraphicsScene that mirrors an EditorEngine.

The engine is the single source of truth. The scene listens for engine
events to create, restack, update and remove graphics items, and turns
mouse input into engine hit-test and drag calls.
"""

from __future__ import annotations

from typing import Dict, Optional

from PyQt6.QtCore import Qt, QPointF, QRectF
from PyQt6.QtGui import QColor
from PyQt6.QtWidgets import QGraphicsItem, QGraphicsScene

from editor.engine import EditorEngine
from canvas.items import create_item
from settings import get_settings
from debug_trace import trace

# Canvas background, close to what the overlay is seen against
BACKGROUND_COLOR = "#101010"


def _point(sp: QPointF):
    return (sp.x(), sp.y())


class EditorScene(QGraphicsScene):
    """
    Graphics scene for the crosshair editor.

    Args:
        engine: Engine to mirror. A new one built from the editor
            settings is used when omitted; guide lines are added to it.
        parent: Optional Qt parent.
    """

    def __init__(self, engine: Optional[EditorEngine] = None, parent=None):
        super().__init__(parent)
        s = get_settings().settings.editor
        if engine is None:
            engine = EditorEngine(
                canvas_extent=s.canvas_extent,
                default_color=s.default_color,
                default_thickness=s.default_thickness,
                pick_tolerance=s.pick_tolerance,
            )
            engine.add_guides(s.grid_spacing)
        self.engine = engine

        half = engine.canvas_extent / 2
        self.setSceneRect(QRectF(-half, -half, engine.canvas_extent, engine.canvas_extent))
        self.setBackgroundBrush(QColor(BACKGROUND_COLOR))

        self._items: Dict[int, QGraphicsItem] = {}
        for eid in engine.ids():
            self._add_item(eid)
        self._restack()
        self._sync_highlight(engine.selection)

        engine.add_listener(self._on_engine_event)

    # ---- engine -> items ----

    def item_for(self, eid: int) -> Optional[QGraphicsItem]:
        """Graphics item for element ``eid``, if any."""
        return self._items.get(eid)

    def _add_item(self, eid: int) -> None:
        item = create_item(eid, self.engine.element(eid), guide=self.engine.is_guide(eid))
        self._items[eid] = item
        self.addItem(item)

    def _restack(self) -> None:
        for z, eid in enumerate(self.engine.ids()):
            item = self._items.get(eid)
            if item is not None:
                item.setZValue(z)

    def _sync_highlight(self, selected: Optional[int]) -> None:
        for eid, item in self._items.items():
            item.set_highlighted(eid == selected)

    def _on_engine_event(self, event: str, eid: Optional[int]) -> None:
        if event == "added":
            self._add_item(eid)
            self._restack()
        elif event == "removed":
            item = self._items.pop(eid, None)
            if item is not None:
                self.removeItem(item)
        elif event == "changed":
            item = self._items.get(eid)
            if item is not None:
                item.sync_from_element(self.engine.element(eid))
        elif event == "selection":
            self._sync_highlight(eid)
        trace(f"scene <- {event} {eid}", "CANVAS")

    def detach(self) -> None:
        """Stop listening to the engine (call before discarding the scene)."""
        self.engine.remove_listener(self._on_engine_event)

    # ---- mouse -> engine ----

    def mousePressEvent(self, event):
        if event.button() == Qt.MouseButton.LeftButton:
            pt = _point(event.scenePos())
            if self.engine.hit_test(pt) is not None:
                self.engine.begin_drag(pt)
            event.accept()
            return
        super().mousePressEvent(event)

    def mouseMoveEvent(self, event):
        if self.engine.is_dragging:
            self.engine.update_drag(_point(event.scenePos()))
            event.accept()
            return
        super().mouseMoveEvent(event)

    def mouseReleaseEvent(self, event):
        if event.button() == Qt.MouseButton.LeftButton and self.engine.is_dragging:
            self.engine.end_drag()
            event.accept()
            return
        super().mouseReleaseEvent(event)

    def keyPressEvent(self, event):
        """Delete/Backspace removes the selection."""
        if event.key() in (Qt.Key.Key_Delete, Qt.Key.Key_Backspace) and self.engine.selection is not None:
            self.engine.delete_selected()
            event.accept()
            return
        super().keyPressEvent(event)
