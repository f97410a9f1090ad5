"""
editor/engine.py

Canvas-independent model of the crosshair editor.

Elements live in a registry keyed by stable integer ids; ``_order`` holds
the z-order (last id is drawn on top and picked first). The selection is a
plain id, so the Qt scene, the property panel and the drag protocol all
refer to elements by value rather than by shared item references.

Coordinates are design units with the crosshair centre at the origin; the
canvas spans ``[-extent/2, extent/2]`` on both axes.
"""

from __future__ import annotations

import dataclasses
import logging
from typing import Callable, Dict, List, Optional

from errors import ValidationError
from geometry import PICK_TOLERANCE, Point, distance_point_to_segment, rect_contains
from models import (
    COLOR_PALETTE,
    DEFAULT_COLOR,
    CrosshairElement,
    CrosshairProfile,
    ShapeKind,
)

log = logging.getLogger(__name__)

# Listener signature: (event, element_id). Events: added, removed, changed, selection.
Listener = Callable[[str, Optional[int]], None]

# Default shape geometry, centred on the origin
DEFAULT_SHAPE_SIZE = 40.0

# Full-extent axis lines are guides, so user lines may not take that shape
SPANNING_LINE_MESSAGE = "A line cannot span the whole canvas."


# ----------------------------
# Per-kind behaviour tables
# ----------------------------

def _hit_line(elem: CrosshairElement, p: Point, tolerance: float) -> bool:
    return distance_point_to_segment(p, (elem.x1, elem.y1), (elem.x2, elem.y2)) <= tolerance


def _hit_box(elem: CrosshairElement, p: Point, tolerance: float) -> bool:
    return rect_contains((elem.x1, elem.y1), elem.width, elem.height, p)


def _move_line(elem: CrosshairElement, dx: float, dy: float) -> None:
    elem.x1 += dx
    elem.y1 += dy
    elem.x2 += dx
    elem.y2 += dy


def _move_box(elem: CrosshairElement, dx: float, dy: float) -> None:
    elem.x1 += dx
    elem.y1 += dy


_HIT_TESTS = {
    ShapeKind.LINE: _hit_line,
    ShapeKind.CIRCLE: _hit_box,
    ShapeKind.RECTANGLE: _hit_box,
}

_TRANSLATORS = {
    ShapeKind.LINE: _move_line,
    ShapeKind.CIRCLE: _move_box,
    ShapeKind.RECTANGLE: _move_box,
}


def default_element(kind: str, color: str = DEFAULT_COLOR, thickness: float = 2.0) -> CrosshairElement:
    """Return the geometry a freshly added shape starts with."""
    if kind not in ShapeKind.ALL:
        raise ValidationError(f"unknown shape kind {kind!r}")
    half = DEFAULT_SHAPE_SIZE / 2
    if kind == ShapeKind.LINE:
        return CrosshairElement(kind=kind, x1=-half, y1=0.0, x2=half, y2=0.0,
                                thickness=thickness, color=color)
    return CrosshairElement(kind=kind, x1=-half, y1=-half,
                            width=DEFAULT_SHAPE_SIZE, height=DEFAULT_SHAPE_SIZE,
                            thickness=thickness, color=color)


class EditorEngine:
    """
    Element registry, selection and drag state for the crosshair editor.

    All mutating operations act on the current selection and notify
    listeners so views can resync. Guide lines share the registry but are
    recognised structurally (full-extent horizontal/vertical lines) and are
    never picked, dragged or exported.
    """

    def __init__(
        self,
        canvas_extent: float = 400.0,
        default_color: str = DEFAULT_COLOR,
        default_thickness: float = 2.0,
        pick_tolerance: float = PICK_TOLERANCE,
    ):
        self.canvas_extent = float(canvas_extent)
        self.default_color = default_color if default_color in COLOR_PALETTE else DEFAULT_COLOR
        self.default_thickness = float(default_thickness)
        self.pick_tolerance = float(pick_tolerance)

        self._elements: Dict[int, CrosshairElement] = {}
        self._order: List[int] = []
        self._next_id = 1
        self._listeners: List[Listener] = []

        self._selection: Optional[int] = None
        self._dragging = False
        self._drag_last: Optional[Point] = None

    # ---- listeners ----

    def add_listener(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _emit(self, event: str, eid: Optional[int]) -> None:
        for listener in list(self._listeners):
            listener(event, eid)

    # ---- registry queries ----

    def element(self, eid: int) -> CrosshairElement:
        """Return the live element for ``eid``. Raises KeyError if unknown."""
        return self._elements[eid]

    def ids(self) -> List[int]:
        """All element ids (guides included) in z-order, bottom first."""
        return list(self._order)

    def shape_ids(self) -> List[int]:
        """Ids of user shapes (guides excluded) in z-order, bottom first."""
        return [eid for eid in self._order if not self.is_guide(eid)]

    def is_guide(self, eid: int) -> bool:
        return self.is_guide_element(self._elements[eid], self.canvas_extent)

    @staticmethod
    def is_guide_element(elem: CrosshairElement, canvas_extent: float) -> bool:
        """True for a horizontal or vertical line spanning the whole canvas."""
        if not elem.is_line:
            return False
        half = canvas_extent / 2
        if elem.y1 == elem.y2 and min(elem.x1, elem.x2) == -half and max(elem.x1, elem.x2) == half:
            return True
        if elem.x1 == elem.x2 and min(elem.y1, elem.y2) == -half and max(elem.y1, elem.y2) == half:
            return True
        return False

    def _would_span_canvas(self, elem: CrosshairElement, **coords: float) -> bool:
        """True if ``elem`` moved to ``coords`` would turn into a guide line."""
        return elem.is_line and self.is_guide_element(dataclasses.replace(elem, **coords), self.canvas_extent)

    @property
    def selection(self) -> Optional[int]:
        return self._selection

    @property
    def selected_element(self) -> Optional[CrosshairElement]:
        if self._selection is None:
            return None
        return self._elements.get(self._selection)

    @property
    def is_dragging(self) -> bool:
        return self._dragging

    # ---- registry mutation ----

    def add_guides(self, spacing: float) -> List[int]:
        """Add the background grid. Guides go beneath every existing element."""
        if spacing <= 0:
            raise ValidationError("grid spacing must be positive")
        half = self.canvas_extent / 2
        added = []
        offset = -half
        while offset <= half:
            for elem in (
                CrosshairElement(kind=ShapeKind.LINE, x1=offset, y1=-half, x2=offset, y2=half, thickness=1.0),
                CrosshairElement(kind=ShapeKind.LINE, x1=-half, y1=offset, x2=half, y2=offset, thickness=1.0),
            ):
                eid = self._register(elem, index=len(added))
                added.append(eid)
            offset += spacing
        return added

    def _register(self, elem: CrosshairElement, index: Optional[int] = None) -> int:
        eid = self._next_id
        self._next_id += 1
        self._elements[eid] = elem
        if index is None:
            self._order.append(eid)
        else:
            self._order.insert(index, eid)
        self._emit("added", eid)
        return eid

    def add_element(self, elem: CrosshairElement) -> int:
        """Put ``elem`` on top of the z-order without selecting it."""
        return self._register(elem)

    def add_shape(self, kind: str) -> int:
        """Add a default shape of ``kind`` on top and select it."""
        eid = self._register(default_element(kind, self.default_color, self.default_thickness))
        log.debug("Added %s as element %d", kind, eid)
        self.select(eid)
        return eid

    def remove(self, eid: int) -> None:
        if eid not in self._elements:
            return
        if eid == self._selection:
            self.end_drag()
            self._selection = None
            self._emit("selection", None)
        del self._elements[eid]
        self._order.remove(eid)
        self._emit("removed", eid)

    def delete_selected(self) -> None:
        """Remove the selected element. No-op without a selection."""
        if self._selection is None:
            return
        self.remove(self._selection)

    def clear_all(self) -> None:
        """Remove every element except the guide lines."""
        for eid in self.shape_ids():
            self.remove(eid)
        self.select(None)

    # ---- selection + hit-testing ----

    def select(self, eid: Optional[int]) -> None:
        if eid is not None and (eid not in self._elements or self.is_guide(eid)):
            eid = None
        if eid == self._selection:
            return
        self.end_drag()
        self._selection = eid
        self._emit("selection", eid)

    def element_at(self, point: Point) -> Optional[int]:
        """Topmost non-guide element under ``point``, without changing selection."""
        for eid in reversed(self._order):
            if self.is_guide(eid):
                continue
            elem = self._elements[eid]
            if _HIT_TESTS[elem.kind](elem, point, self.pick_tolerance):
                return eid
        return None

    def hit_test(self, point: Point) -> Optional[int]:
        """Pick the topmost element under ``point`` and make it the selection.

        A miss clears the selection.
        """
        eid = self.element_at(point)
        self.select(eid)
        return eid

    # ---- drag protocol ----

    def begin_drag(self, point: Point) -> bool:
        """Start dragging the selection from ``point``.

        A begin while already dragging ends the previous drag first.
        Returns False when there is nothing selected to drag.
        """
        if self._selection is None:
            return False
        if self._dragging:
            self.end_drag()
        self._dragging = True
        self._drag_last = point
        return True

    def update_drag(self, point: Point) -> None:
        """Translate the selection by the delta since the previous point."""
        if not self._dragging or self._drag_last is None or self._selection is None:
            return
        dx = point[0] - self._drag_last[0]
        dy = point[1] - self._drag_last[1]
        self._drag_last = point
        if dx == 0 and dy == 0:
            return
        elem = self._elements[self._selection]
        if self._would_span_canvas(elem, x1=elem.x1 + dx, y1=elem.y1 + dy, x2=elem.x2 + dx, y2=elem.y2 + dy):
            return
        _TRANSLATORS[elem.kind](elem, dx, dy)
        self._emit("changed", self._selection)

    def end_drag(self) -> None:
        self._dragging = False
        self._drag_last = None

    # ---- property edits on the selection ----

    def set_position(self, x: float, y: float) -> bool:
        """Move the selection's origin; a line's end follows to keep its vector.

        Raises:
            ValidationError: If a line would end up spanning the whole canvas.
        """
        elem = self.selected_element
        if elem is None:
            return False
        if elem.is_line:
            x2 = x + (elem.x2 - elem.x1)
            y2 = y + (elem.y2 - elem.y1)
            if self._would_span_canvas(elem, x1=x, y1=y, x2=x2, y2=y2):
                raise ValidationError(SPANNING_LINE_MESSAGE)
            elem.x2 = x2
            elem.y2 = y2
        elem.x1 = x
        elem.y1 = y
        self._emit("changed", self._selection)
        return True

    def set_end_position(self, x2: float, y2: float) -> bool:
        """Set a line's end point. Ignored for other kinds.

        Raises:
            ValidationError: If the line would end up spanning the whole canvas.
        """
        elem = self.selected_element
        if elem is None or not elem.is_line:
            return False
        if self._would_span_canvas(elem, x2=x2, y2=y2):
            raise ValidationError(SPANNING_LINE_MESSAGE)
        elem.x2 = x2
        elem.y2 = y2
        self._emit("changed", self._selection)
        return True

    def set_size(self, width: float, height: float) -> bool:
        elem = self.selected_element
        if elem is None or elem.is_line:
            return False
        if width < 0 or height < 0:
            raise ValidationError("width and height must not be negative")
        elem.width = width
        elem.height = height
        self._emit("changed", self._selection)
        return True

    def set_thickness(self, thickness: float) -> bool:
        elem = self.selected_element
        if elem is None:
            return False
        if thickness < 0:
            raise ValidationError("thickness must not be negative")
        elem.thickness = thickness
        self._emit("changed", self._selection)
        return True

    def set_color(self, color: str) -> bool:
        if color not in COLOR_PALETTE:
            raise ValidationError(f"unknown colour {color!r}")
        elem = self.selected_element
        if elem is None:
            return False
        elem.color = color
        self._emit("changed", self._selection)
        return True

    def set_filled(self, filled: bool) -> bool:
        """Toggle interior fill. Lines have no fill, so this is a no-op for them."""
        elem = self.selected_element
        if elem is None or elem.is_line:
            return False
        elem.filled = bool(filled)
        self._emit("changed", self._selection)
        return True

    # ---- model conversion ----

    def export_profile(self, name: str) -> CrosshairProfile:
        """Snapshot every non-guide element, in z-order, under ``name``."""
        name = (name or "").strip()
        if not name:
            raise ValidationError("Please enter a name for your crosshair.")
        return CrosshairProfile(
            name=name,
            elements=[self._elements[eid].normalized() for eid in self.shape_ids()],
        )

    def import_profile(self, profile: CrosshairProfile) -> List[int]:
        """Replace all shapes (guides kept) with copies of ``profile``'s elements."""
        self.clear_all()
        ids = [self.add_element(elem.normalized()) for elem in profile.elements]
        log.debug("Imported %d elements from %r", len(ids), profile.name)
        return ids
