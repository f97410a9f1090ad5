"""
overlay/engine.py

Crosshair render state machine for the overlay window.

The renderer owns the shapes currently instantiated for the overlay: either
the built-in set (four arms plus a circle) or the scaled elements of a
custom design. ``OverlayWindow`` only paints ``visible_shapes()``; all the
geometry lives here so it can be checked without a display.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from errors import ValidationError
from geometry import BASE_SIZE, scale
from models import (
    DEFAULT_COLOR,
    CrosshairProfile,
    CrosshairType,
    ShapeKind,
    normalize_color_name,
)

log = logging.getLogger(__name__)

# Built-in shape keys, in paint order
TOP, BOTTOM, LEFT, RIGHT, CIRCLE = "top", "bottom", "left", "right", "circle"
BUILTIN_KEYS = (TOP, BOTTOM, LEFT, RIGHT, CIRCLE)

# Which built-in shapes each non-custom type shows
VISIBLE_BY_TYPE: Dict[str, frozenset] = {
    CrosshairType.CLASSIC: frozenset(BUILTIN_KEYS),
    CrosshairType.DOT: frozenset({CIRCLE}),
    CrosshairType.CROSS: frozenset({TOP, BOTTOM, LEFT, RIGHT}),
    CrosshairType.TSHAPE: frozenset({TOP, LEFT, RIGHT}),
}

# The built-in circle is stroked at half the line thickness
CIRCLE_THICKNESS_RATIO = 0.5


@dataclass
class RenderedShape:
    """A shape in overlay pixel coordinates.

    ``thickness_factor`` is multiplied by the global thickness to get
    ``thickness``: 1.0 for built-in arms, 0.5 for the built-in circle, the
    element's own stroke width for custom shapes.
    """
    kind: str
    x1: float = 0.0
    y1: float = 0.0
    x2: float = 0.0
    y2: float = 0.0
    width: float = 0.0
    height: float = 0.0
    thickness: float = 0.0
    color: str = DEFAULT_COLOR
    filled: bool = False
    visible: bool = True
    thickness_factor: float = 1.0


@dataclass
class RenderState:
    """What the overlay draws. ``custom_profile`` is set iff type is Custom."""
    type: str = CrosshairType.CLASSIC
    size: float = 20.0
    thickness: float = 2.0
    color: str = DEFAULT_COLOR
    custom_profile: Optional[CrosshairProfile] = field(default=None)


class CrosshairRenderer:
    """
    Render engine for the overlay crosshair.

    Transitions between built-in types only toggle visibility; hidden arms
    keep their last geometry and are re-laid out when shown again. Entering
    or leaving Custom replaces the whole shape set.

    Args:
        width: Overlay width in pixels.
        height: Overlay height in pixels.
        base_size: Size at which custom designs are drawn 1:1.
    """

    def __init__(self, width: float = 200, height: float = 200, base_size: float = BASE_SIZE):
        self.width = float(width)
        self.height = float(height)
        self.base_size = float(base_size)
        self.state = RenderState()
        self._builtin: Optional[Dict[str, RenderedShape]] = None
        self._custom: Optional[List[RenderedShape]] = None
        self._create_builtin()
        self.layout()

    # ---- queries ----

    @property
    def center(self):
        return self.width / 2, self.height / 2

    def shapes(self) -> List[RenderedShape]:
        """Every instantiated shape, hidden ones included, in paint order."""
        if self._custom is not None:
            return list(self._custom)
        if self._builtin is not None:
            return [self._builtin[k] for k in BUILTIN_KEYS]
        return []

    def visible_shapes(self) -> List[RenderedShape]:
        return [s for s in self.shapes() if s.visible]

    def builtin_shape(self, key: str) -> Optional[RenderedShape]:
        """The built-in shape for ``key``, or None while a custom design is shown."""
        if self._builtin is None:
            return None
        return self._builtin[key]

    # ---- shape set construction ----

    def _create_builtin(self) -> None:
        st = self.state
        self._builtin = {
            key: RenderedShape(kind=ShapeKind.LINE, color=st.color, thickness=st.thickness)
            for key in (TOP, BOTTOM, LEFT, RIGHT)
        }
        self._builtin[CIRCLE] = RenderedShape(
            kind=ShapeKind.CIRCLE,
            color=st.color,
            thickness=st.thickness * CIRCLE_THICKNESS_RATIO,
            thickness_factor=CIRCLE_THICKNESS_RATIO,
        )

    def _build_custom(self, profile: CrosshairProfile) -> List[RenderedShape]:
        st = self.state
        cx, cy = self.center
        out = []
        for elem in profile.elements:
            s = RenderedShape(
                kind=elem.kind,
                x1=cx + scale(elem.x1, st.size, self.base_size),
                y1=cy + scale(elem.y1, st.size, self.base_size),
                thickness=elem.thickness * st.thickness,
                thickness_factor=elem.thickness,
                color=st.color,
                filled=elem.filled and not elem.is_line,
            )
            if elem.is_line:
                s.x2 = cx + scale(elem.x2, st.size, self.base_size)
                s.y2 = cy + scale(elem.y2, st.size, self.base_size)
            else:
                s.width = scale(elem.width, st.size, self.base_size)
                s.height = scale(elem.height, st.size, self.base_size)
            out.append(s)
        return out

    # ---- layout ----

    def layout(self) -> None:
        """Recompute built-in geometry around the centre for visible shapes only."""
        if self._builtin is None:
            return
        cx, cy = self.center
        size = self.state.size
        b = self._builtin

        if b[TOP].visible:
            b[TOP].x1, b[TOP].y1, b[TOP].x2, b[TOP].y2 = cx, cy - size, cx, cy
        if b[BOTTOM].visible:
            b[BOTTOM].x1, b[BOTTOM].y1, b[BOTTOM].x2, b[BOTTOM].y2 = cx, cy, cx, cy + size
        if b[LEFT].visible:
            b[LEFT].x1, b[LEFT].y1, b[LEFT].x2, b[LEFT].y2 = cx - size, cy, cx, cy
        if b[RIGHT].visible:
            b[RIGHT].x1, b[RIGHT].y1, b[RIGHT].x2, b[RIGHT].y2 = cx, cy, cx + size, cy
        if b[CIRCLE].visible:
            b[CIRCLE].width = size
            b[CIRCLE].height = size
            b[CIRCLE].x1 = cx - size / 2
            b[CIRCLE].y1 = cy - size / 2

    def resize(self, width: float, height: float) -> None:
        """Change the overlay's own size and re-centre the current shapes."""
        self.width = float(width)
        self.height = float(height)
        self._relayout()

    def _relayout(self) -> None:
        if self._custom is not None and self.state.custom_profile is not None:
            self._custom = self._build_custom(self.state.custom_profile)
        else:
            self.layout()

    # ---- state setters ----

    def set_color(self, color: str) -> None:
        self.state.color = normalize_color_name(color)
        for s in self.shapes():
            s.color = self.state.color

    def set_thickness(self, thickness: float) -> None:
        self.state.thickness = max(0.0, float(thickness))
        for s in self.shapes():
            s.thickness = s.thickness_factor * self.state.thickness

    def set_size(self, size: float) -> None:
        self.state.size = max(0.0, float(size))
        self._relayout()

    def _check_type(
        self, crosshair_type: str, custom_profile: Optional[CrosshairProfile]
    ) -> Optional[CrosshairProfile]:
        """Design to show for ``crosshair_type`` (None for built-ins). Changes nothing.

        Raises:
            ValidationError: Unknown type, or Custom with no design available.
        """
        if crosshair_type == CrosshairType.CUSTOM:
            profile = custom_profile or self.state.custom_profile
            if profile is None:
                raise ValidationError("Custom crosshair type requires a design")
            return profile
        if crosshair_type not in VISIBLE_BY_TYPE:
            raise ValidationError(f"unknown crosshair type {crosshair_type!r}")
        return None

    def set_type(self, crosshair_type: str, custom_profile: Optional[CrosshairProfile] = None) -> None:
        """Switch crosshair type.

        For Custom, ``custom_profile`` replaces the current design; if omitted
        the previously shown design is reused.

        Raises:
            ValidationError: Unknown type, or Custom with no design available.
        """
        profile = self._check_type(crosshair_type, custom_profile)
        if profile is not None:
            self.state.type = CrosshairType.CUSTOM
            self.state.custom_profile = profile
            self._builtin = None
            self._custom = self._build_custom(profile)
            log.debug("Overlay type -> Custom (%r, %d elements)", profile.name, len(profile.elements))
            return

        visible = VISIBLE_BY_TYPE[crosshair_type]
        if self._builtin is None:
            self._custom = None
            self._create_builtin()
        self.state.type = crosshair_type
        self.state.custom_profile = None
        for key, shape in self._builtin.items():
            shape.visible = key in visible
        self.layout()
        log.debug("Overlay type -> %s", crosshair_type)

    def apply_settings(
        self,
        color: str,
        thickness: float,
        size: float,
        crosshair_type: str,
        custom_profile: Optional[CrosshairProfile] = None,
    ) -> None:
        """Apply all four settings in the order colour, thickness, size, type.

        The type is checked first, so a rejected call leaves the state as it was.

        Raises:
            ValidationError: Unknown type, or Custom with no design available.
        """
        self._check_type(crosshair_type, custom_profile)
        thickness, size = float(thickness), float(size)
        self.set_color(color)
        self.set_thickness(thickness)
        self.set_size(size)
        self.set_type(crosshair_type, custom_profile)


def overlay_origin(target_center, width: float, height: float):
    """Top-left for an overlay of ``width`` x ``height`` centred on ``target_center``."""
    cx, cy = target_center
    return int(round(cx - width / 2)), int(round(cy - height / 2))
