"""
models.py

Data models and constants for DotSight.

The persisted JSON uses camelCase keys; the dataclasses use snake_case
attributes and convert at the ``from_dict`` / ``to_dict`` boundary.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional

from errors import ValidationError

log = logging.getLogger(__name__)


# ----------------------------
# Tags and constants
# ----------------------------

class ShapeKind:
    """Element type tags. Stored verbatim in ``elementType`` (case-sensitive)."""
    LINE = "Line"
    CIRCLE = "Circle"
    RECTANGLE = "Rectangle"

    ALL = (LINE, CIRCLE, RECTANGLE)


class CrosshairType:
    """Overlay crosshair types, in the order shown in the type selector."""
    CLASSIC = "Classic"
    DOT = "Dot"
    CROSS = "Cross"
    TSHAPE = "TShape"
    CUSTOM = "Custom"

    ALL = (CLASSIC, DOT, CROSS, TSHAPE, CUSTOM)


# Fixed palette: name -> hex. Green is the darker web green, not #00FF00.
COLOR_PALETTE: Dict[str, str] = {
    "Red":     "#FF0000",
    "Green":   "#008000",
    "Blue":    "#0000FF",
    "Yellow":  "#FFFF00",
    "White":   "#FFFFFF",
    "Cyan":    "#00FFFF",
    "Magenta": "#FF00FF",
}

DEFAULT_COLOR = "Red"
DEFAULT_PROFILE_NAME = "Default"
CENTER_ON_SCREEN = "Center on screen"


def normalize_color_name(name: Any) -> str:
    """Return ``name`` if it is a palette colour, otherwise the default (Red)."""
    if isinstance(name, str) and name in COLOR_PALETTE:
        return name
    return DEFAULT_COLOR


def normalize_crosshair_type(value: Any) -> str:
    """Accept a type name or its numeric index; unknown values become Classic."""
    if isinstance(value, str) and value in CrosshairType.ALL:
        return value
    if isinstance(value, int) and not isinstance(value, bool) and 0 <= value < len(CrosshairType.ALL):
        return CrosshairType.ALL[value]
    return CrosshairType.CLASSIC


def _as_float(value: Any, default: float) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


# ----------------------------
# Crosshair element model
# ----------------------------

@dataclass
class CrosshairElement:
    """One vector shape of a custom crosshair.

    ``x1``/``y1`` is the line start, or the top-left anchor of a circle or
    rectangle. ``x2``/``y2`` only matter for lines, ``width``/``height``
    and ``filled`` only for circles and rectangles.
    """
    kind: str = ShapeKind.LINE
    x1: float = 0.0
    y1: float = 0.0
    x2: float = 0.0
    y2: float = 0.0
    width: float = 0.0
    height: float = 0.0
    thickness: float = 2.0
    color: str = DEFAULT_COLOR
    filled: bool = False

    @property
    def is_line(self) -> bool:
        return self.kind == ShapeKind.LINE

    def copy(self) -> "CrosshairElement":
        return replace(self)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "CrosshairElement":
        """Create an element from its persisted dict.

        Args:
            d: Dict with ``elementType`` and the flat geometry/style keys.

        Returns:
            A ``CrosshairElement``; unused fields for the kind are zeroed.

        Raises:
            ValidationError: If ``d`` is not a dict or the tag is unknown.
        """
        if not isinstance(d, dict):
            raise ValidationError(f"element must be an object, got {type(d).__name__}")
        kind = d.get("elementType")
        if kind not in ShapeKind.ALL:
            raise ValidationError(f"unknown elementType {kind!r}")
        elem = cls(
            kind=kind,
            x1=_as_float(d.get("x1"), 0.0),
            y1=_as_float(d.get("y1"), 0.0),
            x2=_as_float(d.get("x2"), 0.0),
            y2=_as_float(d.get("y2"), 0.0),
            width=_as_float(d.get("width"), 0.0),
            height=_as_float(d.get("height"), 0.0),
            thickness=max(0.0, _as_float(d.get("thickness"), 2.0)),
            color=normalize_color_name(d.get("color")),
            filled=bool(d.get("isFilled", False)),
        )
        return elem.normalized()

    def normalized(self) -> "CrosshairElement":
        """Return a copy with the fields unused by this kind set to zero."""
        if self.is_line:
            return replace(self, width=0.0, height=0.0, filled=False)
        return replace(self, x2=0.0, y2=0.0)

    def to_dict(self) -> Dict[str, Any]:
        n = self.normalized()
        return {
            "elementType": n.kind,
            "x1": n.x1,
            "y1": n.y1,
            "x2": n.x2,
            "y2": n.y2,
            "width": n.width,
            "height": n.height,
            "thickness": n.thickness,
            "color": n.color,
            "isFilled": n.filled,
        }


@dataclass
class CrosshairProfile:
    """A named, ordered set of elements. List order is z-order (last on top)."""
    name: str = "Custom"
    elements: List[CrosshairElement] = field(default_factory=list)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "CrosshairProfile":
        if not isinstance(d, dict):
            raise ValidationError("custom crosshair data must be an object")
        raw = d.get("elements") or []
        if not isinstance(raw, list):
            raise ValidationError("elements must be a list")
        return cls(
            name=str(d.get("name") or "Custom"),
            elements=[CrosshairElement.from_dict(e) for e in raw],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "elements": [e.to_dict() for e in self.elements],
        }


# ----------------------------
# Persisted profile + app config
# ----------------------------

@dataclass
class ProfileRecord:
    """A named profile: overlay settings plus an optional custom design.

    Defaults match a first run: enabled, centred on screen, red classic
    crosshair at thickness 2 and size 20.
    """
    name: str = DEFAULT_PROFILE_NAME
    crosshair_enabled: bool = True
    selected_game_window: str = CENTER_ON_SCREEN
    selected_color: str = DEFAULT_COLOR
    crosshair_thickness: float = 2.0
    crosshair_size: float = 20.0
    crosshair_type: str = CrosshairType.CLASSIC
    custom_crosshair: Optional[CrosshairProfile] = None

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "ProfileRecord":
        """Build a record from persisted JSON, keeping defaults for bad values.

        Custom data that fails validation is dropped (with a warning) and a
        ``Custom`` type without usable data falls back to ``Classic``.
        """
        rec = cls()
        if not isinstance(d, dict):
            return rec
        rec.name = str(d.get("name") or rec.name)
        rec.crosshair_enabled = bool(d.get("crosshairEnabled", rec.crosshair_enabled))
        rec.selected_game_window = str(d.get("selectedGameWindow") or rec.selected_game_window)
        rec.selected_color = normalize_color_name(d.get("selectedColor", rec.selected_color))
        rec.crosshair_thickness = _as_float(d.get("crosshairThickness"), rec.crosshair_thickness)
        rec.crosshair_size = _as_float(d.get("crosshairSize"), rec.crosshair_size)
        rec.crosshair_type = normalize_crosshair_type(d.get("crosshairType", rec.crosshair_type))

        custom = d.get("customCrosshairData")
        if custom is not None:
            try:
                rec.custom_crosshair = CrosshairProfile.from_dict(custom)
            except ValidationError as e:
                log.warning("Dropping invalid custom crosshair in profile %r: %s", rec.name, e)
                rec.custom_crosshair = None

        if rec.crosshair_type == CrosshairType.CUSTOM and rec.custom_crosshair is None:
            rec.crosshair_type = CrosshairType.CLASSIC
        return rec

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "crosshairEnabled": self.crosshair_enabled,
            "selectedGameWindow": self.selected_game_window,
            "selectedColor": self.selected_color,
            "crosshairThickness": self.crosshair_thickness,
            "crosshairSize": self.crosshair_size,
            "crosshairType": self.crosshair_type,
            "customCrosshairData": self.custom_crosshair.to_dict() if self.custom_crosshair else None,
        }


@dataclass
class AppConfig:
    """App-level config; only tracks which profile was used last."""
    last_used_profile: str = DEFAULT_PROFILE_NAME

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "AppConfig":
        if not isinstance(d, dict):
            return cls()
        return cls(last_used_profile=str(d.get("lastUsedProfile") or DEFAULT_PROFILE_NAME))

    def to_dict(self) -> Dict[str, Any]:
        return {"lastUsedProfile": self.last_used_profile}
