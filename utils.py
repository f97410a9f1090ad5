"""
utils.py

Utility functions for DotSight: colour conversion and text field parsing.
"""

from __future__ import annotations

import math

from PyQt6.QtGui import QColor

from errors import ValidationError
from models import COLOR_PALETTE, DEFAULT_COLOR


def hex_to_qcolor(s: str, fallback: QColor) -> QColor:
    """
    Parse a hex string to a QColor.

    Args:
        s: Hex string like "#RRGGBB" or "#RRGGBBAA"
        fallback: Color to return if parsing fails

    Returns:
        Parsed QColor or fallback
    """
    if not s:
        return QColor(fallback)
    s = s.strip().lstrip("#")
    try:
        if len(s) == 6:
            return QColor(int(s[0:2], 16), int(s[2:4], 16), int(s[4:6], 16))
        if len(s) == 8:
            return QColor(int(s[0:2], 16), int(s[2:4], 16), int(s[4:6], 16), int(s[6:8], 16))
    except ValueError:
        pass
    return QColor(fallback)


def color_name_to_qcolor(name: str) -> QColor:
    """Palette colour name to QColor. Unknown names give the default red."""
    hex_value = COLOR_PALETTE.get(name, COLOR_PALETTE[DEFAULT_COLOR])
    return hex_to_qcolor(hex_value, QColor(COLOR_PALETTE[DEFAULT_COLOR]))


def parse_number(text: str, field_name: str = "value") -> float:
    """
    Parse a numeric text field.

    Args:
        text: Raw field text; surrounding whitespace is ignored.
        field_name: Label used in the error message.

    Returns:
        The parsed float.

    Raises:
        ValidationError: If the text is empty, not a number, or not finite.
    """
    s = (text or "").strip()
    try:
        value = float(s)
    except ValueError:
        raise ValidationError(f"{field_name}: '{s}' is not a number") from None
    if not math.isfinite(value):
        raise ValidationError(f"{field_name}: '{s}' is not a finite number")
    return value


def format_number(value: float) -> str:
    """Format a coordinate for a text field without a trailing '.0'."""
    if float(value).is_integer():
        return str(int(value))
    return f"{value:g}"
