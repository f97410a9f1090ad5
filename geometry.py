"""
geometry.py

Pure geometry helpers shared by the editor and the overlay renderer.

Points are plain ``(x, y)`` tuples so the editor engine and the renderer
can be exercised without a QApplication.
"""

from __future__ import annotations

import math
from typing import Optional, Tuple

Point = Tuple[float, float]

# Line pick tolerance in design units. Default: 5.0
PICK_TOLERANCE = 5.0

# Size at which a custom crosshair is drawn 1:1. Default: 20.0
BASE_SIZE = 20.0


def distance(p: Point, q: Point) -> float:
    """Euclidean distance between two points."""
    return math.hypot(p[0] - q[0], p[1] - q[1])


def distance_point_to_segment(p: Point, a: Point, b: Point) -> float:
    """
    Distance from ``p`` to the segment ``a-b``.

    The scalar projection of ``p`` onto the segment is clamped to
    ``[0, 1]`` so points beyond either end measure to the nearest
    endpoint. A zero-length segment degenerates to point distance.

    Args:
        p: The query point
        a: Segment start
        b: Segment end

    Returns:
        The shortest distance from ``p`` to any point on the segment
    """
    dx = b[0] - a[0]
    dy = b[1] - a[1]
    length_sq = dx * dx + dy * dy
    if length_sq == 0:
        return distance(p, a)

    t = ((p[0] - a[0]) * dx + (p[1] - a[1]) * dy) / length_sq
    t = max(0.0, min(1.0, t))

    proj = (a[0] + t * dx, a[1] + t * dy)
    return distance(p, proj)


def rect_contains(top_left: Optional[Point], width: float, height: float, p: Point) -> bool:
    """
    Axis-aligned containment test, edges inclusive.

    Returns False when ``top_left`` is None (element not positioned yet)
    or when either coordinate is NaN.
    """
    if top_left is None:
        return False
    left, top = top_left
    if math.isnan(left) or math.isnan(top):
        return False
    return left <= p[0] <= left + width and top <= p[1] <= top + height


def scale(value: float, current_size: float, base_size: float = BASE_SIZE) -> float:
    """Scale a design-space value by ``current_size / base_size``."""
    return value * current_size / base_size
