"""
canvas package

PyQt6 graphics items, scene, and view for the crosshair editor canvas.
"""

from canvas.mixins import ElementMixin
from canvas.items import (
    ElementLineItem,
    ElementEllipseItem,
    ElementRectItem,
    GuideLineItem,
    create_item,
)
from canvas.scene import EditorScene
from canvas.view import EditorView

__all__ = [
    "ElementMixin",
    "ElementLineItem",
    "ElementEllipseItem",
    "ElementRectItem",
    "GuideLineItem",
    "create_item",
    "EditorScene",
    "EditorView",
]
