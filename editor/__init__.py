"""
editor package

Crosshair editor: the canvas-independent element engine (``editor.engine``)
and the editor dialog built on top of it (``editor.dialog``, imported
directly since it depends on the canvas and property packages).
"""

from editor.engine import EditorEngine, default_element

__all__ = [
    "EditorEngine",
    "default_element",
]
