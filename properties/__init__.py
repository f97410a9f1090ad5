"""
properties package

Property panel for editing the selected crosshair element.
"""

from properties.dock import PropertyPanel

__all__ = ["PropertyPanel"]
