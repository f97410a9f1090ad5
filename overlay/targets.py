"""
overlay/targets.py

Target rectangle lookup for the overlay.

The target is either the primary screen or the first visible, non-minimized
top-level window whose title contains the selector (case-insensitive).
Window lookup uses win32gui and is only available on Windows; elsewhere
only the screen centre target resolves.
"""

from __future__ import annotations

import logging
import sys
from typing import Callable, List, NamedTuple, Optional

from PyQt6.QtGui import QGuiApplication

from models import CENTER_ON_SCREEN

if sys.platform == "win32":
    import win32gui
else:
    win32gui = None

log = logging.getLogger(__name__)


class TargetRect(NamedTuple):
    """Screen-space rectangle the overlay centres on."""
    x: int
    y: int
    width: int
    height: int

    @property
    def center(self):
        return self.x + self.width / 2, self.y + self.height / 2


def primary_screen_rect() -> Optional[TargetRect]:
    """Geometry of the primary screen, or None when there is no screen."""
    screen = QGuiApplication.primaryScreen()
    if screen is None:
        return None
    g = screen.geometry()
    return TargetRect(g.x(), g.y(), g.width(), g.height())


def _visible_windows():
    """(hwnd, title) pairs for visible top-level windows with a title."""
    found = []

    def callback(hwnd, acc):
        if win32gui.IsWindowVisible(hwnd):
            title = win32gui.GetWindowText(hwnd)
            if title:
                acc.append((hwnd, title))
        return True

    win32gui.EnumWindows(callback, found)
    return found


def find_window_rect(title_substring: str) -> Optional[TargetRect]:
    """Rectangle of the first visible window whose title contains the substring.

    Minimized windows are skipped; None if every match is minimized.
    """
    if win32gui is None or not title_substring:
        return None
    needle = title_substring.lower()
    for hwnd, title in _visible_windows():
        if needle not in title.lower():
            continue
        if win32gui.IsIconic(hwnd):
            continue
        left, top, right, bottom = win32gui.GetWindowRect(hwnd)
        return TargetRect(left, top, right - left, bottom - top)
    return None


def list_window_titles() -> List[str]:
    """Titles of visible top-level windows, for the target selector."""
    if win32gui is None:
        return []
    return sorted({title for _, title in _visible_windows()}, key=str.lower)


class TargetRectProvider:
    """
    Resolves a target selector to a screen rectangle once per tick.

    Args:
        screen_rect: Returns the screen target. Defaults to the primary screen.
        window_rect: Resolves a window-title substring. Defaults to win32 lookup.
    """

    def __init__(
        self,
        screen_rect: Callable[[], Optional[TargetRect]] = primary_screen_rect,
        window_rect: Callable[[str], Optional[TargetRect]] = find_window_rect,
    ):
        self._screen_rect = screen_rect
        self._window_rect = window_rect
        self._last_missing: Optional[str] = None

    def query_target_rect(self, selector: str) -> Optional[TargetRect]:
        """Rectangle for ``selector``; None hides the overlay for this tick."""
        if not selector or selector == CENTER_ON_SCREEN:
            return self._screen_rect()
        rect = self._window_rect(selector)
        if rect is None:
            # Only log transitions, this runs every tick
            if self._last_missing != selector:
                log.info("Target window %r not found or minimized", selector)
                self._last_missing = selector
        else:
            self._last_missing = None
        return rect
