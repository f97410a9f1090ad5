"""
settings.py

Persistent settings management for DotSight.

Handles cross-platform settings storage using TOML format with platformdirs
for proper user config directory detection.

Settings file location:
    - Windows: %APPDATA%/dotsight/settings.toml
    - macOS: ~/Library/Application Support/dotsight/settings.toml
    - Linux: ~/.config/dotsight/settings.toml

Profiles themselves are not stored here; see profiles/store.py.
If settings.toml is corrupted, the defaults below are used.
"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import platformdirs

# TOML reading - use tomllib for Python 3.11+, tomli for earlier versions
if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

import tomli_w

APP_NAME = "dotsight"

log = logging.getLogger(__name__)

# Global settings manager instance (singleton)
_settings_manager: Optional["SettingsManager"] = None


def get_settings() -> "SettingsManager":
    """Get the global settings manager instance.

    Returns:
        The singleton SettingsManager instance.
    """
    global _settings_manager
    if _settings_manager is None:
        _settings_manager = SettingsManager()
    return _settings_manager


# =============================================================================
# General Settings
# =============================================================================

@dataclass
class GeneralSettings:
    """General application settings.

    Defaults:
        data_dir: "" (platformdirs user data dir)
        log_level: "INFO"
    """
    data_dir: str = ""        # Default: "" -> platformdirs.user_data_dir("dotsight")
    log_level: str = "INFO"   # Default: "INFO"


# =============================================================================
# Editor Settings
# =============================================================================

@dataclass
class EditorSettings:
    """Crosshair editor canvas settings.

    Defaults:
        canvas_extent: 400
        grid_spacing: 20
        pick_tolerance: 5.0
        default_color: "Red"
        default_thickness: 2.0
        guide_color: "#3C3C3C"
        selection_color: "#0078D7"
        wheel_zoom_factor: 1.15
    """
    canvas_extent: int = 400              # Default: 400 units, centred on the origin
    grid_spacing: int = 20                # Default: 20 units between guide lines
    pick_tolerance: float = 5.0           # Default: 5.0 units for line hit-testing
    default_color: str = "Red"            # Default: "Red"
    default_thickness: float = 2.0        # Default: 2.0
    guide_color: str = "#3C3C3C"          # Default: dark gray
    selection_color: str = "#0078D7"      # Default: blue
    wheel_zoom_factor: float = 1.15       # Default: 1.15 (15% per scroll step)


# =============================================================================
# Overlay Settings
# =============================================================================

@dataclass
class OverlaySettings:
    """Overlay window settings.

    Defaults:
        window_size: 200
        tick_interval_ms: 100
        base_size: 20.0
    """
    window_size: int = 200           # Default: 200 pixels square
    tick_interval_ms: int = 100      # Default: 100 ms between target re-queries
    base_size: float = 20.0          # Default: 20.0 (size at which custom designs draw 1:1)


# =============================================================================
# Main App Settings
# =============================================================================

@dataclass
class AppSettings:
    """Application settings with default values.

    Attributes:
        general: Data directory and logging.
        editor: Editor canvas settings.
        overlay: Overlay window settings.
    """
    general: GeneralSettings = field(default_factory=GeneralSettings)
    editor: EditorSettings = field(default_factory=EditorSettings)
    overlay: OverlaySettings = field(default_factory=OverlaySettings)


# =============================================================================
# Settings Manager
# =============================================================================

class SettingsManager:
    """Manages loading, saving, and accessing application settings.

    Settings are stored in a TOML file at the platform-appropriate location.
    If the settings file doesn't exist, defaults are used and the file is
    created on first save.

    Args:
        app_name: Application name used for the config directory.
        settings_dir: Override for the config directory (used by tests).
    """

    def __init__(self, app_name: str = APP_NAME, settings_dir: Optional[Path] = None):
        self.app_name = app_name
        self.settings_dir = Path(settings_dir) if settings_dir else Path(platformdirs.user_config_dir(app_name))
        self.settings_file = self.settings_dir / "settings.toml"
        self.settings = self.load()
        self._needs_save = not self.settings_file.exists()  # Save if file didn't exist

    def ensure_file_complete(self) -> None:
        """Ensure settings file exists with all sections. Call once at startup."""
        if self._needs_save or not self.settings_file.exists():
            self.save()
            self._needs_save = False

    def load(self) -> AppSettings:
        """Load settings from the TOML file.

        Returns:
            AppSettings instance with values from file or defaults if file
            doesn't exist or is invalid.
        """
        if not self.settings_file.exists():
            return AppSettings()

        try:
            with open(self.settings_file, "rb") as f:
                data = tomllib.load(f)

            return self._parse_toml(data)
        except (OSError, tomllib.TOMLDecodeError) as e:
            log.warning("Ignoring unreadable settings file %s: %s", self.settings_file, e)
            return AppSettings()

    def _parse_toml(self, data: Dict[str, Any]) -> AppSettings:
        """Parse TOML data into AppSettings.

        Args:
            data: Parsed TOML dictionary.

        Returns:
            AppSettings instance populated from TOML data.
        """
        settings = AppSettings()

        # General section
        general = data.get("general", {})
        settings.general.data_dir = general.get("data_dir", settings.general.data_dir)
        settings.general.log_level = general.get("log_level", settings.general.log_level)

        # Editor section
        ed = data.get("editor", {})
        settings.editor.canvas_extent = ed.get("canvas_extent", settings.editor.canvas_extent)
        settings.editor.grid_spacing = ed.get("grid_spacing", settings.editor.grid_spacing)
        settings.editor.pick_tolerance = ed.get("pick_tolerance", settings.editor.pick_tolerance)
        settings.editor.default_color = ed.get("default_color", settings.editor.default_color)
        settings.editor.default_thickness = ed.get("default_thickness", settings.editor.default_thickness)
        settings.editor.guide_color = ed.get("guide_color", settings.editor.guide_color)
        settings.editor.selection_color = ed.get("selection_color", settings.editor.selection_color)
        settings.editor.wheel_zoom_factor = ed.get("wheel_zoom_factor", settings.editor.wheel_zoom_factor)

        # Overlay section
        ov = data.get("overlay", {})
        settings.overlay.window_size = ov.get("window_size", settings.overlay.window_size)
        settings.overlay.tick_interval_ms = ov.get("tick_interval_ms", settings.overlay.tick_interval_ms)
        settings.overlay.base_size = ov.get("base_size", settings.overlay.base_size)

        return settings

    def save(self) -> None:
        """Save current settings to the TOML file.

        Creates the settings directory if it doesn't exist.
        """
        # Ensure directory exists
        self.settings_dir.mkdir(parents=True, exist_ok=True)

        # Convert settings to TOML structure
        data = self._to_toml_dict()

        with open(self.settings_file, "wb") as f:
            tomli_w.dump(data, f)

    def _to_toml_dict(self) -> Dict[str, Any]:
        """Convert settings to a TOML-compatible dictionary structure.

        Returns:
            Dictionary organized by TOML sections.
        """
        s = self.settings
        return {
            "general": {
                "data_dir": s.general.data_dir,
                "log_level": s.general.log_level,
            },
            "editor": {
                "canvas_extent": s.editor.canvas_extent,
                "grid_spacing": s.editor.grid_spacing,
                "pick_tolerance": s.editor.pick_tolerance,
                "default_color": s.editor.default_color,
                "default_thickness": s.editor.default_thickness,
                "guide_color": s.editor.guide_color,
                "selection_color": s.editor.selection_color,
                "wheel_zoom_factor": s.editor.wheel_zoom_factor,
            },
            "overlay": {
                "window_size": s.overlay.window_size,
                "tick_interval_ms": s.overlay.tick_interval_ms,
                "base_size": s.overlay.base_size,
            },
        }

    def to_toml(self) -> str:
        """Convert current settings to a TOML-formatted string.

        Returns:
            TOML representation of the current settings.
        """
        data = self._to_toml_dict()
        return tomli_w.dumps(data)

    def get_data_dir(self) -> Path:
        """Get the resolved directory for profiles and saved designs.

        Returns:
            Path to the data directory. Falls back to the platformdirs user
            data directory if data_dir setting is empty.
        """
        if self.settings.general.data_dir:
            return Path(self.settings.general.data_dir)
        return Path(platformdirs.user_data_dir(self.app_name))

    def get_log_dir(self) -> Path:
        """Get the platform log directory."""
        return Path(platformdirs.user_log_dir(self.app_name))

    def get_settings_path(self) -> Path:
        """Get the path to the settings file.

        Returns:
            Path object pointing to the settings file location.
        """
        return self.settings_file
