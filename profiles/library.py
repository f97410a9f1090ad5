"""
profiles/library.py

Standalone custom crosshair designs saved from the editor.

Designs are stored under ``crosshairs/`` in the data directory, separate
from profiles, so one design can be reused by several profiles. File
stems use the same case-preserving scheme as profiles/store.py.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, List, Optional

from errors import PersistenceError, ValidationError
from models import CrosshairProfile
from profiles.store import (
    is_valid_name,
    list_names,
    name_to_file_stem,
    read_json,
    validate_name,
    write_json_atomic,
)

log = logging.getLogger(__name__)

LIBRARY_DIR_NAME = "crosshairs"


class CrosshairLibrary:
    """Save, load, list and delete named CrosshairProfile designs."""

    def __init__(self, data_dir: Path):
        self.root = Path(data_dir) / LIBRARY_DIR_NAME

    def path_for(self, name: Any) -> Optional[Path]:
        """File holding design ``name``, or None if the name is not a usable key."""
        if not is_valid_name(name):
            return None
        return self.root / f"{name_to_file_stem(name)}.json"

    def save(self, profile: CrosshairProfile) -> Path:
        """Write ``profile`` (overwriting a design of the same name)."""
        name = validate_name(profile.name, "crosshair")
        profile.name = name
        path = self.path_for(name)
        try:
            write_json_atomic(path, profile.to_dict())
        except OSError as e:
            log.exception("Failed to save crosshair %r to %s", name, path)
            raise PersistenceError(f"Could not save crosshair {name!r}: {e}") from e
        log.info("Saved crosshair %r (%d elements)", name, len(profile.elements))
        return path

    def load(self, name: str) -> Optional[CrosshairProfile]:
        """Return the design called ``name``, or None if missing or not a valid name.

        Raises:
            ValidationError: If the file exists but holds invalid element data.
        """
        path = self.path_for(name)
        if path is None:
            return None
        data = read_json(path)
        if data is None:
            return None
        profile = CrosshairProfile.from_dict(data)
        profile.name = name
        return profile

    def load_file(self, path: Path) -> CrosshairProfile:
        """Load a design from an arbitrary file chosen by the user."""
        data = read_json(Path(path))
        if data is None:
            raise ValidationError(f"{Path(path).name} is not a readable crosshair file.")
        return CrosshairProfile.from_dict(data)

    def list(self) -> List[str]:
        return sorted(list_names(self.root))

    def delete(self, name: str) -> bool:
        path = self.path_for(name)
        if path is None or not path.is_file():
            return False
        try:
            path.unlink()
        except OSError:
            log.exception("Failed to delete crosshair %r", name)
            return False
        log.info("Deleted crosshair %r", name)
        return True
