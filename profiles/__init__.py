"""Profile and crosshair design persistence."""

from profiles.library import CrosshairLibrary
from profiles.store import JsonProfileStore, ProfileStore

__all__ = ["CrosshairLibrary", "JsonProfileStore", "ProfileStore"]
