"""
profiles/store.py

Named profile persistence.

Layout under the data directory::

    profiles/<stem>.json   one ProfileRecord per file
    config.json            {"lastUsedProfile": "..."}

Profile names are case-sensitive keys, but the file systems DotSight runs
on usually are not. The file stem therefore spells each uppercase letter
as ``^`` plus its lowercase form (and a literal ``^`` as ``^^``), so
"P1" is stored as ``^p1.json`` and "p1" as ``p1.json``.

Writes go to a temporary file in the same directory and are moved into
place with ``os.replace`` so a failed save never truncates the previous
file. A missing or unreadable profile is not an error: ``load`` hands back
a default record carrying the requested name.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, List, Optional

from errors import PersistenceError, ValidationError
from models import DEFAULT_PROFILE_NAME, AppConfig, ProfileRecord

log = logging.getLogger(__name__)

PROFILES_DIR_NAME = "profiles"
CONFIG_FILE_NAME = "config.json"

# Characters that cannot appear in a file name on at least one platform
_RESERVED_CHARS = set('<>:"/\\|?*')

# Marks an uppercase letter (or itself, doubled) in a file stem
_CASE_ESCAPE = "^"


def validate_name(name: Any, what: str = "profile") -> str:
    """Return ``name`` stripped, or raise ValidationError if it is unusable."""
    if not isinstance(name, str) or not name.strip():
        raise ValidationError(f"Please enter a {what} name.")
    name = name.strip()
    if name.startswith(".") or any(c in _RESERVED_CHARS or ord(c) < 32 for c in name):
        raise ValidationError(f"{what.capitalize()} name {name!r} contains characters that are not allowed.")
    return name


def is_valid_name(name: Any) -> bool:
    """True if ``name`` is already a usable key (valid and without padding)."""
    try:
        return validate_name(name) == name
    except ValidationError:
        return False


def _escapes_case(c: str) -> bool:
    low = c.lower()
    return c != low and len(low) == 1 and low.upper() == c


def name_to_file_stem(name: str) -> str:
    """File stem for ``name`` that stays unique on case-insensitive file systems."""
    out = []
    for c in name:
        if c == _CASE_ESCAPE:
            out.append(_CASE_ESCAPE * 2)
        elif _escapes_case(c):
            out.append(_CASE_ESCAPE + c.lower())
        else:
            out.append(c)
    return "".join(out)


def file_stem_to_name(stem: str) -> Optional[str]:
    """Inverse of ``name_to_file_stem``. None for stems it could not have produced."""
    out = []
    i = 0
    while i < len(stem):
        c = stem[i]
        if c != _CASE_ESCAPE:
            out.append(c)
            i += 1
            continue
        if i + 1 >= len(stem):
            return None
        nxt = stem[i + 1]
        out.append(_CASE_ESCAPE if nxt == _CASE_ESCAPE else nxt.upper())
        i += 2
    name = "".join(out)
    if not is_valid_name(name) or name_to_file_stem(name) != stem:
        return None
    return name


def list_names(directory: Path) -> List[str]:
    """Names of the ``*.json`` files in ``directory`` written by this module."""
    if not directory.is_dir():
        return []
    names = []
    for p in directory.glob("*.json"):
        if not p.is_file():
            continue
        name = file_stem_to_name(p.stem)
        if name is not None:
            names.append(name)
    return names


def write_json_atomic(path: Path, data: Any) -> None:
    """Write ``data`` as indented JSON to ``path`` via temp file + replace.

    Raises:
        OSError: If the directory cannot be created or the write fails.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(prefix=f".{path.stem}.", suffix=".tmp", dir=str(path.parent))
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
        os.replace(tmp, path)
    except BaseException:
        try:
            os.unlink(tmp)
        except OSError:
            pass
        raise


def read_json(path: Path) -> Optional[Any]:
    """Parse ``path`` as JSON. Missing or corrupt files give None."""
    if not path.exists():
        return None
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except (OSError, ValueError) as e:
        log.warning("Ignoring unreadable file %s: %s", path, e)
        return None


class ProfileStore:
    """Key-value store of ProfileRecords keyed by (case-sensitive) name."""

    def save(self, record: ProfileRecord) -> None:
        raise NotImplementedError

    def load(self, name: str) -> ProfileRecord:
        raise NotImplementedError

    def exists(self, name: str) -> bool:
        raise NotImplementedError

    def list(self) -> List[str]:
        raise NotImplementedError

    def delete(self, name: str) -> bool:
        raise NotImplementedError

    def get_last_used(self) -> str:
        raise NotImplementedError

    def set_last_used(self, name: str) -> None:
        raise NotImplementedError

    def create(self, record: ProfileRecord) -> None:
        """Save ``record`` as a new profile.

        Raises:
            ValidationError: If the name is empty or already taken.
            PersistenceError: If the write fails.
        """
        name = validate_name(record.name)
        if self.exists(name):
            raise ValidationError(f"A profile named {name!r} already exists.")
        self.save(record)


class JsonProfileStore(ProfileStore):
    """
    ProfileStore backed by one JSON file per profile.

    Names that ``validate_name`` would reject are never mapped to a path,
    so they read as "not found" instead of reaching outside ``profiles/``.

    Args:
        data_dir: Root directory; ``profiles/`` and ``config.json`` live here.
    """

    def __init__(self, data_dir: Path):
        self.data_dir = Path(data_dir)
        self.profiles_dir = self.data_dir / PROFILES_DIR_NAME
        self.config_path = self.data_dir / CONFIG_FILE_NAME

    def path_for(self, name: Any) -> Optional[Path]:
        """File holding profile ``name``, or None if the name is not a usable key."""
        if not is_valid_name(name):
            return None
        return self.profiles_dir / f"{name_to_file_stem(name)}.json"

    # ---- config.json ----

    def _load_config(self) -> AppConfig:
        return AppConfig.from_dict(read_json(self.config_path))

    def _save_config(self, config: AppConfig) -> None:
        try:
            write_json_atomic(self.config_path, config.to_dict())
        except OSError as e:
            log.exception("Failed to write %s", self.config_path)
            raise PersistenceError(f"Could not save app config: {e}") from e

    def get_last_used(self) -> str:
        """Name of the last used profile, or Default if it no longer exists."""
        name = self._load_config().last_used_profile
        if name != DEFAULT_PROFILE_NAME and not self.exists(name):
            return DEFAULT_PROFILE_NAME
        return name

    def set_last_used(self, name: str) -> None:
        self._save_config(AppConfig(last_used_profile=name))

    # ---- profiles ----

    def exists(self, name: str) -> bool:
        path = self.path_for(name)
        return path is not None and path.is_file()

    def save(self, record: ProfileRecord) -> None:
        """Write ``record`` and mark it last used.

        Raises:
            ValidationError: If the record's name is empty or unusable.
            PersistenceError: If the write fails; the previous file is kept.
        """
        name = validate_name(record.name)
        record.name = name
        path = self.path_for(name)
        try:
            write_json_atomic(path, record.to_dict())
        except OSError as e:
            log.exception("Failed to save profile %r to %s", name, path)
            raise PersistenceError(f"Could not save profile {name!r}: {e}") from e
        log.info("Saved profile %r", name)
        self.set_last_used(name)

    def load(self, name: str) -> ProfileRecord:
        """Return the stored record, or a default record named ``name``."""
        if not isinstance(name, str) or not name:
            name = DEFAULT_PROFILE_NAME
        path = self.path_for(name)
        if path is None:
            log.warning("Not a valid profile name: %r", name)
            return ProfileRecord(name=name)
        data = read_json(path)
        if data is None:
            log.info("Profile %r not found, using defaults", name)
            return ProfileRecord(name=name)
        record = ProfileRecord.from_dict(data)
        # The file name is the key; a stale "name" inside the file loses.
        record.name = name
        log.info("Loaded profile %r", name)
        return record

    def list(self) -> List[str]:
        """Profile names: Default first, then the rest sorted."""
        names = set(list_names(self.profiles_dir))
        names.discard(DEFAULT_PROFILE_NAME)
        return [DEFAULT_PROFILE_NAME] + sorted(names)

    def delete(self, name: str) -> bool:
        """Delete a profile. Default, unknown and invalid names return False."""
        if name == DEFAULT_PROFILE_NAME or not self.exists(name):
            return False
        try:
            self.path_for(name).unlink()
        except OSError:
            log.exception("Failed to delete profile %r", name)
            return False
        log.info("Deleted profile %r", name)
        if self._load_config().last_used_profile == name:
            self.set_last_used(DEFAULT_PROFILE_NAME)
        return True
