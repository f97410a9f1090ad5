"""Tests for profiles/store.py: JSON profile files and last-used tracking."""
from __future__ import annotations

import json

import pytest

from errors import PersistenceError, ValidationError
from models import CrosshairElement, CrosshairProfile, CrosshairType, ProfileRecord, ShapeKind
from profiles.store import JsonProfileStore, file_stem_to_name, name_to_file_stem, validate_name


@pytest.fixture()
def store(tmp_path):
    return JsonProfileStore(tmp_path)


def _custom_record(name="P1"):
    design = CrosshairProfile("Ring", [
        CrosshairElement(kind=ShapeKind.CIRCLE, x1=-4, y1=-4, width=8, height=8, thickness=1.5, color="Cyan"),
        CrosshairElement(kind=ShapeKind.LINE, x1=0, y1=-10, x2=0, y2=10),
    ])
    return ProfileRecord(name=name, crosshair_enabled=False, selected_game_window="Notepad",
                         selected_color="Green", crosshair_thickness=3.5, crosshair_size=42,
                         crosshair_type=CrosshairType.CUSTOM, custom_crosshair=design)


class TestSaveLoad:
    def test_saved_record_reloads_equal(self, store, tmp_path):
        rec = _custom_record()
        store.save(rec)
        again = JsonProfileStore(tmp_path).load("P1")
        assert again == rec
        assert "P1" in store.list()

    def test_save_marks_last_used(self, store):
        store.save(ProfileRecord(name="Sniper"))
        assert store.get_last_used() == "Sniper"

    def test_file_layout(self, store, tmp_path):
        store.save(ProfileRecord(name="P1"))
        data = json.loads((tmp_path / "profiles" / "^p1.json").read_text(encoding="utf-8"))
        assert data["crosshairType"] == "Classic"
        assert data["customCrosshairData"] is None
        config = json.loads((tmp_path / "config.json").read_text(encoding="utf-8"))
        assert config == {"lastUsedProfile": "P1"}

    def test_overwrite_replaces_content(self, store):
        store.save(ProfileRecord(name="P1", crosshair_size=10))
        store.save(ProfileRecord(name="P1", crosshair_size=60))
        assert store.load("P1").crosshair_size == 60
        assert store.list().count("P1") == 1

    def test_missing_profile_gives_defaults(self, store):
        rec = store.load("Nope")
        assert rec == ProfileRecord(name="Nope")

    def test_corrupt_profile_gives_defaults(self, store, tmp_path):
        (tmp_path / "profiles").mkdir()
        (tmp_path / "profiles" / "^bad.json").write_text("{not json", encoding="utf-8")
        assert store.load("Bad") == ProfileRecord(name="Bad")

    def test_file_name_wins_over_embedded_name(self, store, tmp_path):
        store.save(ProfileRecord(name="Real"))
        path = store.path_for("Real")
        data = json.loads(path.read_text(encoding="utf-8"))
        data["name"] = "Stale"
        path.write_text(json.dumps(data), encoding="utf-8")
        assert store.load("Real").name == "Real"

    @pytest.mark.parametrize("name", ["", "  ", "a/b", "x:y", ".hidden"])
    def test_bad_names_rejected(self, store, name):
        with pytest.raises(ValidationError):
            store.save(ProfileRecord(name=name))

    def test_write_failure_raises_persistence_error(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("file, not a directory", encoding="utf-8")
        store = JsonProfileStore(blocker)
        with pytest.raises(PersistenceError):
            store.save(ProfileRecord(name="P1"))


class TestListDelete:
    def test_default_always_listed_first(self, store):
        store.save(ProfileRecord(name="zeta"))
        store.save(ProfileRecord(name="Alpha"))
        assert store.list() == ["Default", "Alpha", "zeta"]

    def test_empty_store_lists_default(self, store):
        assert store.list() == ["Default"]

    def test_default_cannot_be_deleted(self, store):
        store.save(ProfileRecord(name="Default", crosshair_size=33))
        assert store.delete("Default") is False
        assert store.load("Default").crosshair_size == 33

    def test_delete_unknown(self, store):
        assert store.delete("Ghost") is False

    def test_delete_last_used_resets_to_default(self, store):
        store.save(ProfileRecord(name="P1"))
        assert store.delete("P1") is True
        assert "P1" not in store.list()
        assert store.get_last_used() == "Default"

    def test_delete_other_keeps_last_used(self, store):
        store.save(ProfileRecord(name="P1"))
        store.save(ProfileRecord(name="P2"))
        store.delete("P1")
        assert store.get_last_used() == "P2"


class TestLastUsed:
    def test_fresh_store(self, store):
        assert store.get_last_used() == "Default"

    def test_vanished_profile_falls_back(self, store, tmp_path):
        store.save(ProfileRecord(name="P1"))
        store.path_for("P1").unlink()
        assert store.get_last_used() == "Default"

    def test_corrupt_config_falls_back(self, store, tmp_path):
        (tmp_path / "config.json").write_text("[]", encoding="utf-8")
        assert store.get_last_used() == "Default"


class TestCreate:
    def test_create_new(self, store):
        store.create(ProfileRecord(name="Fresh"))
        assert store.exists("Fresh")

    def test_create_duplicate_rejected(self, store):
        store.create(ProfileRecord(name="Fresh"))
        with pytest.raises(ValidationError):
            store.create(ProfileRecord(name="Fresh"))


class TestValidateName:
    def test_strips(self):
        assert validate_name("  Sniper ") == "Sniper"

    def test_message_mentions_kind(self):
        with pytest.raises(ValidationError, match="crosshair"):
            validate_name("", "crosshair")


class TestNameKeys:
    @pytest.mark.parametrize("name", ["../config", "..", "a/b", "  P1", ""])
    def test_invalid_names_are_not_found(self, store, tmp_path, name):
        store.save(ProfileRecord(name="P1"))
        assert store.exists(name) is False
        assert store.delete(name) is False
        assert (tmp_path / "config.json").is_file()
        assert store.path_for(name) is None

    def test_load_outside_profiles_dir_gives_defaults(self, store, tmp_path):
        store.save(ProfileRecord(name="P1", crosshair_size=55))
        rec = store.load("../config")
        assert rec == ProfileRecord(name="../config")

    def test_names_differing_only_in_case_are_separate(self, store, tmp_path):
        store.save(ProfileRecord(name="P1", selected_color="Blue"))
        store.create(ProfileRecord(name="p1", selected_color="Cyan"))
        assert store.load("P1").selected_color == "Blue"
        assert store.load("p1").selected_color == "Cyan"
        assert store.list() == ["Default", "P1", "p1"]
        # Distinct even on a case-insensitive file system
        stems = {p.name.lower() for p in (tmp_path / "profiles").glob("*.json")}
        assert len(stems) == 2

    def test_delete_is_case_sensitive(self, store):
        store.save(ProfileRecord(name="P1"))
        assert store.delete("p1") is False
        assert store.exists("P1")

    def test_foreign_files_not_listed(self, store, tmp_path):
        (tmp_path / "profiles").mkdir()
        (tmp_path / "profiles" / "Stray.json").write_text("{}", encoding="utf-8")
        assert store.list() == ["Default"]


class TestFileStems:
    @pytest.mark.parametrize("name,stem", [
        ("p1", "p1"),
        ("P1", "^p1"),
        ("A^b", "^a^^b"),
        ("Öl 2", "^öl 2"),
        ("Default", "^default"),
    ])
    def test_stem_round_trip(self, name, stem):
        assert name_to_file_stem(name) == stem
        assert file_stem_to_name(stem) == name

    @pytest.mark.parametrize("stem", ["^", "Upper", "^1", ".hidden"])
    def test_foreign_stems_rejected(self, stem):
        assert file_stem_to_name(stem) is None
