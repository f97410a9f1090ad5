"""Tests for profiles/library.py."""
from __future__ import annotations

import pytest

from errors import ValidationError
from models import CrosshairElement, CrosshairProfile, ShapeKind
from profiles.library import CrosshairLibrary


@pytest.fixture()
def library(tmp_path):
    return CrosshairLibrary(tmp_path)


def _design(name="Dot"):
    return CrosshairProfile(name, [
        CrosshairElement(kind=ShapeKind.CIRCLE, x1=-2, y1=-2, width=4, height=4, filled=True, color="Green"),
    ])


class TestCrosshairLibrary:
    def test_save_and_load(self, library, tmp_path):
        path = library.save(_design())
        assert path == tmp_path / "crosshairs" / "^dot.json"
        assert library.load("Dot") == _design()

    def test_list_sorted(self, library):
        library.save(_design("b"))
        library.save(_design("A"))
        assert library.list() == ["A", "b"]

    def test_missing(self, library):
        assert library.load("nothing") is None
        assert library.list() == []

    def test_delete(self, library):
        library.save(_design())
        assert library.delete("Dot") is True
        assert library.delete("Dot") is False
        assert library.load("Dot") is None

    def test_empty_name_rejected(self, library):
        with pytest.raises(ValidationError):
            library.save(_design(""))

    def test_load_file(self, library, tmp_path):
        path = library.save(_design("Shared"))
        assert library.load_file(path).elements == _design().elements

    def test_load_file_unreadable(self, library, tmp_path):
        bad = tmp_path / "bad.json"
        bad.write_text("nope", encoding="utf-8")
        with pytest.raises(ValidationError):
            library.load_file(bad)

    def test_invalid_elements_rejected(self, library, tmp_path):
        bad = tmp_path / "bad.json"
        bad.write_text('{"name": "x", "elements": [{"elementType": "Star"}]}', encoding="utf-8")
        with pytest.raises(ValidationError):
            library.load_file(bad)

    def test_invalid_name_not_found(self, library, tmp_path):
        library.save(_design())
        (tmp_path / "keep.json").write_text("{}", encoding="utf-8")
        assert library.load("../keep") is None
        assert library.delete("../keep") is False
        assert (tmp_path / "keep.json").is_file()

    def test_case_sensitive_names(self, library):
        library.save(_design("Dot"))
        library.save(_design("dot"))
        assert library.list() == ["Dot", "dot"]
        assert library.delete("dot") is True
        assert library.load("Dot") is not None
