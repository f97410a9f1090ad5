"""Tests for editor/engine.py: registry, hit-testing, drag and property edits."""
from __future__ import annotations

import pytest

from editor.engine import DEFAULT_SHAPE_SIZE, EditorEngine, default_element
from errors import ValidationError
from models import CrosshairElement, CrosshairProfile, ShapeKind


@pytest.fixture()
def engine():
    eng = EditorEngine(canvas_extent=400)
    eng.add_guides(20)
    return eng


@pytest.fixture()
def events(engine):
    seen = []
    engine.add_listener(lambda ev, eid: seen.append((ev, eid)))
    return seen


def _line(x1, y1, x2, y2, **kw):
    return CrosshairElement(kind=ShapeKind.LINE, x1=x1, y1=y1, x2=x2, y2=y2, **kw)


def _rect(x, y, w, h, **kw):
    return CrosshairElement(kind=ShapeKind.RECTANGLE, x1=x, y1=y, width=w, height=h, **kw)


class TestGuides:
    def test_grid_covers_canvas(self, engine):
        guides = [eid for eid in engine.ids() if engine.is_guide(eid)]
        # 21 offsets from -200 to 200, one vertical and one horizontal each
        assert len(guides) == 42
        assert engine.shape_ids() == []

    def test_guides_stay_beneath_shapes(self):
        eng = EditorEngine()
        eid = eng.add_shape(ShapeKind.LINE)
        eng.add_guides(100)
        assert eng.ids()[-1] == eid

    def test_non_positive_spacing_rejected(self):
        with pytest.raises(ValidationError):
            EditorEngine().add_guides(0)

    def test_guides_never_selected(self, engine):
        guide = engine.ids()[0]
        engine.select(guide)
        assert engine.selection is None
        # Point on a guide line, away from any shape
        assert engine.hit_test((-200, 0)) is None

    def test_clear_all_keeps_guides(self, engine):
        engine.add_shape(ShapeKind.LINE)
        engine.add_shape(ShapeKind.CIRCLE)
        n_guides = len(engine.ids()) - 2
        engine.clear_all()
        assert engine.shape_ids() == []
        assert len(engine.ids()) == n_guides
        assert engine.selection is None


class TestAddDelete:
    def test_add_shape_selects_and_uses_defaults(self, engine):
        eid = engine.add_shape(ShapeKind.LINE)
        assert engine.selection == eid
        elem = engine.element(eid)
        assert (elem.x1, elem.y1, elem.x2, elem.y2) == (-20, 0, 20, 0)
        assert elem.color == "Red"
        assert elem.thickness == 2.0

    @pytest.mark.parametrize("kind", [ShapeKind.CIRCLE, ShapeKind.RECTANGLE])
    def test_box_defaults_centred(self, engine, kind):
        elem = engine.element(engine.add_shape(kind))
        assert (elem.x1, elem.y1) == (-20, -20)
        assert (elem.width, elem.height) == (DEFAULT_SHAPE_SIZE, DEFAULT_SHAPE_SIZE)

    def test_unknown_kind_rejected(self):
        with pytest.raises(ValidationError):
            default_element("Star")

    def test_delete_selected(self, engine, events):
        eid = engine.add_shape(ShapeKind.RECTANGLE)
        engine.delete_selected()
        assert eid not in engine.ids()
        assert engine.selection is None
        assert ("removed", eid) in events

    def test_delete_without_selection_is_noop(self, engine):
        engine.add_shape(ShapeKind.RECTANGLE)
        engine.select(None)
        before = engine.ids()
        engine.delete_selected()
        assert engine.ids() == before


class TestHitTest:
    def test_later_shape_wins_on_overlap(self, engine):
        first = engine.add_element(_rect(-10, -10, 20, 20))
        second = engine.add_element(_rect(-5, -5, 20, 20))
        assert engine.hit_test((0, 0)) == second
        assert engine.selection == second
        assert first != second

    def test_line_tolerance(self, engine):
        eid = engine.add_element(_line(0, 0, 10, 0))
        assert engine.hit_test((5, 5)) == eid
        assert engine.hit_test((5, 5.5)) is None

    def test_miss_clears_selection(self, engine):
        engine.add_shape(ShapeKind.CIRCLE)
        assert engine.selection is not None
        assert engine.hit_test((150, 150)) is None
        assert engine.selection is None

    def test_circle_uses_bounding_box(self, engine):
        eid = engine.add_element(CrosshairElement(kind=ShapeKind.CIRCLE, x1=0, y1=0, width=10, height=10))
        # Corner of the box, outside the inscribed circle, still picks
        assert engine.hit_test((0.5, 0.5)) == eid


class TestDrag:
    def test_line_drag_moves_both_endpoints(self, engine):
        eid = engine.add_element(_line(0, 0, 10, 0))
        engine.hit_test((5, 0))
        assert engine.begin_drag((5, 0))
        engine.update_drag((8, 4))
        engine.update_drag((12, -3))
        engine.end_drag()
        elem = engine.element(eid)
        assert (elem.x1, elem.y1, elem.x2, elem.y2) == (7, -3, 17, -3)

    def test_rect_drag_moves_anchor_only(self, engine):
        eid = engine.add_element(_rect(0, 0, 10, 20))
        engine.hit_test((1, 1))
        engine.begin_drag((1, 1))
        engine.update_drag((4, 6))
        elem = engine.element(eid)
        assert (elem.x1, elem.y1, elem.width, elem.height) == (3, 5, 10, 20)

    def test_begin_requires_selection(self, engine):
        assert engine.begin_drag((0, 0)) is False
        assert not engine.is_dragging

    def test_update_outside_drag_ignored(self, engine):
        eid = engine.add_element(_rect(0, 0, 10, 10))
        engine.select(eid)
        engine.update_drag((50, 50))
        assert engine.element(eid).x1 == 0

    def test_nested_begin_restarts_from_new_point(self, engine):
        eid = engine.add_element(_rect(0, 0, 10, 10))
        engine.select(eid)
        engine.begin_drag((0, 0))
        engine.update_drag((5, 0))
        engine.begin_drag((100, 100))
        engine.update_drag((101, 100))
        assert engine.element(eid).x1 == 6

    def test_drag_emits_changed(self, engine, events):
        eid = engine.add_element(_rect(0, 0, 10, 10))
        engine.select(eid)
        engine.begin_drag((0, 0))
        engine.update_drag((1, 1))
        assert events[-1] == ("changed", eid)


class TestPropertyEdits:
    def test_set_position_preserves_line_vector(self, engine):
        eid = engine.add_element(_line(1.1, 2.2, 4.7, -3.3))
        engine.select(eid)
        elem = engine.element(eid)
        vector = (elem.x2 - elem.x1, elem.y2 - elem.y1)
        engine.set_position(-13.37, 42.42)
        assert (elem.x1, elem.y1) == (-13.37, 42.42)
        assert (elem.x2 - elem.x1, elem.y2 - elem.y1) == pytest.approx(vector)
        assert elem.x2 == -13.37 + vector[0]
        assert elem.y2 == 42.42 + vector[1]

    def test_set_position_box(self, engine):
        eid = engine.add_shape(ShapeKind.RECTANGLE)
        engine.set_position(5, 6)
        elem = engine.element(eid)
        assert (elem.x1, elem.y1, elem.width) == (5, 6, DEFAULT_SHAPE_SIZE)

    def test_set_end_position_lines_only(self, engine):
        engine.add_shape(ShapeKind.RECTANGLE)
        assert engine.set_end_position(1, 1) is False
        eid = engine.add_shape(ShapeKind.LINE)
        assert engine.set_end_position(30, 7)
        assert (engine.element(eid).x2, engine.element(eid).y2) == (30, 7)

    def test_set_size(self, engine):
        eid = engine.add_shape(ShapeKind.CIRCLE)
        assert engine.set_size(8, 12)
        assert (engine.element(eid).width, engine.element(eid).height) == (8, 12)
        with pytest.raises(ValidationError):
            engine.set_size(-1, 4)

    def test_set_thickness_and_color(self, engine):
        eid = engine.add_shape(ShapeKind.LINE)
        engine.set_thickness(3.5)
        engine.set_color("Magenta")
        assert engine.element(eid).thickness == 3.5
        assert engine.element(eid).color == "Magenta"
        with pytest.raises(ValidationError):
            engine.set_color("Purple")
        with pytest.raises(ValidationError):
            engine.set_thickness(-1)

    def test_set_filled_noop_for_line(self, engine):
        eid = engine.add_shape(ShapeKind.LINE)
        assert engine.set_filled(True) is False
        assert engine.element(eid).filled is False
        rid = engine.add_shape(ShapeKind.RECTANGLE)
        assert engine.set_filled(True)
        assert engine.element(rid).filled is True

    def test_edits_without_selection_return_false(self, engine):
        assert engine.set_position(1, 1) is False
        assert engine.set_thickness(1) is False


class TestSpanningLines:
    def test_end_position_refused(self, engine, events):
        eid = engine.add_element(_line(-200, 0, 0, 0))
        engine.select(eid)
        events.clear()
        with pytest.raises(ValidationError):
            engine.set_end_position(200, 0)
        elem = engine.element(eid)
        assert (elem.x1, elem.y1, elem.x2, elem.y2) == (-200, 0, 0, 0)
        assert eid in engine.shape_ids()
        assert engine.selection == eid
        assert events == []

    def test_position_refused_keeps_vector(self, engine):
        eid = engine.add_element(_line(0, -50, 0, 350))
        engine.select(eid)
        with pytest.raises(ValidationError):
            engine.set_position(10, -200)
        elem = engine.element(eid)
        assert (elem.x1, elem.y1, elem.x2, elem.y2) == (0, -50, 0, 350)
        assert engine.set_position(10, -190)
        assert not engine.is_guide(eid)

    def test_drag_step_onto_guide_shape_skipped(self, engine):
        eid = engine.add_element(_line(-210, 0, 190, 0))
        engine.select(eid)
        engine.begin_drag((0, 0))
        engine.update_drag((10, 0))
        elem = engine.element(eid)
        assert (elem.x1, elem.x2) == (-210, 190)
        engine.update_drag((25, 0))
        assert (elem.x1, elem.x2) == (-195, 205)
        assert eid in engine.shape_ids()

    def test_partial_lines_allowed(self, engine):
        eid = engine.add_shape(ShapeKind.LINE)
        assert engine.set_end_position(200, 0)
        assert engine.set_position(-199, 0)
        assert eid in engine.shape_ids()


class TestProfileConversion:
    def _populate(self, engine):
        engine.add_element(_line(0, 0, 10, 0, color="Red", thickness=2))
        engine.add_element(CrosshairElement(kind=ShapeKind.CIRCLE, x1=-3, y1=-3, width=6, height=6,
                                            filled=True, color="Green", thickness=1))
        engine.add_element(_rect(-50, -50, 100, 100, color="White", thickness=0.5))

    def test_export_skips_guides_and_keeps_order(self, engine):
        self._populate(engine)
        profile = engine.export_profile("Mine")
        assert profile.name == "Mine"
        assert [e.kind for e in profile.elements] == ["Line", "Circle", "Rectangle"]

    @pytest.mark.parametrize("name", ["", "   ", None])
    def test_export_requires_name(self, engine, name):
        with pytest.raises(ValidationError):
            engine.export_profile(name)

    def test_export_import_export_identical(self, engine):
        self._populate(engine)
        first = engine.export_profile("RT")
        engine.import_profile(first)
        second = engine.export_profile("RT")
        assert second == first
        assert [e.to_dict() for e in second.elements] == [e.to_dict() for e in first.elements]

    def test_import_replaces_shapes(self, engine):
        engine.add_shape(ShapeKind.RECTANGLE)
        ids = engine.import_profile(CrosshairProfile("P", [_line(0, 0, 5, 5)]))
        assert engine.shape_ids() == ids
        assert len(ids) == 1

    def test_import_does_not_alias_profile_elements(self, engine):
        profile = CrosshairProfile("P", [_line(0, 0, 5, 5)])
        (eid,) = engine.import_profile(profile)
        engine.select(eid)
        engine.set_position(100, 100)
        assert profile.elements[0].x1 == 0
