"""Tests for geometry.py: segment distance, containment and scaling."""
from __future__ import annotations

import math

import pytest

from geometry import BASE_SIZE, PICK_TOLERANCE, distance, distance_point_to_segment, rect_contains, scale


class TestDistancePointToSegment:
    def test_perpendicular_foot_inside_segment(self):
        assert distance_point_to_segment((5, 3), (0, 0), (10, 0)) == pytest.approx(3.0)

    def test_beyond_end_measures_to_endpoint(self):
        assert distance_point_to_segment((13, 4), (0, 0), (10, 0)) == pytest.approx(5.0)

    def test_before_start_measures_to_start(self):
        assert distance_point_to_segment((-3, -4), (0, 0), (10, 0)) == pytest.approx(5.0)

    @pytest.mark.parametrize("p,a", [((3, 4), (0, 0)), ((-2, 7), (1, 1)), ((0, 0), (0, 0))])
    def test_zero_length_segment_is_point_distance(self, p, a):
        assert distance_point_to_segment(p, a, a) == distance(p, a)

    def test_point_on_diagonal(self):
        assert distance_point_to_segment((5, 5), (0, 0), (10, 10)) == pytest.approx(0.0)

    def test_pick_tolerance_constant(self):
        assert PICK_TOLERANCE == 5.0


class TestRectContains:
    def test_inside(self):
        assert rect_contains((0, 0), 10, 10, (5, 5))

    def test_edges_inclusive(self):
        assert rect_contains((0, 0), 10, 10, (0, 0))
        assert rect_contains((0, 0), 10, 10, (10, 10))

    def test_outside(self):
        assert not rect_contains((0, 0), 10, 10, (10.5, 5))
        assert not rect_contains((-20, -20), 40, 40, (25, 0))

    def test_unpositioned_is_false(self):
        assert not rect_contains(None, 10, 10, (0, 0))

    def test_nan_anchor_is_false(self):
        assert not rect_contains((math.nan, 0), 10, 10, (0, 0))


class TestScale:
    @pytest.mark.parametrize("v", [0.0, 1.0, -7.5, 20.0])
    def test_double_size_doubles(self, v):
        assert scale(v, 40, 20) == 2 * v

    def test_base_size_is_identity(self):
        assert scale(13.0, BASE_SIZE) == 13.0

    def test_half_size(self):
        assert scale(10.0, 10) == 5.0
