"""Tests for the geometry kernel and viewport transform."""

import random

import pytest

from classboard.core.elements import (
    Circle, FreehandStroke, HighlighterStroke, ImageRef, LaserMark,
    LineSegment, Rectangle, TextLabel,
)
from classboard.core.geometry import (
    Rect,
    approximate_text_width,
    bounding_box,
    distance,
    distance_point_to_segment,
    elements_extent,
    point_in_circle,
    point_in_rect,
    point_near_points,
    shape_bounds,
    text_box,
)
from classboard.core.viewport import Viewport, clamp_scale


class TestRect:
    def test_edges(self):
        rect = Rect(10, 20, 30, 40)
        assert rect.right == 40
        assert rect.bottom == 60
        assert rect.center == (25, 40)

    def test_contains_is_inclusive(self):
        rect = Rect(0, 0, 10, 10)
        assert rect.contains((0, 0))
        assert rect.contains((10, 10))
        assert not rect.contains((10.01, 5))

    def test_expanded(self):
        assert Rect(10, 10, 20, 20).expanded(5) == Rect(5, 5, 30, 30)


class TestDistances:
    def test_distance(self):
        assert distance((0, 0), (3, 4)) == 5

    def test_segment_projection_inside(self):
        assert distance_point_to_segment((5, 3), (0, 0), (10, 0)) == pytest.approx(3)

    def test_segment_projection_clamped_to_endpoint(self):
        assert distance_point_to_segment((13, 4), (0, 0), (10, 0)) == pytest.approx(5)

    def test_degenerate_segment(self):
        assert distance_point_to_segment((3, 4), (0, 0), (0, 0)) == pytest.approx(5)


class TestPointTests:
    def test_point_near_points_is_strict(self):
        assert point_near_points((0, 9.99), [(0, 0)], 10)
        assert not point_near_points((0, 10), [(0, 0)], 10)

    def test_point_in_circle_includes_boundary(self):
        assert point_in_circle((30, 0), (0, 0), 30)
        assert not point_in_circle((30.1, 0), (0, 0), 30)

    def test_point_in_rect_with_margin(self):
        rect = Rect(0, 0, 10, 10)
        assert not point_in_rect((15, 5), rect)
        assert point_in_rect((15, 5), rect, margin=5)


class TestBounds:
    def test_text_width_estimate(self):
        assert approximate_text_width("Hello", "Arial", 10) == pytest.approx(30)

    def test_text_box_sits_above_baseline(self):
        label = TextLabel(id="t", x=10, y=50, text="Hi", font_size=20)
        assert text_box(label) == Rect(10, 30, 24, 20)

    def test_circle_bounds(self):
        circle = Circle(id="c", x=50, y=50, radius=20)
        assert shape_bounds(circle) == Rect(30, 30, 40, 40)

    def test_line_bounds_normalised(self):
        line = LineSegment(id="l", x1=100, y1=80, x2=20, y2=10)
        assert shape_bounds(line) == Rect(20, 10, 80, 70)

    def test_bounding_box_is_padded(self):
        rect = Rectangle(id="r", x=10, y=10, width=100, height=50)
        assert bounding_box(rect) == Rect(5, 5, 110, 60)

    def test_image_bounds(self):
        image = ImageRef(id="i", x=100, y=100, width=300, height=200, source_locator="a.png")
        assert shape_bounds(image) == Rect(100, 100, 300, 200)

    def test_laser_has_no_bounds(self):
        with pytest.raises(TypeError):
            bounding_box(LaserMark(x=1, y=1))

    def test_custom_measurer_is_used(self):
        label = TextLabel(id="t", x=0, y=20, text="abc", font_size=20)
        box = bounding_box(label, measure_text=lambda text, family, size: 100.0, padding=0)
        assert box.width == 100

    def test_every_stroke_point_lies_in_bounding_box(self):
        rng = random.Random(42)
        for index in range(50):
            points = [(rng.uniform(-500, 500), rng.uniform(-500, 500))
                      for _ in range(rng.randint(1, 30))]
            cls = FreehandStroke if index % 2 else HighlighterStroke
            stroke = cls(id=f"s{index}", points=points)
            box = bounding_box(stroke)
            assert all(box.contains(point) for point in stroke.points)

    def test_elements_extent(self):
        elements = [
            Rectangle(id="r", x=0, y=0, width=100, height=50),
            Circle(id="c", x=300, y=20, radius=10),
        ]
        assert elements_extent(elements) == (315, 55)

    def test_elements_extent_empty(self):
        assert elements_extent([]) == (0, 0)


class TestViewport:
    def test_identity_by_default(self):
        viewport = Viewport()
        assert viewport.screen_to_document((12, 34)) == (12, 34)

    def test_round_trip(self):
        viewport = Viewport(scale=2.0, offset_x=30, offset_y=-10)
        point = (17.5, 42.25)
        screen = viewport.document_to_screen(point)
        assert viewport.screen_to_document(screen) == pytest.approx(point)

    def test_scale_is_clamped(self):
        assert Viewport(scale=10).scale == 3.0
        assert Viewport(scale=0.1).scale == 0.5
        assert clamp_scale(1.7) == 1.7

    def test_zoom_steps(self):
        viewport = Viewport()
        assert viewport.zoom_in().scale == pytest.approx(1.1)
        assert viewport.zoom_out().scale == pytest.approx(0.9)

    def test_zoom_stops_at_limits(self):
        viewport = Viewport(scale=3.0)
        assert viewport.zoom_in().scale == 3.0
        assert Viewport(scale=0.5).zoom_out().scale == 0.5

    def test_zoom_about_keeps_anchor_fixed(self):
        viewport = Viewport(scale=1.0, offset_x=20, offset_y=40)
        anchor = (200, 150)
        before = viewport.screen_to_document(anchor)
        zoomed = viewport.zoom_about(anchor, 2.0)
        assert zoomed.scale == 2.0
        assert zoomed.screen_to_document(anchor) == pytest.approx(before)

    def test_pan_and_reset(self):
        viewport = Viewport(scale=1.5).panned(10, -5)
        assert (viewport.offset_x, viewport.offset_y) == (10, -5)
        assert viewport.reset() == Viewport()

    def test_zoom_percent(self):
        assert Viewport(scale=1.25).zoom_percent == 125
