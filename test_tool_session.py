"""Tests for the tool session state machine."""

import pytest

from classboard.core.document import add_element, change_options, new_document
from classboard.core.elements import (
    Circle, FreehandStroke, HighlighterStroke, LineSegment, Rectangle, TextLabel, LaserMark,
)
from classboard.core.geometry import bounding_box
from classboard.core.hit_testing import erase_at
from classboard.core.tool_session import GestureOutcome, ToolSession, ToolState


def document_with(**options):
    return change_options(new_document(), **options)


def drag(session, document, points):
    """Press at the first point, move through the rest, release at the last."""
    result = session.pointer_down(document, points[0])
    for point in points[1:]:
        session.pointer_move(point)
    return result, session.pointer_up(document)


class TestStates:
    def test_starts_idle(self):
        session = ToolSession()
        assert session.state == ToolState.IDLE
        assert session.draft is None

    def test_pointer_down_starts_draft(self):
        session = ToolSession()
        result = session.pointer_down(new_document(), (5, 5))
        assert result.outcome == GestureOutcome.STARTED
        assert session.state == ToolState.DRAFTING
        assert isinstance(session.draft, FreehandStroke)

    def test_move_and_up_when_idle_are_ignored(self):
        session = ToolSession()
        document = new_document()
        assert session.pointer_move((1, 1)) is None
        result = session.pointer_up(document)
        assert result.outcome == GestureOutcome.IGNORED
        assert result.document is document

    def test_abort_discards_draft(self):
        session = ToolSession()
        document = new_document()
        session.pointer_down(document, (0, 0))
        session.pointer_move((10, 10))
        assert session.abort() == GestureOutcome.DISCARDED
        assert session.state == ToolState.IDLE
        assert session.draft is None
        assert session.abort() == GestureOutcome.IGNORED

    def test_unknown_tool_is_ignored(self):
        session = ToolSession()
        document = document_with(tool="lasso")
        result = session.pointer_down(document, (0, 0))
        assert result.outcome == GestureOutcome.IGNORED
        assert result.document is document
        assert session.state == ToolState.IDLE


class TestDrawingTools:
    def test_rectangle_scenario(self):
        session = ToolSession()
        document = document_with(tool="rectangle", stroke_color="#000000", stroke_width=2)
        _, result = drag(session, document, [(10, 10), (110, 60)])

        assert result.outcome == GestureOutcome.COMMITTED
        elements = result.document.active_page.elements
        assert len(elements) == 1
        rect = elements[0]
        assert isinstance(rect, Rectangle)
        assert (rect.x, rect.y, rect.width, rect.height) == (10, 10, 100, 50)
        assert rect.stroke_color == "#000000"
        assert rect.stroke_width == 2

    def test_rectangle_drawn_backwards_is_normalised(self):
        session = ToolSession()
        _, result = drag(session, document_with(tool="rectangle"), [(110, 60), (10, 10)])
        rect = result.element
        assert (rect.x, rect.y, rect.width, rect.height) == (10, 10, 100, 50)

    def test_circle_radius_follows_pointer(self):
        session = ToolSession()
        _, result = drag(session, document_with(tool="circle"), [(50, 50), (53, 54)])
        circle = result.element
        assert isinstance(circle, Circle)
        assert (circle.x, circle.y) == (50, 50)
        assert circle.radius == pytest.approx(5)

    def test_line(self):
        session = ToolSession()
        _, result = drag(session, document_with(tool="line"), [(0, 0), (40, 10), (80, 20)])
        line = result.element
        assert isinstance(line, LineSegment)
        assert (line.x1, line.y1, line.x2, line.y2) == (0, 0, 80, 20)

    def test_release_point_is_applied(self):
        session = ToolSession()
        document = document_with(tool="line")
        session.pointer_down(document, (0, 0))
        result = session.pointer_up(document, (30, 40))
        assert (result.element.x2, result.element.y2) == (30, 40)

    def test_pen_stroke_records_points(self):
        session = ToolSession()
        points = [(0, 0), (10, 10), (20, 0), (30, 10)]
        _, result = drag(session, new_document(), points)
        stroke = result.element
        assert isinstance(stroke, FreehandStroke)
        assert stroke.points[0] == (0, 0)
        assert stroke.points[-1] == (30, 10)
        box = bounding_box(stroke)
        assert all(box.contains(point) for point in points)

    def test_pen_stroke_keeps_every_point(self):
        session = ToolSession()
        points = [(float(x), 0.0) for x in range(0, 202, 2)]
        _, result = drag(session, new_document(), points)
        assert result.element.points == tuple(points)

    def test_highlighter_triples_width(self):
        for width in (1, 2, 4.5):
            session = ToolSession()
            document = document_with(tool="highlighter", stroke_width=width)
            _, result = drag(session, document, [(0, 0), (10, 0)])
            assert isinstance(result.element, HighlighterStroke)
            assert result.element.stroke_width == pytest.approx(3 * width)

    def test_committed_ids_are_fresh(self):
        session = ToolSession()
        document = document_with(tool="circle")
        _, first = drag(session, document, [(0, 0), (5, 0)])
        _, second = drag(session, first.document, [(20, 20), (25, 20)])
        ids = second.document.active_page.element_ids
        assert len(ids) == 2
        assert len(set(ids)) == 2
        assert "draft" not in ids

    def test_draft_is_not_on_page(self):
        session = ToolSession()
        document = document_with(tool="rectangle")
        result = session.pointer_down(document, (0, 0))
        session.pointer_move((50, 50))
        assert result.document.active_page.elements == ()


class TestLaser:
    def test_laser_never_persists(self):
        session = ToolSession()
        document = document_with(tool="laser")
        before = len(document.active_page.elements)
        start, result = drag(session, document, [(0, 0), (10, 10), (20, 20)])

        assert isinstance(start.element, LaserMark)
        assert result.outcome == GestureOutcome.DISCARDED
        assert len(result.document.active_page.elements) == before
        assert result.document is document

    def test_laser_draft_follows_pointer(self):
        session = ToolSession()
        session.pointer_down(document_with(tool="laser", stroke_color="#00ff00"), (0, 0))
        session.pointer_move((40, 30))
        draft = session.draft
        assert (draft.x, draft.y) == (40, 30)
        assert draft.stroke_color == "#ff0000"


class TestText:
    def test_text_commits_immediately(self):
        session = ToolSession(prompt_text=lambda: "Hello")
        document = document_with(tool="text", font_size=20, font_family="Georgia")
        result = session.pointer_down(document, (10, 10))

        assert result.outcome == GestureOutcome.COMMITTED
        assert session.state == ToolState.IDLE
        label = result.document.active_page.elements[0]
        assert isinstance(label, TextLabel)
        assert label.text == "Hello"
        assert (label.x, label.y) == (10, 30)
        assert label.font_family == "Georgia"

    def test_cancelled_prompt_discards(self):
        session = ToolSession(prompt_text=lambda: None)
        document = document_with(tool="text")
        result = session.pointer_down(document, (10, 10))
        assert result.outcome == GestureOutcome.DISCARDED
        assert result.document is document

    def test_no_prompt_is_ignored(self):
        document = document_with(tool="text")
        result = ToolSession().pointer_down(document, (10, 10))
        assert result.outcome == GestureOutcome.IGNORED


class TestEraser:
    def test_eraser_removes_topmost(self):
        document = new_document()
        for index in range(3):
            document = add_element(document, Rectangle(id=f"r{index}", x=0, y=0, width=50, height=50))
        document = change_options(document, tool="eraser")

        result = ToolSession().pointer_down(document, (25, 25))
        assert result.outcome == GestureOutcome.ERASED
        assert result.document.active_page.element_ids == ["r0", "r1"]

    def test_eraser_miss_is_ignored(self):
        document = change_options(new_document(), tool="eraser")
        result = ToolSession().pointer_down(document, (25, 25))
        assert result.outcome == GestureOutcome.IGNORED
        assert result.document is document

    def test_eraser_does_not_draft(self):
        session = ToolSession()
        session.pointer_down(change_options(new_document(), tool="eraser"), (0, 0))
        assert session.state == ToolState.IDLE

    def test_dense_stroke_erased_at_midpoint(self):
        session = ToolSession()
        points = [(float(x), 0.0) for x in range(0, 202, 2)]
        _, drawn = drag(session, new_document(), points)
        assert len(drawn.document.active_page.elements) == 1

        erased = erase_at(drawn.document, (100, 0))
        assert erased.active_page.elements == ()
