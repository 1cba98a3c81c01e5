"""Tests for element variants, drawing options and element records."""

import pytest

from classboard.core.elements import (
    Circle,
    ElementValidationError,
    FreehandStroke,
    HighlighterStroke,
    ImageRef,
    LaserMark,
    LineSegment,
    Rectangle,
    TextLabel,
    element_from_dict,
    element_to_dict,
    is_page_element,
    new_element_id,
)
from classboard.core.options import DrawingOptions, Tool


class TestElementVariants:
    def test_stroke_points_are_normalised(self):
        stroke = FreehandStroke(id="s", points=[[1, 2], (3, 4)])
        assert stroke.points == ((1.0, 2.0), (3.0, 4.0))
        assert stroke.kind == "pen"

    def test_stroke_needs_a_point(self):
        with pytest.raises(ElementValidationError):
            FreehandStroke(id="s", points=[])

    def test_stroke_width_must_be_positive(self):
        with pytest.raises(ElementValidationError):
            FreehandStroke(id="s", points=[(0, 0)], stroke_width=0)

    def test_with_point_keeps_variant(self):
        stroke = HighlighterStroke(id="h", points=[(0, 0)], stroke_width=6)
        longer = stroke.with_point((5, 5))
        assert isinstance(longer, HighlighterStroke)
        assert longer.points == ((0.0, 0.0), (5.0, 5.0))
        assert stroke.points == ((0.0, 0.0),)

    def test_rectangle_rejects_negative_size(self):
        with pytest.raises(ElementValidationError):
            Rectangle(id="r", x=0, y=0, width=-1, height=10)

    def test_circle_rejects_negative_radius(self):
        with pytest.raises(ElementValidationError):
            Circle(id="c", x=0, y=0, radius=-5)

    def test_text_must_not_be_empty(self):
        with pytest.raises(ElementValidationError):
            TextLabel(id="t", x=0, y=0, text="")

    def test_image_needs_locator(self):
        with pytest.raises(ElementValidationError):
            ImageRef(id="i", x=0, y=0, width=10, height=10, source_locator="")

    def test_empty_id_rejected(self):
        with pytest.raises(ElementValidationError):
            LineSegment(id="", x1=0, y1=0, x2=1, y2=1)

    @pytest.mark.parametrize("factory", [
        lambda v: LineSegment(id="l", x1=0, y1=v, x2=1, y2=1),
        lambda v: Rectangle(id="r", x=v, y=0, width=10, height=10),
        lambda v: Circle(id="c", x=0, y=0, radius=v),
        lambda v: TextLabel(id="t", x=0, y=0, text="a", font_size=v),
        lambda v: ImageRef(id="i", x=0, y=v, width=10, height=10, source_locator="a.png"),
        lambda v: LaserMark(x=v, y=0),
        lambda v: FreehandStroke(id="s", points=[(0, 0)], stroke_width=v),
    ])
    @pytest.mark.parametrize("value", [None, "abc", [1], float("nan"), float("inf"), True])
    def test_non_numeric_values_rejected(self, factory, value):
        with pytest.raises(ElementValidationError):
            factory(value)

    def test_stroke_points_must_be_finite(self):
        with pytest.raises(ElementValidationError):
            FreehandStroke(id="s", points=[(0, float("nan"))])

    def test_numbers_are_stored_as_floats(self):
        rect = Rectangle(id="r", x=1, y="2", width=3, height=4)
        assert (rect.x, rect.y, rect.width, rect.height) == (1.0, 2.0, 3.0, 4.0)
        assert isinstance(rect.y, float)

    def test_elements_are_immutable(self):
        rect = Rectangle(id="r", x=0, y=0, width=10, height=10)
        with pytest.raises(AttributeError):
            rect.x = 5

    def test_laser_is_not_a_page_element(self):
        assert not is_page_element(LaserMark(x=0, y=0))
        assert is_page_element(Circle(id="c", x=0, y=0, radius=1))

    def test_laser_default_colour(self):
        assert LaserMark(x=0, y=0).stroke_color == "#ff0000"


class TestElementIds:
    def test_format(self):
        element_id = new_element_id()
        prefix, suffix = element_id.split("_")
        assert prefix == "element"
        assert len(suffix) == 8

    def test_prefix(self):
        assert new_element_id(prefix="image").startswith("image_")

    def test_unique_against_taken(self):
        taken = set()
        for _ in range(200):
            taken.add(new_element_id(taken))
        assert len(taken) == 200


class TestElementRecords:
    @pytest.mark.parametrize("element", [
        FreehandStroke(id="a", points=[(0, 0), (10, 5)], stroke_color="#ff0000", stroke_width=3),
        HighlighterStroke(id="b", points=[(1, 1)], stroke_width=6),
        LineSegment(id="c", x1=0, y1=0, x2=10, y2=10),
        Rectangle(id="d", x=1, y=2, width=3, height=4, fill_color="#00ff00"),
        Circle(id="e", x=5, y=5, radius=2),
        TextLabel(id="f", x=0, y=16, text="Hello", font_family="Georgia"),
        ImageRef(id="g", x=100, y=100, width=300, height=200, source_locator="data:image/png;base64,AA=="),
    ])
    def test_record_rebuilds_same_element(self, element):
        record = element_to_dict(element)
        assert record["type"] == element.kind
        assert element_from_dict(record) == element

    def test_stroke_points_stored_as_lists(self):
        record = element_to_dict(FreehandStroke(id="a", points=[(0, 0), (1, 2)]))
        assert record["points"] == [[0.0, 0.0], [1.0, 2.0]]

    def test_unknown_type_rejected(self):
        with pytest.raises(ElementValidationError):
            element_from_dict({"type": "triangle", "id": "x"})

    def test_missing_fields_rejected(self):
        with pytest.raises(ElementValidationError):
            element_from_dict({"type": "rectangle", "id": "x", "x": 0})

    def test_extra_fields_ignored(self):
        record = element_to_dict(Circle(id="c", x=1, y=1, radius=1))
        record["legacy"] = True
        assert element_from_dict(record) == Circle(id="c", x=1, y=1, radius=1)


class TestDrawingOptions:
    def test_defaults(self):
        options = DrawingOptions()
        assert options.tool == Tool.PEN
        assert options.stroke_color == "#000000"
        assert options.stroke_width == 2.0
        assert options.font_size == 16.0
        assert options.font_family == "Arial"

    def test_tool_strings_are_parsed(self):
        assert DrawingOptions(tool="rectangle").tool == Tool.RECTANGLE

    def test_unknown_tool_kept_but_inactive(self):
        options = DrawingOptions(tool="lasso")
        assert options.tool == "lasso"
        assert options.active_tool is None

    def test_merged_returns_self_without_changes(self):
        options = DrawingOptions()
        assert options.merged() is options
        assert options.merged(bogus=1) is options

    def test_merged_applies_changes(self):
        options = DrawingOptions().merged(tool="circle", stroke_width=4)
        assert options.tool == Tool.CIRCLE
        assert options.stroke_width == 4

    def test_dict_round_trip(self):
        options = DrawingOptions(tool=Tool.HIGHLIGHTER, stroke_color="#ff8000")
        data = options.to_dict()
        assert data["tool"] == "highlighter"
        assert DrawingOptions.from_dict(data) == options

    def test_from_empty_dict(self):
        assert DrawingOptions.from_dict(None) == DrawingOptions()
