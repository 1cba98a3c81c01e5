"""Tests for the whiteboard canvas and its undo history."""

import pytest

from classboard.core.document import add_element, add_page, new_document
from classboard.core.elements import FreehandStroke, Rectangle, TextLabel
from classboard.core.options import Tool
from classboard.events.event_bus import EventBus
from classboard.widgets.undo_commands import DocumentChangeCommand
from classboard.widgets.whiteboard_canvas import WhiteboardCanvas


@pytest.fixture
def canvas(app):
    widget = WhiteboardCanvas(event_bus=EventBus())
    yield widget
    widget.deleteLater()


def drag(canvas, points):
    canvas.pointer_down(points[0])
    for point in points[1:]:
        canvas.pointer_move(point)
    canvas.pointer_up()


class TestDrawing:
    def test_pen_gesture_is_undoable(self, canvas):
        drag(canvas, [(0, 0), (10, 10), (20, 5)])

        assert canvas.undo_stack.count() == 1
        assert canvas.undo_stack.undoText() == "Add Stroke"
        assert isinstance(canvas.document.active_page.elements[0], FreehandStroke)

        canvas.undo()
        assert canvas.document.active_page.elements == ()
        canvas.redo()
        assert len(canvas.document.active_page.elements) == 1

    def test_rectangle_gesture(self, canvas):
        canvas.set_tool(Tool.RECTANGLE)
        drag(canvas, [(10, 10), (110, 60)])
        rect = canvas.document.active_page.elements[0]
        assert isinstance(rect, Rectangle)
        assert (rect.x, rect.y, rect.width, rect.height) == (10, 10, 100, 50)
        assert canvas.undo_stack.undoText() == "Add Rectangle"

    def test_text_uses_prompt(self, canvas):
        canvas.tool_session.set_prompt(lambda: "Fractions")
        canvas.set_tool("text")
        canvas.pointer_down((20, 20))
        label = canvas.document.active_page.elements[0]
        assert isinstance(label, TextLabel)
        assert label.text == "Fractions"
        assert canvas.undo_stack.count() == 1

    def test_laser_leaves_no_history(self, canvas):
        canvas.set_tool("laser")
        canvas.pointer_down((5, 5))
        canvas.pointer_move((50, 50))
        assert canvas.tool_session.draft is not None
        canvas.pointer_up()

        assert canvas.tool_session.draft is None
        assert canvas.document.active_page.elements == ()
        assert canvas.undo_stack.count() == 0

    def test_eraser(self, canvas):
        canvas.set_tool("rectangle")
        drag(canvas, [(0, 0), (50, 50)])
        canvas.set_tool("eraser")

        canvas.pointer_down((500, 500))
        assert canvas.undo_stack.count() == 1

        canvas.pointer_down((25, 25))
        canvas.pointer_up()
        assert canvas.document.active_page.elements == ()
        assert canvas.undo_stack.undoText() == "Erase"

    def test_abort_discards_draft(self, canvas):
        canvas.pointer_down((0, 0))
        canvas.pointer_move((30, 30))
        canvas.abort_gesture()
        canvas.pointer_up()
        assert canvas.document.active_page.elements == ()
        assert canvas.undo_stack.count() == 0

    def test_modified_signal(self, canvas):
        emitted = []
        canvas.document_modified.connect(lambda: emitted.append(True))
        drag(canvas, [(0, 0), (10, 10)])
        assert emitted


class TestHistory:
    def test_options_survive_undo(self, canvas):
        drag(canvas, [(0, 0), (10, 10)])
        canvas.set_options(stroke_color="#ff0000", stroke_width=6)
        canvas.undo()

        assert canvas.document.options.stroke_color == "#ff0000"
        assert canvas.document.options.stroke_width == 6

    def test_option_changes_are_not_recorded(self, canvas):
        assert canvas.set_tool("circle")
        assert not canvas.set_tool("circle")
        canvas.set_options(stroke_width=4)
        assert canvas.undo_stack.count() == 0

    def test_no_op_changes_are_not_recorded(self, canvas):
        assert not canvas.clear_page()
        assert not canvas.delete_page()
        assert not canvas.rename_page("page-1", "   ")
        assert canvas.undo_stack.count() == 0

    def test_command_snapshots(self, canvas):
        before = canvas.document
        drag(canvas, [(0, 0), (10, 10)])
        command = canvas.undo_stack.command(0)
        assert isinstance(command, DocumentChangeCommand)
        assert command.before is before
        assert command.after is canvas.document

    def test_set_document_clears_history(self, canvas):
        drag(canvas, [(0, 0), (10, 10)])
        document = add_element(new_document(), Rectangle(id="r", x=0, y=0, width=5, height=5))
        canvas.set_document(document)

        assert canvas.document is document
        assert canvas.undo_stack.count() == 0


class TestPages:
    def test_add_and_undo_page(self, canvas):
        assert canvas.add_page()
        assert canvas.document.page_ids == ["page-1", "page-2"]
        assert canvas.document.active_page_id == "page-2"

        canvas.undo()
        assert canvas.document.page_ids == ["page-1"]
        assert canvas.document.active_page_id == "page-1"

    def test_switch_page_is_not_recorded(self, canvas):
        canvas.set_document(add_page(new_document()))
        assert canvas.switch_page("page-1")
        assert canvas.document.active_page_id == "page-1"
        assert canvas.undo_stack.count() == 0

    def test_delete_page(self, canvas):
        canvas.add_page()
        assert canvas.delete_page("page-1")
        assert canvas.document.page_ids == ["page-2"]
        assert not canvas.delete_page()

    def test_rename_and_background(self, canvas):
        assert canvas.rename_page("page-1", "Warm-up")
        assert canvas.set_page_background("#fffbe6")
        page = canvas.document.active_page
        assert page.display_name == "Warm-up"
        assert page.background_color == "#fffbe6"
        assert canvas.undo_stack.count() == 2


class TestSelection:
    def test_select_and_delete(self, canvas):
        canvas.set_document(add_element(new_document(), Rectangle(id="r", x=0, y=0, width=40, height=40)))
        changes = []
        canvas.selection_changed.connect(changes.append)

        assert canvas.select_element_at((20, 20)) == "r"
        assert canvas.delete_selected()
        assert canvas.document.active_page.elements == ()
        assert canvas.selected_id is None
        assert changes == ["r", ""]

    def test_delete_without_selection(self, canvas):
        assert canvas.select_element_at((200, 200)) is None
        assert not canvas.delete_selected()


class TestZoom:
    def test_zoom_is_clamped(self, canvas):
        for _ in range(40):
            canvas.zoom_in()
        assert canvas.viewport.scale == pytest.approx(3.0)

        for _ in range(40):
            canvas.zoom_out()
        assert canvas.viewport.scale == pytest.approx(0.5)

        canvas.reset_zoom()
        assert canvas.viewport.scale == 1.0


class TestImport:
    def test_failed_import_changes_nothing(self, canvas, tmp_path):
        path = tmp_path / "broken.png"
        path.write_bytes(b"not an image")
        result = canvas.import_image(path)

        assert not result.success
        assert canvas.undo_stack.count() == 0
        assert canvas.document.active_page.elements == ()

    def test_place_image_is_undoable(self, canvas):
        result = canvas.place_image("data:image/png;base64,AAAA")
        assert result.success
        assert canvas.undo_stack.undoText() == "Import Image"
        canvas.undo()
        assert canvas.document.active_page.elements == ()
