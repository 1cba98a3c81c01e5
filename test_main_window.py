"""Smoke tests for the main window wiring."""

import pytest

from classboard.events.event_bus import EventBus
from classboard.services.board_storage import BoardStorage
from classboard.widgets.main_window import MainWindow


@pytest.fixture
def window(app, tmp_path):
    widget = MainWindow(board_storage=BoardStorage(tmp_path / "boards"), event_bus=EventBus())
    yield widget
    widget.deleteLater()


class TestMainWindow:
    def test_starts_with_one_page(self, window):
        assert window.canvas.document.page_ids == ["page-1"]
        assert window._page_list.count() == 1
        assert window.windowTitle().startswith("Untitled")

    def test_page_list_follows_document(self, window):
        window.canvas.add_page()
        assert window._page_list.count() == 2
        assert window._page_list.currentItem().text() == "Page 2"

    def test_save_marks_clean(self, window, tmp_path):
        window.canvas.add_page()
        assert not window.canvas.undo_stack.isClean()

        assert window._save_board("lesson")
        assert window.canvas.undo_stack.isClean()
        assert window.windowTitle().startswith("lesson")
        assert BoardStorage(tmp_path / "boards").load_board("lesson") == window.canvas.document

    def test_tool_action_selects_tool(self, window):
        window.canvas.set_tool("eraser")
        checked = [action.data() for action in window._tool_group.actions() if action.isChecked()]
        assert checked == ["eraser"]
