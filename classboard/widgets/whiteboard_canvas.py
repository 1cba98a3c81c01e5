"""
WhiteboardCanvas - Interactive drawing surface for one whiteboard document

Provides:
- Pen, highlighter, line, rectangle, circle, text, eraser and laser tools
- Undo/redo of every committed change
- Zoom (buttons, Ctrl+wheel) and middle-button panning
- Right-click selection, Delete removes the selected element
"""

import logging
from dataclasses import replace
from pathlib import Path
from typing import Any, Optional, Union

from PyQt6.QtCore import Qt, pyqtSignal, QPointF
from PyQt6.QtGui import QPainter, QColor, QCursor, QUndoStack
from PyQt6.QtWidgets import QWidget, QInputDialog

from ..config import Config
from ..core import document as doc_ops
from ..core.document import WhiteboardDocument, new_document
from ..core.elements import Point
from ..core.hit_testing import select_at
from ..core.options import Tool
from ..core.tool_session import GestureOutcome, GestureResult, ToolSession
from ..core.viewport import Viewport
from ..events.event_bus import EventBus, get_event_bus
from ..rendering.element_painter import ImageCache, paint_page
from ..rendering.text_metrics import QtTextMeasurer
from ..services.image_import import ImportResult, import_image, place_image
from .undo_commands import DocumentChangeCommand

logger = logging.getLogger(__name__)


ELEMENT_LABELS = {
    'pen': 'Stroke',
    'highlighter': 'Highlight',
    'line': 'Line',
    'rectangle': 'Rectangle',
    'circle': 'Circle',
    'text': 'Text',
    'image': 'Image',
}


class WhiteboardCanvas(QWidget):
    """
    Drawing surface bound to a WhiteboardDocument.

    The canvas owns the current document snapshot. Every effective change
    goes through the undo stack; tool/option changes and page switches do not.
    """

    # Signals
    document_modified = pyqtSignal()
    selection_changed = pyqtSignal(str)  # element_id ("" = none)

    def __init__(
        self,
        document: Optional[WhiteboardDocument] = None,
        parent: Optional[QWidget] = None,
        event_bus: Optional[EventBus] = None
    ):
        super().__init__(parent)

        self._document = document or new_document()
        self._viewport = Viewport()
        self._measure_text = QtTextMeasurer()
        self._image_cache = ImageCache()
        self._session = ToolSession(prompt_text=self._prompt_text, measure_text=self._measure_text)
        self._selected_id: Optional[str] = None
        self._pan_anchor: Optional[QPointF] = None

        self._undo_stack = QUndoStack(self)
        self._undo_stack.setUndoLimit(Config.UNDO_LIMIT)

        self._event_bus = event_bus or get_event_bus()

        self._setup_widget()
        self._connect_signals()

    def _setup_widget(self):
        self.setMouseTracking(True)
        self.setFocusPolicy(Qt.FocusPolicy.StrongFocus)
        self.setMinimumSize(320, 240)
        self.setAttribute(Qt.WidgetAttribute.WA_OpaquePaintEvent)
        self.setCursor(self._get_tool_cursor(self._document.options.active_tool))

    def _connect_signals(self):
        self._undo_stack.canUndoChanged.connect(self._on_history_changed)
        self._undo_stack.canRedoChanged.connect(self._on_history_changed)

    # ==================== Properties ====================

    @property
    def document(self) -> WhiteboardDocument:
        return self._document

    @property
    def viewport(self) -> Viewport:
        return self._viewport

    @property
    def undo_stack(self) -> QUndoStack:
        return self._undo_stack

    @property
    def tool_session(self) -> ToolSession:
        return self._session

    @property
    def selected_id(self) -> Optional[str]:
        return self._selected_id

    @property
    def measure_text(self) -> QtTextMeasurer:
        return self._measure_text

    # ==================== Document State ====================

    def set_document(self, document: WhiteboardDocument):
        """Replace the document (new/open board); history starts over."""
        self._session.abort()
        self._undo_stack.clear()
        self._image_cache.clear()
        self._apply_document(document)

    def _set_document(self, document: WhiteboardDocument):
        """Restore a history snapshot, keeping the current drawing options."""
        if document.options != self._document.options:
            document = replace(document, options=self._document.options)
        self._apply_document(document)

    def _apply_document(self, document: WhiteboardDocument):
        previous = self._document
        self._document = document

        if self._selected_id is not None and document.active_page.find_element(self._selected_id) is None:
            self._set_selection(None)

        if previous.page_ids != document.page_ids:
            self._event_bus.pages_changed.emit(document.page_ids)
        if previous.active_page_id != document.active_page_id:
            self._session.abort()
            self._set_selection(None)
            self._event_bus.active_page_changed.emit(document.active_page_id)
        if previous.options != document.options:
            self._on_options_applied(document)

        self.update()
        self.document_modified.emit()
        self._event_bus.document_changed.emit()

    def _commit(self, updated: WhiteboardDocument, text: str) -> bool:
        """Push an undoable change; no-ops are not recorded."""
        if updated is self._document:
            return False
        self._undo_stack.push(DocumentChangeCommand(self, self._document, updated, text))
        logger.debug(f"Committed '{text}'")
        return True

    def _set_uncommitted(self, updated: WhiteboardDocument) -> bool:
        """Apply a change that is not part of the undo history."""
        if updated is self._document:
            return False
        self._apply_document(updated)
        return True

    # ==================== Tools & Options ====================

    def set_tool(self, tool: Union[Tool, str]) -> bool:
        """Select the active tool."""
        value = tool.value if isinstance(tool, Tool) else tool
        return self.set_options(tool=value)

    def set_options(self, **changes: Any) -> bool:
        """Change drawing options (stroke_color, stroke_width, font_size, ...)."""
        if 'tool' in changes and self._session.is_drafting:
            self._session.abort()
        return self._set_uncommitted(doc_ops.change_options(self._document, **changes))

    def _on_options_applied(self, document: WhiteboardDocument):
        options = document.options
        tool_name = options.tool.value if isinstance(options.tool, Tool) else str(options.tool)
        self.setCursor(self._get_tool_cursor(options.active_tool))
        self._event_bus.set_tool(tool_name)
        self._event_bus.options_changed.emit(options.to_dict())

    def _get_tool_cursor(self, tool: Optional[Tool]) -> QCursor:
        """Get cursor for tool."""
        if tool in (Tool.PEN, Tool.HIGHLIGHTER, Tool.LINE, Tool.RECTANGLE, Tool.CIRCLE):
            return QCursor(Qt.CursorShape.CrossCursor)
        elif tool == Tool.TEXT:
            return QCursor(Qt.CursorShape.IBeamCursor)
        elif tool == Tool.ERASER:
            return QCursor(Qt.CursorShape.PointingHandCursor)
        elif tool == Tool.LASER:
            return QCursor(Qt.CursorShape.BlankCursor)
        return QCursor(Qt.CursorShape.ArrowCursor)

    # ==================== Pages ====================

    def add_page(self) -> bool:
        return self._commit(doc_ops.add_page(self._document), "Add Page")

    def delete_page(self, page_id: Optional[str] = None) -> bool:
        page_id = page_id or self._document.active_page_id
        return self._commit(doc_ops.delete_page(self._document, page_id), "Delete Page")

    def switch_page(self, page_id: str) -> bool:
        return self._set_uncommitted(doc_ops.switch_page(self._document, page_id))

    def clear_page(self) -> bool:
        return self._commit(doc_ops.clear_page(self._document), "Clear Page")

    def rename_page(self, page_id: str, name: str) -> bool:
        return self._commit(doc_ops.rename_page(self._document, page_id, name), "Rename Page")

    def set_page_background(self, color: str, page_id: Optional[str] = None) -> bool:
        page_id = page_id or self._document.active_page_id
        return self._commit(
            doc_ops.set_page_background(self._document, page_id, color),
            "Page Background"
        )

    # ==================== Elements ====================

    def delete_selected(self) -> bool:
        if self._selected_id is None:
            return False
        return self._commit(doc_ops.delete_element(self._document, self._selected_id), "Delete")

    def import_image(self, path: Union[str, Path]) -> ImportResult:
        """Decode an image file and place it on the active page."""
        result = import_image(self._document, path)
        self._finish_import(result)
        return result

    def place_image(self, data_url: str) -> ImportResult:
        """Place an already-decoded image (from ImageImportTask)."""
        result = place_image(self._document, data_url)
        self._finish_import(result)
        return result

    def _finish_import(self, result: ImportResult):
        if result.success:
            self._commit(result.document, "Import Image")
        else:
            self._event_bus.report_error("import", result.message)
        self._event_bus.import_finished.emit(result.success, result.message)

    # ==================== Selection ====================

    def _set_selection(self, element_id: Optional[str]):
        if element_id == self._selected_id:
            return
        self._selected_id = element_id
        self.selection_changed.emit(element_id or "")
        self._event_bus.selection_changed.emit(element_id or "")
        self.update()

    def select_element_at(self, point: Point) -> Optional[str]:
        """Select the topmost element near a document-space point."""
        selected = select_at(self._document.active_page, point, self._measure_text)
        self._set_selection(selected.id if selected is not None else None)
        return self._selected_id

    def clear_selection(self):
        self._set_selection(None)

    # ==================== History ====================

    def undo(self):
        self._session.abort()
        self._undo_stack.undo()

    def redo(self):
        self._session.abort()
        self._undo_stack.redo()

    def _on_history_changed(self, _value: bool = False):
        self._event_bus.history_changed.emit(self._undo_stack.canUndo(), self._undo_stack.canRedo())

    # ==================== Zoom & Pan ====================

    def _set_viewport(self, viewport: Viewport):
        if viewport == self._viewport:
            return
        self._viewport = viewport
        self._event_bus.set_zoom(viewport.scale)
        self.update()

    def zoom_in(self):
        self._set_viewport(self._viewport.zoom_in())

    def zoom_out(self):
        self._set_viewport(self._viewport.zoom_out())

    def reset_zoom(self):
        self._set_viewport(self._viewport.reset())

    def _to_document(self, pos: QPointF) -> Point:
        return self._viewport.screen_to_document((pos.x(), pos.y()))

    # ==================== Gestures ====================

    def _prompt_text(self) -> Optional[str]:
        text, ok = QInputDialog.getText(self, "Add Text", "Enter text:")
        if ok and text:
            return text
        return None

    def _handle_result(self, result: GestureResult):
        if result.outcome == GestureOutcome.COMMITTED:
            label = ELEMENT_LABELS.get(result.element.kind, 'Element')
            self._commit(result.document, f"Add {label}")
        elif result.outcome == GestureOutcome.ERASED:
            self._commit(result.document, "Erase")
        self.update()

    def pointer_down(self, point: Point):
        """Start a gesture at a document-space point."""
        self._handle_result(self._session.pointer_down(self._document, point))

    def pointer_move(self, point: Point):
        if self._session.pointer_move(point) is not None:
            self.update()

    def pointer_up(self, point: Optional[Point] = None):
        self._handle_result(self._session.pointer_up(self._document, point))

    def abort_gesture(self):
        if self._session.abort() == GestureOutcome.DISCARDED:
            self.update()

    # ==================== Mouse Events ====================

    def mousePressEvent(self, event):
        pos = event.position()
        if event.button() == Qt.MouseButton.LeftButton:
            self.setFocus()
            self.pointer_down(self._to_document(pos))
            event.accept()
        elif event.button() == Qt.MouseButton.MiddleButton:
            self._pan_anchor = pos
            self.setCursor(QCursor(Qt.CursorShape.ClosedHandCursor))
            event.accept()
        elif event.button() == Qt.MouseButton.RightButton:
            self.select_element_at(self._to_document(pos))
            event.accept()
        else:
            super().mousePressEvent(event)

    def mouseMoveEvent(self, event):
        pos = event.position()
        if self._pan_anchor is not None:
            delta = pos - self._pan_anchor
            self._pan_anchor = pos
            self._set_viewport(self._viewport.panned(delta.x(), delta.y()))
            event.accept()
        elif self._session.is_drafting:
            self.pointer_move(self._to_document(pos))
            event.accept()
        else:
            super().mouseMoveEvent(event)

    def mouseReleaseEvent(self, event):
        if event.button() == Qt.MouseButton.MiddleButton and self._pan_anchor is not None:
            self._pan_anchor = None
            self.setCursor(self._get_tool_cursor(self._document.options.active_tool))
            event.accept()
        elif event.button() == Qt.MouseButton.LeftButton and self._session.is_drafting:
            self.pointer_up(self._to_document(event.position()))
            event.accept()
        else:
            super().mouseReleaseEvent(event)

    def leaveEvent(self, event):
        """Abandon the in-progress gesture when the pointer leaves."""
        self.abort_gesture()
        super().leaveEvent(event)

    def wheelEvent(self, event):
        if not event.modifiers() & Qt.KeyboardModifier.ControlModifier:
            delta = event.angleDelta()
            self._set_viewport(self._viewport.panned(delta.x() / 4.0, delta.y() / 4.0))
            event.accept()
            return

        step = Config.ZOOM_STEP if event.angleDelta().y() > 0 else -Config.ZOOM_STEP
        pos = event.position()
        self._set_viewport(self._viewport.zoom_about(
            (pos.x(), pos.y()), round(self._viewport.scale + step, 2)
        ))
        event.accept()

    def keyPressEvent(self, event):
        key = event.key()
        if key in (Qt.Key.Key_Delete, Qt.Key.Key_Backspace):
            if self.delete_selected():
                event.accept()
                return
        elif key == Qt.Key.Key_Escape:
            self.abort_gesture()
            self.clear_selection()
            event.accept()
            return
        super().keyPressEvent(event)

    # ==================== Painting ====================

    def paintEvent(self, event):
        page = self._document.active_page
        painter = QPainter(self)
        try:
            painter.fillRect(self.rect(), QColor(page.background_color))
            paint_page(
                painter,
                page,
                viewport=self._viewport,
                draft=self._session.draft,
                selected_id=self._selected_id,
                measure_text=self._measure_text,
                image_cache=self._image_cache,
            )
        finally:
            painter.end()


__all__ = ['WhiteboardCanvas']
