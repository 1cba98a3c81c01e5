"""
Undo commands for whiteboard canvas operations.

Documents are immutable, so each command simply holds the snapshot before
and after a change and hands one of them back to the canvas.
"""

from typing import TYPE_CHECKING

from PyQt6.QtGui import QUndoCommand

from ..core.document import WhiteboardDocument

if TYPE_CHECKING:
    from .whiteboard_canvas import WhiteboardCanvas


class DocumentChangeCommand(QUndoCommand):
    """Undo command for any committed document change."""

    def __init__(
        self,
        canvas: 'WhiteboardCanvas',
        before: WhiteboardDocument,
        after: WhiteboardDocument,
        text: str
    ):
        super().__init__(text)
        self._canvas = canvas
        self._before = before
        self._after = after

    @property
    def before(self) -> WhiteboardDocument:
        return self._before

    @property
    def after(self) -> WhiteboardDocument:
        return self._after

    def redo(self):
        self._canvas._set_document(self._after)

    def undo(self):
        self._canvas._set_document(self._before)


__all__ = ['DocumentChangeCommand']
