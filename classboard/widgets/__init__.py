"""UI Widgets for Classboard"""

from .main_window import MainWindow
from .whiteboard_canvas import WhiteboardCanvas
from .undo_commands import DocumentChangeCommand

__all__ = [
    'MainWindow',
    'WhiteboardCanvas',
    'DocumentChangeCommand',
]
