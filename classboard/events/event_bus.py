"""
EventBus - Central event system for whiteboard-wide state

Pattern: Observer/Publisher-Subscriber

The canvas publishes document, page, tool and zoom changes here; toolbars,
the page list and the status bar subscribe without knowing about each other.
"""

from typing import Optional

from PyQt6.QtCore import QObject, pyqtSignal


class EventBus(QObject):
    """
    Central event bus for decoupled communication between components

    Usage:
        event_bus = get_event_bus()
        event_bus.tool_changed.connect(some_handler)
        event_bus.set_tool("rectangle")
    """

    # Document events
    document_changed = pyqtSignal()  # any committed edit, undo or load
    active_page_changed = pyqtSignal(str)  # page_id
    pages_changed = pyqtSignal(list)  # List[page_id]
    selection_changed = pyqtSignal(str)  # element_id ("" = none)

    # Tool / option events
    tool_changed = pyqtSignal(str)  # tool identifier
    options_changed = pyqtSignal(dict)  # DrawingOptions.to_dict()

    # View events
    zoom_changed = pyqtSignal(float)  # scale

    # History events
    history_changed = pyqtSignal(bool, bool)  # can_undo, can_redo

    # Export / import events
    export_finished = pyqtSignal(bool, str)  # success, message
    import_finished = pyqtSignal(bool, str)  # success, message

    # Error events
    error_occurred = pyqtSignal(str, str)  # error_type, error_message

    def __init__(self):
        super().__init__()

        self._tool: str = "pen"
        self._zoom: float = 1.0

    # Getters

    def get_tool(self) -> str:
        return self._tool

    def get_zoom(self) -> float:
        return self._zoom

    # Setters (update state and emit signals)

    def set_tool(self, tool: str):
        if self._tool != tool:
            self._tool = tool
            self.tool_changed.emit(tool)

    def set_zoom(self, scale: float):
        if self._zoom != scale:
            self._zoom = scale
            self.zoom_changed.emit(scale)

    # Convenience methods

    def report_error(self, error_type: str, message: str):
        """
        Report an error to the UI

        Args:
            error_type: Type of error (e.g., "export", "import", "storage")
            message: Human-readable error message
        """
        self.error_occurred.emit(error_type, message)


# Singleton instance (lazy initialization)
_event_bus_instance: Optional[EventBus] = None


def get_event_bus() -> EventBus:
    """
    Get global EventBus singleton instance

    Returns:
        Global EventBus instance
    """
    global _event_bus_instance
    if _event_bus_instance is None:
        _event_bus_instance = EventBus()
    return _event_bus_instance


__all__ = ['EventBus', 'get_event_bus']
