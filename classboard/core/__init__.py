"""Whiteboard engine core: elements, geometry, pages and the draw state machine"""

from .elements import (
    ElementValidationError,
    FreehandStroke,
    HighlighterStroke,
    LineSegment,
    Rectangle,
    Circle,
    TextLabel,
    ImageRef,
    LaserMark,
    element_to_dict,
    element_from_dict,
)
from .options import Tool, DrawingOptions
from .viewport import Viewport
from .document import (
    DocumentError,
    Page,
    WhiteboardDocument,
    new_document,
    apply,
    document_to_dict,
    document_from_dict,
)
from .hit_testing import hit_test, element_at, erase_at, select_at, selection_box
from .tool_session import ToolSession, ToolState, GestureOutcome, GestureResult

__all__ = [
    'ElementValidationError',
    'FreehandStroke',
    'HighlighterStroke',
    'LineSegment',
    'Rectangle',
    'Circle',
    'TextLabel',
    'ImageRef',
    'LaserMark',
    'element_to_dict',
    'element_from_dict',
    'Tool',
    'DrawingOptions',
    'Viewport',
    'DocumentError',
    'Page',
    'WhiteboardDocument',
    'new_document',
    'apply',
    'document_to_dict',
    'document_from_dict',
    'hit_test',
    'element_at',
    'erase_at',
    'select_at',
    'selection_box',
    'ToolSession',
    'ToolState',
    'GestureOutcome',
    'GestureResult',
]
