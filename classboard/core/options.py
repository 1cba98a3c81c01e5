"""
Drawing options - Tool selection and style settings read by the tool session
"""

import logging
from dataclasses import dataclass, fields, replace, asdict
from enum import Enum
from typing import Any, Dict, Optional, Union

from ..config import Config

logger = logging.getLogger(__name__)


class Tool(Enum):
    """Available whiteboard tools."""
    PEN = 'pen'                  # Freehand ink
    HIGHLIGHTER = 'highlighter'  # Translucent wide ink
    ERASER = 'eraser'            # Remove topmost element under cursor
    LINE = 'line'                # Straight line
    RECTANGLE = 'rectangle'      # Drag-to-size rectangle
    CIRCLE = 'circle'            # Drag-to-radius circle
    TEXT = 'text'                # Prompted text label
    LASER = 'laser'              # Ephemeral pointer dot

    @classmethod
    def parse(cls, value: Union['Tool', str, None]) -> Optional['Tool']:
        """Return the matching Tool, or None for an unknown identifier."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return None


@dataclass(frozen=True)
class DrawingOptions:
    """
    Style settings applied to the next gesture.

    ``tool`` keeps unknown identifiers as plain strings so the tool session
    can ignore them instead of failing at configuration time.
    """

    tool: Union[Tool, str] = Tool.PEN
    stroke_color: str = Config.DEFAULT_STROKE_COLOR
    stroke_width: float = Config.DEFAULT_STROKE_WIDTH
    fill_color: Optional[str] = None
    font_size: float = Config.DEFAULT_FONT_SIZE
    font_family: str = Config.DEFAULT_FONT_FAMILY

    def __post_init__(self):
        tool = Tool.parse(self.tool)
        if tool is not None:
            object.__setattr__(self, 'tool', tool)

    @property
    def active_tool(self) -> Optional[Tool]:
        return Tool.parse(self.tool)

    def merged(self, **changes: Any) -> 'DrawingOptions':
        """Return a copy with ``changes`` applied; unknown keys are dropped."""
        names = {f.name for f in fields(self)}
        unknown = set(changes) - names
        if unknown:
            logger.warning(f"Ignoring unknown drawing options: {sorted(unknown)}")
        known = {key: value for key, value in changes.items() if key in names}
        if not known:
            return self
        return replace(self, **known)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['tool'] = self.tool.value if isinstance(self.tool, Tool) else self.tool
        return data

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'DrawingOptions':
        if not data:
            return cls()
        names = {f.name for f in fields(cls)}
        return cls(**{key: value for key, value in data.items() if key in names})


__all__ = ['Tool', 'DrawingOptions']
