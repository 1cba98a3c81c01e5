"""
Tool session - Turns pointer gestures into committed elements

States:
    IDLE --pointer_down--> DRAFTING --pointer_up--> IDLE (committed / discarded)
                                    --abort-------> IDLE (discarded)

Text and eraser never enter DRAFTING: text prompts and commits straight
away, the eraser deletes the topmost element under the cursor.
Laser drafts are always discarded on pointer-up.

Points handed to the session are already in document coordinates.
"""

import logging
from dataclasses import replace
from enum import Enum
from typing import Callable, NamedTuple, Optional

from ..config import Config
from .document import WhiteboardDocument, add_element
from .elements import (
    Point, Element, Stroke, FreehandStroke, HighlighterStroke, LineSegment,
    Rectangle, Circle, TextLabel, LaserMark, new_element_id,
)
from .geometry import TextMeasurer, approximate_text_width, distance
from .hit_testing import erase_at
from .options import DrawingOptions, Tool

logger = logging.getLogger(__name__)

# Blocking prompt returning the entered text, or None when cancelled
TextPrompt = Callable[[], Optional[str]]

DRAFT_ID = 'draft'


class ToolState(Enum):
    IDLE = 0
    DRAFTING = 1


class GestureOutcome(Enum):
    STARTED = 'started'        # Draft opened
    COMMITTED = 'committed'    # Element appended to the active page
    DISCARDED = 'discarded'    # Draft dropped (laser, abort, empty text)
    ERASED = 'erased'          # Eraser removed an element
    IGNORED = 'ignored'        # Nothing happened


class GestureResult(NamedTuple):
    document: WhiteboardDocument
    outcome: GestureOutcome
    element: Optional[Element] = None


class ToolSession:
    """
    Draw state machine for a single local editor.

    Usage:
        session = ToolSession(prompt_text=ask_user)
        result = session.pointer_down(document, (10, 10))
        session.pointer_move((110, 60))
        result = session.pointer_up(result.document)
    """

    def __init__(
        self,
        prompt_text: Optional[TextPrompt] = None,
        measure_text: TextMeasurer = approximate_text_width
    ):
        self._prompt_text = prompt_text
        self._measure_text = measure_text
        self._state = ToolState.IDLE
        self._tool: Optional[Tool] = None
        self._anchor: Optional[Point] = None
        self._draft: Optional[Element] = None

    # ==================== Properties ====================

    @property
    def state(self) -> ToolState:
        return self._state

    @property
    def draft(self) -> Optional[Element]:
        """In-progress element for rendering (None when idle)."""
        return self._draft

    @property
    def active_tool(self) -> Optional[Tool]:
        return self._tool

    @property
    def is_drafting(self) -> bool:
        return self._state == ToolState.DRAFTING

    def set_prompt(self, prompt_text: Optional[TextPrompt]):
        self._prompt_text = prompt_text

    def set_measurer(self, measure_text: TextMeasurer):
        self._measure_text = measure_text

    # ==================== Gestures ====================

    def pointer_down(self, document: WhiteboardDocument, point: Point) -> GestureResult:
        """Start a gesture with the tool from ``document.options``."""
        if self.is_drafting:
            # A stale draft (missed release) is dropped before starting over
            self._reset()

        options = document.options
        tool = options.active_tool
        if tool is None:
            logger.warning(f"Ignoring pointer down for unknown tool {options.tool!r}")
            return GestureResult(document, GestureOutcome.IGNORED)

        point = (float(point[0]), float(point[1]))

        if tool == Tool.ERASER:
            updated = erase_at(document, point, self._measure_text)
            if updated is document:
                return GestureResult(document, GestureOutcome.IGNORED)
            return GestureResult(updated, GestureOutcome.ERASED)

        if tool == Tool.TEXT:
            return self._add_text(document, point)

        draft = self._start_draft(tool, options, point)
        self._tool = tool
        self._anchor = point
        self._draft = draft
        self._state = ToolState.DRAFTING
        return GestureResult(document, GestureOutcome.STARTED, draft)

    def pointer_move(self, point: Point) -> Optional[Element]:
        """Update the draft; returns the new draft (None when idle)."""
        if not self.is_drafting or self._draft is None:
            return None
        point = (float(point[0]), float(point[1]))
        self._draft = self._update_draft(self._draft, point)
        return self._draft

    def pointer_up(self, document: WhiteboardDocument, point: Optional[Point] = None) -> GestureResult:
        """
        Finish the gesture.

        Args:
            document: Document to commit into
            point: Optional release position, applied as a final move

        Returns:
            GestureResult with the (possibly) updated document
        """
        if not self.is_drafting or self._draft is None:
            return GestureResult(document, GestureOutcome.IGNORED)

        if point is not None:
            self.pointer_move(point)

        draft = self._draft
        self._reset()

        if isinstance(draft, LaserMark):
            return GestureResult(document, GestureOutcome.DISCARDED, draft)

        element = replace(draft, id=new_element_id(document.active_page.element_ids))
        updated = add_element(document, element)
        if updated is document:
            return GestureResult(document, GestureOutcome.DISCARDED, element)
        logger.debug(f"Committed {element.kind} {element.id}")
        return GestureResult(updated, GestureOutcome.COMMITTED, element)

    def abort(self) -> GestureOutcome:
        """Drop the current draft (pointer left the surface)."""
        if not self.is_drafting:
            return GestureOutcome.IGNORED
        self._reset()
        return GestureOutcome.DISCARDED

    def _reset(self):
        self._state = ToolState.IDLE
        self._tool = None
        self._anchor = None
        self._draft = None

    # ==================== Drafts ====================

    def _start_draft(self, tool: Tool, options: DrawingOptions, point: Point) -> Element:
        x, y = point
        if tool == Tool.PEN:
            return FreehandStroke(
                id=DRAFT_ID,
                points=(point,),
                stroke_color=options.stroke_color,
                stroke_width=options.stroke_width,
            )
        if tool == Tool.HIGHLIGHTER:
            return HighlighterStroke(
                id=DRAFT_ID,
                points=(point,),
                stroke_color=options.stroke_color,
                stroke_width=options.stroke_width * HighlighterStroke.WIDTH_MULTIPLIER,
            )
        if tool == Tool.LINE:
            return LineSegment(
                id=DRAFT_ID, x1=x, y1=y, x2=x, y2=y,
                stroke_color=options.stroke_color,
                stroke_width=options.stroke_width,
            )
        if tool == Tool.RECTANGLE:
            return Rectangle(
                id=DRAFT_ID, x=x, y=y, width=0.0, height=0.0,
                stroke_color=options.stroke_color,
                stroke_width=options.stroke_width,
                fill_color=options.fill_color,
            )
        if tool == Tool.CIRCLE:
            return Circle(
                id=DRAFT_ID, x=x, y=y, radius=0.0,
                stroke_color=options.stroke_color,
                stroke_width=options.stroke_width,
                fill_color=options.fill_color,
            )
        if tool == Tool.LASER:
            return LaserMark(x=x, y=y, stroke_color=Config.LASER_COLOR)
        raise ValueError(f"Tool {tool} does not draft")

    def _update_draft(self, draft: Element, point: Point) -> Element:
        x, y = point
        if isinstance(draft, Stroke):
            return draft.with_point(point)
        if isinstance(draft, LineSegment):
            return replace(draft, x2=x, y2=y)
        if isinstance(draft, Rectangle):
            ax, ay = self._anchor
            return replace(
                draft,
                x=min(ax, x),
                y=min(ay, y),
                width=abs(x - ax),
                height=abs(y - ay),
            )
        if isinstance(draft, Circle):
            return replace(draft, radius=distance(self._anchor, point))
        if isinstance(draft, LaserMark):
            return replace(draft, x=x, y=y)
        return draft

    # ==================== Text ====================

    def _add_text(self, document: WhiteboardDocument, point: Point) -> GestureResult:
        if self._prompt_text is None:
            logger.warning("Text tool used without a text prompt")
            return GestureResult(document, GestureOutcome.IGNORED)

        text = self._prompt_text()
        if not text:
            return GestureResult(document, GestureOutcome.DISCARDED)

        options = document.options
        font_size = options.font_size or Config.DEFAULT_FONT_SIZE
        label = TextLabel(
            id=new_element_id(document.active_page.element_ids),
            x=point[0],
            # Baseline sits one line below the click so the text appears under the cursor
            y=point[1] + font_size,
            text=text,
            stroke_color=options.stroke_color,
            font_size=font_size,
            font_family=options.font_family or Config.DEFAULT_FONT_FAMILY,
        )
        updated = add_element(document, label)
        return GestureResult(updated, GestureOutcome.COMMITTED, label)


__all__ = [
    'ToolSession',
    'ToolState',
    'GestureOutcome',
    'GestureResult',
    'TextPrompt',
]
