"""
Selection & erasure - Hit-testing a cursor point against page elements

Elements are scanned topmost first (reverse insertion order) and the first
match wins. Erasure uses a fixed tolerance around each shape; selection uses
the padded bounding box with no extra tolerance.
"""

import logging
from typing import Optional

from ..config import Config
from .document import Page, WhiteboardDocument, delete_element
from .elements import (
    Point, PageElement, Stroke, LineSegment, Rectangle, Circle,
    TextLabel, ImageRef,
)
from .geometry import (
    Rect, TextMeasurer, approximate_text_width, bounding_box,
    distance_point_to_segment, point_near_points, point_in_circle,
    point_in_rect, text_box,
)

logger = logging.getLogger(__name__)

HIT_TOLERANCE = Config.HIT_TOLERANCE


def hit_test(
    element: PageElement,
    point: Point,
    measure_text: TextMeasurer = approximate_text_width,
    tolerance: float = HIT_TOLERANCE
) -> bool:
    """
    Check whether ``point`` touches ``element`` within ``tolerance``.

    Args:
        element: Page element to test
        point: Cursor position in document coordinates
        measure_text: Text width provider for TextLabel
        tolerance: Hit distance in document units

    Returns:
        True if the element is hit
    """
    if isinstance(element, Stroke):
        return point_near_points(point, element.points, tolerance)
    if isinstance(element, LineSegment):
        return distance_point_to_segment(
            point, (element.x1, element.y1), (element.x2, element.y2)
        ) < tolerance
    if isinstance(element, (Rectangle, ImageRef)):
        return point_in_rect(point, Rect(element.x, element.y, element.width, element.height), tolerance)
    if isinstance(element, Circle):
        return point_in_circle(point, (element.x, element.y), element.radius + tolerance)
    if isinstance(element, TextLabel):
        return point_in_rect(point, text_box(element, measure_text), tolerance)
    return False


def element_at(
    page: Page,
    point: Point,
    measure_text: TextMeasurer = approximate_text_width,
    tolerance: float = HIT_TOLERANCE
) -> Optional[PageElement]:
    """Topmost element hit at ``point``, or None."""
    for element in reversed(page.elements):
        if hit_test(element, point, measure_text, tolerance):
            return element
    return None


def erase_at(
    document: WhiteboardDocument,
    point: Point,
    measure_text: TextMeasurer = approximate_text_width
) -> WhiteboardDocument:
    """
    Delete the topmost element under ``point`` on the active page.

    Returns the same document when nothing is hit.
    """
    element = element_at(document.active_page, point, measure_text)
    if element is None:
        return document
    logger.debug(f"Erasing {element.kind} {element.id}")
    return delete_element(document, element.id)


# ==================== Selection ====================

def selection_box(element: PageElement, measure_text: TextMeasurer = approximate_text_width) -> Rect:
    """Box drawn around a selected element."""
    return bounding_box(element, measure_text)


def select_at(
    page: Page,
    point: Point,
    measure_text: TextMeasurer = approximate_text_width
) -> Optional[PageElement]:
    """Topmost element whose selection box contains ``point``."""
    for element in reversed(page.elements):
        if selection_box(element, measure_text).contains(point):
            return element
    return None


__all__ = [
    'HIT_TOLERANCE',
    'hit_test',
    'element_at',
    'erase_at',
    'selection_box',
    'select_at',
]
