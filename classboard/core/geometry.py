"""
Geometry kernel - Distances, bounding boxes and point-in-shape tests

All functions are pure and work in document coordinates.
"""

import math
from dataclasses import dataclass
from typing import Callable, Iterable, Tuple

from ..config import Config
from .elements import (
    Point, Element, Stroke, LineSegment, Rectangle, Circle,
    TextLabel, ImageRef, LaserMark,
)


BOUNDS_PADDING = Config.BOUNDS_PADDING

# (text, font_family, font_size) -> rendered width
TextMeasurer = Callable[[str, str, float], float]


@dataclass(frozen=True)
class Rect:
    """Axis-aligned rectangle (x, y is the top-left corner)."""

    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def center(self) -> Point:
        return (self.x + self.width / 2.0, self.y + self.height / 2.0)

    def contains(self, point: Point) -> bool:
        """Inclusive containment test."""
        px, py = point
        return self.x <= px <= self.right and self.y <= py <= self.bottom

    def expanded(self, margin: float) -> 'Rect':
        return Rect(
            self.x - margin,
            self.y - margin,
            self.width + 2 * margin,
            self.height + 2 * margin,
        )


def approximate_text_width(text: str, font_family: str, font_size: float) -> float:
    """
    Estimate text width without a font engine.

    Used when no rendering collaborator is attached (headless use, tests).
    """
    return len(text) * font_size * 0.6


# ==================== Distances ====================

def distance(a: Point, b: Point) -> float:
    return math.hypot(a[0] - b[0], a[1] - b[1])


def distance_point_to_segment(p: Point, a: Point, b: Point) -> float:
    """
    Shortest distance from ``p`` to the segment ``a``-``b``.

    The projection of ``p`` is clamped to the segment; a degenerate segment
    (a == b) falls back to point distance.
    """
    dx = b[0] - a[0]
    dy = b[1] - a[1]
    length_sq = dx * dx + dy * dy
    if length_sq == 0:
        return distance(p, a)

    t = ((p[0] - a[0]) * dx + (p[1] - a[1]) * dy) / length_sq
    t = max(0.0, min(1.0, t))
    return distance(p, (a[0] + t * dx, a[1] + t * dy))


# ==================== Point-in-shape ====================

def point_near_points(p: Point, points: Iterable[Point], radius: float) -> bool:
    """True if ``p`` is strictly closer than ``radius`` to any of ``points``."""
    return any(distance(p, q) < radius for q in points)


def point_in_circle(p: Point, center: Point, radius: float) -> bool:
    return distance(p, center) <= radius


def point_in_rect(p: Point, rect: Rect, margin: float = 0.0) -> bool:
    return rect.expanded(margin).contains(p) if margin else rect.contains(p)


# ==================== Bounding boxes ====================

def _points_bounds(points: Iterable[Point]) -> Rect:
    xs, ys = zip(*points)
    return Rect(min(xs), min(ys), max(xs) - min(xs), max(ys) - min(ys))


def text_box(label: TextLabel, measure_text: TextMeasurer = approximate_text_width) -> Rect:
    """Unpadded text box; y is the baseline so the box sits above it."""
    width = measure_text(label.text, label.font_family, label.font_size)
    return Rect(label.x, label.y - label.font_size, width, label.font_size)


def shape_bounds(element: Element, measure_text: TextMeasurer = approximate_text_width) -> Rect:
    """
    Unpadded extent of an element.

    Raises:
        TypeError: For LaserMark or unknown objects
    """
    if isinstance(element, Stroke):
        return _points_bounds(element.points)
    if isinstance(element, LineSegment):
        return _points_bounds(((element.x1, element.y1), (element.x2, element.y2)))
    if isinstance(element, (Rectangle, ImageRef)):
        return Rect(element.x, element.y, element.width, element.height)
    if isinstance(element, Circle):
        r = element.radius
        return Rect(element.x - r, element.y - r, 2 * r, 2 * r)
    if isinstance(element, TextLabel):
        return text_box(element, measure_text)
    if isinstance(element, LaserMark):
        raise TypeError("LaserMark has no bounding box")
    raise TypeError(f"Unsupported element type: {type(element).__name__}")


def bounding_box(
    element: Element,
    measure_text: TextMeasurer = approximate_text_width,
    padding: float = BOUNDS_PADDING
) -> Rect:
    """
    Padded bounding box used for selection and export extents.

    Args:
        element: Any page element (not LaserMark)
        measure_text: Text width provider for TextLabel
        padding: Margin added on every side

    Returns:
        Rect in document coordinates
    """
    return shape_bounds(element, measure_text).expanded(padding)


def elements_extent(
    elements: Iterable[Element],
    measure_text: TextMeasurer = approximate_text_width
) -> Tuple[float, float]:
    """Right and bottom edge covering every element's bounding box (0, 0 if empty)."""
    right = 0.0
    bottom = 0.0
    for element in elements:
        box = bounding_box(element, measure_text)
        right = max(right, box.right)
        bottom = max(bottom, box.bottom)
    return right, bottom


__all__ = [
    'Rect',
    'TextMeasurer',
    'BOUNDS_PADDING',
    'approximate_text_width',
    'distance',
    'distance_point_to_segment',
    'point_near_points',
    'point_in_circle',
    'point_in_rect',
    'text_box',
    'shape_bounds',
    'bounding_box',
    'elements_extent',
]
