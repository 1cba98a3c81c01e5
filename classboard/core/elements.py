"""
Element model - Drawable objects placed on a whiteboard page

Every variant is an immutable dataclass carrying a class-level ``kind`` tag.
Geometry, hit-testing and rendering dispatch on the concrete class, so a new
variant has to be handled in each of those places.

Variants:
- FreehandStroke (pen)
- HighlighterStroke (translucent, 3x width)
- LineSegment
- Rectangle
- Circle (x, y is the centre)
- TextLabel (x, y is the baseline origin)
- ImageRef
- LaserMark (ephemeral, never stored on a page)
"""

import math
import uuid as uuid_lib
from dataclasses import dataclass, fields, asdict
from typing import Any, ClassVar, Container, Dict, Optional, Tuple, Union

from ..config import Config


Point = Tuple[float, float]


class ElementValidationError(ValueError):
    """Raised when element data breaks a per-variant rule."""


def _require(condition: bool, message: str):
    if not condition:
        raise ElementValidationError(message)


def _check_id(element_id: str):
    _require(isinstance(element_id, str) and bool(element_id), "Element id must be a non-empty string")


def _check_numbers(element, *names: str):
    """Coerce numeric fields to float in place, rejecting anything non-finite."""
    for name in names:
        value = getattr(element, name)
        try:
            number = float(value)
        except (TypeError, ValueError):
            raise ElementValidationError(f"{name} must be a number, got {value!r}") from None
        _require(not isinstance(value, bool) and math.isfinite(number), f"{name} must be a finite number")
        object.__setattr__(element, name, number)


def _check_color(color: Optional[str], name: str = 'stroke_color', optional: bool = False):
    if optional and color is None:
        return
    _require(isinstance(color, str) and bool(color), f"{name} must be a non-empty colour string")


# ==================== Strokes ====================

@dataclass(frozen=True)
class Stroke:
    """Shared shape of the freehand stroke variants."""

    id: str
    points: Tuple[Point, ...]
    stroke_color: str = Config.DEFAULT_STROKE_COLOR
    stroke_width: float = Config.DEFAULT_STROKE_WIDTH

    kind: ClassVar[str] = 'stroke'

    def __post_init__(self):
        _check_id(self.id)
        try:
            points = tuple((float(p[0]), float(p[1])) for p in self.points)
        except (TypeError, ValueError, IndexError) as e:
            raise ElementValidationError(f"Invalid stroke points: {e}") from e
        _require(all(math.isfinite(c) for p in points for c in p), "Stroke points must be finite")
        _check_numbers(self, 'stroke_width')
        _require(len(points) >= 1, "A stroke needs at least one point")
        _require(self.stroke_width > 0, "stroke_width must be positive")
        _check_color(self.stroke_color)
        object.__setattr__(self, 'points', points)

    def with_point(self, point: Point) -> 'Stroke':
        """Return a copy with one more point appended."""
        return type(self)(
            id=self.id,
            points=self.points + ((float(point[0]), float(point[1])),),
            stroke_color=self.stroke_color,
            stroke_width=self.stroke_width,
        )


@dataclass(frozen=True)
class FreehandStroke(Stroke):
    kind: ClassVar[str] = 'pen'


@dataclass(frozen=True)
class HighlighterStroke(Stroke):
    """Freehand stroke drawn translucent at a multiple of the base width."""

    kind: ClassVar[str] = 'highlighter'
    OPACITY: ClassVar[float] = Config.HIGHLIGHTER_OPACITY
    WIDTH_MULTIPLIER: ClassVar[int] = Config.HIGHLIGHTER_WIDTH_MULTIPLIER


# ==================== Shapes ====================

@dataclass(frozen=True)
class LineSegment:
    id: str
    x1: float
    y1: float
    x2: float
    y2: float
    stroke_color: str = Config.DEFAULT_STROKE_COLOR
    stroke_width: float = Config.DEFAULT_STROKE_WIDTH

    kind: ClassVar[str] = 'line'

    def __post_init__(self):
        _check_id(self.id)
        _check_numbers(self, 'x1', 'y1', 'x2', 'y2', 'stroke_width')
        _require(self.stroke_width > 0, "stroke_width must be positive")
        _check_color(self.stroke_color)


@dataclass(frozen=True)
class Rectangle:
    id: str
    x: float
    y: float
    width: float
    height: float
    stroke_color: str = Config.DEFAULT_STROKE_COLOR
    stroke_width: float = Config.DEFAULT_STROKE_WIDTH
    fill_color: Optional[str] = None

    kind: ClassVar[str] = 'rectangle'

    def __post_init__(self):
        _check_id(self.id)
        _check_numbers(self, 'x', 'y', 'width', 'height', 'stroke_width')
        _require(self.width >= 0 and self.height >= 0, "Rectangle size must not be negative")
        _require(self.stroke_width > 0, "stroke_width must be positive")
        _check_color(self.stroke_color)
        _check_color(self.fill_color, 'fill_color', optional=True)


@dataclass(frozen=True)
class Circle:
    id: str
    x: float
    y: float
    radius: float
    stroke_color: str = Config.DEFAULT_STROKE_COLOR
    stroke_width: float = Config.DEFAULT_STROKE_WIDTH
    fill_color: Optional[str] = None

    kind: ClassVar[str] = 'circle'

    def __post_init__(self):
        _check_id(self.id)
        _check_numbers(self, 'x', 'y', 'radius', 'stroke_width')
        _require(self.radius >= 0, "Circle radius must not be negative")
        _require(self.stroke_width > 0, "stroke_width must be positive")
        _check_color(self.stroke_color)
        _check_color(self.fill_color, 'fill_color', optional=True)


@dataclass(frozen=True)
class TextLabel:
    id: str
    x: float
    y: float
    text: str
    stroke_color: str = Config.DEFAULT_STROKE_COLOR
    font_size: float = Config.DEFAULT_FONT_SIZE
    font_family: str = Config.DEFAULT_FONT_FAMILY

    kind: ClassVar[str] = 'text'

    def __post_init__(self):
        _check_id(self.id)
        _check_numbers(self, 'x', 'y', 'font_size')
        _require(isinstance(self.text, str) and bool(self.text), "Text must not be empty")
        _require(self.font_size > 0, "font_size must be positive")
        _require(isinstance(self.font_family, str) and bool(self.font_family), "font_family must not be empty")
        _check_color(self.stroke_color)


@dataclass(frozen=True)
class ImageRef:
    id: str
    x: float
    y: float
    width: float
    height: float
    source_locator: str

    kind: ClassVar[str] = 'image'

    def __post_init__(self):
        _check_id(self.id)
        _check_numbers(self, 'x', 'y', 'width', 'height')
        _require(self.width > 0 and self.height > 0, "Image size must be positive")
        _require(isinstance(self.source_locator, str) and bool(self.source_locator),
                 "Image needs a source locator")


@dataclass(frozen=True)
class LaserMark:
    """Pointer dot shown only while the laser tool is pressed."""

    x: float
    y: float
    stroke_color: str = Config.LASER_COLOR

    kind: ClassVar[str] = 'laser'

    def __post_init__(self):
        _check_numbers(self, 'x', 'y')
        _check_color(self.stroke_color)


PageElement = Union[FreehandStroke, HighlighterStroke, LineSegment, Rectangle,
                    Circle, TextLabel, ImageRef]
Element = Union[PageElement, LaserMark]

STROKE_TYPES = (FreehandStroke, HighlighterStroke)
PAGE_ELEMENT_TYPES = (FreehandStroke, HighlighterStroke, LineSegment, Rectangle,
                      Circle, TextLabel, ImageRef)

ELEMENT_TYPES: Dict[str, type] = {
    cls.kind: cls
    for cls in PAGE_ELEMENT_TYPES + (LaserMark,)
}


# ==================== Ids ====================

def new_element_id(taken: Container[str] = (), prefix: str = 'element') -> str:
    """
    Generate a short element id not present in ``taken``.

    Args:
        taken: Ids already used on the page
        prefix: Id prefix (e.g. 'element', 'image')

    Returns:
        Id of the form ``{prefix}_{8 hex chars}``
    """
    while True:
        element_id = f"{prefix}_{uuid_lib.uuid4().hex[:8]}"
        if element_id not in taken:
            return element_id


def is_page_element(element: Any) -> bool:
    """True for variants allowed on a page (everything except LaserMark)."""
    return isinstance(element, PAGE_ELEMENT_TYPES)


# ==================== Serialization ====================

def element_to_dict(element: Element) -> Dict[str, Any]:
    """Convert an element to a plain JSON-compatible record."""
    data = asdict(element)
    if isinstance(element, STROKE_TYPES):
        data['points'] = [[x, y] for x, y in element.points]
    data['type'] = element.kind
    return data


def element_from_dict(data: Dict[str, Any]) -> Element:
    """
    Rebuild an element from a record produced by element_to_dict.

    Raises:
        ElementValidationError: Unknown type, missing fields or invalid values
    """
    if not isinstance(data, dict):
        raise ElementValidationError(f"Element record must be a mapping, got {type(data).__name__}")

    kind = data.get('type')
    cls = ELEMENT_TYPES.get(kind)
    if cls is None:
        raise ElementValidationError(f"Unknown element type: {kind!r}")

    names = {f.name for f in fields(cls)}
    kwargs = {key: value for key, value in data.items() if key in names}
    try:
        return cls(**kwargs)
    except TypeError as e:
        raise ElementValidationError(f"Invalid {kind} record: {e}") from e


__all__ = [
    'Point',
    'ElementValidationError',
    'Stroke',
    'FreehandStroke',
    'HighlighterStroke',
    'LineSegment',
    'Rectangle',
    'Circle',
    'TextLabel',
    'ImageRef',
    'LaserMark',
    'Element',
    'PageElement',
    'STROKE_TYPES',
    'PAGE_ELEMENT_TYPES',
    'ELEMENT_TYPES',
    'new_element_id',
    'is_page_element',
    'element_to_dict',
    'element_from_dict',
]
