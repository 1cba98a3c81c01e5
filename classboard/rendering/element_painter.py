"""
Element painter - QPainter rendering of whiteboard pages

Paints committed elements, the in-progress draft and the selection box.
Used by the canvas widget, page thumbnails and the PNG/PDF exporters.
"""

import math
from collections import OrderedDict
from typing import Optional, Tuple

from PyQt6.QtCore import Qt, QPointF, QRectF
from PyQt6.QtGui import QImage, QPainter, QPen, QBrush, QColor, QPainterPath

from ..config import Config
from ..core.elements import (
    Element, Stroke, HighlighterStroke, LineSegment, Rectangle, Circle,
    TextLabel, ImageRef, LaserMark,
)
from ..core.document import Page
from ..core.geometry import TextMeasurer, elements_extent
from ..core.hit_testing import selection_box
from ..core.viewport import Viewport
from ..utils.image_utils import load_locator_as_qimage
from .text_metrics import QtTextMeasurer, make_font


# ==================== Image Cache ====================

class ImageCache:
    """LRU cache of decoded ImageRef sources keyed by locator."""

    def __init__(self, max_size: int = 32):
        self._cache: "OrderedDict[str, Optional[QImage]]" = OrderedDict()
        self._max_size = max_size

    def get(self, locator: str) -> Optional[QImage]:
        if locator in self._cache:
            self._cache.move_to_end(locator)
            return self._cache[locator]

        image = load_locator_as_qimage(locator)
        self._cache[locator] = image
        while len(self._cache) > self._max_size:
            self._cache.popitem(last=False)
        return image

    def clear(self):
        self._cache.clear()


# ==================== Helpers ====================

def create_pen(color: str, width: float, style: Qt.PenStyle = Qt.PenStyle.SolidLine) -> QPen:
    """Round-capped pen used for all ink and outlines."""
    pen = QPen(QColor(color), width)
    pen.setStyle(style)
    pen.setCapStyle(Qt.PenCapStyle.RoundCap)
    pen.setJoinStyle(Qt.PenJoinStyle.RoundJoin)
    return pen


def _fill_brush(fill_color: Optional[str]) -> QBrush:
    if fill_color:
        return QBrush(QColor(fill_color))
    return QBrush(Qt.BrushStyle.NoBrush)


def _stroke_path(points) -> QPainterPath:
    path = QPainterPath()
    path.moveTo(QPointF(*points[0]))
    for point in points[1:]:
        path.lineTo(QPointF(*point))
    return path


# ==================== Elements ====================

def _paint_stroke(painter: QPainter, stroke: Stroke):
    painter.save()
    if isinstance(stroke, HighlighterStroke):
        painter.setOpacity(painter.opacity() * HighlighterStroke.OPACITY)
    painter.setPen(create_pen(stroke.stroke_color, stroke.stroke_width))
    painter.setBrush(Qt.BrushStyle.NoBrush)
    if len(stroke.points) == 1:
        painter.drawPoint(QPointF(*stroke.points[0]))
    else:
        painter.drawPath(_stroke_path(stroke.points))
    painter.restore()


def _paint_text(painter: QPainter, label: TextLabel):
    painter.save()
    painter.setFont(make_font(label.font_family, label.font_size))
    painter.setPen(QColor(label.stroke_color))
    # y is the baseline
    painter.drawText(QPointF(label.x, label.y), label.text)
    painter.restore()


def _paint_image(painter: QPainter, ref: ImageRef, image_cache: Optional[ImageCache]):
    target = QRectF(ref.x, ref.y, ref.width, ref.height)
    cache = image_cache if image_cache is not None else ImageCache(max_size=1)
    image = cache.get(ref.source_locator)
    if image is None:
        # Placeholder for an unreadable source
        painter.save()
        painter.setPen(create_pen('#999999', 1, Qt.PenStyle.DashLine))
        painter.setBrush(QColor('#eeeeee'))
        painter.drawRect(target)
        painter.drawLine(target.topLeft(), target.bottomRight())
        painter.drawLine(target.topRight(), target.bottomLeft())
        painter.restore()
        return
    painter.drawImage(target, image)


def _paint_laser(painter: QPainter, mark: LaserMark):
    painter.save()
    painter.setOpacity(painter.opacity() * Config.LASER_OPACITY)
    painter.setPen(Qt.PenStyle.NoPen)
    painter.setBrush(QColor(mark.stroke_color))
    painter.drawEllipse(QPointF(mark.x, mark.y), Config.LASER_RADIUS, Config.LASER_RADIUS)
    painter.restore()


def paint_element(
    painter: QPainter,
    element: Element,
    image_cache: Optional[ImageCache] = None
):
    """
    Paint a single element in document coordinates.

    Args:
        painter: Active painter (any transform already applied)
        element: Element to draw, including LaserMark drafts
        image_cache: Cache for decoded ImageRef sources
    """
    if isinstance(element, Stroke):
        _paint_stroke(painter, element)

    elif isinstance(element, LineSegment):
        painter.setPen(create_pen(element.stroke_color, element.stroke_width))
        painter.drawLine(QPointF(element.x1, element.y1), QPointF(element.x2, element.y2))

    elif isinstance(element, Rectangle):
        painter.setPen(create_pen(element.stroke_color, element.stroke_width))
        painter.setBrush(_fill_brush(element.fill_color))
        painter.drawRect(QRectF(element.x, element.y, element.width, element.height))

    elif isinstance(element, Circle):
        painter.setPen(create_pen(element.stroke_color, element.stroke_width))
        painter.setBrush(_fill_brush(element.fill_color))
        painter.drawEllipse(QPointF(element.x, element.y), element.radius, element.radius)

    elif isinstance(element, TextLabel):
        _paint_text(painter, element)

    elif isinstance(element, ImageRef):
        _paint_image(painter, element, image_cache)

    elif isinstance(element, LaserMark):
        _paint_laser(painter, element)

    else:
        raise TypeError(f"Cannot paint {type(element).__name__}")


def paint_selection(painter: QPainter, element: Element, measure_text: TextMeasurer):
    """Dashed highlight around a selected element."""
    box = selection_box(element, measure_text)
    painter.save()
    pen = QPen(QColor(Config.SELECTION_COLOR), Config.SELECTION_WIDTH)
    pen.setStyle(Qt.PenStyle.DashLine)
    painter.setPen(pen)
    painter.setBrush(Qt.BrushStyle.NoBrush)
    painter.drawRect(QRectF(box.x, box.y, box.width, box.height))
    painter.restore()


def paint_page(
    painter: QPainter,
    page: Page,
    viewport: Optional[Viewport] = None,
    draft: Optional[Element] = None,
    selected_id: Optional[str] = None,
    measure_text: Optional[TextMeasurer] = None,
    image_cache: Optional[ImageCache] = None
):
    """
    Paint a page's elements (bottom to top), then the draft and selection.

    The background is not filled here; callers fill their own target rect.
    """
    measure_text = measure_text or QtTextMeasurer()

    painter.save()
    painter.setRenderHint(QPainter.RenderHint.Antialiasing)
    painter.setRenderHint(QPainter.RenderHint.SmoothPixmapTransform)
    if viewport is not None:
        painter.translate(viewport.offset_x, viewport.offset_y)
        painter.scale(viewport.scale, viewport.scale)

    selected = None
    for element in page.elements:
        paint_element(painter, element, image_cache)
        if selected_id is not None and element.id == selected_id:
            selected = element

    if draft is not None:
        paint_element(painter, draft, image_cache)

    if selected is not None:
        paint_selection(painter, selected, measure_text)

    painter.restore()


# ==================== Offscreen ====================

def page_render_size(page: Page, measure_text: Optional[TextMeasurer] = None) -> Tuple[int, int]:
    """Output size covering every element plus a margin, never below the export minimum."""
    right, bottom = elements_extent(page.elements, measure_text or QtTextMeasurer())
    width = max(Config.EXPORT_MIN_WIDTH, int(math.ceil(right)) + Config.EXPORT_MARGIN)
    height = max(Config.EXPORT_MIN_HEIGHT, int(math.ceil(bottom)) + Config.EXPORT_MARGIN)
    return width, height


def render_page_image(
    page: Page,
    size: Optional[Tuple[int, int]] = None,
    measure_text: Optional[TextMeasurer] = None,
    image_cache: Optional[ImageCache] = None
) -> QImage:
    """
    Render a page (background + elements) into a new QImage.

    Args:
        page: Page to render
        size: (width, height) in pixels; defaults to page_render_size
        measure_text: Text measurer for extents
        image_cache: Cache for ImageRef sources

    Returns:
        ARGB32 QImage
    """
    measure_text = measure_text or QtTextMeasurer()
    width, height = size or page_render_size(page, measure_text)

    image = QImage(width, height, QImage.Format.Format_ARGB32)
    image.fill(QColor(page.background_color))

    painter = QPainter(image)
    try:
        paint_page(painter, page, measure_text=measure_text, image_cache=image_cache)
    finally:
        painter.end()
    return image


__all__ = [
    'ImageCache',
    'create_pen',
    'paint_element',
    'paint_selection',
    'paint_page',
    'page_render_size',
    'render_page_image',
]
