"""Qt rendering of whiteboard pages: painting, text measurement, offscreen images"""

from .text_metrics import QtTextMeasurer, make_font
from .element_painter import (
    ImageCache,
    create_pen,
    paint_element,
    paint_selection,
    paint_page,
    page_render_size,
    render_page_image,
)

__all__ = [
    'QtTextMeasurer',
    'make_font',
    'ImageCache',
    'create_pen',
    'paint_element',
    'paint_selection',
    'paint_page',
    'page_render_size',
    'render_page_image',
]
