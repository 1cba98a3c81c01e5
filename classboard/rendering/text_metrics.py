"""
Text metrics - Font-based text measurement for TextLabel bounding boxes

Requires a QGuiApplication (font database) to exist.
"""

from typing import Dict, Tuple

from PyQt6.QtGui import QFont, QFontMetricsF


def make_font(font_family: str, font_size: float) -> QFont:
    """Font with a pixel size so one unit matches one document unit."""
    font = QFont(font_family)
    font.setPixelSize(max(1, int(round(font_size))))
    return font


class QtTextMeasurer:
    """
    Callable text measurer backed by QFontMetricsF.

    Usage:
        measure = QtTextMeasurer()
        width = measure("Hello", "Arial", 16)
    """

    def __init__(self):
        self._metrics: Dict[Tuple[str, int], QFontMetricsF] = {}

    def __call__(self, text: str, font_family: str, font_size: float) -> float:
        key = (font_family, max(1, int(round(font_size))))
        metrics = self._metrics.get(key)
        if metrics is None:
            metrics = QFontMetricsF(make_font(font_family, font_size))
            self._metrics[key] = metrics
        return metrics.horizontalAdvance(text)


__all__ = ['QtTextMeasurer', 'make_font']
