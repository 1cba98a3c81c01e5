"""
Viewport - Pan/zoom transform between screen and document coordinates

    document = (screen - offset) / scale
    screen   = document * scale + offset
"""

from dataclasses import dataclass, replace

from ..config import Config
from .elements import Point


def clamp_scale(scale: float) -> float:
    """Clamp a zoom factor into the supported range."""
    return max(Config.MIN_SCALE, min(Config.MAX_SCALE, scale))


@dataclass(frozen=True)
class Viewport:
    scale: float = 1.0
    offset_x: float = 0.0
    offset_y: float = 0.0

    def __post_init__(self):
        object.__setattr__(self, 'scale', clamp_scale(float(self.scale)))

    # ==================== Conversion ====================

    def screen_to_document(self, point: Point) -> Point:
        return (
            (point[0] - self.offset_x) / self.scale,
            (point[1] - self.offset_y) / self.scale,
        )

    def document_to_screen(self, point: Point) -> Point:
        return (
            point[0] * self.scale + self.offset_x,
            point[1] * self.scale + self.offset_y,
        )

    # ==================== Zoom & Pan ====================

    def with_scale(self, scale: float) -> 'Viewport':
        return replace(self, scale=scale)

    def zoom_in(self) -> 'Viewport':
        return self.with_scale(round(self.scale + Config.ZOOM_STEP, 2))

    def zoom_out(self) -> 'Viewport':
        return self.with_scale(round(self.scale - Config.ZOOM_STEP, 2))

    def zoom_about(self, screen_point: Point, scale: float) -> 'Viewport':
        """Rescale while keeping the document point under ``screen_point`` fixed."""
        anchor = self.screen_to_document(screen_point)
        new_scale = clamp_scale(scale)
        return Viewport(
            scale=new_scale,
            offset_x=screen_point[0] - anchor[0] * new_scale,
            offset_y=screen_point[1] - anchor[1] * new_scale,
        )

    def panned(self, dx: float, dy: float) -> 'Viewport':
        """Shift the view by a screen-space delta."""
        return replace(self, offset_x=self.offset_x + dx, offset_y=self.offset_y + dy)

    def reset(self) -> 'Viewport':
        return Viewport()

    @property
    def zoom_percent(self) -> int:
        return int(round(self.scale * 100))


__all__ = ['Viewport', 'clamp_scale']
