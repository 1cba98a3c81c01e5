"""
Image Import - Place external pictures on the active page

Decodes an image file with OpenCV (Pillow for formats OpenCV cannot read,
such as GIF), re-encodes it as a PNG data URL and commits an ImageRef at the
default placement. A failed import never changes the document.
"""

import logging
from pathlib import Path
from typing import NamedTuple, Optional, Tuple, Union

import cv2
import numpy as np
from PIL import Image, UnidentifiedImageError
from PyQt6.QtCore import QObject, QRunnable, pyqtSignal

from ..config import Config
from ..core.document import WhiteboardDocument, add_element
from ..core.elements import ImageRef, new_element_id
from ..core.geometry import Point
from ..utils.image_utils import decode_image_bytes, png_data_url

logger = logging.getLogger(__name__)


class ImportResult(NamedTuple):
    """Outcome of import_image; ``document`` is unchanged on failure."""

    document: WhiteboardDocument
    success: bool
    message: str
    element: Optional[ImageRef] = None


# ==================== Decoding ====================

def _decode_with_pillow(path: Path) -> Optional[np.ndarray]:
    try:
        with Image.open(path) as image:
            rgba = np.array(image.convert('RGBA'))
    except (OSError, UnidentifiedImageError) as e:
        logger.debug(f"Pillow could not decode {path}: {e}")
        return None
    return cv2.cvtColor(rgba, cv2.COLOR_RGBA2BGRA)


def load_image_array(path: Union[str, Path]) -> Tuple[Optional[np.ndarray], str]:
    """
    Read and decode an image file.

    Returns:
        Tuple of (BGR(A) array or None, message)
    """
    path = Path(path)
    if not path.is_file():
        return None, f"File not found: {path}"

    try:
        data = np.fromfile(str(path), dtype=np.uint8)
    except OSError as e:
        return None, f"Could not read {path.name}: {e}"

    array = decode_image_bytes(data.tobytes())
    if array is None:
        array = _decode_with_pillow(path)
    if array is None:
        return None, f"Unsupported or corrupt image: {path.name}"
    return array, f"Loaded {path.name}"


def load_image_data_url(path: Union[str, Path]) -> Tuple[Optional[str], str]:
    """
    Decode an image file into a PNG data URL.

    Returns:
        Tuple of (data URL or None, message)
    """
    array, message = load_image_array(path)
    if array is None:
        return None, message

    data_url = png_data_url(array)
    if data_url is None:
        return None, f"Could not encode {Path(path).name} as PNG"
    return data_url, message


# ==================== Placement ====================

def create_image_element(
    document: WhiteboardDocument,
    source_locator: str,
    position: Optional[Point] = None
) -> ImageRef:
    """ImageRef with the default import size at ``position`` (default 100, 100)."""
    x, y = position if position is not None else (Config.IMPORT_IMAGE_X, Config.IMPORT_IMAGE_Y)
    return ImageRef(
        id=new_element_id(document.active_page.element_ids, prefix='image'),
        x=float(x),
        y=float(y),
        width=Config.IMPORT_IMAGE_WIDTH,
        height=Config.IMPORT_IMAGE_HEIGHT,
        source_locator=source_locator,
    )


def place_image(
    document: WhiteboardDocument,
    source_locator: str,
    position: Optional[Point] = None
) -> ImportResult:
    """Commit an already-decoded image to the active page."""
    element = create_image_element(document, source_locator, position)
    updated = add_element(document, element)
    if updated is document:
        return ImportResult(document, False, "Image could not be added to the page")
    return ImportResult(updated, True, f"Added image to {updated.active_page.display_name}", element)


def import_image(
    document: WhiteboardDocument,
    path: Union[str, Path],
    position: Optional[Point] = None
) -> ImportResult:
    """
    Import an image file onto the active page.

    Args:
        document: Current document
        path: Image file to import
        position: Top-left corner (defaults to the configured placement)

    Returns:
        ImportResult; on failure ``document`` is returned unchanged
    """
    data_url, message = load_image_data_url(path)
    if data_url is None:
        logger.warning(f"Image import failed: {message}")
        return ImportResult(document, False, message)

    result = place_image(document, data_url, position)
    if result.success:
        logger.info(f"Imported image {Path(path).name} as {result.element.id}")
    return result


# ==================== Background Task ====================

class ImageImportSignals(QObject):
    """Signals for ImageImportTask"""

    decoded = pyqtSignal(str, str)  # data_url, message
    failed = pyqtSignal(str)  # error_message


class ImageImportTask(QRunnable):
    """
    Decode an image off the UI thread.

    Only decoding happens in the worker; the receiver commits the result with
    place_image() on the UI thread.
    """

    def __init__(self, path: Union[str, Path]):
        super().__init__()
        self.path = Path(path)
        self.signals = ImageImportSignals()

    def run(self):
        """Execute image decoding"""
        try:
            data_url, message = load_image_data_url(self.path)
        except Exception as e:
            logger.exception(f"Unexpected error decoding {self.path}")
            self.signals.failed.emit(f"Image import error: {e}")
            return

        if data_url is None:
            self.signals.failed.emit(message)
        else:
            self.signals.decoded.emit(data_url, message)


__all__ = [
    'ImportResult',
    'load_image_array',
    'load_image_data_url',
    'create_image_element',
    'place_image',
    'import_image',
    'ImageImportSignals',
    'ImageImportTask',
]
