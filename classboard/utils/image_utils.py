"""
Image utilities - QImage / numpy conversion, PNG encoding and data URLs

Pattern: QImage <-> numpy via constBits, OpenCV for encode/decode/resize
"""

import base64
import logging
from pathlib import Path
from typing import Optional, Union

import cv2
import numpy as np
from PyQt6.QtGui import QImage

logger = logging.getLogger(__name__)

DATA_URL_PREFIX = 'data:'
PNG_DATA_URL_PREFIX = 'data:image/png;base64,'


# ==================== QImage <-> numpy ====================

def qimage_to_array(image: QImage) -> np.ndarray:
    """
    Copy a QImage into an (H, W, 4) BGRA uint8 array.

    Format_ARGB32 stores pixels as B, G, R, A bytes on little-endian
    machines, which is the channel order OpenCV expects.
    """
    if image.format() != QImage.Format.Format_ARGB32:
        image = image.convertToFormat(QImage.Format.Format_ARGB32)

    width = image.width()
    height = image.height()
    stride = image.bytesPerLine()

    ptr = image.constBits()
    ptr.setsize(stride * height)
    array = np.array(ptr, dtype=np.uint8).reshape((height, stride // 4, 4))
    return array[:, :width, :].copy()


def array_to_qimage(array: np.ndarray) -> QImage:
    """Wrap a BGRA (H, W, 4) or BGR (H, W, 3) array as a detached QImage."""
    if array.ndim == 2:
        array = cv2.cvtColor(array, cv2.COLOR_GRAY2BGRA)
    elif array.shape[2] == 3:
        array = cv2.cvtColor(array, cv2.COLOR_BGR2BGRA)

    array = np.ascontiguousarray(array)
    height, width = array.shape[:2]
    image = QImage(array.data, width, height, width * 4, QImage.Format.Format_ARGB32)
    # Copy so the numpy buffer can be garbage collected
    return image.copy()


# ==================== Encode / Decode ====================

def encode_png(array: np.ndarray) -> Optional[bytes]:
    """Encode an image array as PNG bytes (None on failure)."""
    ok, buffer = cv2.imencode('.png', array)
    if not ok:
        logger.warning("PNG encoding failed")
        return None
    return buffer.tobytes()


def decode_image_bytes(data: bytes) -> Optional[np.ndarray]:
    """Decode encoded image bytes into a BGR(A) array (None if undecodable)."""
    if not data:
        return None
    buffer = np.frombuffer(data, dtype=np.uint8)
    return cv2.imdecode(buffer, cv2.IMREAD_UNCHANGED)


def qimage_to_png_bytes(image: QImage) -> Optional[bytes]:
    return encode_png(qimage_to_array(image))


def resize_to_fit(array: np.ndarray, max_size: int) -> np.ndarray:
    """Downscale so the longest side is at most ``max_size`` (never upscales)."""
    height, width = array.shape[:2]
    longest = max(width, height)
    if longest <= max_size or longest == 0:
        return array
    factor = max_size / float(longest)
    new_size = (max(1, int(round(width * factor))), max(1, int(round(height * factor))))
    return cv2.resize(array, new_size, interpolation=cv2.INTER_AREA)


# ==================== Data URLs ====================

def png_data_url(array: np.ndarray) -> Optional[str]:
    """Encode an image array as a ``data:image/png;base64,...`` URL."""
    png = encode_png(array)
    if png is None:
        return None
    return PNG_DATA_URL_PREFIX + base64.b64encode(png).decode('ascii')


def decode_data_url(url: str) -> Optional[bytes]:
    """Return the payload bytes of a base64 data URL, or None."""
    if not url.startswith(DATA_URL_PREFIX) or ',' not in url:
        return None
    header, payload = url.split(',', 1)
    if ';base64' not in header:
        return None
    try:
        return base64.b64decode(payload, validate=True)
    except ValueError as e:
        logger.warning(f"Invalid base64 payload in data URL: {e}")
        return None


def load_locator_as_qimage(locator: Union[str, Path]) -> Optional[QImage]:
    """
    Load the image behind an ImageRef source locator.

    Args:
        locator: Base64 data URL or file path

    Returns:
        QImage or None if the image cannot be loaded
    """
    locator = str(locator)
    if locator.startswith(DATA_URL_PREFIX):
        payload = decode_data_url(locator)
        if payload is None:
            return None
        image = QImage.fromData(payload)
    else:
        path = Path(locator)
        if not path.exists():
            return None
        image = QImage(str(path))

    if image.isNull():
        return None
    return image


__all__ = [
    'qimage_to_array',
    'array_to_qimage',
    'encode_png',
    'decode_image_bytes',
    'qimage_to_png_bytes',
    'resize_to_fit',
    'png_data_url',
    'decode_data_url',
    'load_locator_as_qimage',
]
