"""Utility functions for Classboard"""

from .logging_config import LoggingConfig

# JSON utilities
from .json_utils import safe_json_load, safe_json_save

# String utilities
from .string_utils import sanitize_filename, page_file_stem

# Image utilities
from .image_utils import (
    qimage_to_array,
    array_to_qimage,
    encode_png,
    decode_image_bytes,
    qimage_to_png_bytes,
    resize_to_fit,
    png_data_url,
    decode_data_url,
    load_locator_as_qimage,
)

__all__ = [
    'LoggingConfig',
    # JSON utilities
    'safe_json_load',
    'safe_json_save',
    # String utilities
    'sanitize_filename',
    'page_file_stem',
    # Image utilities
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
