"""
Global configuration for Classboard

Central place for whiteboard constants: hit-testing tolerances, zoom
bounds, tool defaults, toolbar presets and storage locations.
"""

import os
import sys
from pathlib import Path
from typing import Final


class Config:
    """Central configuration class for all application settings"""

    # Application metadata
    APP_NAME: Final[str] = "Classboard"
    APP_VERSION: Final[str] = "1.0.0"
    APP_AUTHOR: Final[str] = "Classboard"

    # Paths
    APP_ROOT: Final[Path] = Path(__file__).parent

    # Geometry (document units)
    HIT_TOLERANCE: Final[float] = 10.0      # Erasure hit radius
    BOUNDS_PADDING: Final[float] = 5.0      # Bounding box / selection padding

    # Viewport
    MIN_SCALE: Final[float] = 0.5
    MAX_SCALE: Final[float] = 3.0
    ZOOM_STEP: Final[float] = 0.1

    # Default drawing options
    DEFAULT_TOOL: Final[str] = "pen"
    DEFAULT_STROKE_COLOR: Final[str] = "#000000"
    DEFAULT_STROKE_WIDTH: Final[float] = 2.0
    DEFAULT_FONT_SIZE: Final[float] = 16.0
    DEFAULT_FONT_FAMILY: Final[str] = "Arial"
    DEFAULT_BACKGROUND: Final[str] = "white"

    # Highlighter / laser
    HIGHLIGHTER_WIDTH_MULTIPLIER: Final[int] = 3
    HIGHLIGHTER_OPACITY: Final[float] = 0.5
    LASER_COLOR: Final[str] = "#ff0000"
    LASER_RADIUS: Final[float] = 5.0
    LASER_OPACITY: Final[float] = 0.7

    # Selection highlight
    SELECTION_COLOR: Final[str] = "#0066ff"
    SELECTION_WIDTH: Final[int] = 2

    # Imported images land here until moved
    IMPORT_IMAGE_X: Final[float] = 100.0
    IMPORT_IMAGE_Y: Final[float] = 100.0
    IMPORT_IMAGE_WIDTH: Final[float] = 300.0
    IMPORT_IMAGE_HEIGHT: Final[float] = 200.0
    IMPORT_IMAGE_EXTENSIONS: Final[tuple] = (
        ".png", ".jpg", ".jpeg", ".bmp", ".gif", ".webp", ".tif", ".tiff"
    )

    # Toolbar presets
    COLOR_PRESETS: Final[list] = [
        "#000000", "#ff0000", "#00ff00", "#0000ff", "#ffff00",
        "#ff00ff", "#00ffff", "#ff8000", "#8000ff", "#0080ff",
    ]
    STROKE_WIDTH_PRESETS: Final[list] = [1, 2, 4, 6, 8, 10]
    FONT_SIZE_PRESETS: Final[list] = [12, 14, 16, 18, 20, 24, 28, 32, 36, 48, 64]
    FONT_FAMILY_PRESETS: Final[list] = [
        "Arial",
        "Times New Roman",
        "Courier New",
        "Georgia",
        "Verdana",
        "Comic Sans MS",
    ]

    # History
    UNDO_LIMIT: Final[int] = 50

    # Export settings
    EXPORT_MIN_WIDTH: Final[int] = 1280
    EXPORT_MIN_HEIGHT: Final[int] = 720
    EXPORT_MARGIN: Final[int] = 40
    ARCHIVE_EXTENSION: Final[str] = ".cboard"
    PAGE_THUMBNAIL_SIZE: Final[int] = 160

    # Window settings
    DEFAULT_WINDOW_WIDTH: Final[int] = 1400
    DEFAULT_WINDOW_HEIGHT: Final[int] = 900

    # Storage structure
    BOARDS_FOLDER_NAME: Final[str] = "boards"
    EXPORTS_FOLDER_NAME: Final[str] = "exports"
    LOGS_FOLDER_NAME: Final[str] = "logs"

    @classmethod
    def get_user_data_dir(cls) -> Path:
        """
        Get user data directory.

        Uses system AppData/Local (Windows), Application Support (macOS)
        or .local/share (Linux). A CLASSBOARD_HOME environment variable
        overrides the location.
        """
        override = os.environ.get('CLASSBOARD_HOME')
        if override:
            user_dir = Path(override)
        elif sys.platform == 'win32':
            base_path = Path(os.environ.get('LOCALAPPDATA', os.path.expanduser('~')))
            user_dir = base_path / 'Classboard'
        elif sys.platform == 'darwin':
            user_dir = Path.home() / 'Library' / 'Application Support' / 'Classboard'
        else:
            # Linux / Unix
            user_dir = Path.home() / '.local' / 'share' / 'Classboard'

        user_dir.mkdir(parents=True, exist_ok=True)
        return user_dir

    @classmethod
    def get_boards_folder(cls) -> Path:
        """Get the folder holding saved board JSON files."""
        folder = cls.get_user_data_dir() / cls.BOARDS_FOLDER_NAME
        folder.mkdir(parents=True, exist_ok=True)
        return folder

    @classmethod
    def get_exports_folder(cls) -> Path:
        """Get the default folder for exported images and archives."""
        folder = cls.get_user_data_dir() / cls.EXPORTS_FOLDER_NAME
        folder.mkdir(parents=True, exist_ok=True)
        return folder

    @classmethod
    def get_log_dir(cls) -> Path:
        """Get the log folder (created on demand by LoggingConfig)."""
        return cls.get_user_data_dir() / cls.LOGS_FOLDER_NAME


__all__ = ['Config']
