"""
Classboard - Main Entry Point

Multi-page classroom whiteboard with pen, shapes, text, images and export.

Usage:
    python -m classboard.main
"""

import sys
from typing import List, Optional

from PyQt6.QtWidgets import QApplication

from .config import Config
from .events.event_bus import get_event_bus
from .utils.logging_config import LoggingConfig


def setup_application(argv: Optional[List[str]] = None) -> QApplication:
    """
    Initialize and configure the Qt application

    Returns:
        Configured QApplication instance
    """
    app = QApplication(argv if argv is not None else sys.argv)

    # Set application metadata
    app.setApplicationName(Config.APP_NAME)
    app.setApplicationVersion(Config.APP_VERSION)
    app.setOrganizationName(Config.APP_AUTHOR)

    # Initialize event bus (singleton) on the UI thread
    get_event_bus()

    return app


def main() -> int:
    """
    Main entry point for Classboard

    Creates the application, shows the main window and runs the event loop.

    Returns:
        Qt event loop exit code
    """
    # Setup logging first
    LoggingConfig.setup_logging(Config.get_log_dir())

    logger = LoggingConfig.get_logger(__name__)
    logger.info(f"Starting {Config.APP_NAME} {Config.APP_VERSION}...")
    logger.info(f"Boards: {Config.get_boards_folder()}")
    logger.info(f"Log file: {LoggingConfig.get_log_file_path()}")

    app = setup_application()

    from .widgets.main_window import MainWindow
    window = MainWindow()
    window.show()

    logger.info("Application started successfully!")

    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
