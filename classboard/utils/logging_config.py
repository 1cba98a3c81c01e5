"""
Centralized logging configuration for Classboard
"""
import logging
import sys
from pathlib import Path
from typing import Optional


class LoggingConfig:
    """Central logging configuration"""

    _initialized = False
    _log_file_path: Optional[Path] = None

    LOG_FILE_NAME = "classboard.log"
    FILE_FORMAT = '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
    CONSOLE_FORMAT = '[%(levelname)s] %(message)s'

    @classmethod
    def setup_logging(cls, log_dir: Path, console_level: int = logging.INFO):
        """
        Install file (DEBUG) and console handlers on the root logger.

        Safe to call more than once; only the first call has an effect.
        """
        if cls._initialized:
            return

        log_dir.mkdir(parents=True, exist_ok=True)
        cls._log_file_path = log_dir / cls.LOG_FILE_NAME

        # Root logger
        logger = logging.getLogger()
        logger.setLevel(logging.DEBUG)

        # File handler
        file_handler = logging.FileHandler(cls._log_file_path, encoding='utf-8')
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(cls.FILE_FORMAT, datefmt='%Y-%m-%d %H:%M:%S'))
        logger.addHandler(file_handler)

        # Console handler (for terminal output)
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(console_level)
        console_handler.setFormatter(logging.Formatter(cls.CONSOLE_FORMAT))
        logger.addHandler(console_handler)

        cls._initialized = True
        logger.info("Logging system initialized")

    @classmethod
    def get_logger(cls, name: str) -> logging.Logger:
        """Get a logger instance"""
        return logging.getLogger(name)

    @classmethod
    def get_log_file_path(cls) -> Optional[Path]:
        """Get the log file path"""
        return cls._log_file_path


__all__ = ['LoggingConfig']
