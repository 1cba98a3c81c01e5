"""
JSON Utilities - Safe JSON file operations for board files

Provides:
- Safe JSON loading with fallback
- Atomic JSON writing (temp file + rename)
"""

import json
import logging
from pathlib import Path
from typing import Any, Union

logger = logging.getLogger(__name__)


def safe_json_load(path: Union[str, Path], default: Any = None) -> Any:
    """
    Load JSON from a file, returning ``default`` on any failure.

    Args:
        path: Path to JSON file
        default: Value to return if the file is missing or invalid

    Returns:
        Parsed JSON data, or default value on error

    Examples:
        >>> data = safe_json_load("board.json", default={})
    """
    file_path = Path(path)
    if not file_path.exists():
        return default

    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        logger.warning(f"Invalid JSON in {file_path}: {e}")
        return default
    except OSError as e:
        logger.warning(f"Could not read {file_path}: {e}")
        return default


def safe_json_save(path: Union[str, Path], data: Any, indent: int = 2) -> bool:
    """
    Write JSON atomically via a temp file renamed over the target.

    Args:
        path: Path to JSON file
        data: Data to serialize
        indent: Indentation level for pretty printing

    Returns:
        True if save succeeded, False otherwise
    """
    file_path = Path(path)
    tmp_path = file_path.with_suffix(file_path.suffix + '.tmp')

    try:
        file_path.parent.mkdir(parents=True, exist_ok=True)
        with open(tmp_path, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=indent, ensure_ascii=False)
        tmp_path.replace(file_path)
        return True

    except TypeError as e:
        logger.error(f"Data not JSON serializable for {file_path}: {e}")
    except OSError as e:
        logger.error(f"Could not write to {file_path}: {e}")

    if tmp_path.exists():
        tmp_path.unlink()
    return False


__all__ = ['safe_json_load', 'safe_json_save']
