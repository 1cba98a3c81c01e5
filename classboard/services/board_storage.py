"""
BoardStorage - File storage for whiteboard documents

Each board is one JSON file holding the structural form of the document
(pages, elements, drawing options) plus a format version.

File structure:
    {user_data}/boards/
    ├── lesson-1.json
    └── lesson-2.json
"""

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

from ..config import Config
from ..core.document import (
    FORMAT_VERSION, DocumentError, WhiteboardDocument,
    document_to_dict, document_from_dict,
)
from ..utils.json_utils import safe_json_load, safe_json_save
from ..utils.string_utils import sanitize_filename

logger = logging.getLogger(__name__)


def is_compatible_version(version: str) -> bool:
    """Same major version as FORMAT_VERSION."""
    try:
        return int(str(version).split('.')[0]) == int(FORMAT_VERSION.split('.')[0])
    except (ValueError, IndexError):
        return False


class BoardStorage:
    """Manages board files on disk."""

    FILE_SUFFIX = '.json'

    def __init__(self, base_path: Optional[Path] = None):
        self._base = Path(base_path) if base_path is not None else Config.get_boards_folder()
        self._base.mkdir(parents=True, exist_ok=True)

    @property
    def base_path(self) -> Path:
        return self._base

    def get_board_path(self, board_id: str) -> Path:
        return self._base / f"{sanitize_filename(board_id)}{self.FILE_SUFFIX}"

    # ==================== Save/Load ====================

    def save_board(self, board_id: str, document: WhiteboardDocument) -> bool:
        """
        Save a document under ``board_id``.

        Args:
            board_id: Board name (sanitized for the filesystem)
            document: Document to persist

        Returns:
            True if saved successfully
        """
        data = document_to_dict(document)
        data['saved_at'] = datetime.now(timezone.utc).isoformat()
        data['app_version'] = Config.APP_VERSION

        path = self.get_board_path(board_id)
        if not safe_json_save(path, data):
            logger.error(f"Failed to save board {board_id}")
            return False

        logger.info(f"Saved board {board_id} ({len(document.pages)} pages) to {path}")
        return True

    def load_board(self, board_id: str) -> Optional[WhiteboardDocument]:
        """
        Load a board.

        Returns:
            The document, or None if missing, unreadable or from an
            incompatible format version
        """
        path = self.get_board_path(board_id)
        data = safe_json_load(path)
        if data is None:
            return None
        if not isinstance(data, dict):
            logger.warning(f"Board file {path} does not contain a document")
            return None

        version = data.get('format_version', '0.0')
        if not is_compatible_version(version):
            logger.warning(f"Board {board_id} has incompatible format version {version}")
            return None

        try:
            return document_from_dict(data)
        except DocumentError as e:
            logger.warning(f"Board {board_id} is malformed: {e}")
            return None

    def delete_board(self, board_id: str) -> bool:
        path = self.get_board_path(board_id)
        if not path.exists():
            return False
        try:
            path.unlink()
            return True
        except OSError as e:
            logger.error(f"Could not delete board {board_id}: {e}")
            return False

    def has_board(self, board_id: str) -> bool:
        return self.get_board_path(board_id).exists()

    def list_boards(self) -> List[str]:
        """Board ids sorted by name."""
        return sorted(path.stem for path in self._base.glob(f'*{self.FILE_SUFFIX}'))


# ==================== Singleton ====================

_storage_instance: Optional[BoardStorage] = None


def get_board_storage() -> BoardStorage:
    """Get singleton BoardStorage instance."""
    global _storage_instance
    if _storage_instance is None:
        _storage_instance = BoardStorage()
    return _storage_instance


__all__ = [
    'BoardStorage',
    'is_compatible_version',
    'get_board_storage',
]
