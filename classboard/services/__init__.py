"""Services for Classboard: storage, import and export"""

from .board_storage import BoardStorage, get_board_storage
from .image_import import ImportResult, ImageImportTask, import_image, place_image
from .export_service import (
    ExportTask,
    export_page_image,
    export_document_pdf,
    export_document_as_archive,
    page_thumbnail,
    start_export,
)

__all__ = [
    'BoardStorage',
    'get_board_storage',
    'ImportResult',
    'ImageImportTask',
    'import_image',
    'place_image',
    'ExportTask',
    'export_page_image',
    'export_document_pdf',
    'export_document_as_archive',
    'page_thumbnail',
    'start_export',
]
