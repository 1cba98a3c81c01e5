"""
Export Service - Write whiteboard pages to external artifacts

Targets:
- PNG image of a single page (background + elements)
- Paginated PDF with one PDF page per board page
- .cboard archive (ZIP) with manifest, board JSON and per-page PNGs

All exports are write-once. Failures are reported as (False, message) and
logged; they never raise and never touch the document.
"""

import json
import logging
import zipfile
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional, Tuple, Union

from PyQt6.QtCore import QObject, QRunnable, QThreadPool, QMarginsF, QSizeF, pyqtSignal
from PyQt6.QtGui import QColor, QGuiApplication, QPageLayout, QPageSize, QPainter, QPdfWriter, QImage

from ..config import Config
from ..core.document import FORMAT_VERSION, Page, WhiteboardDocument, document_to_dict
from ..core.geometry import TextMeasurer
from ..rendering.element_painter import ImageCache, page_render_size, paint_page, render_page_image
from ..rendering.text_metrics import QtTextMeasurer
from ..utils.image_utils import qimage_to_array, qimage_to_png_bytes, resize_to_fit, array_to_qimage
from ..utils.string_utils import page_file_stem

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int, str], None]

MANIFEST_NAME = 'manifest.json'
BOARD_NAME = 'board.json'
PAGES_DIR = 'pages'


def _renderer_available() -> bool:
    return QGuiApplication.instance() is not None


def _unavailable_message() -> str:
    return "Rendering is unavailable: no Qt application is running"


# ==================== Page Image ====================

def export_page_image(
    page: Page,
    output_path: Union[str, Path],
    size: Optional[Tuple[int, int]] = None,
    measure_text: Optional[TextMeasurer] = None
) -> Tuple[bool, str]:
    """
    Render a page to a PNG file.

    Args:
        page: Page to export
        output_path: Destination .png path
        size: Optional (width, height); defaults to the page extent
        measure_text: Text measurer (defaults to font metrics)

    Returns:
        Tuple of (success: bool, message: str)
    """
    if not _renderer_available():
        return False, _unavailable_message()

    output_path = Path(output_path)
    if output_path.suffix.lower() != '.png':
        output_path = output_path.with_suffix('.png')

    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        logger.error(f"Cannot create export folder {output_path.parent}: {e}")
        return False, f"Cannot create folder: {e}"

    image = render_page_image(page, size, measure_text or QtTextMeasurer(), ImageCache())
    if not image.save(str(output_path), 'PNG'):
        logger.error(f"Failed to write PNG {output_path}")
        return False, f"Could not write {output_path}"

    logger.info(f"Exported page {page.id} to {output_path}")
    return True, f"Exported {page.display_name} to {output_path}"


# ==================== PDF ====================

def export_document_pdf(
    document: WhiteboardDocument,
    output_path: Union[str, Path],
    measure_text: Optional[TextMeasurer] = None,
    progress_callback: Optional[ProgressCallback] = None
) -> Tuple[bool, str]:
    """
    Export every page to a single PDF, one PDF page per board page.

    Each PDF page is sized to its board page's extent at 72 dpi, so one
    document unit maps to one point.

    Returns:
        Tuple of (success: bool, message: str)
    """
    if not _renderer_available():
        return False, _unavailable_message()

    output_path = Path(output_path)
    if output_path.suffix.lower() != '.pdf':
        output_path = output_path.with_suffix('.pdf')

    measure_text = measure_text or QtTextMeasurer()
    image_cache = ImageCache()
    total = len(document.pages)

    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        logger.error(f"Cannot create export folder {output_path.parent}: {e}")
        return False, f"Cannot create folder: {e}"

    writer = QPdfWriter(str(output_path))
    writer.setResolution(72)
    writer.setCreator(f"{Config.APP_NAME} {Config.APP_VERSION}")
    writer.setTitle(Config.APP_NAME)

    painter = QPainter()
    error = None
    try:
        for index, page in enumerate(document.pages):
            width, height = page_render_size(page, measure_text)
            page_size = QPageSize(QSizeF(width, height), QPageSize.Unit.Point)
            writer.setPageLayout(QPageLayout(
                page_size, QPageLayout.Orientation.Portrait, QMarginsF(0, 0, 0, 0)
            ))

            if index == 0:
                if not painter.begin(writer):
                    error = f"Could not open {output_path} for writing"
                    break
            elif not writer.newPage():
                error = f"Could not add page {index + 1} to {output_path}"
                break

            if progress_callback:
                progress_callback(index + 1, total, f"Rendering {page.display_name}")

            painter.fillRect(0, 0, width, height, QColor(page.background_color))
            paint_page(painter, page, measure_text=measure_text, image_cache=image_cache)
    finally:
        if painter.isActive():
            painter.end()

    if error is not None:
        logger.error(error)
        del painter, writer
        if output_path.exists():
            output_path.unlink()
        return False, error

    logger.info(f"Exported {total} pages to {output_path}")
    return True, f"Exported {total} pages to {output_path}"


# ==================== Archive ====================

def _create_manifest(document: WhiteboardDocument) -> dict:
    return {
        'version': FORMAT_VERSION,
        'created': datetime.now().isoformat(),
        'app_version': Config.APP_VERSION,
        'page_count': len(document.pages),
        'pages': [
            {
                'id': page.id,
                'name': page.display_name,
                'element_count': len(page.elements),
                'image': f"{PAGES_DIR}/{page_file_stem(index + 1, page.id)}.png",
            }
            for index, page in enumerate(document.pages)
        ],
    }


def export_document_as_archive(
    document: WhiteboardDocument,
    output_path: Union[str, Path],
    measure_text: Optional[TextMeasurer] = None,
    progress_callback: Optional[ProgressCallback] = None
) -> Tuple[bool, str]:
    """
    Export the whole document to a .cboard archive.

    Archive layout:
        manifest.json       # version, created, page list
        board.json          # structural form of the document
        pages/001_page-1.png

    Returns:
        Tuple of (success: bool, message: str)
    """
    if not _renderer_available():
        return False, _unavailable_message()

    output_path = Path(output_path)
    if not str(output_path).endswith(Config.ARCHIVE_EXTENSION):
        output_path = Path(str(output_path) + Config.ARCHIVE_EXTENSION)

    measure_text = measure_text or QtTextMeasurer()
    image_cache = ImageCache()
    manifest = _create_manifest(document)
    total = len(document.pages)

    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with zipfile.ZipFile(output_path, 'w', zipfile.ZIP_DEFLATED) as zipf:
            zipf.writestr(MANIFEST_NAME, json.dumps(manifest, indent=2))
            zipf.writestr(BOARD_NAME, json.dumps(document_to_dict(document), indent=2))

            for index, (page, entry) in enumerate(zip(document.pages, manifest['pages'])):
                if progress_callback:
                    progress_callback(index + 1, total, f"Rendering {page.display_name}")

                image = render_page_image(page, measure_text=measure_text, image_cache=image_cache)
                png = qimage_to_png_bytes(image)
                if png is None:
                    raise ValueError(f"Could not encode {page.display_name}")
                zipf.writestr(entry['image'], png)

    except (OSError, ValueError, zipfile.BadZipFile) as e:
        logger.error(f"Archive export failed: {e}")
        if output_path.exists():
            output_path.unlink()
        return False, f"Archive export failed: {e}"

    if progress_callback:
        progress_callback(total, total, "Export complete!")

    logger.info(f"Exported archive {output_path}")
    return True, f"Exported {total} pages to {output_path}"


# ==================== Thumbnails ====================

def page_thumbnail(
    page: Page,
    max_size: int = Config.PAGE_THUMBNAIL_SIZE,
    measure_text: Optional[TextMeasurer] = None,
    image_cache: Optional[ImageCache] = None
) -> QImage:
    """Small preview of a page for the page list."""
    image = render_page_image(page, measure_text=measure_text, image_cache=image_cache)
    return array_to_qimage(resize_to_fit(qimage_to_array(image), max_size))


# ==================== Background Task ====================

class ExportSignals(QObject):
    """Signals for ExportTask"""

    progress = pyqtSignal(int, int, str)  # current, total, message
    finished = pyqtSignal(bool, str)  # success, message


class ExportTask(QRunnable):
    """
    One-shot background export.

    Usage:
        task = ExportTask(ExportTask.ARCHIVE, document, path)
        task.signals.finished.connect(on_done)
        start_export(task)
    """

    PNG = 'png'
    PDF = 'pdf'
    ARCHIVE = 'archive'

    def __init__(
        self,
        kind: str,
        document: WhiteboardDocument,
        output_path: Union[str, Path],
        page_id: Optional[str] = None
    ):
        super().__init__()
        self.kind = kind
        self.document = document
        self.output_path = Path(output_path)
        self.page_id = page_id
        self.signals = ExportSignals()

    def run(self):
        """Execute the export and emit ``finished``."""
        try:
            success, message = self._export()
        except Exception as e:
            logger.exception("Unexpected export failure")
            success, message = False, f"Export error: {e}"
        self.signals.finished.emit(success, message)

    def _export(self) -> Tuple[bool, str]:
        progress = self.signals.progress.emit
        if self.kind == self.PNG:
            page = self.document.active_page
            if self.page_id is not None:
                page = next((p for p in self.document.pages if p.id == self.page_id), None)
                if page is None:
                    return False, f"Unknown page {self.page_id}"
            return export_page_image(page, self.output_path)
        if self.kind == self.PDF:
            return export_document_pdf(self.document, self.output_path, progress_callback=progress)
        if self.kind == self.ARCHIVE:
            return export_document_as_archive(self.document, self.output_path, progress_callback=progress)
        return False, f"Unknown export type: {self.kind}"


def start_export(task: ExportTask, pool: Optional[QThreadPool] = None):
    """Queue an export task on the global (or given) thread pool."""
    (pool or QThreadPool.globalInstance()).start(task)


__all__ = [
    'export_page_image',
    'export_document_pdf',
    'export_document_as_archive',
    'page_thumbnail',
    'ExportSignals',
    'ExportTask',
    'start_export',
]
