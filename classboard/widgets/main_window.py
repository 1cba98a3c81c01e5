"""
MainWindow - Main application window

Pattern: QMainWindow with toolbar, page dock and central canvas

Layout:
    +------------------------------------------+
    |  Menu bar (File / Edit / Page / View)    |
    +------------------------------------------+
    |  Tool toolbar (tools, colour, width ...) |
    +------------------------------------------+
    | Pages     |                              |
    | (dock)    |      WhiteboardCanvas        |
    |           |                              |
    +------------------------------------------+
    |  StatusBar                               |
    +------------------------------------------+
"""

import logging
from pathlib import Path
from typing import List, Optional

from PyQt6.QtCore import Qt, QSettings, QSize, QTimer, QThreadPool
from PyQt6.QtGui import QAction, QActionGroup, QCloseEvent, QColor, QIcon, QKeySequence, QPixmap
from PyQt6.QtWidgets import (
    QMainWindow, QWidget, QVBoxLayout, QHBoxLayout, QToolBar, QComboBox,
    QDockWidget, QListWidget, QListWidgetItem, QPushButton, QLabel,
    QStatusBar, QMessageBox, QFileDialog, QInputDialog,
)

from ..config import Config
from ..core.document import new_document
from ..core.options import Tool
from ..events.event_bus import get_event_bus
from ..services.board_storage import BoardStorage, get_board_storage
from ..services.export_service import ExportTask, page_thumbnail, start_export
from ..services.image_import import ImageImportTask
from .whiteboard_canvas import WhiteboardCanvas

logger = logging.getLogger(__name__)


TOOL_LABELS = [
    (Tool.PEN, "Pen", "P"),
    (Tool.HIGHLIGHTER, "Highlighter", "H"),
    (Tool.LINE, "Line", "L"),
    (Tool.RECTANGLE, "Rectangle", "R"),
    (Tool.CIRCLE, "Circle", "C"),
    (Tool.TEXT, "Text", "T"),
    (Tool.ERASER, "Eraser", "E"),
    (Tool.LASER, "Laser", "Z"),
]


def _color_icon(color: str, size: int = 14) -> QIcon:
    pixmap = QPixmap(size, size)
    pixmap.fill(QColor(color))
    return QIcon(pixmap)


class MainWindow(QMainWindow):
    """
    Main application window

    Features:
    - Tool toolbar with colour, width and font presets
    - Page list with thumbnails (add, delete, clear, rename)
    - Save/open boards, import images, export PNG/PDF/archive
    - Undo/redo and zoom
    - Window state persistence
    """

    def __init__(self, parent=None, board_storage: Optional[BoardStorage] = None, event_bus=None):
        super().__init__(parent)

        # Services and event bus (injectable for testing)
        self._event_bus = event_bus or get_event_bus()
        self._board_storage = board_storage or get_board_storage()

        self._board_id: Optional[str] = None
        self._active_tasks: List[object] = []

        self._thumbnail_timer = QTimer(self)
        self._thumbnail_timer.setSingleShot(True)
        self._thumbnail_timer.setInterval(150)

        self._setup_window()
        self._create_widgets()
        self._create_actions()
        self._create_menus()
        self._create_toolbar()
        self._create_page_dock()
        self._connect_signals()
        self._load_settings()

        self._refresh_pages()
        self._update_title()

    def _setup_window(self):
        """Configure window properties"""
        self.setGeometry(100, 100, Config.DEFAULT_WINDOW_WIDTH, Config.DEFAULT_WINDOW_HEIGHT)

    def _create_widgets(self):
        """Create UI widgets"""
        self._canvas = WhiteboardCanvas(event_bus=self._event_bus)
        self.setCentralWidget(self._canvas)

        self._status_bar = QStatusBar()
        self.setStatusBar(self._status_bar)

        self._zoom_label = QLabel("100%")
        self._status_bar.addPermanentWidget(self._zoom_label)

    @property
    def canvas(self) -> WhiteboardCanvas:
        return self._canvas

    # ==================== Actions ====================

    def _create_actions(self):
        self._new_action = QAction("&New Board", self)
        self._new_action.setShortcut(QKeySequence.StandardKey.New)
        self._new_action.triggered.connect(self._on_new_board)

        self._open_action = QAction("&Open Board...", self)
        self._open_action.setShortcut(QKeySequence.StandardKey.Open)
        self._open_action.triggered.connect(self._on_open_board)

        self._save_action = QAction("&Save Board", self)
        self._save_action.setShortcut(QKeySequence.StandardKey.Save)
        self._save_action.triggered.connect(self._on_save_board)

        self._save_as_action = QAction("Save Board &As...", self)
        self._save_as_action.setShortcut(QKeySequence.StandardKey.SaveAs)
        self._save_as_action.triggered.connect(self._on_save_board_as)

        self._import_action = QAction("&Import Image...", self)
        self._import_action.setShortcut(QKeySequence("Ctrl+I"))
        self._import_action.triggered.connect(self._on_import_image)

        self._export_png_action = QAction("Export Page as &PNG...", self)
        self._export_png_action.triggered.connect(lambda: self._on_export(ExportTask.PNG))

        self._export_pdf_action = QAction("Export Board as P&DF...", self)
        self._export_pdf_action.triggered.connect(lambda: self._on_export(ExportTask.PDF))

        self._export_archive_action = QAction("Export Board &Archive...", self)
        self._export_archive_action.triggered.connect(lambda: self._on_export(ExportTask.ARCHIVE))

        self._quit_action = QAction("&Quit", self)
        self._quit_action.setShortcut(QKeySequence.StandardKey.Quit)
        self._quit_action.triggered.connect(self.close)

        undo_stack = self._canvas.undo_stack
        self._undo_action = undo_stack.createUndoAction(self, "&Undo")
        self._undo_action.setShortcut(QKeySequence.StandardKey.Undo)
        self._redo_action = undo_stack.createRedoAction(self, "&Redo")
        self._redo_action.setShortcut(QKeySequence.StandardKey.Redo)

        self._delete_action = QAction("&Delete Selected", self)
        self._delete_action.triggered.connect(self._canvas.delete_selected)

        self._add_page_action = QAction("&Add Page", self)
        self._add_page_action.setShortcut(QKeySequence("Ctrl+Shift+N"))
        self._add_page_action.triggered.connect(self._canvas.add_page)

        self._delete_page_action = QAction("&Delete Page", self)
        self._delete_page_action.triggered.connect(self._on_delete_page)

        self._clear_page_action = QAction("&Clear Page", self)
        self._clear_page_action.triggered.connect(self._on_clear_page)

        self._rename_page_action = QAction("&Rename Page...", self)
        self._rename_page_action.triggered.connect(self._on_rename_page)

        self._zoom_in_action = QAction("Zoom &In", self)
        self._zoom_in_action.setShortcut(QKeySequence.StandardKey.ZoomIn)
        self._zoom_in_action.triggered.connect(self._canvas.zoom_in)

        self._zoom_out_action = QAction("Zoom &Out", self)
        self._zoom_out_action.setShortcut(QKeySequence.StandardKey.ZoomOut)
        self._zoom_out_action.triggered.connect(self._canvas.zoom_out)

        self._zoom_reset_action = QAction("&Reset Zoom", self)
        self._zoom_reset_action.setShortcut(QKeySequence("Ctrl+0"))
        self._zoom_reset_action.triggered.connect(self._canvas.reset_zoom)

        self._tool_group = QActionGroup(self)
        self._tool_group.setExclusive(True)
        self._tool_actions = {}
        current_tool = self._canvas.document.options.active_tool
        for tool, label, shortcut in TOOL_LABELS:
            action = QAction(label, self)
            action.setCheckable(True)
            action.setShortcut(QKeySequence(shortcut))
            action.setData(tool.value)
            action.setChecked(tool == current_tool)
            self._tool_group.addAction(action)
            self._tool_actions[tool.value] = action
        self._tool_group.triggered.connect(self._on_tool_action)

    def _create_menus(self):
        menu_bar = self.menuBar()

        file_menu = menu_bar.addMenu("&File")
        file_menu.addAction(self._new_action)
        file_menu.addAction(self._open_action)
        file_menu.addAction(self._save_action)
        file_menu.addAction(self._save_as_action)
        file_menu.addSeparator()
        file_menu.addAction(self._import_action)
        export_menu = file_menu.addMenu("&Export")
        export_menu.addAction(self._export_png_action)
        export_menu.addAction(self._export_pdf_action)
        export_menu.addAction(self._export_archive_action)
        file_menu.addSeparator()
        file_menu.addAction(self._quit_action)

        edit_menu = menu_bar.addMenu("&Edit")
        edit_menu.addAction(self._undo_action)
        edit_menu.addAction(self._redo_action)
        edit_menu.addSeparator()
        edit_menu.addAction(self._delete_action)

        page_menu = menu_bar.addMenu("&Page")
        page_menu.addAction(self._add_page_action)
        page_menu.addAction(self._delete_page_action)
        page_menu.addAction(self._clear_page_action)
        page_menu.addAction(self._rename_page_action)

        view_menu = menu_bar.addMenu("&View")
        view_menu.addAction(self._zoom_in_action)
        view_menu.addAction(self._zoom_out_action)
        view_menu.addAction(self._zoom_reset_action)

    def _create_toolbar(self):
        toolbar = QToolBar("Tools", self)
        toolbar.setObjectName("tools_toolbar")
        toolbar.setMovable(False)
        self.addToolBar(toolbar)

        for action in self._tool_group.actions():
            toolbar.addAction(action)
        toolbar.addSeparator()

        options = self._canvas.document.options

        self._color_combo = QComboBox()
        self._color_combo.setToolTip("Stroke colour")
        for color in Config.COLOR_PRESETS:
            self._color_combo.addItem(_color_icon(color), color, color)
        self._select_combo_data(self._color_combo, options.stroke_color)
        self._color_combo.currentIndexChanged.connect(self._on_color_changed)
        toolbar.addWidget(self._color_combo)

        self._width_combo = QComboBox()
        self._width_combo.setToolTip("Stroke width")
        for width in Config.STROKE_WIDTH_PRESETS:
            self._width_combo.addItem(f"{width:g}px", float(width))
        self._select_combo_data(self._width_combo, float(options.stroke_width))
        self._width_combo.currentIndexChanged.connect(self._on_width_changed)
        toolbar.addWidget(self._width_combo)

        self._font_size_combo = QComboBox()
        self._font_size_combo.setToolTip("Font size")
        for size in Config.FONT_SIZE_PRESETS:
            self._font_size_combo.addItem(f"{size:g}", float(size))
        self._select_combo_data(self._font_size_combo, float(options.font_size))
        self._font_size_combo.currentIndexChanged.connect(self._on_font_size_changed)
        toolbar.addWidget(self._font_size_combo)

        self._font_family_combo = QComboBox()
        self._font_family_combo.setToolTip("Font family")
        for family in Config.FONT_FAMILY_PRESETS:
            self._font_family_combo.addItem(family, family)
        self._select_combo_data(self._font_family_combo, options.font_family)
        self._font_family_combo.currentIndexChanged.connect(self._on_font_family_changed)
        toolbar.addWidget(self._font_family_combo)

        toolbar.addSeparator()
        toolbar.addAction(self._undo_action)
        toolbar.addAction(self._redo_action)
        toolbar.addSeparator()
        toolbar.addAction(self._zoom_out_action)
        toolbar.addAction(self._zoom_reset_action)
        toolbar.addAction(self._zoom_in_action)

    def _create_page_dock(self):
        dock = QDockWidget("Pages", self)
        dock.setObjectName("pages_dock")
        dock.setFeatures(QDockWidget.DockWidgetFeature.DockWidgetMovable)

        container = QWidget()
        layout = QVBoxLayout(container)
        layout.setContentsMargins(4, 4, 4, 4)

        self._page_list = QListWidget()
        self._page_list.setIconSize(QSize(Config.PAGE_THUMBNAIL_SIZE, Config.PAGE_THUMBNAIL_SIZE))
        self._page_list.setViewMode(QListWidget.ViewMode.ListMode)
        self._page_list.currentItemChanged.connect(self._on_page_item_changed)
        self._page_list.itemDoubleClicked.connect(lambda _item: self._on_rename_page())
        layout.addWidget(self._page_list)

        buttons = QHBoxLayout()
        for text, slot in (
            ("Add", self._canvas.add_page),
            ("Delete", self._on_delete_page),
            ("Clear", self._on_clear_page),
        ):
            button = QPushButton(text)
            button.clicked.connect(slot)
            buttons.addWidget(button)
        layout.addLayout(buttons)

        dock.setWidget(container)
        self.addDockWidget(Qt.DockWidgetArea.LeftDockWidgetArea, dock)

    def _connect_signals(self):
        """Connect event bus signals"""
        self._event_bus.document_changed.connect(self._thumbnail_timer.start)
        self._event_bus.pages_changed.connect(lambda _ids: self._refresh_pages())
        self._event_bus.active_page_changed.connect(self._on_active_page_changed)
        self._event_bus.tool_changed.connect(self._on_tool_changed)
        self._event_bus.zoom_changed.connect(self._on_zoom_changed)
        self._event_bus.error_occurred.connect(self._on_error)
        self._event_bus.export_finished.connect(self._on_export_finished)
        self._event_bus.import_finished.connect(self._on_import_finished)
        self._canvas.undo_stack.cleanChanged.connect(lambda _clean: self._update_title())
        self._thumbnail_timer.timeout.connect(self._refresh_pages)

    # ==================== Settings ====================

    def _load_settings(self):
        """Load window settings"""
        settings = QSettings(Config.APP_AUTHOR, Config.APP_NAME)

        if settings.contains("window/geometry"):
            self.restoreGeometry(settings.value("window/geometry"))

        if settings.contains("window/state"):
            self.restoreState(settings.value("window/state"))

    def _save_settings(self):
        """Save window settings"""
        settings = QSettings(Config.APP_AUTHOR, Config.APP_NAME)
        settings.setValue("window/geometry", self.saveGeometry())
        settings.setValue("window/state", self.saveState())

    # ==================== Toolbar Handlers ====================

    @staticmethod
    def _select_combo_data(combo: QComboBox, value):
        index = combo.findData(value)
        if index >= 0:
            combo.setCurrentIndex(index)

    def _on_tool_action(self, action: QAction):
        self._canvas.set_tool(action.data())

    def _on_tool_changed(self, tool: str):
        action = self._tool_actions.get(tool)
        if action is not None and not action.isChecked():
            action.setChecked(True)
        self._status_bar.showMessage(f"Tool: {tool}", 2000)

    def _on_color_changed(self, index: int):
        self._canvas.set_options(stroke_color=self._color_combo.itemData(index))

    def _on_width_changed(self, index: int):
        self._canvas.set_options(stroke_width=self._width_combo.itemData(index))

    def _on_font_size_changed(self, index: int):
        self._canvas.set_options(font_size=self._font_size_combo.itemData(index))

    def _on_font_family_changed(self, index: int):
        self._canvas.set_options(font_family=self._font_family_combo.itemData(index))

    def _on_zoom_changed(self, scale: float):
        self._zoom_label.setText(f"{self._canvas.viewport.zoom_percent}%")

    # ==================== Pages ====================

    def _refresh_pages(self):
        """Rebuild the page list with fresh thumbnails"""
        document = self._canvas.document
        self._page_list.blockSignals(True)
        try:
            self._page_list.clear()
            for page in document.pages:
                thumbnail = page_thumbnail(page, measure_text=self._canvas.measure_text)
                item = QListWidgetItem(QIcon(QPixmap.fromImage(thumbnail)), page.display_name)
                item.setData(Qt.ItemDataRole.UserRole, page.id)
                self._page_list.addItem(item)
                if page.id == document.active_page_id:
                    self._page_list.setCurrentItem(item)
        finally:
            self._page_list.blockSignals(False)
        self._delete_page_action.setEnabled(len(document.pages) > 1)

    def _on_page_item_changed(self, current: Optional[QListWidgetItem], _previous):
        if current is not None:
            self._canvas.switch_page(current.data(Qt.ItemDataRole.UserRole))

    def _on_active_page_changed(self, page_id: str):
        for row in range(self._page_list.count()):
            item = self._page_list.item(row)
            if item.data(Qt.ItemDataRole.UserRole) == page_id:
                self._page_list.blockSignals(True)
                self._page_list.setCurrentItem(item)
                self._page_list.blockSignals(False)
                break
        self._status_bar.showMessage(f"{self._canvas.document.active_page.display_name}", 2000)

    def _on_delete_page(self):
        document = self._canvas.document
        if len(document.pages) <= 1:
            self._status_bar.showMessage("A board always keeps at least one page", 3000)
            return

        page = document.active_page
        reply = QMessageBox.warning(
            self,
            "Delete Page",
            f"Delete '{page.display_name}' and everything on it?",
            QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No
        )
        if reply == QMessageBox.StandardButton.Yes:
            self._canvas.delete_page(page.id)

    def _on_clear_page(self):
        if not self._canvas.document.active_page.elements:
            return
        reply = QMessageBox.question(
            self,
            "Clear Page",
            "Remove every element from this page?",
            QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No
        )
        if reply == QMessageBox.StandardButton.Yes:
            self._canvas.clear_page()

    def _on_rename_page(self):
        page = self._canvas.document.active_page
        name, ok = QInputDialog.getText(self, "Rename Page", "Page name:", text=page.display_name)
        if ok and name.strip():
            self._canvas.rename_page(page.id, name.strip())

    # ==================== Boards ====================

    def _update_title(self):
        name = self._board_id or "Untitled"
        modified = "" if self._canvas.undo_stack.isClean() else " *"
        self.setWindowTitle(f"{name}{modified} - {Config.APP_NAME} {Config.APP_VERSION}")

    def _confirm_discard(self) -> bool:
        """Ask before dropping unsaved changes. Returns True to continue."""
        if self._canvas.undo_stack.isClean():
            return True
        reply = QMessageBox.question(
            self,
            "Unsaved Changes",
            "The board has unsaved changes. Save them first?",
            QMessageBox.StandardButton.Save
            | QMessageBox.StandardButton.Discard
            | QMessageBox.StandardButton.Cancel
        )
        if reply == QMessageBox.StandardButton.Save:
            return self._on_save_board()
        return reply == QMessageBox.StandardButton.Discard

    def _on_new_board(self):
        if not self._confirm_discard():
            return
        self._board_id = None
        self._canvas.set_document(new_document(self._canvas.document.options))
        self._refresh_pages()
        self._update_title()

    def _on_open_board(self):
        if not self._confirm_discard():
            return

        boards = self._board_storage.list_boards()
        if not boards:
            QMessageBox.information(self, "Open Board", "No saved boards yet.")
            return

        board_id, ok = QInputDialog.getItem(self, "Open Board", "Board:", boards, 0, False)
        if not ok:
            return

        document = self._board_storage.load_board(board_id)
        if document is None:
            self._event_bus.report_error("storage", f"Could not open board '{board_id}'")
            return

        self._board_id = board_id
        self._canvas.set_document(document)
        self._refresh_pages()
        self._update_title()
        self._status_bar.showMessage(f"Opened {board_id}", 3000)

    def _on_save_board(self) -> bool:
        if self._board_id is None:
            return self._on_save_board_as()
        return self._save_board(self._board_id)

    def _on_save_board_as(self) -> bool:
        name, ok = QInputDialog.getText(self, "Save Board", "Board name:", text=self._board_id or "")
        if not ok or not name.strip():
            return False
        return self._save_board(name.strip())

    def _save_board(self, board_id: str) -> bool:
        if not self._board_storage.save_board(board_id, self._canvas.document):
            self._event_bus.report_error("storage", f"Could not save board '{board_id}'")
            return False
        self._board_id = board_id
        self._canvas.undo_stack.setClean()
        self._update_title()
        self._status_bar.showMessage(f"Saved {board_id}", 3000)
        return True

    # ==================== Import / Export ====================

    def _on_import_image(self):
        patterns = " ".join(f"*{ext}" for ext in Config.IMPORT_IMAGE_EXTENSIONS)
        path, _ = QFileDialog.getOpenFileName(self, "Import Image", "", f"Images ({patterns})")
        if not path:
            return

        task = ImageImportTask(path)
        task.signals.decoded.connect(lambda data_url, _msg: self._canvas.place_image(data_url))
        task.signals.failed.connect(self._on_import_failed)
        self._run_task(task)
        self._status_bar.showMessage(f"Importing {Path(path).name}...")

    def _on_import_failed(self, message: str):
        self._event_bus.report_error("import", message)
        self._event_bus.import_finished.emit(False, message)

    def _on_import_finished(self, success: bool, message: str):
        self._status_bar.showMessage(message, 4000)

    def _on_export(self, kind: str):
        stem = self._board_id or "board"
        if kind == ExportTask.PNG:
            default_name = f"{stem}_{self._canvas.document.active_page_id}.png"
            file_filter = "PNG Image (*.png)"
        elif kind == ExportTask.PDF:
            default_name = f"{stem}.pdf"
            file_filter = "PDF Document (*.pdf)"
        else:
            default_name = f"{stem}{Config.ARCHIVE_EXTENSION}"
            file_filter = f"Board Archive (*{Config.ARCHIVE_EXTENSION})"

        default_path = Config.get_exports_folder() / default_name
        path, _ = QFileDialog.getSaveFileName(self, "Export", str(default_path), file_filter)
        if not path:
            return

        task = ExportTask(kind, self._canvas.document, path)
        task.signals.progress.connect(
            lambda current, total, message: self._status_bar.showMessage(f"{message} ({current}/{total})")
        )
        task.signals.finished.connect(self._event_bus.export_finished.emit)
        self._run_task(task, export=True)

    def _on_export_finished(self, success: bool, message: str):
        if success:
            self._status_bar.showMessage(message, 5000)
        else:
            self._event_bus.report_error("export", message)

    def _run_task(self, task, export: bool = False):
        """Start a background task and keep it referenced until it finishes"""
        self._active_tasks.append(task)
        done_signal = task.signals.finished if export else task.signals.failed

        def release(*_args):
            if task in self._active_tasks:
                self._active_tasks.remove(task)

        done_signal.connect(release)
        if not export:
            task.signals.decoded.connect(release)

        if export:
            start_export(task)
        else:
            QThreadPool.globalInstance().start(task)

    # ==================== Errors ====================

    def _on_error(self, error_type: str, error_message: str):
        """Handle error"""
        logger.warning(f"{error_type} error: {error_message}")
        self._status_bar.showMessage(f"Error: {error_message}")
        QMessageBox.warning(self, f"{error_type.capitalize()} Error", error_message)

    # ==================== Events ====================

    def closeEvent(self, event: QCloseEvent):
        """Handle window close"""
        if not self._confirm_discard():
            event.ignore()
            return

        self._thumbnail_timer.stop()
        self._save_settings()
        event.accept()


__all__ = ['MainWindow']
