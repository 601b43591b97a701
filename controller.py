"""Controller layer: MainWindow and AlbumApp.

Wires Qt events from the views to AlbumSession commands and re-renders the
album after every state change.
"""

import logging
from pathlib import Path

from PySide6.QtCore import Qt, QEvent, QElapsedTimer, QStandardPaths, QTimer, Signal
from PySide6.QtGui import QAction, QKeySequence
from PySide6.QtWidgets import (
    QApplication, QMainWindow, QWidget, QStatusBar, QFileDialog, QMessageBox,
    QVBoxLayout, QHBoxLayout, QPushButton, QLabel,
)

from gestures import TapDisambiguator, swipe_command, key_command
from importer import ImportItem, collect_folder
from models import IMAGE_FILTER, DEFAULT_QUOTA_BYTES, DOUBLE_TAP_MS
from session import (
    AlbumSession, PickFile, CancelPick, ImportFile, ImportBatch, TurnPage, ResetAlbum, CloseViewer,
)
from storage import KeyValueStore, PersistenceManager
from views import AlbumPageWidget, ViewerOverlay


log = logging.getLogger(__name__)


def default_data_dir() -> Path:
    """Per-user application data directory (platform specific)."""
    location = QStandardPaths.writableLocation(QStandardPaths.StandardLocation.AppDataLocation)
    if not location:
        location = str(Path.home() / ".sticker-album")
    return Path(location)


def _schedule(delay_ms: int, fn):
    QTimer.singleShot(delay_ms, fn)


# === MainWindow ===

class MainWindow(QMainWindow):
    """Top-level window: menu bar, album page with page bar, viewer overlay, status bar."""

    def __init__(self, data_dir: str | Path | None = None,
                 quota_bytes: int = DEFAULT_QUOTA_BYTES):
        super().__init__()
        kv = KeyValueStore(data_dir if data_dir is not None else default_data_dir(), quota_bytes)
        self.session = AlbumSession(
            PersistenceManager(kv),
            schedule=_schedule,
            on_changed=self._on_page_changed,
            progress=QApplication.processEvents,
        )

        self._clock = QElapsedTimer()
        self._clock.start()
        self.taps = TapDisambiguator(DOUBLE_TAP_MS)
        self._tap_timer = QTimer(self)
        self._tap_timer.setSingleShot(True)
        self._tap_timer.setTimerType(Qt.TimerType.PreciseTimer)
        self._tap_timer.timeout.connect(self._on_tap_timeout)

        self.setWindowTitle("Sticker Album")
        self.resize(760, 1000)

        central = QWidget()
        layout = QVBoxLayout(central)

        self.album_page = AlbumPageWidget(self.session.store, self.session.pagination.page_size)
        self.album_page.slot_tapped.connect(self._on_slot_tapped)
        self.album_page.files_dropped.connect(self._on_files_dropped)
        layout.addWidget(self.album_page, 1)

        bar = QHBoxLayout()
        self.prev_button = QPushButton("‹ Previous")
        self.prev_button.clicked.connect(lambda: self._turn_page(False))
        self.next_button = QPushButton("Next ›")
        self.next_button.clicked.connect(lambda: self._turn_page(True))
        self.page_label = QLabel()
        self.page_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        bar.addWidget(self.prev_button)
        bar.addWidget(self.page_label, 1)
        bar.addWidget(self.next_button)
        layout.addLayout(bar)

        self.setCentralWidget(central)

        self.viewer_overlay = ViewerOverlay(central)
        self.viewer_overlay.swiped.connect(self._on_swiped)
        self.viewer_overlay.close_requested.connect(lambda: self.run_command(CloseViewer()))
        central.installEventFilter(self)

        self._build_menus()
        self._status = QStatusBar()
        self.setStatusBar(self._status)
        self.render()

    def _build_menus(self):
        mb = self.menuBar()

        about_act = QAction("&About Sticker Album", self)
        about_act.setMenuRole(QAction.MenuRole.AboutRole)
        about_act.triggered.connect(self._show_about)

        # --- File menu ---
        file_menu = mb.addMenu("&File")

        act = QAction("&Add Images...", self)
        act.setShortcut(QKeySequence.StandardKey.Open)
        act.triggered.connect(self._add_images)
        file_menu.addAction(act)

        act = QAction("Import &Folder...", self)
        act.setShortcut(QKeySequence("Ctrl+Shift+O"))
        act.triggered.connect(self._import_folder)
        file_menu.addAction(act)

        file_menu.addSeparator()

        self._reset_action = QAction("&Reset Album...", self)
        self._reset_action.triggered.connect(self._reset_album)
        file_menu.addAction(self._reset_action)

        file_menu.addSeparator()

        act = QAction("&Quit", self)
        act.setShortcut(QKeySequence.StandardKey.Quit)
        act.triggered.connect(self.close)
        file_menu.addAction(act)

        # --- View menu ---
        view_menu = mb.addMenu("&View")

        act = QAction("&Previous Page", self)
        act.setShortcut(QKeySequence(Qt.Key.Key_PageUp))
        act.triggered.connect(lambda: self._turn_page(False))
        view_menu.addAction(act)

        act = QAction("&Next Page", self)
        act.setShortcut(QKeySequence(Qt.Key.Key_PageDown))
        act.triggered.connect(lambda: self._turn_page(True))
        view_menu.addAction(act)

        view_menu.addSeparator()
        view_menu.addAction(about_act)

    # --- Commands ---

    def _now(self) -> int:
        return self._clock.elapsed()

    def run_command(self, command) -> bool:
        """Dispatch a command, re-render if needed and surface any storage warning."""
        changed = self.session.dispatch(command)
        if changed:
            self.render()
        warning = self.session.take_warning()
        if warning:
            QMessageBox.warning(self, "Storage Full", warning)
        return changed

    def _on_slot_tapped(self, index: int):
        if self.session.importing:
            return
        if not self.session.store.is_occupied(index):
            # A pending open for an armed slot still fires
            self.run_command(PickFile(index))
            self._pick_single_file()
            return
        command = self.taps.tap(index, self._now())
        if command is not None:
            self._tap_timer.stop()
            self.run_command(command)
        else:
            self._tap_timer.start(self.taps.threshold_ms)

    def _on_tap_timeout(self):
        command = self.taps.expire(self._now())
        if command is not None:
            self.run_command(command)
        elif self.taps.armed:
            # Woke up early; wait out the remainder
            self._tap_timer.start(max(1, int(self.taps.deadline - self._now())))

    def _on_swiped(self, dx: float, dy: float, kind: str):
        command = swipe_command(dx, dy, kind)
        if command is not None:
            self.run_command(command)

    def _turn_page(self, forward: bool):
        if self.session.pagination.turning or not self.session.pagination.can_turn(forward):
            return
        self.album_page.set_turning(True)
        self.run_command(TurnPage(forward))

    def _on_page_changed(self):
        self.album_page.set_turning(False)
        self.render()

    # --- Import ---

    def _pick_single_file(self):
        path, _ = QFileDialog.getOpenFileName(self, "Choose Sticker Image", "", IMAGE_FILTER)
        if not path:
            self.run_command(CancelPick())
            return
        self.import_single_path(path)

    def import_single_path(self, path: str):
        """Import one file into the pending target slot."""
        try:
            data = Path(path).read_bytes()
        except OSError as e:
            log.warning("Could not read %s: %s", path, e)
            self.run_command(CancelPick())
            return
        self.run_command(ImportFile(data, Path(path).name))

    def _add_images(self):
        paths, _ = QFileDialog.getOpenFileNames(self, "Add Images", "", IMAGE_FILTER)
        if paths:
            self.import_items([ImportItem.from_path(p) for p in paths])

    def _import_folder(self):
        folder = QFileDialog.getExistingDirectory(self, "Import Folder")
        if folder:
            self.import_items(collect_folder(folder))

    def _on_files_dropped(self, paths: list):
        self.import_items([ImportItem.from_path(p) for p in paths])

    def import_items(self, items: list[ImportItem]):
        """Batch import into the first empty slots. Reset stays disabled meanwhile."""
        if self.session.importing:
            return
        self._reset_action.setEnabled(False)
        self._status.showMessage(f"Importing {len(items)} file{'s' if len(items) != 1 else ''}…")
        try:
            self.run_command(ImportBatch(items))
        finally:
            self._reset_action.setEnabled(True)
            self.render()

    # --- Reset ---

    def _reset_album(self):
        if self.session.importing:
            return
        reply = QMessageBox.question(
            self, "Reset Album",
            "Reset the album? All stickers will be removed.",
            QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No,
        )
        if reply != QMessageBox.StandardButton.Yes:
            return
        self.reset_album()

    def reset_album(self):
        self.taps.disarm()
        self._tap_timer.stop()
        self.album_page.invalidate_cache()
        self.run_command(ResetAlbum())

    def _show_about(self):
        QMessageBox.about(
            self,
            "About Sticker Album",
            "Sticker Album\n\n"
            "Collect pictures as numbered stickers.\n"
            "Tap an empty slot to fill it, double-tap a sticker to remove it.",
        )

    # --- Render & status ---

    def render(self):
        pagination = self.session.pagination
        self.album_page.show_page(pagination.page_range())
        self.page_label.setText(pagination.label())
        self.prev_button.setEnabled(pagination.can_turn(False))
        self.next_button.setEnabled(pagination.can_turn(True))
        self._reset_action.setEnabled(not self.session.importing)

        viewer = self.session.viewer
        if viewer.is_open:
            sticker = self.session.store.get(viewer.index)
            self.viewer_overlay.show_sticker(sticker.image, viewer.caption())
        else:
            self.viewer_overlay.clear()
        self._update_status()

    def _update_status(self):
        store = self.session.store
        n = store.occupied_count()
        self._status.showMessage(f"{n} of {len(store)} sticker{'s' if len(store) != 1 else ''}")

    def eventFilter(self, obj, event):
        if obj is self.centralWidget() and event.type() == QEvent.Type.Resize:
            self.viewer_overlay.setGeometry(obj.rect())
        return super().eventFilter(obj, event)

    def keyPressEvent(self, event):
        command = key_command(event.key(), self.session.viewer.is_open)
        if command is not None:
            self.run_command(command)
            event.accept()
            return
        super().keyPressEvent(event)


# === AlbumApp: custom QApplication for macOS file open events ===

class AlbumApp(QApplication):
    """QApplication subclass that forwards macOS QFileOpenEvent (e.g. images dropped on the Dock icon)."""

    file_open_requested = Signal(str)

    def event(self, event):
        if event.type() == QEvent.Type.FileOpen:
            self.file_open_requested.emit(event.file())
            return True
        return super().event(event)
