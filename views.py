"""View layer: Qt widgets for display and interaction.

Contains SlotWidget (one numbered cell), AlbumPageWidget (the paginated
grid, also the drop target for batch import) and ViewerOverlay (the
full-screen sticker viewer). Widgets only report what happened through
signals; MainWindow turns that into commands.
"""

from PySide6.QtCore import Qt, QRectF, QPointF, QEvent, Signal
from PySide6.QtGui import QImage, QPixmap, QPainter, QPen, QColor, QFont
from PySide6.QtWidgets import QWidget, QGridLayout, QGraphicsOpacityEffect

from models import SlotStore, Sticker, sticker_label, GRID_COLUMNS, PAGE_SIZE, TARGET_W, TARGET_H


def fit_rect(cell: QRectF, src_w: float, src_h: float) -> QRectF:
    """Return the largest rect with src aspect ratio that fits inside cell, centered."""
    if src_w <= 0 or src_h <= 0:
        return cell
    src_aspect = src_w / src_h
    cell_aspect = cell.width() / cell.height() if cell.height() > 0 else 1
    if src_aspect > cell_aspect:
        w = cell.width()
        h = w / src_aspect
    else:
        h = cell.height()
        w = h * src_aspect
    x = cell.x() + (cell.width() - w) / 2
    y = cell.y() + (cell.height() - h) / 2
    return QRectF(x, y, w, h)


def pixmap_from_jpeg(data: bytes) -> QPixmap:
    qimg = QImage()
    qimg.loadFromData(data)
    return QPixmap.fromImage(qimg)


# === SlotWidget ===

class SlotWidget(QWidget):
    """A single numbered slot: dashed placeholder when empty, the sticker otherwise."""

    tapped = Signal(int)  # emits slot index

    def __init__(self, parent=None):
        super().__init__(parent)
        self.index = 0
        self._pixmap: QPixmap | None = None
        self.setMinimumSize(TARGET_W // 5, TARGET_H // 5)
        self.setCursor(Qt.CursorShape.PointingHandCursor)

    @property
    def is_empty(self) -> bool:
        return self._pixmap is None

    def set_slot(self, index: int, pixmap: QPixmap | None):
        self.index = index
        self._pixmap = pixmap
        self.update()

    def paintEvent(self, event):
        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.SmoothPixmapTransform)
        cell = fit_rect(QRectF(self.rect()).adjusted(2, 2, -2, -2), TARGET_W, TARGET_H)

        if self._pixmap is None:
            painter.fillRect(cell, QColor(245, 242, 232))
            painter.setPen(QPen(QColor(190, 180, 160), 1, Qt.PenStyle.DashLine))
            painter.drawRect(cell)
        else:
            painter.drawPixmap(cell.toRect(), self._pixmap)

        # Sticker number, top-left corner
        font = QFont(painter.font())
        font.setBold(True)
        painter.setFont(font)
        label = sticker_label(self.index)
        label_rect = QRectF(cell.x() + 4, cell.y() + 4, cell.width() - 8, 18)
        painter.fillRect(QRectF(label_rect.x(), label_rect.y(),
                                painter.fontMetrics().horizontalAdvance(label) + 6, 18),
                         QColor(255, 255, 255, 200))
        painter.setPen(QColor(60, 60, 60))
        painter.drawText(label_rect.adjusted(3, 0, 0, 0),
                         Qt.AlignmentFlag.AlignLeft | Qt.AlignmentFlag.AlignVCenter, label)
        painter.end()

    def mousePressEvent(self, event):
        # Accept the press so the release is delivered here
        if event.button() == Qt.MouseButton.LeftButton:
            event.accept()
            return
        super().mousePressEvent(event)

    def mouseReleaseEvent(self, event):
        # Qt turns the second press of a double click into mouseDoubleClickEvent,
        # but both clicks still end in a release, so every tap is counted here.
        if (event.button() == Qt.MouseButton.LeftButton
                and self.rect().contains(event.position().toPoint())):
            self.tapped.emit(self.index)
            event.accept()
            return
        super().mouseReleaseEvent(event)


# === AlbumPageWidget: the paginated grid ===

class AlbumPageWidget(QWidget):
    """One album page: a fixed grid of SlotWidgets. Accepts dropped files."""

    slot_tapped = Signal(int)
    files_dropped = Signal(list)  # emits list of local file paths

    def __init__(self, store: SlotStore, page_size: int = PAGE_SIZE,
                 columns: int = GRID_COLUMNS, parent=None):
        super().__init__(parent)
        self.store = store
        self._pixmap_cache: dict[int, tuple[Sticker, QPixmap]] = {}
        self.slots: list[SlotWidget] = []

        grid = QGridLayout(self)
        grid.setSpacing(8)
        for n in range(page_size):
            slot = SlotWidget(self)
            slot.tapped.connect(self.slot_tapped)
            grid.addWidget(slot, n // columns, n % columns)
            self.slots.append(slot)

        self._fade = QGraphicsOpacityEffect(self)
        self._fade.setOpacity(1.0)
        self.setGraphicsEffect(self._fade)
        self.setAcceptDrops(True)

    def invalidate_cache(self):
        self._pixmap_cache.clear()

    def _get_pixmap(self, index: int) -> QPixmap | None:
        sticker = self.store.get(index)
        if sticker is None:
            self._pixmap_cache.pop(index, None)
            return None
        cached = self._pixmap_cache.get(index)
        if cached is None or cached[0] is not sticker:
            cached = (sticker, pixmap_from_jpeg(sticker.image))
            self._pixmap_cache[index] = cached
        return cached[1]

    def show_page(self, indices: range):
        """Fill the grid with the given slot indices; leftover cells are hidden."""
        for slot, index in zip(self.slots, indices):
            slot.set_slot(index, self._get_pixmap(index))
            slot.show()
        for slot in self.slots[len(indices):]:
            slot.hide()

    def set_turning(self, turning: bool):
        """Dim the page while a page turn is pending."""
        self._fade.setOpacity(0.35 if turning else 1.0)

    # --- Drag and drop ---

    def dragEnterEvent(self, event):
        if event.mimeData().hasUrls():
            event.acceptProposedAction()

    def dragMoveEvent(self, event):
        event.acceptProposedAction()

    def dropEvent(self, event):
        mime = event.mimeData()
        paths = [url.toLocalFile() for url in mime.urls() if url.isLocalFile()]
        if paths:
            self.files_dropped.emit(paths)
        event.acceptProposedAction()


# === ViewerOverlay: full-screen sticker viewer ===

class ViewerOverlay(QWidget):
    """Dark overlay showing one sticker with its number.

    Horizontal touch swipes and mouse drags on the image are reported with
    their displacement; a click on the backdrop or the close box asks to close.
    """

    swiped = Signal(float, float, str)  # dx, dy, "touch" | "pointer"
    close_requested = Signal()

    _CLOSE_SIZE = 36

    def __init__(self, parent=None):
        super().__init__(parent)
        self._pixmap: QPixmap | None = None
        self._caption = ""
        self._touch_start: QPointF | None = None
        self._drag_start: QPointF | None = None
        self.setAttribute(Qt.WidgetAttribute.WA_AcceptTouchEvents)
        self.setFocusPolicy(Qt.FocusPolicy.StrongFocus)
        self.hide()

    def show_sticker(self, data: bytes, caption: str):
        self._pixmap = pixmap_from_jpeg(data)
        self._caption = caption
        if self.parentWidget() is not None:
            self.setGeometry(self.parentWidget().rect())
        self.show()
        self.raise_()
        self.setFocus()
        self.update()

    def clear(self):
        self._pixmap = None
        self._caption = ""
        self._touch_start = None
        self._drag_start = None
        self.hide()

    @property
    def caption(self) -> str:
        return self._caption

    def image_rect(self) -> QRectF:
        padding = 40
        area = QRectF(self.rect()).adjusted(padding, padding, -padding, -padding - 30)
        return fit_rect(area, TARGET_W, TARGET_H)

    def _close_rect(self) -> QRectF:
        s = self._CLOSE_SIZE
        return QRectF(self.width() - s - 12, 12, s, s)

    def paintEvent(self, event):
        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.SmoothPixmapTransform)
        painter.fillRect(self.rect(), QColor(0, 0, 0, 215))

        img_rect = self.image_rect()
        if self._pixmap is not None:
            painter.drawPixmap(img_rect.toRect(), self._pixmap)

        painter.setPen(QColor(255, 255, 255))
        caption_rect = QRectF(0, img_rect.bottom() + 8, self.width(), 24)
        painter.drawText(caption_rect, Qt.AlignmentFlag.AlignCenter, self._caption)

        # Close box
        c = self._close_rect()
        painter.setPen(QPen(QColor(255, 255, 255), 2))
        m = 10
        painter.drawLine(QPointF(c.left() + m, c.top() + m), QPointF(c.right() - m, c.bottom() - m))
        painter.drawLine(QPointF(c.right() - m, c.top() + m), QPointF(c.left() + m, c.bottom() - m))
        painter.end()

    def resizeEvent(self, event):
        super().resizeEvent(event)
        self.update()

    # --- Touch swipe ---

    def event(self, event):
        etype = event.type()
        if etype == QEvent.Type.TouchBegin:
            points = event.points()
            if points and self.image_rect().contains(points[0].position()):
                self._touch_start = points[0].position()
            event.accept()
            return True
        if etype == QEvent.Type.TouchEnd:
            points = event.points()
            if self._touch_start is not None and points:
                delta = points[0].position() - self._touch_start
                self.swiped.emit(delta.x(), delta.y(), "touch")
            self._touch_start = None
            event.accept()
            return True
        return super().event(event)

    # --- Mouse drag ---

    def mousePressEvent(self, event):
        if event.button() == Qt.MouseButton.LeftButton:
            pos = event.position()
            if self.image_rect().contains(pos):
                self._drag_start = pos
            else:
                # Backdrop or close box
                self.close_requested.emit()
            event.accept()
            return
        super().mousePressEvent(event)

    def mouseReleaseEvent(self, event):
        if self._drag_start is not None and event.button() == Qt.MouseButton.LeftButton:
            delta = event.position() - self._drag_start
            self._drag_start = None
            self.swiped.emit(delta.x(), delta.y(), "pointer")
            event.accept()
            return
        super().mouseReleaseEvent(event)
