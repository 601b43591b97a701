"""Turn raw input (taps, swipes, keys) into album commands.

Nothing here reads a clock or touches widgets: callers pass timestamps and
displacements in, and get command values (see session.py) or None back.
"""

from PySide6.QtCore import Qt

from models import DOUBLE_TAP_MS, TOUCH_SWIPE_PX, POINTER_SWIPE_PX
from session import OpenViewer, RemoveSticker, ViewerNext, ViewerPrev, CloseViewer


SWIPE_THRESHOLDS = {
    "touch": TOUCH_SWIPE_PX,
    "pointer": POINTER_SWIPE_PX,
}


class TapDisambiguator:
    """Per-slot single/double tap detection.

    Disarmed, or armed for one slot index until a deadline. A second tap on
    the armed index before the deadline is a double tap (remove); reaching
    the deadline without one is a single tap (open viewer). A tap on another
    index re-arms for that index and drops the earlier pending open.
    """

    def __init__(self, threshold_ms: int = DOUBLE_TAP_MS):
        self.threshold_ms = threshold_ms
        self.armed_index: int | None = None
        self.deadline: float | None = None

    @property
    def armed(self) -> bool:
        return self.armed_index is not None

    def disarm(self):
        self.armed_index = None
        self.deadline = None

    def tap(self, index: int, now_ms: float) -> RemoveSticker | None:
        if self.armed_index == index and now_ms < self.deadline:
            self.disarm()
            return RemoveSticker(index)
        self.armed_index = index
        self.deadline = now_ms + self.threshold_ms
        return None

    def expire(self, now_ms: float) -> OpenViewer | None:
        """Called when the timer fires; yields the single-tap command if due."""
        if self.armed_index is None or now_ms < self.deadline:
            return None
        index = self.armed_index
        self.disarm()
        return OpenViewer(index)


def swipe_command(dx: float, dy: float, kind: str = "touch"):
    """Horizontal swipe on the viewer image -> ViewerPrev / ViewerNext / None.

    Positive dx (dragging right) goes back, negative goes forward. Vertical
    motion (dy) never navigates.
    """
    threshold = SWIPE_THRESHOLDS[kind]
    if dx > threshold:
        return ViewerPrev()
    if dx < -threshold:
        return ViewerNext()
    return None


def key_command(key, viewer_open: bool):
    if not viewer_open:
        return None
    if key == Qt.Key.Key_Left:
        return ViewerPrev()
    if key == Qt.Key.Key_Right:
        return ViewerNext()
    if key == Qt.Key.Key_Escape:
        return CloseViewer()
    return None
