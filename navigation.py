"""Page and viewer state machines.

Both are plain objects with no Qt dependency; the window supplies a
scheduler for the page-turn delay and re-renders from callbacks.
"""

import logging
import math
from typing import Callable

from models import SlotStore, sticker_label, PAGE_SIZE, PAGE_TURN_MS


log = logging.getLogger(__name__)


def _run_now(delay_ms: int, fn: Callable[[], None]):
    fn()


class PaginationController:
    """Maps the album onto fixed-size pages and tracks the current one."""

    def __init__(self, total: int, page_size: int = PAGE_SIZE,
                 schedule: Callable[[int, Callable[[], None]], None] = _run_now,
                 turn_delay_ms: int = PAGE_TURN_MS,
                 on_changed: Callable[[], None] | None = None):
        self.total = total
        self.page_size = page_size
        self.schedule = schedule
        self.turn_delay_ms = turn_delay_ms
        self.on_changed = on_changed
        self.current_page = 0
        self.turning = False

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.page_size)

    def page_range(self, page: int | None = None) -> range:
        """Slot indices shown on the given page (default: current page)."""
        if page is None:
            page = self.current_page
        start = page * self.page_size
        return range(start, min(start + self.page_size, self.total))

    def page_of(self, index: int) -> int:
        return index // self.page_size

    def can_turn(self, forward: bool) -> bool:
        if forward:
            return self.current_page < self.total_pages - 1
        return self.current_page > 0

    def turn_page(self, forward: bool) -> bool:
        """Start a page turn. Returns False at the boundary or while a turn is pending."""
        if self.turning or not self.can_turn(forward):
            return False
        self.turning = True

        def finish():
            self.turning = False
            # Re-check: a reset may have moved the page while the turn was pending
            if self.can_turn(forward):
                self.current_page += 1 if forward else -1
                log.debug("Page %d / %d", self.current_page + 1, self.total_pages)
            if self.on_changed is not None:
                self.on_changed()

        self.schedule(self.turn_delay_ms, finish)
        return True

    def reset(self):
        self.current_page = 0

    def label(self) -> str:
        return f"Page {self.current_page + 1} / {self.total_pages}"


class ViewerController:
    """Full-screen viewer: Closed (index None) or Open(index) on an occupied slot."""

    def __init__(self, store: SlotStore):
        self.store = store
        self.index: int | None = None

    @property
    def is_open(self) -> bool:
        return self.index is not None

    def open(self, index: int):
        if not self.store.is_occupied(index):
            raise ValueError(f"slot {index} is empty")
        self.index = index

    def close(self):
        self.index = None

    def _step(self, forward: bool) -> bool:
        if self.index is None:
            return False
        found = self.store.scan_occupied(self.index, forward)
        if found is None:
            return False
        self.index = found
        return True

    def next(self) -> bool:
        return self._step(True)

    def prev(self) -> bool:
        return self._step(False)

    def caption(self) -> str:
        if self.index is None:
            return ""
        return f"Sticker {sticker_label(self.index)}"
