"""Tests for pagination and the viewer state machine."""
import pytest

from models import SlotStore, Sticker, TOTAL, PAGE_SIZE
from navigation import PaginationController, ViewerController


def _store(total, occupied):
    store = SlotStore(total)
    for i in occupied:
        store.set(i, Sticker(image=b'x', content_hash=str(i)))
    return store


class TestPagination:

    def test_default_album_pages(self):
        pages = PaginationController(TOTAL, PAGE_SIZE)
        assert pages.total_pages == 63
        assert pages.current_page == 0
        assert pages.page_range() == range(0, 16)
        assert pages.page_range(62) == range(992, 1000)
        assert pages.label() == 'Page 1 / 63'

    def test_backward_at_first_page_is_noop(self):
        pages = PaginationController(40, 16)
        assert not pages.turn_page(False)
        assert pages.current_page == 0

    def test_forward_until_last_page(self):
        changes = []
        pages = PaginationController(40, 16, on_changed=lambda: changes.append(pages.current_page))
        assert pages.turn_page(True)
        assert pages.turn_page(True)
        assert not pages.turn_page(True)
        assert pages.current_page == 2
        assert changes == [1, 2]
        assert not pages.can_turn(True)
        assert pages.can_turn(False)

    def test_turn_is_deferred_by_scheduler(self):
        pending = []
        pages = PaginationController(40, 16, schedule=lambda ms, fn: pending.append((ms, fn)),
                                     turn_delay_ms=200)
        assert pages.turn_page(True)
        assert pages.current_page == 0
        assert pages.turning
        # A second request while turning is ignored
        assert not pages.turn_page(True)
        assert len(pending) == 1
        delay, finish = pending[0]
        assert delay == 200
        finish()
        assert pages.current_page == 1
        assert not pages.turning

    def test_reset_during_pending_turn_stays_in_range(self):
        pending = []
        pages = PaginationController(32, 16, schedule=lambda ms, fn: pending.append(fn))
        pages.current_page = 1
        pages.turn_page(False)
        pages.reset()
        pending[0]()
        assert pages.current_page == 0

    def test_page_of(self):
        pages = PaginationController(TOTAL, PAGE_SIZE)
        assert pages.page_of(0) == 0
        assert pages.page_of(15) == 0
        assert pages.page_of(16) == 1


class TestViewer:

    def test_starts_closed(self):
        viewer = ViewerController(_store(10, []))
        assert not viewer.is_open
        assert viewer.caption() == ''

    def test_next_and_no_wraparound(self):
        viewer = ViewerController(_store(10, [2, 5, 9]))
        viewer.open(5)
        assert viewer.next()
        assert viewer.index == 9
        assert not viewer.next()
        assert viewer.index == 9

    def test_prev_and_no_wraparound(self):
        viewer = ViewerController(_store(10, [2, 5, 9]))
        viewer.open(5)
        assert viewer.prev()
        assert viewer.index == 2
        assert not viewer.prev()
        assert viewer.index == 2

    def test_open_empty_slot_rejected(self):
        viewer = ViewerController(_store(10, [2]))
        with pytest.raises(ValueError):
            viewer.open(3)
        assert not viewer.is_open

    def test_navigation_when_closed_is_noop(self):
        viewer = ViewerController(_store(10, [2, 5]))
        assert not viewer.next()
        assert not viewer.prev()
        assert viewer.index is None

    def test_close_from_any_state(self):
        viewer = ViewerController(_store(10, [4]))
        viewer.close()
        assert not viewer.is_open
        viewer.open(4)
        assert viewer.caption() == 'Sticker #005'
        viewer.close()
        assert viewer.index is None
