"""Tests for tap disambiguation, swipes and keys."""
import pytest
from PySide6.QtCore import Qt

from gestures import TapDisambiguator, swipe_command, key_command
from session import OpenViewer, RemoveSticker, ViewerNext, ViewerPrev, CloseViewer


class TestTapDisambiguator:

    def test_double_tap_removes(self):
        taps = TapDisambiguator(300)
        assert taps.tap(4, 1000) is None
        assert taps.tap(4, 1299) == RemoveSticker(4)
        assert not taps.armed
        # Nothing left to open afterwards
        assert taps.expire(2000) is None

    def test_single_tap_opens_after_threshold(self):
        taps = TapDisambiguator(300)
        taps.tap(4, 1000)
        assert taps.expire(1299) is None
        assert taps.armed
        assert taps.expire(1300) == OpenViewer(4)
        assert not taps.armed

    def test_second_tap_at_threshold_is_not_double(self):
        taps = TapDisambiguator(300)
        taps.tap(4, 1000)
        assert taps.tap(4, 1300) is None
        assert taps.armed_index == 4
        assert taps.deadline == 1600

    def test_tap_on_other_slot_rearms(self):
        taps = TapDisambiguator(300)
        taps.tap(1, 1000)
        assert taps.tap(2, 1100) is None
        assert taps.armed_index == 2
        # Returning to slot 1 is a fresh first tap, not a double tap
        assert taps.tap(1, 1150) is None
        assert taps.expire(1450) == OpenViewer(1)

    def test_expire_when_disarmed(self):
        assert TapDisambiguator().expire(10**9) is None


class TestSwipe:

    @pytest.mark.parametrize('dx, kind, expected', [
        (51, 'touch', ViewerPrev()),
        (-51, 'touch', ViewerNext()),
        (50, 'touch', None),
        (-50, 'touch', None),
        (81, 'pointer', ViewerPrev()),
        (-81, 'pointer', ViewerNext()),
        (60, 'pointer', None),
        (-80, 'pointer', None),
    ])
    def test_thresholds(self, dx, kind, expected):
        assert swipe_command(dx, 0, kind) == expected

    def test_vertical_motion_ignored(self):
        assert swipe_command(0, 400, 'touch') is None
        assert swipe_command(10, -300, 'pointer') is None


class TestKeys:

    def test_keys_while_open(self):
        assert key_command(Qt.Key.Key_Left, True) == ViewerPrev()
        assert key_command(Qt.Key.Key_Right, True) == ViewerNext()
        assert key_command(Qt.Key.Key_Escape, True) == CloseViewer()
        assert key_command(Qt.Key.Key_A, True) is None

    def test_keys_ignored_while_closed(self):
        for key in (Qt.Key.Key_Left, Qt.Key.Key_Right, Qt.Key.Key_Escape):
            assert key_command(key, False) is None
