"""Tests for the content fingerprint."""
import os

from hashing import content_hash


class TestContentHash:

    def test_empty_input(self):
        assert content_hash(b'') == '0'

    def test_known_values(self):
        assert content_hash(b'a') == '97'
        assert content_hash(b'ab') == str(97 * 31 + 98)

    def test_deterministic(self):
        data = os.urandom(4096)
        assert content_hash(data) == content_hash(data)
        assert content_hash(data) == content_hash(bytes(data))

    def test_stays_in_signed_32_bit_range(self):
        h = int(content_hash(b'\xff' * 10000))
        assert -2**31 <= h < 2**31

    def test_wraps_to_negative(self):
        values = {int(content_hash(bytes([200]) * n)) for n in range(1, 40)}
        assert any(v < 0 for v in values)

    def test_different_content_usually_differs(self, sample_images):
        hashes = {content_hash(b) for b in sample_images}
        assert len(hashes) == len(sample_images)
