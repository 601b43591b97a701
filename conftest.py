"""Shared pytest fixtures for Sticker Album tests."""
import os

os.environ['QT_QPA_PLATFORM'] = 'offscreen'  # must be set before QApplication import

import io
import pytest
from PIL import Image

from storage import KeyValueStore, PersistenceManager


@pytest.fixture(scope='session')
def qapp():
    """Create a single QApplication for all tests."""
    from controller import AlbumApp
    app = AlbumApp([])
    yield app


@pytest.fixture
def make_png():
    """Factory fixture: make_png(width, height, color) -> PNG bytes."""
    def _make(width, height, color='red'):
        img = Image.new('RGB', (width, height), color)
        buf = io.BytesIO()
        img.save(buf, format='PNG')
        return buf.getvalue()
    return _make


@pytest.fixture
def sample_images(make_png):
    """Distinct PNGs of varied sizes, aspect ratios and colors."""
    specs = [
        ('red', (200, 200)),
        ('blue', (300, 150)),
        ('green', (150, 300)),
        ('orange', (400, 600)),
        ('purple', (100, 250)),
    ]
    return [make_png(w, h, color) for color, (w, h) in specs]


@pytest.fixture
def kv(tmp_path):
    return KeyValueStore(tmp_path / 'data')


@pytest.fixture
def persistence(kv):
    """A 10-slot album persisted under a temporary directory."""
    return PersistenceManager(kv, total=10)
