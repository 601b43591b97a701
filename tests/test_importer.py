"""Tests for single and batch import."""
import io

import pytest
from PIL import Image

from hashing import content_hash
from importer import ImportCoordinator, ImportItem, collect_folder
from models import Sticker, TARGET_W, TARGET_H
from storage import KeyValueStore, PersistenceManager


def _png_item(name, data):
    return ImportItem.from_bytes(name, data, 'image/png')


@pytest.fixture
def coordinator(persistence):
    return ImportCoordinator(persistence.load(), persistence)


def _hashes(store):
    return [s.content_hash for s in store if s is not None]


class TestImportItem:

    def test_from_path_guesses_type(self, tmp_path):
        p = tmp_path / 'photo.JPG'
        p.write_bytes(b'x')
        item = ImportItem.from_path(p)
        assert item.mime_type == 'image/jpeg'
        assert item.is_image
        assert item.read() == b'x'

    def test_unknown_extension_is_not_image(self, tmp_path):
        p = tmp_path / 'notes.txt'
        p.write_text('hi')
        assert not ImportItem.from_path(p).is_image

    def test_collect_folder(self, tmp_path):
        for name in ('b.png', 'a.png', '.hidden.png'):
            (tmp_path / name).write_bytes(b'')
        (tmp_path / 'sub').mkdir()
        assert [i.name for i in collect_folder(tmp_path)] == ['a.png', 'b.png']

    def test_collect_missing_folder(self, tmp_path):
        assert collect_folder(tmp_path / 'missing') == []


class TestImportSingle:

    def test_assigns_target_and_persists(self, coordinator, persistence, make_png):
        data = make_png(300, 200)
        result = coordinator.import_single(7, data)
        assert result.assigned == [7]
        assert not result.quota_exceeded
        sticker = coordinator.store.get(7)
        assert sticker.content_hash == content_hash(data)
        assert Image.open(io.BytesIO(sticker.image)).size == (TARGET_W, TARGET_H)
        assert persistence.load().get(7) == sticker

    def test_duplicate_is_silent_noop(self, coordinator, make_png):
        data = make_png(300, 200)
        coordinator.import_single(0, data)
        result = coordinator.import_single(1, data)
        assert result.assigned == []
        assert result.skipped == 1
        assert coordinator.store.get(1) is None
        assert _hashes(coordinator.store).count(content_hash(data)) == 1

    def test_replaces_occupied_target(self, coordinator, make_png):
        coordinator.import_single(0, make_png(100, 100, 'red'))
        coordinator.import_single(0, make_png(100, 100, 'blue'))
        assert coordinator.store.occupied_count() == 1
        assert coordinator.store.get(0).content_hash == content_hash(make_png(100, 100, 'blue'))

    def test_undecodable_is_skipped(self, coordinator):
        result = coordinator.import_single(0, b'garbage')
        assert result.assigned == []
        assert coordinator.store.get(0) is None

    def test_quota_failure_keeps_assignment(self, tmp_path, make_png):
        pm = PersistenceManager(KeyValueStore(tmp_path, quota_bytes=100), total=10)
        coordinator = ImportCoordinator(pm.load(), pm)
        result = coordinator.import_single(2, make_png(50, 50))
        assert result.quota_exceeded
        assert result.assigned == [2]
        assert coordinator.store.is_occupied(2)
        assert pm.load().occupied_count() == 0
        assert not coordinator.busy


class TestImportBatch:

    def test_fills_first_empty_slots_in_order(self, coordinator, sample_images):
        coordinator.store.set(1, Sticker(image=b'x', content_hash='existing'))
        items = [_png_item(f'{n}.png', d) for n, d in enumerate(sample_images[:3])]
        result = coordinator.import_batch(items)
        assert result.assigned == [0, 2, 3]
        assert coordinator.store.get(0).content_hash == content_hash(sample_images[0])
        assert coordinator.store.get(3).content_hash == content_hash(sample_images[2])

    @pytest.mark.parametrize('empty_slots', [10, 3, 2, 0])
    def test_assigned_count(self, persistence, sample_images, empty_slots):
        store = persistence.load()
        for i in range(10 - empty_slots):
            store.set(i, Sticker(image=b'x', content_hash=f'pre-{i}'))
        coordinator = ImportCoordinator(store, persistence)

        distinct = sample_images[:4]
        items = [_png_item(f'{n}.png', d) for n, d in enumerate(distinct)]
        items.insert(2, _png_item('dup.png', distinct[0]))                 # D = 1
        items.insert(1, ImportItem.from_bytes('notes.txt', b'hello'))      # F = 1
        m, d, f = len(items), 1, 1

        result = coordinator.import_batch(items)
        expected = min(m - d - f, empty_slots)
        assert len(result.assigned) == expected
        assert store.occupied_count() == 10 - empty_slots + expected
        assert len(set(_hashes(store))) == len(_hashes(store))

    def test_duplicate_of_stored_content_skipped(self, coordinator, make_png):
        data = make_png(120, 80)
        coordinator.import_single(5, data)
        result = coordinator.import_batch([_png_item('again.png', data)])
        assert result.assigned == []
        assert coordinator.store.occupied_count() == 1

    def test_bad_items_do_not_stop_batch(self, coordinator, make_png):
        def unreadable():
            raise OSError('gone')

        items = [
            ImportItem('missing.png', 'image/png', unreadable),
            _png_item('broken.png', b'not really png'),
            _png_item('good.png', make_png(60, 90)),
        ]
        result = coordinator.import_batch(items)
        assert result.assigned == [0]
        assert result.skipped == 2

    def test_non_image_never_read(self, coordinator):
        def boom():
            raise AssertionError('non-image should not be read')

        result = coordinator.import_batch([ImportItem('a.txt', 'text/plain', boom)])
        assert result.assigned == []

    def test_saves_once(self, persistence, sample_images, monkeypatch):
        coordinator = ImportCoordinator(persistence.load(), persistence)
        calls = []
        original = persistence.save
        monkeypatch.setattr(persistence, 'save', lambda store: (calls.append(1), original(store)))
        coordinator.import_batch([_png_item(f'{n}.png', d) for n, d in enumerate(sample_images)])
        assert len(calls) == 1
        assert persistence.load().occupied_count() == len(sample_images)

    def test_quota_failure_reported_once(self, tmp_path, sample_images):
        pm = PersistenceManager(KeyValueStore(tmp_path, quota_bytes=100), total=10)
        coordinator = ImportCoordinator(pm.load(), pm)
        result = coordinator.import_batch([_png_item(f'{n}.png', d) for n, d in enumerate(sample_images)])
        assert result.quota_exceeded
        assert len(result.assigned) == len(sample_images)
        assert coordinator.store.occupied_count() == len(sample_images)

    def test_progress_called_per_processed_image(self, persistence, sample_images):
        ticks = []
        coordinator = ImportCoordinator(persistence.load(), persistence,
                                        progress=lambda: ticks.append(coordinator.busy))
        coordinator.import_batch([_png_item(f'{n}.png', d) for n, d in enumerate(sample_images[:3])])
        assert ticks == [True, True, True]
        assert not coordinator.busy
