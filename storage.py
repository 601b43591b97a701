"""Durable storage for the album.

KeyValueStore is a small per-user key/value medium: one JSON file per key in
a data directory, with a finite byte quota shared by all keys. The
PersistenceManager keeps the whole album under a single key.
"""

import json
import logging
import os
import tempfile
from pathlib import Path

from models import (
    SlotStore, QuotaExceededError,
    DEFAULT_QUOTA_BYTES, STORAGE_KEY, TOTAL,
)


log = logging.getLogger(__name__)


class KeyValueStore:
    """Directory-backed key/value store with a total size quota."""

    def __init__(self, directory: str | os.PathLike, quota_bytes: int = DEFAULT_QUOTA_BYTES):
        self.directory = Path(directory)
        self.quota_bytes = quota_bytes

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def _used_bytes(self, excluding: str | None = None) -> int:
        if not self.directory.is_dir():
            return 0
        skip = self._path(excluding).name if excluding else None
        return sum(p.stat().st_size for p in self.directory.glob("*.json")
                   if p.is_file() and p.name != skip)

    def get_item(self, key: str) -> str | None:
        try:
            return self._path(key).read_text(encoding="utf-8")
        except FileNotFoundError:
            return None

    def set_item(self, key: str, value: str):
        """Store value under key, replacing any previous value.

        Raises QuotaExceededError if the write would exceed the quota or the
        underlying filesystem rejects it. The previous value is left intact.
        """
        data = value.encode("utf-8")
        used = self._used_bytes(excluding=key)
        if used + len(data) > self.quota_bytes:
            raise QuotaExceededError(
                f"Writing {len(data)} bytes to '{key}' exceeds quota "
                f"({used} of {self.quota_bytes} bytes used)")
        tmp_name = None
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.directory, suffix=".tmp")
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            os.replace(tmp_name, self._path(key))
            tmp_name = None
        except OSError as e:
            raise QuotaExceededError(f"Could not write '{key}': {e}") from e
        finally:
            if tmp_name is not None:
                try:
                    os.unlink(tmp_name)
                except OSError:
                    pass

    def remove_item(self, key: str):
        try:
            self._path(key).unlink()
        except FileNotFoundError:
            pass


class PersistenceManager:
    """Load and save the whole album as one keyed record."""

    def __init__(self, kv: KeyValueStore, key: str = STORAGE_KEY, total: int = TOTAL):
        self.kv = kv
        self.key = key
        self.total = total

    def load(self) -> SlotStore:
        """Return the stored album, or an empty one if the record is absent or unusable."""
        try:
            raw = self.kv.get_item(self.key)
            if raw is None:
                log.info("No stored album, starting empty")
                return SlotStore(self.total)
            store = SlotStore.from_record(json.loads(raw), self.total)
        except (ValueError, RecursionError, OSError) as e:
            # Bad UTF-8 and bad JSON both surface as ValueError
            log.warning("Ignoring unusable album record: %s", e)
            return SlotStore(self.total)
        log.info("Loaded album with %d sticker(s)", store.occupied_count())
        return store

    def save(self, store: SlotStore):
        """Overwrite the durable record with the full album.

        Raises QuotaExceededError if the medium rejects the write; the
        in-memory store is not touched either way.
        """
        payload = json.dumps(store.to_record(), separators=(",", ":"))
        try:
            self.kv.set_item(self.key, payload)
        except QuotaExceededError as e:
            log.warning("Album save rejected: %s", e)
            raise
        log.info("Saved album (%d sticker(s), %d bytes)", store.occupied_count(), len(payload))

    def reset(self):
        """Delete the durable record."""
        self.kv.remove_item(self.key)
        log.info("Album record removed")
