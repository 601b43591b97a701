"""Import pipeline: fingerprint, dedup, normalize, assign, persist.

Files are processed strictly one after another so the empty-slot cursor and
the duplicate check always see every earlier assignment.
"""

import logging
import mimetypes
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

from hashing import content_hash
from models import SlotStore, Sticker, DecodeError, QuotaExceededError
from normalizer import normalize
from storage import PersistenceManager


log = logging.getLogger(__name__)


@dataclass(frozen=True)
class ImportItem:
    """A file offered for import: display name, declared MIME type, byte reader."""
    name: str
    mime_type: str
    read: Callable[[], bytes]

    @property
    def is_image(self) -> bool:
        return self.mime_type.startswith("image/")

    @classmethod
    def from_path(cls, path: str | os.PathLike) -> "ImportItem":
        path = Path(path)
        mime, _ = mimetypes.guess_type(path.name)
        return cls(name=path.name, mime_type=mime or "", read=path.read_bytes)

    @classmethod
    def from_bytes(cls, name: str, data: bytes, mime_type: str | None = None) -> "ImportItem":
        if mime_type is None:
            mime_type = mimetypes.guess_type(name)[0] or ""
        return cls(name=name, mime_type=mime_type, read=lambda: data)


@dataclass
class ImportResult:
    """Outcome of one import operation. Only quota_exceeded is shown to users."""
    assigned: list[int] = field(default_factory=list)
    skipped: int = 0
    quota_exceeded: bool = False


def collect_folder(folder: str | os.PathLike) -> list[ImportItem]:
    """Regular, non-hidden files directly inside folder, in name order."""
    folder = Path(folder)
    try:
        children = sorted(folder.iterdir(), key=lambda p: p.name)
    except OSError as e:
        log.warning("Could not list %s: %s", folder, e)
        return []
    return [ImportItem.from_path(p) for p in children
            if p.is_file() and not p.name.startswith(".")]


class ImportCoordinator:
    """Runs single and batch imports against a SlotStore."""

    def __init__(self, store: SlotStore, persistence: PersistenceManager,
                 progress: Callable[[], None] | None = None):
        self.store = store
        self.persistence = persistence
        self.progress = progress
        self.busy = False

    def _make_sticker(self, raw: bytes, name: str) -> Sticker | None:
        """Hash and normalize raw bytes; None for duplicates or undecodable data."""
        digest = content_hash(raw)
        if self.store.contains_hash(digest):
            log.debug("Skipping %s: duplicate of an existing sticker", name)
            return None
        try:
            image = normalize(raw)
        except DecodeError as e:
            log.debug("Skipping %s: %s", name, e)
            return None
        return Sticker(image=image, content_hash=digest)

    def _save(self, result: ImportResult):
        try:
            self.persistence.save(self.store)
        except QuotaExceededError:
            result.quota_exceeded = True

    def import_single(self, target_index: int, raw: bytes, name: str = "file") -> ImportResult:
        """Place one image at target_index (replacing whatever is there)."""
        result = ImportResult()
        self.busy = True
        try:
            sticker = self._make_sticker(raw, name)
            if sticker is None:
                result.skipped = 1
                return result
            self.store.set(target_index, sticker)
            result.assigned.append(target_index)
            self._save(result)
        finally:
            self.busy = False
        return result

    def import_batch(self, items) -> ImportResult:
        """Fill empty slots in order from items; one save at the end."""
        result = ImportResult()
        self.busy = True
        try:
            cursor = self.store.find_first_empty()
            for item in items:
                if cursor is None:
                    log.debug("Album full, stopping batch")
                    break
                if not item.is_image:
                    log.debug("Skipping %s: not an image (%r)", item.name, item.mime_type)
                    result.skipped += 1
                    continue
                try:
                    raw = item.read()
                except OSError as e:
                    log.debug("Skipping %s: %s", item.name, e)
                    result.skipped += 1
                    continue
                sticker = self._make_sticker(raw, item.name)
                if sticker is None:
                    result.skipped += 1
                else:
                    self.store.set(cursor, sticker)
                    result.assigned.append(cursor)
                    cursor = self.store.find_first_empty()
                if self.progress is not None:
                    self.progress()
            self._save(result)
        finally:
            self.busy = False
        log.info("Batch import assigned %d slot(s), skipped %d", len(result.assigned), result.skipped)
        return result
