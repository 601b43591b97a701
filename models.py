"""Data model classes, constants and errors for Sticker Album.

The album is a fixed number of slots; each slot is empty (None) or holds a
Sticker with its normalized JPEG bytes and the fingerprint of the raw file
it came from.
"""

import base64
from dataclasses import dataclass


# === Constants ===
TOTAL = 1000           # slots in the album, fixed for its lifetime
PAGE_SIZE = 16         # slots per page (4 x 4 grid)
GRID_COLUMNS = 4

TARGET_W = 400         # canonical sticker size (2:3)
TARGET_H = 600
JPEG_QUALITY = 80

STORAGE_KEY = "caderneta_v1"
DEFAULT_QUOTA_BYTES = 5 * 1024 * 1024  # typical per-origin browser quota

DOUBLE_TAP_MS = 300
TOUCH_SWIPE_PX = 50
POINTER_SWIPE_PX = 80
PAGE_TURN_MS = 200

DATA_URL_PREFIX = "data:image/jpeg;base64,"

IMAGE_FILTER = "Images (*.png *.jpg *.jpeg *.gif *.bmp *.webp *.tif *.tiff)"


# === Errors ===

class AlbumError(Exception):
    """Base class for album failures."""


class DecodeError(AlbumError):
    """Raw bytes could not be decoded as an image."""


class QuotaExceededError(AlbumError):
    """The durable store rejected a write."""


def sticker_label(index: int) -> str:
    """Canonical 1-based sticker number, e.g. 0 -> '#001'."""
    return f"#{index + 1:03d}"


# === Data Model ===

@dataclass
class Sticker:
    """An occupied slot: normalized JPEG bytes plus the raw-content hash."""
    image: bytes
    content_hash: str

    def to_record(self) -> dict:
        return {
            "image": DATA_URL_PREFIX + base64.b64encode(self.image).decode("ascii"),
            "hash": self.content_hash,
        }

    @classmethod
    def from_record(cls, record) -> "Sticker":
        """Inverse of to_record. Raises ValueError on any malformed field."""
        if not isinstance(record, dict):
            raise ValueError("sticker record is not an object")
        data_url = record.get("image")
        content_hash = record.get("hash")
        if not isinstance(data_url, str) or not isinstance(content_hash, str):
            raise ValueError("sticker record is missing image or hash")
        if not data_url.startswith(DATA_URL_PREFIX):
            raise ValueError("sticker image is not a JPEG data URL")
        try:
            image = base64.b64decode(data_url[len(DATA_URL_PREFIX):], validate=True)
        except (ValueError, TypeError) as e:
            raise ValueError(f"sticker image is not valid base64: {e}") from e
        return cls(image=image, content_hash=content_hash)


class SlotStore:
    """Fixed-length ordered collection of optional stickers.

    Index is the sticker's canonical number. The length never changes after
    construction. No dedup happens here; callers check contains_hash first.
    """

    def __init__(self, total: int = TOTAL):
        self._slots: list[Sticker | None] = [None] * total

    def __len__(self) -> int:
        return len(self._slots)

    def __iter__(self):
        return iter(self._slots)

    def _check(self, index: int):
        if not 0 <= index < len(self._slots):
            raise IndexError(f"slot {index} out of range 0..{len(self._slots) - 1}")

    def get(self, index: int) -> Sticker | None:
        self._check(index)
        return self._slots[index]

    def is_occupied(self, index: int) -> bool:
        return self.get(index) is not None

    def set(self, index: int, sticker: Sticker):
        self._check(index)
        self._slots[index] = sticker

    def clear(self, index: int):
        self._check(index)
        self._slots[index] = None

    def clear_all(self):
        self._slots = [None] * len(self._slots)

    def find_first_empty(self) -> int | None:
        for i, slot in enumerate(self._slots):
            if slot is None:
                return i
        return None

    def contains_hash(self, content_hash: str) -> bool:
        return any(s is not None and s.content_hash == content_hash for s in self._slots)

    def scan_occupied(self, start: int, forward: bool = True) -> int | None:
        """First occupied index strictly beyond start in the given direction.

        No wraparound: returns None when the album edge is reached.
        """
        step = 1 if forward else -1
        i = start + step
        while 0 <= i < len(self._slots):
            if self._slots[i] is not None:
                return i
            i += step
        return None

    def occupied_count(self) -> int:
        return sum(1 for s in self._slots if s is not None)

    # --- Durable record ---

    def to_record(self) -> list:
        return [s.to_record() if s is not None else None for s in self._slots]

    @classmethod
    def from_record(cls, record, total: int = TOTAL) -> "SlotStore":
        """Rebuild a store from its JSON record.

        Raises ValueError when the record is not a list of exactly `total`
        elements or any element is malformed.
        """
        if not isinstance(record, list):
            raise ValueError("album record is not a list")
        if len(record) != total:
            raise ValueError(f"album record has {len(record)} slots, expected {total}")
        store = cls(total)
        for i, item in enumerate(record):
            if item is not None:
                store._slots[i] = Sticker.from_record(item)
        return store
