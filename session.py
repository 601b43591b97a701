"""Application state and the single update function.

AlbumSession owns the slot store, the pending import target, the viewer and
the pagination controller. Every user action arrives as a command value and
goes through AlbumSession.dispatch, which returns True when the album needs
to be re-rendered.
"""

import logging
from dataclasses import dataclass

from models import SlotStore, QuotaExceededError, PAGE_SIZE
from importer import ImportCoordinator, ImportResult, ImportItem
from navigation import PaginationController, ViewerController
from storage import PersistenceManager


log = logging.getLogger(__name__)

QUOTA_WARNING = "Out of storage space. Use 'Reset Album' or use smaller images."


# === Commands ===

@dataclass(frozen=True)
class PickFile:
    """Empty slot tapped: remember it as the single-import target."""
    index: int


@dataclass(frozen=True)
class ImportFile:
    """Bytes chosen in the single-file picker, for the pending target."""
    data: bytes
    name: str = "file"


@dataclass(frozen=True)
class CancelPick:
    """Single-file picker closed without a usable file."""
    pass


@dataclass(frozen=True)
class ImportBatch:
    """Files to place into empty slots, in order."""
    items: tuple[ImportItem, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "items", tuple(self.items))


@dataclass(frozen=True)
class RemoveSticker:
    index: int


@dataclass(frozen=True)
class OpenViewer:
    index: int


@dataclass(frozen=True)
class ViewerNext:
    pass


@dataclass(frozen=True)
class ViewerPrev:
    pass


@dataclass(frozen=True)
class CloseViewer:
    pass


@dataclass(frozen=True)
class TurnPage:
    forward: bool


@dataclass(frozen=True)
class ResetAlbum:
    pass


# === Session ===

class AlbumSession:
    """The album's whole mutable state, changed only through dispatch()."""

    def __init__(self, persistence: PersistenceManager, page_size: int = PAGE_SIZE,
                 schedule=None, on_changed=None, progress=None):
        self.persistence = persistence
        self.store: SlotStore = persistence.load()
        self.importer = ImportCoordinator(self.store, persistence, progress=progress)
        self.viewer = ViewerController(self.store)
        pagination_kwargs = {"on_changed": on_changed}
        if schedule is not None:
            pagination_kwargs["schedule"] = schedule
        self.pagination = PaginationController(len(self.store), page_size, **pagination_kwargs)
        self.pending_target: int | None = None
        self.last_result: ImportResult | None = None
        self.last_warning: str | None = None

    @property
    def importing(self) -> bool:
        return self.importer.busy

    def take_warning(self) -> str | None:
        """Return and clear the pending user-facing warning, if any."""
        warning, self.last_warning = self.last_warning, None
        return warning

    def _finish_import(self, result: ImportResult) -> bool:
        self.last_result = result
        if result.quota_exceeded:
            self.last_warning = QUOTA_WARNING
        return bool(result.assigned)

    def _save(self):
        try:
            self.persistence.save(self.store)
        except QuotaExceededError:
            self.last_warning = QUOTA_WARNING

    def dispatch(self, command) -> bool:
        """Apply one command. Returns True if the album should be re-rendered."""
        if isinstance(command, PickFile):
            self.pending_target = command.index
            return False

        if isinstance(command, ImportFile):
            target, self.pending_target = self.pending_target, None
            if target is None:
                log.debug("Ignoring file with no target slot")
                return False
            return self._finish_import(
                self.importer.import_single(target, command.data, command.name))

        if isinstance(command, CancelPick):
            self.pending_target = None
            return False

        if isinstance(command, ImportBatch):
            return self._finish_import(self.importer.import_batch(command.items))

        if isinstance(command, RemoveSticker):
            if not self.store.is_occupied(command.index):
                return False
            self.store.clear(command.index)
            if self.viewer.index == command.index:
                self.viewer.close()
            self._save()
            return True

        if isinstance(command, OpenViewer):
            if not self.store.is_occupied(command.index):
                return False
            self.viewer.open(command.index)
            return True

        if isinstance(command, ViewerNext):
            return self.viewer.next()

        if isinstance(command, ViewerPrev):
            return self.viewer.prev()

        if isinstance(command, CloseViewer):
            was_open = self.viewer.is_open
            self.viewer.close()
            return was_open

        if isinstance(command, TurnPage):
            # Re-render comes from the pagination on_changed callback
            self.pagination.turn_page(command.forward)
            return False

        if isinstance(command, ResetAlbum):
            if self.importing:
                log.info("Reset refused while an import is running")
                return False
            self.persistence.reset()
            self.store.clear_all()
            self.viewer.close()
            self.pagination.reset()
            self.pending_target = None
            return True

        raise TypeError(f"Unknown command: {command!r}")
