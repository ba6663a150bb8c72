import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

from libstore.book import BookCopy, BookMetadata
from libstore.config import Settings, settings as default_settings
from libstore.errors import DuplicateBookError
from libstore.storage import Container, Location, build_storage_root

logger = logging.getLogger(__name__)


class PlacementIssue(Enum):
    """Why a copy registration did not go cleanly."""
    NO_CAPACITY = "no_capacity"
    UNKNOWN_BOOK = "unknown_book"
    DUPLICATE_COPY = "duplicate_copy"


@dataclass
class PlacementResult:
    """Outcome of ``CatalogIndex.register_copy``.

    ``UNKNOWN_BOOK`` is a soft issue: the copy is still shelved and indexed,
    only the metadata join is missing. The other issues mean nothing changed.
    """
    copy_id: str
    placed: bool
    location: Optional[Location] = None
    issue: Optional[PlacementIssue] = None

    @property
    def ok(self) -> bool:
        return self.placed

    def to_dict(self) -> Dict[str, Any]:
        return {
            "copy_id": self.copy_id,
            "placed": self.placed,
            "location": str(self.location) if self.location else None,
            "issue": self.issue.value if self.issue else None,
        }


@dataclass
class CopyLocation:
    """Where a copy sits and whether it can be issued right now."""
    book_id: str
    location: Optional[Location]
    copy: BookCopy
    available: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "book_id": self.book_id,
            "copy_id": self.copy.id,
            "location": str(self.location) if self.location else None,
            "available": self.available,
            "status": self.copy.status.value,
        }


class CatalogIndex:
    """Reconciles book metadata, physical copies and their placement in storage."""

    def __init__(self, root: Optional[Container] = None, settings: Optional[Settings] = None) -> None:
        cfg = settings or default_settings
        if root is None:
            root = build_storage_root(cfg.shelf_count, cfg.slots_per_shelf, cfg.storage_root_id)
        self.root = root
        self._slots = {slot.id: slot for slot in root.iter_slots()}
        self.books: Dict[str, BookMetadata] = {}
        # Insertion order is the tie-break for "first available copy"
        self.copies: Dict[str, BookCopy] = {}

    # ------------------------- Registration ------------------------- #
    def register_book(self, metadata: BookMetadata) -> None:
        """Add a title. Ids are unique; re-registering an id is rejected."""
        if metadata.id in self.books:
            raise DuplicateBookError(metadata.id)
        self.books[metadata.id] = metadata
        logger.info(f"Registered book {metadata.id}: {metadata.title}")

    def register_copy(self, copy: BookCopy) -> PlacementResult:
        """Shelve a copy in the first free slot and index it.

        A copy that cannot be shelved is dropped: it is not indexed and not
        retried. The result is the only record of the failure.
        """
        if copy.id in self.copies:
            logger.warning(f"Copy {copy.id} is already registered")
            return PlacementResult(copy.id, placed=False, issue=PlacementIssue.DUPLICATE_COPY)

        if not self.root.place(copy):
            logger.warning(f"Could not place copy {copy.id} of {copy.book_id}: no free slots")
            return PlacementResult(copy.id, placed=False, issue=PlacementIssue.NO_CAPACITY)

        self.copies[copy.id] = copy
        location = self.locate(copy.id)

        metadata = self.books.get(copy.book_id)
        if metadata is None:
            logger.warning(f"Copy {copy.id} placed at {location} but book {copy.book_id} is unknown")
            return PlacementResult(copy.id, placed=True, location=location, issue=PlacementIssue.UNKNOWN_BOOK)

        copy.book = metadata
        logger.info(f"Copy {copy.id} of {copy.book_id} placed at {location}")
        return PlacementResult(copy.id, placed=True, location=location)

    # ------------------------- Search and lookup ------------------------- #
    def search(self, title: Optional[str] = "", author: Optional[str] = "") -> List[BookMetadata]:
        """One entry per shelved copy whose title and author contain the filters."""
        return self.root.search(title or "", author or "")

    def find_available_copy(self, book_id: str) -> Optional[CopyLocation]:
        for copy in self.copies.values():
            if copy.book_id == book_id and copy.is_available():
                return CopyLocation(book_id, self._location_of(copy), copy, True)
        return None

    def find_copy_by_id(self, copy_id: str) -> Optional[CopyLocation]:
        copy = self.copies.get(copy_id)
        if copy is None:
            return None
        return CopyLocation(copy.book_id, self._location_of(copy), copy, copy.is_available())

    def find_free_location(self) -> Optional[Location]:
        slot = self.root.find_free_location()
        return slot.location if slot else None

    def locate(self, copy_id: str) -> Optional[Location]:
        copy = self.copies.get(copy_id)
        return self._location_of(copy) if copy else None

    def get_book(self, book_id: str) -> Optional[BookMetadata]:
        return self.books.get(book_id)

    def list_books(self) -> List[BookMetadata]:
        return list(self.books.values())

    def get_copy(self, copy_id: str) -> Optional[BookCopy]:
        return self.copies.get(copy_id)

    def copies_of(self, book_id: str) -> List[BookCopy]:
        return [c for c in self.copies.values() if c.book_id == book_id]

    def statistics(self) -> Dict[str, Any]:
        return {
            "total_books": len(self.books),
            "total_copies": len(self.copies),
            "available_copies": sum(1 for c in self.copies.values() if c.is_available()),
            "unique_authors": len({b.author for b in self.books.values() if b.author}),
            "capacity": self.root.capacity,
            "free_slots": self.root.free_count,
        }

    # ------------------------- Helpers ------------------------- #
    def _location_of(self, copy: BookCopy) -> Optional[Location]:
        if copy.slot_id is None:
            return None
        slot = self._slots.get(copy.slot_id)
        return slot.location if slot else None
