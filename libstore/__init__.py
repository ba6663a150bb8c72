"""Library Storage - Core Application Package

This package contains the core application modules including:
- Storage hierarchy: slots, shelves and cabinets (storage.py)
- Catalog index over books, copies and placement (catalog.py)
- Lending desk: accounts, loans and reservations (circulation.py, reservations.py)
- Data models (book.py)
- CLI interface (cli.py)
"""

from libstore.book import BookCopy, BookMetadata, CopyStatus
from libstore.catalog import CatalogIndex, CopyLocation, PlacementIssue, PlacementResult
from libstore.circulation import LendingDesk
from libstore.errors import (
    AccountNotFoundError,
    BookUnavailableError,
    BorrowingNotAllowedError,
    DuplicateBookError,
    LibraryError,
)
from libstore.storage import Container, Location, Slot, build_storage_root

__all__ = [
    "AccountNotFoundError",
    "BookCopy",
    "BookMetadata",
    "BookUnavailableError",
    "BorrowingNotAllowedError",
    "CatalogIndex",
    "Container",
    "CopyLocation",
    "CopyStatus",
    "DuplicateBookError",
    "LendingDesk",
    "LibraryError",
    "Location",
    "PlacementIssue",
    "PlacementResult",
    "Slot",
    "build_storage_root",
]
