from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class CopyStatus(Enum):
    """Circulation state of a physical copy."""
    AVAILABLE = "Available"
    LOANED = "Loaned"
    RESERVED = "Reserved"


@dataclass(frozen=True)
class BookMetadata:
    """Descriptive record of a title, shared by all of its copies."""
    id: str
    title: str
    author: str
    publication_year: Optional[int] = None
    description: str = ""

    def __post_init__(self) -> None:
        if not self.id or not self.id.strip():
            raise ValueError("Book id cannot be empty.")
        if not self.title or not self.title.strip():
            raise ValueError("Book title cannot be empty.")

    def __str__(self) -> str:  # pragma: no cover - string formatting trivial
        year = f", {self.publication_year}" if self.publication_year else ""
        return f"{self.title} by {self.author} ({self.id}{year})"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "author": self.author,
            "publication_year": self.publication_year,
            "description": self.description,
        }

    @staticmethod
    def from_dict(data: dict) -> "BookMetadata":
        year = data.get("publication_year", data.get("year"))
        return BookMetadata(
            id=str(data["id"]).strip(),
            title=str(data["title"]).strip(),
            author=str(data.get("author") or "").strip(),
            publication_year=int(year) if year not in (None, "") else None,
            description=data.get("description") or "",
        )


class BookCopy:
    """A single physical copy of a book.

    ``slot_id`` is a non-owning handle to the slot holding the copy; the
    catalog owns the copy itself. ``book`` is filled in by the catalog when
    the copy's ``book_id`` matches registered metadata.
    """

    def __init__(self, id: str, book_id: str, status: CopyStatus = CopyStatus.AVAILABLE,
                 holder_account_id: Optional[str] = None) -> None:
        if not id or not id.strip():
            raise ValueError("Copy id cannot be empty.")
        self.id = id.strip()
        self.book_id = (book_id or "").strip()
        self.status = status
        self.holder_account_id = holder_account_id
        self.slot_id: Optional[str] = None
        self.book: Optional[BookMetadata] = None

    def __repr__(self) -> str:  # pragma: no cover - debugging aid
        return (f"BookCopy(id={self.id!r}, book_id={self.book_id!r}, status={self.status.value!r}, "
                f"holder={self.holder_account_id!r}, slot={self.slot_id!r})")

    def is_available(self) -> bool:
        return self.status is CopyStatus.AVAILABLE and not self.holder_account_id

    def update_status(self, status: CopyStatus) -> None:
        self.status = status

    def mark_loaned(self, account_id: str) -> None:
        self.status = CopyStatus.LOANED
        self.holder_account_id = account_id

    def mark_reserved(self, account_id: str) -> None:
        """Hold the copy for pickup by ``account_id``."""
        self.status = CopyStatus.RESERVED
        self.holder_account_id = account_id

    def mark_returned(self) -> None:
        self.status = CopyStatus.AVAILABLE
        self.holder_account_id = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "book_id": self.book_id,
            "status": self.status.value,
            "holder_account_id": self.holder_account_id,
            "slot_id": self.slot_id,
        }

    @staticmethod
    def from_dict(data: dict) -> "BookCopy":
        # Seed files may spell the status in any case
        raw_status = data.get("status") or CopyStatus.AVAILABLE.value
        try:
            status = CopyStatus(str(raw_status).strip().capitalize())
        except ValueError as e:
            raise ValueError(f"Unknown copy status: {raw_status}") from e
        return BookCopy(
            id=str(data["id"]),
            book_id=str(data.get("book_id") or ""),
            status=status,
            holder_account_id=data.get("holder_account_id"),
        )
