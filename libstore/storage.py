"""Physical storage hierarchy.

Every node answers the same three questions: where is the next free slot,
can this copy be placed, and which shelved books match a title/author filter.
A ``Slot`` holds at most one copy; a ``Container`` (a shelf of slots or a
cabinet of shelves) delegates to its children left to right, depth first.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, List, Optional, Protocol, Sequence, Tuple

from libstore.book import BookCopy, BookMetadata


@dataclass(frozen=True)
class Location:
    """Opaque handle to a slot, for display and lookups only."""
    slot_id: str
    path: Tuple[str, ...] = ()

    def __str__(self) -> str:
        return self.slot_id


def _matches(value: str, needle: Optional[str]) -> bool:
    if not needle:
        return True
    return needle.casefold() in (value or "").casefold()


class StorageNode(Protocol):
    """Capabilities shared by slots and containers."""
    id: str
    kind: str

    @property
    def capacity(self) -> int: ...

    @property
    def occupied_count(self) -> int: ...

    def find_free_location(self) -> Optional["Slot"]: ...

    def place(self, copy: BookCopy) -> bool: ...

    def search(self, title: Optional[str] = "", author: Optional[str] = "") -> List[BookMetadata]: ...

    def iter_slots(self) -> Iterator["Slot"]: ...


class Slot:
    """Smallest storage unit. Holds zero or one copy."""

    kind = "slot"

    def __init__(self, id: str, path: Sequence[str] = ()) -> None:
        self.id = id
        self.path: Tuple[str, ...] = tuple(path) or (id,)
        self.occupant: Optional[BookCopy] = None

    def __repr__(self) -> str:  # pragma: no cover - debugging aid
        occupant = self.occupant.id if self.occupant else None
        return f"Slot(id={self.id!r}, occupant={occupant!r})"

    @property
    def is_free(self) -> bool:
        return self.occupant is None

    @property
    def capacity(self) -> int:
        return 1

    @property
    def occupied_count(self) -> int:
        return 0 if self.occupant is None else 1

    @property
    def location(self) -> Location:
        return Location(self.id, self.path)

    def find_free_location(self) -> Optional["Slot"]:
        return self if self.occupant is None else None

    def place(self, copy: BookCopy) -> bool:
        if self.occupant is not None:
            return False
        self.occupant = copy
        copy.slot_id = self.id
        return True

    def search(self, title: Optional[str] = "", author: Optional[str] = "") -> List[BookMetadata]:
        # Copies without linked metadata have nothing to report
        if self.occupant is None or self.occupant.book is None:
            return []
        book = self.occupant.book
        if _matches(book.title, title) and _matches(book.author, author):
            return [book]
        return []

    def iter_slots(self) -> Iterator["Slot"]:
        yield self


class Container:
    """A shelf (children are slots) or a cabinet (children are shelves).

    Children are fixed at construction and must all be of the same node type.
    Their order decides placement and search priority.
    """

    def __init__(self, id: str, kind: str, children: Sequence[StorageNode]) -> None:
        children = list(children)
        if children:
            first = type(children[0])
            if any(type(child) is not first for child in children):
                raise ValueError(f"Container {id} mixes slots and containers.")
        self.id = id
        self.kind = kind
        self.children: Tuple[StorageNode, ...] = tuple(children)

    def __repr__(self) -> str:  # pragma: no cover - debugging aid
        return f"Container(id={self.id!r}, kind={self.kind!r}, children={len(self.children)})"

    # ------------------------- Construction ------------------------- #
    @classmethod
    def shelf(cls, id: str, slot_count: int, path: Sequence[str] = ()) -> "Container":
        if slot_count < 0:
            raise ValueError("Slot count cannot be negative.")
        base = tuple(path) or (id,)
        slots = [Slot(f"{id}-Slot-{i}", base + (f"Slot-{i}",)) for i in range(slot_count)]
        return cls(id, "shelf", slots)

    @classmethod
    def cabinet(cls, id: str, shelf_count: int, slots_per_shelf: int) -> "Container":
        if shelf_count < 0:
            raise ValueError("Shelf count cannot be negative.")
        shelves = [
            cls.shelf(f"{id}-Shelf-{i}", slots_per_shelf, (id, f"Shelf-{i}"))
            for i in range(shelf_count)
        ]
        return cls(id, "cabinet", shelves)

    # ------------------------- Capabilities ------------------------- #
    def find_free_location(self) -> Optional[Slot]:
        for child in self.children:
            free = child.find_free_location()
            if free is not None:
                return free
        return None

    def place(self, copy: BookCopy) -> bool:
        # Rescans the subtree every time; there is no free-slot cache
        free = self.find_free_location()
        if free is None:
            return False
        return free.place(copy)

    def search(self, title: Optional[str] = "", author: Optional[str] = "") -> List[BookMetadata]:
        results: List[BookMetadata] = []
        for child in self.children:
            results.extend(child.search(title, author))
        return results

    # ------------------------- Introspection ------------------------- #
    def iter_slots(self) -> Iterator[Slot]:
        for child in self.children:
            yield from child.iter_slots()

    @property
    def capacity(self) -> int:
        return sum(child.capacity for child in self.children)

    @property
    def occupied_count(self) -> int:
        return sum(child.occupied_count for child in self.children)

    @property
    def free_count(self) -> int:
        return self.capacity - self.occupied_count


def build_storage_root(shelf_count: int, slots_per_shelf: int, root_id: str = "MainCabinet") -> Container:
    """Create the facility's top-level cabinet with a fixed shelf/slot layout."""
    return Container.cabinet(root_id, shelf_count, slots_per_shelf)
