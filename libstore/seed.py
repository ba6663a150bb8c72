"""Seed collections for a fresh in-memory catalog."""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from libstore.book import BookCopy, BookMetadata
from libstore.catalog import CatalogIndex, PlacementResult

logger = logging.getLogger(__name__)

DEMO_COLLECTION: Dict[str, List[Dict[str, Any]]] = {
    "books": [
        {"id": "B001", "title": "The Master and Margarita", "author": "Mikhail Bulgakov",
         "publication_year": 1967, "description": "Novel"},
        {"id": "B002", "title": "Crime and Punishment", "author": "Fyodor Dostoevsky",
         "publication_year": 1866, "description": "Novel"},
        {"id": "B003", "title": "War and Peace", "author": "Leo Tolstoy",
         "publication_year": 1869, "description": "Epic novel"},
    ],
    "copies": [
        {"id": "BI001", "book_id": "B001"},
        {"id": "BI002", "book_id": "B001"},
        {"id": "BI003", "book_id": "B002"},
        {"id": "BI004", "book_id": "B003"},
    ],
}


def read_seed_file(path: Union[str, Path]) -> Dict[str, List[Dict[str, Any]]]:
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"Seed file {path} must contain a JSON object.")
    return {"books": list(data.get("books") or []), "copies": list(data.get("copies") or [])}


def populate(catalog: CatalogIndex, data: Dict[str, List[Dict[str, Any]]]) -> List[PlacementResult]:
    """Register every book, then every copy, in file order. Returns one result per copy."""
    for entry in data.get("books", []):
        catalog.register_book(BookMetadata.from_dict(entry))
    results = [catalog.register_copy(BookCopy.from_dict(entry)) for entry in data.get("copies", [])]
    failed = [r for r in results if not r.placed]
    if failed:
        logger.warning(f"{len(failed)} of {len(results)} seed copies could not be placed")
    return results


def load_catalog(seed_file: Optional[Union[str, Path]] = None,
                 catalog: Optional[CatalogIndex] = None) -> CatalogIndex:
    """Build a catalog from ``seed_file``, or from the demo collection when none is given."""
    catalog = catalog or CatalogIndex()
    data = read_seed_file(seed_file) if seed_file else DEMO_COLLECTION
    populate(catalog, data)
    return catalog
