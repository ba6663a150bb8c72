import json

import pytest

from libstore.catalog import CatalogIndex, PlacementIssue
from libstore.errors import DuplicateBookError
from libstore.seed import DEMO_COLLECTION, load_catalog, populate, read_seed_file
from libstore.storage import build_storage_root


def _write(tmp_path, payload):
    path = tmp_path / "seed.json"
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def test_demo_collection_loads_into_default_storage():
    catalog = load_catalog()

    assert [b.id for b in catalog.list_books()] == ["B001", "B002", "B003"]
    assert list(catalog.copies) == ["BI001", "BI002", "BI003", "BI004"]
    assert [b.title for b in catalog.search("master", "")] == ["The Master and Margarita"] * 2
    assert [b.author for b in catalog.search("", "tolstoy")] == ["Leo Tolstoy"]
    assert catalog.root.capacity == 50


def test_seed_file_round_trip(tmp_path):
    path = _write(tmp_path, {
        "books": [{"id": "B1", "title": "Dune", "author": "Frank Herbert", "publication_year": 1965}],
        "copies": [{"id": "C1", "book_id": "B1"}, {"id": "C2", "book_id": "B1", "status": "Loaned",
                                                   "holder_account_id": "acc-1"}],
    })

    catalog = load_catalog(path, catalog=CatalogIndex(build_storage_root(1, 3)))

    assert catalog.find_available_copy("B1").copy.id == "C1"
    assert catalog.find_copy_by_id("C2").available is False
    assert catalog.root.free_count == 1


def test_populate_reports_overflow():
    catalog = CatalogIndex(build_storage_root(1, 2))
    results = populate(catalog, DEMO_COLLECTION)

    assert [r.placed for r in results] == [True, True, False, False]
    assert results[-1].issue is PlacementIssue.NO_CAPACITY


def test_duplicate_books_in_seed_raise(tmp_path):
    book = {"id": "B1", "title": "Dune", "author": "Frank Herbert"}
    path = _write(tmp_path, {"books": [book, book], "copies": []})
    with pytest.raises(DuplicateBookError):
        load_catalog(path)


def test_seed_file_must_be_an_object(tmp_path):
    path = _write(tmp_path, [1, 2, 3])
    with pytest.raises(ValueError):
        read_seed_file(path)


def test_missing_sections_default_to_empty(tmp_path):
    assert read_seed_file(_write(tmp_path, {})) == {"books": [], "copies": []}
