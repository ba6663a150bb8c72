import dataclasses

import pytest

from libstore.book import BookCopy, BookMetadata, CopyStatus


def test_metadata_is_immutable():
    book = BookMetadata("B1", "Dune", "Frank Herbert", 1965, "Novel")
    with pytest.raises(dataclasses.FrozenInstanceError):
        book.title = "Other"


def test_metadata_requires_id_and_title():
    with pytest.raises(ValueError):
        BookMetadata("", "Dune", "Frank Herbert")
    with pytest.raises(ValueError):
        BookMetadata("B1", "  ", "Frank Herbert")


def test_metadata_from_dict_accepts_year_alias():
    book = BookMetadata.from_dict({"id": " B3 ", "title": "War and Peace", "author": "Leo Tolstoy", "year": "1869"})
    assert book.id == "B3"
    assert book.publication_year == 1869
    assert book.description == ""
    assert BookMetadata.from_dict(book.to_dict()) == book


def test_copy_starts_available_and_unplaced():
    copy = BookCopy("C1", "B1")
    assert copy.is_available()
    assert copy.slot_id is None
    assert copy.book is None


def test_copy_status_transitions():
    copy = BookCopy("C1", "B1")

    copy.mark_loaned("acc-1")
    assert copy.status is CopyStatus.LOANED
    assert copy.holder_account_id == "acc-1"
    assert not copy.is_available()

    copy.mark_reserved("acc-2")
    assert copy.status is CopyStatus.RESERVED
    assert not copy.is_available()

    copy.mark_returned()
    assert copy.is_available()
    assert copy.holder_account_id is None


def test_available_status_with_holder_is_not_available():
    copy = BookCopy("C1", "B1", holder_account_id="acc-1")
    assert copy.status is CopyStatus.AVAILABLE
    assert not copy.is_available()


def test_copy_from_dict_parses_status():
    copy = BookCopy.from_dict({"id": "C1", "book_id": "B1", "status": "loaned", "holder_account_id": "acc-1"})
    assert copy.status is CopyStatus.LOANED
    assert copy.holder_account_id == "acc-1"

    with pytest.raises(ValueError, match="Unknown copy status"):
        BookCopy.from_dict({"id": "C2", "book_id": "B1", "status": "lost"})


def test_copy_requires_id():
    with pytest.raises(ValueError):
        BookCopy(" ", "B1")
