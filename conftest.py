import pytest

from libstore.book import BookCopy, BookMetadata
from libstore.catalog import CatalogIndex
from libstore.circulation import LendingDesk
from libstore.config import Settings
from libstore.notifications import Notifier
from libstore.storage import build_storage_root
from libstore.ui_helpers import OUTPUT_MODE_ENV


@pytest.fixture(autouse=True)
def plain_output(monkeypatch):
    # Every test starts in plain output mode
    monkeypatch.delenv(OUTPUT_MODE_ENV, raising=False)


@pytest.fixture
def test_settings():
    return Settings(shelf_count=2, slots_per_shelf=2, max_loans=2, loan_period_days=14,
                    reservation_hold_days=7, seed_file=None)


@pytest.fixture
def small_catalog():
    """An empty 2 shelves x 2 slots catalog with books B1 and B2 registered."""
    catalog = CatalogIndex(build_storage_root(2, 2))
    catalog.register_book(BookMetadata("B1", "Dune", "Frank Herbert", 1965))
    catalog.register_book(BookMetadata("B2", "Solaris", "Stanislaw Lem", 1961))
    return catalog


@pytest.fixture
def catalog(small_catalog):
    """The small catalog with copies C1, C2 (B1) and C3 (B2) shelved."""
    for copy_id, book_id in (("C1", "B1"), ("C2", "B1"), ("C3", "B2")):
        small_catalog.register_copy(BookCopy(copy_id, book_id))
    return small_catalog


@pytest.fixture
def desk(catalog, test_settings):
    return LendingDesk(catalog, settings=test_settings, notifier=Notifier())
