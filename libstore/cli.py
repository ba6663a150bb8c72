import logging
from typing import Optional

import typer

from libstore.catalog import CatalogIndex
from libstore.circulation import LendingDesk
from libstore.config import settings
from libstore.errors import LibraryError
from libstore.seed import DEMO_COLLECTION, load_catalog, populate
from libstore.storage import build_storage_root
from libstore.ui_helpers import (
    print_copy_location,
    print_layout,
    print_search_result,
    print_stats_result,
    set_output_mode,
)

logger = logging.getLogger(__name__)

app = typer.Typer(help="Library storage CLI")

SEED_OPTION = typer.Option(None, "--seed", "-s", help="JSON seed file with books and copies")

# The demo walkthrough always runs on the built-in collection in a 5x10 cabinet
DEMO_SHELVES = 5
DEMO_SLOTS_PER_SHELF = 10


def _load(seed: Optional[str]) -> Optional[CatalogIndex]:
    """Build a fresh catalog, printing a message instead of a traceback on bad input."""
    try:
        return load_catalog(seed or settings.seed_file)
    except (LibraryError, ValueError, KeyError, OSError) as e:
        print(f"Could not load catalog: {e}")
        return None


@app.callback()
def _global_options(
    output: Optional[str] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output format: plain | json | rich (default: plain)",
    )
):
    """Global options for the CLI (e.g. output mode)."""
    logging.basicConfig(level=getattr(logging, settings.log_level, logging.WARNING))
    if output:
        set_output_mode(output)


@app.command("search")
def cli_search(
    title: Optional[str] = typer.Option(None, "--title", "-t", help="Filter by title substring"),
    author: Optional[str] = typer.Option(None, "--author", "-a", help="Filter by author substring"),
    seed: Optional[str] = SEED_OPTION,
):
    """Search shelved copies by title and/or author (one line per copy)."""
    catalog = _load(seed)
    if catalog is None:
        return
    print_search_result(catalog.search(title, author))


@app.command("locate")
def cli_locate(copy_id: str, seed: Optional[str] = SEED_OPTION):
    """Show where a copy is shelved and whether it can be issued."""
    catalog = _load(seed)
    if catalog is None:
        return
    print_copy_location(copy_id, catalog.find_copy_by_id(copy_id))


@app.command("layout")
def cli_layout(seed: Optional[str] = SEED_OPTION):
    """Show the storage tree with slot occupancy."""
    catalog = _load(seed)
    if catalog is None:
        return
    print_layout(catalog.root)


@app.command("stats")
def cli_stats(seed: Optional[str] = SEED_OPTION):
    """Show catalog and capacity statistics."""
    catalog = _load(seed)
    if catalog is None:
        return
    print_stats_result(catalog.statistics())


@app.command("demo")
def cli_demo():
    """Walk through registration, search, loans, reservations and returns."""
    catalog = CatalogIndex(build_storage_root(DEMO_SHELVES, DEMO_SLOTS_PER_SHELF))
    populate(catalog, DEMO_COLLECTION)
    desk = LendingDesk(catalog)

    print("STEP 1: Register readers")
    anna = desk.register_account("Anna Petrova", "+79161234567", "anna@mail.ru")
    sergey = desk.register_account("Sergey Ivanov", "+79039876543", "sergey@mail.ru")
    maria = desk.register_account("Maria Smirnova", "+79265554433", "maria@mail.ru")
    for account in (anna, sergey, maria):
        print(f"  Registered {account.full_name}, ID: {account.id}")

    stats = catalog.statistics()
    print(f"\nSTEP 2: Catalog holds {stats['total_books']} books and {stats['total_copies']} copies")

    print("\nSTEP 3: Search")
    for book in desk.search_books("master", ""):
        print(f"  Title 'master': {book.title} - {book.author} ({book.publication_year})")
    for book in desk.search_books("", "tolstoy"):
        print(f"  Author 'tolstoy': {book.title} - {book.author} ({book.publication_year})")
    print(f"  All shelved copies: {len(desk.search_books())}")

    print("\nSTEP 4: Issue both copies of B001")
    try:
        for account in (anna, sergey):
            print(f"  {account.full_name} can borrow: {desk.can_borrow(account.id)}")
            loan = desk.issue_book(account.id, "B001")
            print(f"  Issued {loan.copy_id} from {catalog.locate(loan.copy_id)}, due {loan.due_date:%d.%m.%Y}")
    except LibraryError as e:
        print(f"  Error: {e}")

    print("\nSTEP 5: Reserve B001 when no copy is left")
    if catalog.find_available_copy("B001") is None:
        reservation = desk.reserve_book(maria.id, "B001")
        queue = desk.reservation_queue("B001")
        print(f"  Reservation {reservation.id} for {maria.full_name}, "
              f"position {queue.position(maria.id)}")

    print("\nSTEP 6: Return a copy")
    if anna.books_on_hand:
        first_copy = anna.books_on_hand[0]
        print(f"  Overdue: {desk.is_overdue(first_copy)}")
        desk.return_book(first_copy)
        returned = catalog.find_copy_by_id(first_copy)
        print(f"  {first_copy} is now {returned.copy.status.value} at {returned.location}")
        for note in desk.notifier.sent_to(maria.id):
            print(f"  Notification to {maria.full_name}: {note.message}")
        queue = desk.reservation_queue("B001")
        hold = queue.active_for(maria.id) if queue else None
        if hold is not None and hold.expires_at is not None:
            print(f"  Held until {hold.expires_at:%d.%m.%Y}")
    else:
        print("  Nothing to return")

    print("\nSTEP 7: Pick up the reserved copy")
    try:
        loan = desk.issue_book(maria.id, "B001")
        print(f"  Issued {loan.copy_id} to {maria.full_name}")
    except LibraryError as e:
        print(f"  Error: {e}")

    print("\nSTEP 8: Find free storage")
    free = catalog.find_free_location()
    print(f"  Next free slot: {free}" if free else "  No free slots")


if __name__ == "__main__":
    app()
