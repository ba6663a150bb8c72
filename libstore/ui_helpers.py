import os
import json
from typing import Any, Dict, List, Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.tree import Tree

from libstore.book import BookMetadata
from libstore.catalog import CopyLocation
from libstore.storage import Container, StorageNode

# Environment variable to control CLI output mode
# Allowed values: 'plain' (default), 'json', 'rich'
OUTPUT_MODE_ENV = "LIBSTORE_OUTPUT"

_console = Console()


def set_output_mode(mode: str) -> None:
    mode = (mode or "").lower().strip()
    if mode in {"plain", "json", "rich"}:
        os.environ[OUTPUT_MODE_ENV] = mode


def get_output_mode() -> str:
    return os.environ.get(OUTPUT_MODE_ENV, "plain").lower()


def print_search_result(books: List[BookMetadata]) -> None:
    """Print search hits in the current output mode.
    - plain: 'ID - Title by Author (Year)' lines, or 'No books found.'
    - json: array of book objects
    - rich: table
    """
    mode = get_output_mode()

    if not books:
        print("No books found.")
        return

    if mode == "json":
        print(json.dumps([b.to_dict() for b in books], ensure_ascii=False))
    elif mode == "rich":
        table = Table(title="📚 Books", show_lines=True, header_style="bold cyan")
        table.add_column("ID", style="magenta", no_wrap=True)
        table.add_column("Title", style="white")
        table.add_column("Author", style="white")
        table.add_column("Year", justify="right")
        for b in books:
            table.add_row(b.id, b.title, b.author, str(b.publication_year or ""))
        _console.print(table)
    else:
        for b in books:
            year = f" ({b.publication_year})" if b.publication_year else ""
            print(f"{b.id} - {b.title} by {b.author}{year}")


def print_copy_location(copy_id: str, found: Optional[CopyLocation]) -> None:
    mode = get_output_mode()

    if found is None:
        print(f"Copy {copy_id} not found.")
        return

    if mode == "json":
        print(json.dumps(found.to_dict(), ensure_ascii=False))
    elif mode == "rich":
        state = "[green]available[/]" if found.available else f"[yellow]{found.copy.status.value.lower()}[/]"
        content = (f"[bold]Book:[/] {found.book_id}\n"
                   f"[bold]Location:[/] {found.location or 'unplaced'}\n"
                   f"[bold]State:[/] {state}")
        _console.print(Panel.fit(content, title=f"📍 {copy_id}", border_style="blue"))
    else:
        print(f"Copy: {copy_id}")
        print(f"Book: {found.book_id}")
        print(f"Location: {found.location or 'unplaced'}")
        print(f"Available: {'yes' if found.available else 'no'}")


def print_stats_result(stats: Dict[str, Any]) -> None:
    mode = get_output_mode()

    if not stats:
        print("No statistics available.")
        return

    labels = {
        "total_books": "Total Books",
        "total_copies": "Total Copies",
        "available_copies": "Available Copies",
        "unique_authors": "Unique Authors",
        "capacity": "Capacity",
        "free_slots": "Free Slots",
    }

    if mode == "json":
        print(json.dumps(stats, ensure_ascii=False))
    elif mode == "rich":
        content = "\n".join(f"[bold]{label}:[/] {stats.get(key, 0)}" for key, label in labels.items())
        _console.print(Panel.fit(content, title="📊 Stats", border_style="blue"))
    else:
        for key, label in labels.items():
            print(f"{label}: {stats.get(key, 0)}")


def _layout_dict(node: StorageNode) -> Dict[str, Any]:
    if isinstance(node, Container):
        return {"id": node.id, "kind": node.kind, "children": [_layout_dict(c) for c in node.children]}
    return {"id": node.id, "kind": node.kind, "copy": node.occupant.id if node.occupant else None}


def print_layout(root: Container) -> None:
    """Print the storage tree with slot occupancy."""
    mode = get_output_mode()

    if mode == "json":
        print(json.dumps(_layout_dict(root), ensure_ascii=False))
        return

    if mode == "rich":
        tree = Tree(f"🗄️  {root.id} ({root.occupied_count}/{root.capacity})", style="bold blue")
        for shelf in root.children:
            branch = tree.add(f"[bold cyan]{shelf.id}[/] ({shelf.occupied_count}/{shelf.capacity})")
            for slot in shelf.iter_slots():
                label = f"[yellow]{slot.occupant.id}[/]" if slot.occupant else "[dim]free[/]"
                branch.add(f"{slot.id}: {label}")
        _console.print(tree)
        return

    print(f"{root.id} ({root.occupied_count}/{root.capacity})")
    for shelf in root.children:
        print(f"  {shelf.id} ({shelf.occupied_count}/{shelf.capacity})")
        for slot in shelf.iter_slots():
            print(f"    {slot.id}: {slot.occupant.id if slot.occupant else 'free'}")
