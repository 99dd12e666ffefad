#!/usr/bin/env python3
"""Stage 1: Discover new patch notes from the news listing.

Usage:
    uv run python scripts/1_crawl.py

Walks the listing newest first and stops at the first patch note already in
the store. An empty store triggers a full crawl.
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from rich.console import Console

from erpatches.config import load_settings
from erpatches.crawl import crawl_new_patch_notes
from erpatches.fetch import FetchError, make_client
from erpatches.logger import PipelineLogger
from erpatches.models import utc_now
from erpatches.store import PATCH_NOTES, JsonStore, StoreError

console = Console()


def main() -> None:
    """Crawl the listing and store new patch notes."""
    settings = load_settings()
    store = JsonStore(settings.store_dir)
    logger = PipelineLogger("crawl", settings.log_dir)

    try:
        store.check_available()
        existing_ids = {note.id for note in store.all_patch_notes()}
    except StoreError as e:
        console.print(f"[red bold]Error:[/red bold] {e}")
        raise SystemExit(1) from e

    console.print("\n[bold]Stage 1: Crawl Patch Notes[/bold]")
    console.print(f"Known patch notes: {len(existing_ids)}")
    if not existing_ids:
        console.print("[yellow]Store is empty, running a full crawl[/yellow]")

    try:
        with make_client(settings) as client:
            new_notes, is_full_crawl = crawl_new_patch_notes(client, existing_ids, settings.base_url)
    except FetchError as e:
        console.print(f"[red bold]Error:[/red bold] {e}")
        raise SystemExit(1) from e

    if not new_notes:
        console.print("\n[dim]⊘ No new patch notes[/dim]")
        return

    written = store.save_patch_notes(new_notes)
    for note in new_notes:
        logger.log_success(str(note.id), note.title)
        console.print(f"[green]  ✓ {note.id}:[/green] {note.title}")

    store.stamp_metadata(PATCH_NOTES, crawledAt=utc_now(), totalCount=len(existing_ids) + written)

    log_path = logger.write(
        additional_summary={
            "Full crawl": is_full_crawl,
            "New patch notes": written,
            "Total patch notes": len(existing_ids) + written,
        }
    )

    console.print(f"\n[green]✓ Stored {written} new patch notes[/green]")
    console.print(f"[dim]Log saved to: {log_path}[/dim]")


if __name__ == "__main__":
    main()
