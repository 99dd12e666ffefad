#!/usr/bin/env python3
"""Report and remove duplicate patch entries in character histories.

Usage:
    uv run python scripts/dedupe_patches.py           # Report only
    uv run python scripts/dedupe_patches.py --apply   # Remove duplicates and save

The first stored entry for each patch id is kept.
"""

import argparse
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from rich.console import Console
from rich.table import Table

from erpatches.config import load_settings
from erpatches.logger import PipelineLogger
from erpatches.reconcile import dedupe_character, find_duplicates
from erpatches.revalidate import trigger_revalidation
from erpatches.store import BALANCE_CHANGES, JsonStore, StoreError

console = Console()


def main() -> None:
    parser = argparse.ArgumentParser(description="Find duplicate patch entries")
    parser.add_argument("--apply", action="store_true", help="Remove duplicates and save")
    args = parser.parse_args()

    settings = load_settings()
    store = JsonStore(settings.store_dir)
    logger = PipelineLogger("dedupe-patches", settings.log_dir)

    try:
        store.check_available()
        characters = store.all_characters()
    except StoreError as e:
        console.print(f"[red bold]Error:[/red bold] {e}")
        raise SystemExit(1) from e

    affected = [(c, find_duplicates(c.patch_history)) for c in characters]
    affected = [(c, dupes) for c, dupes in affected if dupes]

    if not affected:
        console.print("[dim]⊘ No duplicate entries[/dim]")
        return

    table = Table(title="Duplicate Patch Entries")
    table.add_column("Character", style="bold")
    table.add_column("Patch id", justify="right")
    table.add_column("Copies", justify="right")
    for character, dupes in affected:
        for patch_id, count in sorted(dupes.items()):
            table.add_row(character.name, str(patch_id), str(count))
    console.print(table)

    if not args.apply:
        console.print("\n[yellow]Run with --apply to remove duplicates[/yellow]")
        return

    updated = []
    removed_total = 0
    for character, _ in affected:
        cleaned, removed = dedupe_character(character)
        updated.append(cleaned)
        removed_total += removed
        logger.log_success(character.name, f"removed {removed} duplicate entries")

    store.save_characters(updated)
    store.stamp_metadata(BALANCE_CHANGES, characterCount=len(characters))
    trigger_revalidation(settings)

    log_path = logger.write(additional_summary={"Characters": len(updated), "Entries removed": removed_total})
    console.print(f"\n[green]✓ Removed {removed_total} duplicate entries from {len(updated)} characters[/green]")
    console.print(f"[dim]Log saved to: {log_path}[/dim]")


if __name__ == "__main__":
    main()
