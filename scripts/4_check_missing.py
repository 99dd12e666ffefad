#!/usr/bin/env python3
"""Stage 4: Find characters named in patch notes but missing from their history.

Usage:
    uv run python scripts/4_check_missing.py                # Every patch id used in stored histories
    uv run python scripts/4_check_missing.py --patch 3209   # Specific notes
    uv run python scripts/4_check_missing.py --limit 20     # Newest 20 notes only

Writes data/missing-patches.json for 5_fix_missing.py.
"""

import argparse
import sys
import time
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from rich.console import Console
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskProgressColumn, TextColumn
from rich.table import Table

from erpatches.config import load_settings
from erpatches.fetch import FetchError, fetch_document, make_client
from erpatches.logger import PipelineLogger
from erpatches.pipeline import mentioned_characters
from erpatches.reconcile import MissingReport, characters_with_patch, find_missing, write_report
from erpatches.store import JsonStore, StoreError

console = Console()


def parse_ids(value: str | None) -> list[int]:
    return [int(v) for v in value.split(",") if v.strip()] if value else []


def main() -> None:
    """Compare document mentions against stored histories."""
    parser = argparse.ArgumentParser(description="Report characters missing from stored patch history")
    parser.add_argument("--patch", help="Comma-separated patch ids to check")
    parser.add_argument("--limit", type=int, help="Check only the newest N patch notes")
    args = parser.parse_args()

    settings = load_settings()
    store = JsonStore(settings.store_dir)
    logger = PipelineLogger("check-missing", settings.log_dir)

    try:
        store.check_available()
        characters = store.all_characters()
        patch_ids = parse_ids(args.patch)
        if not patch_ids:
            # Only patches the store already knows character data for
            patch_ids = sorted({p.patch_id for c in characters for p in c.patch_history}, reverse=True)
        if args.limit:
            patch_ids = patch_ids[: args.limit]
        notes = [n for n in (store.get_patch_note(i) for i in patch_ids) if n is not None]
    except StoreError as e:
        console.print(f"[red bold]Error:[/red bold] {e}")
        raise SystemExit(1) from e

    if not notes:
        console.print("[dim]⊘ No patch notes to check[/dim]")
        return

    console.print("\n[bold]Stage 4: Check Missing Characters[/bold]")
    console.print(f"Patch notes to check: {len(notes)}\n")

    report = MissingReport(total_patches_checked=len(notes))

    with make_client(settings) as client, Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        console=console,
    ) as progress:
        task = progress.add_task("Checking...", total=len(notes))

        for note in notes:
            progress.update(task, description=f"Checking {note.id}")
            try:
                mentioned = mentioned_characters(fetch_document(client, note))
            except FetchError as e:
                logger.log_failure(str(note.id), str(e))
                progress.advance(task)
                continue

            missing, found = find_missing(mentioned, characters_with_patch(characters, note.id))
            report.add(note, missing, found)
            if missing:
                logger.log_failure(str(note.id), f"missing {', '.join(missing)}")
                console.print(f"[red]  ✗ {note.id}:[/red] missing {', '.join(missing)}")
            else:
                logger.log_success(str(note.id), f"{len(found)} characters present")

            progress.advance(task)
            time.sleep(settings.request_delay)

    report_path = write_report(report, settings.missing_report_path)

    if report.missing_by_character:
        table = Table(title="Missing Entries by Character")
        table.add_column("Character", style="bold")
        table.add_column("Patches", justify="right")
        table.add_column("Patch ids")
        for name, ids in sorted(report.missing_by_character.items(), key=lambda kv: -len(kv[1])):
            table.add_row(name, str(len(ids)), ", ".join(str(i) for i in ids))
        console.print(table)
    else:
        console.print("\n[green]✓ No missing characters[/green]")

    log_path = logger.write(
        additional_summary={
            "Patches checked": report.total_patches_checked,
            "Missing entries": report.total_missing,
            "Report": str(report_path),
        }
    )
    console.print(f"\n[dim]Report saved to: {report_path}[/dim]")
    console.print(f"[dim]Log saved to: {log_path}[/dim]")


if __name__ == "__main__":
    main()
