#!/usr/bin/env python3
"""Stage 3: Parse validated patch notes into character balance history.

Usage:
    uv run python scripts/3_parse.py                          # All unparsed notes
    uv run python scripts/3_parse.py --patch 3209             # Specific notes, parsed or not
    uv run python scripts/3_parse.py --patch 3209 --character 니아
    uv run python scripts/3_parse.py --patch 3209 --dry-run   # Print results, save nothing

Notes are selected with status=success, hasCharacterData and not yet parsed.
Each processed note is marked isParsed unless the run is scoped to characters.
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
from erpatches.models import Character, NumericChange, utc_now
from erpatches.overrides import OverrideError, load_overrides
from erpatches.pipeline import ParsedCharacter, build_patch_entry, ingest_document, parse_document
from erpatches.revalidate import trigger_revalidation
from erpatches.store import BALANCE_CHANGES, JsonStore, StoreError

console = Console()


def parse_ids(value: str | None) -> list[int]:
    return [int(v) for v in value.split(",") if v.strip()] if value else []


def print_parsed(patch_id: int, parsed: list[ParsedCharacter]) -> None:
    """Show a parse result without saving it."""
    for item in parsed:
        table = Table(title=f"{item.name} @ {patch_id}", show_lines=False)
        table.add_column("Target")
        table.add_column("Change")
        table.add_column("Category")
        table.add_column("Direction")
        for change in item.changes:
            if isinstance(change, NumericChange):
                text = f"{change.stat}: {change.before} → {change.after}"
            else:
                text = change.description
            table.add_row(change.target, text, change.change_category, change.change_type)
        console.print(table)
        if item.dev_comment:
            console.print(f"[dim]Comment: {item.dev_comment}[/dim]")
        for line in item.dropped:
            console.print(f"[yellow]  ⚠ dropped:[/yellow] {line}")


def main() -> None:
    """Parse patch notes and update character histories."""
    parser = argparse.ArgumentParser(description="Parse patch notes into character balance history")
    parser.add_argument("--patch", help="Comma-separated patch ids to parse")
    parser.add_argument("--character", help="Only record changes for this character")
    parser.add_argument("--dry-run", action="store_true", help="Print parse results without saving")
    args = parser.parse_args()

    settings = load_settings()
    store = JsonStore(settings.store_dir)
    logger = PipelineLogger("parse", settings.log_dir)

    try:
        store.check_available()
        overrides = load_overrides(settings.overrides_path)
        patch_ids = parse_ids(args.patch)
        if patch_ids:
            notes = [n for n in (store.get_patch_note(i) for i in patch_ids) if n is not None]
        else:
            notes = store.get_unparsed_patch_notes()
        characters: dict[str, Character] = {c.name: c for c in store.all_characters()}
    except (StoreError, OverrideError) as e:
        console.print(f"[red bold]Error:[/red bold] {e}")
        raise SystemExit(1) from e

    if not notes:
        console.print("[dim]⊘ No patch notes to parse[/dim]")
        return

    only = {args.character} if args.character else None

    console.print("\n[bold]Stage 3: Parse Patch Notes[/bold]")
    console.print(f"Patch notes to parse: {len(notes)}")
    if only:
        console.print(f"Character filter: {args.character}")
    if args.dry_run:
        console.print("[yellow]Dry run: nothing will be saved[/yellow]")
    console.print()

    touched: set[str] = set()

    with make_client(settings) as client, Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        console=console,
    ) as progress:
        task = progress.add_task("Parsing...", total=len(notes))

        for note in notes:
            progress.update(task, description=f"Parsing {note.id}")

            try:
                parsed = parse_document(fetch_document(client, note))
            except FetchError as e:
                logger.log_failure(str(note.id), str(e))
                console.print(f"[red]  ✗ {note.id}:[/red] {e}")
                progress.advance(task)
                continue

            if only:
                parsed = [p for p in parsed if p.name in only]

            if args.dry_run:
                print_parsed(note.id, parsed)
                for item in parsed:
                    entry = build_patch_entry(note, item, overrides)
                    logger.log_success(f"{item.name} @ {note.id}", f"{len(entry.changes)} changes, {entry.overall_change}")
            else:
                result = ingest_document(characters, note, parsed, overrides)
                touched.update(result.added)
                for name in result.added:
                    logger.log_success(f"{name} @ {note.id}", "added")
                for name in result.skipped:
                    logger.log_skip(f"{name} @ {note.id}", "entry already exists")
                for name, lines in result.dropped.items():
                    for line in lines:
                        logger.log_dropped(f"{name} @ {note.id}", line)
                if not only:
                    store.update_patch_note(note.id, is_parsed=True, parsed_at=utc_now())

                console.print(
                    f"[green]  ✓ {note.id}:[/green] {len(parsed)} characters, {len(result.added)} new entries"
                )

            progress.advance(task)
            time.sleep(settings.request_delay)

    if touched:
        store.save_characters(characters[name] for name in sorted(touched))
        store.stamp_metadata(BALANCE_CHANGES, characterCount=len(characters))
        trigger_revalidation(settings)

    log_path = logger.write(
        additional_summary={
            "Patch notes": len(notes),
            "Characters updated": len(touched),
            "Dry run": args.dry_run,
        }
    )

    console.print("\n[bold]Summary:[/bold]")
    console.print(f"  ✅ Successful: {len(logger.successful)}")
    console.print(f"  ❌ Failed: {len(logger.failed)}")
    console.print(f"  ⊘ Skipped: {len(logger.skipped)}")
    console.print(f"  ✂ Dropped lines: {len(logger.dropped)}")
    console.print(f"\n[dim]Log saved to: {log_path}[/dim]")


if __name__ == "__main__":
    main()
