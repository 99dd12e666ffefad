#!/usr/bin/env python3
"""Stage 5: Reparse patch notes listed in the missing report and add the absent entries.

Usage:
    uv run python scripts/5_fix_missing.py                    # Everything in the report
    uv run python scripts/5_fix_missing.py --patch 3209       # One patch from the report
    uv run python scripts/5_fix_missing.py --character 니아   # One character
    uv run python scripts/5_fix_missing.py --dry-run          # Show what would be added

Only characters the report lists as missing are touched; existing entries are
never replaced.
"""

import argparse
import sys
import time
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from rich.console import Console

from erpatches.config import load_settings
from erpatches.fetch import FetchError, fetch_document, make_client
from erpatches.logger import PipelineLogger
from erpatches.models import Character
from erpatches.overrides import OverrideError, load_overrides
from erpatches.pipeline import ingest_document, parse_document
from erpatches.reconcile import ReconcileError, read_missing_report
from erpatches.revalidate import trigger_revalidation
from erpatches.store import BALANCE_CHANGES, JsonStore, StoreError

console = Console()


def main() -> None:
    """Add entries the missing report flagged."""
    parser = argparse.ArgumentParser(description="Fill in patch entries flagged by the missing check")
    parser.add_argument("--patch", type=int, help="Only fix this patch id")
    parser.add_argument("--character", help="Only fix this character")
    parser.add_argument("--dry-run", action="store_true", help="Report without saving")
    args = parser.parse_args()

    settings = load_settings()
    store = JsonStore(settings.store_dir)
    logger = PipelineLogger("fix-missing", settings.log_dir)

    try:
        store.check_available()
        report = read_missing_report(settings.missing_report_path)
        overrides = load_overrides(settings.overrides_path)
        characters: dict[str, Character] = {c.name: c for c in store.all_characters()}
    except (StoreError, ReconcileError, OverrideError) as e:
        console.print(f"[red bold]Error:[/red bold] {e}")
        raise SystemExit(1) from e

    targets: dict[int, set[str]] = {}
    for patch_id, missing in report.missing_by_patch.items():
        if args.patch and patch_id != args.patch:
            continue
        names = {n for n in missing.missing_characters if not args.character or n == args.character}
        if names:
            targets[patch_id] = names

    if not targets:
        console.print("[dim]⊘ Nothing to fix[/dim]")
        return

    console.print("\n[bold]Stage 5: Fix Missing Entries[/bold]")
    console.print(f"Patches to reparse: {len(targets)}")
    if args.dry_run:
        console.print("[yellow]Dry run: nothing will be saved[/yellow]")
    console.print()

    touched: set[str] = set()
    with make_client(settings) as client:
        for patch_id, names in sorted(targets.items()):
            note = store.get_patch_note(patch_id)
            if note is None:
                logger.log_failure(str(patch_id), "patch note not in store")
                console.print(f"[red]  ✗ {patch_id}:[/red] patch note not in store")
                continue

            try:
                parsed = parse_document(fetch_document(client, note))
            except FetchError as e:
                logger.log_failure(str(patch_id), str(e))
                console.print(f"[red]  ✗ {patch_id}:[/red] {e}")
                continue

            not_parsed = names - {p.name for p in parsed}
            for name in sorted(not_parsed):
                logger.log_skip(f"{name} @ {patch_id}", "named in document but no changes extracted")

            if args.dry_run:
                for item in parsed:
                    if item.name in names:
                        console.print(f"  [cyan]{item.name} @ {patch_id}:[/cyan] {len(item.changes)} changes")
            else:
                result = ingest_document(characters, note, parsed, overrides, only=names)
                touched.update(result.added)
                for name in result.added:
                    logger.log_success(f"{name} @ {patch_id}", "added")
                    console.print(f"[green]  ✓ {name} @ {patch_id}[/green]")
                for name in result.skipped:
                    logger.log_skip(f"{name} @ {patch_id}", "entry already exists")

            time.sleep(settings.request_delay)

    if touched:
        store.save_characters(characters[name] for name in sorted(touched))
        store.stamp_metadata(BALANCE_CHANGES, characterCount=len(characters))
        trigger_revalidation(settings)

    log_path = logger.write(
        additional_summary={
            "Patches": len(targets),
            "Characters updated": len(touched),
            "Dry run": args.dry_run,
        }
    )
    console.print(f"\n[green]✓ Added {len(logger.successful)} entries[/green]")
    console.print(f"[dim]Log saved to: {log_path}[/dim]")


if __name__ == "__main__":
    main()
