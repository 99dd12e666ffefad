#!/usr/bin/env python3
"""Stage 7: Apply staged reparse fixes to the store.

Usage:
    uv run python scripts/7_apply_fixes.py                   # Every staged fix
    uv run python scripts/7_apply_fixes.py --character 니아  # One character
    uv run python scripts/7_apply_fixes.py --limit 5         # First 5 fixes
    uv run python scripts/7_apply_fixes.py --dry-run         # Show without saving

Each affected character's streaks and stats are recomputed after its entries
are replaced.
"""

import argparse
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from rich.console import Console

from erpatches.aggregate import PatchNotFoundError
from erpatches.config import load_settings
from erpatches.logger import PipelineLogger
from erpatches.reconcile import ReconcileError, apply_fix, filter_fixes, read_fixes
from erpatches.revalidate import trigger_revalidation
from erpatches.store import BALANCE_CHANGES, JsonStore, StoreError

console = Console()


def main() -> None:
    """Replace stored entries with their staged fixes."""
    parser = argparse.ArgumentParser(description="Apply staged patch fixes")
    parser.add_argument("--character", help="Only apply fixes for this character")
    parser.add_argument("--limit", type=int, help="Apply at most N fixes")
    parser.add_argument("--dry-run", action="store_true", help="Show fixes without saving")
    args = parser.parse_args()

    settings = load_settings()
    store = JsonStore(settings.store_dir)
    logger = PipelineLogger("apply-fixes", settings.log_dir)

    try:
        store.check_available()
        staged = read_fixes(settings.fixes_path)
        characters = {c.name: c for c in store.all_characters()}
    except (StoreError, ReconcileError) as e:
        console.print(f"[red bold]Error:[/red bold] {e}")
        raise SystemExit(1) from e

    fixes = filter_fixes(staged.fixes, character=args.character, limit=args.limit)
    if not fixes:
        console.print("[dim]⊘ No fixes to apply[/dim]")
        return

    console.print("\n[bold]Stage 7: Apply Fixes[/bold]")
    console.print(f"Fixes to apply: {len(fixes)} of {staged.total_fixes}")
    if args.dry_run:
        console.print("[yellow]Dry run: nothing will be saved[/yellow]")
    console.print()

    touched: set[str] = set()
    for fix in fixes:
        label = f"{fix.character_name} @ {fix.patch_id}"
        summary = (
            f"changes {fix.diff.old_change_count} → {fix.diff.new_change_count}"
            f"{', comment updated' if fix.diff.comment_changed else ''}"
        )

        character = characters.get(fix.character_name)
        if character is None:
            logger.log_skip(label, "character not in store")
            console.print(f"[dim]  ⊘ {label}: character not in store[/dim]")
            continue

        if args.dry_run:
            console.print(f"  [cyan]{label}:[/cyan] {summary}")
            continue

        try:
            characters[fix.character_name] = apply_fix(character, fix)
        except PatchNotFoundError as e:
            logger.log_skip(label, str(e))
            console.print(f"[dim]  ⊘ {label}: no stored entry[/dim]")
            continue

        touched.add(fix.character_name)
        logger.log_success(label, summary)
        console.print(f"[green]  ✓ {label}:[/green] {summary}")

    if touched:
        store.save_characters(characters[name] for name in sorted(touched))
        store.stamp_metadata(BALANCE_CHANGES, characterCount=len(characters))
        trigger_revalidation(settings)

    log_path = logger.write(
        additional_summary={
            "Fixes": len(fixes),
            "Characters updated": len(touched),
            "Dry run": args.dry_run,
        }
    )
    console.print(f"\n[green]✓ Applied {len(logger.successful)} fixes[/green]")
    console.print(f"[dim]Log saved to: {log_path}[/dim]")


if __name__ == "__main__":
    main()
