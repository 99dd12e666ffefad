#!/usr/bin/env python3
"""Stage 6: Reparse stored patches and stage entries the new parser improves on.

Usage:
    uv run python scripts/6_reparse.py                      # Ids from data/patches-to-reparse.json
    uv run python scripts/6_reparse.py --all                # Every patch id in stored histories
    uv run python scripts/6_reparse.py --patch 3209,3180    # Specific ids
    uv run python scripts/6_reparse.py --all --limit 10     # Newest 10 only
    uv run python scripts/6_reparse.py --patch 3209 --force # Stage even without improvement

Nothing in the store changes here. Review data/patch-fixes.json, then run
7_apply_fixes.py.
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
from erpatches.overrides import OverrideError, load_overrides
from erpatches.pipeline import build_patch_entry, parse_document
from erpatches.reconcile import PatchFix, PatchFixesFile, ReconcileError, propose_fix, read_reparse_list, write_report
from erpatches.store import JsonStore, StoreError

console = Console()


def parse_ids(value: str | None) -> list[int]:
    return [int(v) for v in value.split(",") if v.strip()] if value else []


def main() -> None:
    """Stage corrected entries for review."""
    parser = argparse.ArgumentParser(description="Reparse stored patches and stage improvements")
    parser.add_argument("--patch", help="Comma-separated patch ids to reparse")
    parser.add_argument("--all", action="store_true", help="Reparse every patch id in stored histories")
    parser.add_argument("--limit", type=int, help="Reparse at most N patches")
    parser.add_argument("--force", action="store_true", help="Stage replacements even without improvement")
    args = parser.parse_args()

    settings = load_settings()
    store = JsonStore(settings.store_dir)
    logger = PipelineLogger("reparse", settings.log_dir)

    try:
        store.check_available()
        overrides = load_overrides(settings.overrides_path)
        characters = {c.name: c for c in store.all_characters()}
        if args.patch:
            patch_ids = parse_ids(args.patch)
        elif args.all:
            patch_ids = sorted({p.patch_id for c in characters.values() for p in c.patch_history}, reverse=True)
        else:
            patch_ids = read_reparse_list(settings.reparse_list_path)
    except (StoreError, OverrideError, ReconcileError) as e:
        console.print(f"[red bold]Error:[/red bold] {e}")
        raise SystemExit(1) from e

    if args.limit:
        patch_ids = patch_ids[: args.limit]

    if not patch_ids:
        console.print("[dim]⊘ No patches to reparse[/dim]")
        return

    console.print("\n[bold]Stage 6: Corrected Reparse[/bold]")
    console.print(f"Patches to reparse: {len(patch_ids)}")
    console.print(f"Known characters: {len(characters)}")
    if args.force:
        console.print("[yellow]Force mode: every existing entry will be staged for replacement[/yellow]")
    console.print()

    fixes: list[PatchFix] = []

    with make_client(settings) as client, Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        console=console,
    ) as progress:
        task = progress.add_task("Reparsing...", total=len(patch_ids))

        for patch_id in patch_ids:
            progress.update(task, description=f"Reparsing {patch_id}")
            note = store.get_patch_note(patch_id)
            if note is None:
                logger.log_skip(str(patch_id), "patch note not in store")
                progress.advance(task)
                continue

            try:
                parsed = parse_document(fetch_document(client, note))
            except FetchError as e:
                logger.log_failure(str(patch_id), str(e))
                progress.advance(task)
                continue

            for item in parsed:
                character = characters.get(item.name)
                existing = character.find_patch(patch_id) if character else None
                if existing is None:
                    continue
                item.changes = build_patch_entry(note, item, overrides).changes
                fix = propose_fix(existing, item, force=args.force)
                if fix is None:
                    continue
                fixes.append(fix)
                logger.log_success(
                    f"{item.name} @ {patch_id}",
                    f"changes {fix.diff.old_change_count} → {fix.diff.new_change_count}, "
                    f"comment {fix.diff.old_comment_length} → {fix.diff.new_comment_length}",
                )

            progress.advance(task)
            time.sleep(settings.request_delay)

    staged = PatchFixesFile.create(fixes, patches_processed=len(patch_ids))
    fixes_path = write_report(staged, settings.fixes_path)

    table = Table(title="Staged Fixes")
    table.add_column("Metric", style="bold")
    table.add_column("Value", justify="right")
    table.add_row("Patches processed", str(staged.summary.patches_processed))
    table.add_row("Fixes", str(staged.total_fixes))
    table.add_row("Characters affected", str(staged.summary.characters_affected))
    table.add_row("Added changes", str(staged.summary.total_added_changes))
    table.add_row("Comment fixes", str(staged.summary.comments_fixes))
    console.print(table)

    log_path = logger.write(
        additional_summary={
            "Patches processed": len(patch_ids),
            "Fixes staged": staged.total_fixes,
            "Force": args.force,
        }
    )
    console.print(f"\n[dim]Fixes saved to: {fixes_path}[/dim]")
    console.print(f"[dim]Log saved to: {log_path}[/dim]")
    if fixes:
        console.print("[cyan]Review the file, then run scripts/7_apply_fixes.py[/cyan]")


if __name__ == "__main__":
    main()
