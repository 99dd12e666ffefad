#!/usr/bin/env python3
"""Clean stored numeric changes and apply manual overrides to every history.

Usage:
    uv run python scripts/apply_overrides.py            # Apply and save
    uv run python scripts/apply_overrides.py --dry-run  # Report counts only

Renormalization runs first so overrides are the last word on a change.
"""

import argparse
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from rich.console import Console
from rich.table import Table

from erpatches.aggregate import recompute_character
from erpatches.config import load_settings
from erpatches.logger import PipelineLogger
from erpatches.normalize import renormalize_history
from erpatches.overrides import OverrideError, apply_overrides, load_overrides
from erpatches.revalidate import trigger_revalidation
from erpatches.store import BALANCE_CHANGES, JsonStore, StoreError

console = Console()


def main() -> None:
    parser = argparse.ArgumentParser(description="Renormalize stored changes and apply manual overrides")
    parser.add_argument("--dry-run", action="store_true", help="Report without saving")
    args = parser.parse_args()

    settings = load_settings()
    store = JsonStore(settings.store_dir)
    logger = PipelineLogger("apply-overrides", settings.log_dir)

    try:
        store.check_available()
        overrides = load_overrides(settings.overrides_path)
        characters = store.all_characters()
    except (StoreError, OverrideError) as e:
        console.print(f"[red bold]Error:[/red bold] {e}")
        raise SystemExit(1) from e

    console.print(f"\n[bold]Overrides loaded:[/bold] {len(overrides)}")

    table = Table(title="Corrections")
    table.add_column("Character", style="bold")
    table.add_column("Renormalized", justify="right")
    table.add_column("Overridden", justify="right")

    updated = []
    total_renormalized = total_overridden = 0
    for character in characters:
        renormalized = renormalize_history(character)
        character, overridden = apply_overrides(character, overrides)
        if not (renormalized or overridden):
            continue
        updated.append(recompute_character(character))
        total_renormalized += renormalized
        total_overridden += overridden
        table.add_row(character.name, str(renormalized), str(overridden))
        logger.log_success(character.name, f"{renormalized} renormalized, {overridden} overridden")

    if not updated:
        console.print("[dim]⊘ Nothing to correct[/dim]")
        return

    console.print(table)

    if args.dry_run:
        console.print("\n[yellow]Dry run: nothing saved[/yellow]")
    else:
        store.save_characters(updated)
        store.stamp_metadata(BALANCE_CHANGES, characterCount=len(characters))
        trigger_revalidation(settings)

    log_path = logger.write(
        additional_summary={
            "Characters updated": len(updated),
            "Changes renormalized": total_renormalized,
            "Changes overridden": total_overridden,
            "Dry run": args.dry_run,
        }
    )
    console.print(f"\n[dim]Log saved to: {log_path}[/dim]")


if __name__ == "__main__":
    main()
