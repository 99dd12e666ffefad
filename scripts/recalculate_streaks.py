#!/usr/bin/env python3
"""Recompute streaks and stats from stored patch histories.

Usage:
    uv run python scripts/recalculate_streaks.py                 # Every character
    uv run python scripts/recalculate_streaks.py --character 니아
"""

import argparse
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from rich.console import Console

from erpatches.aggregate import recompute_character
from erpatches.config import load_settings
from erpatches.logger import PipelineLogger
from erpatches.store import BALANCE_CHANGES, JsonStore, StoreError

console = Console()


def main() -> None:
    parser = argparse.ArgumentParser(description="Recalculate streaks and stats")
    parser.add_argument("--character", help="Only recalculate this character")
    args = parser.parse_args()

    settings = load_settings()
    store = JsonStore(settings.store_dir)
    logger = PipelineLogger("recalculate-streaks", settings.log_dir)

    try:
        store.check_available()
        if args.character:
            character = store.get_character(args.character)
            if character is None:
                console.print(f"[red]✗ Character not found: {args.character}[/red]")
                raise SystemExit(1)
            characters = [character]
        else:
            characters = store.all_characters()
    except StoreError as e:
        console.print(f"[red bold]Error:[/red bold] {e}")
        raise SystemExit(1) from e

    if not characters:
        console.print("[dim]⊘ No characters stored[/dim]")
        return

    updated = []
    for character in characters:
        recomputed = recompute_character(character)
        if recomputed != character:
            updated.append(recomputed)
            stats = recomputed.stats
            logger.log_success(
                character.name,
                f"buff {stats.buff_count} / nerf {stats.nerf_count} / mixed {stats.mixed_count}, "
                f"current {stats.current_streak.type or '-'} x{stats.current_streak.count}",
            )
        else:
            logger.log_skip(character.name, "unchanged")

    if updated:
        store.save_characters(updated)
        store.stamp_metadata(BALANCE_CHANGES, characterCount=len(store.all_characters()))

    log_path = logger.write(additional_summary={"Characters": len(characters), "Updated": len(updated)})
    console.print(f"[green]✓ Recalculated {len(characters)} characters, {len(updated)} changed[/green]")
    console.print(f"[dim]Log saved to: {log_path}[/dim]")


if __name__ == "__main__":
    main()
