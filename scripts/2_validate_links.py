#!/usr/bin/env python3
"""Stage 2: Visit unvalidated patch notes and record their status.

Usage:
    uv run python scripts/2_validate_links.py              # All notes without a status
    uv run python scripts/2_validate_links.py --patch 3209 # Re-check specific ids

Each note gets status (success, no_content, error, redirect) and
hasCharacterData, which the parse stage uses to pick its input.
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
from erpatches.crawl import validate_patch_note
from erpatches.fetch import make_client
from erpatches.logger import PipelineLogger
from erpatches.store import JsonStore, StoreError

console = Console()

VALIDATE_DELAY = 0.3


def parse_ids(value: str | None) -> list[int]:
    return [int(v) for v in value.split(",") if v.strip()] if value else []


def main() -> None:
    """Validate patch note links."""
    parser = argparse.ArgumentParser(description="Record status and character data flags for patch notes")
    parser.add_argument("--patch", help="Comma-separated patch ids to re-check")
    args = parser.parse_args()

    settings = load_settings()
    store = JsonStore(settings.store_dir)
    logger = PipelineLogger("validate-links", settings.log_dir)

    try:
        store.check_available()
        patch_ids = parse_ids(args.patch)
        if patch_ids:
            notes = [n for n in (store.get_patch_note(i) for i in patch_ids) if n is not None]
        else:
            notes = store.get_unvalidated_patch_notes()
    except StoreError as e:
        console.print(f"[red bold]Error:[/red bold] {e}")
        raise SystemExit(1) from e

    if not notes:
        console.print("[dim]⊘ No patch notes need validation[/dim]")
        return

    console.print("\n[bold]Stage 2: Validate Patch Note Links[/bold]")
    console.print(f"Patch notes to check: {len(notes)}\n")

    counts = {"success": 0, "no_content": 0, "error": 0, "redirect": 0}
    with_character_data = 0

    with make_client(settings) as client, Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        console=console,
    ) as progress:
        task = progress.add_task("Validating...", total=len(notes))

        for note in notes:
            progress.update(task, description=f"Checking {note.id}")
            checked = validate_patch_note(client, note)
            store.update_patch_note(
                note.id,
                status=checked.status,
                has_character_data=checked.has_character_data,
                validated_at=checked.validated_at,
            )
            counts[checked.status] += 1

            if checked.status == "success":
                with_character_data += bool(checked.has_character_data)
                label = "character data" if checked.has_character_data else "general notice"
                logger.log_success(str(note.id), f"{label}: {note.title}")
                console.print(f"[green]  ✓ {note.id}:[/green] {label}")
            else:
                logger.log_failure(str(note.id), f"{checked.status}: {note.title}")
                console.print(f"[red]  ✗ {note.id}:[/red] {checked.status}")

            progress.advance(task)
            time.sleep(VALIDATE_DELAY)

    table = Table(title="Link Validation")
    table.add_column("Status", style="bold")
    table.add_column("Count", justify="right")
    for status, count in counts.items():
        table.add_row(status, str(count))
    table.add_row("with character data", str(with_character_data))
    console.print(table)

    log_path = logger.write(
        additional_summary={"Checked": len(notes), "With character data": with_character_data}
    )
    console.print(f"\n[dim]Log saved to: {log_path}[/dim]")


if __name__ == "__main__":
    main()
