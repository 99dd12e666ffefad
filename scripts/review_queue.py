#!/usr/bin/env python3
"""Write the manual review queue: unknown-category changes and mixed patches.

Usage:
    uv run python scripts/review_queue.py
"""

import sys
from collections import Counter
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from rich.console import Console
from rich.table import Table

from erpatches.config import load_settings
from erpatches.logger import PipelineLogger
from erpatches.reconcile import write_report
from erpatches.review import collect_review_items
from erpatches.store import JsonStore, StoreError

console = Console()


def main() -> None:
    settings = load_settings()
    store = JsonStore(settings.store_dir)
    logger = PipelineLogger("review-queue", settings.log_dir)

    try:
        store.check_available()
        queue = collect_review_items(store.all_characters())
    except StoreError as e:
        console.print(f"[red bold]Error:[/red bold] {e}")
        raise SystemExit(1) from e

    path = write_report(queue, settings.review_queue_path)

    by_reason = Counter(item.reason for item in queue.items)
    table = Table(title="Review Queue")
    table.add_column("Reason", style="bold")
    table.add_column("Items", justify="right")
    for reason, count in by_reason.most_common():
        table.add_row(reason, str(count))
    table.add_row("total", str(queue.total_items))
    console.print(table)

    for item in queue.items:
        logger.log_skip(f"{item.character_name} @ {item.patch_id}", f"{item.reason}: {item.text or ''}")
    log_path = logger.write(additional_summary={"Items": queue.total_items, **by_reason})
    console.print(f"\n[dim]Queue saved to: {path}[/dim]")
    console.print(f"[dim]Log saved to: {log_path}[/dim]")


if __name__ == "__main__":
    main()
