"""Discover new patch notes and validate their links."""

import time
from collections.abc import Callable
from typing import Any

import httpx
from rich.console import Console

from .fetch import check_document, fetch_news_page
from .models import PatchNote, utc_now

console = Console()

CRAWL_DELAY = 0.3


def article_to_patch_note(article: dict[str, Any], base_url: str) -> PatchNote:
    """Convert a listing API article into a ``PatchNote``.

    The Korean title and link are preferred; articles without a usable link
    fall back to the canonical news URL.
    """
    ko = (article.get("i18ns") or {}).get("ko_KR") or {}
    link = article.get("url") or ko.get("content_link") or ""
    if not link.startswith(("http://", "https://")):
        link = f"{base_url}/posts/news/{article['id']}"
    return PatchNote(
        id=article["id"],
        title=ko.get("title", ""),
        link=link,
        created_at=article["created_at"],
        updated_at=article.get("updated_at"),
        thumbnail_url=article.get("thumbnail_url"),
        view_count=article.get("view_count") or 0,
    )


def crawl_new_patch_notes(
    client: httpx.Client,
    existing_ids: set[int],
    base_url: str,
    delay: float = CRAWL_DELAY,
    fetch_page: Callable[[httpx.Client, int], list[dict[str, Any]]] = fetch_news_page,
) -> tuple[list[PatchNote], bool]:
    """Walk the listing newest first until a known patch note appears.

    Args:
        client: HTTP client for the source site
        existing_ids: Ids already in the store
        base_url: Site root, used for fallback links
        delay: Seconds between listing pages
        fetch_page: Page fetcher (injectable for tests)

    Returns:
        (new patch notes newest first, whether this was a full crawl)

    Raises:
        FetchError: If a listing page cannot be fetched
    """
    is_full_crawl = not existing_ids
    new_notes: list[PatchNote] = []
    page = 1

    while True:
        console.print(f"[dim]Checking page {page}...[/dim]")
        articles = fetch_page(client, page)
        if not articles:
            break

        for article in articles:
            if article["id"] in existing_ids:
                console.print(f"[dim]⊘ Reached known patch note {article['id']}[/dim]")
                return new_notes, is_full_crawl
            new_notes.append(article_to_patch_note(article, base_url))

        page += 1
        if delay > 0:
            time.sleep(delay)

    return new_notes, is_full_crawl


def validate_patch_note(client: httpx.Client, note: PatchNote) -> PatchNote:
    """Visit a patch note and record its status and whether it has character data."""
    check = check_document(client, note)
    return note.model_copy(
        update={
            "status": check.status,
            "has_character_data": check.has_character_data,
            "validated_at": utc_now(),
        }
    )
