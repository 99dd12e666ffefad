"""Fetch patch note pages and the news listing API."""

from dataclasses import dataclass
from typing import Any

import httpx
from bs4 import BeautifulSoup

from .config import Settings
from .dom import CONTENT_SELECTOR, Node, parse_content
from .models import PatchNote, PatchStatus

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

# Pages render in the visitor's locale; character sections are matched on Korean headings
LOCALE_COOKIE = {"locale": "ko_KR"}

MIN_CONTENT_LENGTH = 100
CHARACTER_DATA_KEYWORDS = ("실험체", "스킬", "패시브", "쿨다운", "피해량", "체력", "공격력")


class FetchError(Exception):
    """Raised when a page or API request fails."""


@dataclass
class DocumentCheck:
    """Outcome of visiting one patch note page."""

    status: PatchStatus
    has_character_data: bool = False
    content_length: int = 0
    detail: str = ""


def make_client(settings: Settings) -> httpx.Client:
    """HTTP client with the locale cookie and a browser user agent."""
    return httpx.Client(
        base_url=settings.base_url,
        cookies=LOCALE_COOKIE,
        headers={"User-Agent": USER_AGENT},
        timeout=settings.request_timeout,
        follow_redirects=True,
    )


def fetch_html(client: httpx.Client, url: str) -> str:
    """Fetch a page.

    Args:
        client: Client from ``make_client``
        url: Absolute URL or path on the source site

    Returns:
        HTML content

    Raises:
        FetchError: If the request fails or returns a non-2xx status
    """
    try:
        response = client.get(url)
        response.raise_for_status()
        return response.text
    except httpx.HTTPStatusError as e:
        raise FetchError(f"HTTP {e.response.status_code} for {url}") from e
    except httpx.RequestError as e:
        raise FetchError(f"Request failed for {url}: {e}") from e


def fetch_document(client: httpx.Client, note: PatchNote) -> Node | None:
    """Fetch a patch note and return its article content tree.

    Returns:
        Content root, or None if the page has no article body

    Raises:
        FetchError: If the page cannot be fetched
    """
    return parse_content(fetch_html(client, note.link))


def content_text(html: str) -> str:
    soup = BeautifulSoup(html, "html.parser")
    content = soup.select_one(CONTENT_SELECTOR)
    return content.get_text().strip() if content else ""


def check_document(client: httpx.Client, note: PatchNote) -> DocumentCheck:
    """Visit a patch note and classify the result.

    Never raises; network failures become an ``error`` status so one bad page
    cannot abort a batch.

    Returns:
        redirect if the page left ``/posts/news/{id}``, error on a failed or
        non-200 request, no_content for an empty article, success otherwise
    """
    try:
        response = client.get(note.link)
    except httpx.RequestError as e:
        return DocumentCheck(status="error", detail=f"Request failed: {e}")

    if f"/posts/news/{note.id}" not in str(response.url):
        return DocumentCheck(status="redirect", detail=f"Redirected to {response.url}")
    if response.status_code != 200:
        return DocumentCheck(status="error", detail=f"HTTP {response.status_code}")

    text = content_text(response.text)
    if len(text) <= MIN_CONTENT_LENGTH:
        return DocumentCheck(status="no_content", content_length=len(text))

    return DocumentCheck(
        status="success",
        has_character_data=any(k in text for k in CHARACTER_DATA_KEYWORDS),
        content_length=len(text),
    )


def fetch_news_page(client: httpx.Client, page: int) -> list[dict[str, Any]]:
    """Fetch one page of the patch note listing API.

    Args:
        client: Client from ``make_client``
        page: 1-based page number

    Returns:
        Raw article records, newest first; empty past the last page

    Raises:
        FetchError: If the request fails or the payload is not JSON
    """
    params = {"category": "patchnote", "page": page, "search_type": "title", "search_text": ""}
    try:
        response = client.get("/api/v1/posts/news", params=params)
        response.raise_for_status()
        return response.json().get("articles", [])
    except httpx.HTTPStatusError as e:
        raise FetchError(f"HTTP {e.response.status_code} for news page {page}") from e
    except httpx.RequestError as e:
        raise FetchError(f"Request failed for news page {page}: {e}") from e
    except ValueError as e:
        raise FetchError(f"Invalid JSON for news page {page}: {e}") from e
