"""Tests for the listing crawl, link validation and page fetching."""

import httpx
import pytest
from conftest import BASE_URL, FLAT_PATCH_HTML, make_note

from erpatches.config import Settings
from erpatches.crawl import article_to_patch_note, crawl_new_patch_notes, validate_patch_note
from erpatches.fetch import FetchError, check_document, fetch_document, fetch_html, fetch_news_page, make_client


def article(article_id: int, title: str = "1.2 패치 노트") -> dict:
    return {
        "id": article_id,
        "url": f"{BASE_URL}/posts/news/{article_id}",
        "created_at": "2024-05-02T02:00:00.000Z",
        "updated_at": "2024-05-02T03:00:00.000Z",
        "thumbnail_url": None,
        "view_count": 1234,
        "i18ns": {"ko_KR": {"title": title}},
    }


def mock_client(handler) -> httpx.Client:
    return httpx.Client(base_url=BASE_URL, transport=httpx.MockTransport(handler), follow_redirects=True)


# =============================================================================
# Test: article_to_patch_note
# =============================================================================

def test_article_to_patch_note():
    note = article_to_patch_note(article(3209), BASE_URL)
    assert note.id == 3209
    assert note.title == "1.2 패치 노트"
    assert note.link == f"{BASE_URL}/posts/news/3209"
    assert note.view_count == 1234
    assert note.status is None


def test_article_without_url_uses_canonical_link():
    data = article(3209)
    data["url"] = None
    assert article_to_patch_note(data, BASE_URL).link == f"{BASE_URL}/posts/news/3209"


def test_article_with_relative_content_link():
    data = article(3209)
    data["url"] = None
    data["i18ns"]["ko_KR"]["content_link"] = "/posts/news/3209"
    assert article_to_patch_note(data, BASE_URL).link == f"{BASE_URL}/posts/news/3209"


# =============================================================================
# Test: crawl_new_patch_notes
# =============================================================================

def fake_pages(pages: dict[int, list[dict]]):
    requested = []

    def fetch_page(client, page):
        requested.append(page)
        return pages.get(page, [])

    return fetch_page, requested


def test_incremental_crawl_stops_at_known_id():
    fetch_page, requested = fake_pages({1: [article(5), article(4)], 2: [article(3), article(2)], 3: [article(1)]})
    notes, is_full = crawl_new_patch_notes(None, {3, 2, 1}, BASE_URL, delay=0, fetch_page=fetch_page)
    assert [n.id for n in notes] == [5, 4]
    assert not is_full
    assert requested == [1, 2]


def test_full_crawl_when_store_empty():
    fetch_page, requested = fake_pages({1: [article(3), article(2)], 2: [article(1)]})
    notes, is_full = crawl_new_patch_notes(None, set(), BASE_URL, delay=0, fetch_page=fetch_page)
    assert [n.id for n in notes] == [3, 2, 1]
    assert is_full
    assert requested == [1, 2, 3]


def test_crawl_nothing_new():
    fetch_page, _ = fake_pages({1: [article(3)]})
    notes, _ = crawl_new_patch_notes(None, {3}, BASE_URL, delay=0, fetch_page=fetch_page)
    assert notes == []


# =============================================================================
# Test: fetch
# =============================================================================

def test_make_client_settings():
    with make_client(Settings(base_url=BASE_URL)) as client:
        assert client.cookies.get("locale") == "ko_KR"
        assert "Mozilla" in client.headers["User-Agent"]
        assert client.follow_redirects


def test_fetch_news_page():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/api/v1/posts/news"
        assert request.url.params["category"] == "patchnote"
        assert request.url.params["page"] == "2"
        return httpx.Response(200, json={"articles": [article(3209)]})

    with mock_client(handler) as client:
        assert [a["id"] for a in fetch_news_page(client, 2)] == [3209]


def test_fetch_news_page_http_error():
    with mock_client(lambda request: httpx.Response(500)) as client:
        with pytest.raises(FetchError):
            fetch_news_page(client, 1)


def test_fetch_news_page_invalid_json():
    with mock_client(lambda request: httpx.Response(200, text="<html>")) as client:
        with pytest.raises(FetchError):
            fetch_news_page(client, 1)


def test_fetch_html_not_found():
    with mock_client(lambda request: httpx.Response(404)) as client:
        with pytest.raises(FetchError):
            fetch_html(client, f"{BASE_URL}/posts/news/1")


def test_fetch_html_network_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with mock_client(handler) as client:
        with pytest.raises(FetchError):
            fetch_html(client, f"{BASE_URL}/posts/news/1")


def test_fetch_document_returns_content_root():
    with mock_client(lambda request: httpx.Response(200, text=FLAT_PATCH_HTML)) as client:
        root = fetch_document(client, make_note(3209))
    assert root is not None
    assert root.tag == "div"


# =============================================================================
# Test: check_document / validate_patch_note
# =============================================================================

def test_check_document_success_with_character_data():
    with mock_client(lambda request: httpx.Response(200, text=FLAT_PATCH_HTML)) as client:
        check = check_document(client, make_note(3209))
    assert check.status == "success"
    assert check.has_character_data


def test_check_document_general_notice():
    body = "서버 점검 시간 안내입니다. " * 20
    html = f'<div class="er-article-detail__content"><p>{body}</p></div>'
    with mock_client(lambda request: httpx.Response(200, text=html)) as client:
        check = check_document(client, make_note(3209))
    assert check.status == "success"
    assert not check.has_character_data


def test_check_document_no_content():
    html = '<div class="er-article-detail__content"><p>곧 공개됩니다</p></div>'
    with mock_client(lambda request: httpx.Response(200, text=html)) as client:
        assert check_document(client, make_note(3209)).status == "no_content"


def test_check_document_redirect():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/posts/news/3209":
            return httpx.Response(302, headers={"Location": f"{BASE_URL}/posts/news"})
        return httpx.Response(200, text=FLAT_PATCH_HTML)

    with mock_client(handler) as client:
        assert check_document(client, make_note(3209)).status == "redirect"


def test_check_document_http_error():
    with mock_client(lambda request: httpx.Response(500)) as client:
        assert check_document(client, make_note(3209)).status == "error"


def test_check_document_network_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with mock_client(handler) as client:
        assert check_document(client, make_note(3209)).status == "error"


def test_validate_patch_note_stamps_fields():
    note = make_note(3209).model_copy(update={"status": None, "has_character_data": None})
    with mock_client(lambda request: httpx.Response(200, text=FLAT_PATCH_HTML)) as client:
        checked = validate_patch_note(client, note)
    assert checked.status == "success"
    assert checked.has_character_data
    assert checked.validated_at is not None
    assert note.status is None
