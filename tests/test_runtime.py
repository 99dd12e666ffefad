"""Tests for settings, run reports and cache revalidation."""

from pathlib import Path

import httpx

from erpatches import revalidate
from erpatches.config import Settings, load_settings
from erpatches.logger import PipelineLogger
from erpatches.revalidate import trigger_revalidation


# =============================================================================
# Test: load_settings
# =============================================================================

def test_settings_defaults(monkeypatch):
    for var in ("ER_DATA_DIR", "ER_BASE_URL", "ER_REQUEST_DELAY", "SITE_URL", "REVALIDATE_SECRET"):
        monkeypatch.delenv(var, raising=False)
    settings = load_settings()
    assert settings.data_dir == Path("data")
    assert settings.store_dir == Path("data/store")
    assert settings.log_dir == Path("data/logs")
    assert settings.site_url is None


def test_settings_from_environment(monkeypatch, tmp_path):
    monkeypatch.setenv("ER_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("ER_BASE_URL", "https://example.com/")
    monkeypatch.setenv("ER_REQUEST_DELAY", "0")
    monkeypatch.setenv("SITE_URL", "https://site.example.com")
    settings = load_settings()
    assert settings.base_url == "https://example.com"
    assert settings.request_delay == 0
    assert settings.missing_report_path == tmp_path / "missing-patches.json"
    assert settings.fixes_path == tmp_path / "patch-fixes.json"
    assert settings.reparse_list_path == tmp_path / "patches-to-reparse.json"
    assert settings.review_queue_path == tmp_path / "review-queue.json"
    assert settings.site_url == "https://site.example.com"


# =============================================================================
# Test: PipelineLogger
# =============================================================================

def test_logger_writes_report(tmp_path):
    logger = PipelineLogger("parse", tmp_path / "logs")
    logger.log_success("니아 @ 3209", "added")
    logger.log_failure("3180", "HTTP 500 for https://example.com\nretry later")
    logger.log_skip("아야 @ 3209", "entry already exists")
    logger.log_dropped("아야 @ 3209", "피해량→20")
    logger.log_detail("extra note")

    path = logger.write(additional_summary={"Patch notes": 2})
    text = path.read_text(encoding="utf-8")

    assert path.parent == tmp_path / "logs"
    assert path.name.endswith("-parse.md")
    assert "- ✅ 1 successful" in text
    assert "- ❌ 1 failed" in text
    assert "- Patch notes: 2" in text
    assert "## Dropped Lines" in text
    assert "`피해량→20`" in text
    assert "  retry later" in text
    assert "## Details" in text


def test_logger_omits_empty_sections(tmp_path):
    text = PipelineLogger("crawl", tmp_path).write().read_text(encoding="utf-8")
    assert "## Failed" not in text
    assert "## Dropped Lines" not in text


# =============================================================================
# Test: trigger_revalidation
# =============================================================================

def test_revalidation_skipped_without_config():
    assert trigger_revalidation(Settings()) is False


def test_revalidation_posts_secret(monkeypatch):
    calls = []

    def fake_post(url, json, timeout):
        calls.append((url, json))
        return httpx.Response(200, json={"revalidated": True, "timestamp": "2024-05-02T00:00:00Z"})

    monkeypatch.setattr(revalidate.httpx, "post", fake_post)
    settings = Settings(site_url="https://site.example.com/", revalidate_secret="s3cret")
    assert trigger_revalidation(settings) is True
    assert calls == [("https://site.example.com/api/revalidate", {"secret": "s3cret"})]


def test_revalidation_failure_is_reported_not_raised(monkeypatch):
    monkeypatch.setattr(revalidate.httpx, "post", lambda url, json, timeout: httpx.Response(401, text="bad secret"))
    settings = Settings(site_url="https://site.example.com", revalidate_secret="wrong")
    assert trigger_revalidation(settings) is False


def test_revalidation_network_error(monkeypatch):
    def fake_post(url, json, timeout):
        raise httpx.ConnectError("connection refused")

    monkeypatch.setattr(revalidate.httpx, "post", fake_post)
    settings = Settings(site_url="https://site.example.com", revalidate_secret="s3cret")
    assert trigger_revalidation(settings) is False
