"""
tests/test_report.py — Purge report embed content.
"""

from __future__ import annotations

from notifier.embed import GREEN, MAX_FIELDS, RED, YELLOW
from notifier.report import (
    STATUS_ERROR,
    STATUS_MISSING_HEADER,
    STATUS_NOT_UPDATED,
    STATUS_UPDATED,
    build_report_message,
    build_report_options,
)
from notifier.webhook import WebhookConfig

LAST_MODIFIED = "Wed, 01 May 2024 12:00:00 GMT"


def _result(url: str, status: str, **extra: str) -> dict:
    return {"url": url, "status": status, "purge_time": 1714564800, **extra}


def test_all_updated_is_green() -> None:
    options = build_report_options(123, [_result("https://a.test/", STATUS_UPDATED, last_modified=LAST_MODIFIED)])

    assert options["title"] == "Purge check for post 123"
    assert options["color"] == GREEN
    assert options["description"].startswith("1 URL checked")
    assert options["fields"][0]["name"] == "https://a.test/"
    assert LAST_MODIFIED in options["fields"][0]["value"]


def test_stale_or_missing_header_is_yellow() -> None:
    results = [
        _result("https://a.test/", STATUS_UPDATED),
        _result("https://b.test/", STATUS_MISSING_HEADER),
    ]
    assert build_report_options(None, results)["color"] == YELLOW

    results = [_result("https://a.test/", STATUS_NOT_UPDATED)]
    assert build_report_options(None, results)["color"] == YELLOW


def test_any_error_is_red() -> None:
    results = [
        _result("https://a.test/", STATUS_UPDATED),
        _result("https://b.test/", STATUS_ERROR, error="connection refused"),
    ]
    options = build_report_options(7, results)

    assert options["color"] == RED
    assert "connection refused" in options["fields"][1]["value"]
    assert "2 URLs checked" in options["description"]


def test_title_without_post_id() -> None:
    assert build_report_options(None, [])["title"] == "Purge check"


def test_many_urls_are_capped() -> None:
    results = [_result(f"https://a.test/{i}", STATUS_UPDATED) for i in range(30)]
    options = build_report_options(1, results)

    assert len(options["fields"]) == MAX_FIELDS
    assert f"first {MAX_FIELDS} URLs" in options["description"]


def test_message_wraps_normalized_embed() -> None:
    config = WebhookConfig(footer_label="Ops")
    message = build_report_message(1, [_result("https://a.test/", STATUS_UPDATED)], config)

    assert list(message) == ["embeds"]
    embed = message["embeds"][0]
    assert embed["footer"]["text"] == "Ops"
    assert embed["fields"][0]["inline"] is False
