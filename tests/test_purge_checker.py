"""
tests/test_purge_checker.py — Last-Modified classification and the checking loop.
"""

from __future__ import annotations

from typing import Optional
from unittest.mock import MagicMock

import pytest
import requests

import module.purge_checker as purge_checker
from module.purge_checker import check_url, check_urls, run_purge_check
from notifier.client import build_config
from notifier.report import STATUS_ERROR, STATUS_MISSING_HEADER, STATUS_NOT_UPDATED, STATUS_UPDATED
from notifier.webhook import DeliveryHttpError, WebhookClient, WebhookConfig

# 2024-05-01 12:00:00 UTC
PURGE_TIME = 1714564800
BEFORE = "Wed, 01 May 2024 11:59:59 GMT"
AT = "Wed, 01 May 2024 12:00:00 GMT"
AFTER = "Wed, 01 May 2024 12:05:00 GMT"


def _session(last_modified: Optional[str] = None) -> MagicMock:
    resp = MagicMock()
    resp.headers = {} if last_modified is None else {"Last-Modified": last_modified}
    session = MagicMock()
    session.get.return_value = resp
    return session


@pytest.fixture
def config() -> dict:
    return {"webhook": "https://discord.test/api/webhooks/1/abc", "propagation_delay": 5}


# ---------------------------------------------------------------------------
# check_url
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    ("header", "status"),
    [
        (AFTER, STATUS_UPDATED),
        (AT, STATUS_UPDATED),
        (BEFORE, STATUS_NOT_UPDATED),
        (None, STATUS_MISSING_HEADER),
        ("not a date", STATUS_MISSING_HEADER),
    ],
)
def test_check_url_status(header: Optional[str], status: str) -> None:
    result = check_url("https://a.test/", PURGE_TIME, _session(header))

    assert result["status"] == status
    assert result["url"] == "https://a.test/"
    assert result["purge_time"] == PURGE_TIME
    assert result["last_modified"] == header


def test_check_url_fetch_error() -> None:
    session = MagicMock()
    session.get.side_effect = requests.ConnectionError("refused")

    result = check_url("https://a.test/", PURGE_TIME, session)

    assert result["status"] == STATUS_ERROR
    assert "refused" in result["error"]
    assert "last_modified" not in result


def test_check_urls_keeps_order() -> None:
    session = _session(AFTER)
    urls = ["https://a.test/1", "https://a.test/2", "https://a.test/3"]

    results = check_urls(urls, PURGE_TIME, session)

    assert [r["url"] for r in results] == urls
    assert session.get.call_count == 3
    session.close.assert_not_called()


# ---------------------------------------------------------------------------
# run_purge_check
# ---------------------------------------------------------------------------


def test_run_purge_check_reports_and_returns_results(config: dict) -> None:
    client = MagicMock()
    sleep = MagicMock()

    job = {"post_id": 123, "purge_time": PURGE_TIME, "urls": ["https://a.test/"]}
    result = run_purge_check(job, config, client=client, session=_session(AFTER), sleep=sleep)

    sleep.assert_called_once_with(5.0)
    assert result["post_id"] == 123
    assert result["results"][0]["status"] == STATUS_UPDATED
    message = client.send.call_args.args[0]
    assert message["embeds"][0]["title"] == "Purge check for post 123"


def test_notification_failure_is_not_fatal(config: dict, caplog: pytest.LogCaptureFixture) -> None:
    client = MagicMock()
    client.send.side_effect = DeliveryHttpError(500, "boom")

    job = {"post_id": 1, "purge_time": PURGE_TIME, "urls": ["https://a.test/"]}
    with caplog.at_level("ERROR", logger="module.purge_checker"):
        result = run_purge_check(job, config, client=client, session=_session(BEFORE), sleep=MagicMock())

    assert result["results"][0]["status"] == STATUS_NOT_UPDATED
    assert any("not delivered" in r.getMessage() for r in caplog.records)


def test_missing_webhook_is_not_fatal() -> None:
    job = {"purge_time": PURGE_TIME, "urls": ["https://a.test/"]}

    result = run_purge_check(job, {"webhook": ""}, session=_session(AFTER), sleep=MagicMock())

    assert result["post_id"] is None
    assert result["results"][0]["status"] == STATUS_UPDATED


@pytest.mark.parametrize(
    "job",
    [
        {"urls": ["https://a.test/"]},
        {"purge_time": PURGE_TIME},
        {"purge_time": PURGE_TIME, "urls": []},
        {"purge_time": "yesterday", "urls": ["https://a.test/"]},
    ],
)
def test_invalid_job(job: dict, config: dict) -> None:
    client = MagicMock()
    with pytest.raises(ValueError):
        run_purge_check(job, config, client=client, sleep=MagicMock())
    client.send.assert_not_called()


def test_default_delivery_uses_module_send(config: dict, monkeypatch: pytest.MonkeyPatch) -> None:
    send = MagicMock()
    monkeypatch.setattr(purge_checker, "send", send)

    job = {"post_id": 5, "purge_time": PURGE_TIME, "urls": ["https://a.test/"]}
    run_purge_check(job, config, session=_session(AFTER), sleep=MagicMock())

    message, webhook_config = send.call_args.args
    assert message["embeds"][0]["title"] == "Purge check for post 5"
    assert isinstance(webhook_config, WebhookConfig)
    assert webhook_config.webhook_url == config["webhook"]


def test_infinite_retry_after_still_returns_results() -> None:
    rate_limited = MagicMock()
    rate_limited.status_code = 429
    rate_limited.headers = {"Retry-After": "inf"}
    rate_limited.json.side_effect = ValueError("no json")
    webhook_session = MagicMock()
    webhook_session.post.return_value = rate_limited

    config = {"webhook": "https://discord.test/api/webhooks/1/abc", "initial_wait": 0}
    # Real time.sleep: zero backoff keeps the test fast, an infinite wait would overflow.
    client = WebhookClient(build_config(config), session=webhook_session)

    job = {"post_id": 3, "purge_time": PURGE_TIME, "urls": ["https://a.test/"]}
    result = run_purge_check(job, config, client=client, session=_session(AFTER), sleep=MagicMock())

    assert result["results"][0]["status"] == STATUS_UPDATED
    assert webhook_session.post.call_count == 3


def test_huge_retry_after_does_not_stall(config: dict) -> None:
    rate_limited = MagicMock()
    rate_limited.status_code = 429
    rate_limited.headers = {"Retry-After": "86400"}
    webhook_session = MagicMock()
    webhook_session.post.return_value = rate_limited
    webhook_sleep = MagicMock()
    client = WebhookClient(build_config(config), session=webhook_session, sleep=webhook_sleep)

    job = {"post_id": 4, "purge_time": PURGE_TIME, "urls": ["https://a.test/"]}
    result = run_purge_check(job, config, client=client, session=_session(AFTER), sleep=MagicMock())

    assert result["results"][0]["status"] == STATUS_UPDATED
    assert webhook_session.post.call_count == 1
    webhook_sleep.assert_not_called()


@pytest.mark.parametrize("delay", [float("inf"), -1])
def test_invalid_propagation_delay(delay: float) -> None:
    sleep = MagicMock()
    job = {"purge_time": PURGE_TIME, "urls": ["https://a.test/"]}

    with pytest.raises(ValueError, match="propagation_delay"):
        run_purge_check(job, {"webhook": "", "propagation_delay": delay}, session=_session(AFTER), sleep=sleep)
    sleep.assert_not_called()
