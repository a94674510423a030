import logging
import math
import time
from datetime import timezone
from email.utils import parsedate_to_datetime
from typing import Any, Callable, Optional

import requests

from notifier.client import build_config
from notifier.report import (
    STATUS_ERROR,
    STATUS_MISSING_HEADER,
    STATUS_NOT_UPDATED,
    STATUS_UPDATED,
    build_report_message,
)
from notifier.webhook import DeliveryError, WebhookClient, send

logger = logging.getLogger(__name__)

USER_AGENT = "PurgeChecker/1.0"
DEFAULT_HEADERS = {"User-Agent": USER_AGENT}
REQUEST_TIMEOUT = 15


def _last_modified_timestamp(header: str) -> Optional[float]:
    """Parse an HTTP date into a Unix timestamp, or None if malformed."""
    try:
        parsed = parsedate_to_datetime(header)
    except (TypeError, ValueError):
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.timestamp()


def check_url(url: str, purge_time: float, session: requests.Session) -> dict[str, Any]:
    """Check whether `url` was refreshed after `purge_time`.

    Args:
        url: Content URL to fetch.
        purge_time: Unix timestamp (seconds) of the purge.
        session: HTTP session used for the request.

    Returns:
        A result dict with `url`, `status`, `purge_time` and either
        `last_modified` or `error`.
    """
    try:
        response = session.get(url, headers=DEFAULT_HEADERS, timeout=REQUEST_TIMEOUT)
    except requests.RequestException as exc:
        logger.warning("could not fetch %s: %s", url, exc)
        return {"url": url, "status": STATUS_ERROR, "error": str(exc), "purge_time": purge_time}

    last_modified = response.headers.get("Last-Modified")
    if not last_modified:
        status = STATUS_MISSING_HEADER
    else:
        modified_at = _last_modified_timestamp(last_modified)
        if modified_at is None:
            # Unparseable dates are treated like a missing header.
            status = STATUS_MISSING_HEADER
        elif modified_at >= purge_time:
            status = STATUS_UPDATED
        else:
            status = STATUS_NOT_UPDATED

    return {"url": url, "status": status, "last_modified": last_modified, "purge_time": purge_time}


def check_urls(
    urls: list[str],
    purge_time: float,
    session: Optional[requests.Session] = None,
) -> list[dict[str, Any]]:
    """Check every URL sequentially, keeping the input order."""
    own_session = session is None
    session = session or requests.Session()
    try:
        return [check_url(url, purge_time, session) for url in urls]
    finally:
        if own_session:
            session.close()


def run_purge_check(
    job: dict[str, Any],
    config: dict[str, Any],
    client: Optional[WebhookClient] = None,
    session: Optional[requests.Session] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> dict[str, Any]:
    """Verify a purge and report the outcome to Discord.

    The job is `{"post_id": ..., "purge_time": <unix seconds>, "urls": [...]}`.
    Notification failures are logged and never change the returned results.

    Raises:
        ValueError: If `urls` or `purge_time` is missing or invalid, or the
            configuration holds an unusable delay or retry setting.
    """
    urls = job.get("urls")
    purge_time = job.get("purge_time")
    if not urls or purge_time is None or purge_time == "":
        raise ValueError("job needs both 'urls' and 'purge_time'")
    if isinstance(urls, str):
        urls = [urls]
    try:
        purge_time = float(purge_time)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"invalid purge_time: {purge_time!r}") from exc

    post_id = job.get("post_id")
    webhook_config = build_config(config)
    delay = float(config.get("propagation_delay", 5))
    if not math.isfinite(delay) or delay < 0:
        raise ValueError(f"invalid propagation_delay: {delay!r}")

    # Give the CDN a moment to propagate the purge.
    sleep(delay)

    results = check_urls(urls, purge_time, session)

    message = build_report_message(post_id, results, webhook_config)
    try:
        if client is None:
            send(message, webhook_config)
        else:
            client.send(message)
    except DeliveryError as exc:
        logger.error("purge report for post %s was not delivered: %s", post_id, exc)

    return {"post_id": post_id, "results": results}
