"""Discord embed payloads for purge check results."""

from __future__ import annotations

from collections import Counter
from typing import Any, Optional

from notifier.embed import GREEN, MAX_FIELDS, RED, YELLOW, create_embed
from notifier.webhook import WebhookConfig

STATUS_UPDATED = "updated"
STATUS_NOT_UPDATED = "not_updated"
STATUS_MISSING_HEADER = "missing_header"
STATUS_ERROR = "error"

STATUS_LABELS = {
    STATUS_UPDATED: ":white_check_mark: Updated after purge",
    STATUS_NOT_UPDATED: ":x: Not updated after purge",
    STATUS_MISSING_HEADER: ":grey_question: Last-Modified header missing",
    STATUS_ERROR: ":warning: Could not fetch URL",
}


def _report_color(counts: Counter) -> int:
    if counts[STATUS_ERROR]:
        return RED
    if counts[STATUS_NOT_UPDATED] or counts[STATUS_MISSING_HEADER]:
        return YELLOW
    return GREEN


def _field_value(result: dict[str, Any]) -> str:
    label = STATUS_LABELS.get(result.get("status"), str(result.get("status")))
    if result.get("error"):
        return f"{label}\n`{result['error']}`"
    if result.get("last_modified"):
        return f"{label}\nLast-Modified: `{result['last_modified']}`"
    return label


def build_report_options(post_id: Optional[Any], results: list[dict[str, Any]]) -> dict[str, Any]:
    """Turn purge check results into embed options.

    Args:
        post_id: Identifier of the purged post, if known.
        results: Output of :func:`module.purge_checker.check_urls`.

    Returns:
        Options accepted by :func:`notifier.embed.create_embed`.
    """
    counts = Counter(r.get("status") for r in results)
    title = "Purge check" if post_id is None else f"Purge check for post {post_id}"

    summary = [f"{len(results)} URL{'' if len(results) == 1 else 's'} checked"]
    for status, label in STATUS_LABELS.items():
        if counts[status]:
            summary.append(f"{label}: {counts[status]}")

    fields = [
        {"name": r.get("url"), "value": _field_value(r), "inline": False}
        for r in results[:MAX_FIELDS]
    ]
    if len(results) > MAX_FIELDS:
        summary.append(f"Only the first {MAX_FIELDS} URLs are listed below.")

    return {
        "title": title,
        "description": "\n".join(summary),
        "color": _report_color(counts),
        "fields": fields,
    }


def build_report_message(
    post_id: Optional[Any],
    results: list[dict[str, Any]],
    config: WebhookConfig,
) -> dict[str, Any]:
    """Build the `{"embeds": [...]}` message reporting a purge check."""
    return {"embeds": [create_embed(build_report_options(post_id, results), config)]}
