"""Embed construction for Discord webhook messages."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Mapping

from notifier.webhook import WebhookConfig

# Colors (decimal):
#   White 16777215, Greyple 10070709, Blurple 5793266, Green 5763719,
#   Yellow 16705372, Fuchsia 15418782, Red 15548997
DEFAULT_COLOR = 3106979
GREEN = 5763719
YELLOW = 16705372
RED = 15548997

# Discord embed limits.
TITLE_LIMIT = 256
DESCRIPTION_LIMIT = 4096
FIELD_NAME_LIMIT = 256
FIELD_VALUE_LIMIT = 1024
FOOTER_TEXT_LIMIT = 2048
AUTHOR_NAME_LIMIT = 256
MAX_FIELDS = 25


def _truncate(text: Any, max_len: int) -> Any:
    """Truncate a string with an ellipsis if needed.

    Non-string values are returned unchanged.
    """
    if not isinstance(text, str) or len(text) <= max_len:
        return text
    if max_len <= 3:
        return text[:max_len]
    return f"{text[: max_len - 3]}..."


def _is_empty(value: Any) -> bool:
    return value is None or value == "" or value == {} or value == []


def prune_empty(value: Any) -> Any:
    """Return a copy of `value` without empty entries.

    Dict keys holding None, "", {} or [] are dropped, as are such items in
    lists. Containers are pruned before their own emptiness is checked, so a
    dict whose children were all empty disappears from its parent too.
    `False` and `0` are kept.
    """
    if isinstance(value, Mapping):
        pruned = {}
        for key, item in value.items():
            item = prune_empty(item)
            if not _is_empty(item):
                pruned[key] = item
        return pruned
    if isinstance(value, (list, tuple)):
        return [item for item in map(prune_empty, value) if not _is_empty(item)]
    return value


def _timestamp(value: Any) -> str:
    if value is None or value == "":
        return datetime.now(timezone.utc).isoformat()
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)


def _field(field: Mapping[str, Any]) -> dict[str, Any]:
    return {
        "name": _truncate(field.get("name"), FIELD_NAME_LIMIT),
        "value": _truncate(field.get("value"), FIELD_VALUE_LIMIT),
        "inline": bool(field.get("inline", False)),
    }


def create_embed(options: Mapping[str, Any], config: WebhookConfig) -> dict[str, Any]:
    """Build a normalized Discord embed from loosely-typed options.

    Args:
        options: Display options (title, description, url, color, timestamp,
            footer, thumbnail, image, author, fields). Every key is optional.
        config: Supplies the default footer label and icon.

    Returns:
        A new embed dict with defaults applied, strings clipped to Discord's
        limits, and every empty value pruned. `options` is left untouched.
    """
    color = options.get("color")
    footer = options.get("footer")
    thumbnail = options.get("thumbnail")
    image = options.get("image")
    author = options.get("author")

    embed = {
        "title": _truncate(options.get("title"), TITLE_LIMIT),
        "description": _truncate(options.get("description"), DESCRIPTION_LIMIT),
        "url": options.get("url"),
        "color": DEFAULT_COLOR if color is None else color,
        "timestamp": _timestamp(options.get("timestamp")),
        "footer": (
            {
                "icon_url": footer.get("icon_url"),
                "text": _truncate(footer.get("text"), FOOTER_TEXT_LIMIT),
            }
            if footer
            else {
                "icon_url": config.footer_icon_url,
                "text": _truncate(config.footer_label, FOOTER_TEXT_LIMIT),
            }
        ),
        "thumbnail": {"url": thumbnail.get("url")} if thumbnail else None,
        "image": {"url": image.get("url")} if image else None,
        "author": (
            {
                "name": _truncate(author.get("name"), AUTHOR_NAME_LIMIT),
                "url": author.get("url"),
                "icon_url": author.get("icon_url"),
            }
            if author
            else None
        ),
        "fields": [_field(f) for f in (options.get("fields") or [])[:MAX_FIELDS]],
    }

    return prune_empty(embed)
