"""Discord webhook configuration.

The configuration is read once at startup and frozen into a
:class:`WebhookConfig`; deliveries built from it share nothing else.
"""

from __future__ import annotations

from typing import Any

from notifier.webhook import (
    DEFAULT_FOOTER_ICON_URL,
    DEFAULT_FOOTER_LABEL,
    DEFAULT_INITIAL_WAIT,
    DEFAULT_MAX_ATTEMPTS,
    DEFAULT_MAX_WAIT,
    DEFAULT_TIMEOUT,
    MAX_ATTEMPTS_LIMIT,
    WebhookConfig,
)


def build_config(config: dict[str, Any]) -> WebhookConfig:
    """Convert the loaded configuration dict into a WebhookConfig.

    Empty footer values fall back to the defaults and `max_attempts` is
    clamped to 1..5.

    Raises:
        ValueError: If a numeric setting cannot be parsed, or a wait or
            timeout is negative or not finite.
    """
    max_attempts = int(config.get("max_attempts") or DEFAULT_MAX_ATTEMPTS)
    return WebhookConfig(
        webhook_url=config.get("webhook") or "",
        footer_label=config.get("footer_label") or DEFAULT_FOOTER_LABEL,
        footer_icon_url=config.get("footer_icon_url") or DEFAULT_FOOTER_ICON_URL,
        max_attempts=min(max(max_attempts, 1), MAX_ATTEMPTS_LIMIT),
        initial_wait=float(config.get("initial_wait", DEFAULT_INITIAL_WAIT)),
        max_wait=float(config.get("max_wait", DEFAULT_MAX_WAIT)),
        timeout=float(config.get("timeout") or DEFAULT_TIMEOUT),
    )
