"""Discord notification package.

This package provides the embed builder and a webhook client with bounded,
rate-limit aware retries, plus the purge report payloads built on top.
"""

from .embed import create_embed, prune_empty
from .webhook import (
    ConfigurationError,
    DeliveryError,
    DeliveryHttpError,
    DeliveryTransportError,
    RateLimitExhaustedError,
    WebhookClient,
    WebhookConfig,
    send,
)

__all__ = [
    "ConfigurationError",
    "DeliveryError",
    "DeliveryHttpError",
    "DeliveryTransportError",
    "RateLimitExhaustedError",
    "WebhookClient",
    "WebhookConfig",
    "create_embed",
    "prune_empty",
    "send",
]
