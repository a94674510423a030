"""Discord webhook client with rate-limit handling.

Design:
- `send` delivers one message synchronously, retrying on 429 and on network
  faults with a bounded number of attempts.
- The wait before each retry comes from `compute_wait`: the server hint when
  present, exponential backoff otherwise, never more than `max_wait`.
- A server hint longer than `max_wait` ends delivery at once instead of
  stalling the caller.
"""

from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional

import requests

logger = logging.getLogger(__name__)

DEFAULT_FOOTER_LABEL = "Purge Checker"
DEFAULT_FOOTER_ICON_URL = "https://jogajunto.co/apple-touch-icon.png"
DEFAULT_MAX_ATTEMPTS = 3
MAX_ATTEMPTS_LIMIT = 5
DEFAULT_INITIAL_WAIT = 1.0
DEFAULT_MAX_WAIT = 60.0
DEFAULT_TIMEOUT = 15.0


@dataclass(frozen=True)
class WebhookConfig:
    """Immutable delivery target and retry policy.

    Attributes:
        webhook_url: Discord webhook URL. Required for delivery.
        footer_label: Default embed footer text.
        footer_icon_url: Default embed footer icon.
        max_attempts: Upper bound of HTTP calls per `send` (1..5).
        initial_wait: Backoff base in seconds.
        max_wait: Longest single wait between attempts, in seconds.
        timeout: Per-request timeout in seconds.

    Raises:
        ValueError: If a retry setting is out of range.
    """

    webhook_url: str = ""
    footer_label: str = DEFAULT_FOOTER_LABEL
    footer_icon_url: str = DEFAULT_FOOTER_ICON_URL
    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    initial_wait: float = DEFAULT_INITIAL_WAIT
    max_wait: float = DEFAULT_MAX_WAIT
    timeout: float = DEFAULT_TIMEOUT

    def __post_init__(self) -> None:
        if not 1 <= self.max_attempts <= MAX_ATTEMPTS_LIMIT:
            raise ValueError(f"max_attempts must be between 1 and {MAX_ATTEMPTS_LIMIT}, got {self.max_attempts}")
        for name in ("initial_wait", "max_wait", "timeout"):
            value = getattr(self, name)
            if not math.isfinite(value) or value < 0:
                raise ValueError(f"{name} must be a finite, non-negative number of seconds, got {value}")


class DeliveryError(Exception):
    """Base class for every terminal delivery failure."""


class ConfigurationError(DeliveryError):
    """Raised when the webhook URL is missing."""


class RateLimitExhaustedError(DeliveryError):
    """Raised when every attempt was answered with HTTP 429."""

    def __init__(self, attempts: int):
        self.attempts = attempts
        super().__init__(f"webhook still rate limited after {attempts} attempts")


class DeliveryHttpError(DeliveryError):
    """Raised on a non-2xx, non-429 response. Never retried."""

    def __init__(self, status: int, body: str):
        self.status = status
        self.body = body
        super().__init__(f"webhook failed {status}: {body}")


class DeliveryTransportError(DeliveryError):
    """Raised when network faults persisted across every attempt."""

    def __init__(self, attempts: int, reason: str):
        self.attempts = attempts
        super().__init__(f"webhook unreachable after {attempts} attempts: {reason}")


class RateLimitError(Exception):
    """Raised when Discord returns HTTP 429 (rate limited)."""

    def __init__(self, retry_after: Optional[float]):
        """
        Args:
            retry_after: Seconds the server asked us to wait, or None when
                the response carried no hint.
        """
        self.retry_after = retry_after
        if retry_after is None:
            super().__init__("rate limited")
        else:
            super().__init__(f"rate limited, retry after {retry_after:.2f}s")


def compute_wait(
    attempt: int,
    server_hint: Optional[float],
    initial_wait: float = DEFAULT_INITIAL_WAIT,
    max_wait: float = DEFAULT_MAX_WAIT,
) -> float:
    """Return how many seconds to sleep before the next attempt.

    Args:
        attempt: 1-based ordinal of the attempt that just failed.
        server_hint: Seconds requested by the server, if any.
        initial_wait: Backoff base in seconds.
        max_wait: Upper bound of the returned wait.
    """
    if server_hint is not None:
        wait = max(0.0, server_hint)
    else:
        wait = initial_wait * (2**attempt)
    return min(wait, max_wait)


def _finite_seconds(value: Any) -> Optional[float]:
    """Parse a retry hint, returning None for garbage, NaN or infinity."""
    try:
        seconds = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(seconds):
        return None
    return seconds


def _parse_retry_after(resp: requests.Response) -> Optional[float]:
    """Extract the retry hint (seconds) from a 429 response.

    The `Retry-After` header wins; Discord's JSON body `retry_after` is the
    fallback. Unparseable or non-finite values count as no hint.
    """
    header = resp.headers.get("Retry-After")
    if header:
        seconds = _finite_seconds(header)
        if seconds is not None:
            return seconds
        logger.debug("ignoring unusable Retry-After header %r", header)

    try:
        data = resp.json()
    except ValueError:
        return None
    if isinstance(data, dict) and data.get("retry_after") is not None:
        return _finite_seconds(data["retry_after"])
    return None


class WebhookClient:
    """Webhook sender with bounded, rate-limit aware retries."""

    def __init__(
        self,
        config: WebhookConfig,
        session: Optional[requests.Session] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Create a new webhook client.

        Args:
            config: Delivery target and retry policy.
            session: HTTP session used for every attempt. A new one is
                created when omitted.
            sleep: Function used to wait between attempts.
        """
        self.config = config
        self.session = session or requests.Session()
        self.sleep = sleep

    def send(self, message: dict[str, Any]) -> requests.Response:
        """Deliver a message, retrying on rate limits and network faults.

        Args:
            message: JSON-serializable payload, usually `{"embeds": [...]}`.

        Returns:
            The successful response.

        Raises:
            ConfigurationError: No webhook URL is configured.
            DeliveryHttpError: Discord rejected the message.
            RateLimitExhaustedError: Every attempt was rate limited, or the
                server asked for a wait longer than `max_wait`.
            DeliveryTransportError: Every attempt hit a network fault.
        """
        if not self.config.webhook_url:
            raise ConfigurationError("webhook URL is not configured")

        max_attempts = self.config.max_attempts
        wait = 0.0
        for attempt in range(1, max_attempts + 1):
            if attempt > 1:
                self.sleep(wait)
            try:
                return self._send_json(message)
            except RateLimitError as exc:
                if attempt == max_attempts:
                    logger.error("webhook delivery gave up after %d rate-limited attempts", attempt)
                    raise RateLimitExhaustedError(attempt) from exc
                if exc.retry_after is not None and exc.retry_after > self.config.max_wait:
                    logger.error(
                        "webhook asked to wait %.2fs, more than the %.2fs limit; giving up",
                        exc.retry_after,
                        self.config.max_wait,
                    )
                    raise RateLimitExhaustedError(attempt) from exc
                wait = compute_wait(attempt, exc.retry_after, self.config.initial_wait, self.config.max_wait)
                logger.warning(
                    "webhook rate limited (attempt %d of %d), waiting %.2fs",
                    attempt,
                    max_attempts,
                    wait,
                )
            except DeliveryHttpError as exc:
                logger.error("webhook rejected message with status %d", exc.status)
                raise
            except requests.RequestException as exc:
                if attempt == max_attempts:
                    logger.error("webhook delivery gave up after %d failed attempts: %s", attempt, exc)
                    raise DeliveryTransportError(attempt, str(exc)) from exc
                wait = compute_wait(attempt, None, self.config.initial_wait, self.config.max_wait)
                logger.warning(
                    "webhook request failed (attempt %d of %d): %s, waiting %.2fs",
                    attempt,
                    max_attempts,
                    exc,
                    wait,
                )

        # WebhookConfig guarantees max_attempts >= 1, so every path above returns or raises.
        raise AssertionError("unreachable")

    def _send_json(self, message: dict[str, Any]) -> requests.Response:
        """Send a JSON webhook request."""
        resp = self.session.post(
            self.config.webhook_url,
            json=message,
            headers={"Content-Type": "application/json"},
            timeout=self.config.timeout,
        )
        self._handle_response(resp)
        return resp

    def _handle_response(self, resp: requests.Response) -> None:
        """Interpret Discord webhook responses and raise on error."""
        if resp.status_code == 429:
            raise RateLimitError(_parse_retry_after(resp))

        if not (200 <= resp.status_code < 300):
            raise DeliveryHttpError(resp.status_code, resp.text)


def send(message: dict[str, Any], config: WebhookConfig) -> requests.Response:
    """Deliver `message` to the webhook described by `config`.

    The HTTP session lives only for this call.
    """
    with requests.Session() as session:
        return WebhookClient(config, session=session).send(message)
