"""Retry policy for transient OpenRouter failures.

Retries network errors, provider (5xx) errors and rate limits with
exponential backoff. Rate-limited attempts wait for the server's
``Retry-After`` when one was given.
"""

from __future__ import annotations

from datetime import UTC, datetime
from email.utils import parsedate_to_datetime
from typing import TYPE_CHECKING

import httpx
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
)

from openrouter_client.exceptions import NetworkError, ProviderError, RateLimitError
from openrouter_client.utils.logging import get_logger

if TYPE_CHECKING:
    from openrouter_client.config import OpenRouterSettings

logger = get_logger(__name__)

# Errors worth another attempt; everything else is raised immediately
RETRYABLE_ERRORS: tuple[type[Exception], ...] = (
    NetworkError,
    ProviderError,
    RateLimitError,
)


def parse_retry_after_header(response: httpx.Response) -> float | None:
    """Parse Retry-After header from response.

    Supports both numeric seconds and HTTP date formats.

    Args:
        response: HTTP response object

    Returns:
        Wait time in seconds, or None if header is missing/invalid
    """
    retry_after = response.headers.get("Retry-After")
    if not retry_after:
        return None

    try:
        wait_seconds = float(retry_after)
    except ValueError:
        try:
            retry_datetime = parsedate_to_datetime(retry_after)
        except (TypeError, ValueError):
            return None
        if retry_datetime.tzinfo is None:
            retry_datetime = retry_datetime.replace(tzinfo=UTC)
        delta = (retry_datetime - datetime.now(UTC)).total_seconds()
        return max(delta, 0.0)

    return wait_seconds if wait_seconds >= 0 else None


def backoff_delay(attempt: int, base_delay: float, max_delay: float) -> float:
    """Exponential backoff for the given 1-based attempt: ``base * 2**(attempt-1)``."""
    return float(min(base_delay * (2 ** (attempt - 1)), max_delay))


class RetryWait:
    """Tenacity wait strategy honouring ``RateLimitError.retry_after``."""

    def __init__(self, base_delay: float, max_delay: float):
        self.base_delay = base_delay
        self.max_delay = max_delay

    def __call__(self, retry_state: RetryCallState) -> float:
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        if isinstance(exc, RateLimitError) and exc.retry_after is not None:
            return float(min(exc.retry_after, self.max_delay))
        return backoff_delay(
            retry_state.attempt_number, self.base_delay, self.max_delay
        )


def _log_retry_attempt(retry_state: RetryCallState) -> None:
    """Log retry attempts for observability."""
    exc = retry_state.outcome.exception() if retry_state.outcome else None
    logger.warning(
        "openrouter_retry",
        attempt=retry_state.attempt_number,
        wait_seconds=round(
            retry_state.next_action.sleep if retry_state.next_action else 0, 2
        ),
        error_type=type(exc).__name__ if exc else None,
        error=str(exc) if exc else None,
    )


def build_retrying(settings: OpenRouterSettings) -> AsyncRetrying:
    """Create the retry controller for one logical request.

    With retries disabled the request is attempted exactly once.
    """
    attempts = settings.max_retries + 1 if settings.enable_retry else 1
    return AsyncRetrying(
        stop=stop_after_attempt(attempts),
        wait=RetryWait(settings.retry_delay, settings.max_retry_delay),
        retry=retry_if_exception_type(RETRYABLE_ERRORS),
        before_sleep=_log_retry_attempt,
        reraise=True,
    )
