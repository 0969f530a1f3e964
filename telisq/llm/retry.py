"""Backoff policy for chat completion requests."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import timedelta

_MILLISECOND = timedelta(milliseconds=1)


@dataclass(frozen=True)
class RetryConfig:
    """How often and how long to wait before retrying a failed request."""

    max_retries: int = 3
    initial_delay: timedelta = timedelta(milliseconds=1000)
    max_delay: timedelta = timedelta(seconds=30)
    backoff_multiplier: float = 2.0


def is_retryable_error(status: int) -> bool:
    """Rate limits and server errors are retryable; other failures are not."""
    code = int(status)
    return code == 429 or 500 <= code <= 599


def calculate_retry_delay(config: RetryConfig, attempt: int) -> timedelta:
    """Exponential backoff delay for an attempt, capped at the configured maximum."""
    if attempt < 0:
        raise ValueError("attempt must not be negative")
    initial_ms = config.initial_delay // _MILLISECOND
    try:
        delay_ms = initial_ms * config.backoff_multiplier ** attempt
    except OverflowError:
        return config.max_delay
    if math.isnan(delay_ms):
        return config.max_delay
    max_ms = config.max_delay / _MILLISECOND
    if delay_ms >= max_ms:
        return config.max_delay
    return timedelta(milliseconds=max(0, int(delay_ms)))