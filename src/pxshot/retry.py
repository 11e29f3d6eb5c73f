"""Retry eligibility and backoff delays for the request executor."""

from __future__ import annotations

import random
import time
from typing import Callable, Optional

from .errors import RETRYABLE_STATUS_CODES
from .models import RateLimitInfo

MAX_BACKOFF = 30.0
MIN_RATE_LIMIT_WAIT = 1.0
MAX_RATE_LIMIT_WAIT = 60.0
JITTER_RATIO = 0.3


def should_retry(status: int, attempt: int, retries: int) -> bool:
    """Return True when ``status`` is transient and the attempt budget allows another try."""
    return status in RETRYABLE_STATUS_CODES and attempt < retries


def compute_backoff(
    attempt: int,
    base_delay: float,
    rate_limit: Optional[RateLimitInfo] = None,
    *,
    clock: Callable[[], float] = time.time,
    rand: Callable[[], float] = random.random,
) -> float:
    """Seconds to wait before attempt ``attempt + 1``.

    With a rate-limit snapshot the wait runs until the window resets, clamped
    to [1s, 60s]. Otherwise exponential backoff with up to 30% jitter, capped
    at 30s.
    """

    if rate_limit is not None:
        until_reset = rate_limit.reset - clock()
        return max(MIN_RATE_LIMIT_WAIT, min(until_reset, MAX_RATE_LIMIT_WAIT))

    delay = base_delay * (2 ** attempt)
    jitter = rand() * JITTER_RATIO * delay
    return min(delay + jitter, MAX_BACKOFF)


__all__ = ["MAX_BACKOFF", "compute_backoff", "should_retry"]
