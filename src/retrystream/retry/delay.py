r"""Delay calculation between attempts.

This module computes the wait time before the next attempt: exponential
growth with up to one second of random jitter, capped by a maximum
single delay and shortened so the total timeout is not exceeded.
"""

from __future__ import annotations

__all__ = ["DelayCalculator", "get_next_retry_delay"]

import logging
import math
import random
import time
from typing import TYPE_CHECKING

from retrystream.core.config import (
    DEFAULT_DELAY_MULTIPLIER_BASE,
    DEFAULT_MAX_DELAY,
    DEFAULT_TOTAL_TIMEOUT,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from retrystream.core.config import RetryConfig

logger: logging.Logger = logging.getLogger(__name__)


def _compute_delay(
    attempt_number: int,
    delay_multiplier_base: float,
    max_delay: float,
    total_timeout: float,
    elapsed_ms: float,
    jitter: Callable[[], float],
) -> float:
    # the deadline cap may be zero or negative, callers retry immediately then
    try:
        growth = delay_multiplier_base**attempt_number * 1000
    except OverflowError:
        growth = math.inf
    raw = float(min(growth + math.floor(jitter() * 1000), max_delay * 1000))
    remaining = float(total_timeout * 1000 - elapsed_ms)
    if remaining < raw:
        logger.debug(
            f"Capping delay from {raw:.0f}ms to {remaining:.0f}ms "
            f"(total_timeout={total_timeout:.2f}s)"
        )
        return remaining
    return raw


class DelayCalculator:
    """Calculator of the wait time before the next attempt.

    The delay in milliseconds is calculated as follows:
    1. ``delay_multiplier_base ** attempt_number * 1000`` plus a jitter
       drawn uniformly from ``[0, 1000)``
    2. capped at ``max_delay * 1000``
    3. capped so that ``elapsed_ms + delay <= total_timeout * 1000``

    Args:
        jitter: Source of uniform random numbers in ``[0, 1)``. Defaults to
            ``random.random``; inject a constant function for
            deterministic delays.

    Example:
        ```pycon
        >>> from retrystream.core.config import RetryConfig
        >>> from retrystream.retry.delay import DelayCalculator
        >>> calculator = DelayCalculator(jitter=lambda: 0.0)
        >>> calculator.next_delay(1, RetryConfig(), elapsed_ms=0)
        2000.0
        >>> calculator.next_delay(3, RetryConfig(), elapsed_ms=0)
        8000.0
        >>> calculator.next_delay(10, RetryConfig(max_delay=5.0), elapsed_ms=0)
        5000.0

        ```
    """

    def __init__(self, jitter: Callable[[], float] | None = None) -> None:
        self.jitter: Callable[[], float] = jitter if jitter is not None else random.random

    def next_delay(self, attempt_number: int, config: RetryConfig, elapsed_ms: float) -> float:
        """Calculate the delay before the next attempt.

        Args:
            attempt_number: Ordinal (1-indexed) of the attempt that just
                failed. The first retry uses ``attempt_number=1``.
            config: The retry configuration.
            elapsed_ms: Milliseconds elapsed since the first attempt.

        Returns:
            The delay in milliseconds. Non-positive once the total timeout
            has been reached.
        """
        return _compute_delay(
            attempt_number=attempt_number,
            delay_multiplier_base=config.delay_multiplier_base,
            max_delay=config.max_delay,
            total_timeout=config.total_timeout,
            elapsed_ms=elapsed_ms,
            jitter=self.jitter,
        )


def get_next_retry_delay(
    *,
    retry_number: int,
    delay_multiplier_base: float = DEFAULT_DELAY_MULTIPLIER_BASE,
    max_retry_delay: float = DEFAULT_MAX_DELAY,
    time_of_first_request: float | None = None,
    total_timeout: float = DEFAULT_TOTAL_TIMEOUT,
    jitter: Callable[[], float] | None = None,
) -> float:
    """Calculate the delay before a retry, independently of any request.

    Args:
        retry_number: Ordinal (1-indexed) of the attempt that just failed.
        delay_multiplier_base: Exponent base of the backoff.
        max_retry_delay: Maximum single delay in seconds.
        time_of_first_request: ``time.time()`` timestamp of the first
            attempt. ``None`` means now.
        total_timeout: Maximum time in seconds since the first attempt.
        jitter: Source of uniform random numbers in ``[0, 1)``.
            Defaults to ``random.random``.

    Returns:
        The delay in milliseconds.

    Example:
        ```pycon
        >>> from retrystream.retry.delay import get_next_retry_delay
        >>> get_next_retry_delay(retry_number=2, jitter=lambda: 0.5)
        4500.0
        >>> get_next_retry_delay(retry_number=10, max_retry_delay=30, jitter=lambda: 0.0)
        30000.0

        ```
    """
    now = time.time()
    if time_of_first_request is None:
        time_of_first_request = now
    return _compute_delay(
        attempt_number=retry_number,
        delay_multiplier_base=delay_multiplier_base,
        max_delay=max_retry_delay,
        total_timeout=total_timeout,
        elapsed_ms=(now - time_of_first_request) * 1000,
        jitter=jitter if jitter is not None else random.random,
    )
