r"""Parameter validation utilities for retry configuration.

This module provides validation functions for retry parameters to ensure
they meet the required constraints before being used by the retry
orchestrator.
"""

from __future__ import annotations

__all__ = ["validate_retry_params"]


def validate_retry_params(
    max_policy_retries: int,
    max_transport_retries: int,
    current_attempt_offset: int = 0,
    delay_multiplier_base: float = 2.0,
    max_delay: float = 64.0,
    total_timeout: float = 600.0,
) -> None:
    """Validate retry parameters.

    Args:
        max_policy_retries: Maximum number of extra attempts after a response
            rejected by the retry predicate. Must be >= 0.
        max_transport_retries: Maximum number of extra attempts after a
            transport failure. Must be >= 0.
        current_attempt_offset: Attempt number to resume from. Must be >= 0.
        delay_multiplier_base: Exponent base of the backoff. Must be > 0.
        max_delay: Maximum single delay in seconds. Must be > 0.
        total_timeout: Maximum time in seconds since the first attempt.
            Must be > 0.

    Raises:
        ValueError: If a count is negative or a duration/multiplier is
            non-positive.

    Example:
        ```pycon
        >>> from retrystream.core import validate_retry_params
        >>> validate_retry_params(max_policy_retries=2, max_transport_retries=2)
        >>> validate_retry_params(max_policy_retries=-1, max_transport_retries=2)  # doctest: +SKIP

        ```
    """
    if max_policy_retries < 0:
        msg = f"max_policy_retries must be >= 0, got {max_policy_retries}"
        raise ValueError(msg)
    if max_transport_retries < 0:
        msg = f"max_transport_retries must be >= 0, got {max_transport_retries}"
        raise ValueError(msg)
    if current_attempt_offset < 0:
        msg = f"current_attempt_offset must be >= 0, got {current_attempt_offset}"
        raise ValueError(msg)
    if delay_multiplier_base <= 0:
        msg = f"delay_multiplier_base must be > 0, got {delay_multiplier_base}"
        raise ValueError(msg)
    if max_delay <= 0:
        msg = f"max_delay must be > 0, got {max_delay}"
        raise ValueError(msg)
    if total_timeout <= 0:
        msg = f"total_timeout must be > 0, got {total_timeout}"
        raise ValueError(msg)
