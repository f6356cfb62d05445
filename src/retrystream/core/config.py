r"""Configuration dataclass and defaults for retried requests.

This module provides configuration constants and an immutable
dataclass-based configuration object shared by every entry point of the
package.
"""

from __future__ import annotations

__all__ = [
    "DEFAULT_CURRENT_ATTEMPT_OFFSET",
    "DEFAULT_DELAY_MULTIPLIER_BASE",
    "DEFAULT_MAX_DELAY",
    "DEFAULT_MAX_POLICY_RETRIES",
    "DEFAULT_MAX_TRANSPORT_RETRIES",
    "DEFAULT_TOTAL_TIMEOUT",
    "RetryConfig",
]

from dataclasses import dataclass, fields, replace
from typing import TYPE_CHECKING, Any

from retrystream.core.validation import validate_retry_params
from retrystream.utils.response import default_should_retry

if TYPE_CHECKING:
    from collections.abc import Callable

    from retrystream.outcome import Responded
    from retrystream.transport.base import BaseTransport


# Default number of extra attempts after a response rejected by the predicate
# Total attempts = max_policy_retries + 1 (initial attempt)
DEFAULT_MAX_POLICY_RETRIES = 2

# Default number of extra attempts after a transport failure (no response)
DEFAULT_MAX_TRANSPORT_RETRIES = 2

DEFAULT_CURRENT_ATTEMPT_OFFSET = 0

# Wait time = delay_multiplier_base ** attempt seconds, plus up to 1s of jitter
# With 2.0: 1st retry waits 2-3s, 2nd waits 4-5s, 3rd waits 8-9s
DEFAULT_DELAY_MULTIPLIER_BASE = 2.0

# Ceiling on a single delay, in seconds
DEFAULT_MAX_DELAY = 64.0

# Ceiling on the time elapsed since the first attempt, in seconds
DEFAULT_TOTAL_TIMEOUT = 600.0


@dataclass(frozen=True)
class RetryConfig:
    """Configuration for one logical request.

    Any field explicitly set to ``None`` is treated as unspecified and
    falls back to its default, so callers can forward optional values
    without checking them first. ``transport`` stays ``None`` until the
    request starts, where it resolves to the process-wide default
    transport.

    Args:
        max_policy_retries: Maximum number of extra attempts after a
            response rejected by ``should_retry``. Must be >= 0.
        max_transport_retries: Maximum number of extra attempts after a
            transport failure with no response. Must be >= 0.
        current_attempt_offset: Attempt number to resume from. A positive
            value adds one initial delay before the first attempt and does
            not touch the retry counters. Must be >= 0.
        retry_on_transport_error: If ``False``, a transport failure is
            immediately terminal regardless of ``max_transport_retries``.
        delay_multiplier_base: Exponent base of the backoff. Must be > 0.
        max_delay: Maximum single delay in seconds. Must be > 0.
        total_timeout: Maximum time in seconds since the first attempt.
            The next delay is shortened so the deadline is not exceeded.
            Must be > 0.
        object_mode: Whether the stream carries arbitrary objects instead
            of bytes.
        should_retry: Predicate deciding whether a response is worth
            another attempt.
        transport: The transport performing the physical I/O.

    Example:
        ```pycon
        >>> from retrystream.core.config import RetryConfig
        >>> config = RetryConfig()
        >>> config.max_policy_retries
        2
        >>> RetryConfig(max_policy_retries=None).max_policy_retries
        2
        >>> merged = config.merge(max_policy_retries=5)
        >>> merged.max_policy_retries
        5
        >>> config.max_policy_retries
        2

        ```
    """

    max_policy_retries: int = DEFAULT_MAX_POLICY_RETRIES
    max_transport_retries: int = DEFAULT_MAX_TRANSPORT_RETRIES
    current_attempt_offset: int = DEFAULT_CURRENT_ATTEMPT_OFFSET
    retry_on_transport_error: bool = True
    delay_multiplier_base: float = DEFAULT_DELAY_MULTIPLIER_BASE
    max_delay: float = DEFAULT_MAX_DELAY
    total_timeout: float = DEFAULT_TOTAL_TIMEOUT
    object_mode: bool = False
    should_retry: Callable[[Responded], bool] = default_should_retry
    transport: BaseTransport | None = None

    def __post_init__(self) -> None:
        """Fill unspecified fields and validate the configuration.

        Raises:
            ValueError: If any parameter fails validation.
        """
        for f in fields(self):
            if getattr(self, f.name) is None and f.default is not None:
                object.__setattr__(self, f.name, f.default)
        validate_retry_params(
            max_policy_retries=self.max_policy_retries,
            max_transport_retries=self.max_transport_retries,
            current_attempt_offset=self.current_attempt_offset,
            delay_multiplier_base=self.delay_multiplier_base,
            max_delay=self.max_delay,
            total_timeout=self.total_timeout,
        )

    def merge(self, **overrides: Any) -> RetryConfig:
        """Create a new config with specified parameters overridden.

        Only non-None override values are applied.

        Args:
            **overrides: Keyword arguments for parameters to override.

        Returns:
            A new ``RetryConfig`` instance with overrides applied.
        """
        filtered_overrides = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **filtered_overrides)
