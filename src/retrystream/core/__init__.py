r"""Configuration and validation shared by every entry point."""

from __future__ import annotations

__all__ = [
    "DEFAULT_CURRENT_ATTEMPT_OFFSET",
    "DEFAULT_DELAY_MULTIPLIER_BASE",
    "DEFAULT_MAX_DELAY",
    "DEFAULT_MAX_POLICY_RETRIES",
    "DEFAULT_MAX_TRANSPORT_RETRIES",
    "DEFAULT_TOTAL_TIMEOUT",
    "RetryConfig",
    "validate_retry_params",
]

from retrystream.core.config import (
    DEFAULT_CURRENT_ATTEMPT_OFFSET,
    DEFAULT_DELAY_MULTIPLIER_BASE,
    DEFAULT_MAX_DELAY,
    DEFAULT_MAX_POLICY_RETRIES,
    DEFAULT_MAX_TRANSPORT_RETRIES,
    DEFAULT_TOTAL_TIMEOUT,
    RetryConfig,
)
from retrystream.core.validation import validate_retry_params
