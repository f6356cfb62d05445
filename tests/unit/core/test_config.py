r"""Unit tests for RetryConfig dataclass.

This file contains tests for the RetryConfig dataclass in
core/config.py.
"""

from __future__ import annotations

import dataclasses

import pytest
from coola.equality import objects_are_equal

from retrystream.core import (
    DEFAULT_DELAY_MULTIPLIER_BASE,
    DEFAULT_MAX_DELAY,
    DEFAULT_MAX_POLICY_RETRIES,
    DEFAULT_MAX_TRANSPORT_RETRIES,
    DEFAULT_TOTAL_TIMEOUT,
    RetryConfig,
)
from retrystream.outcome import Responded
from retrystream.utils.response import default_should_retry
from tests.helpers import FakeTransport


def always_retry(outcome: Responded) -> bool:  # noqa: ARG001
    return True


#################################
#     Tests for RetryConfig     #
#################################


def test_retry_config_defaults() -> None:
    """Test that RetryConfig uses correct default values."""
    config = RetryConfig()

    assert config.max_policy_retries == DEFAULT_MAX_POLICY_RETRIES == 2
    assert config.max_transport_retries == DEFAULT_MAX_TRANSPORT_RETRIES == 2
    assert config.current_attempt_offset == 0
    assert config.retry_on_transport_error is True
    assert config.delay_multiplier_base == DEFAULT_DELAY_MULTIPLIER_BASE
    assert config.max_delay == DEFAULT_MAX_DELAY
    assert config.total_timeout == DEFAULT_TOTAL_TIMEOUT
    assert config.object_mode is False
    assert config.should_retry is default_should_retry
    assert config.transport is None


def test_retry_config_custom_values() -> None:
    """Test that RetryConfig accepts custom values."""
    transport = FakeTransport([(200, b"")])
    config = RetryConfig(
        max_policy_retries=5,
        max_transport_retries=0,
        current_attempt_offset=3,
        retry_on_transport_error=False,
        delay_multiplier_base=1.5,
        max_delay=10.0,
        total_timeout=30.0,
        object_mode=True,
        should_retry=always_retry,
        transport=transport,
    )

    assert config.max_policy_retries == 5
    assert config.max_transport_retries == 0
    assert config.current_attempt_offset == 3
    assert config.retry_on_transport_error is False
    assert config.delay_multiplier_base == 1.5
    assert config.max_delay == 10.0
    assert config.total_timeout == 30.0
    assert config.object_mode is True
    assert config.should_retry is always_retry
    assert config.transport is transport


def test_retry_config_none_values_use_defaults() -> None:
    """Test that explicit None values are treated as unspecified."""
    config = RetryConfig(
        max_policy_retries=None,
        max_transport_retries=None,
        current_attempt_offset=None,
        retry_on_transport_error=None,
        delay_multiplier_base=None,
        max_delay=None,
        total_timeout=None,
        object_mode=None,
        should_retry=None,
        transport=None,
    )

    assert objects_are_equal(config, RetryConfig())


def test_retry_config_is_frozen() -> None:
    """Test that RetryConfig cannot be mutated."""
    config = RetryConfig()
    with pytest.raises(dataclasses.FrozenInstanceError):
        config.max_policy_retries = 5  # type: ignore[misc]


def test_retry_config_merge() -> None:
    """Test that merge overrides the given fields only."""
    config = RetryConfig(max_policy_retries=3)
    merged = config.merge(max_policy_retries=5, max_delay=1.0)

    assert merged.max_policy_retries == 5
    assert merged.max_delay == 1.0
    assert merged.max_transport_retries == DEFAULT_MAX_TRANSPORT_RETRIES
    assert config.max_policy_retries == 3


def test_retry_config_merge_ignores_none() -> None:
    """Test that merge ignores None overrides."""
    config = RetryConfig(max_policy_retries=3)
    assert config.merge(max_policy_retries=None).max_policy_retries == 3


@pytest.mark.parametrize(
    ("field", "value"),
    [
        ("max_policy_retries", -1),
        ("max_transport_retries", -1),
        ("current_attempt_offset", -1),
        ("delay_multiplier_base", 0),
        ("max_delay", 0),
        ("max_delay", -1.0),
        ("total_timeout", 0),
    ],
)
def test_retry_config_invalid_values(field: str, value: float) -> None:
    """Test that RetryConfig validates its parameters."""
    with pytest.raises(ValueError, match=rf"{field} must be"):
        RetryConfig(**{field: value})
