from __future__ import annotations

from typing import TYPE_CHECKING
from unittest.mock import Mock

import pytest

from retrystream.defaults import reset_default_transport

if TYPE_CHECKING:
    from collections.abc import Generator


@pytest.fixture(autouse=True)
def _reset_default_transport() -> Generator[None, None, None]:
    """Restore the process-wide default transport after each test."""
    yield
    reset_default_transport()


@pytest.fixture
def on_done() -> Mock:
    """Create a mock completion callback for testing callback mode."""
    return Mock()


@pytest.fixture
def zero_jitter() -> Mock:
    """Create a jitter source always returning 0."""
    return Mock(return_value=0.0)
