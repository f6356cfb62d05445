r"""Exceptions raised by the package itself.

Transport errors are never wrapped: once the retry budget is exhausted
the last error raised by the transport reaches the caller verbatim.
"""

from __future__ import annotations

__all__ = ["RelayStateError", "RetryStreamError", "StreamConsumedError"]


class RetryStreamError(Exception):
    """Base class of the errors raised by retrystream."""


class RelayStateError(RetryStreamError):
    """Raised when a new attempt sink is requested while the previous one
    is still live."""


class StreamConsumedError(RetryStreamError):
    """Raised when the body of a ``RetryStream`` is consumed twice."""
