r"""retrystream - Retried requests that look like a single request.

This package executes one logical network request through as many
physical attempts as needed, deciding after each attempt whether to retry
and after how long. The caller sees a single outcome: one completed
result, or one continuous stream into which only the accepted attempt's
output is spliced.

Key Features:
    - Exponential backoff with jitter, capped per delay and by a total timeout
    - Independent retry budgets for transport failures and rejected responses
    - Default retry predicate for 1xx, 429 and 5xx responses, or a custom one
    - Three call shapes: awaitable, callback with abort handle, and stream
    - Stream mode withholds each attempt's output until it is accepted
    - Abort cancels the attempt in flight and any pending retry
    - Pluggable transports, with an httpx transport by default

Example:
    ```pycon
    >>> import asyncio
    >>> from retrystream import RetryConfig, request_async, request_stream
    >>> response, body = asyncio.run(
    ...     request_async("https://api.example.com/data")
    ... )  # doctest: +SKIP
    >>> async def download():
    ...     stream = request_stream(
    ...         "https://api.example.com/file", RetryConfig(max_policy_retries=4)
    ...     )
    ...     stream.on("request", lambda info: print(f"attempt {info.attempt}"))
    ...     return await stream.read()
    ...
    >>> asyncio.run(download())  # doctest: +SKIP

    ```
"""

from __future__ import annotations

__all__ = [
    "AbortHandle",
    "BaseTransport",
    "BaseTransportStream",
    "HttpxTransport",
    "RequestInfo",
    "Responded",
    "RetryConfig",
    "RetryStream",
    "TransportFailure",
    "__version__",
    "default_should_retry",
    "get_default_transport",
    "get_next_retry_delay",
    "request_async",
    "request_callback",
    "request_stream",
    "reset_default_transport",
    "set_default_transport",
]

from importlib.metadata import PackageNotFoundError, version

from retrystream.core.config import RetryConfig
from retrystream.defaults import (
    get_default_transport,
    reset_default_transport,
    set_default_transport,
)
from retrystream.events import RequestInfo
from retrystream.outcome import Responded, TransportFailure
from retrystream.request import AbortHandle, request_async, request_callback, request_stream
from retrystream.retry.delay import get_next_retry_delay
from retrystream.stream import RetryStream
from retrystream.transport import BaseTransport, BaseTransportStream, HttpxTransport
from retrystream.utils.response import default_should_retry

try:
    __version__ = version(__name__)
except PackageNotFoundError:  # pragma: no cover
    # Package is not installed, fallback if needed
    __version__ = "0.0.0"
