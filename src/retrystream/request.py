r"""Entry points executing a logical request with automatic retries.

Three call shapes share the same ``RetryOrchestrator``:
- ``request_async``: awaitable, returns ``(response, body)``
- ``request_callback``: calls ``on_done(error, response, body)`` once
- ``request_stream``: returns a ``RetryStream``
"""

from __future__ import annotations

__all__ = ["AbortHandle", "request_async", "request_callback", "request_stream"]

import asyncio
import logging
from typing import TYPE_CHECKING, Any

from retrystream.core.config import RetryConfig
from retrystream.outcome import TransportFailure
from retrystream.retry.orchestrator import RetryOrchestrator
from retrystream.stream import RetryStream

if TYPE_CHECKING:
    from collections.abc import Callable

logger: logging.Logger = logging.getLogger(__name__)


class AbortHandle:
    """Handle of a request started with ``request_callback``.

    Args:
        orchestrator: The orchestrator running the request.
    """

    def __init__(self, orchestrator: RetryOrchestrator) -> None:
        self._orchestrator = orchestrator

    @property
    def done(self) -> bool:
        return self._orchestrator.done

    def abort(self) -> None:
        """Abort the request. ``on_done`` will not be called."""
        self._orchestrator.abort()

    async def wait(self) -> None:
        """Wait until the request has finished or has been aborted."""
        await self._orchestrator.wait()


async def request_async(options: Any, config: RetryConfig | None = None) -> tuple[Any, Any]:
    """Execute a request with automatic retries.

    Args:
        options: The request options handed to the transport (for the
            default httpx transport: a URL, or a mapping of
            ``httpx.AsyncClient.build_request`` arguments).
        config: The retry configuration. Defaults to ``RetryConfig()``.

    Returns:
        The ``(response, body)`` of the committed attempt: the first
        accepted response, or the last rejected one once the retry budget
        is exhausted.

    Raises:
        Exception: The last transport error, verbatim, once the transport
            retry budget is exhausted.

    Example:
        ```pycon
        >>> import asyncio
        >>> from retrystream import RetryConfig, request_async
        >>> response, body = asyncio.run(
        ...     request_async("https://api.example.com/data", RetryConfig(max_policy_retries=5))
        ... )  # doctest: +SKIP

        ```
    """
    outcome = await RetryOrchestrator(options, config).run()
    if isinstance(outcome, TransportFailure):
        raise outcome.error
    return outcome.response, outcome.body


def request_callback(
    options: Any,
    on_done: Callable[[BaseException | None, Any, Any], Any],
    config: RetryConfig | None = None,
) -> AbortHandle:
    """Start a request with automatic retries, reporting through a
    callback.

    Must be called from a running event loop.

    Args:
        options: The request options handed to the transport.
        on_done: Called exactly once with ``(error, response, body)``:
            ``(None, response, body)`` for the committed response, or
            ``(error, None, None)`` on failure. Never called if the request
            is aborted. An exception raised by ``on_done`` is logged and
            re-raised by ``AbortHandle.wait``.
        config: The retry configuration. Defaults to ``RetryConfig()``.

    Returns:
        A handle to abort or wait for the request.
    """
    orchestrator = RetryOrchestrator(options, config)

    async def _run() -> None:
        try:
            outcome = await orchestrator.run()
        except Exception as exc:
            logger.debug(f"Request failed with unexpected {type(exc).__name__}: {exc}")
            on_done(exc, None, None)
            return
        if isinstance(outcome, TransportFailure):
            on_done(outcome.error, None, None)
        else:
            on_done(None, outcome.response, outcome.body)

    task = orchestrator.start(_run())
    task.add_done_callback(_log_callback_error)
    return AbortHandle(orchestrator)


def _log_callback_error(task: asyncio.Task[Any]) -> None:
    # only on_done can make the task fail, its error stays available to wait()
    if task.cancelled() or task.exception() is None:
        return
    logger.error("on_done raised an exception", exc_info=task.exception())


def request_stream(options: Any, config: RetryConfig | None = None) -> RetryStream:
    """Start a streamed request with automatic retries.

    Must be called from a running event loop. The output of each attempt
    is held back until the attempt is accepted; the returned stream only
    carries the committed attempt.

    Args:
        options: The request options handed to the transport.
        config: The retry configuration. Defaults to ``RetryConfig()``.

    Returns:
        The external stream.
    """
    config = config if config is not None else RetryConfig()
    stream = RetryStream(object_mode=config.object_mode)
    orchestrator = RetryOrchestrator(options, config, stream=stream)

    async def _run() -> None:
        try:
            await orchestrator.run()
        except Exception as exc:
            logger.debug(f"Stream failed with unexpected {type(exc).__name__}: {exc}")
            stream.fail(exc)

    orchestrator.start(_run())
    return stream
