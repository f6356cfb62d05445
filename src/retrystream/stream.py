r"""Externally visible stream of a streamed logical request.

A ``RetryStream`` looks like the output of one uninterrupted request:
listeners registered with ``on`` are notified of the lifecycle events,
and the committed attempt's body can be consumed with ``async for``,
``read`` or ``pipe``.

Example:
    ```pycon
    >>> import asyncio
    >>> from retrystream import request_stream
    >>> async def main():
    ...     stream = request_stream("https://api.example.com/data")
    ...     stream.on("response", lambda response: print(response.status_code))
    ...     return await stream.read()
    ...
    >>> asyncio.run(main())  # doctest: +SKIP

    ```
"""

from __future__ import annotations

__all__ = ["RetryStream"]

import asyncio
import inspect
import logging
from typing import TYPE_CHECKING, Any

from retrystream.events import EVENTS
from retrystream.exceptions import StreamConsumedError

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Callable

    from retrystream.events import RequestInfo
    from retrystream.retry.orchestrator import RetryOrchestrator

logger: logging.Logger = logging.getLogger(__name__)

_CHUNK = "chunk"
_END = "end"
_ERROR = "error"


class RetryStream:
    """Stream of events and body chunks of one logical request.

    Body chunks are queued for ``async for``, ``read`` and ``pipe`` until
    they are consumed. Registering a ``data`` listener before consumption
    starts switches the stream to flowing mode: chunks are then only
    delivered to the listeners and are not kept for a later read.

    Events are delivered in this order: ``request`` once per attempt
    started, then ``response``, ``data`` for each body chunk and
    ``complete``; or ``error`` instead of ``response`` and ``complete`` if
    the request fails. An aborted stream ends without ``response`` or
    ``complete``.

    Args:
        object_mode: If ``True``, chunks are arbitrary objects and
            ``read`` returns a list instead of ``bytes``.

    Attributes:
        response: The committed response, ``None`` until ``response`` is
            emitted.
        error: The terminal error, if any.
    """

    def __init__(self, object_mode: bool = False) -> None:
        self.object_mode = object_mode
        self.response: Any = None
        self.error: BaseException | None = None
        self._listeners: dict[str, list[Callable[..., Any]]] = {name: [] for name in EVENTS}
        self._queue: asyncio.Queue[tuple[str, Any]] = asyncio.Queue()
        self._ended = False
        self._consumed = False
        self._orchestrator: RetryOrchestrator | None = None

    def bind(self, orchestrator: RetryOrchestrator) -> None:
        """Attach the orchestrator driving this stream."""
        self._orchestrator = orchestrator

    @property
    def ended(self) -> bool:
        return self._ended

    def on(self, event: str, handler: Callable[..., Any]) -> RetryStream:
        """Register a listener.

        Args:
            event: One of ``request``, ``response``, ``data``, ``error``,
                ``complete``.
            handler: Called with the event payload (``RequestInfo``, the
                response, the chunk, the error; nothing for ``complete``).

        Returns:
            The stream itself, so calls can be chained.

        Raises:
            ValueError: If the event name is unknown.
        """
        if event not in self._listeners:
            msg = f"Unknown event {event!r}, expected one of {EVENTS}"
            raise ValueError(msg)
        self._listeners[event].append(handler)
        return self

    def abort(self) -> None:
        """Abort the logical request.

        The attempt in flight is cancelled, no further attempt is made and
        the stream ends without ``response`` or ``complete``.
        """
        if self._orchestrator is not None:
            self._orchestrator.abort()
        else:
            self.close()

    async def wait(self) -> None:
        """Wait until the logical request has finished."""
        if self._orchestrator is not None:
            await self._orchestrator.wait()

    def __aiter__(self) -> AsyncIterator[Any]:
        if self._consumed:
            msg = "The stream body has already been consumed"
            raise StreamConsumedError(msg)
        self._consumed = True
        return self._iter_chunks()

    async def _iter_chunks(self) -> AsyncIterator[Any]:
        while True:
            kind, value = await self._queue.get()
            if kind == _CHUNK:
                yield value
            elif kind == _ERROR:
                raise value
            else:
                return

    async def read(self) -> bytes | list[Any]:
        """Consume the whole body.

        Returns:
            The joined body, or the list of chunks in object mode.

        Raises:
            BaseException: The stream's terminal error, if any.
        """
        chunks = [chunk async for chunk in self]
        if self.object_mode:
            return chunks
        return b"".join(chunks)

    async def pipe(self, write: Callable[[Any], Any]) -> None:
        """Forward every chunk of the body to ``write``.

        Args:
            write: Called with each chunk. Awaited if it returns an
                awaitable.
        """
        async for chunk in self:
            result = write(chunk)
            if inspect.isawaitable(result):
                await result

    # Producer side, driven by the orchestrator and the relay.

    def emit_request(self, info: RequestInfo) -> None:
        self._emit("request", info)

    def emit_response(self, response: Any) -> None:
        self.response = response
        self._emit("response", response)

    def push(self, chunk: Any) -> None:
        if self._ended:
            return
        if self._consumed or not self._listeners["data"]:
            self._queue.put_nowait((_CHUNK, chunk))
        self._emit("data", chunk)

    def end(self) -> None:
        """End the stream after the committed body, emitting
        ``complete``."""
        if self._ended:
            return
        self._ended = True
        self._queue.put_nowait((_END, None))
        self._emit("complete")

    def fail(self, error: BaseException) -> None:
        """End the stream with ``error``."""
        if self._ended:
            return
        self._ended = True
        self.error = error
        logger.debug(f"Stream failed with {type(error).__name__}: {error}")
        self._queue.put_nowait((_ERROR, error))
        self._emit("error", error)

    def close(self) -> None:
        """End the stream silently (abort)."""
        if self._ended:
            return
        self._ended = True
        self._queue.put_nowait((_END, None))

    def _emit(self, event: str, *args: Any) -> None:
        for handler in list(self._listeners[event]):
            handler(*args)
