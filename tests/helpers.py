r"""In-memory transports shared by the unit tests."""

from __future__ import annotations

__all__ = [
    "BlockingTransport",
    "FakeTransport",
    "FakeTransportStream",
    "fast_config",
]

import asyncio
from typing import TYPE_CHECKING, Any

import httpx

from retrystream.core.config import RetryConfig
from retrystream.transport.base import BaseTransport, BaseTransportStream

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Callable


def fast_config(transport: BaseTransport, **kwargs: Any) -> RetryConfig:
    """Create a config whose delays are capped at one millisecond."""
    kwargs.setdefault("max_delay", 0.001)
    return RetryConfig(transport=transport, **kwargs)


class FakeTransportStream(BaseTransportStream):
    """Transport stream yielding predefined chunks.

    Args:
        response: The response metadata.
        chunks: The body chunks.
        error: Raised after the last chunk, if any.
        block: If ``True``, the body never ends after the last chunk.
        cancellable: Whether the stream offers a cancellation handle.
    """

    def __init__(
        self,
        response: httpx.Response,
        chunks: list[Any] | None = None,
        error: Exception | None = None,
        block: bool = False,
        cancellable: bool = True,
    ) -> None:
        self.response = response
        self.chunks = chunks if chunks is not None else []
        self.error = error
        self.block = block
        self.cancellable = cancellable
        self.cancel_calls = 0
        self.close_calls = 0

    async def _generate(self) -> AsyncIterator[Any]:
        for chunk in self.chunks:
            await asyncio.sleep(0)
            yield chunk
        if self.error is not None:
            raise self.error
        if self.block:
            await asyncio.Event().wait()

    def iter_chunks(self) -> AsyncIterator[Any]:
        return self._generate()

    async def aclose(self) -> None:
        self.close_calls += 1

    def cancel_handle(self) -> Callable[[], None] | None:
        if not self.cancellable:
            return None
        return self._cancel

    def _cancel(self) -> None:
        self.cancel_calls += 1


class FakeTransport(BaseTransport):
    """Transport replaying a script of attempt results.

    Each script item is an exception to raise, or a ``(status, body)``
    tuple. In stream mode a list body is split into chunks. The last item
    is repeated once the script is exhausted.

    Args:
        script: The attempt results, in order.
        stream_kwargs: Extra arguments of the ``FakeTransportStream``
            instances.
    """

    transport_errors = (ConnectionError, TimeoutError)

    def __init__(self, script: list[Any], **stream_kwargs: Any) -> None:
        self.script = list(script)
        self.stream_kwargs = stream_kwargs
        self.calls: list[Any] = []
        self.streams: list[FakeTransportStream] = []

    def _next(self, options: Any) -> tuple[int, Any]:
        self.calls.append(options)
        item = self.script.pop(0) if len(self.script) > 1 else self.script[0]
        if isinstance(item, BaseException):
            raise item
        return item

    async def request(self, options: Any) -> tuple[httpx.Response, Any]:
        status, body = self._next(options)
        return httpx.Response(status), body

    async def stream(self, options: Any, *, object_mode: bool = False) -> FakeTransportStream:
        status, body = self._next(options)
        chunks = body if isinstance(body, list) else [body]
        stream = FakeTransportStream(httpx.Response(status), chunks, **self.stream_kwargs)
        self.streams.append(stream)
        return stream


class BlockingTransport(BaseTransport):
    """Transport whose attempts never complete.

    Attributes:
        started: Set when an attempt has started.
        cancelled: Number of attempts cancelled while in flight.
    """

    transport_errors = (ConnectionError,)

    def __init__(self) -> None:
        self.started = asyncio.Event()
        self.cancelled = 0
        self.calls = 0

    async def _block(self) -> Any:
        self.calls += 1
        self.started.set()
        try:
            await asyncio.Event().wait()
        except asyncio.CancelledError:
            self.cancelled += 1
            raise

    async def request(self, options: Any) -> tuple[Any, Any]:
        return await self._block()

    async def stream(self, options: Any, *, object_mode: bool = False) -> BaseTransportStream:
        return await self._block()
