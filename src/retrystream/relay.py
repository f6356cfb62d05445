r"""Per-attempt buffering of streamed output.

While the retry decision for an attempt is pending, its output is kept in
a private ``AttemptSink``. The sink is then either discarded, which drops
the buffer and aborts the attempt's I/O, or committed, which splices the
buffered and the remaining output into the external ``RetryStream``.
"""

from __future__ import annotations

__all__ = ["AttemptSink", "SinkState", "StreamRelay"]

import asyncio
import enum
import logging
from typing import TYPE_CHECKING, Any

from retrystream.exceptions import RelayStateError

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from retrystream.stream import RetryStream
    from retrystream.transport.base import BaseTransportStream

logger: logging.Logger = logging.getLogger(__name__)

_BYTES_TYPES = (bytes, bytearray, memoryview)


class SinkState(enum.Enum):
    r"""Lifecycle state of an ``AttemptSink``."""

    OPEN = "open"
    DISCARDED = "discarded"
    COMMITTED = "committed"


class AttemptSink:
    """Discardable buffer bound to one attempt.

    Args:
        attempt: The attempt number (1-indexed).
        target: The external stream receiving the output on commit.

    Attributes:
        state: The lifecycle state of the sink.
    """

    def __init__(self, attempt: int, target: RetryStream) -> None:
        self.attempt = attempt
        self.state = SinkState.OPEN
        self._target = target
        self._buffer: list[Any] = []
        self._stream: BaseTransportStream | None = None
        self._release: Callable[[], Awaitable[None]] | None = None
        self._pump: asyncio.Task[None] | None = None
        self._finished = False
        self._error: BaseException | None = None

    def attach(
        self, stream: BaseTransportStream, release: Callable[[], Awaitable[None]]
    ) -> None:
        """Start capturing the output of the attempt's stream.

        Args:
            stream: The transport stream of the attempt.
            release: Aborts the attempt's I/O. Must be idempotent.
        """
        self._stream = stream
        self._release = release
        self._pump = asyncio.get_running_loop().create_task(self._run_pump())

    async def _run_pump(self) -> None:
        stream = self._stream
        try:
            async for chunk in stream.iter_chunks():
                self._write(chunk)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            self._on_error(exc)
            return
        self._finished = True
        if self.state is SinkState.COMMITTED:
            self._target.end()

    def _write(self, chunk: Any) -> None:
        if not self._target.object_mode and not isinstance(chunk, _BYTES_TYPES):
            msg = f"Expected a bytes-like chunk outside object mode, got {type(chunk).__name__}"
            raise TypeError(msg)
        if self.state is SinkState.COMMITTED:
            self._target.push(chunk)
        elif self.state is SinkState.OPEN:
            self._buffer.append(chunk)

    def _on_error(self, error: Exception) -> None:
        if self.state is SinkState.DISCARDED:
            logger.debug(
                f"Ignoring {type(error).__name__} of discarded attempt {self.attempt}: {error}"
            )
        elif self.state is SinkState.COMMITTED:
            self._target.fail(error)
        else:
            self._error = error

    def flush(self) -> None:
        """Forward the buffered output, then switch to direct
        forwarding."""
        self.state = SinkState.COMMITTED
        buffer, self._buffer = self._buffer, []
        for chunk in buffer:
            self._target.push(chunk)
        if self._error is not None:
            self._target.fail(self._error)
        elif self._finished or self._stream is None:
            self._target.end()

    async def cancel_pump(self) -> None:
        """Stop capturing output."""
        if self._pump is not None and not self._pump.done():
            self._pump.cancel()
            await asyncio.wait({self._pump})

    async def discard(self) -> None:
        """Drop the buffer and abort the attempt's I/O.

        Idempotent.
        """
        if self.state is SinkState.DISCARDED:
            return
        self.state = SinkState.DISCARDED
        self._buffer = []
        await self.cancel_pump()
        if self._release is not None:
            try:
                await self._release()
            except Exception as exc:  # noqa: BLE001
                logger.debug(f"Ignoring error while releasing attempt {self.attempt}: {exc}")

    async def drain(self) -> None:
        """Wait until the committed output has been fully forwarded."""
        if self._pump is not None:
            await asyncio.wait({self._pump})


class StreamRelay:
    """Relay between per-attempt sinks and the external stream.

    Only one sink is live at a time: a new attempt can begin once the
    previous sink has been discarded, or committed and drained.

    Args:
        target: The external stream.
    """

    def __init__(self, target: RetryStream) -> None:
        self.target = target
        self._current: AttemptSink | None = None

    @property
    def current(self) -> AttemptSink | None:
        return self._current

    def begin_attempt(self, attempt: int) -> AttemptSink:
        """Allocate the sink of a new attempt.

        Args:
            attempt: The attempt number (1-indexed).

        Returns:
            A fresh sink.

        Raises:
            RelayStateError: If the previous sink is still live.
        """
        if self._current is not None:
            msg = (
                f"Cannot begin attempt {attempt}: the sink of attempt "
                f"{self._current.attempt} is still {self._current.state.value}"
            )
            raise RelayStateError(msg)
        self._current = AttemptSink(attempt, self.target)
        return self._current

    async def discard(self, sink: AttemptSink) -> None:
        """Drop the sink's output and abort its I/O."""
        logger.debug(f"Discarding output of attempt {sink.attempt}")
        await sink.discard()
        if self._current is sink:
            self._current = None

    def commit(self, sink: AttemptSink) -> None:
        """Splice the sink's output into the external stream."""
        logger.debug(f"Committing output of attempt {sink.attempt}")
        sink.flush()

    async def drain(self, sink: AttemptSink) -> None:
        """Wait for the committed sink to forward all its output."""
        await sink.drain()
        if self._current is sink:
            self._current = None

    async def cancel(self) -> None:
        """Stop the live sink, if any, without touching the external
        stream."""
        sink, self._current = self._current, None
        if sink is not None:
            await sink.cancel_pump()
