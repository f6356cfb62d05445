r"""Transport capability injected into the retry orchestrator.

The transport performs the physical I/O of one attempt. It comes in two
shapes: a buffered ``request`` returning the response and its body, and
a streaming ``stream`` returning a ``BaseTransportStream`` whose response
metadata is available immediately and whose body is read lazily.
"""

from __future__ import annotations

__all__ = ["BaseTransport", "BaseTransportStream", "release_stream"]

import inspect
import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, ClassVar

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Awaitable, Callable

logger: logging.Logger = logging.getLogger(__name__)


class BaseTransportStream(ABC):
    """Abstract base class for the streaming output of one attempt.

    Attributes:
        response: The response metadata (status, headers) of the attempt.
    """

    response: Any

    @abstractmethod
    def iter_chunks(self) -> AsyncIterator[Any]:
        """Return an async iterator over the body chunks.

        Returns:
            An async iterator yielding ``bytes`` (or arbitrary objects in
            object mode).
        """

    @abstractmethod
    async def aclose(self) -> None:
        """Close the underlying resource.

        Must be idempotent.
        """

    def cancel_handle(self) -> Callable[[], Awaitable[None] | None] | None:
        """Return the transport's own cancellation operation, if it offers
        one.

        Returns:
            A callable aborting the underlying I/O, or ``None`` if the
            transport only supports closing. Defaults to ``None``.
        """
        return None


class BaseTransport(ABC):
    """Abstract base class for transports.

    Attributes:
        transport_errors: Exception types that denote a failure to obtain a
            response. They are normalized into ``TransportFailure``; any
            other exception propagates.
    """

    transport_errors: ClassVar[tuple[type[BaseException], ...]] = (OSError, TimeoutError)

    @abstractmethod
    async def request(self, options: Any) -> tuple[Any, Any]:
        """Perform one buffered attempt.

        Args:
            options: The request options.

        Returns:
            A ``(response, body)`` tuple.
        """

    @abstractmethod
    async def stream(self, options: Any, *, object_mode: bool = False) -> BaseTransportStream:
        """Open one streaming attempt.

        Args:
            options: The request options.
            object_mode: Whether the body should be yielded as arbitrary
                objects instead of bytes.

        Returns:
            The attempt's stream, with its response metadata available.
        """


async def release_stream(stream: BaseTransportStream) -> None:
    """Abort the I/O of a transport stream.

    The transport's own cancellation operation is used when it offers one,
    otherwise the stream is closed.

    Args:
        stream: The stream to release.
    """
    cancel = stream.cancel_handle()
    if cancel is None:
        logger.debug(f"Closing transport stream {type(stream).__name__}")
        await stream.aclose()
        return
    logger.debug(f"Cancelling transport stream {type(stream).__name__}")
    result = cancel()
    if inspect.isawaitable(result):
        await result
