r"""Single-attempt execution against the injected transport.

This module provides the AttemptExecutor class that performs one
physical attempt and normalizes its result into an ``AttemptOutcome``.
"""

from __future__ import annotations

__all__ = ["AttemptExecutor"]

import logging
from typing import TYPE_CHECKING, Any

from retrystream.outcome import Responded, TransportFailure
from retrystream.transport.base import release_stream

if TYPE_CHECKING:
    from retrystream.outcome import AttemptOutcome
    from retrystream.transport.base import BaseTransport, BaseTransportStream

logger: logging.Logger = logging.getLogger(__name__)


class AttemptExecutor:
    """Runs one attempt at a time on a transport.

    Exceptions matching ``transport.transport_errors`` are normalized into
    ``TransportFailure``; any other exception propagates.

    Args:
        transport: The transport performing the physical I/O.
        object_mode: Whether streamed bodies carry arbitrary objects.
    """

    def __init__(self, transport: BaseTransport, object_mode: bool = False) -> None:
        self.transport = transport
        self.object_mode = object_mode

    async def run(self, options: Any) -> AttemptOutcome:
        """Perform one buffered attempt.

        Args:
            options: The request options.

        Returns:
            ``Responded`` with the response and its body, or
            ``TransportFailure``.
        """
        try:
            response, body = await self.transport.request(options)
        except self.transport.transport_errors as exc:
            logger.debug(f"Attempt failed with {type(exc).__name__}: {exc}")
            return TransportFailure(exc)
        return Responded(response, body)

    async def open(self, options: Any) -> tuple[AttemptOutcome, BaseTransportStream | None]:
        """Open one streaming attempt.

        Args:
            options: The request options.

        Returns:
            A ``(outcome, stream)`` tuple. ``stream`` is the attempt's
            transport stream, ``None`` on transport failure. The outcome's
            body is ``None``: it is read through the stream.
        """
        try:
            stream = await self.transport.stream(options, object_mode=self.object_mode)
        except self.transport.transport_errors as exc:
            logger.debug(f"Attempt failed with {type(exc).__name__}: {exc}")
            return TransportFailure(exc), None
        return Responded(stream.response), stream

    async def abort_current(self, handle: BaseTransportStream | None) -> None:
        """Abort the I/O of the attempt in flight.

        Uses the transport's cancellation operation when it offers one,
        otherwise closes the stream. No-op if ``handle`` is ``None``.

        Args:
            handle: The in-flight stream, taken from the session.
        """
        if handle is None:
            return
        await release_stream(handle)

    async def close_current(self, handle: BaseTransportStream | None) -> None:
        """Close the stream of a completed attempt.

        Args:
            handle: The stream, taken from the session.
        """
        if handle is None:
            return
        await handle.aclose()
