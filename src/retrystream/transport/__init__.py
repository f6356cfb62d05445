r"""Transports performing the physical I/O of an attempt."""

from __future__ import annotations

__all__ = [
    "BaseTransport",
    "BaseTransportStream",
    "HttpxTransport",
    "HttpxTransportStream",
    "release_stream",
]

from retrystream.transport.base import BaseTransport, BaseTransportStream, release_stream
from retrystream.transport.httpx_transport import HttpxTransport, HttpxTransportStream
