r"""Normalized outcome of a single physical attempt.

An attempt ends in exactly one of two ways: the transport failed before
any response was obtained, or the transport produced a response (and, in
buffered mode, its body).
"""

from __future__ import annotations

__all__ = ["AttemptOutcome", "Responded", "TransportFailure"]

from dataclasses import dataclass
from typing import Any, Union


@dataclass(frozen=True)
class TransportFailure:
    """Outcome of an attempt that failed before obtaining a response.

    Attributes:
        error: The exception raised by the transport, kept verbatim.
    """

    error: BaseException


@dataclass(frozen=True)
class Responded:
    """Outcome of an attempt that obtained a response.

    Attributes:
        response: The transport's response object (e.g. ``httpx.Response``).
        body: The buffered body. ``None`` in stream mode, where the body is
            relayed after the retry decision.
    """

    response: Any
    body: Any = None


AttemptOutcome = Union[TransportFailure, Responded]
