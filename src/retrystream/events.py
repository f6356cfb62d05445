r"""Event names and payloads of the stream observer surface.

A ``RetryStream`` notifies its listeners with the following events:
- request: Called once per physical attempt actually started
- response: Called once with the committed attempt's response
- data: Called for each relayed chunk of the committed attempt
- error: Called once when the logical request fails
- complete: Called once after the committed body has been relayed
"""

from __future__ import annotations

__all__ = ["EVENTS", "RequestInfo"]

from dataclasses import dataclass
from typing import Any

EVENTS = ("request", "response", "data", "error", "complete")


@dataclass(frozen=True)
class RequestInfo:
    """Information passed to ``request`` listeners.

    Attributes:
        options: The request options handed to the transport.
        attempt: The attempt number (1-indexed). First attempt is 1.
    """

    options: Any
    attempt: int
