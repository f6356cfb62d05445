r"""Mutable state of one logical request."""

from __future__ import annotations

__all__ = ["RequestSession", "SessionSnapshot", "SessionState"]

import enum
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from retrystream.transport.base import BaseTransportStream


class SessionState(enum.Enum):
    r"""Terminal state of a logical request."""

    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    ABORTED = "aborted"


@dataclass(frozen=True)
class SessionSnapshot:
    """Immutable view of the counters of a ``RequestSession``.

    Attributes:
        attempt_count: Number of attempts started so far.
        transport_failure_count: Number of attempts charged to the
            transport retry budget.
    """

    attempt_count: int
    transport_failure_count: int

    @property
    def policy_attempt_count(self) -> int:
        """Number of attempts not charged to the transport budget."""
        return self.attempt_count - self.transport_failure_count


@dataclass
class RequestSession:
    """State of one logical request, owned by its orchestrator.

    Attributes:
        attempt_count: Number of attempts started so far.
        transport_failure_count: Number of attempts charged to the
            transport retry budget.
        first_attempt_time: ``time.time()`` timestamp of the start of
            attempt 1, ``None`` before it starts.
        current_handle: The stream of the attempt in flight (stream mode).
            Set only while ``state`` is ``PENDING``.
        state: The terminal state, ``PENDING`` while the request runs.
    """

    attempt_count: int = 0
    transport_failure_count: int = 0
    first_attempt_time: float | None = None
    current_handle: BaseTransportStream | None = None
    state: SessionState = SessionState.PENDING

    @property
    def is_pending(self) -> bool:
        return self.state is SessionState.PENDING

    def elapsed_ms(self) -> float:
        """Return the milliseconds elapsed since attempt 1 started, 0 before
        it starts."""
        if self.first_attempt_time is None:
            return 0.0
        return (time.time() - self.first_attempt_time) * 1000

    def start_attempt(self) -> int:
        """Count a new attempt and return its number (1-indexed)."""
        self.attempt_count += 1
        if self.first_attempt_time is None:
            self.first_attempt_time = time.time()
        return self.attempt_count

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            attempt_count=self.attempt_count,
            transport_failure_count=self.transport_failure_count,
        )
