r"""Retry package implementing the attempt/decide/wait loop.

Public API:
    - DelayCalculator: Wait time before the next attempt
    - RetryPolicy: Logic for deciding whether to retry an outcome
    - AttemptExecutor: Runs one attempt on the transport
    - RetryOrchestrator: State machine driving a logical request
    - RequestSession: Mutable state of a logical request
"""

from __future__ import annotations

__all__ = [
    "AttemptExecutor",
    "Charge",
    "DelayCalculator",
    "Phase",
    "RequestSession",
    "RetryOrchestrator",
    "RetryPolicy",
    "SessionSnapshot",
    "SessionState",
    "Verdict",
    "get_next_retry_delay",
]

from retrystream.retry.delay import DelayCalculator, get_next_retry_delay
from retrystream.retry.executor import AttemptExecutor
from retrystream.retry.orchestrator import Phase, RetryOrchestrator
from retrystream.retry.policy import Charge, RetryPolicy, Verdict
from retrystream.retry.session import RequestSession, SessionSnapshot, SessionState
