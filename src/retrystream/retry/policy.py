r"""Retry decision logic for attempt outcomes.

This module provides the RetryPolicy class deciding, after each attempt,
whether another attempt should be made and which retry budget it is
charged to.
"""

from __future__ import annotations

__all__ = ["Charge", "RetryPolicy", "Verdict"]

import enum
from dataclasses import dataclass
from typing import TYPE_CHECKING

from retrystream.outcome import TransportFailure

if TYPE_CHECKING:
    from retrystream.core.config import RetryConfig
    from retrystream.outcome import AttemptOutcome
    from retrystream.retry.session import SessionSnapshot


class Charge(enum.Enum):
    r"""Retry budget an extra attempt is charged to."""

    TRANSPORT = "transport"
    POLICY = "policy"


@dataclass(frozen=True)
class Verdict:
    """Decision taken on an attempt outcome.

    Attributes:
        charge: The budget charged by the retry, or ``None`` to commit the
            outcome.
        reason: Human readable reason, used in log messages.
        accepted: Whether a committed outcome is a response accepted by
            the retry predicate, as opposed to an exhausted budget.
    """

    charge: Charge | None
    reason: str = ""
    accepted: bool = False

    @property
    def should_retry(self) -> bool:
        return self.charge is not None

    @classmethod
    def commit(cls, reason: str = "", accepted: bool = False) -> Verdict:
        return cls(charge=None, reason=reason, accepted=accepted)

    @classmethod
    def retry(cls, charge: Charge, reason: str = "") -> Verdict:
        return cls(charge=charge, reason=reason)


class RetryPolicy:
    """Decides whether an attempt outcome should be retried.

    The rules, in order:
    1. A transport failure is committed at once if
       ``retry_on_transport_error`` is ``False`` (legacy mode).
    2. A transport failure is retried, charged to the transport budget,
       until ``max_transport_retries`` failures have been charged.
    3. A response flagged by ``should_retry`` is retried, charged to the
       policy budget, until ``max_policy_retries + 1`` attempts have been
       made outside the transport budget.
    4. Anything else is committed.

    The two budgets are independent: a request may make up to
    ``max_transport_retries + max_policy_retries`` extra attempts.
    ``evaluate`` has no side effect; charging is applied by the
    orchestrator.

    Example:
        ```pycon
        >>> import httpx
        >>> from retrystream.core.config import RetryConfig
        >>> from retrystream.outcome import Responded
        >>> from retrystream.retry.policy import RetryPolicy
        >>> from retrystream.retry.session import SessionSnapshot
        >>> policy = RetryPolicy()
        >>> snapshot = SessionSnapshot(attempt_count=1, transport_failure_count=0)
        >>> policy.evaluate(Responded(httpx.Response(503)), snapshot, RetryConfig()).charge
        <Charge.POLICY: 'policy'>
        >>> policy.evaluate(Responded(httpx.Response(200)), snapshot, RetryConfig()).should_retry
        False

        ```
    """

    def evaluate(
        self, outcome: AttemptOutcome, snapshot: SessionSnapshot, config: RetryConfig
    ) -> Verdict:
        """Decide on an attempt outcome.

        Args:
            outcome: The outcome of the attempt that just ended.
            snapshot: The session counters, including that attempt.
            config: The retry configuration.

        Returns:
            The verdict.
        """
        if isinstance(outcome, TransportFailure):
            return self._evaluate_transport_failure(outcome, snapshot, config)

        if not config.should_retry(outcome):
            return Verdict.commit("accepted", accepted=True)
        if snapshot.policy_attempt_count >= config.max_policy_retries + 1:
            return Verdict.commit(
                f"max policy retries exhausted ({config.max_policy_retries})"
            )
        return Verdict.retry(Charge.POLICY, "rejected by should_retry")

    def _evaluate_transport_failure(
        self, outcome: TransportFailure, snapshot: SessionSnapshot, config: RetryConfig
    ) -> Verdict:
        error_type = type(outcome.error).__name__
        if not config.retry_on_transport_error:
            return Verdict.commit(f"{error_type} (retry_on_transport_error=False)")
        if snapshot.transport_failure_count >= config.max_transport_retries:
            return Verdict.commit(
                f"{error_type}, max transport retries exhausted ({config.max_transport_retries})"
            )
        return Verdict.retry(Charge.TRANSPORT, error_type)
