r"""Unit tests for retry policy."""

from __future__ import annotations

import httpx
import pytest

from retrystream.core.config import RetryConfig
from retrystream.outcome import Responded, TransportFailure
from retrystream.retry.policy import Charge, RetryPolicy, Verdict
from retrystream.retry.session import SessionSnapshot


def always_retry(outcome: Responded) -> bool:  # noqa: ARG001
    return True


def never_retry(outcome: Responded) -> bool:  # noqa: ARG001
    return False


def snapshot(attempt_count: int = 1, transport_failure_count: int = 0) -> SessionSnapshot:
    return SessionSnapshot(
        attempt_count=attempt_count, transport_failure_count=transport_failure_count
    )


#############################
#     Tests for Verdict     #
#############################


def test_verdict_commit() -> None:
    verdict = Verdict.commit("done", accepted=True)
    assert not verdict.should_retry
    assert verdict.charge is None
    assert verdict.accepted


def test_verdict_retry() -> None:
    verdict = Verdict.retry(Charge.POLICY, "status 503")
    assert verdict.should_retry
    assert verdict.charge is Charge.POLICY
    assert not verdict.accepted


#################################################
#     Tests for RetryPolicy (transport errors)  #
#################################################


def test_transport_failure_retried() -> None:
    verdict = RetryPolicy().evaluate(
        TransportFailure(ConnectionError("dns")), snapshot(), RetryConfig()
    )
    assert verdict.charge is Charge.TRANSPORT
    assert "ConnectionError" in verdict.reason


@pytest.mark.parametrize(("failures", "should_retry"), [(0, True), (1, True), (2, False), (3, False)])
def test_transport_failure_budget(failures: int, should_retry: bool) -> None:
    verdict = RetryPolicy().evaluate(
        TransportFailure(ConnectionError("dns")),
        snapshot(attempt_count=failures + 1, transport_failure_count=failures),
        RetryConfig(max_transport_retries=2),
    )
    assert verdict.should_retry is should_retry


def test_transport_failure_zero_budget() -> None:
    verdict = RetryPolicy().evaluate(
        TransportFailure(ConnectionError("dns")), snapshot(), RetryConfig(max_transport_retries=0)
    )
    assert not verdict.should_retry
    assert not verdict.accepted


def test_transport_failure_legacy_mode_commits() -> None:
    verdict = RetryPolicy().evaluate(
        TransportFailure(ConnectionError("dns")),
        snapshot(),
        RetryConfig(retry_on_transport_error=False, max_transport_retries=10),
    )
    assert not verdict.should_retry
    assert "retry_on_transport_error=False" in verdict.reason


def test_transport_failure_ignores_policy_budget() -> None:
    verdict = RetryPolicy().evaluate(
        TransportFailure(ConnectionError("dns")),
        snapshot(attempt_count=10, transport_failure_count=0),
        RetryConfig(max_policy_retries=0),
    )
    assert verdict.charge is Charge.TRANSPORT


###########################################
#     Tests for RetryPolicy (responses)   #
###########################################


def test_response_accepted() -> None:
    verdict = RetryPolicy().evaluate(Responded(httpx.Response(200)), snapshot(), RetryConfig())
    assert not verdict.should_retry
    assert verdict.accepted


def test_response_rejected_retried() -> None:
    verdict = RetryPolicy().evaluate(Responded(httpx.Response(503)), snapshot(), RetryConfig())
    assert verdict.charge is Charge.POLICY


@pytest.mark.parametrize(("attempts", "should_retry"), [(1, True), (2, True), (3, False), (4, False)])
def test_response_policy_budget(attempts: int, should_retry: bool) -> None:
    verdict = RetryPolicy().evaluate(
        Responded(httpx.Response(503)),
        snapshot(attempt_count=attempts),
        RetryConfig(max_policy_retries=2),
    )
    assert verdict.should_retry is should_retry
    assert not verdict.accepted


def test_response_policy_budget_excludes_transport_attempts() -> None:
    verdict = RetryPolicy().evaluate(
        Responded(httpx.Response(503)),
        snapshot(attempt_count=4, transport_failure_count=2),
        RetryConfig(max_policy_retries=2, max_transport_retries=2),
    )
    assert verdict.charge is Charge.POLICY


def test_response_custom_predicate() -> None:
    policy = RetryPolicy()
    assert policy.evaluate(
        Responded(httpx.Response(200)), snapshot(), RetryConfig(should_retry=always_retry)
    ).should_retry
    assert not policy.evaluate(
        Responded(httpx.Response(503)), snapshot(), RetryConfig(should_retry=never_retry)
    ).should_retry


def test_response_legacy_mode_does_not_affect_responses() -> None:
    verdict = RetryPolicy().evaluate(
        Responded(httpx.Response(503)), snapshot(), RetryConfig(retry_on_transport_error=False)
    )
    assert verdict.charge is Charge.POLICY


def test_evaluate_is_pure() -> None:
    policy = RetryPolicy()
    outcome = Responded(httpx.Response(503))
    state = snapshot(attempt_count=2)
    config = RetryConfig()

    assert policy.evaluate(outcome, state, config) == policy.evaluate(outcome, state, config)
    assert state == snapshot(attempt_count=2)
