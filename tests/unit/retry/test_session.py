r"""Unit tests for request session state."""

from __future__ import annotations

import time

from retrystream.retry.session import RequestSession, SessionSnapshot, SessionState


def test_request_session_defaults() -> None:
    session = RequestSession()
    assert session.attempt_count == 0
    assert session.transport_failure_count == 0
    assert session.current_handle is None
    assert session.first_attempt_time is None
    assert session.state is SessionState.PENDING
    assert session.is_pending


def test_request_session_not_pending_after_terminal_state() -> None:
    session = RequestSession(state=SessionState.ABORTED)
    assert not session.is_pending


def test_request_session_elapsed_ms() -> None:
    session = RequestSession(first_attempt_time=time.time() - 2.0)
    assert 2000 <= session.elapsed_ms() < 3000


def test_request_session_elapsed_ms_before_first_attempt() -> None:
    assert RequestSession().elapsed_ms() == 0.0


def test_request_session_start_attempt() -> None:
    session = RequestSession()
    assert session.start_attempt() == 1
    first_attempt_time = session.first_attempt_time

    assert session.start_attempt() == 2
    assert session.attempt_count == 2
    assert first_attempt_time is not None
    assert session.first_attempt_time == first_attempt_time


def test_request_session_snapshot() -> None:
    session = RequestSession(attempt_count=5, transport_failure_count=2)
    snapshot = session.snapshot()

    assert snapshot == SessionSnapshot(attempt_count=5, transport_failure_count=2)
    assert snapshot.policy_attempt_count == 3
    session.attempt_count += 1
    assert snapshot.attempt_count == 5
