r"""Retry orchestrator driving one logical request.

This module provides the RetryOrchestrator class, the state machine that
runs attempts, consults the retry policy, waits between attempts and
delivers the committed outcome to the caller.
"""

from __future__ import annotations

__all__ = ["Phase", "RetryOrchestrator"]

import asyncio
import enum
import logging
from typing import TYPE_CHECKING, Any

from retrystream.core.config import RetryConfig
from retrystream.defaults import get_default_transport
from retrystream.events import RequestInfo
from retrystream.outcome import TransportFailure
from retrystream.relay import StreamRelay
from retrystream.retry.delay import DelayCalculator
from retrystream.retry.executor import AttemptExecutor
from retrystream.retry.policy import Charge, RetryPolicy
from retrystream.retry.session import RequestSession, SessionState

if TYPE_CHECKING:
    from retrystream.outcome import AttemptOutcome
    from retrystream.relay import AttemptSink
    from retrystream.retry.policy import Verdict
    from retrystream.stream import RetryStream

logger: logging.Logger = logging.getLogger(__name__)


class Phase(enum.Enum):
    r"""Position of the orchestrator in its state machine."""

    IDLE = "idle"
    ATTEMPTING = "attempting"
    DECIDING = "deciding"
    SCHEDULING = "scheduling"
    COMMITTING = "committing"
    DONE = "done"


class RetryOrchestrator:
    """Drives the attempts of one logical request until an outcome is
    committed.

    The orchestrator is the only owner of the ``RequestSession``: it
    counts attempts, charges retries to their budget, holds the stream of
    the attempt in flight and sets the terminal state. Exactly one attempt
    is in flight at a time, and attempt n+1 starts only once attempt n has
    been decided and, in stream mode, its output discarded.

    In buffered mode (``stream`` is ``None``) ``run`` returns the
    committed outcome. In stream mode the committed response and body are
    relayed to ``stream`` before ``run`` returns.

    Args:
        options: The request options handed to the transport.
        config: The retry configuration. Defaults to ``RetryConfig()``.
        stream: The external stream, for stream mode.
        policy: The retry policy. Defaults to ``RetryPolicy()``.
        delay_calculator: The delay calculator. Defaults to
            ``DelayCalculator()``.

    Example:
        ```pycon
        >>> import asyncio
        >>> import httpx
        >>> from retrystream.core.config import RetryConfig
        >>> from retrystream.retry import RetryOrchestrator
        >>> from retrystream.transport import HttpxTransport
        >>> async def main():
        ...     async with httpx.AsyncClient() as client:
        ...         config = RetryConfig(transport=HttpxTransport(client=client))
        ...         orchestrator = RetryOrchestrator("https://api.example.com/data", config)
        ...         return await orchestrator.run()
        ...
        >>> asyncio.run(main())  # doctest: +SKIP

        ```
    """

    def __init__(
        self,
        options: Any,
        config: RetryConfig | None = None,
        *,
        stream: RetryStream | None = None,
        policy: RetryPolicy | None = None,
        delay_calculator: DelayCalculator | None = None,
    ) -> None:
        self.options = options
        self.config = config if config is not None else RetryConfig()
        transport = (
            self.config.transport
            if self.config.transport is not None
            else get_default_transport()
        )
        self.executor = AttemptExecutor(transport, object_mode=self.config.object_mode)
        self.policy = policy if policy is not None else RetryPolicy()
        self.delay_calculator = (
            delay_calculator if delay_calculator is not None else DelayCalculator()
        )
        self.session = RequestSession()
        self.stream = stream
        self.relay = StreamRelay(stream) if stream is not None else None
        self.phase = Phase.IDLE
        self._sink: AttemptSink | None = None
        self._task: asyncio.Task[Any] | None = None
        if stream is not None:
            stream.bind(self)

    @property
    def state(self) -> SessionState:
        return self.session.state

    @property
    def done(self) -> bool:
        return self._task is not None and self._task.done()

    def start(self, coro: Any = None) -> asyncio.Task[Any]:
        """Run the request in a new task of the running loop.

        Args:
            coro: The coroutine to run, wrapping ``run``. Defaults to
                ``run()``.

        Returns:
            The task.
        """
        self._task = asyncio.get_running_loop().create_task(
            coro if coro is not None else self.run()
        )
        return self._task

    def abort(self) -> None:
        """Abort the request.

        Cancels the attempt in flight and any pending retry, and prevents
        any further attempt. In stream mode the stream ends without
        ``response`` or ``complete``. No-op once the request is over, or
        once the stream has ended.
        """
        if not self.session.is_pending:
            return
        if self.stream is not None and self.stream.ended:
            # the stream already delivered its terminal event
            return
        logger.debug(f"Aborting request after {self.session.attempt_count} attempt(s)")
        self.session.state = SessionState.ABORTED
        if self.stream is not None:
            self.stream.close()
        if self._task is not None and not self._task.done():
            self._task.cancel()

    async def wait(self) -> None:
        """Wait until the task started with ``start`` has finished.

        Raises:
            Exception: Any exception the task ended with, except
                cancellation.
        """
        if self._task is None:
            return
        await asyncio.wait({self._task})
        if not self._task.cancelled():
            self._task.result()

    async def run(self) -> AttemptOutcome:
        """Run attempts until an outcome is committed.

        Returns:
            The committed outcome: ``Responded`` with the accepted or last
            rejected response, or ``TransportFailure`` with the last
            transport error.

        Raises:
            asyncio.CancelledError: If the request was aborted.
        """
        if self._task is None:
            self._task = asyncio.current_task()
        try:
            self._ensure_pending()
            if self.config.current_attempt_offset > 0:
                await self._schedule(self.config.current_attempt_offset)
            while True:
                outcome = await self._attempt()
                self._ensure_pending()
                self.phase = Phase.DECIDING
                verdict = self.policy.evaluate(outcome, self.session.snapshot(), self.config)
                if not verdict.should_retry:
                    return await self._commit(outcome, verdict)
                retry_number = self._charge(verdict.charge)
                logger.debug(
                    f"Attempt {self.session.attempt_count} will be retried ({verdict.reason})"
                )
                if self._sink is not None:
                    await self.relay.discard(self._sink)
                    self._sink = None
                await self._schedule(retry_number)
        except asyncio.CancelledError:
            await self._release_after_abort()
            raise
        except Exception:
            self.session.state = SessionState.FAILED
            self.phase = Phase.DONE
            if self.relay is not None:
                await self.relay.cancel()
            await self._release_in_flight()
            raise

    def _ensure_pending(self) -> None:
        # abort() may run synchronously from a listener inside this task
        if not self.session.is_pending:
            raise asyncio.CancelledError

    async def _attempt(self) -> AttemptOutcome:
        attempt = self.session.start_attempt()
        self.phase = Phase.ATTEMPTING
        logger.debug(f"Starting attempt {attempt}")
        if self.stream is None:
            return await self.executor.run(self.options)

        self.stream.emit_request(RequestInfo(options=self.options, attempt=attempt))
        self._ensure_pending()
        self._sink = self.relay.begin_attempt(attempt)
        outcome, handle = await self.executor.open(self.options)
        if handle is not None:
            self.session.current_handle = handle
            self._sink.attach(handle, release=self._release_in_flight)
        return outcome

    def _charge(self, charge: Charge) -> int:
        # returns the 1-indexed ordinal of the failed attempt within its budget
        if charge is Charge.TRANSPORT:
            self.session.transport_failure_count += 1
            return self.session.transport_failure_count
        return self.session.snapshot().policy_attempt_count

    async def _schedule(self, retry_number: int) -> None:
        self.phase = Phase.SCHEDULING
        delay_ms = self.delay_calculator.next_delay(
            retry_number, self.config, self.session.elapsed_ms()
        )
        logger.debug(f"Waiting {max(delay_ms, 0) / 1000:.2f}s before the next attempt")
        await asyncio.sleep(max(delay_ms, 0) / 1000)
        self._ensure_pending()

    async def _commit(self, outcome: AttemptOutcome, verdict: Verdict) -> AttemptOutcome:
        self.phase = Phase.COMMITTING
        logger.debug(
            f"Committing attempt {self.session.attempt_count} of the request ({verdict.reason})"
        )
        if self.stream is not None:
            await self._commit_stream(outcome)
        self.session.state = SessionState.SUCCEEDED if verdict.accepted else SessionState.FAILED
        self.phase = Phase.DONE
        return outcome

    async def _commit_stream(self, outcome: AttemptOutcome) -> None:
        sink, self._sink = self._sink, None
        if isinstance(outcome, TransportFailure):
            await self.relay.discard(sink)
            self.stream.fail(outcome.error)
            return
        self.stream.emit_response(outcome.response)
        self.relay.commit(sink)
        await self.relay.drain(sink)
        handle, self.session.current_handle = self.session.current_handle, None
        await self.executor.close_current(handle)

    async def _release_in_flight(self) -> None:
        handle, self.session.current_handle = self.session.current_handle, None
        await self.executor.abort_current(handle)

    async def _release_after_abort(self) -> None:
        logger.debug("Request aborted, releasing the attempt in flight")
        if self.session.is_pending:
            self.session.state = SessionState.ABORTED
        self.phase = Phase.DONE
        if self.relay is not None:
            await self.relay.cancel()
        await self._release_in_flight()
        if self.stream is not None:
            self.stream.close()
