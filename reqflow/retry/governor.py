"""Retry-with-backoff and overall timeout around cancellable requests."""

import asyncio
from collections.abc import Callable

import structlog

from reqflow.classify.classifier import resolve_status
from reqflow.observability.metrics import PipelineMetrics
from reqflow.observability.sink import LogSink, Severity, StructlogSink, emit
from reqflow.retry.constants import COMPONENT_RETRY
from reqflow.retry.models import RetryPolicy, RetryState
from reqflow.retry.state_machine import RetryStateMachine
from reqflow.transport.cancellable import CancellableRequest
from reqflow.transport.models import Attempt, FailureKind


logger = structlog.get_logger()


async def _backoff(delay_ms: int) -> None:
    """Wait out a retry delay."""
    await asyncio.sleep(delay_ms / 1000.0)


class RetryGovernor:
    """Drives one logical request through attempts, backoff and timeout.

    Each attempt is a fresh ``CancellableRequest``. A single wall-clock
    timeout covers every attempt and every backoff delay; when it expires
    the in-flight attempt is cancelled, which aborts its transport call.
    """

    def __init__(
        self,
        policy: RetryPolicy,
        sink: LogSink | None = None,
        metrics: PipelineMetrics | None = None,
    ) -> None:
        """Initialize the governor.

        Args:
            policy: Retry budget, backoff unit, timeout and excluded statuses.
            sink: Logging collaborator for retry warnings.
            metrics: Metrics collector.
        """
        self._policy = policy
        self._sink = sink or StructlogSink(component=COMPONENT_RETRY)
        self._metrics = metrics or PipelineMetrics.get_instance()

    @property
    def policy(self) -> RetryPolicy:
        """Get the retry policy."""
        return self._policy

    async def run(
        self,
        request_factory: Callable[[], CancellableRequest],
        route: str,
        method: str,
    ) -> Attempt:
        """Run attempts until success, a terminal failure or the timeout.

        Args:
            request_factory: Builds a new cancellable request per attempt.
            route: Logical route, for logging.
            method: HTTP method, for logging.

        Returns:
            The successful attempt, the last failed attempt, or a
            ``FailureKind.TIMEOUT`` attempt.
        """
        machine = RetryStateMachine(route=route)
        state = RetryState()
        log = logger.bind(component=COMPONENT_RETRY, route=route, method=method)

        try:
            async with asyncio.timeout(self._policy.timeout_ms / 1000.0):
                return await self._attempt_loop(
                    request_factory, machine, state, route, method, log
                )
        except TimeoutError:
            if machine.is_terminal():
                raise
            machine.to_failed()
            self._metrics.record_timeout()
            log.info(
                "request_timed_out",
                timeout_ms=self._policy.timeout_ms,
                attempt_index=state.attempt_index,
            )
            self._report_retries(state, route, method)
            return Attempt.failure(
                FailureKind.TIMEOUT,
                f"Request exceeded {self._policy.timeout_ms} ms",
            )

    async def _attempt_loop(
        self,
        request_factory: Callable[[], CancellableRequest],
        machine: RetryStateMachine,
        state: RetryState,
        route: str,
        method: str,
        log: structlog.stdlib.BoundLogger,
    ) -> Attempt:
        """Attempt, classify the transport result, back off and repeat."""
        while True:
            attempt = await request_factory().result()

            if attempt.ok:
                machine.to_succeeded()
                return attempt

            if not self._policy.should_retry(attempt, state.attempt_index):
                machine.to_failed()
                log.debug(
                    "retry_stopped",
                    attempt_index=state.attempt_index,
                    status_code=resolve_status(attempt),
                    excluded=self._policy.is_excluded(attempt),
                )
                self._report_retries(state, route, method)
                return attempt

            state.scheduled_delay_ms = self._policy.get_delay_ms(state.attempt_index)
            machine.to_retrying()
            self._metrics.record_retry()
            log.debug(
                "retry_scheduled",
                attempt_index=state.attempt_index,
                delay_ms=state.scheduled_delay_ms,
                max_retries=self._policy.max_retries,
                status_code=resolve_status(attempt),
            )
            await _backoff(state.scheduled_delay_ms)
            state.attempt_index += 1
            machine.to_attempting()

    def _report_retries(self, state: RetryState, route: str, method: str) -> None:
        """Warn about a failed request that consumed retries."""
        if state.attempt_index == 0:
            return
        emit(
            self._sink,
            Severity.WARNING,
            "request_retried",
            route=route,
            method=method,
            retry_attempts=state.attempt_index,
        )
