"""Unit tests for the retry/timeout governor."""

from unittest.mock import AsyncMock, call, patch

import pytest

from reqflow.observability.metrics import PipelineMetrics
from reqflow.observability.sink import Severity
from reqflow.retry.governor import RetryGovernor
from reqflow.retry.models import RetryPolicy
from reqflow.transport.cancellable import CancellableRequest
from reqflow.transport.models import (
    Attempt,
    FailureKind,
    HttpMethod,
    RequestDescriptor,
)
from reqflow.transport.protocols import Transport
from tests.helpers.transports import (
    HangingTransport,
    RecordingSink,
    ScriptedTransport,
    failed_attempt,
    ok_attempt,
)


_DESCRIPTOR = RequestDescriptor(method=HttpMethod.GET, url="https://svc.example/users")


def _factory(transport: Transport):
    return lambda: CancellableRequest(transport, _DESCRIPTOR)


async def _run(governor: RetryGovernor, transport: Transport):
    return await governor.run(_factory(transport), route="/api/users", method="GET")


class TestRetryGovernor:
    """Tests for RetryGovernor.run."""

    @pytest.mark.asyncio
    async def test_success_on_first_attempt(self) -> None:
        """A completed attempt is returned without retries."""
        transport = ScriptedTransport(ok_attempt({"errcode": 0}))
        sink = RecordingSink()

        attempt = await _run(RetryGovernor(RetryPolicy(max_retries=3), sink), transport)

        assert attempt.body == {"errcode": 0}
        assert len(transport.calls) == 1
        assert sink.events == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("max_retries", [0, 1, 3])
    async def test_always_failing_makes_n_plus_one_attempts(
        self, max_retries: int
    ) -> None:
        """N retries mean N+1 attempts with delays 0, unit, 2*unit, ..."""
        transport = ScriptedTransport(failed_attempt(503))
        governor = RetryGovernor(RetryPolicy(max_retries=max_retries, backoff_unit_ms=1000))

        with patch("reqflow.retry.governor._backoff", new_callable=AsyncMock) as backoff:
            attempt = await _run(governor, transport)

        assert attempt.status_code == 503
        assert len(transport.calls) == max_retries + 1
        assert backoff.await_args_list == [call(i * 1000) for i in range(max_retries)]

    @pytest.mark.asyncio
    async def test_recovers_after_retry(self) -> None:
        """A later success ends the sequence."""
        transport = ScriptedTransport(failed_attempt(None), ok_attempt({"ok": True}))
        governor = RetryGovernor(RetryPolicy(max_retries=3, backoff_unit_ms=0))

        attempt = await _run(governor, transport)

        assert attempt.ok is True
        assert len(transport.calls) == 2
        assert PipelineMetrics.get_instance().retry_total == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [401, 404])
    async def test_excluded_status_never_retried(self, status: int) -> None:
        """401/404 fail immediately regardless of the budget."""
        transport = ScriptedTransport(failed_attempt(status))
        sink = RecordingSink()
        governor = RetryGovernor(RetryPolicy(max_retries=5, backoff_unit_ms=0), sink)

        attempt = await _run(governor, transport)

        assert attempt.status_code == status
        assert len(transport.calls) == 1
        assert sink.named("request_retried") == []

    @pytest.mark.asyncio
    async def test_excluded_status_after_retries(self) -> None:
        """An excluded status stops a sequence already in progress."""
        transport = ScriptedTransport(failed_attempt(500), failed_attempt(401))
        governor = RetryGovernor(RetryPolicy(max_retries=5, backoff_unit_ms=0))

        attempt = await _run(governor, transport)

        assert attempt.status_code == 401
        assert len(transport.calls) == 2

    @pytest.mark.asyncio
    async def test_warns_when_retries_were_consumed(self) -> None:
        """Exhausted retries are reported with route and retry count."""
        sink = RecordingSink()
        governor = RetryGovernor(RetryPolicy(max_retries=2, backoff_unit_ms=0), sink)

        await _run(governor, ScriptedTransport(failed_attempt(500)))

        events = sink.named("request_retried")
        assert len(events) == 1
        severity, _, data = events[0]
        assert severity == Severity.WARNING
        assert data == {"route": "/api/users", "method": "GET", "retry_attempts": 2}

    @pytest.mark.asyncio
    async def test_no_warning_without_retries(self) -> None:
        """Failures with no retries are not reported here."""
        sink = RecordingSink()
        governor = RetryGovernor(RetryPolicy(max_retries=0), sink)

        await _run(governor, ScriptedTransport(failed_attempt(500)))

        assert sink.events == []


    @pytest.mark.asyncio
    async def test_errorless_server_error_is_retried(self) -> None:
        """A 5xx attempt without a transport error still counts as a failure."""
        transport = ScriptedTransport(Attempt(status_code=500, body={"x": 1}))
        governor = RetryGovernor(RetryPolicy(max_retries=3, backoff_unit_ms=0))

        attempt = await _run(governor, transport)

        assert attempt.status_code == 500
        assert attempt.ok is False
        assert len(transport.calls) == 4

    @pytest.mark.asyncio
    async def test_errorless_excluded_status_not_retried(self) -> None:
        """Excluded statuses stop retries even without a transport error."""
        transport = ScriptedTransport(Attempt(status_code=404))
        governor = RetryGovernor(RetryPolicy(max_retries=3, backoff_unit_ms=0))

        await _run(governor, transport)

        assert len(transport.calls) == 1


class TestRetryGovernorTimeout:
    """Tests for the overall timeout."""

    @pytest.mark.asyncio
    async def test_timeout_cancels_in_flight_attempt(self) -> None:
        """Expiry aborts the transport call and returns a timeout attempt."""
        transport = HangingTransport()
        governor = RetryGovernor(RetryPolicy(timeout_ms=20))

        attempt = await _run(governor, transport)

        assert attempt.error is not None
        assert attempt.error.kind == FailureKind.TIMEOUT
        assert transport.tokens[0].cancelled is True
        assert PipelineMetrics.get_instance().timeouts_total == 1

    @pytest.mark.asyncio
    async def test_timeout_covers_backoff(self) -> None:
        """The budget spans retries: expiry during backoff ends the request."""
        transport = ScriptedTransport(failed_attempt(500))
        sink = RecordingSink()
        governor = RetryGovernor(
            RetryPolicy(max_retries=5, backoff_unit_ms=10_000, timeout_ms=50), sink
        )

        attempt = await _run(governor, transport)

        assert attempt.error is not None
        assert attempt.error.kind == FailureKind.TIMEOUT
        # Attempt 0 fails, zero delay, attempt 1 fails, 10s delay is cut short.
        assert len(transport.calls) == 2
        assert sink.named("request_retried")[0][2]["retry_attempts"] == 1
