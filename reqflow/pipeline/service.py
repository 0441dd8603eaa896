"""Request orchestrator: the public call surface of the pipeline."""

import asyncio
import time
import uuid
from collections.abc import Mapping
from typing import Any

import structlog

from reqflow.classify.classifier import classify
from reqflow.classify.constants import SUCCESS_STATUSES
from reqflow.classify.models import ClassifyContext, LogicalOutcome
from reqflow.observability.logging import request_context
from reqflow.observability.metrics import PipelineMetrics
from reqflow.observability.sink import LogSink, Severity, StructlogSink, emit
from reqflow.pipeline.errors import (
    INTERCEPTED_CODE,
    INTERCEPTED_MESSAGE,
    ExcludedStatusError,
    InterceptedError,
    LogicalFailure,
    PipelineError,
    RequestTimeoutError,
    TransportError,
)
from reqflow.pipeline.handlers import HandlerRegistry
from reqflow.pipeline.models import RequestOptions, RequestSpec, header_value
from reqflow.proxy.models import snapshot_table
from reqflow.proxy.router import resolve
from reqflow.retry.governor import RetryGovernor
from reqflow.retry.models import RetryPolicy
from reqflow.settings.app import PipelineSettings, get_settings
from reqflow.transport.cancellable import CancellableRequest
from reqflow.transport.httpx_transport import HttpxTransport
from reqflow.transport.models import Attempt, FailureKind, HttpMethod, RequestDescriptor
from reqflow.transport.protocols import Transport
from reqflow.transport.redact import (
    redact_headers,
    redact_params,
    redact_url_credentials,
)


logger = structlog.get_logger()


class HttpService:
    """Sends requests through interception, proxying, retries and classification.

    Each call:
    1. Applies the ``config`` handler to the spec
    2. Asks ``pre_send_intercept`` whether to reject the request unsent
    3. Merges default params unless ``keep_params_intact`` is set
    4. Resolves the URL against a snapshot of the proxy table
    5. Runs the call through the retry/timeout governor
    6. Classifies the result and reports request and response to the sink

    Successful calls return a ``LogicalOutcome``; failed calls raise a
    ``PipelineError`` subclass carrying one.
    """

    def __init__(
        self,
        transport: Transport | None = None,
        handlers: HandlerRegistry | None = None,
        settings: PipelineSettings | None = None,
        sink: LogSink | None = None,
        metrics: PipelineMetrics | None = None,
    ) -> None:
        """Initialize the service.

        Args:
            transport: Transport issuing the calls. Defaults to an owned
                ``HttpxTransport`` using ``settings.base_url``.
            handlers: Handler registry. Defaults apply when omitted.
            settings: Pipeline settings. Loaded from the environment when omitted.
            sink: Logging collaborator for request/response events.
            metrics: Metrics collector.
        """
        self._settings = settings or get_settings()
        self._owns_transport = transport is None
        self._transport: Transport = transport or HttpxTransport(
            base_url=self._settings.base_url
        )
        self._handlers = handlers or HandlerRegistry()
        self._sink = sink or StructlogSink()
        self._metrics = metrics or PipelineMetrics.get_instance()

    @property
    def handlers(self) -> HandlerRegistry:
        """Get the handler registry."""
        return self._handlers

    @property
    def settings(self) -> PipelineSettings:
        """Get the pipeline settings."""
        return self._settings

    async def __aenter__(self) -> "HttpService":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the transport if this service created it."""
        if self._owns_transport and isinstance(self._transport, HttpxTransport):
            await self._transport.aclose()

    async def get(
        self, route: str, params: Any = None, options: RequestOptions | None = None
    ) -> LogicalOutcome:
        """Send a GET request; params go in the query string."""
        return await self.send_request(
            RequestSpec.build(route, HttpMethod.GET, options), params
        )

    async def post(
        self, route: str, params: Any = None, options: RequestOptions | None = None
    ) -> LogicalOutcome:
        """Send a POST request; params go in the JSON body."""
        return await self.send_request(
            RequestSpec.build(route, HttpMethod.POST, options), params
        )

    async def put(
        self, route: str, params: Any = None, options: RequestOptions | None = None
    ) -> LogicalOutcome:
        """Send a PUT request; params go in the JSON body."""
        return await self.send_request(
            RequestSpec.build(route, HttpMethod.PUT, options), params
        )

    async def delete(
        self, route: str, params: Any = None, options: RequestOptions | None = None
    ) -> LogicalOutcome:
        """Send a DELETE request; params go in the JSON body."""
        return await self.send_request(
            RequestSpec.build(route, HttpMethod.DELETE, options), params
        )

    async def send_request(self, spec: RequestSpec, params: Any = None) -> LogicalOutcome:
        """Send one logical request.

        Args:
            spec: Request description.
            params: Caller parameters.

        Returns:
            Successful logical outcome.

        Raises:
            InterceptedError: The pre-send interceptor rejected the request.
            ExcludedStatusError: The server answered an excluded status.
            TransportError: Transport failure after retries.
            RequestTimeoutError: The overall timeout expired.
            LogicalFailure: 2xx response with a non-success application code.
        """
        handlers = self._handlers
        spec = handlers.config(spec)
        return await handlers.around(self._process(spec, params, handlers), spec)

    async def _process(
        self, spec: RequestSpec, params: Any, handlers: HandlerRegistry
    ) -> LogicalOutcome:
        """Run one configured request end to end."""
        start_time_ns = time.perf_counter_ns()
        log = logger.bind(
            component="pipeline", method=spec.method.value, route=spec.route
        )

        with request_context(uuid.uuid4().hex[:12]):
            try:
                rejected = handlers.pre_send_intercept(spec)
                data = self._build_params(spec, params, handlers)
                self._report(spec, Severity.INFO, "http_request", params=redact_params(data))

                if rejected:
                    raise self._intercepted(spec)

                attempt = await self._dispatch(spec, data, handlers)
                outcome = classify(
                    attempt,
                    ClassifyContext(
                        code_keys=tuple(handlers.code_keys()),
                        success_codes=tuple(handlers.success_codes()),
                    ),
                )

                if outcome.success:
                    self._report(
                        spec,
                        Severity.INFO,
                        "http_response",
                        status_code=outcome.status_code,
                        logical_code=outcome.logical_code,
                        body=_loggable_body(attempt, spec),
                    )
                    return outcome

                error = self._to_error(outcome, attempt, spec)
                self._report(
                    spec,
                    Severity.ERROR,
                    "http_response",
                    status_code=outcome.status_code,
                    logical_code=outcome.logical_code,
                    error_type=type(error).__name__,
                    error=str(error),
                    body=_loggable_body(attempt, spec),
                )
                self._report_error(error, spec, handlers, log)
                raise error
            except asyncio.CancelledError:
                log.debug("request_cancelled")
                raise
            finally:
                duration_ms = (time.perf_counter_ns() - start_time_ns) / 1_000_000
                self._metrics.record_request(spec.method.value, duration_ms)

    def _build_params(
        self, spec: RequestSpec, params: Any, handlers: HandlerRegistry
    ) -> Any:
        """Merge caller params over handler defaults unless kept intact."""
        if spec.keep_params_intact:
            return params
        if params is not None and not isinstance(params, Mapping):
            msg = (
                f"params must be a mapping to merge with defaults, got "
                f"{type(params).__name__}; set keep_params_intact to send it as is"
            )
            raise TypeError(msg)
        return {**handlers.default_params(spec), **(params or {})}

    def _intercepted(self, spec: RequestSpec) -> InterceptedError:
        """Build the local failure for a rejected request."""
        payload = {"errcode": INTERCEPTED_CODE, "message": INTERCEPTED_MESSAGE}
        outcome = LogicalOutcome(
            success=False, payload=payload, logical_code=INTERCEPTED_CODE
        )
        self._metrics.record_intercepted()
        self._metrics.record_failure(InterceptedError.__name__)
        self._report(
            spec,
            Severity.ERROR,
            "http_response",
            logical_code=INTERCEPTED_CODE,
            error_type=InterceptedError.__name__,
            body=payload,
        )
        return InterceptedError(
            INTERCEPTED_MESSAGE, outcome, spec.route, spec.method.value
        )

    async def _dispatch(
        self, spec: RequestSpec, data: Any, handlers: HandlerRegistry
    ) -> Attempt:
        """Resolve the URL and headers, then run the governor."""
        url = resolve(spec.route, snapshot_table(handlers.proxy_table()))
        merged = {**spec.headers, **handlers.headers(spec)}
        descriptor = RequestDescriptor(
            method=spec.method,
            url=url,
            headers={key: header_value(value) for key, value in merged.items()},
            body=data,
            stream=spec.stream,
        )
        logger.debug(
            "request_dispatch",
            component="pipeline",
            route=spec.route,
            url=redact_url_credentials(url),
            headers=redact_headers(descriptor.headers),
        )

        governor = RetryGovernor(
            RetryPolicy.from_settings(self._settings, spec.max_retries, spec.timeout_ms),
            sink=self._sink,
            metrics=self._metrics,
        )
        return await governor.run(
            lambda: CancellableRequest(self._transport, descriptor),
            route=spec.route,
            method=spec.method.value,
        )

    def _to_error(
        self, outcome: LogicalOutcome, attempt: Attempt, spec: RequestSpec
    ) -> PipelineError:
        """Pick the typed error for a failed outcome."""
        route, method = spec.route, spec.method.value

        if attempt.error is not None and attempt.error.kind == FailureKind.TIMEOUT:
            return RequestTimeoutError(attempt.error.message, outcome, route, method)

        if outcome.status_code in SUCCESS_STATUSES:
            msg = f"{method} {route} returned application code {outcome.logical_code!r}"
            return LogicalFailure(msg, outcome, route, method)

        message = (
            attempt.error.message
            if attempt.error is not None
            else f"Unexpected status {outcome.status_code}"
        )
        if outcome.status_code in self._settings.excluded_status_codes:
            return ExcludedStatusError(message, outcome, route, method)
        return TransportError(message, outcome, route, method)

    def _report_error(
        self,
        error: PipelineError,
        spec: RequestSpec,
        handlers: HandlerRegistry,
        log: structlog.stdlib.BoundLogger,
    ) -> None:
        """Count the failure and hand it to the error handler."""
        self._metrics.record_failure(type(error).__name__)
        if spec.disable_error_report:
            return
        try:
            handlers.on_error(error, spec)
        except Exception:
            log.exception("error_handler_failed", error_type=type(error).__name__)

    def _report(
        self, spec: RequestSpec, severity: Severity, message: str, **data: Any
    ) -> None:
        """Send an event tagged with method and route unless the spec is silent."""
        if spec.silent:
            return
        emit(
            self._sink,
            severity,
            message,
            method=spec.method.value,
            route=spec.route,
            **data,
        )


def _loggable_body(attempt: Attempt, spec: RequestSpec) -> Any:
    """Body to put in response logs; open streams are not logged."""
    if spec.stream and attempt.ok:
        return "<stream>"
    return attempt.body
