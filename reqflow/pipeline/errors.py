"""Typed failures surfaced to pipeline callers."""

from reqflow.classify.models import LogicalOutcome


# Logical code of a request rejected before sending
INTERCEPTED_CODE = 11001
INTERCEPTED_MESSAGE = "request intercepted, not sent"


class PipelineError(Exception):
    """Base class for every failure a request can end with.

    Attributes:
        outcome: Classified outcome; ``outcome.payload`` is what the server
            (or the pipeline) produced.
        route: Logical route of the request.
        method: HTTP method of the request.
    """

    def __init__(
        self,
        message: str,
        outcome: LogicalOutcome,
        route: str,
        method: str,
    ) -> None:
        super().__init__(message)
        self.outcome = outcome
        self.route = route
        self.method = method

    @property
    def status_code(self) -> int:
        """Effective transport status, -1 if unknown."""
        return self.outcome.status_code

    @property
    def payload(self) -> object:
        """Failure payload carried by the outcome."""
        return self.outcome.payload


class TransportError(PipelineError):
    """Network, connection or HTTP status failure after retries."""


class ExcludedStatusError(TransportError):
    """401/404-style failure that is never retried."""


class RequestTimeoutError(PipelineError, TimeoutError):
    """Overall request budget exceeded."""


class LogicalFailure(PipelineError):
    """2xx response whose body carries a non-success application code.

    ``payload`` is the raw response body.
    """

    @property
    def logical_code(self) -> object:
        """Application code read from the body."""
        return self.outcome.logical_code


class InterceptedError(PipelineError):
    """Request rejected by the pre-send interceptor; nothing was sent."""
