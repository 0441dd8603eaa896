"""Data models for the transport layer."""

from enum import Enum
from typing import Any

import httpx
from pydantic import BaseModel, ConfigDict, Field

from reqflow.transport.constants import HTTP_STATUS_OK_MAX, HTTP_STATUS_OK_MIN


class HttpMethod(str, Enum):
    """HTTP methods the pipeline dispatches."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"


class FailureKind(str, Enum):
    """Classification of transport failures for retry decisions and errors.

    - HTTP_STATUS: Server answered with a non-2xx status
    - NETWORK_TIMEOUT: Transport-level timeout (connect/read/write)
    - CONNECTION_ERROR: Could not establish connection
    - DISPATCH_ERROR: Transport raised while dispatching the call
    - CANCELLED: Call aborted through its cancellation token
    - TIMEOUT: Overall request budget exceeded
    """

    HTTP_STATUS = "HTTP_STATUS"
    NETWORK_TIMEOUT = "NETWORK_TIMEOUT"
    CONNECTION_ERROR = "CONNECTION_ERROR"
    DISPATCH_ERROR = "DISPATCH_ERROR"
    CANCELLED = "CANCELLED"
    TIMEOUT = "TIMEOUT"


class TransportFailure(BaseModel):
    """Typed failure from a single transport execution.

    Transport failures often carry the real response one level down,
    so ``status_code`` and ``body`` are kept here when available.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", arbitrary_types_allowed=True)

    kind: FailureKind = Field(description="Classification of the failure")
    message: str = Field(min_length=1, description="Human-readable message")
    status_code: int | None = Field(
        default=None, description="HTTP status code if available"
    )
    body: Any = Field(default=None, description="Response body if available")


class Attempt(BaseModel):
    """Result of one transport execution.

    Either a completed response (``error`` is None) or a failure. The
    attempt is classified and discarded within a single logical request.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", arbitrary_types_allowed=True)

    status_code: int | None = Field(
        default=None, description="HTTP status code, None if unknown"
    )
    body: Any = Field(default=None, description="Response payload")
    headers: dict[str, str] = Field(
        default_factory=dict, description="Response headers"
    )
    error: TransportFailure | None = Field(
        default=None, description="Failure details if the attempt failed"
    )

    @property
    def ok(self) -> bool:
        """Check if the call completed without failure and with a 2xx status.

        A transport may return a non-2xx response without populating
        ``error``; such an attempt is still a failure.
        """
        return self.error is None and self.is_2xx

    @property
    def is_2xx(self) -> bool:
        """Check if the attempt carries a 2xx status code."""
        return (
            self.status_code is not None
            and HTTP_STATUS_OK_MIN <= self.status_code < HTTP_STATUS_OK_MAX
        )

    @classmethod
    def failure(
        cls,
        kind: FailureKind,
        message: str,
        status_code: int | None = None,
        body: Any = None,
    ) -> "Attempt":
        """Build a failed attempt.

        Args:
            kind: Failure classification.
            message: Human-readable message.
            status_code: Response status if one was received.
            body: Response body if one was received.

        Returns:
            Attempt with ``error`` populated.
        """
        return cls(
            status_code=status_code,
            body=body,
            error=TransportFailure(
                kind=kind,
                message=message,
                status_code=status_code,
                body=body,
            ),
        )

    @classmethod
    def from_exception(cls, exc: BaseException) -> "Attempt":
        """Convert an exception raised by a transport into a failed attempt.

        ``httpx.HTTPStatusError`` keeps its response status and body on the
        nested failure only, leaving the top-level status unknown.

        Args:
            exc: The exception raised during dispatch.

        Returns:
            Failed attempt describing the exception.
        """
        message = f"{type(exc).__name__}: {exc}"
        if isinstance(exc, httpx.HTTPStatusError):
            return cls(
                error=TransportFailure(
                    kind=FailureKind.HTTP_STATUS,
                    message=message,
                    status_code=exc.response.status_code,
                    body=decode_body(exc.response),
                ),
            )
        if isinstance(exc, httpx.TimeoutException):
            return cls.failure(FailureKind.NETWORK_TIMEOUT, message)
        if isinstance(exc, httpx.ConnectError):
            return cls.failure(FailureKind.CONNECTION_ERROR, message)
        return cls.failure(FailureKind.DISPATCH_ERROR, message)


class RequestDescriptor(BaseModel):
    """Everything the transport needs to issue one call."""

    model_config = ConfigDict(frozen=True, extra="forbid", arbitrary_types_allowed=True)

    method: HttpMethod
    url: str = Field(min_length=1)
    headers: dict[str, str] = Field(default_factory=dict)
    body: Any = None
    stream: bool = Field(
        default=False,
        description="Response is consumed as a stream and must not be aborted",
    )


def decode_body(response: httpx.Response) -> Any:
    """Decode a response body as JSON, falling back to text.

    Empty and unread bodies decode to None.
    """
    try:
        content = response.content
    except httpx.ResponseNotRead:
        return None
    if not content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text
