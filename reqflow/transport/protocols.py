"""Protocol interface for transports."""

from typing import Any, Protocol, runtime_checkable

from reqflow.transport.cancellation import CancellationToken
from reqflow.transport.models import Attempt, HttpMethod


@runtime_checkable
class Transport(Protocol):
    """Protocol for the component that issues a single HTTP call.

    Any object implementing ``execute`` with the matching signature can
    back the pipeline. Implementations must not raise for transport
    failures; they return a failed ``Attempt`` with status and body where
    available. When ``token`` fires, the in-flight call must be aborted.
    """

    async def execute(
        self,
        method: HttpMethod,
        url: str,
        headers: dict[str, str],
        body: Any,
        token: CancellationToken,
        *,
        stream: bool = False,
    ) -> Attempt:
        """Issue one call.

        Args:
            method: HTTP method.
            url: Fully resolved URL.
            headers: Request headers.
            body: Request parameters or payload.
            token: Out-of-band cancellation signal.
            stream: Return the response unread for streaming consumption.

        Returns:
            Attempt describing the outcome.
        """
        ...
