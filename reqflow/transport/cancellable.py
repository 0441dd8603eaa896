"""Cancellable, observe-once wrapper around a single transport call."""

import asyncio

import structlog

from reqflow.transport.cancellation import CancellationToken
from reqflow.transport.constants import COMPONENT_TRANSPORT, CONSUMER_CANCEL_REASON
from reqflow.transport.models import Attempt, RequestDescriptor
from reqflow.transport.protocols import Transport
from reqflow.transport.redact import redact_url_credentials


logger = structlog.get_logger()


class CancellableRequest:
    """One transport call that yields exactly one ``Attempt``.

    ``result()`` may be awaited once. Exceptions raised by the transport,
    synchronously or while awaiting, are converted into a failed attempt.
    When the consumer is cancelled, the transport is told to abort through
    the cancellation token, except for streaming requests: an in-flight
    stream is left to the transport to drain or close.
    """

    def __init__(self, transport: Transport, descriptor: RequestDescriptor) -> None:
        """Initialize the request.

        Args:
            transport: Transport that will issue the call.
            descriptor: Method, URL, headers, body and stream flag.
        """
        self._transport = transport
        self._descriptor = descriptor
        self._token = CancellationToken()
        self._observed = False
        self._log = logger.bind(
            component=COMPONENT_TRANSPORT,
            method=descriptor.method.value,
            url=redact_url_credentials(descriptor.url),
        )

    @property
    def descriptor(self) -> RequestDescriptor:
        """Get the call descriptor."""
        return self._descriptor

    @property
    def token(self) -> CancellationToken:
        """Get the cancellation token handed to the transport."""
        return self._token

    def cancel(self, reason: str = CONSUMER_CANCEL_REASON) -> bool:
        """Abort the call out-of-band.

        No-op for streaming requests.

        Args:
            reason: Why the call is being aborted.

        Returns:
            True if the transport was signalled.
        """
        if self._descriptor.stream:
            return False
        return self._token.cancel(reason)

    async def result(self) -> Attempt:
        """Run the call and return its attempt.

        Returns:
            The transport's attempt, or a failed attempt if it raised.

        Raises:
            RuntimeError: If the result was already observed.
            asyncio.CancelledError: If the consumer was cancelled.
        """
        if self._observed:
            msg = "CancellableRequest result can only be observed once"
            raise RuntimeError(msg)
        self._observed = True

        descriptor = self._descriptor
        try:
            return await self._transport.execute(
                descriptor.method,
                descriptor.url,
                dict(descriptor.headers),
                descriptor.body,
                self._token,
                stream=descriptor.stream,
            )
        except asyncio.CancelledError:
            aborted = self.cancel()
            self._log.debug("request_cancelled", transport_aborted=aborted)
            raise
        except Exception as e:
            self._log.error(
                "transport_dispatch_error",
                error=str(e),
                error_type=type(e).__name__,
            )
            return Attempt.from_exception(e)
