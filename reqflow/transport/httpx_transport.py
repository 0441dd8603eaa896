"""Default transport backed by ``httpx.AsyncClient``."""

import asyncio
from typing import Any

import httpx
import structlog

from reqflow.transport.cancellation import CancellationToken
from reqflow.transport.constants import COMPONENT_TRANSPORT
from reqflow.transport.models import Attempt, FailureKind, HttpMethod, decode_body
from reqflow.transport.redact import redact_url_credentials


logger = structlog.get_logger()


class HttpxTransport:
    """Transport issuing one call per ``execute`` through httpx.

    The call runs in its own task so that it can be aborted out-of-band
    through the cancellation token. GET sends the body as query params;
    POST, PUT and DELETE send it as a JSON body. Non-2xx responses are
    returned as failed attempts carrying the status and decoded body.
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        base_url: str | None = None,
    ) -> None:
        """Initialize the transport.

        Args:
            client: Client to issue calls with. When omitted, the transport
                creates and owns one.
            base_url: Base URL for relative routes of an owned client.
        """
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=base_url or "",
            follow_redirects=True,
            timeout=None,
        )
        self._background: set[asyncio.Task[Any]] = set()
        self._log = logger.bind(component=COMPONENT_TRANSPORT)

    async def __aenter__(self) -> "HttpxTransport":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying client if this transport created it."""
        if self._owns_client:
            await self._client.aclose()

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
        """Issue one call, aborting it if ``token`` fires.

        Args:
            method: HTTP method.
            url: Fully resolved URL.
            headers: Request headers.
            body: Query params for GET, JSON payload otherwise.
            token: Out-of-band cancellation signal.
            stream: Return the open response as the body without reading it.

        Returns:
            Attempt describing the outcome.
        """
        log = self._log.bind(method=method.value, url=redact_url_credentials(url))

        if token.cancelled:
            return Attempt.failure(
                FailureKind.CANCELLED, token.reason or "Request cancelled"
            )

        send_task = asyncio.ensure_future(
            self._send(method, url, headers, body, stream=stream)
        )
        token.add_callback(send_task.cancel)

        try:
            response = await asyncio.shield(send_task)
        except asyncio.CancelledError:
            current = asyncio.current_task()
            if token.cancelled and not (current and current.cancelling()):
                log.debug("transport_aborted", reason=token.reason)
                return Attempt.failure(
                    FailureKind.CANCELLED, token.reason or "Request cancelled"
                )
            if stream:
                self._close_when_done(send_task)
            raise
        except httpx.HTTPError as e:
            log.warning("transport_error", error=str(e), error_type=type(e).__name__)
            return Attempt.from_exception(e)

        return await self._to_attempt(response, stream=stream)

    async def _send(
        self,
        method: HttpMethod,
        url: str,
        headers: dict[str, str],
        body: Any,
        *,
        stream: bool,
    ) -> httpx.Response:
        """Build and send the request."""
        if method == HttpMethod.GET:
            request = self._client.build_request(
                method.value, url, headers=headers, params=body or None
            )
        else:
            request = self._client.build_request(
                method.value, url, headers=headers, json=body
            )
        return await self._client.send(request, stream=stream)

    async def _to_attempt(self, response: httpx.Response, *, stream: bool) -> Attempt:
        """Convert a response into an attempt.

        Args:
            response: Response received from the server.
            stream: Whether the response body is still unread.

        Returns:
            Successful attempt for 2xx, failed attempt otherwise.
        """
        headers = dict(response.headers)

        if response.is_success:
            payload: Any = response if stream else decode_body(response)
            return Attempt(
                status_code=response.status_code, body=payload, headers=headers
            )

        if stream:
            await response.aread()
            await response.aclose()

        payload = decode_body(response)
        attempt = Attempt.failure(
            FailureKind.HTTP_STATUS,
            f"Server answered {response.status_code}",
            status_code=response.status_code,
            body=payload,
        )
        return attempt.model_copy(update={"headers": headers})

    def _close_when_done(self, send_task: "asyncio.Future[httpx.Response]") -> None:
        """Close a streaming response nobody will consume once it arrives."""

        def _on_done(task: "asyncio.Future[httpx.Response]") -> None:
            if task.cancelled() or task.exception() is not None:
                return
            closer = asyncio.ensure_future(task.result().aclose())
            self._background.add(closer)
            closer.add_done_callback(self._background.discard)

        send_task.add_done_callback(_on_done)

