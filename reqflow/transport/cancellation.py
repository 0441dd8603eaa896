"""Out-of-band cancellation token shared between a request and its transport."""

from collections.abc import Callable

import structlog


logger = structlog.get_logger()


class CancellationToken:
    """One-shot cancellation signal.

    The request wrapper fires the token; the transport registers callbacks
    that abort the in-flight call. Callbacks registered after the token
    fired run immediately.
    """

    def __init__(self) -> None:
        """Initialize an unfired token."""
        self._cancelled = False
        self._reason: str | None = None
        self._callbacks: list[Callable[[], object]] = []

    @property
    def cancelled(self) -> bool:
        """Whether the token has fired."""
        return self._cancelled

    @property
    def reason(self) -> str | None:
        """Reason passed to ``cancel``, if fired."""
        return self._reason

    def add_callback(self, callback: Callable[[], object]) -> None:
        """Register a callback to run when the token fires.

        Args:
            callback: Zero-argument callable.
        """
        if self._cancelled:
            callback()
            return
        self._callbacks.append(callback)

    def cancel(self, reason: str) -> bool:
        """Fire the token.

        Args:
            reason: Why the call is being aborted.

        Returns:
            True if this call fired the token, False if it was already fired.
        """
        if self._cancelled:
            return False

        self._cancelled = True
        self._reason = reason
        callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            try:
                callback()
            except Exception:
                logger.exception(
                    "cancellation_callback_failed",
                    component="transport",
                    reason=reason,
                )
        return True
