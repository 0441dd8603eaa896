"""Logging sink the pipeline reports requests, responses and retries to."""

from enum import Enum
from typing import Any, Protocol, runtime_checkable

import structlog


logger = structlog.get_logger()


class Severity(str, Enum):
    """Severity tags accepted by a sink."""

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


@runtime_checkable
class LogSink(Protocol):
    """Protocol for the logging collaborator.

    Calls are fire-and-forget: the pipeline never waits on a sink and a
    failing sink never fails a request.
    """

    def log(self, severity: Severity, message: str, **data: Any) -> None:
        """Record one event.

        Args:
            severity: Severity tag.
            message: Event name.
            **data: Structured event data.
        """
        ...


class StructlogSink:
    """Sink writing events through structlog."""

    def __init__(self, component: str = "pipeline") -> None:
        self._log = logger.bind(component=component)

    def log(self, severity: Severity, message: str, **data: Any) -> None:
        getattr(self._log, Severity(severity).value)(message, **data)


def emit(sink: LogSink, severity: Severity, message: str, **data: Any) -> None:
    """Send an event to a sink without letting sink failures escape.

    Args:
        sink: Destination sink.
        severity: Severity tag.
        message: Event name.
        **data: Structured event data.
    """
    try:
        sink.log(severity, message, **data)
    except Exception:
        logger.exception("log_sink_failed", sink=type(sink).__name__, event=message)
