"""Structured logging configuration."""

import logging
import sys
from collections.abc import Mapping, MutableMapping
from contextlib import AbstractContextManager
from typing import Any, TextIO

import structlog

from reqflow.settings.app import get_settings
from reqflow.transport.redact import (
    redact_headers,
    redact_params,
    redact_url_credentials,
)


DEFAULT_COMPONENT = "reqflow"


def add_default_component(
    logger: Any,  # noqa: ARG001
    method_name: str,  # noqa: ARG001
    event_dict: MutableMapping[str, Any],
) -> MutableMapping[str, Any]:
    """Tag events logged without a bound component."""
    event_dict.setdefault("component", DEFAULT_COMPONENT)
    return event_dict


def redact_sensitive_fields(
    logger: Any,  # noqa: ARG001
    method_name: str,  # noqa: ARG001
    event_dict: MutableMapping[str, Any],
) -> MutableMapping[str, Any]:
    """Mask credentials in ``url``, ``headers`` and ``params`` fields.

    Applies to every event, including those logged by application code
    that did not redact its own values.
    """
    url = event_dict.get("url")
    if isinstance(url, str):
        event_dict["url"] = redact_url_credentials(url)
    headers = event_dict.get("headers")
    if isinstance(headers, Mapping):
        event_dict["headers"] = redact_headers(headers)
    if "params" in event_dict:
        event_dict["params"] = redact_params(event_dict["params"])
    return event_dict


def configure_logging(
    level: int = logging.INFO,
    output: TextIO = sys.stderr,
    json_format: bool | None = None,
) -> None:
    """Configure structured logging for the pipeline.

    Sets up structlog with JSON or console output, the request id bound
    through contextvars, a default ``component`` tag and redaction of
    credentials in ``url``, ``headers`` and ``params`` fields.

    Args:
        level: Logging level (default: INFO).
        output: Output stream (default: stderr).
        json_format: Whether to use JSON format. Defaults to the
            ``log_json`` setting.
    """
    if json_format is None:
        json_format = get_settings().log_json

    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        add_default_component,
        redact_sensitive_fields,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if json_format:
        processors.append(structlog.processors.JSONRenderer(sort_keys=True))
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=output),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=output,
        level=level,
    )


def request_context(request_id: str) -> AbstractContextManager[None]:
    """Bind a request id to log messages emitted inside the block.

    Values bound before the block are restored on exit.

    Args:
        request_id: Unique request identifier.

    Returns:
        Context manager scoping the binding.
    """
    return structlog.contextvars.bound_contextvars(request_id=request_id)
