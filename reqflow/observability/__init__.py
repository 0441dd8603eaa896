"""Observability module for logging and metrics."""

from reqflow.observability.logging import (
    configure_logging,
    request_context,
)
from reqflow.observability.metrics import PipelineMetrics
from reqflow.observability.sink import LogSink, Severity, StructlogSink, emit


__all__ = [
    "LogSink",
    "PipelineMetrics",
    "Severity",
    "StructlogSink",
    "configure_logging",
    "emit",
    "request_context",
]
