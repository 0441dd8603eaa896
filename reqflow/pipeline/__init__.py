"""Request orchestration: the public call surface and its handlers."""

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
from reqflow.pipeline.models import RequestOptions, RequestSpec
from reqflow.pipeline.service import HttpService


__all__ = [
    # Service
    "HttpService",
    "HandlerRegistry",
    # Models
    "RequestOptions",
    "RequestSpec",
    # Errors
    "PipelineError",
    "TransportError",
    "ExcludedStatusError",
    "RequestTimeoutError",
    "LogicalFailure",
    "InterceptedError",
    "INTERCEPTED_CODE",
    "INTERCEPTED_MESSAGE",
]
