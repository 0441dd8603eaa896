"""Async HTTP request pipeline.

Adds cancellable execution, retry with linear backoff, an overall timeout,
route-prefix proxying, pre-send interception and response-envelope
classification on top of a pluggable transport.
"""

from reqflow.classify import ClassifyContext, LogicalOutcome, classify
from reqflow.pipeline import (
    ExcludedStatusError,
    HandlerRegistry,
    HttpService,
    InterceptedError,
    LogicalFailure,
    PipelineError,
    RequestOptions,
    RequestSpec,
    RequestTimeoutError,
    TransportError,
)
from reqflow.proxy import ProxyRule, resolve
from reqflow.settings import PipelineSettings, get_settings
from reqflow.transport import Attempt, HttpMethod, HttpxTransport, Transport


__all__ = [
    "Attempt",
    "ClassifyContext",
    "ExcludedStatusError",
    "HandlerRegistry",
    "HttpMethod",
    "HttpService",
    "HttpxTransport",
    "InterceptedError",
    "LogicalFailure",
    "LogicalOutcome",
    "PipelineError",
    "PipelineSettings",
    "ProxyRule",
    "RequestOptions",
    "RequestSpec",
    "RequestTimeoutError",
    "Transport",
    "TransportError",
    "classify",
    "get_settings",
    "resolve",
]
