"""Transport layer: the pluggable HTTP adapter and its cancellable wrapper.

This module provides:
- The ``Transport`` protocol and a default httpx implementation
- Out-of-band cancellation tokens
- An observe-once, cancellable wrapper around a single call
- Header and URL redaction for logging
"""

from reqflow.transport.cancellable import CancellableRequest
from reqflow.transport.cancellation import CancellationToken
from reqflow.transport.httpx_transport import HttpxTransport
from reqflow.transport.models import (
    Attempt,
    FailureKind,
    HttpMethod,
    RequestDescriptor,
    TransportFailure,
    decode_body,
)
from reqflow.transport.protocols import Transport
from reqflow.transport.redact import (
    REDACTED_VALUE,
    redact_headers,
    redact_params,
    redact_url_credentials,
)


__all__ = [
    # Protocol and adapters
    "Transport",
    "HttpxTransport",
    "CancellableRequest",
    "CancellationToken",
    # Models
    "Attempt",
    "FailureKind",
    "HttpMethod",
    "RequestDescriptor",
    "TransportFailure",
    "decode_body",
    # Redaction
    "REDACTED_VALUE",
    "redact_headers",
    "redact_params",
    "redact_url_credentials",
]
