"""Retry-with-backoff and overall timeout enforcement."""

from reqflow.retry.constants import (
    DEFAULT_BACKOFF_UNIT_MS,
    DEFAULT_EXCLUDED_STATUS_CODES,
    DEFAULT_MAX_RETRIES,
    DEFAULT_TIMEOUT_MS,
)
from reqflow.retry.governor import RetryGovernor
from reqflow.retry.models import RetryPolicy, RetryState
from reqflow.retry.state_machine import RetryPhase, RetryStateError, RetryStateMachine


__all__ = [
    "RetryGovernor",
    "RetryPolicy",
    "RetryState",
    "RetryPhase",
    "RetryStateError",
    "RetryStateMachine",
    "DEFAULT_BACKOFF_UNIT_MS",
    "DEFAULT_EXCLUDED_STATUS_CODES",
    "DEFAULT_MAX_RETRIES",
    "DEFAULT_TIMEOUT_MS",
]
