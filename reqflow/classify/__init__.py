"""Response classification into logical success or failure."""

from reqflow.classify.classifier import (
    classify,
    find_logical_code,
    is_success_code,
    resolve_status,
)
from reqflow.classify.constants import (
    DEFAULT_CODE_KEYS,
    DEFAULT_SUCCESS_CODES,
    SUCCESS_STATUSES,
    UNKNOWN_STATUS,
)
from reqflow.classify.models import ClassifyContext, LogicalOutcome


__all__ = [
    "ClassifyContext",
    "LogicalOutcome",
    "classify",
    "find_logical_code",
    "is_success_code",
    "resolve_status",
    "DEFAULT_CODE_KEYS",
    "DEFAULT_SUCCESS_CODES",
    "SUCCESS_STATUSES",
    "UNKNOWN_STATUS",
]
