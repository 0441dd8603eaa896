"""Two-layer response classification.

Backends in this domain answer HTTP 200 with an embedded failure code, so
the transport status alone cannot tell success from failure. The status is
checked first; for 2xx responses the body is then scanned for an
application code.
"""

from collections.abc import Collection, Mapping
from typing import Any

from reqflow.classify.constants import SUCCESS_STATUSES, UNKNOWN_STATUS
from reqflow.classify.models import ClassifyContext, LogicalOutcome
from reqflow.transport.models import Attempt


_DEFAULT_CONTEXT = ClassifyContext()


def resolve_status(attempt: Attempt) -> int:
    """Resolve the effective status of an attempt.

    Args:
        attempt: Attempt to inspect.

    Returns:
        The attempt's status, else the nested failure status, else -1.
    """
    if attempt.status_code is not None:
        return attempt.status_code
    if attempt.error is not None and attempt.error.status_code is not None:
        return attempt.error.status_code
    return UNKNOWN_STATUS


def find_logical_code(body: Any, code_keys: tuple[str, ...]) -> Any:
    """Return the value of the first code key present in ``body``.

    Args:
        body: Response payload.
        code_keys: Candidate field names in scan order.

    Returns:
        The first non-None value found, or None.
    """
    if not isinstance(body, Mapping):
        return None
    for key in code_keys:
        value = body.get(key)
        if value is not None:
            return value
    return None


def is_success_code(code: Any, success_codes: Collection[Any]) -> bool:
    """Check a code against the success set.

    Booleans only match booleans, so ``{"error": False}`` is not read as 0.
    """
    for candidate in success_codes:
        if isinstance(code, bool) or isinstance(candidate, bool):
            if code is candidate:
                return True
        elif code == candidate:
            return True
    return False


def classify(attempt: Attempt, context: ClassifyContext | None = None) -> LogicalOutcome:
    """Classify a completed attempt as logical success or failure.

    Args:
        attempt: Attempt returned by the governor.
        context: Code keys and success codes; defaults apply when omitted.

    Returns:
        LogicalOutcome for the caller.
    """
    context = context or _DEFAULT_CONTEXT
    status = resolve_status(attempt)

    if status not in SUCCESS_STATUSES:
        return LogicalOutcome(success=False, payload=attempt, status_code=status)

    code = find_logical_code(attempt.body, context.code_keys)
    if code is None:
        return LogicalOutcome(success=True, payload=attempt.body, status_code=status)

    return LogicalOutcome(
        success=is_success_code(code, context.success_codes),
        payload=attempt.body,
        logical_code=code,
        status_code=status,
    )
