"""Data models for response classification."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from reqflow.classify.constants import DEFAULT_CODE_KEYS, DEFAULT_SUCCESS_CODES


class ClassifyContext(BaseModel):
    """Code conventions used to read an application code from a body.

    ``code_keys`` is ordered: the first key present wins.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    code_keys: tuple[str, ...] = DEFAULT_CODE_KEYS
    success_codes: tuple[Any, ...] = DEFAULT_SUCCESS_CODES


class LogicalOutcome(BaseModel):
    """Application-level result of a request.

    On success ``payload`` is the response body. On a logical failure it is
    the raw body; on a transport failure it is the whole ``Attempt``.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", arbitrary_types_allowed=True)

    success: bool
    payload: Any = None
    logical_code: Any = Field(
        default=None, description="Application code read from the body"
    )
    status_code: int = Field(default=-1, description="Effective transport status")
