"""Data models for retry and timeout handling."""

from dataclasses import dataclass
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field

from reqflow.classify.classifier import resolve_status
from reqflow.retry.constants import (
    DEFAULT_BACKOFF_UNIT_MS,
    DEFAULT_EXCLUDED_STATUS_CODES,
    DEFAULT_MAX_RETRIES,
    DEFAULT_TIMEOUT_MS,
)
from reqflow.settings.app import PipelineSettings
from reqflow.transport.models import Attempt, FailureKind


class RetryPolicy(BaseModel):
    """Configuration for retry behavior of one logical request.

    Uses linear backoff: delay = backoff_unit_ms * attempt_index.
    ``timeout_ms`` bounds the whole retry sequence, not each attempt.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    max_retries: Annotated[int, Field(ge=0, le=100)] = DEFAULT_MAX_RETRIES
    backoff_unit_ms: Annotated[int, Field(ge=0, le=600000)] = DEFAULT_BACKOFF_UNIT_MS
    timeout_ms: Annotated[int, Field(ge=1)] = DEFAULT_TIMEOUT_MS
    excluded_status_codes: frozenset[int] = DEFAULT_EXCLUDED_STATUS_CODES

    @classmethod
    def from_settings(
        cls,
        settings: PipelineSettings,
        max_retries: int | None = None,
        timeout_ms: int | None = None,
    ) -> "RetryPolicy":
        """Build a policy from settings with per-request overrides.

        Args:
            settings: Pipeline settings supplying defaults.
            max_retries: Request override for the retry budget.
            timeout_ms: Request override for the overall timeout.

        Returns:
            Merged retry policy.
        """
        return cls(
            max_retries=(
                settings.default_max_retries if max_retries is None else max_retries
            ),
            backoff_unit_ms=settings.backoff_unit_ms,
            timeout_ms=settings.default_timeout_ms if timeout_ms is None else timeout_ms,
            excluded_status_codes=frozenset(settings.excluded_status_codes),
        )

    def is_excluded(self, attempt: Attempt) -> bool:
        """Check if a failed attempt carries a status retrying cannot fix."""
        return resolve_status(attempt) in self.excluded_status_codes

    def should_retry(self, attempt: Attempt, attempt_index: int) -> bool:
        """Determine if a failed attempt should be retried.

        Args:
            attempt: The failed attempt.
            attempt_index: Index of that attempt (0-indexed).

        Returns:
            True if another attempt should be made.
        """
        if attempt.ok:
            return False
        if self.is_excluded(attempt):
            return False
        if attempt.error is not None and attempt.error.kind == FailureKind.CANCELLED:
            return False
        return attempt_index < self.max_retries

    def get_delay_ms(self, attempt_index: int) -> int:
        """Calculate the delay before the attempt following ``attempt_index``.

        Args:
            attempt_index: Index of the attempt that just failed.

        Returns:
            Delay in milliseconds.
        """
        return attempt_index * self.backoff_unit_ms


@dataclass
class RetryState:
    """Mutable retry bookkeeping for one logical request.

    Attributes:
        attempt_index: Index of the current attempt, starting at 0.
        scheduled_delay_ms: Delay scheduled before the current attempt.
    """

    attempt_index: int = 0
    scheduled_delay_ms: int = 0
