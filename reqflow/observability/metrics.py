"""Metrics collection for the request pipeline."""

from dataclasses import dataclass, field
from typing import ClassVar


@dataclass
class PipelineMetrics:
    """Metrics for pipeline requests.

    Singleton class that tracks request counts per method, retries,
    failures per error kind, interceptions and timeouts.
    """

    requests_total: dict[str, int] = field(default_factory=dict)
    retry_total: int = 0
    failures_total: dict[str, int] = field(default_factory=dict)
    intercepted_total: int = 0
    timeouts_total: int = 0
    duration_ms_total: float = 0.0
    request_count: int = 0

    _instance: ClassVar["PipelineMetrics | None"] = None

    @classmethod
    def get_instance(cls) -> "PipelineMetrics":
        """Get singleton metrics instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset metrics (primarily for testing)."""
        cls._instance = None

    def record_request(self, method: str, duration_ms: float) -> None:
        """Record a completed logical request.

        Args:
            method: HTTP method.
            duration_ms: Duration in milliseconds, retries included.
        """
        self.requests_total[method] = self.requests_total.get(method, 0) + 1
        self.duration_ms_total += duration_ms
        self.request_count += 1

    def record_retry(self) -> None:
        """Record a scheduled retry."""
        self.retry_total += 1

    def record_failure(self, error_kind: str) -> None:
        """Record a failed request.

        Args:
            error_kind: Name of the error type surfaced to the caller.
        """
        self.failures_total[error_kind] = self.failures_total.get(error_kind, 0) + 1

    def record_intercepted(self) -> None:
        """Record a request rejected before sending."""
        self.intercepted_total += 1

    def record_timeout(self) -> None:
        """Record a request that exceeded its overall budget."""
        self.timeouts_total += 1

    def to_dict(self) -> dict[str, int | float | dict[str, int]]:
        """Convert metrics to dictionary.

        Returns:
            Dictionary of metric name to value.
        """
        return {
            "requests_total": dict(self.requests_total),
            "retry_total": self.retry_total,
            "failures_total": dict(self.failures_total),
            "intercepted_total": self.intercepted_total,
            "timeouts_total": self.timeouts_total,
            "duration_ms_total": self.duration_ms_total,
            "request_count": self.request_count,
        }

    @property
    def avg_duration_ms(self) -> float:
        """Calculate average request duration.

        Returns:
            Average duration in milliseconds.
        """
        if self.request_count == 0:
            return 0.0
        return self.duration_ms_total / self.request_count
