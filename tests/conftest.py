"""Shared pytest fixtures."""

from collections.abc import Iterator

import pytest

from reqflow.observability.metrics import PipelineMetrics


@pytest.fixture(autouse=True)
def reset_metrics() -> Iterator[None]:
    """Give every test a fresh metrics singleton."""
    PipelineMetrics.reset()
    yield
    PipelineMetrics.reset()
