"""Local fixtures for observability tests."""

from __future__ import annotations

import json
from io import StringIO
from typing import Any, Callable, Dict, List

import pytest

from agent_orchestrator.observability.logging import (
    ConsoleExporter,
    LogConfig,
    LogLevel,
    clear_context,
    clear_global_context,
    configure_logging,
)
from agent_orchestrator.observability.metrics import MetricsCollector, MetricsConfig


# ============================================================================
# Logging Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def cleanup_logging():
    """Restore default logging and clear context after each test."""
    yield
    clear_context()
    clear_global_context()
    configure_logging()


@pytest.fixture
def log_stream() -> StringIO:
    """Create a stream that captures rendered log lines."""
    return StringIO()


@pytest.fixture
def json_logging(log_stream: StringIO) -> Callable[[], List[Dict[str, Any]]]:
    """Route JSON logs at debug level to ``log_stream``.

    Returns a callable that parses every captured line.
    """
    configure_logging(
        LogConfig(
            level=LogLevel.DEBUG,
            exporters=[ConsoleExporter(stream=log_stream, colors=False)],
            json_format=True,
        )
    )

    def read() -> List[Dict[str, Any]]:
        return [json.loads(line) for line in log_stream.getvalue().splitlines() if line]

    return read


# ============================================================================
# Metrics Fixtures
# ============================================================================


@pytest.fixture
def metrics() -> MetricsCollector:
    """Create a collector with the default metrics."""
    return MetricsCollector()


@pytest.fixture
def empty_metrics() -> MetricsCollector:
    """Create a collector without default metrics."""
    return MetricsCollector(MetricsConfig(register_defaults=False))
