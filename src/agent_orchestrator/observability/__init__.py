"""Observability package: structured logging and in-process metrics."""

from agent_orchestrator.observability.logging import (
    AgentLogger,
    ConsoleExporter,
    FileExporter,
    LogConfig,
    LogContext,
    LogLevel,
    clear_context,
    clear_global_context,
    configure_logging,
    get_context,
    get_logger,
    log_context,
    set_context,
    set_global_context,
)
from agent_orchestrator.observability.metrics import (
    Counter,
    Gauge,
    Histogram,
    MetricsCollector,
    MetricsConfig,
    MetricType,
)

__all__ = [
    # Logging
    "AgentLogger",
    "ConsoleExporter",
    "FileExporter",
    "LogConfig",
    "LogContext",
    "LogLevel",
    "clear_context",
    "clear_global_context",
    "configure_logging",
    "get_context",
    "get_logger",
    "log_context",
    "set_context",
    "set_global_context",
    # Metrics
    "Counter",
    "Gauge",
    "Histogram",
    "MetricsCollector",
    "MetricsConfig",
    "MetricType",
]
