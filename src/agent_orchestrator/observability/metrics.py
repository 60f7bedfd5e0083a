"""In-process metrics for the orchestration core.

This module provides:
- Counter, gauge and histogram metrics with optional labels
- A ``MetricsCollector`` registry pre-populated with the task, message and
  reasoning metrics the manager records
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from statistics import median
from typing import Any, Dict, List, Optional, Tuple, Type, TypeVar, Union


class MetricType(str, Enum):
    """Types of metrics."""

    COUNTER = "counter"
    GAUGE = "gauge"
    HISTOGRAM = "histogram"


# Default buckets for durations in seconds
DURATION_BUCKETS = [0.01, 0.05, 0.1, 0.5, 1.0, 5.0, 10.0, 30.0, 60.0, 300.0]

DEFAULT_METRICS: Tuple[Tuple[MetricType, str, str], ...] = (
    (MetricType.COUNTER, "tasks_submitted_total", "Tasks submitted to the queue"),
    (MetricType.COUNTER, "tasks_dispatched_total", "Tasks handed to an agent"),
    (MetricType.COUNTER, "tasks_requeued_total", "Tasks re-enqueued because no agent accepted"),
    (MetricType.COUNTER, "tasks_completed_total", "Tasks completed by agents"),
    (MetricType.COUNTER, "tasks_failed_total", "Tasks that failed during execution"),
    (MetricType.COUNTER, "messages_delivered_total", "Messages delivered"),
    (MetricType.COUNTER, "messages_failed_total", "Messages that failed delivery"),
    (MetricType.COUNTER, "reasoning_requests_total", "Calls to the reasoner"),
    (MetricType.COUNTER, "reasoning_errors_total", "Reasoner calls that raised"),
    (MetricType.HISTOGRAM, "task_execution_duration_seconds", "Wall time of a task execution"),
    (MetricType.GAUGE, "registered_agents", "Agents registered with the manager"),
    (MetricType.GAUGE, "queue_depth", "Tasks waiting in the queue"),
)


class _LabeledMetric:
    """Shared state of counters and gauges: one total plus per-label values."""

    type: MetricType

    def __init__(
        self,
        name: str,
        description: str = "",
        unit: str = "",
        labels: Optional[Dict[str, str]] = None,
    ):
        self.name = name
        self.description = description
        self.unit = unit
        self.default_labels = labels or {}
        self._value = 0.0
        self._by_labels: Dict[str, float] = {}

    def _key(self, labels: Dict[str, str]) -> str:
        return json.dumps({**self.default_labels, **labels}, sort_keys=True)

    def get(self, labels: Optional[Dict[str, str]] = None) -> float:
        """Current value: the total, or the value recorded for ``labels``."""
        if labels:
            return self._by_labels.get(self._key(labels), 0.0)
        return self._value

    def reset(self) -> None:
        self._value = 0.0
        self._by_labels.clear()


class Counter(_LabeledMetric):
    """A monotonically increasing count, e.g. submitted tasks."""

    type = MetricType.COUNTER

    def inc(self, value: float = 1.0, labels: Optional[Dict[str, str]] = None) -> None:
        """Increment the counter.

        Raises:
            ValueError: If ``value`` is negative.
        """
        if value < 0:
            raise ValueError("Counter can only be incremented with positive values")
        self._value += value
        if labels:
            key = self._key(labels)
            self._by_labels[key] = self._by_labels.get(key, 0.0) + value


class Gauge(_LabeledMetric):
    """A value that moves both ways, e.g. queue depth."""

    type = MetricType.GAUGE

    def set(self, value: float, labels: Optional[Dict[str, str]] = None) -> None:
        self._value = value
        if labels:
            self._by_labels[self._key(labels)] = value

    def inc(self, value: float = 1.0) -> None:
        self._value += value

    def dec(self, value: float = 1.0) -> None:
        self._value -= value


class Histogram:
    """Distribution of observed values, e.g. task execution time.

    Bucket counts are cumulative: each observation counts towards every
    bucket whose upper bound it does not exceed, plus ``+Inf``.
    """

    type = MetricType.HISTOGRAM

    def __init__(
        self,
        name: str,
        description: str = "",
        unit: str = "",
        buckets: Optional[List[float]] = None,
    ):
        self.name = name
        self.description = description
        self.unit = unit
        self.buckets = sorted(buckets or DURATION_BUCKETS)
        self._values: List[float] = []

    def observe(self, value: float) -> None:
        self._values.append(value)

    def get_count(self) -> int:
        return len(self._values)

    def get_sum(self) -> float:
        return float(sum(self._values))

    def get_average(self) -> Optional[float]:
        if not self._values:
            return None
        return self.get_sum() / len(self._values)

    def get_median(self) -> Optional[float]:
        if not self._values:
            return None
        return median(self._values)

    def get_percentile(self, percentile: float) -> Optional[float]:
        """Nearest-rank percentile, ``percentile`` in 0-100."""
        if not self._values:
            return None
        ordered = sorted(self._values)
        index = min(int(len(ordered) * percentile / 100), len(ordered) - 1)
        return ordered[index]

    def get_bucket_counts(self) -> Dict[float, int]:
        counts = {
            bound: sum(1 for v in self._values if v <= bound) for bound in self.buckets
        }
        counts[float("inf")] = len(self._values)
        return counts

    def summary(self) -> Dict[str, Any]:
        return {
            "count": self.get_count(),
            "sum": self.get_sum(),
            "average": self.get_average(),
            "p50": self.get_percentile(50),
            "p95": self.get_percentile(95),
        }

    def reset(self) -> None:
        self._values.clear()


Metric = Union[Counter, Gauge, Histogram]
M = TypeVar("M", Counter, Gauge, Histogram)


@dataclass
class MetricsConfig:
    """Configuration for the metrics collector.

    Attributes:
        service_name: Name reported alongside snapshots.
        register_defaults: Whether to create the default metrics.
    """

    service_name: str = "agent_orchestrator"
    register_defaults: bool = True


class MetricsCollector:
    """Registry of counters, gauges and histograms, keyed by name.

    One collector is owned by each ``AgentManager``; there is no process-wide
    instance. Recording helpers ignore names that were never registered, so
    components can record unconditionally.
    """

    def __init__(self, config: Optional[MetricsConfig] = None):
        self.config = config or MetricsConfig()
        self._metrics: Dict[str, Metric] = {}

        if self.config.register_defaults:
            for metric_type, name, description in DEFAULT_METRICS:
                if metric_type == MetricType.COUNTER:
                    self.create_counter(name, description)
                elif metric_type == MetricType.GAUGE:
                    self.create_gauge(name, description)
                else:
                    self.create_histogram(name, description, unit="seconds")

    def _register(self, metric: M) -> M:
        self._metrics[metric.name] = metric
        return metric

    def _lookup(self, name: str, kind: Type[M]) -> Optional[M]:
        metric = self._metrics.get(name)
        return metric if isinstance(metric, kind) else None

    def create_counter(
        self,
        name: str,
        description: str = "",
        unit: str = "",
        labels: Optional[Dict[str, str]] = None,
    ) -> Counter:
        return self._register(Counter(name, description, unit, labels))

    def create_gauge(
        self,
        name: str,
        description: str = "",
        unit: str = "",
        labels: Optional[Dict[str, str]] = None,
    ) -> Gauge:
        return self._register(Gauge(name, description, unit, labels))

    def create_histogram(
        self,
        name: str,
        description: str = "",
        unit: str = "",
        buckets: Optional[List[float]] = None,
    ) -> Histogram:
        return self._register(Histogram(name, description, unit, buckets))

    def get_counter(self, name: str) -> Optional[Counter]:
        return self._lookup(name, Counter)

    def get_gauge(self, name: str) -> Optional[Gauge]:
        return self._lookup(name, Gauge)

    def get_histogram(self, name: str) -> Optional[Histogram]:
        return self._lookup(name, Histogram)

    def inc_counter(
        self,
        name: str,
        value: float = 1.0,
        labels: Optional[Dict[str, str]] = None,
    ) -> None:
        counter = self.get_counter(name)
        if counter:
            counter.inc(value, labels)

    def set_gauge(
        self,
        name: str,
        value: float,
        labels: Optional[Dict[str, str]] = None,
    ) -> None:
        gauge = self.get_gauge(name)
        if gauge:
            gauge.set(value, labels)

    def observe_histogram(self, name: str, value: float) -> None:
        histogram = self.get_histogram(name)
        if histogram:
            histogram.observe(value)

    def get_all_metrics(self) -> Dict[str, Any]:
        """Snapshot every metric.

        Counters and gauges map to their total; histograms to a summary
        with count, sum, average, p50 and p95.
        """
        return {
            name: metric.summary() if isinstance(metric, Histogram) else metric.get()
            for name, metric in self._metrics.items()
        }

    def reset(self) -> None:
        """Zero every registered metric."""
        for metric in self._metrics.values():
            metric.reset()
