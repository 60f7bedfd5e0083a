"""Tests for in-process metrics."""

from __future__ import annotations

import pytest

from agent_orchestrator.observability.metrics import (
    Counter,
    Gauge,
    Histogram,
    MetricsCollector,
    MetricType,
)


# ============================================================================
# Metric Type Tests
# ============================================================================


class TestCounter:
    """Tests for Counter."""

    def test_increment_with_labels(self):
        """Test totals and per-label values."""
        counter = Counter("deliveries_total", labels={"bus": "main"})

        counter.inc()
        counter.inc(2, labels={"recipient": "ana"})

        assert counter.type == MetricType.COUNTER
        assert counter.get() == 3
        assert counter.get({"recipient": "ana"}) == 2
        assert counter.get({"recipient": "ben"}) == 0

    def test_negative_increment_rejected(self):
        """Test that counters never decrease."""
        counter = Counter("c")

        with pytest.raises(ValueError):
            counter.inc(-1)

    def test_reset(self):
        """Test resetting a counter."""
        counter = Counter("c")
        counter.inc(5, labels={"k": "v"})

        counter.reset()

        assert counter.get() == 0
        assert counter.get({"k": "v"}) == 0


class TestGauge:
    """Tests for Gauge."""

    def test_set_inc_dec(self):
        """Test moving a gauge both ways."""
        gauge = Gauge("queue_depth")

        gauge.set(4)
        gauge.inc()
        gauge.dec(3)

        assert gauge.get() == 2


class TestHistogram:
    """Tests for Histogram."""

    def test_statistics(self):
        """Test count, sum, average, median and percentiles."""
        histogram = Histogram("duration", buckets=[1.0, 5.0])
        for value in (0.5, 2.0, 3.5, 10.0):
            histogram.observe(value)

        assert histogram.get_count() == 4
        assert histogram.get_sum() == 16.0
        assert histogram.get_average() == 4.0
        assert histogram.get_median() == 2.75
        assert histogram.get_percentile(100) == 10.0
        assert histogram.get_bucket_counts() == {1.0: 1, 5.0: 3, float("inf"): 4}

    def test_empty(self):
        """Test that an empty histogram has no statistics."""
        histogram = Histogram("duration")

        assert histogram.get_average() is None
        assert histogram.get_median() is None
        assert histogram.get_percentile(95) is None


# ============================================================================
# Collector Tests
# ============================================================================


class TestMetricsCollector:
    """Tests for MetricsCollector."""

    @pytest.mark.parametrize(
        "name",
        [
            "tasks_submitted_total",
            "tasks_requeued_total",
            "tasks_failed_total",
            "messages_delivered_total",
            "reasoning_errors_total",
        ],
    )
    def test_default_counters(self, metrics: MetricsCollector, name: str):
        """Test that the default counters exist."""
        assert metrics.get_counter(name) is not None

    def test_default_gauges_and_histogram(self, metrics: MetricsCollector):
        """Test that the default gauges and histogram exist."""
        assert metrics.get_gauge("registered_agents") is not None
        assert metrics.get_gauge("queue_depth") is not None
        assert metrics.get_histogram("task_execution_duration_seconds") is not None

    def test_helpers_update_by_name(self, metrics: MetricsCollector):
        """Test the by-name helpers."""
        metrics.inc_counter("tasks_completed_total")
        metrics.set_gauge("queue_depth", 7)
        metrics.observe_histogram("task_execution_duration_seconds", 0.2)

        assert metrics.get_counter("tasks_completed_total").get() == 1
        assert metrics.get_gauge("queue_depth").get() == 7
        assert metrics.get_histogram("task_execution_duration_seconds").get_count() == 1

    def test_unknown_names_are_ignored(self, empty_metrics: MetricsCollector):
        """Test that helpers do nothing for unregistered metrics."""
        empty_metrics.inc_counter("nope")
        empty_metrics.set_gauge("nope", 1)
        empty_metrics.observe_histogram("nope", 1)

        assert empty_metrics.get_all_metrics() == {}

    def test_get_all_metrics(self, empty_metrics: MetricsCollector):
        """Test the snapshot of every registered metric."""
        empty_metrics.create_counter("c").inc(2)
        empty_metrics.create_gauge("g").set(3)
        empty_metrics.create_histogram("h").observe(1.0)

        snapshot = empty_metrics.get_all_metrics()

        assert snapshot["c"] == 2
        assert snapshot["g"] == 3
        assert snapshot["h"]["count"] == 1
        assert snapshot["h"]["p50"] == 1.0

    def test_reset(self, metrics: MetricsCollector):
        """Test zeroing every metric."""
        metrics.inc_counter("tasks_failed_total", 3)
        metrics.set_gauge("queue_depth", 5)
        metrics.observe_histogram("task_execution_duration_seconds", 1.5)

        metrics.reset()

        snapshot = metrics.get_all_metrics()
        assert snapshot["tasks_failed_total"] == 0
        assert snapshot["queue_depth"] == 0
        assert snapshot["task_execution_duration_seconds"]["count"] == 0

    def test_lookup_is_typed(self, metrics: MetricsCollector):
        """Test that a name registered as a gauge is not returned as a counter."""
        assert metrics.get_counter("queue_depth") is None
