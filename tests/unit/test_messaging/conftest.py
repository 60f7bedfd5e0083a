"""Local fixtures for messaging tests."""

from __future__ import annotations

from typing import List

import pytest

from agent_orchestrator.messaging import BusMessage, MessageBus
from agent_orchestrator.observability.metrics import MetricsCollector


class ExplodingSubscriber:
    """Subscriber whose handler always raises."""

    def receive_message(self, message: BusMessage) -> None:
        raise RuntimeError("inbox on fire")


class AsyncSubscriber:
    """Subscriber with a coroutine handler."""

    def __init__(self) -> None:
        self.received: List[BusMessage] = []

    async def receive_message(self, message: BusMessage) -> None:
        self.received.append(message)


# ============================================================================
# Bus Fixtures
# ============================================================================


@pytest.fixture
def metrics() -> MetricsCollector:
    """Create a metrics collector with the default metrics."""
    return MetricsCollector()


@pytest.fixture
def bus(metrics: MetricsCollector) -> MessageBus:
    """Create a bus wired to a metrics collector."""
    return MessageBus(metrics=metrics)


@pytest.fixture
def exploding_subscriber() -> ExplodingSubscriber:
    """Create a subscriber that fails every delivery."""
    return ExplodingSubscriber()


@pytest.fixture
def async_subscriber() -> AsyncSubscriber:
    """Create a subscriber with an async handler."""
    return AsyncSubscriber()
