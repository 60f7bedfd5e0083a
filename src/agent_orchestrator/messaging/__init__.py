"""Inter-agent messaging."""

from agent_orchestrator.messaging.bus import (
    NOT_SUBSCRIBED,
    BusMessage,
    MessageBus,
    MessageSubscriber,
)

__all__ = [
    "NOT_SUBSCRIBED",
    "BusMessage",
    "MessageBus",
    "MessageSubscriber",
]
