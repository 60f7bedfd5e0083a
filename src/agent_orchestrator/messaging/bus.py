"""Publish/subscribe message bus between agents.

The bus maps agent names to subscribers and hands each message straight to
the recipient's ``receive_message``. Delivery is best effort and at most
once per call: failures are logged and recorded in the history, never
raised to the sender.
"""

from __future__ import annotations

import asyncio
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Protocol, runtime_checkable

from agent_orchestrator.observability.logging import get_logger
from agent_orchestrator.observability.metrics import MetricsCollector

logger = get_logger(__name__)

NOT_SUBSCRIBED = "recipient not subscribed"


@dataclass
class BusMessage:
    """A message routed through the bus.

    Attributes:
        sender: Name of the sending agent (or system component).
        recipient: Name of the receiving agent.
        content: Opaque payload.
        id: Unique identifier.
        timestamp: When the message was created.
        delivered: Whether the recipient's handler accepted it.
        error: Why delivery failed, if it did.
    """

    sender: str
    recipient: str
    content: Any
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    delivered: bool = False
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "from": self.sender,
            "to": self.recipient,
            "content": self.content,
            "timestamp": self.timestamp.isoformat(),
            "delivered": self.delivered,
            "error": self.error,
        }


@runtime_checkable
class MessageSubscriber(Protocol):
    """Anything that can receive bus messages.

    ``receive_message`` may be a plain method or a coroutine function.
    """

    def receive_message(self, message: BusMessage) -> Any:
        ...


class MessageBus:
    """Registry of subscribers with direct send, broadcast and history.

    Example:
        bus = MessageBus()
        bus.subscribe("researcher", researcher)
        await bus.send_message("coordinator", "researcher", {"type": "ping"})
    """

    def __init__(
        self,
        max_history: int = 10000,
        metrics: Optional[MetricsCollector] = None,
    ):
        """Initialize the bus.

        Args:
            max_history: Messages kept in history; oldest are dropped first.
            metrics: Collector for delivery counters.
        """
        if max_history <= 0:
            raise ValueError("max_history must be positive")
        self.max_history = max_history
        self._metrics = metrics
        self._subscribers: Dict[str, MessageSubscriber] = {}
        self._history: List[BusMessage] = []
        self._lock = asyncio.Lock()

    def subscribe(self, name: str, subscriber: MessageSubscriber) -> None:
        self._subscribers[name] = subscriber
        logger.info("bus_subscribed", agent_name=name)

    def unsubscribe(self, name: str) -> bool:
        removed = self._subscribers.pop(name, None) is not None
        if removed:
            logger.info("bus_unsubscribed", agent_name=name)
        return removed

    def is_subscribed(self, name: str) -> bool:
        return name in self._subscribers

    @property
    def subscribers(self) -> List[str]:
        return list(self._subscribers)

    async def send_message(self, sender: str, recipient: str, content: Any) -> bool:
        """Deliver ``content`` to ``recipient``.

        Returns:
            True if the recipient's handler accepted the message. False if
            the recipient is not subscribed or its handler raised; the
            message is still recorded in history as undelivered.
        """
        message = BusMessage(sender=sender, recipient=recipient, content=content)
        subscriber = self._subscribers.get(recipient)

        if subscriber is None:
            message.error = NOT_SUBSCRIBED
            logger.warning(
                "message_undeliverable",
                sender=sender,
                recipient=recipient,
                reason=NOT_SUBSCRIBED,
            )
        else:
            # Delivered outside the lock so handlers can send messages themselves.
            try:
                result = subscriber.receive_message(message)
                if asyncio.iscoroutine(result):
                    await result
                message.delivered = True
            except Exception as e:
                message.error = str(e) or type(e).__name__
                logger.error(
                    "message_delivery_failed",
                    sender=sender,
                    recipient=recipient,
                    error=message.error,
                )

        await self._record(message)

        if message.delivered:
            logger.debug("message_sent", sender=sender, recipient=recipient)
            self._count("messages_delivered_total")
        else:
            self._count("messages_failed_total")
        return message.delivered

    async def broadcast(
        self,
        sender: str,
        content: Any,
        exclude: Iterable[str] = (),
    ) -> int:
        """Send to every subscriber except ``sender`` and ``exclude``.

        Returns:
            Number of successful deliveries.
        """
        skipped = set(exclude)
        skipped.add(sender)
        recipients = [name for name in self._subscribers if name not in skipped]

        delivered = 0
        for name in recipients:
            if await self.send_message(sender, name, content):
                delivered += 1

        logger.info("message_broadcast", sender=sender, delivered=delivered)
        return delivered

    async def _record(self, message: BusMessage) -> None:
        async with self._lock:
            self._history.append(message)
            overflow = len(self._history) - self.max_history
            if overflow > 0:
                del self._history[:overflow]

    def _count(self, name: str) -> None:
        if self._metrics is not None:
            self._metrics.inc_counter(name)

    def get_messages_for_agent(
        self,
        name: str,
        sender: Optional[str] = None,
        limit: int = 100,
    ) -> List[BusMessage]:
        """Most recent messages addressed to ``name``, oldest first."""
        messages = [m for m in self._history if m.recipient == name]
        if sender is not None:
            messages = [m for m in messages if m.sender == sender]
        return messages[-limit:] if limit > 0 else []

    def get_message_history(self, limit: int = 1000) -> List[BusMessage]:
        return self._history[-limit:] if limit > 0 else []

    async def clear_history(self) -> None:
        async with self._lock:
            self._history.clear()
        logger.info("message_history_cleared")

    def stats(self) -> Dict[str, int]:
        history = list(self._history)
        delivered = sum(1 for m in history if m.delivered)
        return {
            "total_subscribers": len(self._subscribers),
            "total_messages": len(history),
            "delivered_messages": delivered,
            "failed_messages": len(history) - delivered,
        }

    def __repr__(self) -> str:
        return (
            f"MessageBus(subscribers={len(self._subscribers)}, "
            f"history={len(self._history)})"
        )
