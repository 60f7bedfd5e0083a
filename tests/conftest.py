"""Common test fixtures and configuration for agent_orchestrator tests."""

from __future__ import annotations

from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple, Union

import pytest

from agent_orchestrator.agents.base import Agent, AgentConfig
from agent_orchestrator.messaging.bus import BusMessage
from agent_orchestrator.tasks.models import Task


# ============================================================================
# Reasoner Fixtures
# ============================================================================


class ScriptedReasoner:
    """Reasoner that replays scripted responses.

    Each queued item is either returned or, if it is an exception, raised.
    Once the script is exhausted ``default`` is returned.
    """

    def __init__(
        self,
        responses: Optional[Iterable[Union[str, BaseException]]] = None,
        default: str = "ok",
    ):
        self.responses: List[Union[str, BaseException]] = list(responses or [])
        self.default = default
        self.calls: List[Tuple[str, Dict[str, Any]]] = []

    async def generate(self, prompt: str, context: Dict[str, Any]) -> str:
        self.calls.append((prompt, dict(context)))
        if self.responses:
            item = self.responses.pop(0)
            if isinstance(item, BaseException):
                raise item
            return item
        return self.default

    @property
    def prompts(self) -> List[str]:
        return [prompt for prompt, _ in self.calls]


class FailingReasoner:
    """Reasoner that always raises the given error."""

    def __init__(self, error: BaseException):
        self.error = error
        self.calls = 0

    async def generate(self, prompt: str, context: Dict[str, Any]) -> str:
        self.calls += 1
        raise self.error


@pytest.fixture
def scripted_reasoner() -> ScriptedReasoner:
    """Create a scripted reasoner with an empty script."""
    return ScriptedReasoner()


@pytest.fixture
def make_reasoner() -> Callable[..., ScriptedReasoner]:
    """Factory for scripted reasoners."""

    def _make(*responses: Union[str, BaseException], default: str = "ok") -> ScriptedReasoner:
        return ScriptedReasoner(responses, default=default)

    return _make


@pytest.fixture
def make_failing_reasoner() -> Callable[[BaseException], FailingReasoner]:
    """Factory for reasoners that always raise."""
    return FailingReasoner


# ============================================================================
# Agent Fixtures
# ============================================================================


@pytest.fixture
def make_agent(scripted_reasoner: ScriptedReasoner) -> Callable[..., Agent]:
    """Factory for agents that share the scripted reasoner by default.

    Agents are started unless ``start=False`` is passed.
    """

    def _make(
        name: str = "agent",
        capabilities: Iterable[str] = (),
        role: str = "Tester",
        reasoner: Any = None,
        config: Optional[AgentConfig] = None,
        start: bool = True,
    ) -> Agent:
        agent = Agent(
            name,
            role,
            capabilities,
            reasoner=reasoner or scripted_reasoner,
            config=config,
        )
        if start:
            agent.start()
        return agent

    return _make


@pytest.fixture
def sample_task() -> Task:
    """Create a task needing the research capability."""
    return Task(
        description="Survey recent work on vector databases",
        required_capabilities={"research"},
    )


# ============================================================================
# Messaging Fixtures
# ============================================================================


class RecordingSubscriber:
    """Subscriber that keeps every delivered message."""

    def __init__(self, name: str = "recorder"):
        self.name = name
        self.received: List[BusMessage] = []

    def receive_message(self, message: BusMessage) -> None:
        self.received.append(message)


class RecordingNotifier:
    """Notifier that records ``(sender, recipient, content)`` triples."""

    def __init__(self) -> None:
        self.sent: List[Tuple[str, str, Any]] = []

    async def send_message(self, sender: str, recipient: str, content: Any) -> bool:
        self.sent.append((sender, recipient, content))
        return True

    def of_type(self, message_type: str) -> List[Tuple[str, str, Any]]:
        return [entry for entry in self.sent if entry[2].get("type") == message_type]


@pytest.fixture
def recording_subscriber() -> RecordingSubscriber:
    """Create a subscriber that records deliveries."""
    return RecordingSubscriber()


@pytest.fixture
def recording_notifier() -> RecordingNotifier:
    """Create a notifier that records collaboration notifications."""
    return RecordingNotifier()


@pytest.fixture
def make_subscriber() -> Callable[[str], RecordingSubscriber]:
    """Factory for recording subscribers."""
    return RecordingSubscriber
