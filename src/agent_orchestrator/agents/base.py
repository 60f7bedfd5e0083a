"""Base agent implementation.

An agent is a named, capability-tagged worker with a lifecycle state, its
own bounded memory, an inbox and outbox, and a bounded number of
concurrently active tasks. It thinks through an injected reasoning
capability.

Agent state is not locked. Each agent is driven by one logical owner at a
time on the event loop; do not drive one agent from several threads.
"""

from __future__ import annotations

import json
import uuid
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import (
    TYPE_CHECKING,
    Any,
    Deque,
    Dict,
    Iterable,
    List,
    Optional,
    Protocol,
    Sequence,
    Union,
)

from agent_orchestrator.agents import prompts
from agent_orchestrator.llm.base import ReasoningCapability
from agent_orchestrator.llm.reasoner import EchoReasoner
from agent_orchestrator.memory import AgentMemory, MemoryImportance
from agent_orchestrator.messaging.bus import BusMessage
from agent_orchestrator.observability.logging import get_logger, log_context
from agent_orchestrator.tasks.models import Task, TaskLike, TaskStatus, ensure_task

if TYPE_CHECKING:
    from agent_orchestrator.messaging.bus import MessageBus
    from agent_orchestrator.observability.metrics import MetricsCollector

logger = get_logger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AgentState(str, Enum):
    """Lifecycle state of an agent."""

    IDLE = "idle"
    ACTIVE = "active"
    PAUSED = "paused"
    STOPPED = "stopped"


@dataclass
class AgentConfig:
    """Configuration for an agent.

    Attributes:
        max_concurrent_tasks: Upper bound on active tasks.
        max_task_duration: Seconds a task may stay active before it is
            reported as stuck.
        memory_size: Capacity of the agent's memory.
        mailbox_size: Messages kept in each of the inbox and outbox;
            oldest are dropped first.
        stub_responses: Return fixed placeholders instead of reasoning.
        model: Model identifier passed to the reasoner in the context.
        activity_window: Seconds within which activity counts as recent.
        memory_health_threshold: Memory usage percentage considered healthy.
    """

    max_concurrent_tasks: int = 3
    max_task_duration: float = 1800.0
    memory_size: int = 1000
    mailbox_size: int = 1000
    stub_responses: bool = False
    model: Optional[str] = None
    activity_window: float = 300.0
    memory_health_threshold: float = 90.0

    def __post_init__(self) -> None:
        if self.max_concurrent_tasks < 1:
            raise ValueError("max_concurrent_tasks must be at least 1")
        if self.max_task_duration <= 0:
            raise ValueError("max_task_duration must be positive")
        if self.memory_size < 1:
            raise ValueError("memory_size must be at least 1")
        if self.mailbox_size < 1:
            raise ValueError("mailbox_size must be at least 1")


class DecisionAction(str, Enum):
    """Actions an agent can decide on."""

    WAIT = "wait"
    THINK = "think"
    ACT = "act"
    COLLABORATE = "collaborate"
    DELEGATE = "delegate"


@dataclass
class Decision:
    """The outcome of ``decide_next_action``."""

    action: DecisionAction
    reason: str = ""
    details: Dict[str, Any] = field(default_factory=dict)
    raw: Optional[str] = None


@dataclass
class DecisionParseResult:
    """Either a parsed decision or the reason parsing failed."""

    decision: Optional[Decision] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.decision is not None

    @classmethod
    def success(cls, decision: Decision) -> "DecisionParseResult":
        return cls(decision=decision)

    @classmethod
    def failure(cls, error: str) -> "DecisionParseResult":
        return cls(error=error)


def parse_decision(text: str) -> DecisionParseResult:
    """Parse a reasoner response into a ``Decision``.

    The first ``{`` to the last ``}`` is read as JSON, so fenced or
    chatty responses still parse.
    """
    start, end = text.find("{"), text.rfind("}")
    if start == -1 or end < start:
        return DecisionParseResult.failure("no JSON object in response")

    try:
        data = json.loads(text[start : end + 1])
    except json.JSONDecodeError as e:
        return DecisionParseResult.failure(f"invalid JSON: {e}")
    if not isinstance(data, dict):
        return DecisionParseResult.failure("decision is not a JSON object")

    label = str(data.get("action", "")).strip().lstrip(":").lower()
    try:
        action = DecisionAction(label)
    except ValueError:
        return DecisionParseResult.failure(f"unknown action: {label!r}")

    details = data.get("details") or {}
    if not isinstance(details, dict):
        details = {"value": details}

    return DecisionParseResult.success(
        Decision(
            action=action,
            reason=str(data.get("reason", "")),
            details=details,
            raw=text,
        )
    )


@dataclass
class Delegation:
    """A hand-over of a task from one agent to another."""

    task: Task
    from_agent: str
    to_agent: str
    reason: Optional[str] = None
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    delegated_at: datetime = field(default_factory=utcnow)
    status: str = "pending"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "task": self.task.to_dict(),
            "from_agent": self.from_agent,
            "to_agent": self.to_agent,
            "reason": self.reason,
            "delegated_at": self.delegated_at.isoformat(),
            "status": self.status,
        }


@dataclass
class AgentHealth:
    """Health snapshot of an agent."""

    state: AgentState
    memory_healthy: bool
    no_stuck_tasks: bool
    last_activity_recent: bool

    @property
    def is_healthy(self) -> bool:
        return self.memory_healthy and self.no_stuck_tasks and self.last_activity_recent

    def to_dict(self) -> Dict[str, Any]:
        return {
            "state": self.state.value,
            "memory_healthy": self.memory_healthy,
            "no_stuck_tasks": self.no_stuck_tasks,
            "last_activity_recent": self.last_activity_recent,
        }


class Collaborator(Protocol):
    """What ``collaborate_with`` needs to know about its partner."""

    name: str
    role: str

    @property
    def capabilities(self) -> Sequence[str]: ...


class Agent:
    """A named, capability-tagged worker.

    Lifecycle: created idle, ``start()`` makes it active, ``pause()`` and
    ``resume()`` toggle, ``stop()`` is terminal.

    Example:
        agent = Agent("analyst", "Data Analyst", ["analysis"], reasoner=reasoner)
        agent.start()
        if agent.assign_task(Task(description="Q3 report")):
            ...
    """

    def __init__(
        self,
        name: str,
        role: str,
        capabilities: Iterable[str] = (),
        reasoner: Optional[ReasoningCapability] = None,
        config: Optional[AgentConfig] = None,
    ):
        """Initialize the agent.

        Args:
            name: Unique name of the agent.
            role: Free-text role label.
            capabilities: Capability tags used to match tasks.
            reasoner: Text-generation capability. When None, the manager
                injects its own at registration; standalone agents fall
                back to an ``EchoReasoner``.
            config: Agent configuration.
        """
        if not name:
            raise ValueError("Agent name must not be empty")
        self.name = name
        self.role = role
        self._capabilities: List[str] = list(dict.fromkeys(str(c) for c in capabilities))
        self.reasoner = reasoner
        self.config = config or AgentConfig()
        self.memory = AgentMemory(max_size=self.config.memory_size)
        self.metrics: Optional[MetricsCollector] = None

        self.state = AgentState.IDLE
        self.created_at = utcnow()
        self.last_activity = self.created_at

        self.active_tasks: List[Task] = []
        self.completed_tasks: List[Task] = []
        self.failed_tasks: List[Task] = []

        self.inbox: Deque[BusMessage] = deque(maxlen=self.config.mailbox_size)
        self.outbox: Deque[BusMessage] = deque(maxlen=self.config.mailbox_size)
        self._bus: Optional[MessageBus] = None
        self._fallback_reasoner: Optional[ReasoningCapability] = None
        self._logger = logger.bind(agent_name=name)

    @property
    def capabilities(self) -> List[str]:
        return list(self._capabilities)

    @property
    def max_concurrent_tasks(self) -> int:
        return self.config.max_concurrent_tasks

    @property
    def bus(self) -> Optional[MessageBus]:
        return self._bus

    def _touch(self) -> None:
        self.last_activity = utcnow()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> bool:
        if self.state in (AgentState.STOPPED, AgentState.ACTIVE):
            return False
        self.state = AgentState.ACTIVE
        self._touch()
        self._logger.info("agent_started")
        return True

    def stop(self) -> bool:
        if self.state == AgentState.STOPPED:
            return False
        self.state = AgentState.STOPPED
        self._touch()
        self._logger.info("agent_stopped")
        return True

    def pause(self) -> bool:
        if self.state != AgentState.ACTIVE:
            return False
        self.state = AgentState.PAUSED
        self._touch()
        self._logger.info("agent_paused")
        return True

    def resume(self) -> bool:
        if self.state != AgentState.PAUSED:
            return False
        self.state = AgentState.ACTIVE
        self._touch()
        self._logger.info("agent_resumed")
        return True

    @property
    def is_active(self) -> bool:
        return self.state == AgentState.ACTIVE

    # ------------------------------------------------------------------
    # Tasks
    # ------------------------------------------------------------------

    def has_capability(self, capability: str) -> bool:
        return str(capability) in self._capabilities

    def can_handle_task(self, task: TaskLike) -> bool:
        """Active, under capacity, and holding every required capability."""
        if self.state != AgentState.ACTIVE:
            return False
        if len(self.active_tasks) >= self.max_concurrent_tasks:
            return False
        task = ensure_task(task)
        return all(self.has_capability(cap) for cap in task.required_capabilities)

    def _find_active(self, task_id: str) -> Optional[Task]:
        return next((t for t in self.active_tasks if t.id == task_id), None)

    def assign_task(self, task: TaskLike) -> bool:
        """Accept a task if the capability gate passes.

        A task already in progress elsewhere is refused, so a task is
        active on at most one agent.

        Returns:
            True if the task was added to ``active_tasks``.
        """
        task = ensure_task(task)
        if not self.can_handle_task(task):
            return False
        if task.status == TaskStatus.IN_PROGRESS or self._find_active(task.id):
            return False

        task.assigned_at = utcnow()
        task.status = TaskStatus.IN_PROGRESS
        self.active_tasks.append(task)
        self._touch()
        self._logger.info("task_assigned", task_id=task.id, description=task.description)
        return True

    def complete_task(self, task_id: str, result: Any) -> bool:
        task = self._find_active(task_id)
        if task is None:
            return False

        self.active_tasks.remove(task)
        task.completed_at = utcnow()
        task.status = TaskStatus.COMPLETED
        task.result = result
        self.completed_tasks.append(task)
        self._touch()
        self._logger.info("task_completed", task_id=task_id)
        return True

    def fail_task(self, task_id: str, error: Union[str, BaseException]) -> bool:
        task = self._find_active(task_id)
        if task is None:
            return False

        self.active_tasks.remove(task)
        task.failed_at = utcnow()
        task.status = TaskStatus.FAILED
        task.error = str(error)
        self.failed_tasks.append(task)
        self._touch()
        self._logger.error("task_failed", task_id=task_id, error=task.error)
        return True

    async def execute_task(self, task: Task) -> Any:
        """Run an assigned task through ``think`` and complete it.

        Reasoning errors propagate; the caller decides how to fail the task.
        """
        with log_context(agent_name=self.name, task_id=task.id):
            result = await self.think(
                task.description,
                {"task_id": task.id, "task_type": task.type.value},
            )
            self.complete_task(task.id, result)
            return result

    # ------------------------------------------------------------------
    # Messaging
    # ------------------------------------------------------------------

    def attach_bus(self, bus: Optional[MessageBus]) -> None:
        self._bus = bus

    async def send_message(self, to: str, content: Any) -> bool:
        """Record an outgoing message and deliver it through the bus.

        Returns:
            Whether the bus delivered it; False when no bus is attached.
        """
        self.outbox.append(BusMessage(sender=self.name, recipient=to, content=content))
        self._touch()
        if self._bus is None:
            self._logger.warning("message_not_sent", recipient=to, reason="no bus attached")
            return False
        return await self._bus.send_message(self.name, to, content)

    def receive_message(self, message: BusMessage) -> None:
        self.inbox.append(message)
        self.memory.add("message", message)
        self._touch()
        self._logger.debug("message_received", sender=message.sender)

    def get_messages(self, sender: Optional[str] = None) -> List[BusMessage]:
        if sender is None:
            return list(self.inbox)
        return [m for m in self.inbox if m.sender == sender]

    # ------------------------------------------------------------------
    # Reasoning
    # ------------------------------------------------------------------

    def _get_reasoner(self) -> ReasoningCapability:
        if self.reasoner is not None:
            return self.reasoner
        if self._fallback_reasoner is None:
            self._fallback_reasoner = EchoReasoner()
        return self._fallback_reasoner

    def _build_context(self, context: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        full: Dict[str, Any] = {
            "agent_name": self.name,
            "agent_role": self.role,
            "agent_capabilities": self.capabilities,
            "current_tasks": [t.description for t in self.active_tasks],
            "recent_memory": [e.key for e in self.memory.recent(10)],
            "current_time": utcnow().isoformat(),
        }
        if self.config.model:
            full["model"] = self.config.model
        full.update(context or {})
        return full

    async def think(self, prompt: str, context: Optional[Dict[str, Any]] = None) -> str:
        """Ask the reasoner for a response in this agent's voice.

        Raises:
            ProviderError: When the reasoning capability fails.
        """
        if self.config.stub_responses:
            return f"[stubbed] Agent {self.name} thinking: {prompt}"

        full_context = self._build_context(context)
        enhanced = prompts.AGENT_PROMPT.format(
            name=self.name,
            role=self.role,
            capabilities=prompts.format_capabilities(self._capabilities),
            context=prompts.format_context(full_context),
            prompt=prompt,
        )

        self._count("reasoning_requests_total")
        self._touch()
        try:
            return await self._get_reasoner().generate(enhanced, full_context)
        except Exception as e:
            self._count("reasoning_errors_total")
            self._logger.error("reasoning_failed", error=str(e))
            raise

    def _count(self, name: str) -> None:
        if self.metrics is not None:
            self.metrics.inc_counter(name, labels={"agent": self.name})

    async def decide_next_action(
        self, context: Optional[Dict[str, Any]] = None
    ) -> Decision:
        """Pick the next action; unparseable responses fall back to waiting."""
        if self.config.stub_responses:
            return Decision(action=DecisionAction.WAIT, reason="stubbed response")

        context = context or {}
        prompt = prompts.DECISION_PROMPT.format(
            name=self.name,
            context=prompts.format_context(context),
        )
        response = await self.think(prompt, context)

        parsed = parse_decision(response)
        if parsed.ok:
            assert parsed.decision is not None
            return parsed.decision

        self._logger.warning("decision_parse_failed", error=parsed.error)
        return Decision(
            action=DecisionAction.WAIT,
            reason="parse failure",
            details={"error": parsed.error},
            raw=response,
        )

    async def collaborate_with(
        self,
        other: Collaborator,
        task: TaskLike,
        context: Optional[Dict[str, Any]] = None,
    ) -> str:
        """Produce a contribution and send it to ``other``."""
        if self.config.stub_responses:
            return f"[stubbed] Collaboration between {self.name} and {other.name}"

        task = ensure_task(task)
        context = context or {}
        prompt = prompts.COLLABORATION_PROMPT.format(
            name=self.name,
            other_name=other.name,
            other_role=other.role,
            task=task.description,
            other_capabilities=prompts.format_capabilities(other.capabilities),
            context=prompts.format_context(context),
        )
        response = await self.think(prompt, context)

        await self.send_message(
            other.name,
            {
                "type": "collaboration_result",
                "task_id": task.id,
                "result": response,
                "from_agent": self.name,
            },
        )
        return response

    # ------------------------------------------------------------------
    # Delegation
    # ------------------------------------------------------------------

    def _can_delegate(self, task: Task, target: "Agent") -> bool:
        return (
            self.state == AgentState.ACTIVE
            and target.state == AgentState.ACTIVE
            and target.can_handle_task(task)
        )

    async def delegate_task(
        self,
        task: TaskLike,
        target: "Agent",
        reason: Optional[str] = None,
    ) -> Optional[Delegation]:
        """Hand a task to ``target``.

        The task is released from this agent's active tasks and sent to
        the target as a ``task_delegation`` message. The target must call
        ``accept_delegated_task`` to take it on.

        Returns:
            The delegation, or None if either agent cannot take part.
        """
        task = ensure_task(task)
        if not self._can_delegate(task, target):
            return None

        held = self._find_active(task.id)
        if held is not None:
            self.active_tasks.remove(held)
            task = held
        task.status = TaskStatus.PENDING
        task.assigned_at = None

        delegation = Delegation(
            task=task, from_agent=self.name, to_agent=target.name, reason=reason
        )
        await self.send_message(
            target.name,
            {"type": "task_delegation", "delegation": delegation.to_dict()},
        )
        self._logger.info("task_delegated", task_id=task.id, target=target.name)
        return delegation

    def accept_delegated_task(self, delegation: Delegation) -> bool:
        """Take on a delegated task if the capability gate still passes."""
        task = delegation.task
        if not self.can_handle_task(task):
            delegation.status = "rejected"
            self._logger.info("delegation_rejected", task_id=task.id)
            return False

        task.delegated_from = delegation.from_agent
        task.metadata["delegation_id"] = delegation.id
        accepted = self.assign_task(task)
        delegation.status = "accepted" if accepted else "rejected"
        return accepted

    # ------------------------------------------------------------------
    # Memory
    # ------------------------------------------------------------------

    def remember(
        self,
        key: str,
        value: Any,
        importance: Union[MemoryImportance, str] = MemoryImportance.NORMAL,
    ) -> None:
        self.memory.add(key, value, importance)
        self._touch()

    def recall(self, key: str) -> Any:
        return self.memory.get(key)

    def forget(self, key: str) -> Any:
        value = self.memory.remove(key)
        self._touch()
        return value

    # ------------------------------------------------------------------
    # Monitoring
    # ------------------------------------------------------------------

    def status(self) -> Dict[str, Any]:
        now = utcnow()
        return {
            "name": self.name,
            "role": self.role,
            "state": self.state.value,
            "capabilities": self.capabilities,
            "active_tasks": len(self.active_tasks),
            "completed_tasks": len(self.completed_tasks),
            "failed_tasks": len(self.failed_tasks),
            "memory_usage": self.memory.usage_percentage(),
            "last_activity": self.last_activity.isoformat(),
            "uptime": (now - self.created_at).total_seconds(),
        }

    def health_check(self) -> AgentHealth:
        now = utcnow()
        stuck = any(
            t.assigned_at is not None
            and (now - t.assigned_at).total_seconds() > self.config.max_task_duration
            for t in self.active_tasks
        )
        return AgentHealth(
            state=self.state,
            memory_healthy=self.memory.usage_percentage()
            < self.config.memory_health_threshold,
            no_stuck_tasks=not stuck,
            last_activity_recent=(now - self.last_activity).total_seconds()
            < self.config.activity_window,
        )

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(name={self.name!r}, role={self.role!r}, "
            f"state={self.state.value!r})"
        )
