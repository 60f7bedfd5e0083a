"""Agent manager: the top-level coordinator.

The manager owns the message bus and the task queue, keeps the agent
directory, and once started runs two background loops:

- the dispatcher, which dequeues tasks, scores active agents and assigns
  each task to the best scoring one that accepts it (or re-enqueues it
  at high priority);
- the health monitor, which checks every agent and open collaboration.

Assigned tasks execute in tracked asyncio tasks, at most ``max_workers``
at a time and one at a time per agent. A failing execution becomes a
failed task plus a log record; it never stops the loops.

Example:
    ```python
    manager = AgentManager(reasoner=my_reasoner)
    manager.register_agent(ResearchAgent()).start()
    await manager.start()
    await manager.submit_task(Task(description="Survey the field",
                                   required_capabilities={"research"}))
    ...
    await manager.stop()
    ```
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Sequence, Set, Union

from agent_orchestrator.agents.base import Agent, AgentHealth, AgentState
from agent_orchestrator.errors import AgentNotFoundError
from agent_orchestrator.llm.base import ReasoningCapability
from agent_orchestrator.llm.errors import ProviderError
from agent_orchestrator.llm.reasoner import EchoReasoner
from agent_orchestrator.messaging.bus import MessageBus
from agent_orchestrator.observability.logging import get_logger, log_context
from agent_orchestrator.observability.metrics import MetricsCollector
from agent_orchestrator.orchestration.scoring import AgentScorer
from agent_orchestrator.tasks.models import Task, TaskLike, TaskPriority, ensure_task
from agent_orchestrator.tasks.queue import TaskQueue
from agent_orchestrator.teams.collaboration import (
    Collaboration,
    CollaborationStatus,
    Phase,
)
from agent_orchestrator.teams.team import AgentTeam, TeamStrategy

logger = get_logger(__name__)


@dataclass
class ManagerConfig:
    """Configuration for the agent manager.

    Attributes:
        max_workers: Task executions allowed to run at once.
        dispatch_timeout: Seconds the dispatcher waits on an empty queue.
        requeue_backoff: Seconds the dispatcher sleeps after a requeue.
        error_backoff: Seconds the dispatcher sleeps after an error.
        monitor_interval: Seconds between health checks.
        monitor_error_backoff: Seconds the monitor sleeps after an error.
        shutdown_grace: Seconds ``stop`` waits for in-flight work.
        queue_health_limit: Queue size at which the queue is unhealthy.
        poll_interval: Poll interval of the task queue.
        max_history: Message history kept by the bus.
        collaboration_phase_timeout: Default phase timeout for
            collaborations; None disables it.
        finished_collaborations: Completed or failed collaborations kept
            for lookup; older ones are pruned by the monitor.
    """

    max_workers: int = 10
    dispatch_timeout: float = 1.0
    requeue_backoff: float = 5.0
    error_backoff: float = 1.0
    monitor_interval: float = 30.0
    monitor_error_backoff: float = 5.0
    shutdown_grace: float = 30.0
    queue_health_limit: int = 1000
    poll_interval: float = 0.1
    max_history: int = 10000
    collaboration_phase_timeout: Optional[float] = None
    finished_collaborations: int = 100

    def __post_init__(self) -> None:
        if self.max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        for name in (
            "dispatch_timeout",
            "requeue_backoff",
            "error_backoff",
            "monitor_interval",
            "monitor_error_backoff",
            "shutdown_grace",
            "finished_collaborations",
        ):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be >= 0")


class DispatchOutcome(str, Enum):
    """Result of one dispatcher cycle."""

    IDLE = "idle"  # Nothing was queued
    ASSIGNED = "assigned"  # An agent accepted the task
    REQUEUED = "requeued"  # No agent accepted; task is back at high priority


AgentRef = Union[Agent, str]


class AgentManager:
    """Registers agents, dispatches tasks and runs collaborations."""

    def __init__(
        self,
        reasoner: Optional[ReasoningCapability] = None,
        config: Optional[ManagerConfig] = None,
        metrics: Optional[MetricsCollector] = None,
        scorer: Optional[AgentScorer] = None,
    ):
        """Initialize the manager.

        Args:
            reasoner: Reasoning capability injected into registered agents
                that have none. Defaults to an ``EchoReasoner``.
            config: Manager configuration.
            metrics: Metrics collector; a fresh one by default.
            scorer: Agent scorer used for assignment.
        """
        self.config = config or ManagerConfig()
        self.reasoner: ReasoningCapability = reasoner or EchoReasoner()
        self.metrics = metrics or MetricsCollector()
        self.scorer = scorer or AgentScorer()
        self.bus = MessageBus(max_history=self.config.max_history, metrics=self.metrics)
        self.queue = TaskQueue(poll_interval=self.config.poll_interval)

        self._agents: Dict[str, Agent] = {}
        self._agent_locks: Dict[str, asyncio.Lock] = {}
        self._collaborations: Dict[str, Collaboration] = {}
        self._running = False
        self._loops: List[asyncio.Task[None]] = []
        self._executions: Set[asyncio.Task[None]] = set()
        self._worker_slots = asyncio.Semaphore(self.config.max_workers)
        self._wakeup: Optional[asyncio.Event] = None

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def agents(self) -> Dict[str, Agent]:
        return dict(self._agents)

    # ------------------------------------------------------------------
    # Agent directory
    # ------------------------------------------------------------------

    def register_agent(self, agent: Agent) -> Agent:
        """Add an agent to the directory and subscribe it to the bus."""
        if agent.reasoner is None:
            agent.reasoner = self.reasoner
        agent.metrics = self.metrics
        agent.attach_bus(self.bus)

        self._agents[agent.name] = agent
        self._agent_locks.setdefault(agent.name, asyncio.Lock())
        self.bus.subscribe(agent.name, agent)
        self.metrics.set_gauge("registered_agents", len(self._agents))
        logger.info("agent_registered", agent_name=agent.name, role=agent.role)
        return agent

    def unregister_agent(self, name: str) -> bool:
        """Remove and stop an agent. Returns False if it was not registered."""
        agent = self._agents.pop(name, None)
        if agent is None:
            return False

        self.bus.unsubscribe(name)
        self._agent_locks.pop(name, None)
        agent.stop()
        self.metrics.set_gauge("registered_agents", len(self._agents))
        logger.info("agent_unregistered", agent_name=name)
        return True

    def get_agent(self, name: str) -> Optional[Agent]:
        return self._agents.get(name)

    def require_agent(self, name: str) -> Agent:
        """Like ``get_agent`` but raises ``AgentNotFoundError``."""
        agent = self._agents.get(name)
        if agent is None:
            raise AgentNotFoundError(name)
        return agent

    def list_agents(self) -> List[Dict[str, Any]]:
        return [agent.status() for agent in self._agents.values()]

    # ------------------------------------------------------------------
    # Tasks
    # ------------------------------------------------------------------

    async def submit_task(self, task: TaskLike) -> Task:
        """Enqueue a task; the dispatcher assigns it later."""
        queued = await self.queue.enqueue(task)
        self.metrics.inc_counter("tasks_submitted_total")
        self.metrics.set_gauge("queue_depth", await self.queue.size())
        logger.info("task_submitted", task_id=queued.id, description=queued.description)
        return queued

    def assign_task_to_agent(self, task: TaskLike, agent_name: str) -> bool:
        agent = self._agents.get(agent_name)
        if agent is None:
            return False
        return agent.assign_task(task)

    def find_best_agent_for_task(self, task: TaskLike) -> Optional[Agent]:
        """Highest scoring active agent, or None when none is active."""
        return self.scorer.best(self._agents.values(), ensure_task(task))

    def auto_assign_task(self, task: TaskLike) -> bool:
        task = ensure_task(task)
        agent = self.find_best_agent_for_task(task)
        if agent is None:
            return False
        return self.assign_task_to_agent(task, agent.name)

    async def dispatch_once(self) -> DispatchOutcome:
        """Run one dispatcher cycle.

        Active agents are offered the task from the highest score down and
        the first one that accepts gets it. A task nobody accepts is
        re-enqueued at high priority, so it is never dropped.
        """
        task = await self.queue.dequeue(timeout=self.config.dispatch_timeout)
        if task is None:
            return DispatchOutcome.IDLE

        candidates = self.scorer.candidates(self._agents.values(), task)
        for agent in candidates:
            if agent.assign_task(task):
                self.metrics.inc_counter("tasks_dispatched_total")
                self._schedule_execution(agent, task)
                logger.info("task_dispatched", task_id=task.id, agent_name=agent.name)
                return DispatchOutcome.ASSIGNED

        await self.queue.enqueue(task, TaskPriority.HIGH)
        self.metrics.inc_counter("tasks_requeued_total")
        logger.warning(
            "task_requeued",
            task_id=task.id,
            reason="no available agent" if not candidates else "agents rejected task",
        )
        return DispatchOutcome.REQUEUED

    def _schedule_execution(self, agent: Agent, task: Task) -> None:
        execution = asyncio.create_task(
            self._execute(agent, task), name=f"execute-{task.id}"
        )
        self._executions.add(execution)
        execution.add_done_callback(self._executions.discard)

    async def _execute(self, agent: Agent, task: Task) -> None:
        lock = self._agent_locks.setdefault(agent.name, asyncio.Lock())
        started = time.perf_counter()
        with log_context(agent_name=agent.name, task_id=task.id, correlation_id=task.id):
            try:
                async with self._worker_slots, lock:
                    started = time.perf_counter()
                    await agent.execute_task(task)
                self.metrics.inc_counter("tasks_completed_total")
            except ProviderError as e:
                agent.fail_task(task.id, e)
                self.metrics.inc_counter("tasks_failed_total")
                logger.error("task_execution_failed", error=str(e))
            except asyncio.CancelledError:
                agent.fail_task(task.id, "cancelled during shutdown")
                self.metrics.inc_counter("tasks_failed_total")
                raise
            except Exception as e:
                agent.fail_task(task.id, e)
                self.metrics.inc_counter("tasks_failed_total")
                logger.exception("task_execution_crashed", error=str(e))
            finally:
                self.queue.mark_processed(task.id)
                self.metrics.observe_histogram(
                    "task_execution_duration_seconds",
                    time.perf_counter() - started,
                )

    async def wait_for_executions(self, timeout: Optional[float] = None) -> bool:
        """Wait for in-flight task executions. Returns True if all finished."""
        pending = set(self._executions)
        if not pending:
            return True
        _, still_running = await asyncio.wait(pending, timeout=timeout)
        return not still_running

    # ------------------------------------------------------------------
    # Messaging
    # ------------------------------------------------------------------

    async def send_message(self, sender: str, recipient: str, content: Any) -> bool:
        return await self.bus.send_message(sender, recipient, content)

    async def broadcast_message(
        self, sender: str, content: Any, exclude: Iterable[str] = ()
    ) -> int:
        return await self.bus.broadcast(sender, content, exclude=exclude)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> bool:
        """Start the dispatcher and health monitor loops."""
        if self._running:
            return False
        self._running = True
        self._start_loops()
        logger.info("manager_started", agents=len(self._agents))
        return True

    def _start_loops(self) -> None:
        self._wakeup = asyncio.Event()
        self._loops = [
            asyncio.create_task(self._dispatch_loop(), name="agent-dispatcher"),
            asyncio.create_task(self._monitor_loop(), name="agent-monitor"),
        ]

    async def _stop_loops(self, include_executions: bool) -> None:
        if self._wakeup is not None:
            self._wakeup.set()

        pending: Set[asyncio.Task[None]] = set(self._loops)
        if include_executions:
            pending |= self._executions
        if pending:
            _, late = await asyncio.wait(pending, timeout=self.config.shutdown_grace)
            for straggler in late:
                straggler.cancel()
            if late:
                logger.warning("shutdown_grace_exceeded", cancelled=len(late))
                await asyncio.gather(*late, return_exceptions=True)
        self._loops = []

    async def stop(self) -> bool:
        """Stop the loops, wait for in-flight work, then stop every agent.

        Work still running after ``shutdown_grace`` seconds is cancelled.
        """
        if not self._running:
            return False
        self._running = False
        await self._stop_loops(include_executions=True)
        for agent in self._agents.values():
            agent.stop()
        logger.info("manager_stopped")
        return True

    async def pause(self) -> None:
        """Stop dispatching and pause every agent."""
        self._running = False
        await self._stop_loops(include_executions=False)
        for agent in self._agents.values():
            agent.pause()
        logger.info("manager_paused")

    async def resume(self) -> None:
        """Resume every paused agent and restart the loops."""
        for agent in self._agents.values():
            agent.resume()
        if not self._running:
            self._running = True
            self._start_loops()
        logger.info("manager_resumed")

    async def _sleep(self, seconds: float) -> None:
        """Sleep, waking early when the loops are being stopped."""
        if self._wakeup is None:
            await asyncio.sleep(seconds)
            return
        try:
            await asyncio.wait_for(self._wakeup.wait(), timeout=seconds)
        except asyncio.TimeoutError:
            pass

    async def _dispatch_loop(self) -> None:
        while self._running:
            try:
                outcome = await self.dispatch_once()
                if outcome == DispatchOutcome.REQUEUED:
                    await self._sleep(self.config.requeue_backoff)
            except Exception as e:
                logger.exception("dispatcher_error", error=str(e))
                await self._sleep(self.config.error_backoff)

    async def _monitor_loop(self) -> None:
        while self._running:
            try:
                await self.monitor_once()
                await self._sleep(self.config.monitor_interval)
            except Exception as e:
                logger.exception("monitor_error", error=str(e))
                await self._sleep(self.config.monitor_error_backoff)

    async def monitor_once(self) -> Dict[str, AgentHealth]:
        """Check every agent and time out stuck collaborations.

        Returns:
            Health per agent name.
        """
        report: Dict[str, AgentHealth] = {}
        for name, agent in list(self._agents.items()):
            health = agent.health_check()
            report[name] = health
            if not health.is_healthy:
                logger.warning("agent_unhealthy", agent_name=name, **health.to_dict())

        for collaboration in list(self._collaborations.values()):
            if collaboration.status == CollaborationStatus.IN_PROGRESS:
                await collaboration.check_timeout()
        self._prune_collaborations()

        self.metrics.set_gauge("queue_depth", await self.queue.size())
        return report

    def _prune_collaborations(self) -> None:
        finished = [c.id for c in self._collaborations.values() if c.is_terminal]
        overflow = len(finished) - self.config.finished_collaborations
        for collaboration_id in finished[: max(overflow, 0)]:
            del self._collaborations[collaboration_id]

    # ------------------------------------------------------------------
    # Status
    # ------------------------------------------------------------------

    def memory_usage(self) -> float:
        """System-wide memory usage percentage across agents."""
        used = sum(a.memory.size() for a in self._agents.values())
        capacity = sum(a.memory.max_size for a in self._agents.values())
        if capacity == 0:
            return 0.0
        return round(used / capacity * 100, 2)

    def _loops_alive(self) -> bool:
        return bool(self._loops) and all(not loop.done() for loop in self._loops)

    async def system_status(self) -> Dict[str, Any]:
        states = [agent.state for agent in self._agents.values()]
        return {
            "running": self._running,
            "total_agents": len(states),
            "active_agents": states.count(AgentState.ACTIVE),
            "paused_agents": states.count(AgentState.PAUSED),
            "stopped_agents": states.count(AgentState.STOPPED),
            "pending_tasks": await self.queue.size(),
            "total_tasks_processed": self.queue.total_processed,
            "executions_in_flight": len(self._executions),
            "loops_running": self._loops_alive(),
            "collaborations": len(self._collaborations),
        }

    async def health_check(self) -> Dict[str, Any]:
        return {
            "system_healthy": self._running and self._loops_alive(),
            "agent_health": [
                {"name": agent.name, "health": agent.health_check().to_dict()}
                for agent in self._agents.values()
            ],
            "memory_usage": self.memory_usage(),
            "task_queue_healthy": await self.queue.size() < self.config.queue_health_limit,
        }

    # ------------------------------------------------------------------
    # Teams and collaborations
    # ------------------------------------------------------------------

    def _ensure_registered(self, agent: Agent) -> Agent:
        if self._agents.get(agent.name) is not agent:
            self.register_agent(agent)
        return agent

    def create_agent_team(
        self,
        name: str,
        agents: Sequence[AgentRef],
        strategy: Union[TeamStrategy, str] = TeamStrategy.ROUND_ROBIN,
    ) -> AgentTeam:
        """Build a team, registering any agents not yet registered.

        Raises:
            AgentNotFoundError: If a name does not resolve to an agent.
        """
        members = [
            self.require_agent(ref) if isinstance(ref, str) else self._ensure_registered(ref)
            for ref in agents
        ]
        team = AgentTeam(name=name, agents=members, strategy=strategy, manager=self)
        logger.info("team_created", team=name, strategy=team.strategy.value)
        return team

    async def orchestrate_collaboration(
        self,
        task: TaskLike,
        agents: Sequence[AgentRef],
        phases: Optional[Sequence[Phase]] = None,
        phase_timeout: Optional[float] = None,
    ) -> Optional[Collaboration]:
        """Start a collaboration among the given agents.

        Unknown names are skipped; new agent objects are registered.

        Returns:
            The started collaboration, or None if no participant resolved.
        """
        participants: List[Agent] = []
        for ref in agents:
            if isinstance(ref, str):
                agent = self._agents.get(ref)
                if agent is None:
                    logger.warning("collaboration_agent_missing", agent_name=ref)
                    continue
                participants.append(agent)
            else:
                participants.append(self._ensure_registered(ref))

        if not participants:
            return None

        collaboration = Collaboration(
            task,
            participants,
            notifier=self,
            phases=phases,
            phase_timeout=(
                phase_timeout
                if phase_timeout is not None
                else self.config.collaboration_phase_timeout
            ),
        )
        self._collaborations[collaboration.id] = collaboration
        await collaboration.start()
        return collaboration

    def get_collaboration(self, collaboration_id: str) -> Optional[Collaboration]:
        return self._collaborations.get(collaboration_id)

    def __repr__(self) -> str:
        return (
            f"AgentManager(agents={len(self._agents)}, running={self._running})"
        )
