"""Phase-gated collaboration between agents.

A collaboration walks a fixed list of phases derived from the task's
workflow kind. A phase advances once enough distinct participants have
contributed to it; after the last phase the first participant synthesizes
all contributions into the final result.

States: ``pending -> in_progress -> completed | failed``. Terminal states
accept no further contributions.
"""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import (
    TYPE_CHECKING,
    Any,
    Dict,
    List,
    Optional,
    Protocol,
    Sequence,
    Set,
    Tuple,
)

from agent_orchestrator.agents import prompts
from agent_orchestrator.errors import InvalidStateError
from agent_orchestrator.observability.logging import get_logger, log_context
from agent_orchestrator.tasks.models import TaskLike, WorkflowKind, ensure_task

if TYPE_CHECKING:
    from agent_orchestrator.agents.base import Agent

logger = get_logger(__name__)

SYSTEM_SENDER = "collaboration_system"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Phase:
    """A stage of a collaboration.

    Attributes:
        name: Phase name.
        description: What participants should do in this phase.
        required_agents: Distinct contributors needed before advancing.
    """

    name: str
    description: str
    required_agents: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "required_agents": self.required_agents,
        }


_PHASE_TABLE: Dict[WorkflowKind, Tuple[Tuple[str, str], ...]] = {
    WorkflowKind.ANALYSIS: (
        ("data_gathering", "Gather and analyze data"),
        ("pattern_recognition", "Identify patterns and insights"),
        ("synthesis", "Synthesize findings into conclusions"),
    ),
    WorkflowKind.CREATIVE: (
        ("brainstorming", "Generate creative ideas"),
        ("refinement", "Refine and improve ideas"),
        ("finalization", "Finalize the creative output"),
    ),
    WorkflowKind.PROBLEM_SOLVING: (
        ("problem_analysis", "Analyze the problem thoroughly"),
        ("solution_generation", "Generate potential solutions"),
        ("solution_evaluation", "Evaluate and select the best solution"),
        ("implementation_plan", "Create an implementation plan"),
    ),
    WorkflowKind.GENERAL: (
        ("discussion", "Discuss the task"),
        ("consensus", "Reach consensus on the approach"),
        ("execution", "Execute the agreed approach"),
    ),
}


def build_phases(kind: WorkflowKind, participants: int) -> Tuple[Phase, ...]:
    """Phases for a workflow kind.

    Every phase but the last needs all participants; the last needs one.
    """
    template = _PHASE_TABLE[kind]
    last = len(template) - 1
    return tuple(
        Phase(name, description, 1 if index == last else participants)
        for index, (name, description) in enumerate(template)
    )


class CollaborationStatus(str, Enum):
    """Status of a collaboration."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class Contribution:
    """One agent's input to one phase."""

    content: Any
    phase: int
    timestamp: datetime = field(default_factory=utcnow)


class Notifier(Protocol):
    """Sends collaboration notifications; the manager or a bus."""

    async def send_message(self, sender: str, recipient: str, content: Any) -> bool:
        ...


class Collaboration:
    """A phase-gated workflow instance over one task.

    Example:
        collab = Collaboration(task, [researcher, writer], notifier=manager)
        await collab.start()
        await collab.add_contribution("researcher", "three sources found")
    """

    def __init__(
        self,
        task: TaskLike,
        agents: Sequence[Agent],
        notifier: Notifier,
        phases: Optional[Sequence[Phase]] = None,
        phase_timeout: Optional[float] = None,
    ):
        """Initialize the collaboration.

        Args:
            task: Task being collaborated on; its type selects the phases.
            agents: Participants. The first one synthesizes the result.
            notifier: Delivers phase and outcome notifications.
            phases: Explicit phase list overriding the workflow table.
            phase_timeout: Seconds a phase may stay open before
                ``check_timeout`` fails the collaboration.
        """
        self.id = str(uuid.uuid4())
        self.task = ensure_task(task)
        self.agents: List[Agent] = list(agents)
        self.notifier = notifier
        self.phase_timeout = phase_timeout

        if phases is None:
            self.phases = build_phases(self.task.type, len(self.agents))
        else:
            self.phases = tuple(phases)

        self.status = CollaborationStatus.PENDING
        self.current_phase = 0
        self.contributions: Dict[str, List[Contribution]] = {}
        self.result: Any = None
        self.error: Optional[str] = None

        self.created_at = utcnow()
        self.started_at: Optional[datetime] = None
        self.completed_at: Optional[datetime] = None
        self.failed_at: Optional[datetime] = None
        self._phase_opened: Optional[float] = None

    @property
    def participant_names(self) -> List[str]:
        return [agent.name for agent in self.agents]

    @property
    def is_terminal(self) -> bool:
        return self.status in (CollaborationStatus.COMPLETED, CollaborationStatus.FAILED)

    @property
    def synthesizing(self) -> bool:
        """Every phase has closed and the result is still being written."""
        return (
            self.status == CollaborationStatus.IN_PROGRESS
            and self.current_phase >= len(self.phases)
        )

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    async def start(self) -> "Collaboration":
        """Begin the first phase.

        Fails immediately when no agents participate or a phase needs more
        contributors than there are participants.

        Raises:
            InvalidStateError: If the collaboration was already started.
        """
        if self.status != CollaborationStatus.PENDING:
            raise InvalidStateError(
                f"Collaboration {self.id} already started", state=self.status.value
            )

        self.status = CollaborationStatus.IN_PROGRESS
        self.started_at = utcnow()
        with log_context(collaboration_id=self.id):
            logger.info("collaboration_started", agents=len(self.agents))

            problem = self._configuration_problem()
            if problem:
                await self.fail(problem)
                return self

            await self._open_phase()
        return self

    def _configuration_problem(self) -> Optional[str]:
        if not self.agents:
            return "collaboration has no participants"
        if not self.phases:
            return "collaboration has no phases"
        for phase in self.phases:
            if phase.required_agents > len(self.agents):
                return (
                    f"phase {phase.name!r} requires {phase.required_agents} agents "
                    f"but only {len(self.agents)} participate"
                )
        return None

    async def add_contribution(self, agent_name: str, content: Any) -> bool:
        """Record a contribution to the current phase.

        Returns:
            False if the collaboration is not in progress, every phase has
            closed, or the agent is not a participant.
        """
        if self.status != CollaborationStatus.IN_PROGRESS or self.synthesizing:
            return False
        if agent_name not in self.participant_names:
            return False

        self.contributions.setdefault(agent_name, []).append(
            Contribution(content=content, phase=self.current_phase)
        )
        with log_context(collaboration_id=self.id, agent_name=agent_name):
            logger.info("collaboration_contribution", phase=self.current_phase)

            if self._phase_complete():
                await self._advance()
        return True

    def _phase_contributors(self, phase: int) -> Set[str]:
        return {
            name
            for name, entries in self.contributions.items()
            if any(entry.phase == phase for entry in entries)
        }

    def _phase_complete(self) -> bool:
        if self.current_phase >= len(self.phases):
            return False
        required = self.phases[self.current_phase].required_agents
        return len(self._phase_contributors(self.current_phase)) >= required

    async def _advance(self) -> None:
        self.current_phase += 1
        if self.current_phase >= len(self.phases):
            await self._synthesize()
        else:
            await self._open_phase()

    async def _open_phase(self) -> None:
        phase = self.phases[self.current_phase]
        self._phase_opened = time.monotonic()
        logger.info(
            "collaboration_phase_started",
            phase=phase.name,
            phase_number=self.current_phase + 1,
        )
        await self._notify_all(
            {
                "type": "collaboration_phase",
                "collaboration_id": self.id,
                "phase": phase.to_dict(),
                "phase_number": self.current_phase + 1,
                "total_phases": len(self.phases),
            }
        )

    def _synthesis_prompt(self) -> str:
        lines: List[str] = []
        for index, phase in enumerate(self.phases):
            for name, entries in self.contributions.items():
                for entry in entries:
                    if entry.phase == index:
                        lines.append(f"[{phase.name}] {name}: {entry.content}")
        return prompts.SYNTHESIS_PROMPT.format(
            task=self.task.description,
            contributions="\n".join(lines),
        )

    async def _synthesize(self) -> None:
        synthesizer = self.agents[0]
        try:
            result = await synthesizer.think(
                self._synthesis_prompt(),
                {
                    "collaboration_id": self.id,
                    "task_id": self.task.id,
                    "contributors": sorted(self.contributions),
                },
            )
        except Exception as e:
            logger.error("collaboration_synthesis_failed", error=str(e))
            await self.fail(str(e))
            return
        await self.complete(result)

    async def complete(self, result: Any = None) -> "Collaboration":
        if self.is_terminal:
            return self
        self.status = CollaborationStatus.COMPLETED
        self.completed_at = utcnow()
        self.result = result
        logger.info(
            "collaboration_completed",
            collaboration_id=self.id,
            duration=self.duration,
        )
        await self._notify_all(
            {
                "type": "collaboration_completed",
                "collaboration_id": self.id,
                "result": result,
            }
        )
        return self

    async def fail(self, error: Any) -> "Collaboration":
        if self.is_terminal:
            return self
        self.status = CollaborationStatus.FAILED
        self.failed_at = utcnow()
        self.error = str(error)
        logger.error("collaboration_failed", collaboration_id=self.id, error=self.error)
        await self._notify_all(
            {
                "type": "collaboration_failed",
                "collaboration_id": self.id,
                "error": self.error,
            }
        )
        return self

    async def check_timeout(self) -> bool:
        """Fail the collaboration if its current phase has been open too long.

        Returns:
            True if the collaboration was failed by this call.
        """
        if (
            self.phase_timeout is None
            or self.status != CollaborationStatus.IN_PROGRESS
            or self._phase_opened is None
            or self.synthesizing
        ):
            return False
        if time.monotonic() - self._phase_opened <= self.phase_timeout:
            return False

        phase = self.phases[self.current_phase]
        await self.fail(
            f"phase {phase.name!r} timed out after {self.phase_timeout}s"
        )
        return True

    async def _notify_all(self, content: Dict[str, Any]) -> None:
        for agent in self.agents:
            await self.notifier.send_message(SYSTEM_SENDER, agent.name, content)

    # ------------------------------------------------------------------
    # Read views
    # ------------------------------------------------------------------

    @property
    def current_phase_info(self) -> Optional[Phase]:
        if self.current_phase >= len(self.phases):
            return None
        return self.phases[self.current_phase]

    def get_contributions(self, agent_name: Optional[str] = None) -> Any:
        """All contributions by agent, or one agent's list."""
        if agent_name is not None:
            return list(self.contributions.get(agent_name, []))
        return {name: list(entries) for name, entries in self.contributions.items()}

    def get_phase_contributions(self, phase: int) -> Dict[str, List[Contribution]]:
        result: Dict[str, List[Contribution]] = {}
        for name, entries in self.contributions.items():
            in_phase = [entry for entry in entries if entry.phase == phase]
            if in_phase:
                result[name] = in_phase
        return result

    @property
    def is_complete(self) -> bool:
        return self.status == CollaborationStatus.COMPLETED

    @property
    def is_failed(self) -> bool:
        return self.status == CollaborationStatus.FAILED

    @property
    def duration(self) -> Optional[float]:
        if self.started_at is None:
            return None
        end = self.completed_at or self.failed_at or utcnow()
        return (end - self.started_at).total_seconds()

    def summary(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "task_id": self.task.id,
            "description": self.task.description,
            "agents": self.participant_names,
            "status": self.status.value,
            "current_phase": self.current_phase,
            "total_phases": len(self.phases),
            "contributions_count": sum(len(e) for e in self.contributions.values()),
            "duration": self.duration,
            "created_at": self.created_at.isoformat(),
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "error": self.error,
        }

    def __repr__(self) -> str:
        return (
            f"Collaboration(id={self.id!r}, status={self.status.value!r}, "
            f"phase={self.current_phase}/{len(self.phases)})"
        )
