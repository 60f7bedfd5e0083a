"""Agent teams.

A team is a named group of agents plus an assignment strategy. Members are
shared, not owned: the same agents are also registered with the manager.
"""

from __future__ import annotations

import asyncio
import time
import uuid
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Sequence, Union

from agent_orchestrator.agents import prompts
from agent_orchestrator.agents.base import Agent, AgentState
from agent_orchestrator.memory import MemoryImportance
from agent_orchestrator.observability.logging import get_logger
from agent_orchestrator.tasks.models import Task, TaskLike, ensure_task

if TYPE_CHECKING:
    from agent_orchestrator.orchestration.manager import AgentManager

logger = get_logger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TeamStrategy(str, Enum):
    """How a team picks the agent for a task."""

    ROUND_ROBIN = "round_robin"  # Rotate through members in order
    CAPABILITY_BASED = "capability_based"  # Member covering most required capabilities
    LOAD_BALANCED = "load_balanced"  # Member with fewest active tasks
    COLLABORATIVE = "collaborative"  # Every member contributes


@dataclass
class TeamCollaboration:
    """Record of one collaborative round.

    Attributes:
        task: The task worked on.
        agents: Names of the participating members.
        contributions: Contribution per member, or ``{"error": msg}``.
        status: ``completed`` if any member contributed, else ``failed``.
        started_at: When the round started.
        completed_at: When the round ended.
    """

    task: Task
    agents: List[str]
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    contributions: Dict[str, Any] = field(default_factory=dict)
    status: str = "in_progress"
    started_at: datetime = field(default_factory=utcnow)
    completed_at: Optional[datetime] = None

    @property
    def errors(self) -> Dict[str, str]:
        return {
            name: value["error"]
            for name, value in self.contributions.items()
            if _is_error(value)
        }

    @property
    def succeeded(self) -> List[str]:
        return [name for name, value in self.contributions.items() if not _is_error(value)]

    @property
    def duration(self) -> Optional[float]:
        if self.completed_at is None:
            return None
        return (self.completed_at - self.started_at).total_seconds()


@dataclass
class TeamMeeting:
    """Record of a team meeting."""

    agenda: str
    participants: List[str]
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    discussions: Dict[str, Any] = field(default_factory=dict)
    started_at: datetime = field(default_factory=utcnow)
    ended_at: Optional[datetime] = None

    @property
    def duration(self) -> Optional[float]:
        if self.ended_at is None:
            return None
        return (self.ended_at - self.started_at).total_seconds()


def _is_error(value: Any) -> bool:
    return isinstance(value, dict) and set(value) == {"error"}


class AgentTeam:
    """A named group of agents with an assignment strategy.

    Example:
        team = AgentTeam("writers", [alice, bob], strategy="load_balanced")
        await team.assign_task(Task(description="Draft the release notes"))
    """

    def __init__(
        self,
        name: str,
        agents: Sequence[Agent],
        strategy: Union[TeamStrategy, str] = TeamStrategy.ROUND_ROBIN,
        manager: Optional[AgentManager] = None,
    ):
        self.name = name
        self.agents: List[Agent] = list(agents)
        self.strategy = TeamStrategy(strategy)
        self.manager = manager
        self.created_at = utcnow()
        self.team_memory: Dict[str, Any] = {}
        self.collaboration_history: List[TeamCollaboration] = []
        self._cursor = 0
        self._logger = logger.bind(team=name)

    @property
    def members(self) -> List[str]:
        return [agent.name for agent in self.agents]

    def _active_members(self) -> List[Agent]:
        return [agent for agent in self.agents if agent.state == AgentState.ACTIVE]

    # ------------------------------------------------------------------
    # Assignment
    # ------------------------------------------------------------------

    async def assign_task(self, task: TaskLike) -> Union[bool, TeamCollaboration]:
        """Assign a task according to the team's strategy.

        Returns:
            Whether a member accepted the task, or the collaboration record
            for the collaborative strategy.
        """
        task = ensure_task(task)
        if self.strategy == TeamStrategy.COLLABORATIVE:
            return await self.collaborate_on_task(task)
        if self.strategy == TeamStrategy.CAPABILITY_BASED:
            return self._assign_capability_based(task)
        if self.strategy == TeamStrategy.LOAD_BALANCED:
            return self._assign_load_balanced(task)
        return self._assign_round_robin(task)

    def _assign_round_robin(self, task: Task) -> bool:
        if not self.agents:
            return False
        agent = self.agents[self._cursor]
        self._cursor = (self._cursor + 1) % len(self.agents)
        return agent.assign_task(task)

    def _assign_capability_based(self, task: Task) -> bool:
        candidates = self._active_members()
        if not candidates:
            return False
        # max() keeps the first of equally good members
        best = max(
            candidates,
            key=lambda a: sum(1 for cap in task.required_capabilities if a.has_capability(cap)),
        )
        return best.assign_task(task)

    def _assign_load_balanced(self, task: Task) -> bool:
        candidates = self._active_members()
        if not candidates:
            return False
        best = min(candidates, key=lambda a: len(a.active_tasks))
        return best.assign_task(task)

    def _team_context(self) -> Dict[str, Any]:
        return {
            "team_name": self.name,
            "team_strategy": self.strategy.value,
            "team_members": [
                {"name": a.name, "role": a.role, "capabilities": a.capabilities}
                for a in self.agents
            ],
            "team_memory_keys": list(self.team_memory),
            "recent_collaborations": [
                {"id": c.id, "status": c.status} for c in self.collaboration_history[-5:]
            ],
        }

    async def collaborate_on_task(self, task: TaskLike) -> TeamCollaboration:
        """Ask every member for a contribution.

        A member that raises is recorded as ``{"error": message}``; the
        round never raises to the caller.
        """
        task = ensure_task(task)
        record = TeamCollaboration(task=task, agents=self.members)
        context = self._team_context()

        results = await asyncio.gather(
            *[agent.collaborate_with(agent, task, context) for agent in self.agents],
            return_exceptions=True,
        )

        for agent, result in zip(self.agents, results):
            if isinstance(result, Exception):
                self._logger.error(
                    "team_contribution_failed",
                    agent_name=agent.name,
                    error=str(result),
                )
                record.contributions[agent.name] = {"error": str(result)}
            elif isinstance(result, BaseException):
                raise result
            else:
                record.contributions[agent.name] = result

        record.completed_at = utcnow()
        record.status = "completed" if record.succeeded else "failed"
        self.collaboration_history.append(record)

        self._logger.info(
            "team_collaboration_finished",
            task_id=task.id,
            status=record.status,
            errors=len(record.errors),
        )
        return record

    # ------------------------------------------------------------------
    # Communication
    # ------------------------------------------------------------------

    async def team_meeting(self, agenda: str) -> TeamMeeting:
        """Ask every member for their perspective on ``agenda``."""
        meeting = TeamMeeting(agenda=agenda, participants=self.members)
        context = self._team_context()

        results = await asyncio.gather(
            *[
                agent.think(
                    prompts.TEAM_MEETING_PROMPT.format(
                        team=self.name, agenda=agenda, role=agent.role
                    ),
                    context,
                )
                for agent in self.agents
            ],
            return_exceptions=True,
        )
        for agent, result in zip(self.agents, results):
            if isinstance(result, Exception):
                meeting.discussions[agent.name] = {"error": str(result)}
            elif isinstance(result, BaseException):
                raise result
            else:
                meeting.discussions[agent.name] = result

        meeting.ended_at = utcnow()
        self.team_memory[f"meeting_{meeting.id}"] = meeting
        self._logger.info("team_meeting_finished", agenda=agenda)
        return meeting

    async def share_knowledge(self, agent_name: str, knowledge: Any) -> int:
        """Record knowledge and broadcast it to the other members.

        Returns:
            Number of members that received it.
        """
        self.team_memory[f"knowledge_{uuid.uuid4().hex[:8]}_{int(time.time())}"] = {
            "shared_by": agent_name,
            "knowledge": knowledge,
            "shared_at": utcnow(),
        }

        if self.manager is None:
            self._logger.warning("knowledge_not_broadcast", reason="team has no manager")
            return 0

        members = set(self.members)
        outsiders = [name for name in self.manager.bus.subscribers if name not in members]
        delivered = await self.manager.broadcast_message(
            agent_name,
            {"type": "knowledge_share", "knowledge": knowledge, "shared_by": agent_name},
            exclude=outsiders + [agent_name],
        )
        self._logger.info("knowledge_shared", agent_name=agent_name, delivered=delivered)
        return delivered

    # ------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------

    def team_status(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "strategy": self.strategy.value,
            "agent_count": len(self.agents),
            "active_agents": len(self._active_members()),
            "total_tasks": sum(len(a.active_tasks) for a in self.agents),
            "team_memory_size": len(self.team_memory),
            "collaboration_count": len(self.collaboration_history),
            "created_at": self.created_at.isoformat(),
        }

    def memory_usage(self) -> float:
        used = sum(a.memory.size() for a in self.agents)
        capacity = sum(a.memory.max_size for a in self.agents)
        if capacity == 0:
            return 0.0
        return round(used / capacity * 100, 2)

    @staticmethod
    def _success_rate(records: Sequence[TeamCollaboration]) -> float:
        if not records:
            return 0.0
        completed = sum(1 for r in records if r.status == "completed")
        return round(completed / len(records) * 100, 2)

    def team_health(self) -> Dict[str, Any]:
        health = [{"name": a.name, "health": a.health_check()} for a in self.agents]
        return {
            "overall_health": all(h["health"].is_healthy for h in health),
            "agent_health": [
                {"name": h["name"], "health": h["health"].to_dict()} for h in health
            ],
            "memory_usage": self.memory_usage(),
            "collaboration_success_rate": self._success_rate(self.collaboration_history),
        }

    def learn_from_experience(self) -> Optional[Dict[str, Any]]:
        """Derive insights from the last ten collaborations.

        The insights are stored in every member's memory with high
        importance. Returns None when there is no history.
        """
        recent = self.collaboration_history[-10:]
        if not recent:
            return None

        issues = Counter(error for r in recent for error in r.errors.values())
        successful = [r for r in recent if r.status == "completed"]
        best_practices: Dict[str, Any] = {}
        if successful:
            durations = [r.duration or 0.0 for r in successful]
            contributors = Counter(name for r in successful for name in r.succeeded)
            best_practices = {
                "average_duration": sum(durations) / len(durations),
                "most_active_contributors": contributors.most_common(3),
            }

        insights = {
            "total_collaborations": len(recent),
            "success_rate": self._success_rate(recent),
            "average_contributors": sum(len(r.contributions) for r in recent) / len(recent),
            "common_issues": issues.most_common(3),
            "best_practices": best_practices,
        }

        key = f"team_insights_{self.name}_{int(time.time())}"
        for agent in self.agents:
            agent.remember(key, insights, MemoryImportance.HIGH)

        self._logger.info("team_learned", collaborations=len(recent))
        return insights

    def __repr__(self) -> str:
        return (
            f"AgentTeam(name={self.name!r}, strategy={self.strategy.value!r}, "
            f"agents={len(self.agents)})"
        )
