"""Scoring of agents against a pending task."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable, List, Optional, Tuple

from agent_orchestrator.agents.base import Agent, AgentState
from agent_orchestrator.tasks.models import Task


@dataclass(frozen=True)
class ScoringWeights:
    """Weights of the agent score.

    The score is the capability-match fraction times ``capability``, plus
    ``workload_base`` minus ``workload_per_task`` per active task (never
    negative), plus a memory bonus and a recency bonus.
    """

    capability: float = 40.0
    workload_base: float = 30.0
    workload_per_task: float = 10.0
    memory_healthy: float = 20.0
    memory_strained: float = 10.0
    memory_threshold: float = 80.0
    recent_activity: float = 10.0
    stale_activity: float = 5.0
    activity_window: float = 300.0


class AgentScorer:
    """Ranks active agents for a task."""

    def __init__(self, weights: Optional[ScoringWeights] = None):
        self.weights = weights or ScoringWeights()

    def score(self, agent: Agent, task: Task, now: Optional[datetime] = None) -> float:
        w = self.weights
        now = now or datetime.now(timezone.utc)
        total = 0.0

        required = task.required_capabilities
        if required:
            matched = sum(1 for cap in required if agent.has_capability(cap))
            total += matched / len(required) * w.capability

        total += max(0.0, w.workload_base - w.workload_per_task * len(agent.active_tasks))

        if agent.memory.usage_percentage() < w.memory_threshold:
            total += w.memory_healthy
        else:
            total += w.memory_strained

        idle_for = (now - agent.last_activity).total_seconds()
        total += w.recent_activity if idle_for < w.activity_window else w.stale_activity

        return total

    def rank(self, agents: Iterable[Agent], task: Task) -> List[Tuple[Agent, float]]:
        """Score every active agent, keeping the given order."""
        now = datetime.now(timezone.utc)
        return [
            (agent, self.score(agent, task, now))
            for agent in agents
            if agent.state == AgentState.ACTIVE
        ]

    def candidates(self, agents: Iterable[Agent], task: Task) -> List[Agent]:
        """Active agents from highest to lowest score; ties keep the given order."""
        ranked = sorted(self.rank(agents, task), key=lambda pair: pair[1], reverse=True)
        return [agent for agent, _ in ranked]

    def best(self, agents: Iterable[Agent], task: Task) -> Optional[Agent]:
        """Highest scoring active agent; the first one wins ties."""
        best_agent: Optional[Agent] = None
        best_score = float("-inf")
        for agent, score in self.rank(agents, task):
            if score > best_score:
                best_agent, best_score = agent, score
        return best_agent
