"""Top-level coordination: scoring and the agent manager."""

from agent_orchestrator.orchestration.manager import (
    AgentManager,
    DispatchOutcome,
    ManagerConfig,
)
from agent_orchestrator.orchestration.scoring import AgentScorer, ScoringWeights

__all__ = [
    "AgentManager",
    "AgentScorer",
    "DispatchOutcome",
    "ManagerConfig",
    "ScoringWeights",
]
