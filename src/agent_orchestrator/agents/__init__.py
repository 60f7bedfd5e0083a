"""Agents: the base worker and its specialized variants."""

from agent_orchestrator.agents.base import (
    Agent,
    AgentConfig,
    AgentHealth,
    AgentState,
    Decision,
    DecisionAction,
    DecisionParseResult,
    Delegation,
    parse_decision,
)
from agent_orchestrator.agents.specialized import (
    CoordinatorAgent,
    CreativeAgent,
    ProblemApproach,
    ResearchAgent,
    ResearchDepth,
    SpecializedAgent,
    StoryLength,
    TechnicalAgent,
    parse_ideas,
)

__all__ = [
    # Base
    "Agent",
    "AgentConfig",
    "AgentHealth",
    "AgentState",
    "Decision",
    "DecisionAction",
    "DecisionParseResult",
    "Delegation",
    "parse_decision",
    # Specialized
    "CoordinatorAgent",
    "CreativeAgent",
    "ProblemApproach",
    "ResearchAgent",
    "ResearchDepth",
    "SpecializedAgent",
    "StoryLength",
    "TechnicalAgent",
    "parse_ideas",
]
