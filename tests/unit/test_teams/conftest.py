"""Local fixtures for team and collaboration tests."""

from __future__ import annotations

from typing import Callable, List

import pytest

from agent_orchestrator.agents import Agent
from agent_orchestrator.tasks import Task, WorkflowKind
from agent_orchestrator.teams import AgentTeam, TeamStrategy


# ============================================================================
# Team Fixtures
# ============================================================================


@pytest.fixture
def trio(make_agent: Callable[..., Agent]) -> List[Agent]:
    """Create three active agents with overlapping capabilities."""
    return [
        make_agent("ana", ["research"]),
        make_agent("ben", ["research", "writing"]),
        make_agent("cy", ["writing"]),
    ]


@pytest.fixture
def make_team(trio: List[Agent]) -> Callable[..., AgentTeam]:
    """Factory for teams over the trio."""

    def _make(strategy: TeamStrategy = TeamStrategy.ROUND_ROBIN, **kwargs) -> AgentTeam:
        return AgentTeam("crew", trio, strategy=strategy, **kwargs)

    return _make


# ============================================================================
# Collaboration Fixtures
# ============================================================================


@pytest.fixture
def duo(make_agent: Callable[..., Agent]) -> List[Agent]:
    """Create two active agents for a collaboration."""
    return [make_agent("lead"), make_agent("helper")]


@pytest.fixture
def general_task() -> Task:
    """Create a general-purpose task."""
    return Task(description="Plan the offsite", type=WorkflowKind.GENERAL)
