"""Local fixtures for orchestration tests."""

from __future__ import annotations

from typing import Callable

import pytest

from agent_orchestrator.agents import Agent
from agent_orchestrator.orchestration import AgentManager, AgentScorer, ManagerConfig


# ============================================================================
# Manager Fixtures
# ============================================================================


@pytest.fixture
def fast_config() -> ManagerConfig:
    """Create a manager config with short intervals for tests."""
    return ManagerConfig(
        dispatch_timeout=0.02,
        requeue_backoff=0.02,
        error_backoff=0.02,
        monitor_interval=0.05,
        monitor_error_backoff=0.02,
        shutdown_grace=2.0,
        poll_interval=0.005,
    )


@pytest.fixture
def manager(scripted_reasoner, fast_config: ManagerConfig) -> AgentManager:
    """Create a manager whose default reasoner is the scripted one."""
    return AgentManager(reasoner=scripted_reasoner, config=fast_config)


@pytest.fixture
def register(manager: AgentManager, make_agent: Callable[..., Agent]) -> Callable[..., Agent]:
    """Factory that creates an active agent and registers it."""

    def _register(name: str, capabilities=(), **kwargs) -> Agent:
        return manager.register_agent(make_agent(name, capabilities, **kwargs))

    return _register


# ============================================================================
# Scoring Fixtures
# ============================================================================


@pytest.fixture
def scorer() -> AgentScorer:
    """Create a scorer with the default weights."""
    return AgentScorer()
