"""Local fixtures for agent tests."""

from __future__ import annotations

from typing import Callable, Tuple

import pytest

from agent_orchestrator.agents import Agent, AgentConfig
from agent_orchestrator.messaging import MessageBus


# ============================================================================
# Agent Fixtures
# ============================================================================


@pytest.fixture
def researcher(make_agent: Callable[..., Agent]) -> Agent:
    """Create an active agent with research capabilities."""
    return make_agent("researcher", ["research", "analysis"], role="Researcher")


@pytest.fixture
def single_slot_config() -> AgentConfig:
    """Create a config allowing one active task."""
    return AgentConfig(max_concurrent_tasks=1)


@pytest.fixture
def stub_config() -> AgentConfig:
    """Create a config with stubbed responses."""
    return AgentConfig(stub_responses=True)


@pytest.fixture
def wired_pair(make_agent: Callable[..., Agent]) -> Tuple[Agent, Agent, MessageBus]:
    """Create two active research agents subscribed to one bus."""
    bus = MessageBus()
    alice = make_agent("alice", ["research"], role="Lead")
    bob = make_agent("bob", ["research"], role="Assistant")
    for agent in (alice, bob):
        agent.attach_bus(bus)
        bus.subscribe(agent.name, agent)
    return alice, bob, bus
