#!/usr/bin/env python3
"""Example 1: Research Team - dispatch, teams and a phase-gated collaboration.

A manager with three specialized agents:
- ResearchAgent: picks up research tasks from the queue
- CreativeAgent: brainstorms in a collaborative team round
- CoordinatorAgent: joins a collaboration that the researcher synthesizes

Reasoner: EchoReasoner (offline, echoes every prompt). Swap in an
LLMReasoner wrapping a real provider to get actual answers.
"""

import asyncio

from agent_orchestrator import (
    AgentManager,
    CoordinatorAgent,
    CreativeAgent,
    EchoReasoner,
    LogConfig,
    ManagerConfig,
    ResearchAgent,
    Task,
    TaskStatus,
    TeamStrategy,
    configure_logging,
)
from agent_orchestrator.observability import LogLevel


# ============================================================================
# Setup
# ============================================================================

def build_manager() -> AgentManager:
    """Create a manager with three started agents."""
    manager = AgentManager(
        reasoner=EchoReasoner(),
        config=ManagerConfig(dispatch_timeout=0.2, monitor_interval=5.0),
    )
    for agent in (ResearchAgent(), CreativeAgent(), CoordinatorAgent()):
        manager.register_agent(agent).start()
    return manager


# ============================================================================
# Scenarios
# ============================================================================

async def dispatch_tasks(manager: AgentManager) -> None:
    """Submit tasks and let the dispatcher route them by capability."""
    print("\n[1/3] Dispatching tasks...")
    tasks = [
        await manager.submit_task(
            Task(description="Survey vector databases", required_capabilities={"research"})
        ),
        await manager.submit_task(
            {"description": "Name the new product", "required_capabilities": ["ideation"]}
        ),
    ]

    while any(task.status not in (TaskStatus.COMPLETED, TaskStatus.FAILED) for task in tasks):
        await asyncio.sleep(0.05)
    await manager.wait_for_executions(timeout=5.0)

    for task in tasks:
        print(f"  {task.description!r} -> {task.status.value}: {str(task.result)[:60]}")


async def team_round(manager: AgentManager) -> None:
    """Run one collaborative team round."""
    print("\n[2/3] Collaborative team round...")
    team = manager.create_agent_team(
        "launch", ["ResearchAgent", "CreativeAgent"], TeamStrategy.COLLABORATIVE
    )
    record = await team.assign_task(Task(description="Plan the launch"))
    print(f"  status={record.status} contributors={record.succeeded}")


async def collaborate(manager: AgentManager) -> None:
    """Walk a problem-solving collaboration through all of its phases."""
    print("\n[3/3] Phase-gated collaboration...")
    participants = ["ResearchAgent", "CoordinatorAgent"]
    collab = await manager.orchestrate_collaboration(
        {"description": "Cut cloud costs by 20%", "type": "problem_solving"},
        participants,
    )

    while not collab.is_complete and not collab.is_failed:
        phase = collab.current_phase_info
        for name in participants[: phase.required_agents]:
            await collab.add_contribution(name, f"{name} on {phase.name}")

    summary = collab.summary()
    print(f"  status={summary['status']} contributions={summary['contributions_count']}")
    print(f"  result: {str(collab.result)[:80]}")


async def main() -> None:
    configure_logging(LogConfig(level=LogLevel.WARNING))
    manager = build_manager()

    print("=" * 60)
    print("RESEARCH TEAM")
    print("=" * 60)

    await manager.start()
    try:
        await dispatch_tasks(manager)
        await team_round(manager)
        await collaborate(manager)
        print(f"\nSystem status: {await manager.system_status()}")
    finally:
        await manager.stop()


if __name__ == "__main__":
    asyncio.run(main())
