"""Agent Orchestrator - a multi-agent orchestration core.

This package provides:
- Agents with lifecycle state, bounded memory and capability-gated tasks
- Specialized research, creative, technical and coordinator agents
- A shared priority task queue and an inter-agent message bus
- Teams with round-robin, capability, load-balanced and collaborative
  assignment
- Phase-gated collaborations synthesized by the first participant
- An ``AgentManager`` that dispatches tasks and monitors agent health

Reasoning is pluggable: agents think through any object with an async
``generate(prompt, context) -> str`` method.

Example:
    from agent_orchestrator import AgentManager, ResearchAgent, Task

    manager = AgentManager(reasoner=my_reasoner)
    manager.register_agent(ResearchAgent()).start()
    await manager.start()
    await manager.submit_task(
        Task(description="Survey vector databases",
             required_capabilities={"research"})
    )
"""

__version__ = "0.1.0"

from .errors import AgentNotFoundError, InvalidStateError, OrchestratorError
from .llm import (
    EchoReasoner,
    LLMReasoner,
    ProviderError,
    ReasoningCapability,
    StubReasoner,
)
from .memory import AgentMemory, MemoryImportance
from .tasks import Task, TaskPriority, TaskQueue, TaskStatus, WorkflowKind
from .messaging import BusMessage, MessageBus
from .agents import (
    Agent,
    AgentConfig,
    AgentState,
    CoordinatorAgent,
    CreativeAgent,
    Decision,
    DecisionAction,
    Delegation,
    ResearchAgent,
    TechnicalAgent,
)
from .teams import AgentTeam, Collaboration, CollaborationStatus, Phase, TeamStrategy
from .orchestration import AgentManager, AgentScorer, ManagerConfig
from .observability import (
    LogConfig,
    MetricsCollector,
    configure_logging,
    get_logger,
)

__all__ = [
    "__version__",
    # Errors
    "AgentNotFoundError",
    "InvalidStateError",
    "OrchestratorError",
    # Reasoning
    "EchoReasoner",
    "LLMReasoner",
    "ProviderError",
    "ReasoningCapability",
    "StubReasoner",
    # Memory
    "AgentMemory",
    "MemoryImportance",
    # Tasks
    "Task",
    "TaskPriority",
    "TaskQueue",
    "TaskStatus",
    "WorkflowKind",
    # Messaging
    "BusMessage",
    "MessageBus",
    # Agents
    "Agent",
    "AgentConfig",
    "AgentState",
    "CoordinatorAgent",
    "CreativeAgent",
    "Decision",
    "DecisionAction",
    "Delegation",
    "ResearchAgent",
    "TechnicalAgent",
    # Teams
    "AgentTeam",
    "Collaboration",
    "CollaborationStatus",
    "Phase",
    "TeamStrategy",
    # Orchestration
    "AgentManager",
    "AgentScorer",
    "ManagerConfig",
    # Observability
    "LogConfig",
    "MetricsCollector",
    "configure_logging",
    "get_logger",
]
