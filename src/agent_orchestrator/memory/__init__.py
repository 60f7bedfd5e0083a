"""Per-agent bounded memory."""

from agent_orchestrator.memory.agent_memory import AgentMemory
from agent_orchestrator.memory.base import MemoryEntry, MemoryImportance

__all__ = [
    "AgentMemory",
    "MemoryEntry",
    "MemoryImportance",
]
