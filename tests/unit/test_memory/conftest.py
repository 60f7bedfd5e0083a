"""Local fixtures for memory module tests."""

from __future__ import annotations

import pytest

from agent_orchestrator.memory import AgentMemory, MemoryImportance


# ============================================================================
# Memory Fixtures
# ============================================================================


@pytest.fixture
def memory() -> AgentMemory:
    """Create a memory with room for three entries."""
    return AgentMemory(max_size=3)


@pytest.fixture
def populated_memory() -> AgentMemory:
    """Create a memory holding entries of every importance."""
    memory = AgentMemory(max_size=10)
    memory.add("low_note", "Quantum scratch notes", MemoryImportance.LOW)
    memory.add("normal_note", "weather is mild", MemoryImportance.NORMAL)
    memory.add("high_note", "quantum computing deadline", MemoryImportance.HIGH)
    memory.add("critical_note", "API key rotation", MemoryImportance.CRITICAL)
    return memory
