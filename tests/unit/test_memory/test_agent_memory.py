"""Unit tests for agent memory.

Tests for:
- MemoryImportance parsing and scores
- MemoryEntry model
- AgentMemory bounds, eviction and queries
"""

from __future__ import annotations

import pytest

from agent_orchestrator.memory import AgentMemory, MemoryEntry, MemoryImportance


# ============================================================================
# MemoryImportance Tests
# ============================================================================


class TestMemoryImportance:
    """Tests for the MemoryImportance enum."""

    def test_scores(self):
        """Test that importance levels map to their numeric scores."""
        assert MemoryImportance.CRITICAL.score == 4
        assert MemoryImportance.HIGH.score == 3
        assert MemoryImportance.NORMAL.score == 2
        assert MemoryImportance.LOW.score == 1

    def test_parse_is_case_insensitive(self):
        """Test parsing labels regardless of case."""
        assert MemoryImportance.parse("HIGH") == MemoryImportance.HIGH
        assert MemoryImportance.parse(MemoryImportance.LOW) == MemoryImportance.LOW

    def test_parse_unknown_falls_back_to_normal(self):
        """Test that unknown labels become normal."""
        assert MemoryImportance.parse("urgent") == MemoryImportance.NORMAL
        assert MemoryImportance.parse(None) == MemoryImportance.NORMAL


# ============================================================================
# MemoryEntry Tests
# ============================================================================


class TestMemoryEntry:
    """Tests for the MemoryEntry model."""

    def test_defaults(self):
        """Test default values of a new entry."""
        entry = MemoryEntry(key="k", value=1)

        assert entry.importance == MemoryImportance.NORMAL
        assert entry.access_count == 0
        assert entry.created_at.tzinfo is not None

    def test_evictable_only_for_normal_and_low(self):
        """Test which importance levels can be evicted."""
        assert MemoryEntry(key="a", importance=MemoryImportance.LOW).evictable
        assert MemoryEntry(key="b", importance=MemoryImportance.NORMAL).evictable
        assert not MemoryEntry(key="c", importance=MemoryImportance.HIGH).evictable
        assert not MemoryEntry(key="d", importance=MemoryImportance.CRITICAL).evictable

    def test_touch_records_access(self):
        """Test that touch bumps the access counter."""
        entry = MemoryEntry(key="k")
        entry.touch()
        entry.touch()

        assert entry.access_count == 2


# ============================================================================
# AgentMemory Tests
# ============================================================================


class TestAgentMemoryBasics:
    """Tests for adding, reading and removing entries."""

    def test_invalid_max_size(self):
        """Test that a non-positive capacity is rejected."""
        with pytest.raises(ValueError):
            AgentMemory(max_size=0)

    def test_add_and_get(self, memory: AgentMemory):
        """Test storing and reading a value."""
        memory.add("topic", "quantum computing", "high")

        assert memory.get("topic") == "quantum computing"
        assert memory.get_entry("topic").importance == MemoryImportance.HIGH

    def test_get_missing_returns_none(self, memory: AgentMemory):
        """Test that unknown keys read as None."""
        assert memory.get("missing") is None

    def test_get_counts_accesses(self, memory: AgentMemory):
        """Test that each get is recorded on the entry."""
        memory.add("k", "v")
        memory.get("k")
        memory.get("k")

        assert memory.get_entry("k").access_count == 2

    def test_readd_replaces_in_place(self, memory: AgentMemory):
        """Test that re-adding a key updates it without eviction."""
        memory.add("a", 1)
        memory.add("b", 2)
        memory.add("c", 3)

        memory.add("a", 10, MemoryImportance.CRITICAL)

        assert memory.size() == 3
        assert memory.get("a") == 10
        assert memory.get_entry("a").importance == MemoryImportance.CRITICAL
        assert memory.keys() == ["a", "b", "c"]

    def test_remove_returns_value(self, memory: AgentMemory):
        """Test that remove hands back the stored value."""
        memory.add("k", "v")

        assert memory.remove("k") == "v"
        assert "k" not in memory
        assert memory.remove("k") is None

    def test_clear(self, memory: AgentMemory):
        """Test clearing all entries."""
        memory.add("k", "v")
        memory.clear()

        assert memory.is_empty()
        assert len(memory) == 0


class TestAgentMemoryEviction:
    """Tests for the capacity bound."""

    def test_size_never_exceeds_bound_with_evictable_entries(self, memory: AgentMemory):
        """Test that the oldest normal entries are evicted first."""
        for i in range(5):
            memory.add(f"k{i}", i)

        assert memory.size() == 3
        assert memory.keys() == ["k2", "k3", "k4"]

    def test_important_entries_survive_eviction(self, memory: AgentMemory):
        """Test that high importance entries are skipped when evicting."""
        memory.add("keep", "important", MemoryImportance.HIGH)
        memory.add("old", "first normal")
        memory.add("newer", "second normal")

        memory.add("latest", "third normal")

        assert memory.keys() == ["keep", "newer", "latest"]

    def test_low_entries_are_evictable(self, memory: AgentMemory):
        """Test that low importance entries are evicted too."""
        memory.add("a", 1, MemoryImportance.CRITICAL)
        memory.add("b", 2, MemoryImportance.LOW)
        memory.add("c", 3, MemoryImportance.HIGH)

        memory.add("d", 4)

        assert "b" not in memory
        assert memory.size() == 3

    def test_grows_when_nothing_is_evictable(self, memory: AgentMemory):
        """Test that the store grows past capacity rather than dropping important data."""
        for i in range(4):
            memory.add(f"k{i}", i, MemoryImportance.HIGH)

        assert memory.size() == 4
        assert memory.usage_percentage() == pytest.approx(133.33)


class TestAgentMemoryQueries:
    """Tests for search, recent, important and usage."""

    def test_search_matches_keys_and_values(self, populated_memory: AgentMemory):
        """Test case-insensitive search, highest importance first."""
        results = populated_memory.search("QUANTUM")

        assert results == ["quantum computing deadline", "Quantum scratch notes"]

    def test_search_matches_key(self, populated_memory: AgentMemory):
        """Test that keys are searched as well as values."""
        assert populated_memory.search("critical_") == ["API key rotation"]

    def test_search_limit(self, populated_memory: AgentMemory):
        """Test that search honors the limit."""
        assert len(populated_memory.search("note", limit=2)) == 2

    def test_recent_is_newest_first(self, populated_memory: AgentMemory):
        """Test that recent returns the newest entries first."""
        keys = [entry.key for entry in populated_memory.recent(2)]

        assert keys == ["critical_note", "high_note"]

    def test_important_returns_high_and_critical(self, populated_memory: AgentMemory):
        """Test that only high and critical entries are important."""
        keys = [entry.key for entry in populated_memory.important()]

        assert keys == ["critical_note", "high_note"]

    def test_usage_percentage(self):
        """Test usage as a percentage of capacity."""
        memory = AgentMemory(max_size=4)
        memory.add("k", "v")

        assert memory.usage_percentage() == 25.0

    def test_iteration_yields_entries(self, populated_memory: AgentMemory):
        """Test iterating over the stored entries."""
        assert [entry.key for entry in populated_memory] == populated_memory.keys()
