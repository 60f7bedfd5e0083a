"""Bounded, importance-ranked key/value memory owned by one agent.

The store is not locked: it is only touched by its owning agent, and the
event loop serializes that agent's bookkeeping.
"""

from __future__ import annotations

from typing import Any, Dict, Iterator, List, Optional, Union

from agent_orchestrator.memory.base import MemoryEntry, MemoryImportance, utcnow
from agent_orchestrator.observability.logging import get_logger

logger = get_logger(__name__)


class AgentMemory:
    """Key/value memory with importance-based eviction.

    At capacity, the oldest entry of normal or low importance is evicted
    before a new key is inserted. If every entry is high or critical the
    store grows past ``max_size`` and a warning is logged.

    Example:
        memory = AgentMemory(max_size=100)
        memory.add("topic", "quantum computing", importance="high")
        memory.get("topic")  # "quantum computing"
    """

    def __init__(self, max_size: int = 1000):
        if max_size <= 0:
            raise ValueError("max_size must be positive")
        self._max_size = max_size
        # Insertion order is creation order; the first evictable entry is the oldest.
        self._entries: Dict[str, MemoryEntry] = {}

    @property
    def max_size(self) -> int:
        return self._max_size

    def add(
        self,
        key: str,
        value: Any,
        importance: Union[MemoryImportance, str] = MemoryImportance.NORMAL,
    ) -> MemoryEntry:
        """Store ``value`` under ``key``.

        Re-adding an existing key replaces its value and importance without
        evicting anything.

        Returns:
            The stored entry.
        """
        level = MemoryImportance.parse(importance)
        existing = self._entries.get(key)
        if existing is not None:
            existing.value = value
            existing.importance = level
            existing.accessed_at = utcnow()
            return existing

        if len(self._entries) >= self._max_size:
            self._evict()

        entry = MemoryEntry(key=key, value=value, importance=level)
        self._entries[key] = entry
        return entry

    def _evict(self) -> Optional[MemoryEntry]:
        for key, entry in self._entries.items():
            if entry.evictable:
                del self._entries[key]
                return entry

        logger.warning(
            "memory_over_capacity",
            size=len(self._entries),
            max_size=self._max_size,
        )
        return None

    def get(self, key: str) -> Any:
        """Return the value for ``key`` or None, recording the access."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        entry.touch()
        return entry.value

    def get_entry(self, key: str) -> Optional[MemoryEntry]:
        return self._entries.get(key)

    def remove(self, key: str) -> Any:
        """Delete ``key`` and return its value, or None if absent."""
        entry = self._entries.pop(key, None)
        return entry.value if entry is not None else None

    def search(self, query: str, limit: int = 10) -> List[Any]:
        """Case-insensitive substring search over keys and values.

        Returns:
            Matching values, highest importance first.
        """
        needle = query.lower()
        matches = [
            entry
            for entry in self._entries.values()
            if needle in entry.key.lower() or needle in str(entry.value).lower()
        ]
        matches.sort(key=lambda e: e.importance_score, reverse=True)
        return [entry.value for entry in matches[:limit]]

    def recent(self, n: int = 10) -> List[MemoryEntry]:
        """Most recently created entries, newest first."""
        return list(reversed(self._entries.values()))[:n]

    def important(self, n: int = 5) -> List[MemoryEntry]:
        """High and critical entries, highest score first."""
        entries = [e for e in self._entries.values() if e.importance_score >= 3]
        entries.sort(key=lambda e: e.importance_score, reverse=True)
        return entries[:n]

    def usage_percentage(self) -> float:
        return round(len(self._entries) / self._max_size * 100, 2)

    def clear(self) -> None:
        self._entries.clear()

    def size(self) -> int:
        return len(self._entries)

    def is_empty(self) -> bool:
        return not self._entries

    def keys(self) -> List[str]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __iter__(self) -> Iterator[MemoryEntry]:
        return iter(list(self._entries.values()))
