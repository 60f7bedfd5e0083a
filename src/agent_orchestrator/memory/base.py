"""Memory entry model and importance levels."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MemoryImportance(str, Enum):
    """How strongly an entry resists eviction.

    Entries scoring 2 or lower (normal, low) are evictable; high and
    critical entries are never evicted implicitly.
    """

    CRITICAL = "critical"
    HIGH = "high"
    NORMAL = "normal"
    LOW = "low"

    @property
    def score(self) -> int:
        return _IMPORTANCE_SCORES[self]

    @classmethod
    def parse(cls, value: Union["MemoryImportance", str, None]) -> "MemoryImportance":
        """Parse a label leniently; unknown labels become ``NORMAL``."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            return cls.NORMAL


_IMPORTANCE_SCORES = {
    MemoryImportance.CRITICAL: 4,
    MemoryImportance.HIGH: 3,
    MemoryImportance.NORMAL: 2,
    MemoryImportance.LOW: 1,
}

EVICTABLE_SCORE = 2


class MemoryEntry(BaseModel):
    """A single entry in an agent's memory.

    Attributes:
        key: Lookup key, unique within one memory.
        value: The stored value.
        importance: Eviction rank of the entry.
        created_at: When the entry was first added.
        accessed_at: When the entry was last read or written.
        access_count: How many times ``get`` returned this entry.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    key: str
    value: Any = None
    importance: MemoryImportance = MemoryImportance.NORMAL
    created_at: datetime = Field(default_factory=utcnow)
    accessed_at: datetime = Field(default_factory=utcnow)
    access_count: int = 0

    @property
    def importance_score(self) -> int:
        return self.importance.score

    @property
    def evictable(self) -> bool:
        return self.importance_score <= EVICTABLE_SCORE

    def touch(self) -> None:
        """Record a read access."""
        self.accessed_at = utcnow()
        self.access_count += 1
