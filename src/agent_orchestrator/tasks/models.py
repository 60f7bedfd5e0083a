"""Task record and its enums."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field, fields
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Iterable, Mapping, Optional, Set, Union


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TaskPriority(str, Enum):
    """Dispatch priority of a task."""

    CRITICAL = "critical"
    HIGH = "high"
    NORMAL = "normal"
    LOW = "low"

    @property
    def score(self) -> int:
        return _PRIORITY_SCORES[self]

    @classmethod
    def parse(cls, value: Union["TaskPriority", str, None]) -> "TaskPriority":
        """Parse a label leniently; unknown labels become ``NORMAL``."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            return cls.NORMAL


_PRIORITY_SCORES = {
    TaskPriority.CRITICAL: 4,
    TaskPriority.HIGH: 3,
    TaskPriority.NORMAL: 2,
    TaskPriority.LOW: 1,
}


class TaskStatus(str, Enum):
    """Lifecycle status of a task."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"


class WorkflowKind(str, Enum):
    """Kind of work a task represents; selects the collaboration phases."""

    ANALYSIS = "analysis"
    CREATIVE = "creative"
    PROBLEM_SOLVING = "problem_solving"
    GENERAL = "general"

    @classmethod
    def parse(cls, value: Union["WorkflowKind", str, None]) -> "WorkflowKind":
        """Parse a label leniently; unknown labels become ``GENERAL``."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            return cls.GENERAL


@dataclass
class Task:
    """A unit of work submitted to the manager.

    Attributes:
        id: Unique identifier, generated when absent.
        description: What needs to be done.
        required_capabilities: Capabilities an agent must all have.
        priority: Dispatch priority.
        type: Workflow kind, used to pick collaboration phases.
        status: Current lifecycle status.
        priority_score: Numeric priority stamped by the queue.
        enqueued_at: When the task last entered the queue.
        assigned_at: When an agent accepted the task.
        completed_at: When the task completed.
        failed_at: When the task failed.
        result: Outcome of a completed task.
        error: Error message of a failed task.
        delegated_from: Name of the agent that delegated the task.
        metadata: Extra fields supplied by the caller.
    """

    description: str = ""
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    required_capabilities: Set[str] = field(default_factory=set)
    priority: TaskPriority = TaskPriority.NORMAL
    type: WorkflowKind = WorkflowKind.GENERAL
    status: TaskStatus = TaskStatus.PENDING
    priority_score: int = 0
    enqueued_at: Optional[datetime] = None
    assigned_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    failed_at: Optional[datetime] = None
    result: Any = None
    error: Optional[str] = None
    delegated_from: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.id:
            self.id = uuid.uuid4().hex
        self.priority = TaskPriority.parse(self.priority)
        self.type = WorkflowKind.parse(self.type)
        caps = self.required_capabilities
        if isinstance(caps, str):
            caps = {caps}
        self.required_capabilities = {str(c) for c in caps}
        if not self.priority_score:
            self.priority_score = self.priority.score

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Task":
        """Build a task from a loose mapping.

        Priorities and types may be strings, capabilities any iterable
        or a single capability name.
        Keys that are not task fields are kept in ``metadata``.
        """
        known = {f.name for f in fields(cls)}
        kwargs: Dict[str, Any] = {}
        metadata: Dict[str, Any] = dict(data.get("metadata") or {})

        for key, value in data.items():
            if key == "metadata":
                continue
            if key in known:
                kwargs[key] = value
            else:
                metadata[key] = value

        if "status" in kwargs:
            kwargs["status"] = TaskStatus(kwargs["status"])
        caps: Optional[Iterable[Any]] = kwargs.get("required_capabilities")
        if isinstance(caps, str):
            caps = [caps]
        kwargs["required_capabilities"] = set(caps or ())
        kwargs["id"] = kwargs.get("id") or ""
        kwargs["metadata"] = metadata
        return cls(**kwargs)

    def to_dict(self) -> Dict[str, Any]:
        """Snapshot the task as plain data."""
        return {
            "id": self.id,
            "description": self.description,
            "required_capabilities": sorted(self.required_capabilities),
            "priority": self.priority.value,
            "type": self.type.value,
            "status": self.status.value,
            "priority_score": self.priority_score,
            "enqueued_at": _iso(self.enqueued_at),
            "assigned_at": _iso(self.assigned_at),
            "completed_at": _iso(self.completed_at),
            "failed_at": _iso(self.failed_at),
            "result": self.result,
            "error": self.error,
            "delegated_from": self.delegated_from,
            "metadata": dict(self.metadata),
        }


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


TaskLike = Union[Task, Mapping[str, Any]]


def ensure_task(task: TaskLike) -> Task:
    """Accept either a ``Task`` or a loose mapping."""
    if isinstance(task, Task):
        return task
    return Task.from_dict(task)
