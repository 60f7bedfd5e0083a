"""Task records and the shared priority queue."""

from agent_orchestrator.tasks.models import (
    Task,
    TaskLike,
    TaskPriority,
    TaskStatus,
    WorkflowKind,
    ensure_task,
)
from agent_orchestrator.tasks.queue import TaskQueue

__all__ = [
    "Task",
    "TaskLike",
    "TaskPriority",
    "TaskQueue",
    "TaskStatus",
    "WorkflowKind",
    "ensure_task",
]
