"""Priority task queue shared by the manager and its agents.

Tasks are kept sorted by ``(-priority_score, enqueued_at, arrival)`` so a
higher priority always dequeues first and equal priorities dequeue FIFO.
Every access to the task list happens under one ``asyncio.Lock``.

Example:
    ```python
    queue = TaskQueue()
    await queue.enqueue(Task(description="summarize"), priority="high")
    task = await queue.dequeue(timeout=1.0)
    ```
"""

from __future__ import annotations

import asyncio
import bisect
import itertools
import time
from collections import Counter
from typing import Any, Dict, List, Optional, Tuple, Union

from agent_orchestrator.observability.logging import get_logger
from agent_orchestrator.tasks.models import (
    Task,
    TaskLike,
    TaskPriority,
    TaskStatus,
    ensure_task,
    utcnow,
)

logger = get_logger(__name__)

_SortKey = Tuple[int, float, int]


class TaskQueue:
    """Mutex-guarded priority queue of tasks."""

    def __init__(self, poll_interval: float = 0.1):
        """Initialize the queue.

        Args:
            poll_interval: Seconds between polls while ``dequeue`` waits.
        """
        if poll_interval <= 0:
            raise ValueError("poll_interval must be positive")
        self.poll_interval = poll_interval
        self._items: List[Tuple[_SortKey, Task]] = []
        self._sequence = itertools.count()
        self._total_processed = 0
        self._lock = asyncio.Lock()

    async def enqueue(
        self,
        task: TaskLike,
        priority: Union[TaskPriority, str, None] = None,
    ) -> Task:
        """Add a task, stamping its priority, enqueue time and status.

        Args:
            task: Task or loose mapping to enqueue.
            priority: Priority override; None keeps the task's own priority.

        Returns:
            The stamped task.
        """
        task = ensure_task(task)
        if priority is not None:
            task.priority = TaskPriority.parse(priority)
        task.priority_score = task.priority.score
        task.enqueued_at = utcnow()
        task.status = TaskStatus.PENDING

        key = (-task.priority_score, task.enqueued_at.timestamp(), next(self._sequence))
        async with self._lock:
            bisect.insort(self._items, (key, task))

        logger.info(
            "task_enqueued",
            task_id=task.id,
            description=task.description,
            priority=task.priority.value,
        )
        return task

    async def dequeue(self, timeout: Optional[float] = None) -> Optional[Task]:
        """Pop the head of the queue.

        Waits until a task is available. With ``timeout``, polls every
        ``poll_interval`` seconds and gives up with None once it elapses.
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        while True:
            async with self._lock:
                if self._items:
                    return self._items.pop(0)[1]

            if deadline is not None and time.monotonic() >= deadline:
                return None
            await asyncio.sleep(self.poll_interval)

    async def peek(self) -> Optional[Task]:
        async with self._lock:
            return self._items[0][1] if self._items else None

    async def size(self) -> int:
        async with self._lock:
            return len(self._items)

    async def is_empty(self) -> bool:
        async with self._lock:
            return not self._items

    async def clear(self) -> None:
        async with self._lock:
            self._items.clear()
        logger.info("task_queue_cleared")

    async def remove_task(self, task_id: str) -> Optional[Task]:
        """Remove a queued task by id; returns it, or None if not queued."""
        async with self._lock:
            for index, (_, task) in enumerate(self._items):
                if task.id == task_id:
                    del self._items[index]
                    return task
        return None

    async def get_tasks_by_status(self, status: Union[TaskStatus, str]) -> List[Task]:
        status = TaskStatus(status)
        async with self._lock:
            return [task for _, task in self._items if task.status == status]

    async def get_tasks_by_priority(
        self, priority: Union[TaskPriority, str]
    ) -> List[Task]:
        priority = TaskPriority.parse(priority)
        async with self._lock:
            return [task for _, task in self._items if task.priority == priority]

    def mark_processed(self, task_id: str) -> int:
        """Count a task as processed. Does not touch the queued tasks."""
        self._total_processed += 1
        logger.info("task_processed", task_id=task_id, total=self._total_processed)
        return self._total_processed

    @property
    def total_processed(self) -> int:
        return self._total_processed

    async def stats(self) -> Dict[str, Any]:
        async with self._lock:
            tasks = [task for _, task in self._items]
        enqueued = [t.enqueued_at for t in tasks if t.enqueued_at is not None]
        return {
            "total_tasks": len(tasks),
            "total_processed": self._total_processed,
            "by_priority": dict(Counter(t.priority.value for t in tasks)),
            "by_status": dict(Counter(t.status.value for t in tasks)),
            "oldest_task": min(enqueued) if enqueued else None,
        }

    def __repr__(self) -> str:
        return f"TaskQueue(size={len(self._items)}, processed={self._total_processed})"
