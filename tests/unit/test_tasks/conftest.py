"""Local fixtures for task tests."""

from __future__ import annotations

from typing import Any, Dict

import pytest

from agent_orchestrator.tasks import Task, TaskPriority, TaskQueue


# ============================================================================
# Task Fixtures
# ============================================================================


@pytest.fixture
def task_data() -> Dict[str, Any]:
    """Create a loose task mapping as callers submit it."""
    return {
        "description": "Write the quarterly summary",
        "priority": "high",
        "type": "creative",
        "required_capabilities": ["writing", "analysis"],
        "owner": "finance",
    }


@pytest.fixture
def normal_task() -> Task:
    """Create a normal priority task."""
    return Task(description="normal work", priority=TaskPriority.NORMAL)


# ============================================================================
# Queue Fixtures
# ============================================================================


@pytest.fixture
def queue() -> TaskQueue:
    """Create a queue with a short poll interval."""
    return TaskQueue(poll_interval=0.01)
