"""Unit tests for the task record and its enums."""

from __future__ import annotations

from typing import Any, Dict

from agent_orchestrator.tasks import (
    Task,
    TaskPriority,
    TaskStatus,
    WorkflowKind,
    ensure_task,
)


# ============================================================================
# Enum Tests
# ============================================================================


class TestTaskPriority:
    """Tests for the TaskPriority enum."""

    def test_scores(self):
        """Test that priorities map to their numeric scores."""
        assert [p.score for p in TaskPriority] == [4, 3, 2, 1]

    def test_parse_unknown_is_normal(self):
        """Test that unknown priority labels become normal."""
        assert TaskPriority.parse("asap") == TaskPriority.NORMAL
        assert TaskPriority.parse("Critical") == TaskPriority.CRITICAL


class TestWorkflowKind:
    """Tests for the WorkflowKind enum."""

    def test_parse_known(self):
        """Test parsing a known workflow kind."""
        assert WorkflowKind.parse("problem_solving") == WorkflowKind.PROBLEM_SOLVING

    def test_parse_unknown_is_general(self):
        """Test that unknown workflow kinds become general."""
        assert WorkflowKind.parse("interpretive_dance") == WorkflowKind.GENERAL


# ============================================================================
# Task Tests
# ============================================================================


class TestTask:
    """Tests for the Task dataclass."""

    def test_defaults(self):
        """Test default values of a new task."""
        task = Task(description="do it")

        assert len(task.id) == 32
        assert task.status == TaskStatus.PENDING
        assert task.priority == TaskPriority.NORMAL
        assert task.priority_score == 2
        assert task.type == WorkflowKind.GENERAL
        assert task.required_capabilities == set()
        assert task.enqueued_at is None

    def test_ids_are_unique(self):
        """Test that generated ids do not collide."""
        assert len({Task().id for _ in range(50)}) == 50

    def test_string_fields_are_parsed(self):
        """Test that string priorities and types are converted to enums."""
        task = Task(description="x", priority="critical", type="analysis")

        assert task.priority == TaskPriority.CRITICAL
        assert task.priority_score == 4
        assert task.type == WorkflowKind.ANALYSIS

    def test_from_dict(self, task_data: Dict[str, Any]):
        """Test building a task from a loose mapping."""
        task = Task.from_dict(task_data)

        assert task.description == "Write the quarterly summary"
        assert task.priority == TaskPriority.HIGH
        assert task.type == WorkflowKind.CREATIVE
        assert task.required_capabilities == {"writing", "analysis"}
        assert task.metadata == {"owner": "finance"}

    def test_from_dict_keeps_given_id_and_status(self):
        """Test that explicit ids and statuses survive parsing."""
        task = Task.from_dict({"id": "task-7", "status": "completed"})

        assert task.id == "task-7"
        assert task.status == TaskStatus.COMPLETED

    def test_from_dict_unknown_labels(self):
        """Test lenient parsing of unknown priority and type labels."""
        task = Task.from_dict({"priority": "whenever", "type": "mystery"})

        assert task.priority == TaskPriority.NORMAL
        assert task.type == WorkflowKind.GENERAL

    def test_single_capability_string(self):
        """Test that a lone capability name is not split into characters."""
        parsed = Task.from_dict({"required_capabilities": "research"})
        direct = Task(required_capabilities="research")

        assert parsed.required_capabilities == {"research"}
        assert direct.required_capabilities == {"research"}

    def test_to_dict(self, task_data: Dict[str, Any]):
        """Test snapshotting a task to plain data."""
        data = Task.from_dict(task_data).to_dict()

        assert data["priority"] == "high"
        assert data["type"] == "creative"
        assert data["status"] == "pending"
        assert data["required_capabilities"] == ["analysis", "writing"]
        assert data["assigned_at"] is None


class TestEnsureTask:
    """Tests for ensure_task."""

    def test_passes_tasks_through(self, normal_task: Task):
        """Test that Task instances are returned unchanged."""
        assert ensure_task(normal_task) is normal_task

    def test_converts_mappings(self, task_data: Dict[str, Any]):
        """Test that mappings are converted to tasks."""
        assert isinstance(ensure_task(task_data), Task)
