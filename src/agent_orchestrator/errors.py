"""Exception types for the orchestration core.

Recoverable conditions (capability mismatch, capacity, delivery failure,
unparseable decisions) are reported through return values. The exceptions
here are for programming errors and lookups that cannot be answered.
"""

from __future__ import annotations

from typing import Optional


class OrchestratorError(Exception):
    """Base exception for orchestration errors."""


class AgentNotFoundError(OrchestratorError, KeyError):
    """Raised when an agent name cannot be resolved."""

    def __init__(self, name: str):
        super().__init__(f"Agent not found: {name}")
        self.name = name

    def __str__(self) -> str:
        return self.args[0]


class InvalidStateError(OrchestratorError):
    """Raised when an operation is not allowed in the current state."""

    def __init__(self, message: str, state: Optional[str] = None):
        super().__init__(message)
        self.state = state
