"""Teams of agents and phase-gated collaborations."""

from agent_orchestrator.teams.collaboration import (
    SYSTEM_SENDER,
    Collaboration,
    CollaborationStatus,
    Contribution,
    Notifier,
    Phase,
    build_phases,
)
from agent_orchestrator.teams.team import (
    AgentTeam,
    TeamCollaboration,
    TeamMeeting,
    TeamStrategy,
)

__all__ = [
    # Collaboration
    "SYSTEM_SENDER",
    "Collaboration",
    "CollaborationStatus",
    "Contribution",
    "Notifier",
    "Phase",
    "build_phases",
    # Teams
    "AgentTeam",
    "TeamCollaboration",
    "TeamMeeting",
    "TeamStrategy",
]
