from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class Team:
    team_id: int
    org_id: int
    name: str
    supervisor_id: int
    created_at: datetime
    description: Optional[str] = None


@dataclass(frozen=True)
class TeamMember:
    team_id: int
    user_id: int
    full_name: str
    email: str
    added_at: Optional[datetime] = None


@dataclass(frozen=True)
class TeamView:
    """Read-model: a team together with its members."""

    team: Team
    members: list = field(default_factory=list)
