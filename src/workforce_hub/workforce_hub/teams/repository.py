from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Team, TeamMember


class TeamRepository(Protocol):
    def create_with_supervisor(self, *, org_id: int, name: str, description: Optional[str], supervisor_id: int) -> int:
        """Insert the team and the supervisor's team membership in one transaction."""

        raise NotImplementedError

    def get_by_id(self, team_id: int) -> Optional[Team]:
        raise NotImplementedError

    def update(self, team_id: int, *, name: str, description: Optional[str], supervisor_id: int) -> bool:
        """Update the team; a new supervisor is added as a member in the same transaction."""

        raise NotImplementedError

    def delete(self, team_id: int) -> bool:
        raise NotImplementedError

    def list_for_org(self, org_id: int) -> Sequence[Team]:
        raise NotImplementedError

    def list_members(self, team_id: int) -> Sequence[TeamMember]:
        raise NotImplementedError

    def is_member(self, team_id: int, user_id: int) -> bool:
        raise NotImplementedError

    def add_member(self, team_id: int, user_id: int) -> None:
        raise NotImplementedError

    def remove_member(self, team_id: int, user_id: int) -> bool:
        raise NotImplementedError
