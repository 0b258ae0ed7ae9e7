from __future__ import annotations

import logging
from typing import Optional, Sequence

from ..common.validators import optional_text, require_non_empty
from ..core.enums import MemberRole
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..organizations.policy import MANAGERS, AccessPolicy
from .model import Team, TeamView
from .repository import TeamRepository

logger = logging.getLogger(__name__)

_UNSET = object()


class TeamService:
    """Use cases: teams led by a supervisor inside an organization."""

    def __init__(self, teams: TeamRepository, policy: AccessPolicy):
        self._teams = teams
        self._policy = policy

    def _get(self, team_id: int) -> Team:
        team = self._teams.get_by_id(int(team_id))
        if not team:
            raise NotFoundError("Team not found")
        return team

    def _require_supervisor(self, org_id: int, supervisor_id) -> int:
        if supervisor_id in (None, ""):
            raise ValidationError("Supervisor is required")
        try:
            supervisor_id = int(supervisor_id)
        except (TypeError, ValueError):
            raise ValidationError("Supervisor is not valid")
        if self._policy.role_of(org_id, supervisor_id) != MemberRole.SUPERVISOR:
            raise ValidationError("The team lead must be a supervisor of this organization")
        return supervisor_id

    def create_team(
        self,
        org_id: int,
        *,
        user_id: int,
        name: str,
        supervisor_id,
        description: Optional[str] = None,
    ) -> Team:
        self._policy.require_role(org_id, user_id, MANAGERS, message="Only owners and admins can manage teams")
        name = require_non_empty(name, "Team name")
        supervisor_id = self._require_supervisor(org_id, supervisor_id)

        team_id = self._teams.create_with_supervisor(
            org_id=int(org_id), name=name, description=optional_text(description), supervisor_id=supervisor_id
        )
        logger.info("Team %s created in organization %s by user %s", team_id, org_id, user_id)
        return self._get(team_id)

    def update_team(
        self,
        team_id: int,
        *,
        user_id: int,
        name=_UNSET,
        description=_UNSET,
        supervisor_id=_UNSET,
    ) -> Team:
        team = self._get(team_id)
        self._policy.require_role(team.org_id, user_id, MANAGERS, message="Only owners and admins can manage teams")

        new_name = team.name if name is _UNSET else require_non_empty(name, "Team name")
        new_description = team.description if description is _UNSET else optional_text(description)
        new_supervisor = (
            team.supervisor_id
            if supervisor_id is _UNSET or supervisor_id == team.supervisor_id
            else self._require_supervisor(team.org_id, supervisor_id)
        )

        self._teams.update(team.team_id, name=new_name, description=new_description, supervisor_id=new_supervisor)
        logger.info("Team %s updated by user %s", team_id, user_id)
        return self._get(team.team_id)

    def delete_team(self, team_id: int, *, user_id: int) -> None:
        team = self._get(team_id)
        self._policy.require_role(team.org_id, user_id, MANAGERS, message="Only owners and admins can manage teams")
        self._teams.delete(team.team_id)
        logger.info("Team %s deleted by user %s", team_id, user_id)

    def _require_can_edit_members(self, team: Team, user_id: int) -> None:
        role = self._policy.require_member(team.org_id, user_id)
        if role not in MANAGERS and team.supervisor_id != int(user_id):
            raise AuthorizationError("Only owners, admins and the team supervisor can manage team members")

    def add_member(self, team_id: int, *, user_id: int, member_id: int) -> None:
        team = self._get(team_id)
        self._require_can_edit_members(team, user_id)
        if self._policy.role_of(team.org_id, member_id) is None:
            raise ValidationError("User is not a member of this organization")
        if self._teams.is_member(team.team_id, int(member_id)):
            raise ValidationError("User is already a member of this team")

        self._teams.add_member(team.team_id, int(member_id))
        logger.info("User %s added to team %s by user %s", member_id, team_id, user_id)

    def remove_member(self, team_id: int, *, user_id: int, member_id: int) -> None:
        team = self._get(team_id)
        self._require_can_edit_members(team, user_id)
        if int(member_id) == team.supervisor_id:
            raise ValidationError("The team supervisor cannot be removed from the team")
        if not self._teams.remove_member(team.team_id, int(member_id)):
            raise NotFoundError("User is not a member of this team")
        logger.info("User %s removed from team %s by user %s", member_id, team_id, user_id)

    def list_teams(self, org_id: int, *, user_id: int) -> Sequence[TeamView]:
        self._policy.require_member(org_id, user_id)
        return [
            TeamView(team=t, members=list(self._teams.list_members(t.team_id)))
            for t in self._teams.list_for_org(int(org_id))
        ]
