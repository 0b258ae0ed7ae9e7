"""Role checks for organization-scoped data.

Every service asks the policy before reading or mutating tenant data; a user
who is not a member of the organization is treated as unauthorized.
"""

from __future__ import annotations

from typing import Iterable, Optional

from ..core.enums import MemberRole
from ..core.exceptions import AuthorizationError
from .repository import MemberRepository

MANAGERS = frozenset({MemberRole.OWNER, MemberRole.ADMIN})
LEADS = frozenset({MemberRole.OWNER, MemberRole.ADMIN, MemberRole.SUPERVISOR})


def role_level(role: MemberRole) -> int:
    return MemberRole(role).level


def can_grant_role(actor: MemberRole, target: MemberRole) -> bool:
    """Nobody grants ownership; otherwise only roles up to the actor's own level."""

    if target == MemberRole.OWNER:
        return False
    return role_level(target) <= role_level(actor)


class AccessPolicy:
    def __init__(self, members: MemberRepository):
        self._members = members

    def role_of(self, org_id: int, user_id: int) -> Optional[MemberRole]:
        membership = self._members.get_membership(int(org_id), int(user_id))
        return membership.role if membership else None

    def require_member(self, org_id: int, user_id: int) -> MemberRole:
        role = self.role_of(org_id, user_id)
        if role is None:
            raise AuthorizationError("You are not a member of this organization")
        return role

    def require_role(
        self,
        org_id: int,
        user_id: int,
        allowed: Iterable[MemberRole],
        *,
        message: str = "You do not have permission to perform this action",
    ) -> MemberRole:
        role = self.require_member(org_id, user_id)
        if role not in set(allowed):
            raise AuthorizationError(message)
        return role
