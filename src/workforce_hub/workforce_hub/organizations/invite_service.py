from __future__ import annotations

import logging
import secrets
import string
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Optional, Sequence

from ..common.datetime_utils import now_local
from ..common.validators import normalize_email, require_int_range
from ..core.constants import DEFAULT_INVITE_EXPIRY_DAYS, INVITE_CODE_LENGTH
from ..core.enums import InviteStatus, MemberRole
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..users.repository import UserRepository
from .model import Invite
from .policy import LEADS, MANAGERS, AccessPolicy, can_grant_role
from .repository import InviteRepository

if TYPE_CHECKING:
    from .service import OrganizationService

logger = logging.getLogger(__name__)

_CODE_ALPHABET = string.ascii_uppercase + string.digits


@dataclass(frozen=True)
class InviteView:
    invite: Invite
    status: InviteStatus


def generate_invite_code(length: int = INVITE_CODE_LENGTH) -> str:
    return "".join(secrets.choice(_CODE_ALPHABET) for _ in range(length))


class InviteService:
    """Use cases: invite people into an organization and join with a code."""

    def __init__(
        self,
        invites: InviteRepository,
        policy: AccessPolicy,
        users: UserRepository,
        *,
        expiry_days: int = DEFAULT_INVITE_EXPIRY_DAYS,
        organizations: Optional["OrganizationService"] = None,
    ):
        self._invites = invites
        self._policy = policy
        self._users = users
        self._expiry_days = int(expiry_days)
        self._organizations = organizations

    def create_invite(
        self,
        org_id: int,
        *,
        user_id: int,
        role: MemberRole,
        email: Optional[str] = None,
        expires_in_days: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> Invite:
        now = now or now_local()
        inviter_role = self._policy.require_role(
            org_id, user_id, LEADS, message="Employees cannot invite members"
        )
        try:
            role = MemberRole(role)
        except ValueError:
            raise ValidationError("Role is not valid")
        if not can_grant_role(inviter_role, role):
            raise AuthorizationError("You cannot invite a member with a role above your own")

        invite_email = normalize_email(email) if email and email.strip() else None
        days = self._expiry_days if expires_in_days is None else require_int_range(
            expires_in_days, "Expiry (days)", min_value=1, max_value=90
        )

        code = generate_invite_code()
        while self._invites.get_by_code(code) is not None:
            code = generate_invite_code()

        invite_id = self._invites.create(
            org_id=int(org_id),
            code=code,
            role=role,
            email=invite_email,
            created_by=int(user_id),
            expires_at=now + timedelta(days=days),
        )
        logger.info("Invite %s (%s) created for organization %s by user %s", invite_id, role.value, org_id, user_id)
        invite = self._invites.get_by_id(invite_id)
        if not invite:
            raise NotFoundError("Invite not found")
        return invite

    def list_invites(self, org_id: int, *, user_id: int, now: Optional[datetime] = None) -> Sequence[InviteView]:
        now = now or now_local()
        self._policy.require_role(org_id, user_id, LEADS)
        return [InviteView(invite=i, status=i.status(now)) for i in self._invites.list_for_org(int(org_id))]

    def revoke_invite(self, invite_id: int, *, user_id: int) -> None:
        invite = self._invites.get_by_id(int(invite_id))
        if not invite:
            raise NotFoundError("Invite not found")
        role = self._policy.require_role(invite.org_id, user_id, LEADS)
        if invite.created_by != int(user_id) and role not in MANAGERS:
            raise AuthorizationError("You can only revoke invites you created")
        if invite.used_at is not None:
            raise ValidationError("This invite has already been used")
        self._invites.delete(invite.invite_id)
        logger.info("Invite %s revoked by user %s", invite_id, user_id)

    def claim_invite(self, code: str, *, user_id: int, now: Optional[datetime] = None) -> int:
        """Join the invite's organization and select it (which clocks the user in); returns its id."""

        now = now or now_local()
        code = (code or "").strip().upper()
        if not code:
            raise ValidationError("Invite code is required")

        invite = self._invites.get_by_code(code)
        if not invite:
            raise NotFoundError("Invite code not found")

        status = invite.status(now)
        if status == InviteStatus.USED:
            raise ValidationError("This invite has already been used")
        if status == InviteStatus.EXPIRED:
            raise ValidationError("This invite has expired")

        if invite.email:
            user = self._users.get_by_id(int(user_id))
            if not user or user.email.lower() != invite.email.lower():
                raise AuthorizationError("This invite was issued for a different email address")

        if self._policy.role_of(invite.org_id, user_id) is not None:
            raise ValidationError("You are already a member of this organization")

        if not self._invites.claim(invite, user_id=int(user_id), used_at=now):
            raise ValidationError("This invite has already been used")

        logger.info("User %s joined organization %s as %s", user_id, invite.org_id, invite.role.value)
        if self._organizations is not None:
            self._organizations.select_organization(invite.org_id, user_id=int(user_id), now=now)
        return invite.org_id
