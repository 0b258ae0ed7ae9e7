from __future__ import annotations

import logging
import secrets
from dataclasses import replace
from datetime import datetime, time
from typing import TYPE_CHECKING, Optional, Sequence

from ..common.datetime_utils import parse_hhmm
from ..common.validators import optional_text, require_int_range, require_non_empty
from ..core.constants import (
    DEFAULT_EARLY_THRESHOLD_MINUTES,
    DEFAULT_LATE_THRESHOLD_MINUTES,
    DEFAULT_WORK_END,
    DEFAULT_WORK_START,
    MAX_THRESHOLD_MINUTES,
)
from ..core.enums import MemberRole
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from .model import MemberView, Organization, OrganizationSummary
from .policy import MANAGERS, AccessPolicy, can_grant_role
from .repository import MemberRepository, OrganizationRepository

if TYPE_CHECKING:
    from ..attendance.service import AttendanceService

logger = logging.getLogger(__name__)

_UNSET = object()


def new_checkin_token() -> str:
    return secrets.token_urlsafe(16)


def _validated_hours(
    work_start_time, work_end_time, early_threshold_minutes, late_threshold_minutes
) -> tuple[time, time, int, int]:
    start = parse_hhmm(work_start_time)
    end = parse_hhmm(work_end_time)
    if end <= start:
        raise ValidationError("Work end time must be after work start time")
    early = require_int_range(
        early_threshold_minutes, "Early threshold", min_value=0, max_value=MAX_THRESHOLD_MINUTES
    )
    late = require_int_range(
        late_threshold_minutes, "Late threshold", min_value=0, max_value=MAX_THRESHOLD_MINUTES
    )
    return start, end, early, late


class OrganizationService:
    """Use cases: create/configure/select organizations."""

    def __init__(
        self,
        orgs: OrganizationRepository,
        policy: AccessPolicy,
        members: MemberRepository,
        *,
        attendance: Optional["AttendanceService"] = None,
    ):
        self._orgs = orgs
        self._policy = policy
        self._members = members
        self._attendance = attendance

    def _get(self, org_id: int) -> Organization:
        org = self._orgs.get_by_id(int(org_id))
        if not org:
            raise NotFoundError("Organization not found")
        return org

    def create_organization(
        self,
        *,
        user_id: int,
        name: str,
        description: Optional[str] = None,
        work_start_time=None,
        work_end_time=None,
        early_threshold_minutes=None,
        late_threshold_minutes=None,
        logo_url: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> int:
        """Create the organization with the caller as owner, then select it for them."""

        name = require_non_empty(name, "Organization name")
        start, end, early, late = _validated_hours(
            work_start_time or DEFAULT_WORK_START,
            work_end_time or DEFAULT_WORK_END,
            DEFAULT_EARLY_THRESHOLD_MINUTES if early_threshold_minutes is None else early_threshold_minutes,
            DEFAULT_LATE_THRESHOLD_MINUTES if late_threshold_minutes is None else late_threshold_minutes,
        )

        org_id = self._orgs.create_with_owner(
            name=name,
            description=optional_text(description),
            owner_id=int(user_id),
            work_start_time=start,
            work_end_time=end,
            early_threshold_minutes=early,
            late_threshold_minutes=late,
            logo_url=optional_text(logo_url),
            checkin_token=new_checkin_token(),
        )
        logger.info("Organization %s created by user %s", org_id, user_id)
        self.select_organization(org_id, user_id=user_id, now=now)
        return org_id

    def get_organization(self, org_id: int, *, user_id: int) -> Organization:
        role = self._policy.require_member(org_id, user_id)
        org = self._get(org_id)
        if role not in MANAGERS:
            org = replace(org, checkin_token=None)
        return org

    def update_settings(
        self,
        org_id: int,
        *,
        user_id: int,
        name=_UNSET,
        description=_UNSET,
        work_start_time=_UNSET,
        work_end_time=_UNSET,
        early_threshold_minutes=_UNSET,
        late_threshold_minutes=_UNSET,
        logo_url=_UNSET,
    ) -> Organization:
        """Partial update; omitted fields keep their stored value."""

        self._policy.require_role(
            org_id, user_id, {MemberRole.OWNER}, message="Only the owner can change organization settings"
        )
        org = self._get(org_id)

        def pick(value, current):
            return current if value is _UNSET else value

        new_name = require_non_empty(pick(name, org.name), "Organization name")
        start, end, early, late = _validated_hours(
            pick(work_start_time, org.work_start_time),
            pick(work_end_time, org.work_end_time),
            pick(early_threshold_minutes, org.early_threshold_minutes),
            pick(late_threshold_minutes, org.late_threshold_minutes),
        )

        self._orgs.update_settings(
            org.org_id,
            name=new_name,
            description=optional_text(pick(description, org.description)),
            work_start_time=start,
            work_end_time=end,
            early_threshold_minutes=early,
            late_threshold_minutes=late,
            logo_url=optional_text(pick(logo_url, org.logo_url)),
        )
        logger.info("Organization %s settings updated by user %s", org_id, user_id)
        return self._get(org_id)

    def delete_organization(self, org_id: int, *, user_id: int) -> None:
        self._policy.require_role(
            org_id, user_id, {MemberRole.OWNER}, message="Only the owner can delete the organization"
        )
        if not self._orgs.delete(int(org_id)):
            raise NotFoundError("Organization not found")
        logger.info("Organization %s deleted by user %s", org_id, user_id)

    def list_my_organizations(self, user_id: int) -> Sequence[OrganizationSummary]:
        return self._orgs.list_for_user(int(user_id))

    def select_organization(self, org_id: int, *, user_id: int, now: Optional[datetime] = None) -> Organization:
        """Make the organization current for the user and record today's check-in."""

        self._policy.require_member(org_id, user_id)
        org = self._get(org_id)
        self._members.mark_selected(org.org_id, int(user_id))
        if self._attendance is not None:
            self._attendance.create_daily_checkin(org.org_id, int(user_id), now=now)
        return org

    def get_checkin_token(self, org_id: int, *, user_id: int) -> str:
        self._policy.require_role(org_id, user_id, MANAGERS)
        org = self._get(org_id)
        if not org.checkin_token:
            return self.rotate_checkin_token(org_id, user_id=user_id)
        return org.checkin_token

    def rotate_checkin_token(self, org_id: int, *, user_id: int) -> str:
        self._policy.require_role(org_id, user_id, MANAGERS)
        token = new_checkin_token()
        if not self._orgs.update_checkin_token(int(org_id), checkin_token=token):
            raise NotFoundError("Organization not found")
        logger.info("Check-in token rotated for organization %s by user %s", org_id, user_id)
        return token


class MembershipService:
    """Use cases: list members, change roles, remove members."""

    def __init__(self, members: MemberRepository, policy: AccessPolicy):
        self._members = members
        self._policy = policy

    def list_members(self, org_id: int, *, user_id: int) -> Sequence[MemberView]:
        self._policy.require_member(org_id, user_id)
        return self._members.list_members(int(org_id))

    def _check_can_manage(self, org_id: int, actor_id: int, target_id: int) -> tuple[MemberRole, MemberRole]:
        actor_role = self._policy.require_role(
            org_id, actor_id, MANAGERS, message="Only owners and admins can manage members"
        )
        target = self._members.get_membership(int(org_id), int(target_id))
        if not target:
            raise NotFoundError("Member not found")
        if target.role == MemberRole.OWNER:
            raise AuthorizationError("The owner's membership cannot be changed")
        if int(actor_id) == int(target_id):
            raise AuthorizationError("You cannot change your own role")
        if actor_role == MemberRole.ADMIN and target.role == MemberRole.ADMIN:
            raise AuthorizationError("Admins cannot manage other admins")
        return actor_role, target.role

    def change_member_role(self, org_id: int, *, user_id: int, member_id: int, role: MemberRole) -> None:
        try:
            role = MemberRole(role)
        except ValueError:
            raise ValidationError("Role is not valid")

        actor_role, _ = self._check_can_manage(org_id, user_id, member_id)
        if not can_grant_role(actor_role, role):
            raise AuthorizationError("You cannot grant a role above your own")

        self._members.update_role(int(org_id), int(member_id), role=role)
        logger.info("User %s set role of %s in organization %s to %s", user_id, member_id, org_id, role.value)

    def remove_member(self, org_id: int, *, user_id: int, member_id: int) -> None:
        if int(user_id) == int(member_id):
            role = self._policy.require_member(org_id, user_id)
            if role == MemberRole.OWNER:
                raise ValidationError("The owner cannot leave the organization; delete it instead")
        else:
            self._check_can_manage(org_id, user_id, member_id)

        if not self._members.remove_member(int(org_id), int(member_id)):
            raise NotFoundError("Member not found")
        logger.info("User %s removed member %s from organization %s", user_id, member_id, org_id)
