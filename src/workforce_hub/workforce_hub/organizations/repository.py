from __future__ import annotations

from datetime import datetime, time
from typing import Iterable, Optional, Protocol, Sequence

from ..core.enums import MemberRole
from .model import Invite, Membership, MemberView, Organization, OrganizationSummary


class OrganizationRepository(Protocol):
    def create_with_owner(
        self,
        *,
        name: str,
        description: Optional[str],
        owner_id: int,
        work_start_time: time,
        work_end_time: time,
        early_threshold_minutes: int,
        late_threshold_minutes: int,
        logo_url: Optional[str],
        checkin_token: str,
    ) -> int:
        """Insert the organization and the owner's membership in one transaction."""

        raise NotImplementedError

    def get_by_id(self, org_id: int) -> Optional[Organization]:
        raise NotImplementedError

    def update_settings(
        self,
        org_id: int,
        *,
        name: str,
        description: Optional[str],
        work_start_time: time,
        work_end_time: time,
        early_threshold_minutes: int,
        late_threshold_minutes: int,
        logo_url: Optional[str],
    ) -> bool:
        raise NotImplementedError

    def update_checkin_token(self, org_id: int, *, checkin_token: str) -> bool:
        raise NotImplementedError

    def delete(self, org_id: int) -> bool:
        raise NotImplementedError

    def list_for_user(self, user_id: int) -> Sequence[OrganizationSummary]:
        raise NotImplementedError


class MemberRepository(Protocol):
    def get_membership(self, org_id: int, user_id: int) -> Optional[Membership]:
        raise NotImplementedError

    def list_members(self, org_id: int) -> Sequence[MemberView]:
        raise NotImplementedError

    def list_user_ids_by_role(self, org_id: int, roles: Iterable[MemberRole]) -> Sequence[int]:
        raise NotImplementedError

    def add_member(self, org_id: int, user_id: int, *, role: MemberRole) -> None:
        raise NotImplementedError

    def update_role(self, org_id: int, user_id: int, *, role: MemberRole) -> bool:
        raise NotImplementedError

    def remove_member(self, org_id: int, user_id: int) -> bool:
        raise NotImplementedError

    def mark_selected(self, org_id: int, user_id: int) -> None:
        """Flag this organization as the user's last selected one (and clear the others)."""

        raise NotImplementedError


class InviteRepository(Protocol):
    def create(
        self,
        *,
        org_id: int,
        code: str,
        role: MemberRole,
        email: Optional[str],
        created_by: int,
        expires_at: datetime,
    ) -> int:
        raise NotImplementedError

    def get_by_id(self, invite_id: int) -> Optional[Invite]:
        raise NotImplementedError

    def get_by_code(self, code: str) -> Optional[Invite]:
        raise NotImplementedError

    def list_for_org(self, org_id: int) -> Sequence[Invite]:
        raise NotImplementedError

    def delete(self, invite_id: int) -> bool:
        raise NotImplementedError

    def claim(self, invite: Invite, *, user_id: int, used_at: datetime) -> bool:
        """Mark the invite used and insert the membership atomically.

        Returns False when the invite was already used by someone else.
        """

        raise NotImplementedError
