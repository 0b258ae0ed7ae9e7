from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, time
from typing import Optional

from ..core.enums import InviteStatus, MemberRole


@dataclass(frozen=True)
class Organization:
    """Domain entity: tenant boundary, also carries the attendance rules."""

    org_id: int
    name: str
    owner_id: int
    work_start_time: time
    work_end_time: time
    early_threshold_minutes: int
    late_threshold_minutes: int
    created_at: datetime
    description: Optional[str] = None
    logo_url: Optional[str] = None
    checkin_token: Optional[str] = None


@dataclass(frozen=True)
class OrganizationSummary:
    """Read-model: an organization as seen by one of its members."""

    org_id: int
    name: str
    description: Optional[str]
    logo_url: Optional[str]
    role: MemberRole
    last_selected: bool


@dataclass(frozen=True)
class Membership:
    org_id: int
    user_id: int
    role: MemberRole
    last_selected: bool = False
    joined_at: Optional[datetime] = None


@dataclass(frozen=True)
class MemberView:
    """Read-model: membership joined with the user's public profile."""

    user_id: int
    full_name: str
    email: str
    role: MemberRole
    joined_at: Optional[datetime] = None


@dataclass(frozen=True)
class Invite:
    invite_id: int
    org_id: int
    code: str
    role: MemberRole
    created_by: int
    created_at: datetime
    expires_at: datetime
    email: Optional[str] = None
    used_at: Optional[datetime] = None
    used_by: Optional[int] = None

    def status(self, now: datetime) -> InviteStatus:
        if self.used_at is not None:
            return InviteStatus.USED
        if self.expires_at < now:
            return InviteStatus.EXPIRED
        return InviteStatus.ACTIVE
