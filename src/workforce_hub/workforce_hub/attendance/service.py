from __future__ import annotations

import logging
import secrets
from datetime import datetime
from typing import Optional, Sequence

from ..common.datetime_utils import now_local
from ..core.enums import CheckinSource
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..organizations.model import MemberView, Organization
from ..organizations.policy import AccessPolicy
from ..organizations.repository import MemberRepository, OrganizationRepository
from .factory import ArrivalStrategyFactory
from .model import AttendanceCheckin, WorkHours
from .repository import AttendanceRepository
from .strategies.base import StatusDecision

logger = logging.getLogger(__name__)


class AttendanceService:
    """Use cases: clock in, clock out, QR toggle and the live presence list."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        orgs: OrganizationRepository,
        members: MemberRepository,
        policy: AccessPolicy,
        *,
        strategy_factory: ArrivalStrategyFactory | None = None,
    ):
        self._attendance = attendance
        self._orgs = orgs
        self._members = members
        self._policy = policy
        self._factory = strategy_factory or ArrivalStrategyFactory()

    def _get_org(self, org_id: int) -> Organization:
        org = self._orgs.get_by_id(int(org_id))
        if not org:
            raise NotFoundError("Organization not found")
        return org

    def create_daily_checkin(
        self,
        org_id: int,
        user_id: int,
        *,
        now: Optional[datetime] = None,
        source: CheckinSource = CheckinSource.WEB,
    ) -> AttendanceCheckin:
        """Record today's check-in; returns the existing row when there already is one."""

        self._policy.require_member(org_id, user_id)
        now = now or now_local()
        checkin, created = self._attendance.create_if_absent(
            org_id=int(org_id),
            user_id=int(user_id),
            local_date=now.date(),
            clock_in_at=now,
            source=CheckinSource(source),
        )
        if created:
            logger.info("User %s clocked in to organization %s (%s)", user_id, org_id, checkin.source.value)
        return checkin

    def clock_in(
        self,
        org_id: int,
        *,
        user_id: int,
        now: Optional[datetime] = None,
        source: CheckinSource = CheckinSource.WEB,
    ) -> AttendanceCheckin:
        self._policy.require_member(org_id, user_id)
        now = now or now_local()
        if self._attendance.get_for_day(int(org_id), int(user_id), now.date()):
            raise ValidationError("You have already clocked in today")

        checkin, created = self._attendance.create_if_absent(
            org_id=int(org_id),
            user_id=int(user_id),
            local_date=now.date(),
            clock_in_at=now,
            source=CheckinSource(source),
        )
        if not created:
            raise ValidationError("You have already clocked in today")
        logger.info("User %s clocked in to organization %s (%s)", user_id, org_id, checkin.source.value)
        return checkin

    def clock_out(self, org_id: int, *, user_id: int, now: Optional[datetime] = None) -> AttendanceCheckin:
        self._policy.require_member(org_id, user_id)
        now = now or now_local()
        checkin = self._attendance.get_for_day(int(org_id), int(user_id), now.date())
        if not checkin:
            raise ValidationError("You have not clocked in today")
        if not checkin.is_open or not self._attendance.set_clock_out(checkin.checkin_id, clock_out_at=now):
            raise ValidationError("You have already clocked out today")

        logger.info("User %s clocked out of organization %s", user_id, org_id)
        return self._attendance.get_for_day(int(org_id), int(user_id), now.date())

    def is_clocked_in(self, org_id: int, *, user_id: int, now: Optional[datetime] = None) -> bool:
        now = now or now_local()
        checkin = self._attendance.get_for_day(int(org_id), int(user_id), now.date())
        return checkin is not None and checkin.is_open

    def today(self, org_id: int, *, user_id: int, now: Optional[datetime] = None) -> tuple[Optional[AttendanceCheckin], StatusDecision]:
        """Today's row for the caller plus its classification so far."""

        self._policy.require_member(org_id, user_id)
        now = now or now_local()
        hours = WorkHours.from_org(self._get_org(org_id))
        checkin = self._attendance.get_for_day(int(org_id), int(user_id), now.date())
        decision = self._factory.classify(
            clock_in=checkin.clock_in_at if checkin else None,
            clock_out=checkin.clock_out_at if checkin else None,
            hours=hours,
        )
        return checkin, decision

    def qr_toggle(
        self, org_id: int, *, user_id: int, token: str, now: Optional[datetime] = None
    ) -> tuple[AttendanceCheckin, str]:
        """Scanning the office QR code clocks in, or clocks out when already in.

        Returns the check-in row and the action taken ("clock_in" or "clock_out").
        """

        self._policy.require_member(org_id, user_id)
        org = self._get_org(org_id)
        if not org.checkin_token or not secrets.compare_digest(str(token or ""), org.checkin_token):
            raise AuthorizationError("This QR code is not valid for this organization")

        now = now or now_local()
        checkin = self._attendance.get_for_day(org.org_id, int(user_id), now.date())
        if checkin is None:
            return self.clock_in(org.org_id, user_id=user_id, now=now, source=CheckinSource.QR), "clock_in"
        return self.clock_out(org.org_id, user_id=user_id, now=now), "clock_out"

    def who_is_clocked_in(self, org_id: int, *, user_id: int, now: Optional[datetime] = None) -> Sequence[MemberView]:
        self._policy.require_member(org_id, user_id)
        now = now or now_local()
        open_ids = {c.user_id for c in self._attendance.list_open(int(org_id), now.date())}
        return [m for m in self._members.list_members(int(org_id)) if m.user_id in open_ids]
