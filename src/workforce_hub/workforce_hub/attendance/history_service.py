"""Attendance history: classified check-ins plus derived absences, grouped by day."""

from __future__ import annotations

import logging
from collections import OrderedDict
from datetime import date, datetime, timedelta
from typing import Callable, Optional, Sequence

from ..common.datetime_utils import now_local
from ..core.constants import DEFAULT_HISTORY_DAYS, DEFAULT_HISTORY_PAGE_SIZE
from ..core.enums import ArrivalStatus, MemberRole
from ..core.exceptions import NotFoundError, ValidationError
from ..organizations.policy import LEADS, AccessPolicy
from ..organizations.repository import MemberRepository, OrganizationRepository
from .factory import ArrivalStrategyFactory
from .model import AttendanceCheckin, DateGroup, HistoryPage, HistoryRow, WorkHours
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)

STILL_WORKING = "Still working"
# check-ins from people who have since left the organization
UNKNOWN_MEMBER_EMAIL = "Unknown"

HISTORY_FILTERS: dict[str, Callable[[HistoryRow], bool]] = {
    "all": lambda r: True,
    "attended": lambda r: r.attended,
    "on-time": lambda r: r.status == ArrivalStatus.ON_TIME,
    "early": lambda r: r.status == ArrivalStatus.EARLY,
    "late": lambda r: r.status == ArrivalStatus.LATE,
    "absent": lambda r: r.status == ArrivalStatus.ABSENT,
    "overtime": lambda r: r.overtime,
}


def format_work_hours(clock_in: datetime, clock_out: Optional[datetime]) -> str:
    if clock_out is None:
        return STILL_WORKING
    total_minutes = max(0, round((clock_out - clock_in).total_seconds() / 60))
    hours, minutes = divmod(total_minutes, 60)
    return f"{hours}h {minutes}m"


def day_stats(rows: Sequence[HistoryRow]) -> dict:
    return {
        "total": len(rows),
        "early": sum(1 for r in rows if r.status == ArrivalStatus.EARLY),
        "onTime": sum(1 for r in rows if r.status == ArrivalStatus.ON_TIME),
        "late": sum(1 for r in rows if r.status == ArrivalStatus.LATE),
        "overtime": sum(1 for r in rows if r.overtime),
        "absent": sum(1 for r in rows if r.status == ArrivalStatus.ABSENT),
    }


class AttendanceHistoryService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        orgs: OrganizationRepository,
        members: MemberRepository,
        policy: AccessPolicy,
        *,
        strategy_factory: ArrivalStrategyFactory | None = None,
        history_days: int = DEFAULT_HISTORY_DAYS,
        page_size: int = DEFAULT_HISTORY_PAGE_SIZE,
    ):
        self._attendance = attendance
        self._orgs = orgs
        self._members = members
        self._policy = policy
        self._factory = strategy_factory or ArrivalStrategyFactory()
        self._history_days = int(history_days)
        self._page_size = int(page_size)

    def window_start(self, org_created_at: datetime, today: date) -> date:
        return max(org_created_at.date(), today - timedelta(days=self._history_days))

    def build_rows(self, org_id: int, *, user_id: int, now: Optional[datetime] = None) -> list[HistoryRow]:
        """Every visible row in the window, newest day first.

        Leads see every member; employees only see themselves.
        """

        role = self._policy.require_member(org_id, user_id)
        org = self._orgs.get_by_id(int(org_id))
        if not org:
            raise NotFoundError("Organization not found")

        now = now or now_local()
        today = now.date()
        hours = WorkHours.from_org(org)
        start = self.window_start(org.created_at, today)

        members = {m.user_id: m for m in self._members.list_members(org.org_id)}
        only_user = None if role in LEADS else int(user_id)
        if only_user is not None:
            members = {uid: m for uid, m in members.items() if uid == only_user}

        by_day: dict[date, list[AttendanceCheckin]] = {}
        for c in self._attendance.list_for_org_between(org.org_id, start, today, user_id=only_user):
            by_day.setdefault(c.local_date, []).append(c)

        rows: list[HistoryRow] = []
        day = today
        while day >= start:
            checkins = by_day.get(day, [])
            for c in checkins:
                rows.append(self._classified_row(c, members.get(c.user_id), hours))

            # Absences are only final once the working day is over.
            if day < today or now > hours.end_on(today):
                attended = {c.user_id for c in checkins}
                for member in members.values():
                    if member.user_id not in attended:
                        rows.append(
                            HistoryRow(
                                user_id=member.user_id,
                                full_name=member.full_name,
                                email=member.email,
                                role=member.role,
                                local_date=day,
                                status=ArrivalStatus.ABSENT,
                            )
                        )
            day -= timedelta(days=1)
        return rows

    def _classified_row(self, c: AttendanceCheckin, member, hours: WorkHours) -> HistoryRow:
        decision = self._factory.classify(clock_in=c.clock_in_at, clock_out=c.clock_out_at, hours=hours)
        identity = dict(
            user_id=c.user_id,
            full_name=member.full_name if member else None,
            email=member.email if member else UNKNOWN_MEMBER_EMAIL,
            role=member.role if member else MemberRole.EMPLOYEE,
            local_date=c.local_date,
        )
        if decision.status == ArrivalStatus.ABSENT:
            return HistoryRow(status=ArrivalStatus.ABSENT, **identity)
        return HistoryRow(
            status=decision.status,
            overtime=decision.overtime,
            clock_in_at=c.clock_in_at,
            clock_out_at=c.clock_out_at,
            work_hours=format_work_hours(c.clock_in_at, c.clock_out_at),
            source=c.source,
            **identity,
        )

    @staticmethod
    def _filter(rows: Sequence[HistoryRow], filter_name: str) -> list[HistoryRow]:
        key = (filter_name or "all").strip().lower()
        predicate = HISTORY_FILTERS.get(key)
        if predicate is None:
            raise ValidationError("Filter is not valid")
        return [r for r in rows if predicate(r)]

    def history(
        self,
        org_id: int,
        *,
        user_id: int,
        filter_name: str = "all",
        page: int = 1,
        now: Optional[datetime] = None,
    ) -> HistoryPage:
        all_rows = self.build_rows(org_id, user_id=user_id, now=now)
        filtered = self._filter(all_rows, filter_name)

        try:
            page = max(1, int(page))
        except (TypeError, ValueError):
            raise ValidationError("Page must be a number")
        offset = (page - 1) * self._page_size
        page_rows = filtered[offset : offset + self._page_size]

        # Stats count every row of the day, not just the filtered ones.
        per_day: dict[date, list[HistoryRow]] = {}
        for r in all_rows:
            per_day.setdefault(r.local_date, []).append(r)

        grouped: "OrderedDict[date, list[HistoryRow]]" = OrderedDict()
        for r in page_rows:
            grouped.setdefault(r.local_date, []).append(r)

        groups = [DateGroup(local_date=d, rows=rs, stats=day_stats(per_day[d])) for d, rs in grouped.items()]
        return HistoryPage(groups=groups, page=page, page_size=self._page_size, total_rows=len(filtered))

    def export_rows(
        self, org_id: int, *, user_id: int, filter_name: str = "all", now: Optional[datetime] = None
    ) -> list[HistoryRow]:
        rows = self._filter(self.build_rows(org_id, user_id=user_id, now=now), filter_name)
        logger.info("User %s exported %s attendance row(s) for organization %s", user_id, len(rows), org_id)
        return rows
