from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import Optional

from ..core.enums import ArrivalStatus, CheckinSource, MemberRole


@dataclass(frozen=True)
class AttendanceCheckin:
    """Domain entity: one clock-in/clock-out pair per member, organization and day."""

    checkin_id: int
    org_id: int
    user_id: int
    local_date: date
    clock_in_at: datetime
    source: CheckinSource
    clock_out_at: Optional[datetime] = None

    @property
    def is_open(self) -> bool:
        return self.clock_out_at is None


@dataclass(frozen=True)
class WorkHours:
    """The organization's working day and arrival thresholds."""

    work_start: time
    work_end: time
    early_threshold_minutes: int
    late_threshold_minutes: int

    @classmethod
    def from_org(cls, org) -> "WorkHours":
        return cls(
            work_start=org.work_start_time,
            work_end=org.work_end_time,
            early_threshold_minutes=int(org.early_threshold_minutes),
            late_threshold_minutes=int(org.late_threshold_minutes),
        )

    def start_on(self, day: date) -> datetime:
        return datetime.combine(day, self.work_start)

    def end_on(self, day: date) -> datetime:
        return datetime.combine(day, self.work_end)


@dataclass(frozen=True)
class HistoryRow:
    """Read-model: one member on one day, either a classified check-in or an absence."""

    user_id: int
    full_name: Optional[str]
    email: str
    role: MemberRole
    local_date: date
    status: ArrivalStatus
    overtime: bool = False
    clock_in_at: Optional[datetime] = None
    clock_out_at: Optional[datetime] = None
    work_hours: Optional[str] = None
    source: Optional[CheckinSource] = None

    @property
    def attended(self) -> bool:
        return self.status != ArrivalStatus.ABSENT


@dataclass(frozen=True)
class DateGroup:
    local_date: date
    rows: list = field(default_factory=list)
    stats: dict = field(default_factory=dict)


@dataclass(frozen=True)
class HistoryPage:
    groups: list
    page: int
    page_size: int
    total_rows: int

    @property
    def total_pages(self) -> int:
        if self.total_rows == 0:
            return 1
        return (self.total_rows + self.page_size - 1) // self.page_size
