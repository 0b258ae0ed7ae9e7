from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import CheckinSource
from .model import AttendanceCheckin


class AttendanceRepository(Protocol):
    def get_for_day(self, org_id: int, user_id: int, local_date: date) -> Optional[AttendanceCheckin]:
        raise NotImplementedError

    def create_if_absent(
        self,
        *,
        org_id: int,
        user_id: int,
        local_date: date,
        clock_in_at: datetime,
        source: CheckinSource,
    ) -> tuple[AttendanceCheckin, bool]:
        """Insert the day's check-in unless one exists.

        Returns (row, created); `created` is False when the row was already there.
        """

        raise NotImplementedError

    def set_clock_out(self, checkin_id: int, *, clock_out_at: datetime) -> bool:
        """Close an open check-in; False when it was already closed."""

        raise NotImplementedError

    def list_for_org_between(
        self,
        org_id: int,
        start: date,
        end: date,
        *,
        user_id: Optional[int] = None,
    ) -> Sequence[AttendanceCheckin]:
        """Check-ins with start <= local_date <= end, newest first."""

        raise NotImplementedError

    def list_open(self, org_id: int, local_date: date) -> Sequence[AttendanceCheckin]:
        raise NotImplementedError
