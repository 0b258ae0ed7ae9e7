from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from ..core.enums import CheckinSource
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import AttendanceCheckin
from .repository import AttendanceRepository

_COLUMNS = "checkin_id, org_id, user_id, local_date, clock_in_at, clock_out_at, source"


def _to_checkin(r: dict) -> AttendanceCheckin:
    return AttendanceCheckin(
        checkin_id=int(r["checkin_id"]),
        org_id=int(r["org_id"]),
        user_id=int(r["user_id"]),
        local_date=r["local_date"],
        clock_in_at=r["clock_in_at"],
        clock_out_at=r.get("clock_out_at"),
        source=CheckinSource(r["source"]),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_day(self, org_id: int, user_id: int, local_date: date) -> Optional[AttendanceCheckin]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_checkins
                WHERE org_id=%s AND user_id=%s AND local_date=%s
                """,
                (int(org_id), int(user_id), local_date),
            )
            r = fetchone(cur)
            return _to_checkin(r) if r else None

    def create_if_absent(
        self,
        *,
        org_id: int,
        user_id: int,
        local_date: date,
        clock_in_at: datetime,
        source: CheckinSource,
    ) -> tuple[AttendanceCheckin, bool]:
        with db_cursor(self._conn_factory) as (_, cur):
            # UNIQUE(org_id, user_id, local_date) turns a concurrent second insert into a no-op.
            cur.execute(
                """
                INSERT IGNORE INTO attendance_checkins(org_id, user_id, local_date, clock_in_at, source)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (int(org_id), int(user_id), local_date, clock_in_at, source.value),
            )
            created = cur.rowcount > 0
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_checkins
                WHERE org_id=%s AND user_id=%s AND local_date=%s
                """,
                (int(org_id), int(user_id), local_date),
            )
            return _to_checkin(fetchone(cur)), created

    def set_clock_out(self, checkin_id: int, *, clock_out_at: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE attendance_checkins SET clock_out_at=%s WHERE checkin_id=%s AND clock_out_at IS NULL",
                (clock_out_at, int(checkin_id)),
            )
            return cur.rowcount > 0

    def list_for_org_between(
        self,
        org_id: int,
        start: date,
        end: date,
        *,
        user_id: Optional[int] = None,
    ) -> Sequence[AttendanceCheckin]:
        sql = f"""
            SELECT {_COLUMNS}
            FROM attendance_checkins
            WHERE org_id=%s AND local_date BETWEEN %s AND %s
        """
        params: list = [int(org_id), start, end]
        if user_id is not None:
            sql += " AND user_id=%s"
            params.append(int(user_id))
        sql += " ORDER BY local_date DESC, clock_in_at DESC"

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [_to_checkin(r) for r in fetchall(cur)]

    def list_open(self, org_id: int, local_date: date) -> Sequence[AttendanceCheckin]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_checkins
                WHERE org_id=%s AND local_date=%s AND clock_out_at IS NULL
                ORDER BY clock_in_at
                """,
                (int(org_id), local_date),
            )
            return [_to_checkin(r) for r in fetchall(cur)]
