from __future__ import annotations

from typing import Sequence

from ..core.enums import PointsReason
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import LeaderboardRow, LedgerEntry
from .repository import LedgerRepository


class MySQLLedgerRepository(LedgerRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def balance(self, org_id: int, user_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT COALESCE(SUM(delta), 0) AS balance FROM points_ledger WHERE org_id=%s AND user_id=%s",
                (int(org_id), int(user_id)),
            )
            r = fetchone(cur)
            return int(r["balance"]) if r else 0

    def list_entries(self, org_id: int, user_id: int, *, limit: int = 100) -> Sequence[LedgerEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT entry_id, org_id, user_id, delta, reason_code, task_id, created_at
                FROM points_ledger
                WHERE org_id=%s AND user_id=%s
                ORDER BY created_at DESC, entry_id DESC
                LIMIT %s
                """,
                (int(org_id), int(user_id), int(limit)),
            )
            return [
                LedgerEntry(
                    entry_id=int(r["entry_id"]),
                    org_id=int(r["org_id"]),
                    user_id=int(r["user_id"]),
                    delta=int(r["delta"]),
                    reason_code=PointsReason(r["reason_code"]),
                    task_id=r.get("task_id"),
                    created_at=r["created_at"],
                )
                for r in fetchall(cur)
            ]

    def leaderboard(self, org_id: int, *, limit: int = 20) -> Sequence[LeaderboardRow]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT u.user_id, u.full_name, COALESCE(SUM(pl.delta), 0) AS balance
                FROM organization_members m
                JOIN users u ON u.user_id = m.user_id
                LEFT JOIN points_ledger pl ON pl.org_id = m.org_id AND pl.user_id = m.user_id
                WHERE m.org_id=%s
                GROUP BY u.user_id, u.full_name
                ORDER BY balance DESC, u.full_name ASC
                LIMIT %s
                """,
                (int(org_id), int(limit)),
            )
            return [
                LeaderboardRow(user_id=int(r["user_id"]), full_name=r["full_name"], balance=int(r["balance"]))
                for r in fetchall(cur)
            ]
