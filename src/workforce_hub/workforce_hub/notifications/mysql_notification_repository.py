from __future__ import annotations

import json
from datetime import date, datetime, timedelta
from typing import Optional, Sequence

from ..core.enums import NotificationType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, load_json_column
from .model import Notification
from .repository import NotificationRepository

_COLUMNS = "notification_id, user_id, type, payload, created_at, read_at"


def _to_notification(r: dict) -> Notification:
    return Notification(
        notification_id=int(r["notification_id"]),
        user_id=int(r["user_id"]),
        type=NotificationType(r["type"]),
        payload=load_json_column(r.get("payload")),
        created_at=r["created_at"],
        read_at=r.get("read_at"),
    )


class MySQLNotificationRepository(NotificationRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(self, *, user_id: int, type: NotificationType, payload: dict) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO notifications(user_id, type, payload) VALUES(%s,%s,%s)",
                (int(user_id), type.value, json.dumps(payload, default=str)),
            )
            return int(cur.lastrowid)

    def get_by_id(self, notification_id: int) -> Optional[Notification]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM notifications WHERE notification_id=%s", (int(notification_id),))
            r = fetchone(cur)
            return _to_notification(r) if r else None

    def list_for_user(self, user_id: int, *, unread_only: bool = False, limit: int = 50) -> Sequence[Notification]:
        where = "user_id=%s AND read_at IS NULL" if unread_only else "user_id=%s"
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM notifications
                WHERE {where}
                ORDER BY created_at DESC, notification_id DESC
                LIMIT %s
                """,
                (int(user_id), int(limit)),
            )
            return [_to_notification(r) for r in fetchall(cur)]

    def count_unread(self, user_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT COUNT(*) AS n FROM notifications WHERE user_id=%s AND read_at IS NULL",
                (int(user_id),),
            )
            r = fetchone(cur)
            return int(r["n"]) if r else 0

    def mark_read(self, notification_id: int, *, read_at: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE notifications SET read_at=COALESCE(read_at, %s) WHERE notification_id=%s",
                (read_at, int(notification_id)),
            )
            return cur.rowcount > 0

    def mark_all_read(self, user_id: int, *, read_at: datetime) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE notifications SET read_at=%s WHERE user_id=%s AND read_at IS NULL",
                (read_at, int(user_id)),
            )
            return int(cur.rowcount)

    def exists_for_task_on(self, *, user_id: int, type: NotificationType, task_id: int, day: date) -> bool:
        start = datetime.combine(day, datetime.min.time())
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT 1 AS found FROM notifications
                WHERE user_id=%s AND type=%s
                  AND JSON_UNQUOTE(JSON_EXTRACT(payload, '$.task_id'))=%s
                  AND created_at >= %s AND created_at < %s
                LIMIT 1
                """,
                (int(user_id), type.value, str(int(task_id)), start, start + timedelta(days=1)),
            )
            return fetchone(cur) is not None
