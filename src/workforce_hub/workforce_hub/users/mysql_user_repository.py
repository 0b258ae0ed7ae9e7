from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause
from .model import User
from .repository import UserRepository

_COLUMNS = "user_id, email, full_name, password_hash, is_active, created_at"


def _to_user(row: dict) -> User:
    return User(
        user_id=int(row["user_id"]),
        email=row["email"],
        full_name=row["full_name"],
        password_hash=row["password_hash"],
        is_active=bool(row.get("is_active", True)),
        created_at=row.get("created_at"),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: int) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE user_id=%s", (int(user_id),))
            row = fetchone(cur)
            return _to_user(row) if row else None

    def get_by_email(self, email: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE LOWER(email)=LOWER(%s)", (email,))
            row = fetchone(cur)
            return _to_user(row) if row else None

    def get_many(self, user_ids: Sequence[int]) -> Sequence[User]:
        ids = [int(u) for u in user_ids]
        if not ids:
            return []
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE user_id IN ({in_clause(ids)})", tuple(ids))
            return [_to_user(r) for r in fetchall(cur)]

    def create_user(self, *, email: str, full_name: str, password_hash: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO users(email, full_name, password_hash)
                VALUES(%s,%s,%s)
                """,
                (email, full_name, password_hash),
            )
            return int(cur.lastrowid)

    def update_full_name(self, user_id: int, *, full_name: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE users SET full_name=%s WHERE user_id=%s", (full_name, int(user_id)))
            return cur.rowcount > 0
