from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import MemberRole
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Invite
from .repository import InviteRepository

_COLUMNS = "invite_id, org_id, code, role, email, created_by, created_at, expires_at, used_at, used_by"


def _to_invite(r: dict) -> Invite:
    return Invite(
        invite_id=int(r["invite_id"]),
        org_id=int(r["org_id"]),
        code=r["code"],
        role=MemberRole(r["role"]),
        email=r.get("email"),
        created_by=int(r["created_by"]),
        created_at=r["created_at"],
        expires_at=r["expires_at"],
        used_at=r.get("used_at"),
        used_by=r.get("used_by"),
    )


class MySQLInviteRepository(InviteRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO org_invites(org_id, code, role, email, created_by, expires_at)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (int(org_id), code, role.value, email, int(created_by), expires_at),
            )
            return int(cur.lastrowid)

    def get_by_id(self, invite_id: int) -> Optional[Invite]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM org_invites WHERE invite_id=%s", (int(invite_id),))
            r = fetchone(cur)
            return _to_invite(r) if r else None

    def get_by_code(self, code: str) -> Optional[Invite]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM org_invites WHERE code=%s", (code,))
            r = fetchone(cur)
            return _to_invite(r) if r else None

    def list_for_org(self, org_id: int) -> Sequence[Invite]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM org_invites WHERE org_id=%s ORDER BY created_at DESC",
                (int(org_id),),
            )
            return [_to_invite(r) for r in fetchall(cur)]

    def delete(self, invite_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM org_invites WHERE invite_id=%s", (int(invite_id),))
            return cur.rowcount > 0

    def claim(self, invite: Invite, *, user_id: int, used_at: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE org_invites SET used_at=%s, used_by=%s
                WHERE invite_id=%s AND used_at IS NULL
                """,
                (used_at, int(user_id), invite.invite_id),
            )
            if cur.rowcount != 1:
                return False
            cur.execute(
                "INSERT INTO organization_members(org_id, user_id, role) VALUES(%s,%s,%s)",
                (invite.org_id, int(user_id), invite.role.value),
            )
            return True
