from __future__ import annotations

from datetime import time
from typing import Iterable, Optional, Sequence

from ..core.enums import MemberRole
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause, normalize_mysql_time
from .model import Membership, MemberView, Organization, OrganizationSummary
from .repository import MemberRepository, OrganizationRepository

_ORG_COLUMNS = """
    org_id, name, description, owner_id, work_start_time, work_end_time,
    early_threshold_minutes, late_threshold_minutes, logo_url, checkin_token, created_at
"""


def _to_org(r: dict) -> Organization:
    return Organization(
        org_id=int(r["org_id"]),
        name=r["name"],
        description=r.get("description"),
        owner_id=int(r["owner_id"]),
        work_start_time=normalize_mysql_time(r["work_start_time"]),
        work_end_time=normalize_mysql_time(r["work_end_time"]),
        early_threshold_minutes=int(r["early_threshold_minutes"]),
        late_threshold_minutes=int(r["late_threshold_minutes"]),
        logo_url=r.get("logo_url"),
        checkin_token=r.get("checkin_token"),
        created_at=r["created_at"],
    )


class MySQLOrganizationRepository(OrganizationRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create_with_owner(
        self,
        *,
        name: str,
        description: Optional[str],
        owner_id: int,
        work_start_time: time,
        work_end_time: time,
        early_threshold_minutes: int,
        late_threshold_minutes: int,
        logo_url: Optional[str],
        checkin_token: str,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO organizations(
                    name, description, owner_id, work_start_time, work_end_time,
                    early_threshold_minutes, late_threshold_minutes, logo_url, checkin_token
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    name,
                    description,
                    int(owner_id),
                    work_start_time,
                    work_end_time,
                    int(early_threshold_minutes),
                    int(late_threshold_minutes),
                    logo_url,
                    checkin_token,
                ),
            )
            org_id = int(cur.lastrowid)
            cur.execute(
                """
                INSERT INTO organization_members(org_id, user_id, role)
                VALUES(%s,%s,%s)
                """,
                (org_id, int(owner_id), MemberRole.OWNER.value),
            )
            return org_id

    def get_by_id(self, org_id: int) -> Optional[Organization]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_ORG_COLUMNS} FROM organizations WHERE org_id=%s", (int(org_id),))
            r = fetchone(cur)
            return _to_org(r) if r else None

    def update_settings(
        self,
        org_id: int,
        *,
        name: str,
        description: Optional[str],
        work_start_time: time,
        work_end_time: time,
        early_threshold_minutes: int,
        late_threshold_minutes: int,
        logo_url: Optional[str],
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE organizations
                SET name=%s, description=%s, work_start_time=%s, work_end_time=%s,
                    early_threshold_minutes=%s, late_threshold_minutes=%s, logo_url=%s
                WHERE org_id=%s
                """,
                (
                    name,
                    description,
                    work_start_time,
                    work_end_time,
                    int(early_threshold_minutes),
                    int(late_threshold_minutes),
                    logo_url,
                    int(org_id),
                ),
            )
            return cur.rowcount > 0

    def update_checkin_token(self, org_id: int, *, checkin_token: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE organizations SET checkin_token=%s WHERE org_id=%s",
                (checkin_token, int(org_id)),
            )
            return cur.rowcount > 0

    def delete(self, org_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM organizations WHERE org_id=%s", (int(org_id),))
            return cur.rowcount > 0

    def list_for_user(self, user_id: int) -> Sequence[OrganizationSummary]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT o.org_id, o.name, o.description, o.logo_url, m.role, m.last_selected
                FROM organization_members m
                JOIN organizations o ON o.org_id = m.org_id
                WHERE m.user_id=%s
                ORDER BY m.last_selected DESC, o.name ASC
                """,
                (int(user_id),),
            )
            return [
                OrganizationSummary(
                    org_id=int(r["org_id"]),
                    name=r["name"],
                    description=r.get("description"),
                    logo_url=r.get("logo_url"),
                    role=MemberRole(r["role"]),
                    last_selected=bool(r.get("last_selected")),
                )
                for r in fetchall(cur)
            ]


class MySQLMemberRepository(MemberRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_membership(self, org_id: int, user_id: int) -> Optional[Membership]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT org_id, user_id, role, last_selected, joined_at
                FROM organization_members
                WHERE org_id=%s AND user_id=%s
                """,
                (int(org_id), int(user_id)),
            )
            r = fetchone(cur)
            if not r:
                return None
            return Membership(
                org_id=int(r["org_id"]),
                user_id=int(r["user_id"]),
                role=MemberRole(r["role"]),
                last_selected=bool(r.get("last_selected")),
                joined_at=r.get("joined_at"),
            )

    def list_members(self, org_id: int) -> Sequence[MemberView]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT u.user_id, u.full_name, u.email, m.role, m.joined_at
                FROM organization_members m
                JOIN users u ON u.user_id = m.user_id
                WHERE m.org_id=%s
                ORDER BY FIELD(m.role, 'owner', 'admin', 'supervisor', 'employee'), u.full_name
                """,
                (int(org_id),),
            )
            return [
                MemberView(
                    user_id=int(r["user_id"]),
                    full_name=r["full_name"],
                    email=r["email"],
                    role=MemberRole(r["role"]),
                    joined_at=r.get("joined_at"),
                )
                for r in fetchall(cur)
            ]

    def list_user_ids_by_role(self, org_id: int, roles: Iterable[MemberRole]) -> Sequence[int]:
        role_values = [MemberRole(r).value for r in roles]
        if not role_values:
            return []
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT user_id FROM organization_members
                WHERE org_id=%s AND role IN ({in_clause(role_values)})
                ORDER BY user_id
                """,
                (int(org_id), *role_values),
            )
            return [int(r["user_id"]) for r in fetchall(cur)]

    def add_member(self, org_id: int, user_id: int, *, role: MemberRole) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO organization_members(org_id, user_id, role) VALUES(%s,%s,%s)",
                (int(org_id), int(user_id), role.value),
            )

    def update_role(self, org_id: int, user_id: int, *, role: MemberRole) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE organization_members SET role=%s WHERE org_id=%s AND user_id=%s",
                (role.value, int(org_id), int(user_id)),
            )
            return cur.rowcount > 0

    def remove_member(self, org_id: int, user_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM organization_members WHERE org_id=%s AND user_id=%s",
                (int(org_id), int(user_id)),
            )
            return cur.rowcount > 0

    def mark_selected(self, org_id: int, user_id: int) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE organization_members SET last_selected=(org_id=%s) WHERE user_id=%s",
                (int(org_id), int(user_id)),
            )
