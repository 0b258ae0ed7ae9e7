from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Team, TeamMember
from .repository import TeamRepository

_COLUMNS = "team_id, org_id, name, description, supervisor_id, created_at"


def _to_team(r: dict) -> Team:
    return Team(
        team_id=int(r["team_id"]),
        org_id=int(r["org_id"]),
        name=r["name"],
        description=r.get("description"),
        supervisor_id=int(r["supervisor_id"]),
        created_at=r["created_at"],
    )


class MySQLTeamRepository(TeamRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create_with_supervisor(self, *, org_id: int, name: str, description: Optional[str], supervisor_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO teams(org_id, name, description, supervisor_id) VALUES(%s,%s,%s,%s)",
                (int(org_id), name, description, int(supervisor_id)),
            )
            team_id = int(cur.lastrowid)
            cur.execute(
                "INSERT INTO team_members(team_id, user_id) VALUES(%s,%s)",
                (team_id, int(supervisor_id)),
            )
            return team_id

    def get_by_id(self, team_id: int) -> Optional[Team]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM teams WHERE team_id=%s", (int(team_id),))
            r = fetchone(cur)
            return _to_team(r) if r else None

    def update(self, team_id: int, *, name: str, description: Optional[str], supervisor_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE teams SET name=%s, description=%s, supervisor_id=%s WHERE team_id=%s",
                (name, description, int(supervisor_id), int(team_id)),
            )
            updated = cur.rowcount > 0
            if updated:
                cur.execute(
                    "INSERT IGNORE INTO team_members(team_id, user_id) VALUES(%s,%s)",
                    (int(team_id), int(supervisor_id)),
                )
            return updated

    def delete(self, team_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM teams WHERE team_id=%s", (int(team_id),))
            return cur.rowcount > 0

    def list_for_org(self, org_id: int) -> Sequence[Team]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM teams WHERE org_id=%s ORDER BY name", (int(org_id),))
            return [_to_team(r) for r in fetchall(cur)]

    def list_members(self, team_id: int) -> Sequence[TeamMember]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT tm.team_id, tm.user_id, tm.added_at, u.full_name, u.email
                FROM team_members tm
                JOIN users u ON u.user_id = tm.user_id
                WHERE tm.team_id=%s
                ORDER BY u.full_name
                """,
                (int(team_id),),
            )
            return [
                TeamMember(
                    team_id=int(r["team_id"]),
                    user_id=int(r["user_id"]),
                    full_name=r["full_name"],
                    email=r["email"],
                    added_at=r.get("added_at"),
                )
                for r in fetchall(cur)
            ]

    def is_member(self, team_id: int, user_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT 1 AS found FROM team_members WHERE team_id=%s AND user_id=%s",
                (int(team_id), int(user_id)),
            )
            return fetchone(cur) is not None

    def add_member(self, team_id: int, user_id: int) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO team_members(team_id, user_id) VALUES(%s,%s)",
                (int(team_id), int(user_id)),
            )

    def remove_member(self, team_id: int, user_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM team_members WHERE team_id=%s AND user_id=%s",
                (int(team_id), int(user_id)),
            )
            return cur.rowcount > 0
