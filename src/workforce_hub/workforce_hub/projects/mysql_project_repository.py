from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, unique_violation_as
from .model import DUPLICATE_NAME_MESSAGE, Project
from .repository import ProjectRepository

_COLUMNS = "project_id, org_id, name, description, due_date, current_phase, owner_id, created_at, updated_at"


def _to_project(r: dict) -> Project:
    return Project(
        project_id=int(r["project_id"]),
        org_id=int(r["org_id"]),
        name=r["name"],
        description=r.get("description"),
        due_date=r.get("due_date"),
        current_phase=r.get("current_phase"),
        owner_id=int(r["owner_id"]),
        created_at=r["created_at"],
        updated_at=r.get("updated_at"),
    )


class MySQLProjectRepository(ProjectRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(
        self,
        *,
        org_id: int,
        name: str,
        description: Optional[str],
        due_date: Optional[date],
        current_phase: Optional[str],
        owner_id: int,
    ) -> int:
        with unique_violation_as(DUPLICATE_NAME_MESSAGE), db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO projects(org_id, name, description, due_date, current_phase, owner_id)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (int(org_id), name, description, due_date, current_phase, int(owner_id)),
            )
            return int(cur.lastrowid)

    def get_by_id(self, project_id: int) -> Optional[Project]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM projects WHERE project_id=%s", (int(project_id),))
            r = fetchone(cur)
            return _to_project(r) if r else None

    def find_by_name(self, org_id: int, name: str) -> Optional[Project]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM projects WHERE org_id=%s AND LOWER(name)=LOWER(%s) LIMIT 1",
                (int(org_id), name),
            )
            r = fetchone(cur)
            return _to_project(r) if r else None

    def list_for_org(self, org_id: int) -> Sequence[Project]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM projects WHERE org_id=%s ORDER BY created_at DESC",
                (int(org_id),),
            )
            return [_to_project(r) for r in fetchall(cur)]

    def update(self, project_id: int, *, name: str, description: Optional[str], due_date: Optional[date]) -> bool:
        with unique_violation_as(DUPLICATE_NAME_MESSAGE), db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE projects SET name=%s, description=%s, due_date=%s
                WHERE project_id=%s
                """,
                (name, description, due_date, int(project_id)),
            )
            return cur.rowcount > 0

    def update_phase(self, project_id: int, *, phase: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE projects SET current_phase=%s WHERE project_id=%s", (phase, int(project_id)))
            return cur.rowcount > 0

    def delete(self, project_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM projects WHERE project_id=%s", (int(project_id),))
            return cur.rowcount > 0
