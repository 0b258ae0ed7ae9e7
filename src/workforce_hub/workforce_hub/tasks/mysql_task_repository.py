from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import TaskAction, TaskPriority, TaskStatus, TaskType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from ..points.model import PointsAward
from .model import Task, TimeLog
from .repository import TaskRepository

_SELECT = """
    SELECT t.task_id, t.project_id, p.org_id, t.title, t.description, t.assignee_id, t.created_by,
           t.priority, t.due_date, t.completion_points, t.status, t.task_type, t.created_at, t.updated_at
    FROM tasks t
    JOIN projects p ON p.project_id = t.project_id
"""


def _to_task(r: dict) -> Task:
    return Task(
        task_id=int(r["task_id"]),
        project_id=int(r["project_id"]),
        org_id=int(r["org_id"]),
        title=r["title"],
        description=r.get("description"),
        assignee_id=r.get("assignee_id"),
        created_by=int(r["created_by"]),
        priority=TaskPriority(r["priority"]),
        due_date=r.get("due_date"),
        completion_points=int(r.get("completion_points") or 0),
        status=TaskStatus(r["status"]),
        task_type=TaskType(r["task_type"]),
        created_at=r["created_at"],
        updated_at=r.get("updated_at"),
    )


class MySQLTaskRepository(TaskRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(
        self,
        *,
        project_id: int,
        title: str,
        description: Optional[str],
        assignee_id: int,
        created_by: int,
        priority: TaskPriority,
        due_date: datetime,
        completion_points: int,
        task_type: TaskType,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO tasks(
                    project_id, title, description, assignee_id, created_by,
                    priority, due_date, completion_points, status, task_type
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(project_id),
                    title,
                    description,
                    int(assignee_id),
                    int(created_by),
                    priority.value,
                    due_date,
                    int(completion_points),
                    TaskStatus.TODO.value,
                    task_type.value,
                ),
            )
            return int(cur.lastrowid)

    def get_by_id(self, task_id: int) -> Optional[Task]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_SELECT} WHERE t.task_id=%s", (int(task_id),))
            r = fetchone(cur)
            return _to_task(r) if r else None

    def update(
        self,
        task_id: int,
        *,
        title: str,
        description: Optional[str],
        assignee_id: int,
        priority: TaskPriority,
        due_date: datetime,
        completion_points: int,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE tasks
                SET title=%s, description=%s, assignee_id=%s, priority=%s, due_date=%s, completion_points=%s
                WHERE task_id=%s
                """,
                (title, description, int(assignee_id), priority.value, due_date, int(completion_points), int(task_id)),
            )
            return cur.rowcount > 0

    def apply_action(
        self,
        task_id: int,
        *,
        user_id: int,
        status: TaskStatus,
        action: TaskAction,
        at: datetime,
        award: Optional[PointsAward] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE tasks SET status=%s, updated_at=%s
                WHERE task_id=%s AND status<>%s
                """,
                (status.value, at, int(task_id), TaskStatus.DONE.value),
            )
            if cur.rowcount != 1:
                return False
            cur.execute(
                "INSERT INTO time_logs(task_id, user_id, action, created_at) VALUES(%s,%s,%s,%s)",
                (int(task_id), int(user_id), action.value, at),
            )
            if award is not None:
                cur.execute(
                    """
                    INSERT INTO points_ledger(org_id, user_id, delta, reason_code, task_id, created_at)
                    VALUES(%s,%s,%s,%s,%s,%s)
                    """,
                    (award.org_id, award.user_id, award.delta, award.reason_code.value, award.task_id, at),
                )
            return True

    def set_status(self, task_id: int, *, status: TaskStatus, at: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE tasks SET status=%s, updated_at=%s WHERE task_id=%s AND status<>%s",
                (status.value, at, int(task_id), TaskStatus.DONE.value),
            )
            return cur.rowcount == 1

    def update_due_date(self, task_id: int, *, due_date: datetime, at: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE tasks SET due_date=%s, updated_at=%s WHERE task_id=%s",
                (due_date, at, int(task_id)),
            )
            return cur.rowcount > 0

    def delete(self, task_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM tasks WHERE task_id=%s", (int(task_id),))
            return cur.rowcount > 0

    def list_for_project(
        self,
        project_id: int,
        *,
        assignee_id: Optional[int] = None,
        task_type: Optional[TaskType] = None,
    ) -> Sequence[Task]:
        clauses = ["t.project_id=%s"]
        params: list[object] = [int(project_id)]
        if assignee_id is not None:
            clauses.append("t.assignee_id=%s")
            params.append(int(assignee_id))
        if task_type is not None:
            clauses.append("t.task_type=%s")
            params.append(task_type.value)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"{_SELECT} WHERE {' AND '.join(clauses)} ORDER BY t.due_date IS NULL, t.due_date ASC, t.task_id ASC",
                tuple(params),
            )
            return [_to_task(r) for r in fetchall(cur)]

    def list_for_assignee(self, org_id: int, user_id: int) -> Sequence[Task]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"{_SELECT} WHERE p.org_id=%s AND t.assignee_id=%s ORDER BY t.due_date ASC, t.task_id ASC",
                (int(org_id), int(user_id)),
            )
            return [_to_task(r) for r in fetchall(cur)]

    def list_due_between(self, start: datetime, end: datetime) -> Sequence[Task]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                {_SELECT}
                WHERE t.assignee_id IS NOT NULL AND t.status<>%s
                  AND t.due_date >= %s AND t.due_date < %s
                ORDER BY t.due_date ASC
                """,
                (TaskStatus.DONE.value, start, end),
            )
            return [_to_task(r) for r in fetchall(cur)]

    def list_time_logs(self, task_id: int) -> Sequence[TimeLog]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT log_id, task_id, user_id, action, created_at
                FROM time_logs WHERE task_id=%s
                ORDER BY created_at ASC, log_id ASC
                """,
                (int(task_id),),
            )
            return [
                TimeLog(
                    log_id=int(r["log_id"]),
                    task_id=int(r["task_id"]),
                    user_id=int(r["user_id"]),
                    action=TaskAction(r["action"]),
                    created_at=r["created_at"],
                )
                for r in fetchall(cur)
            ]
