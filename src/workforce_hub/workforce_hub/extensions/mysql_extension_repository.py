from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import RequestStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, unique_violation_as
from .model import PENDING_EXISTS_MESSAGE, ExtensionRequest, ExtensionRequestView
from .repository import ExtensionRepository

_COLUMNS = """
    er.request_id, er.task_id, er.requester_id, er.requested_due_at, er.reason, er.status,
    er.created_at, er.decided_by, er.decided_at, er.decision_note
"""

_VIEW_SELECT = f"""
    SELECT {_COLUMNS}, t.title AS task_title, t.due_date AS current_due_date, u.full_name AS requester_name
    FROM extension_requests er
    JOIN tasks t ON t.task_id = er.task_id
    JOIN projects p ON p.project_id = t.project_id
    JOIN users u ON u.user_id = er.requester_id
"""


def _to_request(r: dict) -> ExtensionRequest:
    return ExtensionRequest(
        request_id=int(r["request_id"]),
        task_id=int(r["task_id"]),
        requester_id=int(r["requester_id"]),
        requested_due_at=r["requested_due_at"],
        reason=r["reason"],
        status=RequestStatus(r["status"]),
        created_at=r["created_at"],
        decided_by=r.get("decided_by"),
        decided_at=r.get("decided_at"),
        decision_note=r.get("decision_note"),
    )


def _to_view(r: dict) -> ExtensionRequestView:
    return ExtensionRequestView(
        request=_to_request(r),
        task_title=r["task_title"],
        current_due_date=r.get("current_due_date"),
        requester_name=r["requester_name"],
    )


class MySQLExtensionRepository(ExtensionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(self, *, task_id: int, requester_id: int, requested_due_at: datetime, reason: str) -> int:
        with unique_violation_as(PENDING_EXISTS_MESSAGE), db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO extension_requests(task_id, requester_id, requested_due_at, reason, status)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (int(task_id), int(requester_id), requested_due_at, reason, RequestStatus.PENDING.value),
            )
            return int(cur.lastrowid)

    def get_by_id(self, request_id: int) -> Optional[ExtensionRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM extension_requests er WHERE er.request_id=%s", (int(request_id),))
            r = fetchone(cur)
            return _to_request(r) if r else None

    def has_pending_for_task(self, task_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT 1 AS found FROM extension_requests WHERE task_id=%s AND status=%s LIMIT 1",
                (int(task_id), RequestStatus.PENDING.value),
            )
            return fetchone(cur) is not None

    def update_pending(self, request_id: int, *, requested_due_at: datetime, reason: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE extension_requests SET requested_due_at=%s, reason=%s
                WHERE request_id=%s AND status=%s
                """,
                (requested_due_at, reason, int(request_id), RequestStatus.PENDING.value),
            )
            return cur.rowcount > 0

    def list_for_requester(
        self, requester_id: int, *, status: Optional[RequestStatus] = None
    ) -> Sequence[ExtensionRequestView]:
        clauses = ["er.requester_id=%s"]
        params: list[object] = [int(requester_id)]
        if status is not None:
            clauses.append("er.status=%s")
            params.append(status.value)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"{_VIEW_SELECT} WHERE {' AND '.join(clauses)} ORDER BY er.created_at DESC",
                tuple(params),
            )
            return [_to_view(r) for r in fetchall(cur)]

    def list_for_org(self, org_id: int, *, status: Optional[RequestStatus] = None) -> Sequence[ExtensionRequestView]:
        clauses = ["p.org_id=%s"]
        params: list[object] = [int(org_id)]
        if status is not None:
            clauses.append("er.status=%s")
            params.append(status.value)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"{_VIEW_SELECT} WHERE {' AND '.join(clauses)} ORDER BY er.created_at DESC",
                tuple(params),
            )
            return [_to_view(r) for r in fetchall(cur)]

    def decide(
        self,
        request_id: int,
        *,
        status: RequestStatus,
        decided_by: int,
        decision_note: Optional[str],
        at: datetime,
        new_due_date: Optional[datetime] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE extension_requests
                SET status=%s, decided_by=%s, decided_at=%s, decision_note=%s
                WHERE request_id=%s AND status=%s
                """,
                (status.value, int(decided_by), at, decision_note, int(request_id), RequestStatus.PENDING.value),
            )
            if cur.rowcount != 1:
                return False
            if new_due_date is not None:
                cur.execute(
                    """
                    UPDATE tasks t
                    JOIN extension_requests er ON er.task_id = t.task_id
                    SET t.due_date=%s, t.updated_at=%s
                    WHERE er.request_id=%s
                    """,
                    (new_due_date, at, int(request_id)),
                )
            return True
