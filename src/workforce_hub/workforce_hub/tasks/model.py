from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import TaskAction, TaskPriority, TaskStatus, TaskType


@dataclass(frozen=True)
class Task:
    """Domain entity: a task (for employees) or an assignment (for supervisors).

    `org_id` is denormalized from the project for authorization checks.
    """

    task_id: int
    project_id: int
    org_id: int
    title: str
    created_by: int
    priority: TaskPriority
    status: TaskStatus
    task_type: TaskType
    completion_points: int
    created_at: datetime
    description: Optional[str] = None
    assignee_id: Optional[int] = None
    due_date: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def is_overdue(self, now: datetime) -> bool:
        return self.due_date is not None and self.due_date < now and self.status != TaskStatus.DONE


@dataclass(frozen=True)
class TimeLog:
    log_id: int
    task_id: int
    user_id: int
    action: TaskAction
    created_at: datetime
