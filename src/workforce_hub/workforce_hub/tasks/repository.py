from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import TaskAction, TaskPriority, TaskStatus, TaskType
from ..points.model import PointsAward
from .model import Task, TimeLog


class TaskRepository(Protocol):
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
        raise NotImplementedError

    def get_by_id(self, task_id: int) -> Optional[Task]:
        raise NotImplementedError

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
        raise NotImplementedError

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
        """Set the status, write the time log and append the award in one transaction.

        Returns False when the task is missing or already done; nothing is written then.
        """

        raise NotImplementedError

    def set_status(self, task_id: int, *, status: TaskStatus, at: datetime) -> bool:
        """Returns False when the task is missing or already done."""

        raise NotImplementedError

    def update_due_date(self, task_id: int, *, due_date: datetime, at: datetime) -> bool:
        raise NotImplementedError

    def delete(self, task_id: int) -> bool:
        raise NotImplementedError

    def list_for_project(
        self,
        project_id: int,
        *,
        assignee_id: Optional[int] = None,
        task_type: Optional[TaskType] = None,
    ) -> Sequence[Task]:
        raise NotImplementedError

    def list_for_assignee(self, org_id: int, user_id: int) -> Sequence[Task]:
        raise NotImplementedError

    def list_due_between(self, start: datetime, end: datetime) -> Sequence[Task]:
        """Assigned tasks that are not done with start <= due_date < end."""

        raise NotImplementedError

    def list_time_logs(self, task_id: int) -> Sequence[TimeLog]:
        raise NotImplementedError
