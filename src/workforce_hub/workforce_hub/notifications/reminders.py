from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Optional

from ..common.datetime_utils import isoformat_or_none, now_local
from ..core.constants import DEFAULT_DUE_REMINDER_HOURS
from ..core.enums import NotificationType
from ..tasks.repository import TaskRepository
from .repository import NotificationRepository
from .service import NotificationService

logger = logging.getLogger(__name__)


class DueReminderJob:
    """Remind assignees about tasks that are due soon, at most once a day per task."""

    def __init__(
        self,
        tasks: TaskRepository,
        notifications: NotificationRepository,
        notification_service: NotificationService,
        *,
        within_hours: int = DEFAULT_DUE_REMINDER_HOURS,
    ):
        self._tasks = tasks
        self._notifications = notifications
        self._service = notification_service
        self._within_hours = int(within_hours)

    def send_due_reminders(self, now: Optional[datetime] = None, within_hours: Optional[int] = None) -> int:
        now = now or now_local()
        hours = self._within_hours if within_hours is None else int(within_hours)
        sent = 0

        for task in self._tasks.list_due_between(now, now + timedelta(hours=hours)):
            if task.assignee_id is None:
                continue
            if self._notifications.exists_for_task_on(
                user_id=task.assignee_id,
                type=NotificationType.TASK_DUE_REMINDER,
                task_id=task.task_id,
                day=now.date(),
            ):
                continue

            hours_left = max(0, int((task.due_date - now).total_seconds() // 3600))
            self._service.notify(
                task.assignee_id,
                NotificationType.TASK_DUE_REMINDER,
                {
                    "task_id": task.task_id,
                    "task_title": task.title,
                    "due_date": isoformat_or_none(task.due_date),
                    "hours_left": hours_left,
                    "message": f'"{task.title}" is due in {hours_left}h',
                },
            )
            sent += 1

        logger.info("Sent %s due reminder(s) for window of %sh", sent, hours)
        return sent
