from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable, Optional, Sequence

from ..common.datetime_utils import isoformat_or_none, now_local
from ..core.enums import NotificationType, RequestStatus
from ..core.exceptions import NotFoundError
from .model import Notification
from .repository import NotificationRepository

logger = logging.getLogger(__name__)


class NotificationService:
    """In-app notifications: write side used by other services, read side for the bell."""

    def __init__(self, notifications: NotificationRepository):
        self._notifications = notifications

    def notify(self, user_id: int, type: NotificationType, payload: dict) -> int:
        notification_id = self._notifications.create(user_id=int(user_id), type=type, payload=payload)
        logger.info("Notification %s (%s) sent to user %s", notification_id, type.value, user_id)
        return notification_id

    def notify_many(self, user_ids: Iterable[int], type: NotificationType, payload: dict) -> list[int]:
        return [self.notify(uid, type, dict(payload)) for uid in dict.fromkeys(int(u) for u in user_ids)]

    # --- message builders ---

    def task_assigned(
        self,
        *,
        assignee_id: int,
        task,
        assigner_name: Optional[str],
        reassigned: bool = False,
    ) -> int:
        verb = "reassigned" if reassigned else "assigned"
        return self.notify(
            assignee_id,
            NotificationType.TASK_ASSIGNED,
            {
                "task_id": task.task_id,
                "task_title": task.title,
                "task_type": task.task_type.value,
                "priority": task.priority.value,
                "due_date": isoformat_or_none(task.due_date),
                "assigned_by": task.created_by,
                "assigner_name": assigner_name or "System",
                "message": f'You have been {verb} to "{task.title}"',
            },
        )

    def extension_requested(self, *, recipient_ids: Iterable[int], request, task_title: str, requester_name: str) -> list[int]:
        return self.notify_many(
            recipient_ids,
            NotificationType.EXTENSION_REQUESTED,
            {
                "extension_request_id": request.request_id,
                "task_id": request.task_id,
                "task_title": task_title,
                "requester_id": request.requester_id,
                "requester_name": requester_name,
                "requested_due_at": isoformat_or_none(request.requested_due_at),
                "reason": request.reason,
                "message": f'{requester_name} requested an extension for "{task_title}"',
            },
        )

    def extension_decided(self, *, request, task_title: str, decider_name: str) -> int:
        approved = request.status == RequestStatus.APPROVED
        return self.notify(
            request.requester_id,
            NotificationType.EXTENSION_APPROVED if approved else NotificationType.EXTENSION_REJECTED,
            {
                "extension_request_id": request.request_id,
                "task_id": request.task_id,
                "task_title": task_title,
                "decided_by": request.decided_by,
                "decider_name": decider_name,
                "decision_note": request.decision_note,
                "status": request.status.value,
                "message": (
                    f'Your extension request for "{task_title}" has been '
                    f'{"approved" if approved else "rejected"}'
                ),
            },
        )

    # --- read side ---

    def list_for_user(self, user_id: int, *, unread_only: bool = False, limit: int = 50) -> Sequence[Notification]:
        return self._notifications.list_for_user(int(user_id), unread_only=unread_only, limit=int(limit))

    def unread_count(self, user_id: int) -> int:
        return self._notifications.count_unread(int(user_id))

    def mark_read(self, notification_id: int, *, user_id: int, now: Optional[datetime] = None) -> None:
        notification = self._notifications.get_by_id(int(notification_id))
        # Other users' notifications are reported as missing.
        if not notification or notification.user_id != int(user_id):
            raise NotFoundError("Notification not found")
        self._notifications.mark_read(notification.notification_id, read_at=now or now_local())

    def mark_all_read(self, user_id: int, *, now: Optional[datetime] = None) -> int:
        return self._notifications.mark_all_read(int(user_id), read_at=now or now_local())
