from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import NotificationType
from .model import Notification


class NotificationRepository(Protocol):
    def create(self, *, user_id: int, type: NotificationType, payload: dict) -> int:
        raise NotImplementedError

    def get_by_id(self, notification_id: int) -> Optional[Notification]:
        raise NotImplementedError

    def list_for_user(self, user_id: int, *, unread_only: bool = False, limit: int = 50) -> Sequence[Notification]:
        raise NotImplementedError

    def count_unread(self, user_id: int) -> int:
        raise NotImplementedError

    def mark_read(self, notification_id: int, *, read_at: datetime) -> bool:
        raise NotImplementedError

    def mark_all_read(self, user_id: int, *, read_at: datetime) -> int:
        raise NotImplementedError

    def exists_for_task_on(self, *, user_id: int, type: NotificationType, task_id: int, day: date) -> bool:
        """True when `user_id` already got a notification of `type` about `task_id` on `day`."""

        raise NotImplementedError
