from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional, Sequence

from ..common.datetime_utils import now_local, parse_optional_datetime
from ..common.validators import optional_text, require_non_empty
from ..core.enums import RequestStatus, TaskStatus
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..notifications.service import NotificationService
from ..organizations.policy import MANAGERS, AccessPolicy
from ..organizations.repository import MemberRepository
from ..tasks.model import Task
from ..tasks.repository import TaskRepository
from ..users.repository import UserRepository
from .model import PENDING_EXISTS_MESSAGE, ExtensionRequest, ExtensionRequestView
from .repository import ExtensionRepository

logger = logging.getLogger(__name__)


class ExtensionService:
    """Use cases: ask for more time on a task; owners/admins approve or reject."""

    def __init__(
        self,
        extensions: ExtensionRepository,
        tasks: TaskRepository,
        policy: AccessPolicy,
        members: MemberRepository,
        users: UserRepository,
        *,
        notifications: NotificationService,
    ):
        self._extensions = extensions
        self._tasks = tasks
        self._policy = policy
        self._members = members
        self._users = users
        self._notifications = notifications

    def _get_task(self, task_id: int) -> Task:
        task = self._tasks.get_by_id(int(task_id))
        if not task:
            raise NotFoundError("Task not found")
        return task

    def _get_request(self, request_id: int) -> ExtensionRequest:
        req = self._extensions.get_by_id(int(request_id))
        if not req:
            raise NotFoundError("Extension request not found")
        return req

    def _name(self, user_id: int) -> str:
        user = self._users.get_by_id(int(user_id))
        return user.full_name if user else "Someone"

    @staticmethod
    def _validated(task: Task, requested_due_at, reason: str) -> tuple[datetime, str]:
        due = parse_optional_datetime(requested_due_at)
        if due is None:
            raise ValidationError("Please select a new due date")
        reason = require_non_empty(reason, "Reason")
        if task.due_date is not None and due <= task.due_date:
            raise ValidationError("The new due date must be later than the current due date")
        return due, reason

    def create_request(self, task_id: int, *, user_id: int, requested_due_at, reason: str) -> ExtensionRequest:
        task = self._get_task(task_id)
        self._policy.require_member(task.org_id, user_id)
        if task.assignee_id != int(user_id):
            raise AuthorizationError("Only the assignee can request an extension")
        if task.status == TaskStatus.DONE:
            raise ValidationError("This task is already completed")

        due, reason = self._validated(task, requested_due_at, reason)
        if self._extensions.has_pending_for_task(task.task_id):
            raise ValidationError(PENDING_EXISTS_MESSAGE)

        request_id = self._extensions.create(
            task_id=task.task_id, requester_id=int(user_id), requested_due_at=due, reason=reason
        )
        req = self._get_request(request_id)
        logger.info("Extension request %s created for task %s by user %s", request_id, task.task_id, user_id)

        managers = self._members.list_user_ids_by_role(task.org_id, MANAGERS)
        self._notifications.extension_requested(
            recipient_ids=[m for m in managers if m != int(user_id)],
            request=req,
            task_title=task.title,
            requester_name=self._name(user_id),
        )
        return req

    def update_request(self, request_id: int, *, user_id: int, requested_due_at=None, reason=None) -> ExtensionRequest:
        req = self._get_request(request_id)
        if req.requester_id != int(user_id):
            raise AuthorizationError("You can only edit your own extension requests")
        if req.status != RequestStatus.PENDING:
            raise ValidationError("Only pending requests can be edited")

        task = self._get_task(req.task_id)
        due, reason = self._validated(
            task,
            req.requested_due_at if requested_due_at is None else requested_due_at,
            req.reason if reason is None else reason,
        )
        if not self._extensions.update_pending(req.request_id, requested_due_at=due, reason=reason):
            raise ValidationError("Only pending requests can be edited")
        return self._get_request(req.request_id)

    def list_my_requests(
        self, *, user_id: int, status: Optional[RequestStatus] = None
    ) -> Sequence[ExtensionRequestView]:
        return self._extensions.list_for_requester(int(user_id), status=status)

    def list_org_requests(
        self, org_id: int, *, user_id: int, status: Optional[RequestStatus] = None
    ) -> Sequence[ExtensionRequestView]:
        self._policy.require_role(
            org_id, user_id, MANAGERS, message="Only owners and admins can review extension requests"
        )
        return self._extensions.list_for_org(int(org_id), status=status)

    def approve(self, request_id: int, *, user_id: int, note: str = "", now: Optional[datetime] = None) -> None:
        self._decide(request_id, user_id=user_id, status=RequestStatus.APPROVED, note=note, now=now)

    def reject(self, request_id: int, *, user_id: int, note: str = "", now: Optional[datetime] = None) -> None:
        self._decide(request_id, user_id=user_id, status=RequestStatus.REJECTED, note=note, now=now)

    def _decide(
        self,
        request_id: int,
        *,
        user_id: int,
        status: RequestStatus,
        note: str,
        now: Optional[datetime],
    ) -> None:
        now = now or now_local()
        req = self._get_request(request_id)
        task = self._get_task(req.task_id)
        self._policy.require_role(
            task.org_id, user_id, MANAGERS, message="Only owners and admins can decide extension requests"
        )
        if req.status != RequestStatus.PENDING:
            raise ValidationError("This request has already been processed")

        decided = self._extensions.decide(
            req.request_id,
            status=status,
            decided_by=int(user_id),
            decision_note=optional_text(note),
            at=now,
            new_due_date=req.requested_due_at if status == RequestStatus.APPROVED else None,
        )
        if not decided:
            raise ValidationError("This request has already been processed")
        logger.info("Extension request %s %s by user %s", request_id, status.value, user_id)

        # Notify only on the pending -> decided transition that just happened.
        self._notifications.extension_decided(
            request=self._get_request(req.request_id),
            task_title=task.title,
            decider_name=self._name(user_id),
        )
