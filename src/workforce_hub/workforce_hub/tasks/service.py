from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Sequence

from ..common.datetime_utils import now_local, parse_optional_datetime
from ..common.validators import optional_text, require_int_range, require_non_empty
from ..core.constants import MAX_COMPLETION_POINTS, MIN_COMPLETION_POINTS
from ..core.enums import MemberRole, TaskAction, TaskPriority, TaskStatus, TaskType
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..notifications.service import NotificationService
from ..organizations.policy import LEADS, MANAGERS, AccessPolicy
from ..points.service import PointsService
from ..projects.repository import ProjectRepository
from ..users.repository import UserRepository
from .model import Task, TimeLog
from .repository import TaskRepository

logger = logging.getLogger(__name__)

_UNSET = object()

# action -> (statuses it may start from, resulting status)
ACTION_RULES = {
    TaskAction.START: (frozenset({TaskStatus.TODO, TaskStatus.BLOCKED, TaskStatus.SUBMITTED}), TaskStatus.IN_PROGRESS),
    TaskAction.PAUSE: (frozenset({TaskStatus.IN_PROGRESS}), TaskStatus.TODO),
    TaskAction.COMPLETE: (
        frozenset({TaskStatus.TODO, TaskStatus.IN_PROGRESS, TaskStatus.BLOCKED, TaskStatus.SUBMITTED}),
        TaskStatus.DONE,
    ),
}

# task type -> (role the assignee must hold, roles allowed to create it)
TYPE_RULES = {
    TaskType.TASK: (MemberRole.EMPLOYEE, LEADS),
    TaskType.ASSIGNMENT: (MemberRole.SUPERVISOR, MANAGERS),
}

_ARTICLE_ROLE = {MemberRole.EMPLOYEE: "an employee", MemberRole.SUPERVISOR: "a supervisor"}

MANUAL_STATUSES = frozenset({TaskStatus.TODO, TaskStatus.IN_PROGRESS, TaskStatus.BLOCKED})


@dataclass(frozen=True)
class TaskRow:
    """Read-model: a task with its derived overdue flag."""

    task: Task
    overdue: bool


@dataclass(frozen=True)
class ActionResult:
    task: Task
    points_awarded: int = 0


def _parse_priority(value) -> TaskPriority:
    if value is None or value == "":
        return TaskPriority.MEDIUM
    try:
        return TaskPriority(str(value).strip().lower())
    except ValueError:
        raise ValidationError("Priority is not valid")


def _parse_points(value) -> int:
    if value is None or value == "":
        return 0
    return require_int_range(
        value, "Completion points", min_value=MIN_COMPLETION_POINTS, max_value=MAX_COMPLETION_POINTS
    )


class TaskService:
    def __init__(
        self,
        tasks: TaskRepository,
        projects: ProjectRepository,
        policy: AccessPolicy,
        users: UserRepository,
        *,
        points: PointsService,
        notifications: NotificationService,
    ):
        self._tasks = tasks
        self._projects = projects
        self._policy = policy
        self._users = users
        self._points = points
        self._notifications = notifications

    def _get(self, task_id: int) -> Task:
        task = self._tasks.get_by_id(int(task_id))
        if not task:
            raise NotFoundError("Task not found")
        return task

    def _user_name(self, user_id: int) -> Optional[str]:
        user = self._users.get_by_id(int(user_id))
        return user.full_name if user else None

    def _check_assignee(self, org_id: int, assignee_id, task_type: TaskType) -> int:
        required_role, _ = TYPE_RULES[task_type]
        if assignee_id in (None, "", "unassigned"):
            raise ValidationError(f"Please assign the {task_type.value} to {_ARTICLE_ROLE[required_role]}")
        try:
            assignee_id = int(assignee_id)
        except (TypeError, ValueError):
            raise ValidationError("Assignee is not valid")
        if self._policy.role_of(org_id, assignee_id) != required_role:
            raise ValidationError(f"The assignee must be {_ARTICLE_ROLE[required_role]} of this organization")
        return assignee_id

    def create_task(
        self,
        project_id: int,
        *,
        user_id: int,
        title: str,
        due_date,
        assignee_id,
        task_type: TaskType = TaskType.TASK,
        description: Optional[str] = None,
        priority=None,
        completion_points=None,
    ) -> Task:
        project = self._projects.get_by_id(int(project_id))
        if not project:
            raise NotFoundError("Project not found")

        task_type = TaskType(task_type)
        _, creator_roles = TYPE_RULES[task_type]
        self._policy.require_role(
            project.org_id, user_id, creator_roles, message=f"You do not have permission to create a {task_type.value}"
        )

        title = require_non_empty(title, f"{task_type.value.capitalize()} title")
        due = parse_optional_datetime(due_date)
        if due is None:
            raise ValidationError("Due date is required")
        assignee = self._check_assignee(project.org_id, assignee_id, task_type)

        task_id = self._tasks.create(
            project_id=project.project_id,
            title=title,
            description=optional_text(description),
            assignee_id=assignee,
            created_by=int(user_id),
            priority=_parse_priority(priority),
            due_date=due,
            completion_points=_parse_points(completion_points),
            task_type=task_type,
        )
        task = self._get(task_id)
        logger.info("%s %s created in project %s by user %s", task_type.value, task_id, project_id, user_id)

        self._notifications.task_assigned(
            assignee_id=assignee, task=task, assigner_name=self._user_name(user_id)
        )
        return task

    def update_task(
        self,
        task_id: int,
        *,
        user_id: int,
        title=_UNSET,
        description=_UNSET,
        assignee_id=_UNSET,
        priority=_UNSET,
        due_date=_UNSET,
        completion_points=_UNSET,
    ) -> Task:
        task = self._get(task_id)
        role = self._policy.require_member(task.org_id, user_id)
        if role not in MANAGERS and task.created_by != int(user_id):
            raise AuthorizationError("Only the creator, owners and admins can edit this task")

        new_assignee = task.assignee_id
        if assignee_id is not _UNSET:
            new_assignee = self._check_assignee(task.org_id, assignee_id, task.task_type)

        new_due = task.due_date
        if due_date is not _UNSET:
            new_due = parse_optional_datetime(due_date)
            if new_due is None:
                raise ValidationError("Due date is required")

        self._tasks.update(
            task.task_id,
            title=require_non_empty(task.title if title is _UNSET else title, "Title"),
            description=optional_text(task.description if description is _UNSET else description),
            assignee_id=new_assignee,
            priority=task.priority if priority is _UNSET else _parse_priority(priority),
            due_date=new_due,
            completion_points=task.completion_points if completion_points is _UNSET else _parse_points(completion_points),
        )
        updated = self._get(task.task_id)

        if new_assignee != task.assignee_id:
            self._notifications.task_assigned(
                assignee_id=new_assignee,
                task=updated,
                assigner_name=self._user_name(user_id),
                reassigned=True,
            )
        return updated

    def delete_task(self, task_id: int, *, user_id: int) -> None:
        task = self._get(task_id)
        self._policy.require_role(
            task.org_id, user_id, LEADS, message="Only owners, admins and supervisors can delete tasks"
        )
        self._tasks.delete(task.task_id)
        logger.info("Task %s deleted by user %s", task_id, user_id)

    def perform_action(
        self,
        task_id: int,
        *,
        user_id: int,
        action: TaskAction,
        now: Optional[datetime] = None,
    ) -> ActionResult:
        now = now or now_local()
        try:
            action = TaskAction(action)
        except ValueError:
            raise ValidationError("Action is not valid")

        task = self._get(task_id)
        if task.assignee_id != int(user_id):
            raise AuthorizationError("Only the assignee can update this task")
        if task.status == TaskStatus.DONE:
            raise ValidationError("This task is already completed")

        allowed_from, new_status = ACTION_RULES[action]
        if task.status not in allowed_from:
            raise ValidationError(f"Cannot {action.value} a task that is {task.status.value}")

        award = None
        if action == TaskAction.COMPLETE:
            award = self._points.completion_award(
                org_id=task.org_id,
                user_id=int(user_id),
                task_id=task.task_id,
                task_type=task.task_type,
                points=task.completion_points,
            )

        applied = self._tasks.apply_action(
            task.task_id, user_id=int(user_id), status=new_status, action=action, at=now, award=award
        )
        if not applied:
            raise ValidationError("This task is already completed")

        logger.info("User %s performed %s on task %s", user_id, action.value, task_id)
        if award is not None:
            logger.info("User %s earned %s points for task %s (%s)", user_id, award.delta, task_id, award.reason_code.value)
        return ActionResult(task=self._get(task.task_id), points_awarded=award.delta if award else 0)

    def submit_assignment(self, task_id: int, *, user_id: int, now: Optional[datetime] = None) -> Task:
        """The supervisor hands an assignment back for review."""

        now = now or now_local()
        task = self._get(task_id)
        if task.task_type != TaskType.ASSIGNMENT:
            raise ValidationError("Only assignments can be submitted")
        if task.assignee_id != int(user_id):
            raise AuthorizationError("Only the assignee can submit this assignment")
        if task.status in {TaskStatus.DONE, TaskStatus.SUBMITTED}:
            raise ValidationError(f"This assignment is already {task.status.value}")
        if not self._tasks.set_status(task.task_id, status=TaskStatus.SUBMITTED, at=now):
            raise ValidationError("This assignment is already done")
        return self._get(task.task_id)

    def set_status(self, task_id: int, *, user_id: int, status: TaskStatus, now: Optional[datetime] = None) -> Task:
        """Manual status change by leads (completion goes through perform_action)."""

        now = now or now_local()
        try:
            status = TaskStatus(status)
        except ValueError:
            raise ValidationError("Status is not valid")
        if status not in MANUAL_STATUSES:
            raise ValidationError(f"Status cannot be set to {status.value} directly")

        task = self._get(task_id)
        self._policy.require_role(task.org_id, user_id, LEADS)
        if task.status == TaskStatus.DONE:
            raise ValidationError("This task is already completed")
        if not self._tasks.set_status(task.task_id, status=status, at=now):
            raise ValidationError("This task is already completed")
        return self._get(task.task_id)

    def get_task(self, task_id: int, *, user_id: int, now: Optional[datetime] = None) -> TaskRow:
        now = now or now_local()
        task = self._get(task_id)
        role = self._policy.require_member(task.org_id, user_id)
        if role == MemberRole.EMPLOYEE and task.assignee_id != int(user_id):
            raise NotFoundError("Task not found")
        return TaskRow(task=task, overdue=task.is_overdue(now))

    def list_tasks(
        self,
        project_id: int,
        *,
        user_id: int,
        task_type: Optional[TaskType] = None,
        now: Optional[datetime] = None,
    ) -> Sequence[TaskRow]:
        """Employees only see their own work; leads see the whole project."""

        now = now or now_local()
        project = self._projects.get_by_id(int(project_id))
        if not project:
            raise NotFoundError("Project not found")
        role = self._policy.require_member(project.org_id, user_id)
        assignee = int(user_id) if role == MemberRole.EMPLOYEE else None
        tasks = self._tasks.list_for_project(project.project_id, assignee_id=assignee, task_type=task_type)
        return [TaskRow(task=t, overdue=t.is_overdue(now)) for t in tasks]

    def list_my_tasks(self, org_id: int, *, user_id: int, now: Optional[datetime] = None) -> Sequence[TaskRow]:
        now = now or now_local()
        self._policy.require_member(org_id, user_id)
        return [TaskRow(task=t, overdue=t.is_overdue(now)) for t in self._tasks.list_for_assignee(int(org_id), int(user_id))]

    def list_time_logs(self, task_id: int, *, user_id: int) -> Sequence[TimeLog]:
        self.get_task(task_id, user_id=user_id)
        return self._tasks.list_time_logs(int(task_id))
