from __future__ import annotations

from enum import Enum


class MemberRole(str, Enum):
    """Role of a user inside one organization."""

    OWNER = "owner"
    ADMIN = "admin"
    SUPERVISOR = "supervisor"
    EMPLOYEE = "employee"

    @property
    def level(self) -> int:
        return _ROLE_LEVELS[self]


_ROLE_LEVELS = {
    MemberRole.OWNER: 4,
    MemberRole.ADMIN: 3,
    MemberRole.SUPERVISOR: 2,
    MemberRole.EMPLOYEE: 1,
}


class TaskType(str, Enum):
    """A task targets an employee, an assignment targets a supervisor."""

    TASK = "task"
    ASSIGNMENT = "assignment"


class TaskStatus(str, Enum):
    TODO = "todo"
    IN_PROGRESS = "in_progress"
    BLOCKED = "blocked"
    SUBMITTED = "submitted"
    DONE = "done"


class TaskPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class TaskAction(str, Enum):
    START = "start"
    PAUSE = "pause"
    COMPLETE = "complete"


class ArrivalStatus(str, Enum):
    """Classification of one member's attendance on one day."""

    EARLY = "early"
    ON_TIME = "on_time"
    LATE = "late"
    ABSENT = "absent"


class RequestStatus(str, Enum):
    """Approval workflow state (extension requests)."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class RedemptionStatus(str, Enum):
    PENDING = "pending"
    FULFILLED = "fulfilled"
    REJECTED = "rejected"


class PointsReason(str, Enum):
    TASK_COMPLETION = "task_completion"
    ASSIGNMENT_COMPLETION = "assignment_completion"
    REWARD_REDEMPTION = "reward_redemption"
    REDEMPTION_REFUND = "redemption_refund"


class NotificationType(str, Enum):
    TASK_ASSIGNED = "task_assigned"
    TASK_DUE_REMINDER = "task_due_reminder"
    EXTENSION_REQUESTED = "extension_requested"
    EXTENSION_APPROVED = "extension_approved"
    EXTENSION_REJECTED = "extension_rejected"


class CheckinSource(str, Enum):
    WEB = "web"
    QR = "qr"


class InviteStatus(str, Enum):
    ACTIVE = "active"
    USED = "used"
    EXPIRED = "expired"
