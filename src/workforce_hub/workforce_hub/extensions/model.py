from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import RequestStatus

PENDING_EXISTS_MESSAGE = "There is already a pending extension request for this task"


@dataclass(frozen=True)
class ExtensionRequest:
    """Request to push back a task's due date."""

    request_id: int
    task_id: int
    requester_id: int
    requested_due_at: datetime
    reason: str
    status: RequestStatus
    created_at: datetime
    decided_by: Optional[int] = None
    decided_at: Optional[datetime] = None
    decision_note: Optional[str] = None


@dataclass(frozen=True)
class ExtensionRequestView:
    """Read-model for review screens (joined with task and requester)."""

    request: ExtensionRequest
    task_title: str
    current_due_date: Optional[datetime]
    requester_name: str
