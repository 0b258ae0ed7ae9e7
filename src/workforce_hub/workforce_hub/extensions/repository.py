from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import RequestStatus
from .model import ExtensionRequest, ExtensionRequestView


class ExtensionRepository(Protocol):
    def create(self, *, task_id: int, requester_id: int, requested_due_at: datetime, reason: str) -> int:
        raise NotImplementedError

    def get_by_id(self, request_id: int) -> Optional[ExtensionRequest]:
        raise NotImplementedError

    def has_pending_for_task(self, task_id: int) -> bool:
        raise NotImplementedError

    def update_pending(self, request_id: int, *, requested_due_at: datetime, reason: str) -> bool:
        """Edit a request; only rows still pending are touched."""

        raise NotImplementedError

    def list_for_requester(
        self, requester_id: int, *, status: Optional[RequestStatus] = None
    ) -> Sequence[ExtensionRequestView]:
        raise NotImplementedError

    def list_for_org(self, org_id: int, *, status: Optional[RequestStatus] = None) -> Sequence[ExtensionRequestView]:
        raise NotImplementedError

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
        """Move a pending request to approved/rejected.

        When `new_due_date` is given the task's due date is moved in the same
        transaction. Returns False when the request was no longer pending.
        """

        raise NotImplementedError
