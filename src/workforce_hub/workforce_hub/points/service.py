from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import PointsReason, TaskType
from ..core.exceptions import ValidationError
from ..organizations.policy import AccessPolicy
from .model import LeaderboardRow, LedgerEntry, PointsAward
from .repository import LedgerRepository

COMPLETION_REASONS = frozenset({PointsReason.TASK_COMPLETION, PointsReason.ASSIGNMENT_COMPLETION})


def check_entry(*, delta: int, reason_code: PointsReason, task_id: Optional[int]) -> None:
    """Shape rules every ledger row must satisfy."""

    if reason_code in COMPLETION_REASONS:
        if task_id is None:
            raise ValidationError("Completion points must reference a task")
        if delta <= 0:
            raise ValidationError("Completion points must be positive")
    elif reason_code == PointsReason.REWARD_REDEMPTION:
        if delta >= 0:
            raise ValidationError("A redemption must spend points")
    elif reason_code == PointsReason.REDEMPTION_REFUND:
        if delta <= 0:
            raise ValidationError("A refund must return points")
    else:
        raise ValidationError("Unknown points reason")


class PointsService:
    """Points ledger: award on completion, read balances."""

    def __init__(self, ledger: LedgerRepository, policy: AccessPolicy):
        self._ledger = ledger
        self._policy = policy

    def completion_award(
        self, *, org_id: int, user_id: int, task_id: int, task_type: TaskType, points: int
    ) -> Optional[PointsAward]:
        """The ledger credit for completing a task; tasks worth 0 points earn nothing.

        The task repository writes it in the same transaction as the status change.
        """

        if int(points) <= 0:
            return None
        reason = (
            PointsReason.ASSIGNMENT_COMPLETION if task_type == TaskType.ASSIGNMENT else PointsReason.TASK_COMPLETION
        )
        check_entry(delta=int(points), reason_code=reason, task_id=task_id)
        return PointsAward(
            org_id=int(org_id), user_id=int(user_id), task_id=int(task_id), delta=int(points), reason_code=reason
        )

    def balance(self, org_id: int, *, user_id: int) -> int:
        self._policy.require_member(org_id, user_id)
        return self._ledger.balance(int(org_id), int(user_id))

    def history(self, org_id: int, *, user_id: int, limit: int = 100) -> Sequence[LedgerEntry]:
        self._policy.require_member(org_id, user_id)
        return self._ledger.list_entries(int(org_id), int(user_id), limit=int(limit))

    def leaderboard(self, org_id: int, *, user_id: int, limit: int = 20) -> Sequence[LeaderboardRow]:
        self._policy.require_member(org_id, user_id)
        return self._ledger.leaderboard(int(org_id), limit=int(limit))
