from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import PointsReason, RedemptionStatus


@dataclass(frozen=True)
class LedgerEntry:
    """One append-only row of the points ledger (never updated or deleted)."""

    entry_id: int
    org_id: int
    user_id: int
    delta: int
    reason_code: PointsReason
    created_at: datetime
    task_id: Optional[int] = None


@dataclass(frozen=True)
class PointsAward:
    """A completion credit written together with the status change that earns it."""

    org_id: int
    user_id: int
    task_id: int
    delta: int
    reason_code: PointsReason


@dataclass(frozen=True)
class LeaderboardRow:
    user_id: int
    full_name: str
    balance: int


@dataclass(frozen=True)
class Reward:
    reward_id: int
    org_id: int
    title: str
    points_cost: int
    active: bool
    created_at: datetime
    description: Optional[str] = None
    stock: Optional[int] = None

    @property
    def unlimited(self) -> bool:
        return self.stock is None

    @property
    def in_stock(self) -> bool:
        return self.stock is None or self.stock > 0


@dataclass(frozen=True)
class Redemption:
    redemption_id: int
    org_id: int
    user_id: int
    reward_id: int
    points_spent: int
    status: RedemptionStatus
    created_at: datetime
    reward_title: Optional[str] = None
    user_name: Optional[str] = None
    decided_by: Optional[int] = None
    decided_at: Optional[datetime] = None
