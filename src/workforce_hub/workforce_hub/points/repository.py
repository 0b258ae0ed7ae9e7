from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import RedemptionStatus
from .model import LeaderboardRow, LedgerEntry, Redemption, Reward


class LedgerRepository(Protocol):
    """Read side of the points ledger; rows are written by the task and reward repositories."""

    def balance(self, org_id: int, user_id: int) -> int:
        raise NotImplementedError

    def list_entries(self, org_id: int, user_id: int, *, limit: int = 100) -> Sequence[LedgerEntry]:
        raise NotImplementedError

    def leaderboard(self, org_id: int, *, limit: int = 20) -> Sequence[LeaderboardRow]:
        raise NotImplementedError


class RewardRepository(Protocol):
    def create(
        self,
        *,
        org_id: int,
        title: str,
        description: Optional[str],
        points_cost: int,
        stock: Optional[int],
    ) -> int:
        raise NotImplementedError

    def get_by_id(self, reward_id: int) -> Optional[Reward]:
        raise NotImplementedError

    def list_for_org(self, org_id: int, *, active_only: bool = False) -> Sequence[Reward]:
        raise NotImplementedError

    def update(
        self,
        reward_id: int,
        *,
        title: str,
        description: Optional[str],
        points_cost: int,
        stock: Optional[int],
    ) -> bool:
        raise NotImplementedError

    def set_active(self, reward_id: int, *, active: bool) -> bool:
        raise NotImplementedError

    def delete(self, reward_id: int) -> bool:
        """Delete a reward nobody has redeemed; returns False once it has redemptions."""

        raise NotImplementedError

    def redeem(self, reward: Reward, *, user_id: int, at: datetime) -> Optional[int]:
        """Spend points on a reward in one transaction.

        Writes the negative ledger row, the pending redemption and the stock
        decrement together. Returns None (and writes nothing) when the balance
        is too low or the reward is inactive / out of stock at commit time.
        """

        raise NotImplementedError

    def get_redemption(self, redemption_id: int) -> Optional[Redemption]:
        raise NotImplementedError

    def list_redemptions(
        self,
        org_id: int,
        *,
        user_id: Optional[int] = None,
        status: Optional[RedemptionStatus] = None,
        limit: int = 200,
    ) -> Sequence[Redemption]:
        raise NotImplementedError

    def decide_redemption(
        self,
        redemption: Redemption,
        *,
        status: RedemptionStatus,
        decided_by: int,
        at: datetime,
    ) -> bool:
        """Move a pending redemption to fulfilled/rejected.

        Rejection refunds the points (redemption_refund) and returns one unit
        of stock to limited rewards, in the same transaction.
        """

        raise NotImplementedError
