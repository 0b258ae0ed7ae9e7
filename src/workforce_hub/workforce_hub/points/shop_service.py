from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional, Sequence

from ..common.datetime_utils import now_local
from ..common.validators import optional_text, require_non_empty
from ..core.enums import RedemptionStatus
from ..core.exceptions import NotFoundError, ValidationError
from ..organizations.policy import MANAGERS, AccessPolicy
from .model import Redemption, Reward
from .repository import LedgerRepository, RewardRepository

logger = logging.getLogger(__name__)

_UNSET = object()


def _positive_cost(value) -> int:
    try:
        cost = int(value)
    except (TypeError, ValueError):
        raise ValidationError("Points cost must be a whole number")
    if cost <= 0:
        raise ValidationError("Points cost must be greater than 0")
    return cost


def _normalize_stock(value) -> Optional[int]:
    """Stock > 0 is a limited reward; empty, 0 or negative means unlimited."""

    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    try:
        stock = int(value)
    except (TypeError, ValueError):
        raise ValidationError("Stock must be a whole number")
    return stock if stock > 0 else None


class ShopService:
    """Use cases: manage rewards (owner/admin), redeem rewards (members)."""

    def __init__(self, rewards: RewardRepository, ledger: LedgerRepository, policy: AccessPolicy):
        self._rewards = rewards
        self._ledger = ledger
        self._policy = policy

    def _get_reward(self, reward_id: int) -> Reward:
        reward = self._rewards.get_by_id(int(reward_id))
        if not reward:
            raise NotFoundError("Reward not found")
        return reward

    # -------- Reward management --------
    def create_reward(
        self,
        org_id: int,
        *,
        user_id: int,
        title: str,
        points_cost,
        description: Optional[str] = None,
        stock=None,
    ) -> int:
        self._policy.require_role(org_id, user_id, MANAGERS, message="Only owners and admins can manage rewards")
        reward_id = self._rewards.create(
            org_id=int(org_id),
            title=require_non_empty(title, "Title"),
            description=optional_text(description),
            points_cost=_positive_cost(points_cost),
            stock=_normalize_stock(stock),
        )
        logger.info("Reward %s created in organization %s by user %s", reward_id, org_id, user_id)
        return reward_id

    def update_reward(
        self,
        reward_id: int,
        *,
        user_id: int,
        title=_UNSET,
        description=_UNSET,
        points_cost=_UNSET,
        stock=_UNSET,
    ) -> Reward:
        reward = self._get_reward(reward_id)
        self._policy.require_role(reward.org_id, user_id, MANAGERS, message="Only owners and admins can manage rewards")

        self._rewards.update(
            reward.reward_id,
            title=require_non_empty(reward.title if title is _UNSET else title, "Title"),
            description=optional_text(reward.description if description is _UNSET else description),
            points_cost=_positive_cost(reward.points_cost if points_cost is _UNSET else points_cost),
            stock=reward.stock if stock is _UNSET else _normalize_stock(stock),
        )
        return self._get_reward(reward.reward_id)

    def toggle_active(self, reward_id: int, *, user_id: int) -> bool:
        reward = self._get_reward(reward_id)
        self._policy.require_role(reward.org_id, user_id, MANAGERS, message="Only owners and admins can manage rewards")
        self._rewards.set_active(reward.reward_id, active=not reward.active)
        logger.info("Reward %s active=%s (user %s)", reward_id, not reward.active, user_id)
        return not reward.active

    def delete_reward(self, reward_id: int, *, user_id: int) -> None:
        reward = self._get_reward(reward_id)
        self._policy.require_role(reward.org_id, user_id, MANAGERS, message="Only owners and admins can manage rewards")
        if not self._rewards.delete(reward.reward_id):
            raise ValidationError("This reward has been redeemed; deactivate it instead")
        logger.info("Reward %s deleted by user %s", reward_id, user_id)

    def list_rewards(self, org_id: int, *, user_id: int) -> Sequence[Reward]:
        """Managers see every reward; other members only the active ones."""

        role = self._policy.require_member(org_id, user_id)
        return self._rewards.list_for_org(int(org_id), active_only=role not in MANAGERS)

    # -------- Redemption --------
    def redeem(self, reward_id: int, *, user_id: int, now: Optional[datetime] = None) -> int:
        now = now or now_local()
        reward = self._get_reward(reward_id)
        self._policy.require_member(reward.org_id, user_id)

        if not reward.active:
            raise ValidationError("This reward is not available")
        if self._ledger.balance(reward.org_id, int(user_id)) < reward.points_cost:
            raise ValidationError("You don't have enough points to redeem this reward")
        if not reward.in_stock:
            raise ValidationError("This reward is out of stock")

        redemption_id = self._rewards.redeem(reward, user_id=int(user_id), at=now)
        if redemption_id is None:
            # Lost a race with another redemption between the checks and the write.
            raise ValidationError("This reward is no longer available for you")

        logger.info(
            "User %s redeemed reward %s for %s points (redemption %s)",
            user_id,
            reward.reward_id,
            reward.points_cost,
            redemption_id,
        )
        return redemption_id

    def list_my_redemptions(self, org_id: int, *, user_id: int) -> Sequence[Redemption]:
        self._policy.require_member(org_id, user_id)
        return self._rewards.list_redemptions(int(org_id), user_id=int(user_id))

    def list_redemptions(
        self, org_id: int, *, user_id: int, status: Optional[RedemptionStatus] = None
    ) -> Sequence[Redemption]:
        self._policy.require_role(org_id, user_id, MANAGERS, message="Only owners and admins can view redemptions")
        return self._rewards.list_redemptions(int(org_id), status=status)

    def decide_redemption(
        self,
        redemption_id: int,
        *,
        user_id: int,
        status: RedemptionStatus,
        now: Optional[datetime] = None,
    ) -> None:
        now = now or now_local()
        if status not in {RedemptionStatus.FULFILLED, RedemptionStatus.REJECTED}:
            raise ValidationError("A redemption can only be fulfilled or rejected")

        redemption = self._rewards.get_redemption(int(redemption_id))
        if not redemption:
            raise NotFoundError("Redemption not found")
        self._policy.require_role(
            redemption.org_id, user_id, MANAGERS, message="Only owners and admins can update redemptions"
        )
        if redemption.status != RedemptionStatus.PENDING:
            raise ValidationError("This redemption has already been processed")

        if not self._rewards.decide_redemption(redemption, status=status, decided_by=int(user_id), at=now):
            raise ValidationError("This redemption has already been processed")
        logger.info("Redemption %s marked %s by user %s", redemption_id, status.value, user_id)
