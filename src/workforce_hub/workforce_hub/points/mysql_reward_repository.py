from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import PointsReason, RedemptionStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Redemption, Reward
from .repository import RewardRepository

_REWARD_COLUMNS = "reward_id, org_id, title, description, points_cost, stock, active, created_at"
_REDEMPTION_SELECT = """
    SELECT r.redemption_id, r.org_id, r.user_id, r.reward_id, r.points_spent, r.status,
           r.created_at, r.decided_by, r.decided_at, rw.title AS reward_title, u.full_name AS user_name
    FROM redemptions r
    JOIN rewards rw ON rw.reward_id = r.reward_id
    JOIN users u ON u.user_id = r.user_id
"""


def _to_reward(r: dict) -> Reward:
    stock = r.get("stock")
    return Reward(
        reward_id=int(r["reward_id"]),
        org_id=int(r["org_id"]),
        title=r["title"],
        description=r.get("description"),
        points_cost=int(r["points_cost"]),
        stock=int(stock) if stock is not None else None,
        active=bool(r["active"]),
        created_at=r["created_at"],
    )


def _to_redemption(r: dict) -> Redemption:
    return Redemption(
        redemption_id=int(r["redemption_id"]),
        org_id=int(r["org_id"]),
        user_id=int(r["user_id"]),
        reward_id=int(r["reward_id"]),
        points_spent=int(r["points_spent"]),
        status=RedemptionStatus(r["status"]),
        created_at=r["created_at"],
        reward_title=r.get("reward_title"),
        user_name=r.get("user_name"),
        decided_by=r.get("decided_by"),
        decided_at=r.get("decided_at"),
    )


class MySQLRewardRepository(RewardRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    # -------- Rewards --------
    def create(
        self,
        *,
        org_id: int,
        title: str,
        description: Optional[str],
        points_cost: int,
        stock: Optional[int],
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO rewards(org_id, title, description, points_cost, stock, active)
                VALUES(%s,%s,%s,%s,%s,1)
                """,
                (int(org_id), title, description, int(points_cost), stock),
            )
            return int(cur.lastrowid)

    def get_by_id(self, reward_id: int) -> Optional[Reward]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_REWARD_COLUMNS} FROM rewards WHERE reward_id=%s", (int(reward_id),))
            r = fetchone(cur)
            return _to_reward(r) if r else None

    def list_for_org(self, org_id: int, *, active_only: bool = False) -> Sequence[Reward]:
        where = "org_id=%s AND active=1" if active_only else "org_id=%s"
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_REWARD_COLUMNS} FROM rewards WHERE {where} ORDER BY points_cost ASC, title ASC",
                (int(org_id),),
            )
            return [_to_reward(r) for r in fetchall(cur)]

    def update(
        self,
        reward_id: int,
        *,
        title: str,
        description: Optional[str],
        points_cost: int,
        stock: Optional[int],
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE rewards SET title=%s, description=%s, points_cost=%s, stock=%s
                WHERE reward_id=%s
                """,
                (title, description, int(points_cost), stock, int(reward_id)),
            )
            return cur.rowcount > 0

    def set_active(self, reward_id: int, *, active: bool) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE rewards SET active=%s WHERE reward_id=%s", (1 if active else 0, int(reward_id)))
            return cur.rowcount > 0

    def delete(self, reward_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                DELETE FROM rewards
                WHERE reward_id=%s AND NOT EXISTS (SELECT 1 FROM redemptions WHERE reward_id=%s)
                """,
                (int(reward_id), int(reward_id)),
            )
            return cur.rowcount > 0

    # -------- Redemptions --------
    def redeem(self, reward: Reward, *, user_id: int, at: datetime) -> Optional[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            # Lock the user's ledger rows so two redemptions cannot spend the same points.
            cur.execute(
                "SELECT delta FROM points_ledger WHERE org_id=%s AND user_id=%s FOR UPDATE",
                (reward.org_id, int(user_id)),
            )
            balance = sum(int(r["delta"]) for r in fetchall(cur))
            if balance < reward.points_cost:
                return None

            cur.execute(
                """
                UPDATE rewards
                SET stock = CASE WHEN stock IS NULL THEN NULL ELSE stock - 1 END
                WHERE reward_id=%s AND active=1 AND (stock IS NULL OR stock > 0)
                """,
                (reward.reward_id,),
            )
            if cur.rowcount != 1:
                return None

            cur.execute(
                """
                INSERT INTO points_ledger(org_id, user_id, delta, reason_code, task_id, created_at)
                VALUES(%s,%s,%s,%s,NULL,%s)
                """,
                (reward.org_id, int(user_id), -reward.points_cost, PointsReason.REWARD_REDEMPTION.value, at),
            )
            cur.execute(
                """
                INSERT INTO redemptions(org_id, user_id, reward_id, points_spent, status, created_at)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (
                    reward.org_id,
                    int(user_id),
                    reward.reward_id,
                    reward.points_cost,
                    RedemptionStatus.PENDING.value,
                    at,
                ),
            )
            return int(cur.lastrowid)

    def get_redemption(self, redemption_id: int) -> Optional[Redemption]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_REDEMPTION_SELECT} WHERE r.redemption_id=%s", (int(redemption_id),))
            r = fetchone(cur)
            return _to_redemption(r) if r else None

    def list_redemptions(
        self,
        org_id: int,
        *,
        user_id: Optional[int] = None,
        status: Optional[RedemptionStatus] = None,
        limit: int = 200,
    ) -> Sequence[Redemption]:
        clauses = ["r.org_id=%s"]
        params: list[object] = [int(org_id)]
        if user_id is not None:
            clauses.append("r.user_id=%s")
            params.append(int(user_id))
        if status is not None:
            clauses.append("r.status=%s")
            params.append(status.value)
        params.append(int(limit))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                {_REDEMPTION_SELECT}
                WHERE {" AND ".join(clauses)}
                ORDER BY r.created_at DESC, r.redemption_id DESC
                LIMIT %s
                """,
                tuple(params),
            )
            return [_to_redemption(r) for r in fetchall(cur)]

    def decide_redemption(
        self,
        redemption: Redemption,
        *,
        status: RedemptionStatus,
        decided_by: int,
        at: datetime,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE redemptions SET status=%s, decided_by=%s, decided_at=%s
                WHERE redemption_id=%s AND status=%s
                """,
                (status.value, int(decided_by), at, redemption.redemption_id, RedemptionStatus.PENDING.value),
            )
            if cur.rowcount != 1:
                return False

            if status == RedemptionStatus.REJECTED:
                cur.execute(
                    """
                    INSERT INTO points_ledger(org_id, user_id, delta, reason_code, task_id, created_at)
                    VALUES(%s,%s,%s,%s,NULL,%s)
                    """,
                    (
                        redemption.org_id,
                        redemption.user_id,
                        redemption.points_spent,
                        PointsReason.REDEMPTION_REFUND.value,
                        at,
                    ),
                )
                cur.execute(
                    "UPDATE rewards SET stock = stock + 1 WHERE reward_id=%s AND stock IS NOT NULL",
                    (redemption.reward_id,),
                )
            return True
