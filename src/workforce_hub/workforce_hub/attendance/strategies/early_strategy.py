from __future__ import annotations

from datetime import datetime

from ...core.enums import ArrivalStatus
from ..model import WorkHours
from .base import ArrivalStrategy, StatusDecision


class EarlyStrategy(ArrivalStrategy):
    """Clock-in at least `early_threshold_minutes` before work start."""

    def decide_checkin(self, *, clock_in: datetime, hours: WorkHours) -> StatusDecision:
        return StatusDecision(status=ArrivalStatus.EARLY)
