from __future__ import annotations

from datetime import datetime

from ...core.enums import ArrivalStatus
from ..model import WorkHours
from .base import ArrivalStrategy, StatusDecision


class LateStrategy(ArrivalStrategy):
    """Late clock-in (still before the end of the working day)."""

    def decide_checkin(self, *, clock_in: datetime, hours: WorkHours) -> StatusDecision:
        minutes = int((clock_in - hours.start_on(clock_in.date())).total_seconds() // 60)
        return StatusDecision(status=ArrivalStatus.LATE, note=f"{minutes} min late")
