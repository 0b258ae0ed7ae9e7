from __future__ import annotations

from datetime import datetime
from typing import Optional

from ...core.enums import ArrivalStatus
from ..model import WorkHours
from .base import ArrivalStrategy, StatusDecision


class AbsentStrategy(ArrivalStrategy):
    """No clock-in, or a clock-in after the working day ended. Never overtime."""

    def decide_checkin(self, *, clock_in: Optional[datetime], hours: WorkHours) -> StatusDecision:
        return StatusDecision(status=ArrivalStatus.ABSENT)

    def decide_checkout(self, *, clock_out: Optional[datetime], hours: WorkHours, current: ArrivalStatus) -> StatusDecision:
        return StatusDecision(status=ArrivalStatus.ABSENT)
