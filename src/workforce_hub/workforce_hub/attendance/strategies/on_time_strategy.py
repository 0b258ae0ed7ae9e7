from __future__ import annotations

from datetime import datetime

from ...core.enums import ArrivalStatus
from ..model import WorkHours
from .base import ArrivalStrategy, StatusDecision


class OnTimeStrategy(ArrivalStrategy):
    def decide_checkin(self, *, clock_in: datetime, hours: WorkHours) -> StatusDecision:
        return StatusDecision(status=ArrivalStatus.ON_TIME)
