from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from .model import WorkHours
from .strategies.absent_strategy import AbsentStrategy
from .strategies.base import ArrivalStrategy, StatusDecision
from .strategies.early_strategy import EarlyStrategy
from .strategies.late_strategy import LateStrategy
from .strategies.on_time_strategy import OnTimeStrategy


@dataclass
class ArrivalStrategyFactory:
    """Factory Pattern: choose the arrival strategy from the organization's rules."""

    def for_checkin(self, *, clock_in: Optional[datetime], hours: WorkHours) -> ArrivalStrategy:
        if clock_in is None:
            return AbsentStrategy()

        if clock_in > hours.end_on(clock_in.date()):
            return AbsentStrategy()

        diff_minutes = (clock_in - hours.start_on(clock_in.date())).total_seconds() / 60
        if diff_minutes <= -hours.early_threshold_minutes:
            return EarlyStrategy()
        if diff_minutes <= hours.late_threshold_minutes:
            return OnTimeStrategy()
        return LateStrategy()

    def classify(
        self, *, clock_in: Optional[datetime], clock_out: Optional[datetime], hours: WorkHours
    ) -> StatusDecision:
        strategy = self.for_checkin(clock_in=clock_in, hours=hours)
        arrival = strategy.decide_checkin(clock_in=clock_in, hours=hours)
        departure = strategy.decide_checkout(clock_out=clock_out, hours=hours, current=arrival.status)
        return StatusDecision(status=departure.status, overtime=departure.overtime, note=arrival.note)
