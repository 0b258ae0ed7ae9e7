from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ...core.enums import ArrivalStatus
from ..model import WorkHours


@dataclass(frozen=True)
class StatusDecision:
    status: ArrivalStatus
    overtime: bool = False
    note: Optional[str] = None


class ArrivalStrategy(ABC):
    """Strategy Pattern: encapsulate how a check-in is classified."""

    @abstractmethod
    def decide_checkin(self, *, clock_in: datetime, hours: WorkHours) -> StatusDecision:
        raise NotImplementedError

    def decide_checkout(self, *, clock_out: Optional[datetime], hours: WorkHours, current: ArrivalStatus) -> StatusDecision:
        if clock_out is None:
            return StatusDecision(status=current)
        return StatusDecision(status=current, overtime=clock_out > hours.end_on(clock_out.date()))
