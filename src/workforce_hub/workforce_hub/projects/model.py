from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

DUPLICATE_NAME_MESSAGE = "This project name has been used, try another one"


@dataclass(frozen=True)
class Project:
    project_id: int
    org_id: int
    name: str
    owner_id: int
    created_at: datetime
    description: Optional[str] = None
    due_date: Optional[date] = None
    current_phase: Optional[str] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class ProjectOverview:
    """Read-model: a project with its task progress."""

    project: Project
    total_tasks: int
    by_status: dict = field(default_factory=dict)
    overdue_tasks: int = 0

    @property
    def completion_percent(self) -> int:
        if not self.total_tasks:
            return 0
        return round(100 * self.by_status.get("done", 0) / self.total_tasks)
