from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import Project


class ProjectRepository(Protocol):
    def create(
        self,
        *,
        org_id: int,
        name: str,
        description: Optional[str],
        due_date: Optional[date],
        current_phase: Optional[str],
        owner_id: int,
    ) -> int:
        raise NotImplementedError

    def get_by_id(self, project_id: int) -> Optional[Project]:
        raise NotImplementedError

    def find_by_name(self, org_id: int, name: str) -> Optional[Project]:
        """Case-insensitive lookup within one organization."""

        raise NotImplementedError

    def list_for_org(self, org_id: int) -> Sequence[Project]:
        raise NotImplementedError

    def update(self, project_id: int, *, name: str, description: Optional[str], due_date: Optional[date]) -> bool:
        raise NotImplementedError

    def update_phase(self, project_id: int, *, phase: str) -> bool:
        raise NotImplementedError

    def delete(self, project_id: int) -> bool:
        raise NotImplementedError
