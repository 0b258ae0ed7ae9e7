from __future__ import annotations

import logging
from collections import Counter
from datetime import date, datetime
from typing import Optional, Sequence

from ..common.datetime_utils import now_local, parse_iso_date
from ..common.validators import optional_text, require_non_empty
from ..core.constants import DEFAULT_PROJECT_PHASES
from ..core.enums import MemberRole
from ..core.exceptions import NotFoundError, ValidationError
from ..organizations.policy import MANAGERS, AccessPolicy
from ..tasks.repository import TaskRepository
from .model import DUPLICATE_NAME_MESSAGE, Project, ProjectOverview
from .repository import ProjectRepository

logger = logging.getLogger(__name__)

_UNSET = object()


def _optional_date(value) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, date):
        return value
    return parse_iso_date(str(value))


class ProjectService:
    def __init__(self, projects: ProjectRepository, tasks: TaskRepository, policy: AccessPolicy):
        self._projects = projects
        self._tasks = tasks
        self._policy = policy

    def _get(self, project_id: int) -> Project:
        project = self._projects.get_by_id(int(project_id))
        if not project:
            raise NotFoundError("Project not found")
        return project

    def _check_unique_name(self, org_id: int, name: str, *, exclude_id: Optional[int] = None) -> None:
        existing = self._projects.find_by_name(int(org_id), name)
        if existing and existing.project_id != exclude_id:
            raise ValidationError(DUPLICATE_NAME_MESSAGE)

    def create_project(
        self,
        org_id: int,
        *,
        user_id: int,
        name: str,
        description: Optional[str] = None,
        due_date=None,
    ) -> int:
        self._policy.require_role(org_id, user_id, MANAGERS, message="Only owners and admins can create projects")
        name = require_non_empty(name, "Project name")
        self._check_unique_name(org_id, name)

        project_id = self._projects.create(
            org_id=int(org_id),
            name=name,
            description=optional_text(description),
            due_date=_optional_date(due_date),
            current_phase=DEFAULT_PROJECT_PHASES[0],
            owner_id=int(user_id),
        )
        logger.info("Project %s created in organization %s by user %s", project_id, org_id, user_id)
        return project_id

    def update_project(
        self,
        project_id: int,
        *,
        user_id: int,
        name=_UNSET,
        description=_UNSET,
        due_date=_UNSET,
    ) -> Project:
        project = self._get(project_id)
        self._policy.require_role(project.org_id, user_id, MANAGERS, message="Only owners and admins can edit projects")

        new_name = require_non_empty(project.name if name is _UNSET else name, "Project name")
        if new_name.lower() != project.name.lower():
            self._check_unique_name(project.org_id, new_name, exclude_id=project.project_id)

        self._projects.update(
            project.project_id,
            name=new_name,
            description=optional_text(project.description if description is _UNSET else description),
            due_date=project.due_date if due_date is _UNSET else _optional_date(due_date),
        )
        return self._get(project.project_id)

    def update_phase(self, project_id: int, *, user_id: int, phase: str) -> None:
        project = self._get(project_id)
        self._policy.require_role(project.org_id, user_id, MANAGERS, message="Only owners and admins can change the phase")
        self._projects.update_phase(project.project_id, phase=require_non_empty(phase, "Phase"))

    def delete_project(self, project_id: int, *, user_id: int) -> None:
        project = self._get(project_id)
        self._policy.require_role(
            project.org_id, user_id, {MemberRole.OWNER}, message="Only the owner can delete projects"
        )
        self._projects.delete(project.project_id)
        logger.info("Project %s deleted by user %s", project_id, user_id)

    def list_projects(self, org_id: int, *, user_id: int) -> Sequence[Project]:
        self._policy.require_member(org_id, user_id)
        return self._projects.list_for_org(int(org_id))

    def get_project(self, project_id: int, *, user_id: int) -> Project:
        project = self._get(project_id)
        self._policy.require_member(project.org_id, user_id)
        return project

    def get_overview(self, project_id: int, *, user_id: int, now: Optional[datetime] = None) -> ProjectOverview:
        now = now or now_local()
        project = self.get_project(project_id, user_id=user_id)
        tasks = self._tasks.list_for_project(project.project_id)
        counts = Counter(t.status.value for t in tasks)
        return ProjectOverview(
            project=project,
            total_tasks=len(tasks),
            by_status=dict(counts),
            overdue_tasks=sum(1 for t in tasks if t.is_overdue(now)),
        )

    @staticmethod
    def available_phases(project: Project) -> list[str]:
        phases = list(DEFAULT_PROJECT_PHASES)
        if project.current_phase and project.current_phase not in phases:
            phases.append(project.current_phase)
        return phases
