from datetime import date, datetime

import pytest

from src.workforce_hub.workforce_hub.core.constants import DEFAULT_PROJECT_PHASES
from src.workforce_hub.workforce_hub.core.exceptions import AuthorizationError, ValidationError
from src.workforce_hub.workforce_hub.projects.service import DUPLICATE_NAME_MESSAGE


def test_create_project_starts_in_planning(container, org):
    project_id = container.project_service.create_project(
        org.org_id, user_id=org.admin, name="Website", due_date="2026-06-30"
    )

    project = container.project_service.get_project(project_id, user_id=org.employee)
    assert project.current_phase == "Planning Phase"
    assert project.due_date == date(2026, 6, 30)
    assert project.owner_id == org.admin


def test_project_names_are_unique_case_insensitively(container, org):
    svc = container.project_service
    svc.create_project(org.org_id, user_id=org.owner, name="Website")

    with pytest.raises(ValidationError, match=DUPLICATE_NAME_MESSAGE):
        svc.create_project(org.org_id, user_id=org.owner, name="website")


def test_rename_to_own_name_with_different_case(container, org):
    svc = container.project_service
    project_id = svc.create_project(org.org_id, user_id=org.owner, name="Website")

    project = svc.update_project(project_id, user_id=org.owner, name="WEBSITE")

    assert project.name == "WEBSITE"


def test_only_managers_create_projects(container, org):
    with pytest.raises(AuthorizationError):
        container.project_service.create_project(org.org_id, user_id=org.supervisor, name="Side quest")


def test_only_owner_deletes_projects(container, org):
    svc = container.project_service
    project_id = svc.create_project(org.org_id, user_id=org.owner, name="Website")

    with pytest.raises(AuthorizationError, match="Only the owner"):
        svc.delete_project(project_id, user_id=org.admin)

    svc.delete_project(project_id, user_id=org.owner)
    assert svc.list_projects(org.org_id, user_id=org.owner) == []


def test_custom_phase_is_offered_back(container, org):
    svc = container.project_service
    project_id = svc.create_project(org.org_id, user_id=org.owner, name="Website")
    svc.update_phase(project_id, user_id=org.admin, phase="Hypercare")

    project = svc.get_project(project_id, user_id=org.owner)

    assert svc.available_phases(project) == list(DEFAULT_PROJECT_PHASES) + ["Hypercare"]


def test_overview_counts_statuses_and_overdue(container, org):
    project_id = container.project_service.create_project(org.org_id, user_id=org.owner, name="Website")
    tasks = container.task_service
    done = tasks.create_task(
        project_id, user_id=org.supervisor, title="Wireframes", due_date="2026-03-01T12:00", assignee_id=org.employee
    )
    tasks.create_task(
        project_id, user_id=org.supervisor, title="Copy", due_date="2026-03-01T12:00", assignee_id=org.employee2
    )
    tasks.create_task(
        project_id, user_id=org.supervisor, title="Launch", due_date="2026-04-01T12:00", assignee_id=org.employee
    )
    tasks.perform_action(done.task_id, user_id=org.employee, action="complete", now=datetime(2026, 3, 1, 9, 0))

    overview = container.project_service.get_overview(project_id, user_id=org.owner, now=datetime(2026, 3, 2, 9, 0))

    assert overview.total_tasks == 3
    assert overview.by_status == {"done": 1, "todo": 2}
    assert overview.overdue_tasks == 1
    assert overview.completion_percent == 33


def test_store_rejects_duplicate_name_the_lookup_missed(container, org, monkeypatch):
    svc = container.project_service
    svc.create_project(org.org_id, user_id=org.owner, name="Website")

    # a concurrent create the name lookup has not seen yet
    monkeypatch.setattr(container.projects_repo, "find_by_name", lambda org_id, name: None)
    with pytest.raises(ValidationError, match=DUPLICATE_NAME_MESSAGE):
        svc.create_project(org.org_id, user_id=org.admin, name="WEBSITE")

    assert [p.name for p in container.projects_repo.list_for_org(org.org_id)] == ["Website"]
