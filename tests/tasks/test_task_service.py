from datetime import datetime

import pytest

from src.workforce_hub.workforce_hub.core.enums import (
    MemberRole,
    NotificationType,
    PointsReason,
    TaskAction,
    TaskStatus,
    TaskType,
)
from src.workforce_hub.workforce_hub.core.exceptions import AuthorizationError, NotFoundError, ValidationError

DUE = "2026-03-10T17:00"
NOW = datetime(2026, 3, 2, 10, 0)


@pytest.fixture
def project_id(container, org):
    return container.project_service.create_project(org.org_id, user_id=org.owner, name="Website")


def _task(container, org, project_id, **kwargs):
    fields = dict(user_id=org.supervisor, title="Build page", due_date=DUE, assignee_id=org.employee)
    fields.update(kwargs)
    return container.task_service.create_task(project_id, **fields)


def test_create_task_notifies_assignee(container, db, org, project_id):
    task = _task(container, org, project_id, completion_points=10, priority="high")

    assert task.status == TaskStatus.TODO
    assert task.due_date == datetime(2026, 3, 10, 17, 0)
    notes = [n for n in db.notifications.values() if n.user_id == org.employee]
    assert len(notes) == 1
    assert notes[0].type == NotificationType.TASK_ASSIGNED
    assert notes[0].payload["task_id"] == task.task_id
    assert notes[0].payload["assigner_name"] == "Sam Supervisor"


def test_task_must_go_to_employee(container, org, project_id):
    with pytest.raises(ValidationError, match="must be an employee"):
        _task(container, org, project_id, assignee_id=org.supervisor)
    with pytest.raises(ValidationError, match="Please assign the task"):
        _task(container, org, project_id, assignee_id=None)


def test_assignment_goes_to_supervisor_from_managers(container, org, project_id):
    with pytest.raises(AuthorizationError):
        _task(container, org, project_id, task_type=TaskType.ASSIGNMENT, assignee_id=org.supervisor)

    assignment = _task(
        container, org, project_id, user_id=org.admin, task_type=TaskType.ASSIGNMENT, assignee_id=org.supervisor
    )
    assert assignment.task_type == TaskType.ASSIGNMENT


def test_employees_cannot_create_tasks(container, org, project_id):
    with pytest.raises(AuthorizationError):
        _task(container, org, project_id, user_id=org.employee)


def test_due_date_required_and_points_bounded(container, org, project_id):
    with pytest.raises(ValidationError, match="Due date is required"):
        _task(container, org, project_id, due_date="")
    with pytest.raises(ValidationError, match="Completion points"):
        _task(container, org, project_id, completion_points=101)


def test_start_pause_complete_awards_points_once(container, db, org, project_id):
    task = _task(container, org, project_id, completion_points=15)
    svc = container.task_service

    svc.perform_action(task.task_id, user_id=org.employee, action=TaskAction.START, now=NOW)
    svc.perform_action(task.task_id, user_id=org.employee, action=TaskAction.PAUSE, now=NOW)
    result = svc.perform_action(task.task_id, user_id=org.employee, action="complete", now=NOW)

    assert result.task.status == TaskStatus.DONE
    assert result.points_awarded == 15
    assert container.points_service.balance(org.org_id, user_id=org.employee) == 15
    assert db.ledger[-1].reason_code == PointsReason.TASK_COMPLETION
    assert [log.action for log in svc.list_time_logs(task.task_id, user_id=org.employee)] == [
        TaskAction.START,
        TaskAction.PAUSE,
        TaskAction.COMPLETE,
    ]

    with pytest.raises(ValidationError, match="already completed"):
        svc.perform_action(task.task_id, user_id=org.employee, action="complete", now=NOW)
    assert container.points_service.balance(org.org_id, user_id=org.employee) == 15


def test_zero_point_task_leaves_no_ledger_row(container, db, org, project_id):
    task = _task(container, org, project_id)

    result = container.task_service.perform_action(task.task_id, user_id=org.employee, action="complete", now=NOW)

    assert result.points_awarded == 0
    assert db.ledger == []


def test_pause_requires_in_progress(container, org, project_id):
    task = _task(container, org, project_id)

    with pytest.raises(ValidationError, match="Cannot pause a task that is todo"):
        container.task_service.perform_action(task.task_id, user_id=org.employee, action="pause", now=NOW)


def test_only_assignee_acts(container, org, project_id):
    task = _task(container, org, project_id)

    with pytest.raises(AuthorizationError, match="Only the assignee"):
        container.task_service.perform_action(task.task_id, user_id=org.employee2, action="start", now=NOW)
    with pytest.raises(ValidationError, match="Action is not valid"):
        container.task_service.perform_action(task.task_id, user_id=org.employee, action="dance", now=NOW)


def test_assignment_points_use_assignment_reason(container, db, org, project_id):
    assignment = _task(
        container,
        org,
        project_id,
        user_id=org.owner,
        task_type=TaskType.ASSIGNMENT,
        assignee_id=org.supervisor,
        completion_points=40,
    )
    svc = container.task_service

    submitted = svc.submit_assignment(assignment.task_id, user_id=org.supervisor, now=NOW)
    assert submitted.status == TaskStatus.SUBMITTED

    svc.perform_action(assignment.task_id, user_id=org.supervisor, action="complete", now=NOW)
    assert db.ledger[-1].reason_code == PointsReason.ASSIGNMENT_COMPLETION
    assert db.ledger[-1].task_id == assignment.task_id


def test_submit_only_for_assignments(container, org, project_id):
    task = _task(container, org, project_id)

    with pytest.raises(ValidationError, match="Only assignments"):
        container.task_service.submit_assignment(task.task_id, user_id=org.employee, now=NOW)


def test_set_status_manual(container, org, project_id):
    task = _task(container, org, project_id)
    svc = container.task_service

    blocked = svc.set_status(task.task_id, user_id=org.supervisor, status="blocked", now=NOW)
    assert blocked.status == TaskStatus.BLOCKED

    with pytest.raises(ValidationError, match="cannot be set to done"):
        svc.set_status(task.task_id, user_id=org.supervisor, status="done", now=NOW)
    with pytest.raises(AuthorizationError):
        svc.set_status(task.task_id, user_id=org.employee, status="todo", now=NOW)

    restarted = svc.perform_action(task.task_id, user_id=org.employee, action="start", now=NOW)
    assert restarted.task.status == TaskStatus.IN_PROGRESS


def test_reassignment_notifies_new_assignee(container, db, org, project_id):
    task = _task(container, org, project_id)

    container.task_service.update_task(task.task_id, user_id=org.supervisor, assignee_id=org.employee2)

    note = [n for n in db.notifications.values() if n.user_id == org.employee2][0]
    assert "reassigned" in note.message


def test_only_creator_or_managers_edit(container, org, project_id):
    task = _task(container, org, project_id)
    other_sup = container.auth_service.register(email="sup2@acme.test", full_name="Sid", password="secret123")
    container.members_repo.add_member(org.org_id, other_sup, role=MemberRole.SUPERVISOR)

    with pytest.raises(AuthorizationError):
        container.task_service.update_task(task.task_id, user_id=other_sup, title="Mine now")

    updated = container.task_service.update_task(task.task_id, user_id=org.admin, title="Build landing page")
    assert updated.title == "Build landing page"


def test_employee_sees_only_own_tasks(container, org, project_id):
    mine = _task(container, org, project_id)
    theirs = _task(container, org, project_id, assignee_id=org.employee2)
    svc = container.task_service

    rows = svc.list_tasks(project_id, user_id=org.employee, now=NOW)
    assert [r.task.task_id for r in rows] == [mine.task_id]
    assert len(svc.list_tasks(project_id, user_id=org.supervisor, now=NOW)) == 2

    with pytest.raises(NotFoundError):
        svc.get_task(theirs.task_id, user_id=org.employee, now=NOW)


def test_list_my_tasks_flags_overdue(container, org, project_id):
    _task(container, org, project_id, due_date="2026-03-01T09:00")

    rows = container.task_service.list_my_tasks(org.org_id, user_id=org.employee, now=NOW)

    assert rows[0].overdue is True


def test_delete_task_by_leads(container, org, project_id):
    task = _task(container, org, project_id)

    with pytest.raises(AuthorizationError):
        container.task_service.delete_task(task.task_id, user_id=org.employee)

    container.task_service.delete_task(task.task_id, user_id=org.supervisor)
    with pytest.raises(NotFoundError):
        container.task_service.get_task(task.task_id, user_id=org.owner)


def test_failed_points_write_leaves_task_open(container, db, org, project_id, monkeypatch):
    task = _task(container, org, project_id, completion_points=20)
    svc = container.task_service

    def ledger_down(**kwargs):
        raise RuntimeError("ledger unavailable")

    with monkeypatch.context() as m:
        m.setattr(db, "append_ledger", ledger_down)
        with pytest.raises(RuntimeError):
            svc.perform_action(task.task_id, user_id=org.employee, action="complete", now=NOW)

    assert db.tasks[task.task_id].status == TaskStatus.TODO
    assert svc.list_time_logs(task.task_id, user_id=org.employee) == []
    assert db.ledger == []

    result = svc.perform_action(task.task_id, user_id=org.employee, action="complete", now=NOW)
    assert result.task.status == TaskStatus.DONE
    assert [(e.delta, e.task_id) for e in db.ledger] == [(20, task.task_id)]


def test_manual_status_cannot_reopen_completed_task(container, db, org, project_id, monkeypatch):
    task = _task(container, org, project_id, completion_points=5)
    svc = container.task_service
    stale = db.tasks[task.task_id]
    svc.perform_action(task.task_id, user_id=org.employee, action="complete", now=NOW)

    # the lead read the task before the completion was written
    monkeypatch.setattr(container.tasks_repo, "get_by_id", lambda task_id: stale)
    with pytest.raises(ValidationError, match="already completed"):
        svc.set_status(task.task_id, user_id=org.supervisor, status="todo", now=NOW)

    assert db.tasks[task.task_id].status == TaskStatus.DONE
    assert container.tasks_repo.set_status(task.task_id, status=TaskStatus.TODO, at=NOW) is False


def test_deleting_completed_task_keeps_ledger_entry(container, org, project_id):
    task = _task(container, org, project_id, completion_points=10)
    container.task_service.perform_action(task.task_id, user_id=org.employee, action="complete", now=NOW)

    container.task_service.delete_task(task.task_id, user_id=org.supervisor)

    history = container.points_service.history(org.org_id, user_id=org.employee)
    assert [(e.task_id, e.delta, e.reason_code) for e in history] == [(task.task_id, 10, PointsReason.TASK_COMPLETION)]
    assert container.points_service.balance(org.org_id, user_id=org.employee) == 10
