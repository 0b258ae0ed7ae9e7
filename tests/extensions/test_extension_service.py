from datetime import datetime

import pytest

from src.workforce_hub.workforce_hub.core.enums import NotificationType, RequestStatus
from src.workforce_hub.workforce_hub.core.exceptions import AuthorizationError, ValidationError

NOW = datetime(2026, 3, 2, 10, 0)


@pytest.fixture
def task(container, org):
    project_id = container.project_service.create_project(org.org_id, user_id=org.owner, name="Website")
    return container.task_service.create_task(
        project_id, user_id=org.supervisor, title="Build page", due_date="2026-03-05T17:00", assignee_id=org.employee
    )


def _request(container, org, task, **kwargs):
    fields = dict(user_id=org.employee, requested_due_at="2026-03-08T17:00", reason="Waiting on copy")
    fields.update(kwargs)
    return container.extension_service.create_request(task.task_id, **fields)


def test_request_notifies_managers(container, db, org, task):
    req = _request(container, org, task)

    assert req.status == RequestStatus.PENDING
    recipients = {
        n.user_id for n in db.notifications.values() if n.type == NotificationType.EXTENSION_REQUESTED
    }
    assert recipients == {org.owner, org.admin}


def test_only_assignee_can_request(container, org, task):
    with pytest.raises(AuthorizationError, match="Only the assignee"):
        _request(container, org, task, user_id=org.employee2)


def test_request_validation(container, org, task):
    with pytest.raises(ValidationError, match="select a new due date"):
        _request(container, org, task, requested_due_at="")
    with pytest.raises(ValidationError, match="Reason is required"):
        _request(container, org, task, reason=" ")
    with pytest.raises(ValidationError, match="later than the current due date"):
        _request(container, org, task, requested_due_at="2026-03-05T17:00")


def test_one_pending_request_per_task(container, org, task):
    _request(container, org, task)

    with pytest.raises(ValidationError, match="already a pending"):
        _request(container, org, task, requested_due_at="2026-03-09T17:00")


def test_store_keeps_one_pending_request_when_lookup_misses(container, db, org, task, monkeypatch):
    _request(container, org, task)

    # a concurrent request the pending lookup has not seen yet
    monkeypatch.setattr(container.extensions_repo, "has_pending_for_task", lambda task_id: False)
    with pytest.raises(ValidationError, match="already a pending"):
        _request(container, org, task, requested_due_at="2026-03-09T17:00")

    assert len([r for r in db.extensions.values() if r.status == RequestStatus.PENDING]) == 1


def test_completed_task_cannot_be_extended(container, org, task):
    container.task_service.perform_action(task.task_id, user_id=org.employee, action="complete", now=NOW)

    with pytest.raises(ValidationError, match="already completed"):
        _request(container, org, task)


def test_edit_pending_request(container, org, task):
    req = _request(container, org, task)

    updated = container.extension_service.update_request(req.request_id, user_id=org.employee, reason="Copy is late")

    assert updated.reason == "Copy is late"
    assert updated.requested_due_at == datetime(2026, 3, 8, 17, 0)
    with pytest.raises(AuthorizationError):
        container.extension_service.update_request(req.request_id, user_id=org.employee2, reason="Nope")


def test_approve_moves_due_date_and_notifies(container, db, org, task):
    req = _request(container, org, task)

    container.extension_service.approve(req.request_id, user_id=org.admin, note="OK", now=NOW)

    assert container.tasks_repo.get_by_id(task.task_id).due_date == datetime(2026, 3, 8, 17, 0)
    decided = container.extensions_repo.get_by_id(req.request_id)
    assert decided.status == RequestStatus.APPROVED
    assert decided.decision_note == "OK"
    approved = [n for n in db.notifications.values() if n.type == NotificationType.EXTENSION_APPROVED]
    assert [n.user_id for n in approved] == [org.employee]

    with pytest.raises(ValidationError, match="already been processed"):
        container.extension_service.reject(req.request_id, user_id=org.owner, now=NOW)
    with pytest.raises(ValidationError, match="Only pending requests"):
        container.extension_service.update_request(req.request_id, user_id=org.employee, reason="again")


def test_reject_keeps_due_date(container, db, org, task):
    req = _request(container, org, task)

    container.extension_service.reject(req.request_id, user_id=org.owner, now=NOW)

    assert container.tasks_repo.get_by_id(task.task_id).due_date == datetime(2026, 3, 5, 17, 0)
    assert any(n.type == NotificationType.EXTENSION_REJECTED for n in db.notifications.values())


def test_supervisor_cannot_decide(container, org, task):
    req = _request(container, org, task)

    with pytest.raises(AuthorizationError):
        container.extension_service.approve(req.request_id, user_id=org.supervisor, now=NOW)


def test_review_lists(container, org, task):
    _request(container, org, task)
    svc = container.extension_service

    pending = svc.list_org_requests(org.org_id, user_id=org.admin, status=RequestStatus.PENDING)
    mine = svc.list_my_requests(user_id=org.employee)

    assert [v.task_title for v in pending] == ["Build page"]
    assert mine[0].requester_name == "Erin Employee"
    with pytest.raises(AuthorizationError):
        svc.list_org_requests(org.org_id, user_id=org.employee)
