from datetime import datetime

import pytest

from src.workforce_hub.workforce_hub.core.enums import NotificationType
from src.workforce_hub.workforce_hub.core.exceptions import NotFoundError

NOW = datetime(2026, 3, 2, 8, 0)


@pytest.fixture
def project_id(container, org):
    return container.project_service.create_project(org.org_id, user_id=org.owner, name="Website")


def _task(container, org, project_id, due_date, assignee=None):
    return container.task_service.create_task(
        project_id,
        user_id=org.supervisor,
        title="Ship it",
        due_date=due_date,
        assignee_id=assignee or org.employee,
    )


def test_unread_count_and_mark_read(container, org, project_id):
    _task(container, org, project_id, "2026-03-09T17:00")
    _task(container, org, project_id, "2026-03-10T17:00")
    svc = container.notification_service

    assert svc.unread_count(org.employee) == 2
    first = svc.list_for_user(org.employee)[0]
    svc.mark_read(first.notification_id, user_id=org.employee, now=NOW)

    assert svc.unread_count(org.employee) == 1
    assert len(svc.list_for_user(org.employee, unread_only=True)) == 1
    assert svc.mark_all_read(org.employee, now=NOW) == 1
    assert svc.unread_count(org.employee) == 0


def test_cannot_read_someone_elses_notification(container, org, project_id):
    _task(container, org, project_id, "2026-03-09T17:00")
    note = container.notification_service.list_for_user(org.employee)[0]

    with pytest.raises(NotFoundError):
        container.notification_service.mark_read(note.notification_id, user_id=org.employee2, now=NOW)


def test_due_reminders_sent_once_per_day(container, db, org, project_id):
    soon = _task(container, org, project_id, "2026-03-02T20:00")
    _task(container, org, project_id, "2026-03-05T20:00")
    job = container.due_reminder_job

    assert job.send_due_reminders(now=NOW) == 1
    assert job.send_due_reminders(now=datetime(2026, 3, 2, 9, 0)) == 0

    reminders = [n for n in db.notifications.values() if n.type == NotificationType.TASK_DUE_REMINDER]
    assert len(reminders) == 1
    assert reminders[0].payload["task_id"] == soon.task_id
    assert reminders[0].payload["hours_left"] == 12
    assert reminders[0].message == '"Ship it" is due in 12h'


def test_due_reminders_skip_completed_tasks(container, org, project_id):
    task = _task(container, org, project_id, "2026-03-02T20:00")
    container.task_service.perform_action(task.task_id, user_id=org.employee, action="complete", now=NOW)

    assert container.due_reminder_job.send_due_reminders(now=NOW) == 0


def test_due_reminders_window_override(container, org, project_id):
    _task(container, org, project_id, "2026-03-05T20:00")

    assert container.due_reminder_job.send_due_reminders(now=NOW, within_hours=96) == 1
