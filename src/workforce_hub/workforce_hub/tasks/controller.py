from __future__ import annotations

from flask import Flask, request

from ..common.http import current_user_id, json_body, login_required, ok, to_json
from ..core.enums import TaskStatus, TaskType
from ..core.exceptions import ValidationError
from ..container import Container

_TASK_FIELDS = ("title", "description", "assignee_id", "priority", "due_date", "completion_points")


def _row_json(row) -> dict:
    data = to_json(row.task)
    data["overdue"] = row.overdue
    return data


def _parse_type(value, *, default=None):
    if not value:
        return default
    try:
        return TaskType(str(value).strip().lower())
    except ValueError:
        raise ValidationError("Task type is not valid")


def register(app: Flask, container: Container) -> None:
    @app.route("/api/projects/<int:project_id>/tasks", methods=["GET"], endpoint="tasks_list")
    @login_required
    def tasks_list(project_id: int):
        rows = container.task_service.list_tasks(
            project_id, user_id=current_user_id(), task_type=_parse_type(request.args.get("type"))
        )
        return ok([_row_json(r) for r in rows])

    @app.route("/api/projects/<int:project_id>/tasks", methods=["POST"], endpoint="tasks_create")
    @login_required
    def tasks_create(project_id: int):
        body = json_body()
        task = container.task_service.create_task(
            project_id,
            user_id=current_user_id(),
            title=body.get("title", ""),
            due_date=body.get("due_date"),
            assignee_id=body.get("assignee_id"),
            task_type=_parse_type(body.get("task_type"), default=TaskType.TASK),
            description=body.get("description"),
            priority=body.get("priority"),
            completion_points=body.get("completion_points"),
        )
        return ok(task, message=f"{task.task_type.value.capitalize()} created successfully", code=201)

    @app.route("/api/orgs/<int:org_id>/tasks/mine", methods=["GET"], endpoint="tasks_mine")
    @login_required
    def tasks_mine(org_id: int):
        rows = container.task_service.list_my_tasks(org_id, user_id=current_user_id())
        return ok([_row_json(r) for r in rows])

    @app.route("/api/tasks/<int:task_id>", methods=["GET"], endpoint="tasks_get")
    @login_required
    def tasks_get(task_id: int):
        return ok(_row_json(container.task_service.get_task(task_id, user_id=current_user_id())))

    @app.route("/api/tasks/<int:task_id>", methods=["PATCH"], endpoint="tasks_update")
    @login_required
    def tasks_update(task_id: int):
        body = json_body()
        fields = {k: body[k] for k in _TASK_FIELDS if k in body}
        task = container.task_service.update_task(task_id, user_id=current_user_id(), **fields)
        return ok(task, message="Task updated")

    @app.route("/api/tasks/<int:task_id>", methods=["DELETE"], endpoint="tasks_delete")
    @login_required
    def tasks_delete(task_id: int):
        container.task_service.delete_task(task_id, user_id=current_user_id())
        return ok(message="Task deleted")

    @app.route("/api/tasks/<int:task_id>/actions/<action>", methods=["POST"], endpoint="tasks_action")
    @login_required
    def tasks_action(task_id: int, action: str):
        result = container.task_service.perform_action(task_id, user_id=current_user_id(), action=action)
        message = "Task updated"
        if result.points_awarded:
            message = f"Task completed! You earned {result.points_awarded} points!"
        return ok({"task": result.task, "points_awarded": result.points_awarded}, message=message)

    @app.route("/api/tasks/<int:task_id>/submit", methods=["POST"], endpoint="tasks_submit")
    @login_required
    def tasks_submit(task_id: int):
        task = container.task_service.submit_assignment(task_id, user_id=current_user_id())
        return ok(task, message="Assignment submitted")

    @app.route("/api/tasks/<int:task_id>/status", methods=["POST"], endpoint="tasks_status")
    @login_required
    def tasks_status(task_id: int):
        try:
            status = TaskStatus(str(json_body().get("status", "")).strip().lower())
        except ValueError:
            raise ValidationError("Status is not valid")
        task = container.task_service.set_status(task_id, user_id=current_user_id(), status=status)
        return ok(task, message="Status updated")

    @app.route("/api/tasks/<int:task_id>/time-logs", methods=["GET"], endpoint="tasks_time_logs")
    @login_required
    def tasks_time_logs(task_id: int):
        return ok(container.task_service.list_time_logs(task_id, user_id=current_user_id()))
