from __future__ import annotations

from flask import Flask

from ..common.http import current_user_id, json_body, login_required, ok, to_json
from ..container import Container

_PROJECT_FIELDS = ("name", "description", "due_date")


def register(app: Flask, container: Container) -> None:
    @app.route("/api/orgs/<int:org_id>/projects", methods=["GET"], endpoint="projects_list")
    @login_required
    def projects_list(org_id: int):
        return ok(container.project_service.list_projects(org_id, user_id=current_user_id()))

    @app.route("/api/orgs/<int:org_id>/projects", methods=["POST"], endpoint="projects_create")
    @login_required
    def projects_create(org_id: int):
        body = json_body()
        project_id = container.project_service.create_project(
            org_id,
            user_id=current_user_id(),
            name=body.get("name", ""),
            description=body.get("description"),
            due_date=body.get("due_date"),
        )
        return ok({"project_id": project_id}, message="Project created successfully", code=201)

    @app.route("/api/projects/<int:project_id>", methods=["GET"], endpoint="projects_get")
    @login_required
    def projects_get(project_id: int):
        overview = container.project_service.get_overview(project_id, user_id=current_user_id())
        return ok(
            {
                "project": to_json(overview.project),
                "total_tasks": overview.total_tasks,
                "by_status": overview.by_status,
                "overdue_tasks": overview.overdue_tasks,
                "completion_percent": overview.completion_percent,
                "phases": container.project_service.available_phases(overview.project),
            }
        )

    @app.route("/api/projects/<int:project_id>", methods=["PATCH"], endpoint="projects_update")
    @login_required
    def projects_update(project_id: int):
        body = json_body()
        fields = {k: body[k] for k in _PROJECT_FIELDS if k in body}
        project = container.project_service.update_project(project_id, user_id=current_user_id(), **fields)
        return ok(project, message="Project updated successfully")

    @app.route("/api/projects/<int:project_id>/phase", methods=["POST"], endpoint="projects_phase")
    @login_required
    def projects_phase(project_id: int):
        container.project_service.update_phase(
            project_id, user_id=current_user_id(), phase=json_body().get("phase", "")
        )
        return ok(message="Project phase updated successfully")

    @app.route("/api/projects/<int:project_id>", methods=["DELETE"], endpoint="projects_delete")
    @login_required
    def projects_delete(project_id: int):
        container.project_service.delete_project(project_id, user_id=current_user_id())
        return ok(message="Project deleted")
