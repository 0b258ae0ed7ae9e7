from __future__ import annotations

from flask import Flask

from ..common.http import current_user_id, json_body, login_required, ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/orgs/<int:org_id>/teams", methods=["GET"], endpoint="teams_list")
    @login_required
    def teams_list(org_id: int):
        return ok(container.team_service.list_teams(org_id, user_id=current_user_id()))

    @app.route("/api/orgs/<int:org_id>/teams", methods=["POST"], endpoint="teams_create")
    @login_required
    def teams_create(org_id: int):
        body = json_body()
        team = container.team_service.create_team(
            org_id,
            user_id=current_user_id(),
            name=body.get("name", ""),
            supervisor_id=body.get("supervisor_id"),
            description=body.get("description"),
        )
        return ok(team, message="Team created successfully", code=201)

    @app.route("/api/teams/<int:team_id>", methods=["PATCH"], endpoint="teams_update")
    @login_required
    def teams_update(team_id: int):
        body = json_body()
        team = container.team_service.update_team(
            team_id,
            user_id=current_user_id(),
            **{k: body[k] for k in ("name", "description", "supervisor_id") if k in body},
        )
        return ok(team, message="Team updated successfully")

    @app.route("/api/teams/<int:team_id>", methods=["DELETE"], endpoint="teams_delete")
    @login_required
    def teams_delete(team_id: int):
        container.team_service.delete_team(team_id, user_id=current_user_id())
        return ok(message="Team deleted successfully")

    @app.route("/api/teams/<int:team_id>/members", methods=["POST"], endpoint="teams_add_member")
    @login_required
    def teams_add_member(team_id: int):
        container.team_service.add_member(
            team_id, user_id=current_user_id(), member_id=json_body().get("user_id", 0)
        )
        return ok(message="Member added to team", code=201)

    @app.route("/api/teams/<int:team_id>/members/<int:member_id>", methods=["DELETE"], endpoint="teams_remove_member")
    @login_required
    def teams_remove_member(team_id: int, member_id: int):
        container.team_service.remove_member(team_id, user_id=current_user_id(), member_id=member_id)
        return ok(message="Member removed from team")
