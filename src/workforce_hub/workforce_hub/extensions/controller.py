from __future__ import annotations

from flask import Flask, request

from ..common.http import current_user_id, json_body, login_required, ok, to_json
from ..core.enums import RequestStatus
from ..core.exceptions import ValidationError
from ..container import Container


def _parse_status(value):
    if not value or value == "all":
        return None
    try:
        return RequestStatus(str(value).strip().lower())
    except ValueError:
        raise ValidationError("Status is not valid")


def _view_json(view) -> dict:
    data = to_json(view.request)
    data["task_title"] = view.task_title
    data["current_due_date"] = to_json(view.current_due_date)
    data["requester_name"] = view.requester_name
    return data


def register(app: Flask, container: Container) -> None:
    @app.route("/api/tasks/<int:task_id>/extension-requests", methods=["POST"], endpoint="extensions_create")
    @login_required
    def extensions_create(task_id: int):
        body = json_body()
        req = container.extension_service.create_request(
            task_id,
            user_id=current_user_id(),
            requested_due_at=body.get("requested_due_at"),
            reason=body.get("reason", ""),
        )
        return ok(
            req,
            message="Your extension request has been sent to admins and owners for approval",
            code=201,
        )

    @app.route("/api/extension-requests/<int:request_id>", methods=["PATCH"], endpoint="extensions_update")
    @login_required
    def extensions_update(request_id: int):
        body = json_body()
        req = container.extension_service.update_request(
            request_id,
            user_id=current_user_id(),
            requested_due_at=body.get("requested_due_at"),
            reason=body.get("reason"),
        )
        return ok(req, message="Extension request updated")

    @app.route("/api/extension-requests/mine", methods=["GET"], endpoint="extensions_mine")
    @login_required
    def extensions_mine():
        views = container.extension_service.list_my_requests(
            user_id=current_user_id(), status=_parse_status(request.args.get("status"))
        )
        return ok([_view_json(v) for v in views])

    @app.route("/api/orgs/<int:org_id>/extension-requests", methods=["GET"], endpoint="extensions_org")
    @login_required
    def extensions_org(org_id: int):
        views = container.extension_service.list_org_requests(
            org_id, user_id=current_user_id(), status=_parse_status(request.args.get("status", "pending"))
        )
        return ok([_view_json(v) for v in views])

    @app.route("/api/extension-requests/<int:request_id>/approve", methods=["POST"], endpoint="extensions_approve")
    @login_required
    def extensions_approve(request_id: int):
        container.extension_service.approve(request_id, user_id=current_user_id(), note=json_body().get("note", ""))
        return ok(message="Extension request approved")

    @app.route("/api/extension-requests/<int:request_id>/reject", methods=["POST"], endpoint="extensions_reject")
    @login_required
    def extensions_reject(request_id: int):
        container.extension_service.reject(request_id, user_id=current_user_id(), note=json_body().get("note", ""))
        return ok(message="Extension request rejected")
