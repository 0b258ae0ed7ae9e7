from __future__ import annotations

from flask import Flask

from ..common.http import current_user_id, json_body, login_required, ok
from ..core.enums import MemberRole
from ..core.exceptions import ValidationError
from ..container import Container
from .qr import render_qr_png

_SETTINGS_FIELDS = (
    "name",
    "description",
    "work_start_time",
    "work_end_time",
    "early_threshold_minutes",
    "late_threshold_minutes",
    "logo_url",
)


def _parse_role(value) -> MemberRole:
    try:
        return MemberRole(str(value or "").strip().lower())
    except ValueError:
        raise ValidationError("Role is not valid")


def register(app: Flask, container: Container) -> None:
    @app.route("/api/orgs", methods=["GET"], endpoint="orgs_list")
    @login_required
    def orgs_list():
        return ok(container.organization_service.list_my_organizations(current_user_id()))

    @app.route("/api/orgs", methods=["POST"], endpoint="orgs_create")
    @login_required
    def orgs_create():
        body = json_body()
        fields = {k: body[k] for k in _SETTINGS_FIELDS if k in body}
        org_id = container.organization_service.create_organization(user_id=current_user_id(), **fields)
        return ok({"org_id": org_id}, message="Organization created", code=201)

    @app.route("/api/orgs/<int:org_id>", methods=["GET"], endpoint="orgs_get")
    @login_required
    def orgs_get(org_id: int):
        return ok(container.organization_service.get_organization(org_id, user_id=current_user_id()))

    @app.route("/api/orgs/<int:org_id>", methods=["PATCH"], endpoint="orgs_update")
    @login_required
    def orgs_update(org_id: int):
        body = json_body()
        fields = {k: body[k] for k in _SETTINGS_FIELDS if k in body}
        org = container.organization_service.update_settings(org_id, user_id=current_user_id(), **fields)
        return ok(org, message="Organization settings saved")

    @app.route("/api/orgs/<int:org_id>", methods=["DELETE"], endpoint="orgs_delete")
    @login_required
    def orgs_delete(org_id: int):
        container.organization_service.delete_organization(org_id, user_id=current_user_id())
        return ok(message="Organization deleted")

    @app.route("/api/orgs/<int:org_id>/select", methods=["POST"], endpoint="orgs_select")
    @login_required
    def orgs_select(org_id: int):
        org = container.organization_service.select_organization(org_id, user_id=current_user_id())
        return ok({"org_id": org.org_id, "name": org.name})

    # ===== MEMBERS =====

    @app.route("/api/orgs/<int:org_id>/members", methods=["GET"], endpoint="org_members")
    @login_required
    def org_members(org_id: int):
        return ok(container.membership_service.list_members(org_id, user_id=current_user_id()))

    @app.route("/api/orgs/<int:org_id>/members/<int:member_id>", methods=["PATCH"], endpoint="org_member_role")
    @login_required
    def org_member_role(org_id: int, member_id: int):
        role = _parse_role(json_body().get("role"))
        container.membership_service.change_member_role(
            org_id, user_id=current_user_id(), member_id=member_id, role=role
        )
        return ok(message="Role updated")

    @app.route("/api/orgs/<int:org_id>/members/<int:member_id>", methods=["DELETE"], endpoint="org_member_remove")
    @login_required
    def org_member_remove(org_id: int, member_id: int):
        container.membership_service.remove_member(org_id, user_id=current_user_id(), member_id=member_id)
        return ok(message="Member removed")

    # ===== INVITES =====

    @app.route("/api/orgs/<int:org_id>/invites", methods=["GET"], endpoint="org_invites")
    @login_required
    def org_invites(org_id: int):
        views = container.invite_service.list_invites(org_id, user_id=current_user_id())
        return ok([dict(**_invite_json(v.invite), status=v.status.value) for v in views])

    @app.route("/api/orgs/<int:org_id>/invites", methods=["POST"], endpoint="org_invite_create")
    @login_required
    def org_invite_create(org_id: int):
        body = json_body()
        invite = container.invite_service.create_invite(
            org_id,
            user_id=current_user_id(),
            role=_parse_role(body.get("role")),
            email=body.get("email"),
            expires_in_days=body.get("expires_in_days"),
        )
        return ok(_invite_json(invite), message="Invite created", code=201)

    @app.route("/api/invites/<int:invite_id>", methods=["DELETE"], endpoint="invite_revoke")
    @login_required
    def invite_revoke(invite_id: int):
        container.invite_service.revoke_invite(invite_id, user_id=current_user_id())
        return ok(message="Invite revoked")

    @app.route("/api/invites/claim", methods=["POST"], endpoint="invite_claim")
    @login_required
    def invite_claim():
        org_id = container.invite_service.claim_invite(json_body().get("code", ""), user_id=current_user_id())
        return ok({"org_id": org_id}, message="You joined the organization")

    # ===== QR CHECK-IN TOKEN =====

    @app.route("/api/orgs/<int:org_id>/checkin-qr.png", methods=["GET"], endpoint="org_checkin_qr")
    @login_required
    def org_checkin_qr(org_id: int):
        """PNG to print at the office; scanning it toggles clock in/out."""

        token = container.organization_service.get_checkin_token(org_id, user_id=current_user_id())
        return app.response_class(render_qr_png(token), mimetype="image/png")

    @app.route("/api/orgs/<int:org_id>/checkin-token", methods=["POST"], endpoint="org_checkin_token_rotate")
    @login_required
    def org_checkin_token_rotate(org_id: int):
        token = container.organization_service.rotate_checkin_token(org_id, user_id=current_user_id())
        return ok({"checkin_token": token}, message="Check-in QR code regenerated")


def _invite_json(invite) -> dict:
    return {
        "invite_id": invite.invite_id,
        "org_id": invite.org_id,
        "code": invite.code,
        "role": invite.role.value,
        "email": invite.email,
        "created_by": invite.created_by,
        "created_at": invite.created_at.isoformat() if invite.created_at else None,
        "expires_at": invite.expires_at.isoformat(),
        "used_at": invite.used_at.isoformat() if invite.used_at else None,
    }
