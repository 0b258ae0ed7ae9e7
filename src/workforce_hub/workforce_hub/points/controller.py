from __future__ import annotations

from flask import Flask, request

from ..common.http import current_user_id, json_body, login_required, ok
from ..core.enums import RedemptionStatus
from ..core.exceptions import ValidationError
from ..container import Container

_REWARD_FIELDS = ("title", "description", "points_cost", "stock")


def _parse_redemption_status(value, *, allow_none: bool = False):
    if allow_none and not value:
        return None
    try:
        return RedemptionStatus(str(value or "").strip().lower())
    except ValueError:
        raise ValidationError("Redemption status is not valid")


def register(app: Flask, container: Container) -> None:
    @app.route("/api/orgs/<int:org_id>/points", methods=["GET"], endpoint="points_me")
    @login_required
    def points_me(org_id: int):
        user_id = current_user_id()
        return ok(
            {
                "balance": container.points_service.balance(org_id, user_id=user_id),
                "entries": container.points_service.history(org_id, user_id=user_id),
            }
        )

    @app.route("/api/orgs/<int:org_id>/leaderboard", methods=["GET"], endpoint="points_leaderboard")
    @login_required
    def points_leaderboard(org_id: int):
        return ok(container.points_service.leaderboard(org_id, user_id=current_user_id()))

    # ===== REWARDS =====

    @app.route("/api/orgs/<int:org_id>/rewards", methods=["GET"], endpoint="rewards_list")
    @login_required
    def rewards_list(org_id: int):
        return ok(container.shop_service.list_rewards(org_id, user_id=current_user_id()))

    @app.route("/api/orgs/<int:org_id>/rewards", methods=["POST"], endpoint="rewards_create")
    @login_required
    def rewards_create(org_id: int):
        body = json_body()
        reward_id = container.shop_service.create_reward(
            org_id,
            user_id=current_user_id(),
            title=body.get("title", ""),
            points_cost=body.get("points_cost"),
            description=body.get("description"),
            stock=body.get("stock"),
        )
        return ok({"reward_id": reward_id}, message="Reward created", code=201)

    @app.route("/api/rewards/<int:reward_id>", methods=["PATCH"], endpoint="rewards_update")
    @login_required
    def rewards_update(reward_id: int):
        body = json_body()
        fields = {k: body[k] for k in _REWARD_FIELDS if k in body}
        reward = container.shop_service.update_reward(reward_id, user_id=current_user_id(), **fields)
        return ok(reward, message="Reward updated")

    @app.route("/api/rewards/<int:reward_id>/toggle", methods=["POST"], endpoint="rewards_toggle")
    @login_required
    def rewards_toggle(reward_id: int):
        active = container.shop_service.toggle_active(reward_id, user_id=current_user_id())
        return ok({"active": active}, message="Reward activated" if active else "Reward deactivated")

    @app.route("/api/rewards/<int:reward_id>", methods=["DELETE"], endpoint="rewards_delete")
    @login_required
    def rewards_delete(reward_id: int):
        container.shop_service.delete_reward(reward_id, user_id=current_user_id())
        return ok(message="Reward deleted")

    @app.route("/api/rewards/<int:reward_id>/redeem", methods=["POST"], endpoint="rewards_redeem")
    @login_required
    def rewards_redeem(reward_id: int):
        redemption_id = container.shop_service.redeem(reward_id, user_id=current_user_id())
        return ok({"redemption_id": redemption_id}, message="Reward redeemed", code=201)

    # ===== REDEMPTIONS =====

    @app.route("/api/orgs/<int:org_id>/redemptions/mine", methods=["GET"], endpoint="redemptions_mine")
    @login_required
    def redemptions_mine(org_id: int):
        return ok(container.shop_service.list_my_redemptions(org_id, user_id=current_user_id()))

    @app.route("/api/orgs/<int:org_id>/redemptions", methods=["GET"], endpoint="redemptions_list")
    @login_required
    def redemptions_list(org_id: int):
        status = _parse_redemption_status(request.args.get("status"), allow_none=True)
        return ok(container.shop_service.list_redemptions(org_id, user_id=current_user_id(), status=status))

    @app.route("/api/redemptions/<int:redemption_id>", methods=["PATCH"], endpoint="redemptions_decide")
    @login_required
    def redemptions_decide(redemption_id: int):
        status = _parse_redemption_status(json_body().get("status"))
        container.shop_service.decide_redemption(redemption_id, user_id=current_user_id(), status=status)
        return ok(message=f"Redemption {status.value}")
