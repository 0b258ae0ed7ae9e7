from __future__ import annotations

from datetime import timedelta

from flask import Flask, session

from ..common.http import current_user_id, json_body, login_required, ok
from ..core.constants import DEFAULT_SESSION_DAYS
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/auth/register", methods=["POST"], endpoint="auth_register")
    def auth_register():
        body = json_body()
        user_id = container.auth_service.register(
            email=body.get("email", ""),
            full_name=body.get("full_name", ""),
            password=body.get("password", ""),
        )
        return ok({"user_id": user_id}, message="Account created", code=201)

    @app.route("/api/auth/login", methods=["POST"], endpoint="auth_login")
    def auth_login():
        body = json_body()
        s_user = container.auth_service.authenticate(body.get("email", ""), body.get("password", ""))

        session.clear()
        session.permanent = bool(body.get("remember_me"))
        app.permanent_session_lifetime = timedelta(days=DEFAULT_SESSION_DAYS)

        session["user_id"] = s_user.user_id
        session["name"] = s_user.full_name
        session["email"] = s_user.email
        return ok(s_user, message="Logged in")

    @app.route("/api/auth/logout", methods=["POST"], endpoint="auth_logout")
    def auth_logout():
        session.clear()
        return ok(message="Logged out")

    @app.route("/api/me", methods=["GET"], endpoint="me")
    @login_required
    def me():
        return ok(container.user_service.get_profile(current_user_id()))

    @app.route("/api/me", methods=["PATCH"], endpoint="me_update")
    @login_required
    def me_update():
        body = json_body()
        profile = container.user_service.update_profile(current_user_id(), full_name=body.get("full_name", ""))
        session["name"] = profile.full_name
        return ok(profile, message="Profile updated")
