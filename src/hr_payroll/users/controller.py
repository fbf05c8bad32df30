from __future__ import annotations

from flask import Flask, session

from ..common.web import json_body, login_required, ok, sign_in
from ..core.exceptions import NotFoundError
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/auth/login", methods=["POST"], endpoint="auth_login")
    def login():
        data = json_body()
        actor = container.auth_service.authenticate(data.get("email", ""), data.get("password", ""))
        sign_in(actor)
        return ok(actor.to_session(), message="Login successful")

    @app.route("/api/auth/logout", methods=["POST"], endpoint="auth_logout")
    def logout():
        session.clear()
        return ok(message="Logged out")

    @app.route("/api/auth/me", methods=["GET"], endpoint="auth_me")
    @login_required
    def me(actor):
        user = container.users_repo.get_by_id(actor.user_id)
        if not user:
            raise NotFoundError("User not found")
        return ok(user.to_dict())

    @app.route("/api/auth/send-otp", methods=["POST"], endpoint="auth_send_otp")
    def send_otp():
        container.auth_service.send_otp(json_body().get("email", ""))
        return ok(message="OTP sent to your email")

    @app.route("/api/auth/verify-otp", methods=["POST"], endpoint="auth_verify_otp")
    def verify_otp():
        data = json_body()
        actor = container.auth_service.verify_otp(data.get("email", ""), data.get("otp", ""))
        sign_in(actor)
        return ok(actor.to_session(), message="Login successful")

    @app.route("/api/auth/reset-password", methods=["POST"], endpoint="auth_reset_password")
    def reset_password():
        data = json_body()
        container.auth_service.reset_password(data.get("email", ""), data.get("otp", ""), data.get("password", ""))
        return ok(message="Password reset successful")

    @app.route("/api/auth/register", methods=["POST"], endpoint="auth_register")
    @login_required
    def register_user(actor):
        data = json_body()
        user = container.user_service.register_user(
            actor=actor,
            employee_code=data.get("employeeId", ""),
            role=data.get("role") or "employee",
            permissions=data.get("permissions"),
        )
        return ok(user.to_dict(), message="User registered successfully", status=201)

    @app.route("/api/auth/change-password", methods=["PUT"], endpoint="auth_change_password")
    @login_required
    def change_password(actor):
        data = json_body()
        container.user_service.change_password(
            actor=actor,
            current_password=data.get("currentPassword", ""),
            new_password=data.get("newPassword", ""),
        )
        return ok(message="Password updated successfully")
