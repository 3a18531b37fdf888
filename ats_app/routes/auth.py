# ats_app/routes/auth.py

from http import HTTPStatus

from flask import current_app, jsonify, request
from flask_login import login_user, logout_user

from ats_app.models import User
from ats_app.utils.permissions import api_login_required


def register_auth_routes(app):
    """Register session login/logout endpoints"""

    @app.route("/login", methods=["POST"])
    def login():
        """Log in with username/password from a form post or a JSON body"""
        data = request.get_json(silent=True) if request.is_json else request.form
        data = data or {}
        username = (data.get("username") or "").strip()
        password = data.get("password") or ""

        if not username or not password:
            return (
                jsonify({"success": False, "message": "Username and password are required"}),
                HTTPStatus.BAD_REQUEST,
            )

        user = User.find_by_username(username)
        if user is None or not user.check_password(password):
            current_app.logger.warning(f"Failed login attempt for username: {username}")
            return jsonify({"success": False, "message": "Invalid username or password"}), HTTPStatus.UNAUTHORIZED

        if not user.is_active:
            current_app.logger.warning(f"Login attempt for inactive user: {username}")
            return jsonify({"success": False, "message": "Account is disabled"}), HTTPStatus.FORBIDDEN

        login_user(user)
        current_app.logger.info(f"User {user.username} logged in")
        return jsonify({"success": True, "user": user.to_dict()})

    @app.route("/logout", methods=["POST"])
    @api_login_required
    def logout():
        logout_user()
        return jsonify({"success": True, "message": "Logged out"})
