# ats_app/utils/permissions.py

from dataclasses import dataclass
from functools import wraps
from http import HTTPStatus

from flask import jsonify
from flask_login import current_user


@dataclass(frozen=True)
class Actor:
    """The authenticated user on whose behalf a service operation runs"""

    user_id: int
    name: str
    email: str = ""

    @classmethod
    def from_user(cls, user):
        return cls(user_id=user.id, name=user.full_name, email=user.email or "")


def current_actor():
    """Actor for the logged-in user, or None for anonymous requests"""
    if not current_user or not current_user.is_authenticated:
        return None
    return Actor.from_user(current_user)


def api_login_required(f):
    """Like ``login_required`` but always answers anonymous callers with JSON 401"""

    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not current_user.is_authenticated:
            return jsonify({"success": False, "message": "Authentication required"}), HTTPStatus.UNAUTHORIZED
        return f(*args, **kwargs)

    return decorated_function
