# ats_app/models/user.py

from flask import current_app
from flask_login import UserMixin
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.security import check_password_hash, generate_password_hash

from .base import BaseModel, db


class User(UserMixin, BaseModel):
    """Recruiter / staff account"""

    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(80), unique=True, nullable=False, index=True)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    first_name = db.Column(db.String(100), nullable=True)
    last_name = db.Column(db.String(100), nullable=True)
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    is_super_admin = db.Column(db.Boolean, default=False, nullable=False)

    def __repr__(self):
        return f"<User {self.username}>"

    @property
    def full_name(self):
        name = " ".join(part for part in (self.first_name, self.last_name) if part)
        return name or self.username

    def set_password(self, password):
        self.password_hash = generate_password_hash(password)

    def check_password(self, password):
        return check_password_hash(self.password_hash, password)

    @staticmethod
    def find_by_username(username):
        """Find user by username with error handling"""
        try:
            return User.query.filter_by(username=username).first()
        except SQLAlchemyError as e:
            current_app.logger.error(f"Database error finding user {username}: {str(e)}")
            return None

    def to_dict(self):
        return {
            "id": self.id,
            "username": self.username,
            "email": self.email,
            "full_name": self.full_name,
            "is_super_admin": self.is_super_admin,
        }
