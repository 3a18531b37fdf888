# ats_app/models/base.py

from datetime import datetime, timezone

from flask import current_app
from flask_sqlalchemy import SQLAlchemy
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

db = SQLAlchemy()


def utcnow():
    return datetime.now(timezone.utc)


class BaseModel(db.Model):
    """Abstract base adding audit timestamps and commit helpers"""

    __abstract__ = True

    created_at = db.Column(db.DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    @classmethod
    def safe_create(cls, **kwargs):
        """Create and commit a row, returning ``(instance, error)``"""
        try:
            instance = cls(**kwargs)
            db.session.add(instance)
            db.session.commit()
            return instance, None
        except IntegrityError as e:
            db.session.rollback()
            current_app.logger.error(f"Integrity error creating {cls.__name__}: {str(e)}")
            return None, f"Duplicate or invalid value (unique constraint): {str(e.orig)}"
        except SQLAlchemyError as e:
            db.session.rollback()
            current_app.logger.error(f"Database error creating {cls.__name__}: {str(e)}")
            return None, str(e)

    def safe_update(self, **kwargs):
        """Apply attribute changes and commit, returning ``(success, error)``"""
        try:
            for key, value in kwargs.items():
                setattr(self, key, value)
            db.session.commit()
            return True, None
        except SQLAlchemyError as e:
            db.session.rollback()
            current_app.logger.error(f"Database error updating {type(self).__name__} {self.id}: {str(e)}")
            return False, str(e)
