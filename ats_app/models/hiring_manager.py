# ats_app/models/hiring_manager.py

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from .base import BaseModel, db
from .mixins import MergeableRecordMixin


class HiringManager(MergeableRecordMixin, BaseModel):
    """Contact at a client organization who owns job openings"""

    __tablename__ = "hiring_managers"

    id = db.Column(db.Integer, primary_key=True)
    organization_id = db.Column(db.Integer, db.ForeignKey("organizations.id"), nullable=True, index=True)
    first_name = db.Column(db.String(100), nullable=False)
    last_name = db.Column(db.String(100), nullable=False)
    title = db.Column(db.String(255), nullable=True)
    email = db.Column(db.String(255), nullable=True)
    phone = db.Column(db.String(50), nullable=True)
    mobile_phone = db.Column(db.String(50), nullable=True)
    department = db.Column(db.String(255), nullable=True)

    organization = db.relationship("Organization", back_populates="hiring_managers")
    notes = db.relationship(
        "HiringManagerNote",
        back_populates="hiring_manager",
        order_by="HiringManagerNote.id",
        cascade="all, delete-orphan",
    )

    def __repr__(self):
        return f"<HiringManager {self.full_name}>"

    @property
    def full_name(self):
        return f"{self.last_name}, {self.first_name}"

    @staticmethod
    def find_by_id(hiring_manager_id):
        """Find hiring manager by ID with error handling"""
        try:
            return db.session.get(HiringManager, hiring_manager_id)
        except SQLAlchemyError as e:
            current_app.logger.error(f"Database error finding hiring manager {hiring_manager_id}: {str(e)}")
            return None

    def add_note(self, text, user_id=None):
        """Stage an audit note on this hiring manager; the caller commits"""
        note = HiringManagerNote(hiring_manager_id=self.id, text=text, created_by=user_id)
        db.session.add(note)
        return note

    def to_dict(self):
        data = self._base_dict()
        data.update(
            {
                "organization_id": self.organization_id,
                "first_name": self.first_name,
                "last_name": self.last_name,
                "full_name": self.full_name,
                "title": self.title,
                "email": self.email,
                "phone": self.phone,
                "mobile_phone": self.mobile_phone,
                "department": self.department,
            }
        )
        return data


class HiringManagerNote(BaseModel):
    """Free-text note attached to a hiring manager"""

    __tablename__ = "hiring_manager_notes"

    id = db.Column(db.Integer, primary_key=True)
    hiring_manager_id = db.Column(db.Integer, db.ForeignKey("hiring_managers.id"), nullable=False, index=True)
    text = db.Column(db.Text, nullable=False)
    created_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)

    hiring_manager = db.relationship("HiringManager", back_populates="notes")

    def __repr__(self):
        return f"<HiringManagerNote hm={self.hiring_manager_id}>"

    def to_dict(self):
        return {
            "id": self.id,
            "hiring_manager_id": self.hiring_manager_id,
            "text": self.text,
            "created_by": self.created_by,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
