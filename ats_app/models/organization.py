# ats_app/models/organization.py

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from .base import BaseModel, db
from .mixins import MergeableRecordMixin


class Organization(MergeableRecordMixin, BaseModel):
    """Client company that owns hiring managers, jobs and leads"""

    __tablename__ = "organizations"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False, index=True)
    nicknames = db.Column(db.String(255), nullable=True)
    website = db.Column(db.String(500), nullable=True)
    contact_phone = db.Column(db.String(50), nullable=True)
    address = db.Column(db.Text, nullable=True)
    overview = db.Column(db.Text, nullable=True)

    # Relationships
    notes = db.relationship(
        "OrganizationNote",
        back_populates="organization",
        order_by="OrganizationNote.id",
        cascade="all, delete-orphan",
    )
    hiring_managers = db.relationship("HiringManager", back_populates="organization")

    def __repr__(self):
        return f"<Organization {self.name}>"

    @staticmethod
    def find_by_id(org_id):
        """Find organization by ID with error handling"""
        try:
            return db.session.get(Organization, org_id)
        except SQLAlchemyError as e:
            current_app.logger.error(f"Database error finding organization by id {org_id}: {str(e)}")
            return None

    def add_note(self, text, user_id=None):
        """Stage an audit note on this organization; the caller commits"""
        note = OrganizationNote(organization_id=self.id, text=text, created_by=user_id)
        db.session.add(note)
        return note

    def to_dict(self):
        data = self._base_dict()
        data.update(
            {
                "name": self.name,
                "nicknames": self.nicknames,
                "website": self.website,
                "contact_phone": self.contact_phone,
                "address": self.address,
                "overview": self.overview,
            }
        )
        return data


class OrganizationNote(BaseModel):
    """Free-text note attached to an organization"""

    __tablename__ = "organization_notes"

    id = db.Column(db.Integer, primary_key=True)
    organization_id = db.Column(db.Integer, db.ForeignKey("organizations.id"), nullable=False, index=True)
    text = db.Column(db.Text, nullable=False)
    created_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)

    organization = db.relationship("Organization", back_populates="notes")

    def __repr__(self):
        return f"<OrganizationNote org={self.organization_id}>"

    def to_dict(self):
        return {
            "id": self.id,
            "organization_id": self.organization_id,
            "text": self.text,
            "created_by": self.created_by,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
