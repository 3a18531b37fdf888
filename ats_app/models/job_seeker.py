# ats_app/models/job_seeker.py

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from .base import BaseModel, db
from .mixins import MergeableRecordMixin


class JobSeeker(MergeableRecordMixin, BaseModel):
    """Candidate in the recruiting pipeline"""

    __tablename__ = "job_seekers"

    id = db.Column(db.Integer, primary_key=True)
    first_name = db.Column(db.String(255), nullable=False)
    last_name = db.Column(db.String(255), nullable=False)
    email = db.Column(db.String(255), nullable=True)
    phone = db.Column(db.String(50), nullable=True)
    mobile_phone = db.Column(db.String(50), nullable=True)
    address = db.Column(db.Text, nullable=True)
    city = db.Column(db.String(100), nullable=True)
    state = db.Column(db.String(50), nullable=True)
    zip = db.Column(db.String(20), nullable=True)
    current_organization = db.Column(db.String(255), nullable=True)
    title = db.Column(db.String(255), nullable=True)
    skills = db.Column(db.Text, nullable=True)
    desired_salary = db.Column(db.String(50), nullable=True)

    notes = db.relationship(
        "JobSeekerNote",
        back_populates="job_seeker",
        order_by="JobSeekerNote.id",
        cascade="all, delete-orphan",
    )

    def __repr__(self):
        return f"<JobSeeker {self.full_name}>"

    @property
    def full_name(self):
        return f"{self.last_name}, {self.first_name}"

    @staticmethod
    def find_by_id(job_seeker_id):
        """Find job seeker by ID with error handling"""
        try:
            return db.session.get(JobSeeker, job_seeker_id)
        except SQLAlchemyError as e:
            current_app.logger.error(f"Database error finding job seeker {job_seeker_id}: {str(e)}")
            return None

    def add_note(self, text, user_id=None):
        """Stage an audit note on this job seeker; the caller commits"""
        note = JobSeekerNote(job_seeker_id=self.id, text=text, created_by=user_id)
        db.session.add(note)
        return note

    def to_dict(self):
        data = self._base_dict()
        data.update(
            {
                "first_name": self.first_name,
                "last_name": self.last_name,
                "full_name": self.full_name,
                "email": self.email,
                "phone": self.phone,
                "mobile_phone": self.mobile_phone,
                "address": self.address,
                "city": self.city,
                "state": self.state,
                "zip": self.zip,
                "current_organization": self.current_organization,
                "title": self.title,
                "skills": self.skills,
                "desired_salary": self.desired_salary,
            }
        )
        return data


class JobSeekerNote(BaseModel):
    __tablename__ = "job_seeker_notes"

    id = db.Column(db.Integer, primary_key=True)
    job_seeker_id = db.Column(db.Integer, db.ForeignKey("job_seekers.id"), nullable=False, index=True)
    text = db.Column(db.Text, nullable=False)
    created_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)

    job_seeker = db.relationship("JobSeeker", back_populates="notes")

    def __repr__(self):
        return f"<JobSeekerNote js={self.job_seeker_id}>"

    def to_dict(self):
        return {
            "id": self.id,
            "job_seeker_id": self.job_seeker_id,
            "text": self.text,
            "created_by": self.created_by,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
