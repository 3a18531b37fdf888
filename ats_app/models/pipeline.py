# ats_app/models/pipeline.py

"""
Recruiting pipeline rows that hang off organizations, hiring managers and
job seekers.

Only the columns the transfer workflow touches are modelled here; the CRUD
surface for these records lives outside this service.
"""

from .base import BaseModel, db


class Job(BaseModel):
    """Open requisition at a client organization"""

    __tablename__ = "jobs"

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(255), nullable=False)
    organization_id = db.Column(db.Integer, db.ForeignKey("organizations.id"), nullable=True, index=True)
    hiring_manager_id = db.Column(db.Integer, db.ForeignKey("hiring_managers.id"), nullable=True, index=True)
    status = db.Column(db.String(50), nullable=True)

    def __repr__(self):
        return f"<Job {self.title}>"


class Lead(BaseModel):
    """Sales lead tracked against an organization"""

    __tablename__ = "leads"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    organization_id = db.Column(db.Integer, db.ForeignKey("organizations.id"), nullable=True, index=True)
    status = db.Column(db.String(50), nullable=True)

    def __repr__(self):
        return f"<Lead {self.name}>"


class Document(BaseModel):
    """Uploaded file metadata attached polymorphically via entity_type/entity_id"""

    __tablename__ = "documents"

    id = db.Column(db.Integer, primary_key=True)
    entity_type = db.Column(db.String(50), nullable=False)
    entity_id = db.Column(db.Integer, nullable=False)
    document_name = db.Column(db.String(255), nullable=False)
    file_path = db.Column(db.String(1000), nullable=True)

    __table_args__ = (db.Index("idx_documents_entity", "entity_type", "entity_id"),)

    def __repr__(self):
        return f"<Document {self.entity_type}:{self.entity_id} {self.document_name}>"


class Task(BaseModel):
    """Follow-up task that may reference an organization, hiring manager or job seeker"""

    __tablename__ = "tasks"

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(255), nullable=False)
    organization_id = db.Column(db.Integer, db.ForeignKey("organizations.id"), nullable=True, index=True)
    hiring_manager_id = db.Column(db.Integer, db.ForeignKey("hiring_managers.id"), nullable=True, index=True)
    job_seeker_id = db.Column(db.Integer, db.ForeignKey("job_seekers.id"), nullable=True, index=True)
    status = db.Column(db.String(50), nullable=True, default="Pending")

    def __repr__(self):
        return f"<Task {self.title}>"


class Placement(BaseModel):
    """A job seeker placed into a job"""

    __tablename__ = "placements"

    id = db.Column(db.Integer, primary_key=True)
    job_id = db.Column(db.Integer, db.ForeignKey("jobs.id"), nullable=False, index=True)
    job_seeker_id = db.Column(db.Integer, db.ForeignKey("job_seekers.id"), nullable=False, index=True)
    status = db.Column(db.String(50), nullable=False, default="Pending")

    def __repr__(self):
        return f"<Placement job={self.job_id} js={self.job_seeker_id}>"
