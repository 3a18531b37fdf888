# ats_app/models/transfer.py

"""
Transfer requests: asks to merge a source record into a duplicate target.

A request is created ``pending`` and reviewed exactly once. Approval runs the
merge in the same transaction as the status change; denial records a reason.
Rows are never deleted so the review trail survives the archived source.
"""

from sqlalchemy import CheckConstraint, Enum
from sqlalchemy.orm import declared_attr

from .base import BaseModel, db
from .enums import TransferStatus


class TransferRequestMixin:
    """Columns shared by every transfer request table"""

    id = db.Column(db.Integer, primary_key=True)
    requested_by_name = db.Column(db.String(255), nullable=True)
    requested_by_email = db.Column(db.String(255), nullable=True)
    source_record_number = db.Column(db.String(50), nullable=True)
    target_record_number = db.Column(db.String(50), nullable=True)
    status = db.Column(
        Enum(TransferStatus, name="transfer_status_enum"),
        default=TransferStatus.PENDING,
        nullable=False,
        index=True,
    )
    denial_reason = db.Column(db.Text, nullable=True)
    reviewed_at = db.Column(db.DateTime(timezone=True), nullable=True)
    executed_at = db.Column(db.DateTime(timezone=True), nullable=True)
    execution_summary = db.Column(db.JSON, nullable=True)

    # Foreign keys on a mixin must be produced per table
    @declared_attr
    def requested_by(cls):
        return db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)

    @declared_attr
    def approved_by(cls):
        return db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)

    # Overridden by concrete tables
    source_field = None
    target_field = None

    @property
    def source_id(self):
        return getattr(self, self.source_field)

    @property
    def target_id(self):
        return getattr(self, self.target_field)

    @property
    def is_pending(self):
        return self.status == TransferStatus.PENDING

    def to_dict(self):
        return {
            "id": self.id,
            self.source_field: self.source_id,
            self.target_field: self.target_id,
            "requested_by": self.requested_by,
            "requested_by_name": self.requested_by_name,
            "requested_by_email": self.requested_by_email,
            "source_record_number": self.source_record_number,
            "target_record_number": self.target_record_number,
            "status": self.status.value if self.status else None,
            "denial_reason": self.denial_reason,
            "approved_by": self.approved_by,
            "reviewed_at": self.reviewed_at.isoformat() if self.reviewed_at else None,
            "executed_at": self.executed_at.isoformat() if self.executed_at else None,
            "execution_summary": self.execution_summary,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


class OrganizationTransfer(TransferRequestMixin, BaseModel):
    """Request to merge one organization into another"""

    __tablename__ = "organization_transfers"

    source_field = "source_organization_id"
    target_field = "target_organization_id"

    source_organization_id = db.Column(db.Integer, db.ForeignKey("organizations.id"), nullable=False, index=True)
    target_organization_id = db.Column(db.Integer, db.ForeignKey("organizations.id"), nullable=False, index=True)

    __table_args__ = (
        CheckConstraint(
            "source_organization_id != target_organization_id",
            name="chk_org_transfer_different",
        ),
    )

    def __repr__(self):
        return f"<OrganizationTransfer {self.source_organization_id}->{self.target_organization_id}>"


class HiringManagerTransfer(TransferRequestMixin, BaseModel):
    """Request to merge one hiring manager into another"""

    __tablename__ = "hiring_manager_transfers"

    source_field = "source_hiring_manager_id"
    target_field = "target_hiring_manager_id"

    source_hiring_manager_id = db.Column(
        db.Integer, db.ForeignKey("hiring_managers.id"), nullable=False, index=True
    )
    target_hiring_manager_id = db.Column(
        db.Integer, db.ForeignKey("hiring_managers.id"), nullable=False, index=True
    )

    __table_args__ = (
        CheckConstraint(
            "source_hiring_manager_id != target_hiring_manager_id",
            name="chk_hm_transfer_different",
        ),
    )

    def __repr__(self):
        return f"<HiringManagerTransfer {self.source_hiring_manager_id}->{self.target_hiring_manager_id}>"


class JobSeekerTransfer(TransferRequestMixin, BaseModel):
    """Request to merge one job seeker into another"""

    __tablename__ = "job_seeker_transfers"

    source_field = "source_job_seeker_id"
    target_field = "target_job_seeker_id"

    source_job_seeker_id = db.Column(db.Integer, db.ForeignKey("job_seekers.id"), nullable=False, index=True)
    target_job_seeker_id = db.Column(db.Integer, db.ForeignKey("job_seekers.id"), nullable=False, index=True)

    __table_args__ = (
        CheckConstraint(
            "source_job_seeker_id != target_job_seeker_id",
            name="chk_js_transfer_different",
        ),
    )

    def __repr__(self):
        return f"<JobSeekerTransfer {self.source_job_seeker_id}->{self.target_job_seeker_id}>"
