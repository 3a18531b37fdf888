# ats_app/models/__init__.py
"""
Database models package
"""

from .base import BaseModel, db
from .email_template import (
    HIRING_MANAGER_TRANSFER_REQUEST,
    JOB_SEEKER_TRANSFER_REQUEST,
    ORGANIZATION_TRANSFER_REQUEST,
    EmailTemplate,
)
from .enums import ARCHIVE_REASON_TRANSFER, RecordStatus, ScheduledTaskStatus, TransferStatus
from .hiring_manager import HiringManager, HiringManagerNote
from .job_seeker import JobSeeker, JobSeekerNote
from .mixins import MergeableRecordMixin, decode_json_map
from .organization import Organization, OrganizationNote
from .pipeline import Document, Job, Lead, Placement, Task
from .scheduled_task import ARCHIVE_CLEANUP_TASK, ScheduledTask
from .transfer import HiringManagerTransfer, JobSeekerTransfer, OrganizationTransfer, TransferRequestMixin
from .user import User

__all__ = [
    "db",
    "BaseModel",
    "User",
    # Mergeable records
    "MergeableRecordMixin",
    "decode_json_map",
    "Organization",
    "OrganizationNote",
    "HiringManager",
    "HiringManagerNote",
    "JobSeeker",
    "JobSeekerNote",
    # Dependents
    "Job",
    "Lead",
    "Document",
    "Task",
    "Placement",
    # Transfer workflow
    "TransferRequestMixin",
    "OrganizationTransfer",
    "HiringManagerTransfer",
    "JobSeekerTransfer",
    "ScheduledTask",
    "ARCHIVE_CLEANUP_TASK",
    "EmailTemplate",
    "ORGANIZATION_TRANSFER_REQUEST",
    "HIRING_MANAGER_TRANSFER_REQUEST",
    "JOB_SEEKER_TRANSFER_REQUEST",
    # Enums
    "RecordStatus",
    "TransferStatus",
    "ScheduledTaskStatus",
    "ARCHIVE_REASON_TRANSFER",
]
