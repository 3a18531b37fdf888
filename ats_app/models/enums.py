# ats_app/models/enums.py

import enum


class RecordStatus(str, enum.Enum):
    """Lifecycle status shared by mergeable records"""

    ACTIVE = "Active"
    ARCHIVED = "Archived"


class TransferStatus(str, enum.Enum):
    """Review states of a transfer request"""

    PENDING = "pending"
    APPROVED = "approved"
    DENIED = "denied"


class ScheduledTaskStatus(str, enum.Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


ARCHIVE_REASON_TRANSFER = "Transfer"
