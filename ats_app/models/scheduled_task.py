# ats_app/models/scheduled_task.py

from __future__ import annotations

from datetime import datetime, timedelta

from sqlalchemy import Enum

from .base import BaseModel, db, utcnow
from .enums import ScheduledTaskStatus

ARCHIVE_CLEANUP_TASK = "archive_cleanup"


class ScheduledTask(BaseModel):
    """
    Generic deferred-execution queue entry.

    Rows are produced by request handlers and consumed by an external sweep
    that picks up pending tasks whose ``scheduled_for`` has passed.
    """

    __tablename__ = "scheduled_tasks"

    id = db.Column(db.Integer, primary_key=True)
    task_type = db.Column(db.String(100), nullable=False, index=True)
    task_data = db.Column(db.JSON, nullable=True)
    scheduled_for = db.Column(db.DateTime(timezone=True), nullable=False, index=True)
    status = db.Column(
        Enum(ScheduledTaskStatus, name="scheduled_task_status_enum"),
        default=ScheduledTaskStatus.PENDING,
        nullable=False,
        index=True,
    )
    completed_at = db.Column(db.DateTime(timezone=True), nullable=True)

    def __repr__(self):
        return f"<ScheduledTask {self.task_type} {self.status.value if self.status else None}>"

    @classmethod
    def schedule(cls, task_type: str, task_data: dict, *, delay: timedelta, now: datetime | None = None):
        """Stage a pending task ``delay`` from now; the caller commits"""
        task = cls(
            task_type=task_type,
            task_data=task_data,
            scheduled_for=(now or utcnow()) + delay,
            status=ScheduledTaskStatus.PENDING,
        )
        db.session.add(task)
        return task
