"""
Job seeker transfers.

Notes, documents, tasks and placements move to the surviving job seeker. The
candidate's ``applications`` list in ``custom_fields`` is appended to the
target's rather than hole-filled (see ``JOB_SEEKER_PROFILE``).
"""

from __future__ import annotations

from ats_app.models import (
    JOB_SEEKER_TRANSFER_REQUEST,
    Document,
    JobSeeker,
    JobSeekerNote,
    JobSeekerTransfer,
    Placement,
    Task,
)
from ats_app.services.transfer_service import DependentLink, TransferService


class JobSeekerTransferService(TransferService):
    """Merges a duplicate job seeker into the surviving one."""

    kind = "job_seeker"
    record_label = "Job Seeker"
    record_model = JobSeeker
    transfer_model = JobSeekerTransfer
    template_type = JOB_SEEKER_TRANSFER_REQUEST
    dashboard_path = "job-seekers"
    cleanup_key = "job_seeker_id"

    def dependents(self, source, target) -> list[DependentLink]:
        return [
            DependentLink("notes", JobSeekerNote, "job_seeker_id"),
            DependentLink("documents", Document, "entity_id", scope={"entity_type": "job_seeker"}),
            DependentLink("tasks", Task, "job_seeker_id"),
            DependentLink("placements", Placement, "job_seeker_id"),
        ]

    def describe(self, record) -> str:
        return record.full_name if record is not None else ""

    def source_note(self, transfer) -> str:
        return (
            f"Transfer approved: All data moved to {self._record_ref(transfer, 'target')}. "
            "Status changed to Archived."
        )

    def target_note(self, transfer) -> str:
        return (
            "Transfer approved: Received notes, documents, tasks, placements, and applications from "
            f"{self._record_ref(transfer, 'source')}."
        )
