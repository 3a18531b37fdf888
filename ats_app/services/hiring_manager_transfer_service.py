"""
Hiring manager transfers.

Same workflow as organizations; the dependents are the manager's notes,
documents, tasks and jobs. Jobs follow the surviving manager to its
organization.
"""

from __future__ import annotations

from ats_app.models import (
    HIRING_MANAGER_TRANSFER_REQUEST,
    Document,
    HiringManager,
    HiringManagerNote,
    HiringManagerTransfer,
    Job,
    Task,
)
from ats_app.services.transfer_service import DependentLink, TransferService


class HiringManagerTransferService(TransferService):
    """Merges a duplicate hiring manager into the surviving one."""

    kind = "hiring_manager"
    record_label = "Hiring Manager"
    record_model = HiringManager
    transfer_model = HiringManagerTransfer
    template_type = HIRING_MANAGER_TRANSFER_REQUEST
    dashboard_path = "hiring-managers"
    cleanup_key = "hiring_manager_id"

    def dependents(self, source, target) -> list[DependentLink]:
        job_values = {}
        if target.organization_id is not None:
            job_values["organization_id"] = target.organization_id

        return [
            DependentLink("notes", HiringManagerNote, "hiring_manager_id"),
            DependentLink("documents", Document, "entity_id", scope={"entity_type": "hiring_manager"}),
            DependentLink("tasks", Task, "hiring_manager_id"),
            DependentLink("jobs", Job, "hiring_manager_id", extra_values=job_values),
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
            "Transfer approved: Received notes, documents, tasks, and jobs from "
            f"{self._record_ref(transfer, 'source')}."
        )
