"""Tests for the organization transfer lifecycle and merge execution"""

from datetime import timedelta, timezone
from unittest.mock import patch

import pytest
from sqlalchemy.exc import SQLAlchemyError

from ats_app.models import (
    ARCHIVE_CLEANUP_TASK,
    Document,
    HiringManager,
    Job,
    Lead,
    Organization,
    OrganizationNote,
    OrganizationTransfer,
    RecordStatus,
    ScheduledTask,
    ScheduledTaskStatus,
    TransferStatus,
    db,
)
from ats_app.models.base import utcnow
from ats_app.services.errors import ConflictError, NotFoundError, TransactionError, ValidationError
from ats_app.services.transfer_service import OrganizationTransferService


def _aware(value):
    # SQLite hands back naive datetimes
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


@pytest.fixture
def service():
    return OrganizationTransferService()


@pytest.fixture
def pending_transfer(service, organizations, actor, mock_mailer):
    source, target = organizations
    transfer = service.create(source.id, target.id, actor)
    mock_mailer.reset_mock()
    return transfer


class TestCreateTransfer:
    """Creating a pending transfer request"""

    def test_create_stores_pending_request_with_defaults(self, service, organizations, actor, mock_mailer):
        source, target = organizations

        transfer = service.create(str(source.id), target.id, actor)

        assert transfer.id is not None
        assert transfer.status == TransferStatus.PENDING
        assert transfer.source_organization_id == source.id
        assert transfer.target_organization_id == target.id
        assert transfer.requested_by == actor.user_id
        assert transfer.requested_by_name == "Test User"
        assert transfer.requested_by_email == "test@example.com"
        assert transfer.source_record_number == "ORG-1001"
        assert transfer.target_record_number == "ORG-1002"
        assert transfer.approved_by is None
        assert transfer.reviewed_at is None

    def test_create_uses_explicit_requester_fields(self, service, organizations, actor, mock_mailer):
        source, target = organizations

        transfer = service.create(
            source.id,
            target.id,
            actor,
            requested_by="Recruiter Rae",
            requested_by_email="rae@example.com",
            source_record_number="A-1",
            target_record_number="B-2",
        )

        assert transfer.requested_by_name == "Recruiter Rae"
        assert transfer.requested_by_email == "rae@example.com"
        assert transfer.source_record_number == "A-1"
        assert transfer.target_record_number == "B-2"

    def test_create_emails_reviewer_with_review_links(self, service, organizations, actor, mock_mailer):
        source, target = organizations

        transfer = service.create(source.id, target.id, actor)

        mock_mailer.assert_called_once()
        kwargs = mock_mailer.call_args.kwargs
        assert kwargs["to"] == "reviewer@example.com"
        assert kwargs["subject"] == "Organization Transfer Request: ORG-1001 → ORG-1002"
        assert f"http://frontend.test/dashboard/organizations/transfer/{transfer.id}/approve" in kwargs["html"]
        assert f"http://frontend.test/dashboard/organizations/transfer/{transfer.id}/deny" in kwargs["html"]

    @pytest.mark.parametrize("source_id,target_id", [(None, 1), (1, None), ("", 1)])
    def test_create_requires_both_ids(self, service, actor, source_id, target_id):
        with pytest.raises(ValidationError, match="IDs are required"):
            service.create(source_id, target_id, actor)

    @pytest.mark.parametrize("bad_id", ["abc", True, -3, 0, 1.5j, 1.9, "1.9", "1e3", "\u0663", [1]])
    def test_create_rejects_malformed_ids(self, service, organizations, actor, bad_id):
        _, target = organizations
        with pytest.raises(ValidationError, match="Invalid source organization ID"):
            service.create(bad_id, target.id, actor)

    def test_create_rejects_fractional_id_instead_of_truncating(self, service, organizations, actor):
        source, target = organizations

        with pytest.raises(ValidationError, match="Invalid source organization ID"):
            service.create(source.id + 0.9, target.id, actor)

        assert OrganizationTransfer.query.count() == 0

    def test_create_accepts_integral_float_and_padded_string(self, service, organizations, actor, mock_mailer):
        source, target = organizations

        transfer = service.create(float(source.id), f" {target.id} ", actor)

        assert transfer.source_organization_id == source.id
        assert transfer.target_organization_id == target.id

    def test_create_rejects_same_record(self, service, organizations, actor):
        source, _ = organizations
        with pytest.raises(ValidationError, match="Cannot transfer to the same organization"):
            service.create(source.id, str(source.id), actor)
        assert OrganizationTransfer.query.count() == 0

    def test_create_rejects_unknown_record(self, service, organizations, actor):
        source, _ = organizations
        with pytest.raises(NotFoundError):
            service.create(source.id, 99999, actor)

    def test_create_rejects_archived_record(self, service, organizations, archived_organization, actor):
        source, _ = organizations
        with pytest.raises(ValidationError, match="Archived"):
            service.create(archived_organization.id, source.id, actor)

    def test_create_rejects_malformed_requester_email(self, service, organizations, actor):
        source, target = organizations
        with pytest.raises(ValidationError, match="Invalid requester email"):
            service.create(source.id, target.id, actor, requested_by_email="not-an-email")

    def test_create_succeeds_when_reviewer_email_fails(self, service, organizations, actor, mock_mailer):
        from ats_app.utils.mailer import MailDeliveryError

        source, target = organizations
        mock_mailer.side_effect = MailDeliveryError("smtp down")

        transfer = service.create(source.id, target.id, actor)

        assert transfer.status == TransferStatus.PENDING
        assert OrganizationTransfer.query.count() == 1

    def test_create_rolls_back_on_database_error(self, service, organizations, actor):
        source, target = organizations
        with patch.object(db.session, "commit", side_effect=SQLAlchemyError("disk full")):
            with pytest.raises(TransactionError):
                service.create(source.id, target.id, actor)
        assert OrganizationTransfer.query.count() == 0


class TestApproveTransfer:
    """Approval executes the merge atomically"""

    def test_approve_merges_and_archives(
        self, service, pending_transfer, organizations, organization_dependents, reviewer, mock_mailer
    ):
        source, target = organizations
        source_id, target_id = source.id, target.id

        transfer = service.approve(pending_transfer.id, reviewer)

        assert transfer.status == TransferStatus.APPROVED
        assert transfer.approved_by == reviewer.user_id
        assert transfer.reviewed_at is not None
        assert transfer.executed_at is not None

        source = db.session.get(Organization, source_id)
        target = db.session.get(Organization, target_id)
        assert source.status == RecordStatus.ARCHIVED
        assert source.archive_reason == "Transfer"
        assert source.archived_at is not None

        # Data holes filled, existing target values kept
        assert target.contact_phone == "555-1111"
        assert target.address == "123 Main"
        assert target.website == "https://acme.example.com"
        assert target.custom_fields == {"Industry": "Finance", "Size": "50", "Region": "West"}
        assert target.status == RecordStatus.ACTIVE

    def test_approve_repoints_dependents(
        self, service, pending_transfer, organizations, organization_dependents, reviewer, mock_mailer
    ):
        source, target = organizations
        source_id, target_id = source.id, target.id
        ids = {name: row.id for name, row in organization_dependents.items()}

        transfer = service.approve(pending_transfer.id, reviewer)

        assert db.session.get(HiringManager, ids["hiring_manager"]).organization_id == target_id
        assert db.session.get(Job, ids["job"]).organization_id == target_id
        assert db.session.get(Lead, ids["lead"]).organization_id == target_id
        assert db.session.get(Document, ids["org_document"]).entity_id == target_id
        assert db.session.get(Document, ids["other_document"]).entity_id == source_id
        assert transfer.execution_summary["repointed"] == {
            "hiring_managers": 1,
            "jobs": 1,
            "leads": 1,
            "documents": 1,
        }
        assert transfer.execution_summary["filled_fields"] == ["address", "website"]
        assert transfer.execution_summary["filled_custom_fields"] == ["Region"]

    def test_approve_adds_audit_notes(self, service, pending_transfer, organizations, reviewer, mock_mailer):
        source, target = organizations
        source_id, target_id = source.id, target.id

        service.approve(pending_transfer.id, reviewer)

        source_notes = [note.text for note in OrganizationNote.query.filter_by(organization_id=source_id)]
        target_notes = [note.text for note in OrganizationNote.query.filter_by(organization_id=target_id)]
        assert source_notes == ["Transfer approved: Data moved to ORG-1002. Status changed to Archived."]
        assert target_notes == ["Transfer approved: Data received from ORG-1001."]
        assert OrganizationNote.query.first().created_by == reviewer.user_id

    def test_approve_schedules_archive_cleanup(self, service, pending_transfer, organizations, reviewer, mock_mailer):
        source, _ = organizations
        source_id = source.id
        before = utcnow()

        transfer = service.approve(pending_transfer.id, reviewer)

        tasks = ScheduledTask.query.all()
        assert len(tasks) == 1
        task = tasks[0]
        assert task.task_type == ARCHIVE_CLEANUP_TASK
        assert task.task_data == {"organization_id": source_id}
        assert task.status == ScheduledTaskStatus.PENDING
        scheduled_for = _aware(task.scheduled_for)
        assert before + timedelta(days=7) <= scheduled_for <= utcnow() + timedelta(days=7)
        assert transfer.execution_summary["cleanup_task_id"] == task.id

    def test_approve_honours_configured_cleanup_delay(
        self, app, service, pending_transfer, reviewer, mock_mailer
    ):
        app.config["ARCHIVE_CLEANUP_DELAY_DAYS"] = 30
        before = utcnow()

        service.approve(pending_transfer.id, reviewer)

        task = ScheduledTask.query.one()
        assert _aware(task.scheduled_for) >= before + timedelta(days=30)

    def test_approve_notifies_requester(self, service, pending_transfer, reviewer, mock_mailer):
        service.approve(pending_transfer.id, reviewer)

        mock_mailer.assert_called_once()
        kwargs = mock_mailer.call_args.kwargs
        assert kwargs["to"] == "test@example.com"
        assert kwargs["subject"] == "Organization Transfer Approved: ORG-1001 → ORG-1002"
        assert "Acme Corporation" in kwargs["html"]

    def test_approve_survives_notification_failure(self, service, pending_transfer, reviewer, mock_mailer):
        from ats_app.utils.mailer import MailDeliveryError

        mock_mailer.side_effect = MailDeliveryError("smtp down")

        transfer = service.approve(pending_transfer.id, reviewer)

        assert transfer.status == TransferStatus.APPROVED

    def test_approve_twice_is_rejected_without_side_effects(
        self, service, pending_transfer, organizations, reviewer, mock_mailer
    ):
        service.approve(pending_transfer.id, reviewer)

        with pytest.raises(ConflictError, match="already approved"):
            service.approve(pending_transfer.id, reviewer)

        assert ScheduledTask.query.count() == 1
        assert OrganizationNote.query.count() == 2

    def test_approve_unknown_transfer(self, service, reviewer):
        with pytest.raises(NotFoundError):
            service.approve(12345, reviewer)

    def test_approve_rolls_back_everything_on_failure(
        self, service, pending_transfer, organizations, organization_dependents, reviewer, mock_mailer
    ):
        source, target = organizations
        source_id, target_id = source.id, target.id
        transfer_id = pending_transfer.id
        hiring_manager_id = organization_dependents["hiring_manager"].id

        with patch.object(ScheduledTask, "schedule", side_effect=SQLAlchemyError("insert failed")):
            with pytest.raises(TransactionError, match="insert failed"):
                service.approve(transfer_id, reviewer)

        transfer = db.session.get(OrganizationTransfer, transfer_id)
        assert transfer.status == TransferStatus.PENDING
        assert transfer.approved_by is None
        assert transfer.executed_at is None

        source = db.session.get(Organization, source_id)
        target = db.session.get(Organization, target_id)
        assert source.status == RecordStatus.ACTIVE
        assert source.archived_at is None
        assert target.address == ""
        assert db.session.get(HiringManager, hiring_manager_id).organization_id == source_id
        assert OrganizationNote.query.count() == 0
        assert ScheduledTask.query.count() == 0
        mock_mailer.assert_not_called()

    def test_approve_with_broken_profile_override_raises_service_error(
        self, app, tmp_path, service, pending_transfer, organizations, reviewer, mock_mailer
    ):
        source, _ = organizations
        source_id = source.id
        path = tmp_path / "profiles.yaml"
        path.write_text("organization: [not, a, mapping]\n", encoding="utf-8")
        app.config["TRANSFER_PROFILE_PATH"] = str(path)

        with pytest.raises(TransactionError, match="Transfer profile configuration is invalid"):
            service.approve(pending_transfer.id, reviewer)

        assert db.session.get(OrganizationTransfer, pending_transfer.id).status == TransferStatus.PENDING
        assert db.session.get(Organization, source_id).status == RecordStatus.ACTIVE
        mock_mailer.assert_not_called()

    def test_failed_approval_can_be_retried(self, service, pending_transfer, reviewer, mock_mailer):
        with patch.object(ScheduledTask, "schedule", side_effect=SQLAlchemyError("insert failed")):
            with pytest.raises(TransactionError):
                service.approve(pending_transfer.id, reviewer)

        transfer = service.approve(pending_transfer.id, reviewer)

        assert transfer.status == TransferStatus.APPROVED
        assert ScheduledTask.query.count() == 1

    def test_approve_with_malformed_custom_fields_rolls_back(
        self, service, pending_transfer, organizations, reviewer, mock_mailer
    ):
        source, _ = organizations
        source.custom_fields = "[1, 2]"
        db.session.commit()

        with pytest.raises(TransactionError):
            service.approve(pending_transfer.id, reviewer)

        assert db.session.get(OrganizationTransfer, pending_transfer.id).status == TransferStatus.PENDING

    def test_lost_race_raises_conflict(self, service, pending_transfer, reviewer, mock_mailer):
        """A concurrent reviewer that claimed the request first wins"""
        with patch.object(OrganizationTransferService, "_claim", side_effect=ConflictError("already processed")):
            with pytest.raises(ConflictError):
                service.approve(pending_transfer.id, reviewer)

        assert db.session.get(OrganizationTransfer, pending_transfer.id).status == TransferStatus.PENDING

    def test_approve_rejects_already_archived_source(
        self, service, pending_transfer, organizations, reviewer, mock_mailer
    ):
        source, _ = organizations
        source.archive("Manual")
        db.session.commit()

        with pytest.raises(ConflictError, match="already archived"):
            service.approve(pending_transfer.id, reviewer)

        assert db.session.get(OrganizationTransfer, pending_transfer.id).status == TransferStatus.PENDING


class TestDenyTransfer:
    """Denial records the reason and leaves data untouched"""

    def test_deny_records_reason_and_notes(self, service, pending_transfer, organizations, reviewer, mock_mailer):
        source, target = organizations
        source_id, target_id = source.id, target.id

        transfer = service.deny(pending_transfer.id, reviewer, "  Not a duplicate  ")

        assert transfer.status == TransferStatus.DENIED
        assert transfer.denial_reason == "Not a duplicate"
        assert transfer.approved_by == reviewer.user_id
        assert transfer.reviewed_at is not None
        assert transfer.executed_at is None

        for org_id in (source_id, target_id):
            notes = [note.text for note in OrganizationNote.query.filter_by(organization_id=org_id)]
            assert notes == ["Transfer denied: Not a duplicate"]

        assert db.session.get(Organization, source_id).status == RecordStatus.ACTIVE
        assert ScheduledTask.query.count() == 0

    def test_deny_notifies_requester_with_reason(self, service, pending_transfer, reviewer, mock_mailer):
        service.deny(pending_transfer.id, reviewer, "Different legal entity")

        kwargs = mock_mailer.call_args.kwargs
        assert kwargs["to"] == "test@example.com"
        assert kwargs["subject"] == "Organization Transfer Denied: ORG-1001 → ORG-1002"
        assert "Different legal entity" in kwargs["html"]

    @pytest.mark.parametrize("reason", [None, "", "   ", 42])
    def test_deny_requires_reason(self, service, pending_transfer, reviewer, reason):
        with pytest.raises(ValidationError, match="Denial reason is required"):
            service.deny(pending_transfer.id, reviewer, reason)

        assert db.session.get(OrganizationTransfer, pending_transfer.id).status == TransferStatus.PENDING

    def test_deny_after_approve_is_rejected(self, service, pending_transfer, reviewer, mock_mailer):
        service.approve(pending_transfer.id, reviewer)

        with pytest.raises(ConflictError):
            service.deny(pending_transfer.id, reviewer, "Too late")

        assert db.session.get(OrganizationTransfer, pending_transfer.id).denial_reason is None

    def test_approve_after_deny_is_rejected(self, service, pending_transfer, organizations, reviewer, mock_mailer):
        source, _ = organizations
        source_id = source.id
        service.deny(pending_transfer.id, reviewer, "Nope")

        with pytest.raises(ConflictError, match="already denied"):
            service.approve(pending_transfer.id, reviewer)

        assert db.session.get(Organization, source_id).status == RecordStatus.ACTIVE

    def test_deny_unknown_transfer(self, service, reviewer):
        with pytest.raises(NotFoundError):
            service.deny(999, reviewer, "reason")


class TestQueries:
    def test_get_and_list(self, service, organizations, archived_organization, actor, reviewer, mock_mailer):
        source, target = organizations
        first = service.create(source.id, target.id, actor)
        second = service.create(target.id, source.id, actor)
        service.deny(first.id, reviewer, "Wrong way round")

        assert service.get(second.id).id == second.id
        assert [t.id for t in service.list()] == [second.id, first.id]
        assert [t.id for t in service.list("pending")] == [second.id]
        assert [t.id for t in service.list("denied")] == [first.id]

    def test_list_rejects_unknown_status(self, service):
        with pytest.raises(ValidationError):
            service.list("executed")

    def test_get_unknown(self, service):
        with pytest.raises(NotFoundError):
            service.get(1)
