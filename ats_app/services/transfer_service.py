"""
Transfer (merge) workflow for duplicate records.

A transfer request moves everything that hangs off a *source* record onto a
*target* record of the same kind:

* ``create`` validates the pair and stores a ``pending`` request, then emails
  the reviewer mailbox.
* ``approve`` claims the pending request and executes the merge in the same
  transaction: fill the target's data holes, re-point dependent rows, archive
  the source, add audit notes and schedule the archive cleanup. Any failure
  rolls back every step, including the status change.
* ``deny`` records the reason and notes it on both records.

Concrete services declare the record model, the dependent tables and the
wording of the audit notes; everything else is shared.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any, Mapping

from email_validator import EmailNotValidError, validate_email
from flask import current_app
from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from config.monitoring import TransferMonitoring
from config.transfer_profiles import ProfileError, TransferProfile, get_profile
from ats_app.models import (
    ARCHIVE_CLEANUP_TASK,
    ARCHIVE_REASON_TRANSFER,
    ORGANIZATION_TRANSFER_REQUEST,
    Document,
    HiringManager,
    Job,
    Lead,
    Organization,
    OrganizationTransfer,
    ScheduledTask,
    TransferStatus,
    db,
)
from ats_app.models.base import utcnow
from ats_app.services.errors import ConflictError, NotFoundError, ServiceError, TransactionError, ValidationError
from ats_app.services.record_merge import MergeSummary, apply_data_holes
from ats_app.services.transfer_notifications import TransferNotifier
from ats_app.utils.permissions import Actor


@dataclass(frozen=True)
class DependentLink:
    """
    A table whose rows point at a mergeable record.

    Attributes:
        name: Key used in the execution summary.
        model: Mapped class holding the reference.
        column: Attribute holding the record id.
        scope: Extra equality filters (e.g. a polymorphic ``entity_type``).
        extra_values: Additional columns to set while re-pointing.
    """

    name: str
    model: type
    column: str
    scope: Mapping[str, Any] = field(default_factory=dict)
    extra_values: Mapping[str, Any] = field(default_factory=dict)


def _coerce_record_id(value: Any, label: str) -> int:
    """Accept positive integral ids only; fractional or boolean input is rejected."""
    record_id = None
    if isinstance(value, bool):
        pass
    elif isinstance(value, int):
        record_id = value
    elif isinstance(value, float) and value.is_integer():
        record_id = int(value)
    elif isinstance(value, str):
        text = value.strip()
        if text.isascii() and text.isdigit():
            record_id = int(text)
    if record_id is None or record_id <= 0:
        raise ValidationError(f"Invalid {label} ID: {value!r}")
    return record_id


class TransferService:
    """Shared state machine and merge procedure; subclasses bind a record kind."""

    kind: str = ""
    record_label: str = ""
    record_model: type = None
    transfer_model: type = None
    template_type: str = ""
    dashboard_path: str = ""
    cleanup_key: str = ""

    def __init__(
        self,
        session: Session | None = None,
        *,
        notifier: TransferNotifier | None = None,
        profile: TransferProfile | None = None,
    ):
        self.session = session or db.session
        self.notifier = notifier or TransferNotifier(
            kind=self.kind,
            record_label=self.record_label,
            template_type=self.template_type,
            dashboard_path=self.dashboard_path,
        )
        self._profile = profile

    # ------------------------------------------------------------------
    # Hooks for concrete services
    # ------------------------------------------------------------------

    def dependents(self, source, target) -> list[DependentLink]:
        raise NotImplementedError

    def describe(self, record) -> str:
        raise NotImplementedError

    def source_note(self, transfer) -> str:
        return (
            f"Transfer approved: Data moved to {self._record_ref(transfer, 'target')}. "
            "Status changed to Archived."
        )

    def target_note(self, transfer) -> str:
        return f"Transfer approved: Data received from {self._record_ref(transfer, 'source')}."

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def profile(self) -> TransferProfile:
        """
        Merge profile for this record kind.

        Raises:
            TransactionError: The ``TRANSFER_PROFILE_PATH`` override is unusable.
        """
        if self._profile is None:
            try:
                self._profile = get_profile(self.kind, current_app.config.get("TRANSFER_PROFILE_PATH"))
            except ProfileError as exc:
                current_app.logger.error(f"Invalid transfer profile configuration for {self.kind}: {exc}")
                raise TransactionError(f"Transfer profile configuration is invalid: {exc}") from exc
        return self._profile

    def get(self, transfer_id: int):
        """Return the transfer request or raise NotFoundError."""
        transfer = self.session.get(self.transfer_model, transfer_id)
        if transfer is None:
            raise NotFoundError("Transfer request not found")
        return transfer

    def list(self, status: str | None = None) -> list:
        """Transfer requests newest first, optionally filtered by status value."""
        query = self.session.query(self.transfer_model)
        if status:
            try:
                query = query.filter(self.transfer_model.status == TransferStatus(status))
            except ValueError:
                raise ValidationError(f"Unknown transfer status: {status}") from None
        return query.order_by(self.transfer_model.id.desc()).all()

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def create(
        self,
        source_id: Any,
        target_id: Any,
        actor: Actor,
        *,
        requested_by: str | None = None,
        requested_by_email: str | None = None,
        source_record_number: str | None = None,
        target_record_number: str | None = None,
    ):
        """
        Store a pending transfer request and notify the reviewer.

        Raises:
            ValidationError: Missing/invalid ids, same record on both sides,
                archived records or a malformed requester email.
            NotFoundError: Either record does not exist.
            TransactionError: The insert failed.
        """
        label = self.record_label.lower()
        if source_id in (None, "") or target_id in (None, ""):
            raise ValidationError(f"Source and target {label} IDs are required")

        source_id = _coerce_record_id(source_id, f"source {label}")
        target_id = _coerce_record_id(target_id, f"target {label}")
        if source_id == target_id:
            raise ValidationError(f"Cannot transfer to the same {label}")

        source = self.session.get(self.record_model, source_id)
        target = self.session.get(self.record_model, target_id)
        if source is None or target is None:
            raise NotFoundError(f"Source or target {label} not found")
        if source.is_archived or target.is_archived:
            raise ValidationError(f"Archived {label} records cannot be transferred")

        email = self._normalize_requester_email(requested_by_email) or actor.email or None

        transfer = self.transfer_model(
            **{
                self.transfer_model.source_field: source_id,
                self.transfer_model.target_field: target_id,
            },
            requested_by=actor.user_id,
            requested_by_name=(requested_by or "").strip() or actor.name or "Unknown",
            requested_by_email=email,
            source_record_number=source_record_number or source.record_number,
            target_record_number=target_record_number or target.record_number,
            status=TransferStatus.PENDING,
        )
        try:
            self.session.add(transfer)
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            current_app.logger.error(f"Error creating {self.kind} transfer request: {exc}")
            raise TransactionError(f"Failed to create transfer request: {exc}") from exc

        TransferMonitoring.record_request(self.kind)
        current_app.logger.info(
            f"{self.record_label} transfer {transfer.id} requested by user {actor.user_id}: "
            f"{source_id} -> {target_id}"
        )
        self.notifier.notify_requested(transfer)
        return transfer

    def approve(self, transfer_id: int, actor: Actor):
        """
        Approve a pending request and execute the merge atomically.

        Raises:
            NotFoundError: Unknown request, or a record vanished before merge.
            ConflictError: Request is not pending (including a lost race).
            TransactionError: Any database failure; nothing was persisted.
        """
        transfer = self.get(transfer_id)
        if not transfer.is_pending:
            raise ConflictError(f"Transfer request is already {transfer.status.value}")

        profile = self.profile
        started = time.perf_counter()
        try:
            self._claim(transfer_id, TransferStatus.APPROVED, approved_by=actor.user_id)
            self.session.refresh(transfer)
            summary = self.execute_merge(transfer, actor, profile=profile)
            transfer.executed_at = utcnow()
            transfer.execution_summary = summary.as_dict()
            self.session.commit()
        except ServiceError:
            self.session.rollback()
            TransferMonitoring.observe_execution(self.kind, "rejected", time.perf_counter() - started)
            raise
        except (SQLAlchemyError, ValueError) as exc:
            self.session.rollback()
            TransferMonitoring.observe_execution(self.kind, "failed", time.perf_counter() - started)
            current_app.logger.error(f"Error executing {self.kind} transfer {transfer_id}: {exc}", exc_info=True)
            raise TransactionError(f"Failed to execute transfer {transfer_id}: {exc}") from exc

        TransferMonitoring.observe_execution(self.kind, "succeeded", time.perf_counter() - started)
        TransferMonitoring.record_review(self.kind, TransferStatus.APPROVED.value)
        current_app.logger.info(
            f"{self.record_label} transfer {transfer_id} approved by user {actor.user_id}: "
            f"{transfer.execution_summary}"
        )

        source, target = self._load_pair(transfer)
        self.notifier.notify_approved(transfer, self.describe(source), self.describe(target))
        return transfer

    def deny(self, transfer_id: int, actor: Actor, denial_reason: str | None):
        """
        Deny a pending request, noting the reason on both records.

        Raises:
            ValidationError: Blank reason.
            NotFoundError / ConflictError: As for ``approve``.
            TransactionError: The update failed; nothing was persisted.
        """
        if not isinstance(denial_reason, str) or not denial_reason.strip():
            raise ValidationError("Denial reason is required")
        reason = denial_reason.strip()

        transfer = self.get(transfer_id)
        if not transfer.is_pending:
            raise ConflictError(f"Transfer request is already {transfer.status.value}")

        try:
            self._claim(transfer_id, TransferStatus.DENIED, approved_by=actor.user_id, denial_reason=reason)
            self.session.refresh(transfer)
            source, target = self._load_pair(transfer)
            for record in (source, target):
                if record is not None:
                    record.add_note(f"Transfer denied: {reason}", actor.user_id)
            self.session.commit()
        except ServiceError:
            self.session.rollback()
            raise
        except SQLAlchemyError as exc:
            self.session.rollback()
            current_app.logger.error(f"Error denying {self.kind} transfer {transfer_id}: {exc}", exc_info=True)
            raise TransactionError(f"Failed to deny transfer {transfer_id}: {exc}") from exc

        TransferMonitoring.record_review(self.kind, TransferStatus.DENIED.value)
        current_app.logger.info(f"{self.record_label} transfer {transfer_id} denied by user {actor.user_id}")

        source, target = self._load_pair(transfer)
        self.notifier.notify_denied(transfer, reason, self.describe(source), self.describe(target))
        return transfer

    # ------------------------------------------------------------------
    # Merge procedure
    # ------------------------------------------------------------------

    def execute_merge(self, transfer, actor: Actor, *, profile: TransferProfile | None = None) -> MergeSummary:
        """
        Run the merge steps inside the caller's transaction. Does not commit.

        Raises:
            NotFoundError: Source or target row is missing.
            ConflictError: Source is already archived.
            ValueError: A custom-fields payload is not a JSON object.
        """
        profile = profile or self.profile
        label = self.record_label.lower()

        source = self._lock_record(transfer.source_id)
        target = self._lock_record(transfer.target_id)
        if source is None or target is None:
            raise NotFoundError(f"Source or target {label} not found")
        if source.is_archived:
            raise ConflictError(f"Source {label} {source.id} is already archived")

        summary = apply_data_holes(
            source,
            target,
            profile.fill_fields,
            merge_custom=profile.merge_custom_fields,
            append_custom=profile.append_custom_fields,
        )

        for link in self.dependents(source, target):
            column = getattr(link.model, link.column)
            statement = update(link.model).where(column == source.id)
            for attr, value in link.scope.items():
                statement = statement.where(getattr(link.model, attr) == value)
            statement = statement.values({link.column: target.id, **link.extra_values})
            result = self.session.execute(statement.execution_options(synchronize_session=False))
            summary.repointed[link.name] = result.rowcount

        source.archive(ARCHIVE_REASON_TRANSFER)
        source.add_note(self.source_note(transfer), actor.user_id)
        target.add_note(self.target_note(transfer), actor.user_id)

        delay = timedelta(days=current_app.config.get("ARCHIVE_CLEANUP_DELAY_DAYS", 7))
        task = ScheduledTask.schedule(ARCHIVE_CLEANUP_TASK, {self.cleanup_key: source.id}, delay=delay)
        self.session.flush()
        summary.cleanup_task_id = task.id
        return summary

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _claim(self, transfer_id: int, status: TransferStatus, **values) -> None:
        """Move a pending request to ``status``; a lost race raises ConflictError."""
        statement = (
            update(self.transfer_model)
            .where(
                self.transfer_model.id == transfer_id,
                self.transfer_model.status == TransferStatus.PENDING,
            )
            .values(status=status, reviewed_at=utcnow(), **values)
            .execution_options(synchronize_session=False)
        )
        if self.session.execute(statement).rowcount == 0:
            raise ConflictError("Transfer request not found or already processed")

    def _lock_record(self, record_id: int):
        statement = (
            select(self.record_model)
            .where(self.record_model.id == record_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return self.session.execute(statement).scalar_one_or_none()

    def _load_pair(self, transfer):
        return (
            self.session.get(self.record_model, transfer.source_id),
            self.session.get(self.record_model, transfer.target_id),
        )

    def _record_ref(self, transfer, side: str) -> str:
        number = getattr(transfer, f"{side}_record_number")
        if number:
            return number
        return f"{self.record_label} #{getattr(transfer, f'{side}_id')}"

    def _normalize_requester_email(self, email: str | None) -> str | None:
        if email is None or not str(email).strip():
            return None
        try:
            result = validate_email(
                str(email).strip(),
                check_deliverability=current_app.config.get("EMAIL_VALIDATION_CHECK_DELIVERABILITY", False),
            )
        except EmailNotValidError as exc:
            raise ValidationError(f"Invalid requester email: {exc}") from exc
        return result.normalized


class OrganizationTransferService(TransferService):
    """Merges a duplicate organization into the surviving one."""

    kind = "organization"
    record_label = "Organization"
    record_model = Organization
    transfer_model = OrganizationTransfer
    template_type = ORGANIZATION_TRANSFER_REQUEST
    dashboard_path = "organizations"
    cleanup_key = "organization_id"

    def dependents(self, source, target) -> list[DependentLink]:
        return [
            DependentLink("hiring_managers", HiringManager, "organization_id"),
            DependentLink("jobs", Job, "organization_id"),
            DependentLink("leads", Lead, "organization_id"),
            DependentLink("documents", Document, "entity_id", scope={"entity_type": "organization"}),
        ]

    def describe(self, record) -> str:
        return record.name if record is not None else ""
