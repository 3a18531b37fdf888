"""
Email notifications for the transfer workflow.

Every send is best-effort: delivery or template lookup failures are logged and
counted, never raised, so a review decision is never undone by a mail outage.
"""

from __future__ import annotations

from typing import Callable

from flask import current_app, render_template
from sqlalchemy.exc import SQLAlchemyError

from config.monitoring import TransferMonitoring
from ats_app.models import EmailTemplate
from ats_app.services.errors import DependencyError
from ats_app.utils.mailer import send_mail
from ats_app.utils.template_renderer import newlines_to_breaks, render_placeholders

# Link placeholders are built by us and must not be escaped
LINK_KEYS = ("approvalUrl", "denyUrl")


class TransferNotifier:
    """Builds and sends the request / approval / denial emails for one record kind."""

    def __init__(
        self,
        *,
        kind: str,
        record_label: str,
        template_type: str,
        dashboard_path: str,
        mailer: Callable[..., object] | None = None,
    ):
        self.kind = kind
        self.record_label = record_label
        self.template_type = template_type
        self.dashboard_path = dashboard_path
        self.mailer = mailer

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def notify_requested(self, transfer) -> bool:
        """Email the reviewer mailbox with approve/deny links."""
        return self._deliver("request", transfer, lambda: self._send_request(transfer))

    def notify_approved(self, transfer, source_name: str = "", target_name: str = "") -> bool:
        """Tell the requester the merge was executed."""
        if not transfer.requested_by_email:
            return False
        return self._deliver(
            "approval",
            transfer,
            lambda: self._send_outcome("emails/transfer_approved.html", "Approved", transfer, source_name, target_name),
        )

    def notify_denied(self, transfer, denial_reason: str, source_name: str = "", target_name: str = "") -> bool:
        """Tell the requester the request was denied and why."""
        if not transfer.requested_by_email:
            return False
        return self._deliver(
            "denial",
            transfer,
            lambda: self._send_outcome(
                "emails/transfer_denied.html",
                "Denied",
                transfer,
                source_name,
                target_name,
                denial_reason=denial_reason,
            ),
        )

    def review_links(self, transfer) -> dict[str, str]:
        base_url = current_app.config.get("FRONTEND_URL", "").rstrip("/")
        prefix = f"{base_url}/dashboard/{self.dashboard_path}/transfer/{transfer.id}"
        return {"approvalUrl": f"{prefix}/approve", "denyUrl": f"{prefix}/deny"}

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _deliver(self, notification: str, transfer, send: Callable[[], object]) -> bool:
        try:
            send()
            return True
        except (DependencyError, SQLAlchemyError) as exc:
            TransferMonitoring.record_notification_failure(self.kind, notification)
            current_app.logger.error(
                f"Error sending {self.kind} transfer {notification} email for transfer {transfer.id}: {exc}"
            )
            return False

    def _mail(self, **message):
        mailer = self.mailer or send_mail
        return mailer(**message)

    def _subject(self, verb: str, transfer) -> str:
        return (
            f"{self.record_label} Transfer {verb}: "
            f"{transfer.source_record_number or ''} → {transfer.target_record_number or ''}"
        )

    def _send_request(self, transfer):
        created = transfer.created_at.strftime("%Y-%m-%d %H:%M") if transfer.created_at else ""
        variables = {
            "requestedBy": transfer.requested_by_name or "Unknown",
            "requestedByEmail": transfer.requested_by_email or "",
            "sourceRecordNumber": transfer.source_record_number or "",
            "targetRecordNumber": transfer.target_record_number or "",
            "requestDate": created,
            **self.review_links(transfer),
        }

        template = EmailTemplate.get_by_type(self.template_type)
        if template:
            subject = render_placeholders(template.subject, variables, LINK_KEYS)
            html = newlines_to_breaks(render_placeholders(template.body, variables, LINK_KEYS))
        else:
            subject = self._subject("Request", transfer)
            html = render_template(
                "emails/transfer_request.html",
                record_label=self.record_label,
                transfer_id=transfer.id,
                **variables,
            )

        self._mail(to=current_app.config.get("TRANSFER_REVIEWER_EMAIL"), subject=subject, html=html)

    def _send_outcome(self, template_name, verb, transfer, source_name, target_name, denial_reason=None):
        html = render_template(
            template_name,
            record_label=self.record_label,
            source_name=source_name,
            target_name=target_name,
            source_record_number=transfer.source_record_number or "",
            target_record_number=transfer.target_record_number or "",
            denial_reason=denial_reason,
        )
        self._mail(to=transfer.requested_by_email, subject=self._subject(verb, transfer), html=html)
