# ats_app/utils/error_handler.py

"""
Operator alerts for unhandled errors, delivered by email and/or Slack with a
per-error hourly rate limit. Alert delivery never raises.
"""

import smtplib
import traceback
from datetime import datetime, timedelta, timezone

import requests
from flask import current_app, has_request_context, request

from ats_app.utils.mailer import build_message

DEFAULT_RATE_LIMIT = 5


class ErrorAlertingSystem:
    """Sends rate-limited alerts for exceptions to the configured channels"""

    def __init__(self, app=None):
        self.app = app
        self.error_counts = {}
        self.alert_methods = []
        self.rate_limits = {}
        if app is not None:
            self.configure(app)

    def configure(self, app):
        self.app = app
        self.alert_methods = []
        if app.config.get("ENABLE_EMAIL_ALERTS"):
            self.alert_methods.append("email")
        if app.config.get("ENABLE_SLACK_ALERTS"):
            self.alert_methods.append("slack")
        self.rate_limits = {
            "email": app.config.get("EMAIL_ALERT_RATE_LIMIT", DEFAULT_RATE_LIMIT),
            "slack": app.config.get("SLACK_ALERT_RATE_LIMIT", DEFAULT_RATE_LIMIT),
        }

    def should_send_alert(self, alert_type, error_key):
        """Record an attempt and report whether it is within the hourly limit"""
        limit = self.rate_limits.get(alert_type, DEFAULT_RATE_LIMIT)
        now = datetime.now(timezone.utc)
        cutoff = now - timedelta(hours=1)
        recent = [sent for sent in self.error_counts.get(error_key, []) if sent > cutoff]
        if len(recent) >= limit:
            self.error_counts[error_key] = recent
            return False
        recent.append(now)
        self.error_counts[error_key] = recent
        return True

    def send_error_alert(self, error, context=None):
        context = context or {}
        endpoint = context.get("endpoint") or "unknown"
        error_key = f"{type(error).__name__}_{endpoint}"

        for method in self.alert_methods:
            if not self.should_send_alert(method, f"{method}:{error_key}"):
                continue
            if method == "email":
                self._send_email_alert(error, context)
            elif method == "slack":
                self._send_slack_alert(error, context)

    def _summary(self, error, context):
        app_name = self.app.config.get("APP_NAME", "ATS Transfers") if self.app else "ATS Transfers"
        lines = [f"[{app_name}] {type(error).__name__}: {error}"]
        for key, value in sorted(context.items()):
            lines.append(f"{key}: {value}")
        return "\n".join(lines)

    def _send_email_alert(self, error, context):
        config = self.app.config
        recipients = [email for email in config.get("ADMIN_EMAILS") or [] if email]
        server = config.get("MAIL_SERVER")
        if not server or not recipients:
            current_app.logger.warning("Email alerts enabled but MAIL_SERVER or ADMIN_EMAILS is missing")
            return

        body = self._summary(error, context) + "\n\n" + "".join(
            traceback.format_exception(type(error), error, error.__traceback__)
        )
        message = build_message(
            recipients,
            f"[{config.get('APP_NAME', 'ATS Transfers')}] Error: {type(error).__name__}",
            text=body,
            sender=config.get("MAIL_FROM"),
        )
        try:
            with smtplib.SMTP(server, config.get("MAIL_PORT", 587), timeout=config.get("MAIL_TIMEOUT_SECONDS", 10)) as smtp:
                if config.get("MAIL_USE_TLS", True):
                    smtp.starttls()
                if config.get("MAIL_USERNAME"):
                    smtp.login(config.get("MAIL_USERNAME"), config.get("MAIL_PASSWORD") or "")
                smtp.send_message(message)
        except (smtplib.SMTPException, OSError) as e:
            current_app.logger.error(f"Failed to send email alert: {str(e)}")

    def _send_slack_alert(self, error, context):
        webhook_url = self.app.config.get("SLACK_WEBHOOK_URL")
        if not webhook_url:
            current_app.logger.warning("Slack alerts enabled but SLACK_WEBHOOK_URL is missing")
            return
        try:
            response = requests.post(webhook_url, json={"text": self._summary(error, context)}, timeout=10)
            response.raise_for_status()
        except requests.RequestException as e:
            current_app.logger.error(f"Failed to send Slack alert: {str(e)}")


error_alerter = ErrorAlertingSystem()


def init_error_alerting(app):
    """Configure the shared alerter from app config; the 500 handler uses it"""
    error_alerter.configure(app)
    app.extensions["error_alerter"] = error_alerter
    return error_alerter


def alert_unhandled_error(error):
    """Send an alert for an unhandled request error when alerting is enabled"""
    if not current_app.config.get("ERROR_ALERTING_ENABLED", False):
        return
    context = {"timestamp": datetime.now(timezone.utc).isoformat()}
    if has_request_context():
        context.update({"endpoint": request.path, "method": request.method})
    error_alerter.send_error_alert(error, context)
