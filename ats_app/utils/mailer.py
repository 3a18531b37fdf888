# ats_app/utils/mailer.py

"""
SMTP mail transport used for transfer notifications and error alerts.
"""

import smtplib
from email.message import EmailMessage

from flask import current_app

from ats_app.services.errors import DependencyError


class MailDeliveryError(DependencyError):
    """Raised when a message cannot be handed to the SMTP server."""


def _as_list(value):
    if not value:
        return []
    if isinstance(value, str):
        return [value]
    return [item for item in value if item]


def build_message(to, subject, html=None, text=None, cc=None, bcc=None, sender=None):
    """Build an EmailMessage with an HTML alternative when ``html`` is given"""
    message = EmailMessage()
    message["Subject"] = subject or ""
    message["From"] = sender
    message["To"] = ", ".join(_as_list(to))
    if cc:
        message["Cc"] = ", ".join(_as_list(cc))
    if bcc:
        message["Bcc"] = ", ".join(_as_list(bcc))

    if html:
        message.set_content(text or "This message requires an HTML-capable mail client.")
        message.add_alternative(html, subtype="html")
    else:
        message.set_content(text or "")
    return message


def send_mail(to, subject, html=None, text=None, cc=None, bcc=None):
    """
    Send one message through the configured SMTP server.

    Raises:
        MailDeliveryError: If recipients or SMTP settings are missing, or the
            server rejects the message.
    """
    recipients = _as_list(to)
    if not recipients:
        raise MailDeliveryError("Missing recipient for outbound email")

    config = current_app.config
    if config.get("MAIL_SUPPRESS_SEND"):
        current_app.logger.info(f"Mail delivery suppressed: '{subject}' to {', '.join(recipients)}")
        return False

    server = config.get("MAIL_SERVER")
    if not server:
        raise MailDeliveryError("MAIL_SERVER is not configured")

    message = build_message(
        recipients, subject, html=html, text=text, cc=cc, bcc=bcc, sender=config.get("MAIL_FROM")
    )

    try:
        with smtplib.SMTP(server, config.get("MAIL_PORT", 587), timeout=config.get("MAIL_TIMEOUT_SECONDS", 10)) as smtp:
            if config.get("MAIL_USE_TLS", True):
                smtp.starttls()
            username = config.get("MAIL_USERNAME")
            if username:
                smtp.login(username, config.get("MAIL_PASSWORD") or "")
            smtp.send_message(message)
    except (smtplib.SMTPException, OSError) as exc:
        raise MailDeliveryError(f"SMTP delivery failed: {exc}") from exc

    current_app.logger.info(f"Sent email '{subject}' to {', '.join(recipients)}")
    return True
