# scripts/init_database.py

"""
Database initialization script.
This script creates all tables and seeds default data:
- Default transfer request email templates (editable by admins afterwards)

Pass --reset-templates to overwrite templates that already exist.
"""

import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app import app
from ats_app.models import (
    HIRING_MANAGER_TRANSFER_REQUEST,
    JOB_SEEKER_TRANSFER_REQUEST,
    ORGANIZATION_TRANSFER_REQUEST,
    EmailTemplate,
    db,
)

REQUEST_BODY = """A {label} transfer request has been submitted.

Requested By: {{{{requestedBy}}}} ({{{{requestedByEmail}}}})
Source {label}: {{{{sourceRecordNumber}}}}
Target {label}: {{{{targetRecordNumber}}}}
Request Date: {{{{requestDate}}}}

<a href="{{{{approvalUrl}}}}">Approve Transfer</a> | <a href="{{{{denyUrl}}}}">Deny Transfer</a>"""


def default_email_templates():
    """Default admin-editable templates keyed by type"""
    templates = []
    for template_type, label in (
        (ORGANIZATION_TRANSFER_REQUEST, "Organization"),
        (HIRING_MANAGER_TRANSFER_REQUEST, "Hiring Manager"),
        (JOB_SEEKER_TRANSFER_REQUEST, "Job Seeker"),
    ):
        templates.append(
            {
                "type": template_type,
                "template_name": f"{label} Transfer Request",
                "subject": f"{label} Transfer Request: {{{{sourceRecordNumber}}}} → {{{{targetRecordNumber}}}}",
                "body": REQUEST_BODY.format(label=label),
            }
        )
    return templates


def create_default_email_templates(reset=False):
    """Create missing templates; with ``reset`` overwrite existing ones"""
    for template_data in default_email_templates():
        existing = EmailTemplate.query.filter_by(type=template_data["type"]).first()
        if existing and not reset:
            print(f"Email template {template_data['type']} already exists")
            continue

        if existing:
            _, error = existing.safe_update(**template_data)
            action = "reset"
        else:
            _, error = EmailTemplate.safe_create(**template_data)
            action = "created"

        if error:
            print(f"Error seeding email template {template_data['type']}: {error}")
            sys.exit(1)
        print(f"Email template {template_data['type']} {action}")


def init_database(reset_templates=False):
    with app.app_context():
        db.create_all()
        print("Database tables created")
        create_default_email_templates(reset=reset_templates)


if __name__ == "__main__":
    init_database(reset_templates="--reset-templates" in sys.argv[1:])
