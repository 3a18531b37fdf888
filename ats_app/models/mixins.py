# ats_app/models/mixins.py

import json

from sqlalchemy import Enum

from .base import db, utcnow
from .enums import RecordStatus


def decode_json_map(value):
    """
    Decode a stored custom-fields value into a dict.

    Accepts ``None``/``""`` (empty map), an already-decoded mapping, or a
    JSON-encoded object string. Anything else raises ``ValueError``.
    """
    if value is None or value == "":
        return {}
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except json.JSONDecodeError as exc:
            raise ValueError(f"custom fields are not valid JSON: {exc}") from exc
    if not isinstance(value, dict):
        raise ValueError(f"custom fields must be a JSON object, got {type(value).__name__}")
    return dict(value)


class MergeableRecordMixin:
    """Columns and helpers shared by records that can be transferred into a duplicate"""

    record_number = db.Column(db.String(50), nullable=True, index=True)
    status = db.Column(
        Enum(RecordStatus, name="record_status_enum"),
        default=RecordStatus.ACTIVE,
        nullable=False,
        index=True,
    )
    archived_at = db.Column(db.DateTime(timezone=True), nullable=True)
    archive_reason = db.Column(db.String(100), nullable=True)
    custom_fields = db.Column(db.JSON, nullable=True)

    @property
    def is_archived(self):
        return self.status == RecordStatus.ARCHIVED

    def archive(self, reason):
        self.status = RecordStatus.ARCHIVED
        self.archived_at = utcnow()
        self.archive_reason = reason

    def get_custom_fields(self):
        """Custom fields for display; undecodable payloads read as empty"""
        try:
            return decode_json_map(self.custom_fields)
        except ValueError:
            return {}

    def _base_dict(self):
        return {
            "id": self.id,
            "record_number": self.record_number,
            "status": self.status.value if self.status else None,
            "archived_at": self.archived_at.isoformat() if self.archived_at else None,
            "archive_reason": self.archive_reason,
            "custom_fields": self.get_custom_fields(),
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
