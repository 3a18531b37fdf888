# ats_app/models/email_template.py

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from .base import BaseModel, db

ORGANIZATION_TRANSFER_REQUEST = "ORGANIZATION_TRANSFER_REQUEST"
HIRING_MANAGER_TRANSFER_REQUEST = "HIRING_MANAGER_TRANSFER_REQUEST"
JOB_SEEKER_TRANSFER_REQUEST = "JOB_SEEKER_TRANSFER_REQUEST"


class EmailTemplate(BaseModel):
    """Admin-editable email template; subject and body use ``{{ placeholder }}`` syntax"""

    __tablename__ = "email_templates"

    id = db.Column(db.Integer, primary_key=True)
    template_name = db.Column(db.String(255), nullable=False)
    subject = db.Column(db.String(255), nullable=False)
    body = db.Column(db.Text, nullable=False)
    type = db.Column(db.String(80), nullable=False, unique=True, index=True)

    def __repr__(self):
        return f"<EmailTemplate {self.type}>"

    @staticmethod
    def get_by_type(template_type):
        """Latest template for ``template_type`` or None"""
        try:
            return (
                EmailTemplate.query.filter_by(type=template_type).order_by(EmailTemplate.id.desc()).first()
            )
        except SQLAlchemyError as e:
            current_app.logger.error(f"Database error loading email template {template_type}: {str(e)}")
            return None
