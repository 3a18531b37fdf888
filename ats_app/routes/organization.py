# ats_app/routes/organization.py

from http import HTTPStatus

from flask import jsonify

from ats_app.models import Organization
from ats_app.services.transfer_service import OrganizationTransferService
from ats_app.utils.permissions import api_login_required

from .transfers import register_transfer_routes


def register_organization_routes(app):
    """Register organization read endpoints and the organization transfer API"""

    @app.route("/api/organizations/<int:organization_id>", methods=["GET"])
    @api_login_required
    def api_get_organization(organization_id):
        """Organization detail; archived organizations stay readable"""
        organization = Organization.find_by_id(organization_id)
        if organization is None:
            return jsonify({"success": False, "message": "Organization not found"}), HTTPStatus.NOT_FOUND
        return jsonify({"success": True, "organization": organization.to_dict()})

    @app.route("/api/organizations/<int:organization_id>/notes", methods=["GET"])
    @api_login_required
    def api_get_organization_notes(organization_id):
        organization = Organization.find_by_id(organization_id)
        if organization is None:
            return jsonify({"success": False, "message": "Organization not found"}), HTTPStatus.NOT_FOUND
        return jsonify({"success": True, "notes": [note.to_dict() for note in organization.notes]})

    register_transfer_routes(
        app,
        url_prefix="/api/organizations/transfer",
        endpoint_prefix="organization_transfer",
        service_class=OrganizationTransferService,
    )
