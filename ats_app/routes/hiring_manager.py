# ats_app/routes/hiring_manager.py

from http import HTTPStatus

from flask import jsonify

from ats_app.models import HiringManager
from ats_app.services.hiring_manager_transfer_service import HiringManagerTransferService
from ats_app.utils.permissions import api_login_required

from .transfers import register_transfer_routes


def register_hiring_manager_routes(app):
    """Register hiring manager read endpoints and the hiring manager transfer API"""

    @app.route("/api/hiring-managers/<int:hiring_manager_id>", methods=["GET"])
    @api_login_required
    def api_get_hiring_manager(hiring_manager_id):
        hiring_manager = HiringManager.find_by_id(hiring_manager_id)
        if hiring_manager is None:
            return jsonify({"success": False, "message": "Hiring manager not found"}), HTTPStatus.NOT_FOUND

        data = hiring_manager.to_dict()
        data["notes"] = [note.to_dict() for note in hiring_manager.notes]
        return jsonify({"success": True, "hiring_manager": data})

    register_transfer_routes(
        app,
        url_prefix="/api/hiring-managers/transfer",
        endpoint_prefix="hiring_manager_transfer",
        service_class=HiringManagerTransferService,
    )
