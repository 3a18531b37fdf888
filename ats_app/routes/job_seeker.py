# ats_app/routes/job_seeker.py

from http import HTTPStatus

from flask import jsonify

from ats_app.models import JobSeeker
from ats_app.services.job_seeker_transfer_service import JobSeekerTransferService
from ats_app.utils.permissions import api_login_required

from .transfers import register_transfer_routes


def register_job_seeker_routes(app):
    """Register job seeker read endpoints and the job seeker transfer API"""

    @app.route("/api/job-seekers/<int:job_seeker_id>", methods=["GET"])
    @api_login_required
    def api_get_job_seeker(job_seeker_id):
        job_seeker = JobSeeker.find_by_id(job_seeker_id)
        if job_seeker is None:
            return jsonify({"success": False, "message": "Job seeker not found"}), HTTPStatus.NOT_FOUND

        data = job_seeker.to_dict()
        data["notes"] = [note.to_dict() for note in job_seeker.notes]
        return jsonify({"success": True, "job_seeker": data})

    register_transfer_routes(
        app,
        url_prefix="/api/job-seekers/transfer",
        endpoint_prefix="job_seeker_transfer",
        service_class=JobSeekerTransferService,
    )
