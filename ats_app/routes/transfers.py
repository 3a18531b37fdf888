# ats_app/routes/transfers.py

"""
JSON endpoints for the transfer workflow, shared by every record kind.
"""

from http import HTTPStatus

from flask import current_app, jsonify, request

from ats_app.services.errors import ServiceError
from ats_app.utils.permissions import api_login_required, current_actor


def service_error_response(exc):
    """Translate a ServiceError into the standard JSON error body"""
    body = {"success": False, "message": exc.message}
    if exc.status_code >= HTTPStatus.INTERNAL_SERVER_ERROR and current_app.config.get("ENV_NAME") != "production":
        cause = exc.__cause__
        body["error"] = str(cause) if cause is not None else exc.message
    return jsonify(body), exc.status_code


def _json_body():
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else None


def register_transfer_routes(app, *, url_prefix, endpoint_prefix, service_class):
    """
    Register create/list/get/approve/deny endpoints under ``url_prefix``.

    ``service_class`` is instantiated per request so it binds to the
    request-scoped session.
    """
    source_key = service_class.transfer_model.source_field
    target_key = service_class.transfer_model.target_field
    label = service_class.record_label

    def create_transfer():
        data = _json_body()
        if data is None:
            return jsonify({"success": False, "message": "Request body must be a JSON object"}), HTTPStatus.BAD_REQUEST

        try:
            transfer = service_class().create(
                data.get(source_key),
                data.get(target_key),
                current_actor(),
                requested_by=data.get("requested_by"),
                requested_by_email=data.get("requested_by_email"),
                source_record_number=data.get("source_record_number"),
                target_record_number=data.get("target_record_number"),
            )
        except ServiceError as exc:
            return service_error_response(exc)

        return (
            jsonify(
                {
                    "success": True,
                    "message": f"{label} transfer request created successfully",
                    "transfer": transfer.to_dict(),
                }
            ),
            HTTPStatus.CREATED,
        )

    def list_transfers():
        try:
            transfers = service_class().list(request.args.get("status"))
        except ServiceError as exc:
            return service_error_response(exc)
        return jsonify({"success": True, "transfers": [transfer.to_dict() for transfer in transfers]})

    def get_transfer(transfer_id):
        try:
            transfer = service_class().get(transfer_id)
        except ServiceError as exc:
            return service_error_response(exc)
        return jsonify({"success": True, "transfer": transfer.to_dict()})

    def approve_transfer(transfer_id):
        try:
            transfer = service_class().approve(transfer_id, current_actor())
        except ServiceError as exc:
            current_app.logger.warning(f"{label} transfer {transfer_id} approval rejected: {exc.message}")
            return service_error_response(exc)

        return jsonify(
            {
                "success": True,
                "message": f"{label} transfer approved and executed successfully",
                "transfer": transfer.to_dict(),
            }
        )

    def deny_transfer(transfer_id):
        data = _json_body() or {}
        try:
            transfer = service_class().deny(transfer_id, current_actor(), data.get("denial_reason"))
        except ServiceError as exc:
            return service_error_response(exc)

        return jsonify(
            {
                "success": True,
                "message": f"{label} transfer denied",
                "transfer": transfer.to_dict(),
            }
        )

    routes = [
        ("", "create", create_transfer, ["POST"]),
        ("", "list", list_transfers, ["GET"]),
        ("/<int:transfer_id>", "get", get_transfer, ["GET"]),
        ("/<int:transfer_id>/approve", "approve", approve_transfer, ["POST"]),
        ("/<int:transfer_id>/deny", "deny", deny_transfer, ["POST"]),
    ]
    for suffix, action, view, methods in routes:
        app.add_url_rule(
            f"{url_prefix}{suffix}",
            f"{endpoint_prefix}_{action}",
            api_login_required(view),
            methods=methods,
        )
