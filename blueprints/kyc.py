# blueprints/kyc.py
from flask import Blueprint, jsonify, request
from flask_login import login_required

from admin_api.errors import ApiError
from blueprints.helpers import (
    action_response, apply_query, get_client, invalid_response, json_body, load_then, page_size,
    state_response, unauthorized_response,
)
from controllers.kyc import KYCController
from utils import clean_reason

bp = Blueprint("kyc", __name__, url_prefix="/admin/kyc")


def _controller():
    return KYCController(get_client(), page_size=page_size(),
                         status=request.args.get("status", "pending"))


@bp.route("", methods=["GET"])
@login_required
def list_kyc():
    controller = apply_query(_controller())
    controller.set_document_filter(request.args.get("documentType"))
    return state_response(controller.load())


@bp.route("/export", methods=["GET"])
@login_required
def export_kyc():
    controller = apply_query(_controller()).load()
    if controller.unauthorized:
        return unauthorized_response()
    return jsonify({"success": controller.error is None, "rows": controller.export()}), 200


@bp.route("/<kyc_id>", methods=["GET"])
@login_required
def kyc_detail(kyc_id):
    controller = _controller()
    try:
        record = controller.open(kyc_id)
    except ApiError as e:
        if e.is_unauthorized:
            return unauthorized_response()
        return jsonify({"success": False, "message": str(e)}), 502
    if record is None:
        return jsonify({"success": False, "message": "KYC request not found"}), 404
    return jsonify({"success": True, "kyc": record.to_dict()}), 200


@bp.route("/<kyc_id>/approve", methods=["PUT"])
@login_required
def approve_kyc(kyc_id):
    controller = _controller()
    return load_then(controller, lambda: controller.approve(kyc_id))


@bp.route("/<kyc_id>/reject", methods=["PUT"])
@login_required
def reject_kyc(kyc_id):
    reason = clean_reason(json_body().get("reason"))
    if reason is None:
        return invalid_response("Please provide a rejection reason")
    controller = _controller()
    return load_then(controller, lambda: controller.reject(kyc_id, reason))
