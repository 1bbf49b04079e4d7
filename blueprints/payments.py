# blueprints/payments.py
from flask import Blueprint, jsonify, request
from flask_login import login_required

from blueprints.helpers import (
    action_response, apply_query, get_client, invalid_response, json_body, load_then, page_size,
    state_response, unauthorized_response,
)
from controllers.payments import PaymentsController
from utils import clean_reason

bp = Blueprint("payments", __name__, url_prefix="/admin/payments")


def _controller():
    return PaymentsController(get_client(), page_size=page_size(),
                              status=request.args.get("status", "pending"))


@bp.route("", methods=["GET"])
@login_required
def list_payments():
    return state_response(apply_query(_controller()).load())


@bp.route("/<payment_id>/approve", methods=["PUT"])
@login_required
def approve_payment(payment_id):
    controller = _controller()
    return load_then(controller, lambda: controller.approve(payment_id))


@bp.route("/<payment_id>/reject", methods=["PUT"])
@login_required
def reject_payment(payment_id):
    reason = clean_reason(json_body().get("reason"))
    if reason is None:
        return invalid_response("Please provide a rejection reason")
    controller = _controller()
    return load_then(controller, lambda: controller.reject(payment_id, reason))


@bp.route("/settings", methods=["GET"])
@login_required
def payment_settings():
    controller = _controller()
    ok, message = controller.load_settings()
    if controller.unauthorized:
        return unauthorized_response()
    if not ok:
        return jsonify({"success": False, "message": message}), 502
    return jsonify({"success": True, "settings": controller.payment_settings}), 200


@bp.route("/settings", methods=["PUT"])
@login_required
def update_payment_settings():
    controller = _controller()
    return action_response(controller, controller.update_settings(json_body()))


@bp.route("/upload-qr", methods=["POST"])
@login_required
def upload_qr():
    upload = request.files.get("qrCode")
    controller = _controller()
    if upload is None:
        return action_response(controller, controller.upload_qr(None, None))
    return action_response(controller, controller.upload_qr(
        upload.filename, upload.stream, upload.mimetype or "image/png"
    ))
