# blueprints/promo_codes.py
from flask import Blueprint, current_app, jsonify
from flask_login import current_user, login_required

from blueprints.helpers import (
    action_response, apply_query, get_client, json_body, load_then, page_size, state_response,
)
from controllers.promo_codes import PromoCodesController, SearchGate, generate_code

bp = Blueprint("promo_codes", __name__, url_prefix="/admin/promo-codes")

search_gate = SearchGate()


def _controller():
    return PromoCodesController(get_client(), page_size=page_size())


@bp.route("", methods=["GET"])
@login_required
def list_promo_codes():
    controller = apply_query(_controller(), ("status", "type"))
    if controller.search.strip():
        delay = current_app.config.get("SEARCH_DEBOUNCE_SECONDS", 0.5)
        if not search_gate.wait(current_user.get_id(), delay):
            return jsonify({"success": True, "superseded": True,
                            "message": "A newer search replaced this one"}), 200
    return state_response(controller.load())


@bp.route("/generate-code", methods=["GET"])
@login_required
def new_code():
    return jsonify({"success": True, "code": generate_code()}), 200


@bp.route("", methods=["POST"])
@login_required
def create_promo_code():
    controller = _controller()
    return action_response(controller, controller.create(json_body()))


@bp.route("/<promo_id>", methods=["PUT"])
@login_required
def update_promo_code(promo_id):
    controller = _controller()
    return action_response(controller, controller.update(promo_id, json_body()))


@bp.route("/<promo_id>/toggle-status", methods=["PUT"])
@login_required
def toggle_promo_code(promo_id):
    controller = _controller()
    return load_then(controller, lambda: controller.toggle(promo_id))


@bp.route("/<promo_id>", methods=["DELETE"])
@login_required
def delete_promo_code(promo_id):
    controller = _controller()
    return action_response(controller, controller.delete(promo_id))
