# blueprints/referrals.py
from flask import Blueprint, jsonify
from flask_login import login_required

from admin_api.errors import ApiError
from blueprints.helpers import (
    action_response, apply_query, get_client, json_body, page_size, state_response, unauthorized_response,
)
from controllers.referrals import ReferralsController

bp = Blueprint("referrals", __name__, url_prefix="/admin/referrals")


def _controller():
    return ReferralsController(get_client(), page_size=page_size())


@bp.route("", methods=["GET"])
@login_required
def list_referrals():
    return state_response(apply_query(_controller(), ("type", "status")).load())


@bp.route("/user/<user_id>/tree", methods=["GET"])
@login_required
def referral_tree(user_id):
    controller = _controller()
    try:
        tree = controller.load_tree(user_id)
    except ApiError as e:
        if e.is_unauthorized:
            return unauthorized_response()
        return jsonify({"success": False, "message": str(e)}), 502
    return jsonify({"success": True, "tree": tree}), 200


@bp.route("/settings", methods=["PUT"])
@login_required
def update_settings():
    controller = _controller()
    return action_response(controller, controller.update_settings(json_body()))
