# blueprints/users.py
import logging

from flask import Blueprint, jsonify
from flask_login import login_required

from admin_api.errors import ApiError
from blueprints.helpers import (
    action_response, apply_query, get_client, json_body, load_then, page_size, state_response,
    unauthorized_response,
)
from controllers.users import UsersController

logger = logging.getLogger(__name__)

bp = Blueprint("users", __name__, url_prefix="/admin/users")

USER_FILTERS = ("status", "kycStatus", "sortBy", "sortOrder")


def _controller():
    return UsersController(get_client(), page_size=page_size())


@bp.route("", methods=["GET"])
@login_required
def list_users():
    controller = apply_query(_controller(), USER_FILTERS)
    return state_response(controller.load())


@bp.route("", methods=["POST"])
@login_required
def create_user():
    controller = _controller()
    return action_response(controller, controller.create(json_body()))


@bp.route("/<user_id>", methods=["GET"])
@login_required
def user_detail(user_id):
    controller = _controller().load()
    if controller.unauthorized:
        return unauthorized_response()
    try:
        user = controller.open(user_id)
    except ApiError as e:
        if e.is_unauthorized:
            return unauthorized_response()
        return jsonify({"success": False, "message": str(e)}), e.status_code if e.status_code == 404 else 502
    if user is None:
        return jsonify({"success": False, "message": "User not found"}), 404
    return jsonify({"success": True, "user": controller.serialize_item(user)}), 200


@bp.route("/<user_id>", methods=["PUT"])
@login_required
def update_user(user_id):
    controller = _controller()
    return action_response(controller, controller.update(user_id, json_body()))


@bp.route("/<user_id>", methods=["DELETE"])
@login_required
def delete_user(user_id):
    controller = _controller()
    return action_response(controller, controller.delete(user_id))


@bp.route("/<user_id>/suspend", methods=["PUT"])
@login_required
def suspend_user(user_id):
    controller = _controller()
    return action_response(controller, controller.suspend(user_id, json_body().get("reason")))


@bp.route("/<user_id>/activate", methods=["PUT"])
@login_required
def activate_user(user_id):
    controller = _controller()
    return action_response(controller, controller.activate(user_id))


@bp.route("/<user_id>/coins", methods=["POST"])
@login_required
def change_coins(user_id):
    data = json_body()
    controller = _controller()
    return load_then(controller, lambda: controller.change_coins(
        user_id, data.get("amount"), data.get("action"), data.get("reason")
    ))
