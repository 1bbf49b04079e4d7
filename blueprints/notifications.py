# blueprints/notifications.py
from flask import Blueprint
from flask_login import login_required

from blueprints.helpers import action_response, apply_query, get_client, json_body, page_size, state_response
from controllers.notifications import NotificationsController

bp = Blueprint("notifications", __name__, url_prefix="/admin/notifications")


def _controller():
    return NotificationsController(get_client(), page_size=page_size())


@bp.route("", methods=["GET"])
@login_required
def list_notifications():
    return state_response(apply_query(_controller(), ("type",)).load())


@bp.route("", methods=["POST"])
@login_required
def send_notification():
    controller = _controller()
    return action_response(controller, controller.send(json_body()))


@bp.route("/bulk", methods=["POST"])
@login_required
def send_bulk():
    controller = _controller()
    return action_response(controller, controller.send_bulk(json_body()))


@bp.route("/<notification_id>", methods=["DELETE"])
@login_required
def delete_notification(notification_id):
    controller = _controller()
    return action_response(controller, controller.delete(notification_id))
