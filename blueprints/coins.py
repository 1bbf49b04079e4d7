# blueprints/coins.py
from flask import Blueprint
from flask_login import login_required

from blueprints.helpers import action_response, apply_query, get_client, json_body, page_size, state_response
from controllers.coins import CoinManagementController

bp = Blueprint("coins", __name__, url_prefix="/admin/coins")


def _controller():
    return CoinManagementController(get_client(), page_size=page_size())


@bp.route("", methods=["GET"])
@login_required
def coin_overview():
    return state_response(apply_query(_controller(), ("type", "userId", "startDate", "endDate")).load())


@bp.route("/adjust", methods=["POST"])
@login_required
def adjust_coins():
    data = json_body()
    controller = _controller()
    return action_response(controller, controller.adjust(
        data.get("userId"), data.get("amount"), data.get("action"), data.get("reason")
    ))


@bp.route("/packages", methods=["POST"])
@login_required
def create_package():
    controller = _controller()
    return action_response(controller, controller.create_package(json_body()))


@bp.route("/packages/<package_id>", methods=["PUT"])
@login_required
def update_package(package_id):
    controller = _controller()
    return action_response(controller, controller.update_package(package_id, json_body()))


@bp.route("/packages/<package_id>", methods=["DELETE"])
@login_required
def delete_package(package_id):
    controller = _controller()
    return action_response(controller, controller.delete_package(package_id))
