# blueprints/settings.py
from flask import Blueprint, jsonify
from flask_login import login_required

from blueprints.helpers import action_response, get_client, json_body, unauthorized_response
from controllers.settings import SettingsController

bp = Blueprint("settings", __name__, url_prefix="/admin/settings")


def _loaded(controller):
    if controller.unauthorized:
        return unauthorized_response()
    status = 200 if controller.error is None else 502
    return jsonify({"success": controller.error is None, "message": controller.error,
                    "data": controller.to_dict()}), status


@bp.route("", methods=["GET"])
@login_required
def get_settings():
    return _loaded(SettingsController(get_client()).load())


@bp.route("", methods=["PUT"])
@login_required
def update_settings():
    controller = SettingsController(get_client())
    return action_response(controller, controller.update(json_body().get("settings") or json_body()))


@bp.route("/social", methods=["GET"])
@login_required
def get_social_links():
    return _loaded(SettingsController(get_client()).load_social_links())


@bp.route("/social", methods=["PUT"])
@login_required
def update_social_links():
    controller = SettingsController(get_client())
    body = json_body()
    return action_response(controller, controller.update_social_links(body.get("socialLinks") or body))
