# blueprints/banners.py
from flask import Blueprint, current_app, request
from flask_login import login_required

from blueprints.helpers import action_response, get_client, load_then, state_response
from controllers.banners import BannersController

bp = Blueprint("banners", __name__, url_prefix="/admin/banners")


def _controller():
    return BannersController(get_client(), max_active=current_app.config.get("MAX_ACTIVE_BANNERS", 2))


def _image():
    upload = request.files.get("image")
    if upload is None:
        return None
    return {"image": (upload.filename, upload.stream, upload.mimetype or "application/octet-stream")}


@bp.route("", methods=["GET"])
@login_required
def list_banners():
    return state_response(_controller().load())


@bp.route("", methods=["POST"])
@login_required
def create_banner():
    fields, image = request.form.to_dict(), _image()
    controller = _controller()
    return load_then(controller, lambda: controller.create(fields, image))


@bp.route("/<banner_id>", methods=["PUT"])
@login_required
def update_banner(banner_id):
    fields, image = request.form.to_dict(), _image()
    controller = _controller()
    return load_then(controller, lambda: controller.update(banner_id, fields, image))


@bp.route("/<banner_id>/activate", methods=["PUT"])
@login_required
def activate_banner(banner_id):
    controller = _controller()
    return load_then(controller, lambda: controller.activate(banner_id))


@bp.route("/<banner_id>/deactivate", methods=["PUT"])
@login_required
def deactivate_banner(banner_id):
    controller = _controller()
    return load_then(controller, lambda: controller.deactivate(banner_id))


@bp.route("/<banner_id>", methods=["DELETE"])
@login_required
def delete_banner(banner_id):
    controller = _controller()
    return action_response(controller, controller.delete(banner_id))
