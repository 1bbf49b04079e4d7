#======================================================================================
#
# ADMIN DASHBOARD, HEALTH AND CONSOLE SHELL
#
#======================================================================================
import logging

from flask import Blueprint, jsonify, request
from flask_login import current_user, login_required

from admin_api.errors import ApiError
from admin_api.normalizers import pick
from blueprints.helpers import get_client, unauthorized_response
from controllers.dashboard import DashboardController
from shell import navigation

logger = logging.getLogger(__name__)

admin_bp = Blueprint("admin", __name__, url_prefix="/admin")


@admin_bp.route("/dashboard", methods=["GET"])
@login_required
def dashboard():
    try:
        controller = DashboardController(get_client(), period=request.args.get("period", "week"))
    except ValueError as e:
        return jsonify({"success": False, "message": str(e)}), 400

    controller.load()
    if controller.unauthorized:
        return unauthorized_response()
    status = 200 if controller.error is None else 502
    return jsonify({"success": controller.error is None, "message": controller.error,
                    "data": controller.to_dict()}), status


@admin_bp.route("/health", methods=["GET"])
@login_required
def health():
    try:
        body = get_client().get_system_health()
    except ApiError as e:
        if e.is_unauthorized:
            return unauthorized_response()
        logger.error(f"Health check failed: {e}")
        return jsonify({"success": False, "message": str(e)}), 502
    return jsonify({"success": True, "health": pick(body, "health") or {}}), 200


@admin_bp.route("/shell", methods=["GET"])
@login_required
def shell():
    """Sidebar and operator details; badge counts come from the dashboard stats."""
    controller = DashboardController(get_client()).load()
    if controller.unauthorized:
        return unauthorized_response()
    return jsonify({
        "success": True,
        "admin": current_user.to_dict(),
        "navigation": navigation(controller.badges(), request.args.get("active")),
    }), 200
