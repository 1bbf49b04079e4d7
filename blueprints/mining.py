# blueprints/mining.py
from flask import Blueprint, current_app
from flask_login import login_required

from blueprints.helpers import (
    action_response, apply_query, get_client, invalid_response, json_body, load_then, page_size,
    state_response,
)
from controllers.mining import MiningController

bp = Blueprint("mining", __name__, url_prefix="/admin/mining")


def _controller():
    return MiningController(get_client(), page_size=page_size(),
                            cycle_hours=current_app.config.get("DEFAULT_MINING_CYCLE_HOURS"))


@bp.route("/sessions", methods=["GET"])
@login_required
def list_sessions():
    return state_response(apply_query(_controller(), ("status", "userId")).load())


@bp.route("/sessions/<session_id>/cancel", methods=["PUT"])
@login_required
def cancel_session(session_id):
    reason = json_body().get("reason")
    if reason is not None and not isinstance(reason, str):
        return invalid_response("Cancellation reason must be text")
    controller = _controller()
    return load_then(controller, lambda: controller.cancel(session_id, reason))


@bp.route("/settings", methods=["PUT"])
@login_required
def update_settings():
    controller = _controller()
    return action_response(controller, controller.update_settings(json_body()))
