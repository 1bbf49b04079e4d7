# blueprints/helpers.py
"""Glue between Flask requests and the view controllers."""
import logging

from flask import current_app, jsonify, request, session
from flask_login import logout_user

from admin_api.client import AdminApiClient
from admin_api.session import AdminSession
from controllers.base import ListController

logger = logging.getLogger(__name__)

RESERVED_ARGS = ("page", "limit", "search")


def get_admin_session():
    return AdminSession.from_mapping(session)


def get_client(admin_session=None):
    """
    One client per request, carrying the operator's token from the Flask session.
    Tests swap the transport in through ``ADMIN_API_CLIENT_FACTORY``.
    """
    admin_session = admin_session or get_admin_session()
    factory = current_app.config.get("ADMIN_API_CLIENT_FACTORY")
    if factory is not None:
        return factory(admin_session)
    return AdminApiClient.from_config(current_app.config, admin_session)


def page_size():
    return int(current_app.config.get("ADMIN_PAGE_SIZE", 10))


def json_body():
    return request.get_json(silent=True) or {}


def sign_out():
    logout_user()
    AdminSession().save_to(session)


def invalid_response(message):
    """A client-side check failed; nothing was sent to the API."""
    return jsonify({"success": False, "message": message}), 400


def unauthorized_response(message="Your session has expired, please log in again"):
    sign_out()
    return jsonify({"success": False, "message": message}), 401


def apply_query(controller, filter_keys=()):
    """Copy ?page=&search= and the allowed filters onto the controller without loading."""
    try:
        controller.page = max(int(request.args.get("page", 1)), 1)
    except ValueError:
        controller.page = 1
    controller.search = request.args.get("search", "")
    for key in filter_keys:
        if key in request.args:
            controller.filters[key] = request.args[key]
    return controller


def state_response(controller):
    """Render a loaded controller; a failed load is a 502 that still carries whatever state exists."""
    if controller.unauthorized:
        return unauthorized_response()
    body = {"success": controller.error is None, "message": controller.error, "data": controller.to_dict()}
    return jsonify(body), 200 if controller.error is None else 502


def action_response(controller, result):
    ok, message = result
    if controller.unauthorized:
        return unauthorized_response()
    if not ok:
        # a client-side check fails before any request is made
        status = 502 if controller.last_exception is not None else 400
        return jsonify({"success": False, "message": message}), status

    if isinstance(controller, ListController):
        controller.settle(timeout=current_app.config.get("REQUEST_TIMEOUT_SECONDS", 30))
    return jsonify({"success": True, "message": message, "data": controller.to_dict()}), 200


def load_then(controller, action):
    """Load the current page so local checks can see the record, then run ``action``."""
    controller.load()
    if controller.unauthorized:
        return unauthorized_response()
    return action_response(controller, action())
