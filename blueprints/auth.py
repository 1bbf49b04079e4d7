#===========================================================================
#      CONSOLE LOGIN / LOGOUT
#===========================================================================
import logging

from flask import Blueprint, jsonify, session
from flask_login import login_required, login_user

from admin_api.errors import ApiError
from blueprints.helpers import get_admin_session, get_client, json_body, sign_out, unauthorized_response
from models import AdminUser
from utils import is_blank, validate_email

logger = logging.getLogger(__name__)

bp = Blueprint("auth", __name__, url_prefix="/admin/auth")


@bp.route("/login", methods=["POST"])
def login():
    data = json_body()
    email = (data.get("email") or "").strip().lower()
    password = data.get("password") or ""

    if not email or not password:
        return jsonify({"success": False, "message": "Email and password are required"}), 400
    if not validate_email(email):
        return jsonify({"success": False, "message": "Please enter a valid email address"}), 400

    admin_session = get_admin_session()
    client = get_client(admin_session)
    try:
        client.login(email, password)
    except ApiError as e:
        logger.warning(f"Console login failed for {email}: {e}")
        return jsonify({"success": False, "message": str(e)}), e.status_code or 502

    if not admin_session.is_authenticated:
        return jsonify({"success": False, "message": "Login failed: no token returned"}), 502

    admin = AdminUser.from_payload(admin_session.admin or {"email": email, "id": email})
    admin_session.admin = admin.to_dict()
    admin_session.save_to(session)
    login_user(admin)
    logger.info(f"Admin {admin.email} logged in")
    return jsonify({"success": True, "message": "Login successful", "admin": admin.to_dict()}), 200


@bp.route("/logout", methods=["POST"])
@login_required
def logout():
    client = get_client()
    try:
        client.logout()
    except ApiError as e:
        # the console session ends either way
        logger.warning(f"Remote logout failed: {e}")
    sign_out()
    return jsonify({"success": True, "message": "Logged out"}), 200


@bp.route("/me", methods=["GET"])
@login_required
def me():
    try:
        body = get_client().get_me()
    except ApiError as e:
        if e.is_unauthorized:
            return unauthorized_response()
        return jsonify({"success": False, "message": str(e)}), 502
    admin = body.get("admin") or (body.get("data") or {}).get("admin") or body.get("data") or {}
    return jsonify({"success": True, "admin": admin}), 200


@bp.route("/change-password", methods=["PUT"])
@login_required
def change_password():
    data = json_body()
    current_password = data.get("currentPassword")
    new_password = data.get("newPassword")

    if is_blank(current_password) or is_blank(new_password):
        return jsonify({"success": False, "message": "Current and new password are required"}), 400
    if len(new_password) < 6:
        return jsonify({"success": False, "message": "Password must be at least 6 characters"}), 400

    try:
        get_client().change_password(current_password, new_password)
    except ApiError as e:
        if e.is_unauthorized:
            return unauthorized_response()
        return jsonify({"success": False, "message": str(e)}), 502
    return jsonify({"success": True, "message": "Password changed successfully"}), 200
